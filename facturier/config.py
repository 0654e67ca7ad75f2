from __future__ import annotations

import os
from dataclasses import dataclass

from facturier.env import load_env


_DEFAULT_FALLBACK_FORMATS = ("email",)


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name} value: {raw}") from exc


def _bool_env(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    pdf_max_concurrency: int = 4
    pdf_headless: bool = True
    pdf_margin_mm: int = 20
    fallback_formats: tuple[str, ...] = _DEFAULT_FALLBACK_FORMATS
    default_currency: str = "EUR"


def load_settings() -> Settings:
    """
    Reads FACTURIER_* variables (after loading .env files).
    FACTURIER_FALLBACK_FORMATS is a comma separated list, empty disables the
    permissive standardizer everywhere.
    """
    load_env()

    max_concurrency = _int_env("FACTURIER_PDF_MAX_CONCURRENCY", 4)
    if max_concurrency < 1:
        raise ValueError(f"Invalid FACTURIER_PDF_MAX_CONCURRENCY value: {max_concurrency}")

    currency = (os.getenv("FACTURIER_DEFAULT_CURRENCY") or "EUR").strip().upper() or "EUR"

    return Settings(
        pdf_max_concurrency=max_concurrency,
        pdf_headless=_bool_env("FACTURIER_PDF_HEADLESS", True),
        pdf_margin_mm=_int_env("FACTURIER_PDF_MARGIN_MM", 20),
        fallback_formats=_list_env("FACTURIER_FALLBACK_FORMATS", _DEFAULT_FALLBACK_FORMATS),
        default_currency=currency,
    )
