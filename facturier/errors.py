from __future__ import annotations


class FacturierError(Exception):
    """Base class for errors raised inside the rendering pipeline."""


class StandardizationError(FacturierError, ValueError):
    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UnsupportedFormatError(FacturierError, ValueError):
    def __init__(self, fmt: object, supported: list[str]) -> None:
        super().__init__(
            f"Format de sortie non pris en charge: {fmt}. Formats disponibles: {', '.join(supported)}"
        )
        self.format = fmt


class RenderError(FacturierError, RuntimeError):
    pass
