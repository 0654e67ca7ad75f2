from __future__ import annotations

import math
from typing import Iterable

from facturier.models import LineItem, Totals


def round_cents(value: float) -> float:
    """
    Half-up rounding to cents on the float value itself (1.005 -> 1.0, 2.675 -> 2.68
    depending on its binary representation). Negative halves round towards +inf.
    Values too large to scale are returned unchanged, see amount_in_range.
    """
    scaled = float(value) * 100
    if not math.isfinite(scaled):
        return float(value)
    return math.floor(scaled + 0.5) / 100


def amount_in_range(value: float) -> bool:
    """True when the amount is finite and can be expressed in cents without overflow."""
    return math.isfinite(float(value) * 100)


def calculate_line_total(quantity: float, unit_price: float) -> float:
    return float(quantity) * float(unit_price)


def calculate_totals(items: Iterable[LineItem], discount: float = 0.0) -> Totals:
    subtotal = 0.0
    tax = 0.0

    for item in items:
        subtotal += item.total_price
        tax += item.total_price * item.tva_rate / 100

    subtotal_r = round_cents(subtotal)
    tax_r = round_cents(tax)
    discount_r = round_cents(discount or 0.0)

    return Totals(
        subtotal=subtotal_r,
        total_tva=tax_r,
        discount=discount_r,
        total=round_cents(subtotal_r + tax_r - discount_r),
    )


def vat_breakdown(items: Iterable[LineItem]) -> list[tuple[float, float, float]]:
    """(rate, taxable base, tax amount) per distinct rate, ascending by rate."""
    bases: dict[float, float] = {}
    for item in items:
        bases[item.tva_rate] = bases.get(item.tva_rate, 0.0) + item.total_price

    rows: list[tuple[float, float, float]] = []
    for rate in sorted(bases):
        base = bases[rate]
        rows.append((rate, round_cents(base), round_cents(base * rate / 100)))
    return rows


def format_amount(value: float) -> str:
    return f"{round_cents(value):.2f}"


def format_rate(rate: float) -> str:
    return f"{rate:g}"
