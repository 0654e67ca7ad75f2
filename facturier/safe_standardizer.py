from __future__ import annotations

import logging
from datetime import date
from typing import Any

from facturier.errors import StandardizationError
from facturier.models import CanonicalInvoice, Client, Company, InvoiceMeta, LineItem
from facturier.standardizer import (
    _assemble,
    _country_code,
    _get,
    _is_missing,
    _to_date,
    _to_number,
    determine_client_type,
    standardize_invoice_data,
)


logger = logging.getLogger(__name__)


def _text(raw: Any, default: str, *names: str) -> str:
    value = _get(raw, *names)
    return default if _is_missing(value) else str(value).strip()


def _number(raw: Any, default: float, *names: str) -> float:
    value = _get(raw, *names)
    if _is_missing(value):
        return default
    try:
        return _to_number(value, names[0])
    except StandardizationError:
        return default


def _date(raw: Any, *names: str) -> str:
    value = _get(raw, *names)
    if not _is_missing(value):
        try:
            return _to_date(value, names[0])
        except StandardizationError:
            pass
    return date.today().isoformat()


def _optional(raw: Any, *names: str) -> str | None:
    value = _get(raw, *names)
    return None if _is_missing(value) else str(value).strip()


def _permissive_items(raw_items: Any) -> list[LineItem]:
    items: list[LineItem] = []
    for index, raw in enumerate(raw_items if isinstance(raw_items, (list, tuple)) else []):
        quantity = _number(raw, 1.0, "quantity")
        if quantity <= 0:
            quantity = 1.0
        unit_price = max(_number(raw, 0.0, "unitPrice", "unit_price", "price"), 0.0)
        tva_rate = max(_number(raw, 20.0, "tvaRate", "tva_rate", "taxRate"), 0.0)
        items.append(
            LineItem(
                description=_text(raw, f"Item {index + 1}", "description"),
                quantity=quantity,
                unit_price=unit_price,
                tva_rate=tva_rate,
                total_price=quantity * unit_price,
            )
        )
    if not items:
        items.append(LineItem(description="Item 1", quantity=1.0, unit_price=0.0, tva_rate=20.0, total_price=0.0))
    return items


def safe_standardize(
    invoice_data: Any,
    user_data: Any,
    client_data: Any,
    *,
    default_currency: str = "EUR",
) -> CanonicalInvoice:
    """
    Strict standardization first. On failure every missing value is replaced by a
    placeholder ("Demo Company", today's date, ...) and metadata["fallback"] is set,
    so the rendered document may carry invented data.
    """
    try:
        return standardize_invoice_data(invoice_data, user_data, client_data, default_currency=default_currency)
    except StandardizationError as exc:
        logger.warning("standardize.fallback field=%s reason=%s", exc.field, exc)

    company = Company(
        name=_text(user_data, "Demo Company", "name", "companyName", "company_name"),
        address=_text(user_data, "N/A", "address", "street"),
        postal_code=_text(user_data, "00000", "postalCode", "postal_code", "zip"),
        city=_text(user_data, "N/A", "city"),
        country=_country_code(_text(user_data, "FR", "country")),
        legal_form=_text(user_data, "SAS", "legalForm", "legal_form"),
        siret=_optional(user_data, "siret"),
        vat_number=_optional(user_data, "vatNumber", "tvaNumber", "vat_number"),
    )

    client_country = _country_code(_text(client_data, "FR", "country"))
    client_vat = _optional(client_data, "vatNumber", "tvaNumber", "vat_number")
    client = Client(
        name=_text(client_data, "Client Demo", "name", "companyName", "company_name"),
        address=_text(client_data, "N/A", "address", "street"),
        postal_code=_text(client_data, "00000", "postalCode", "postal_code", "zip"),
        city=_text(client_data, "N/A", "city"),
        country=client_country,
        type=determine_client_type({"vatNumber": client_vat, "country": client_country}),
        vat_number=client_vat,
    )

    meta = InvoiceMeta(
        id=_text(invoice_data, "INV-DEMO", "id", "number", "invoiceNumber"),
        date=_date(invoice_data, "date", "invoiceDate"),
        due_date=_date(invoice_data, "dueDate", "due_date"),
        currency=_text(invoice_data, default_currency, "currency").upper(),
        notes=_optional(invoice_data, "notes"),
    )

    items = _permissive_items(_get(invoice_data, "items", default=[]))
    discount = max(_number(invoice_data, 0.0, "discount"), 0.0)
    return _assemble(company, client, meta, items, discount, fallback=True)
