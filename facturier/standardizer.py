from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from facturier.errors import StandardizationError
from facturier.invoice_calculations import amount_in_range, calculate_line_total, calculate_totals, round_cents
from facturier.legal_notes import generate_legal_notes
from facturier.models import (
    CanonicalInvoice,
    Client,
    ClientType,
    Company,
    InvoiceMeta,
    LineItem,
)


logger = logging.getLogger(__name__)

_FALSE_STRINGS = {"", "0", "false", "no", "non", "off"}

_COUNTRY_NAMES = {
    "france": "FR",
    "allemagne": "DE",
    "germany": "DE",
    "deutschland": "DE",
    "belgique": "BE",
    "belgium": "BE",
    "espagne": "ES",
    "spain": "ES",
    "italie": "IT",
    "italy": "IT",
    "suisse": "CH",
    "switzerland": "CH",
    "royaume-uni": "GB",
    "united kingdom": "GB",
}


@dataclass
class StandardizationResult:
    ok: bool
    data: Optional[CanonicalInvoice] = None
    errors: list[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    is_valid: bool
    errors: list[str]
    timestamp: str


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get(obj: Any, *names: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, dict):
        for n in names:
            if n in obj and obj[n] is not None and obj[n] != "":
                return obj[n]
        return default
    for n in names:
        if hasattr(obj, n):
            v = getattr(obj, n)
            if v is not None and v != "":
                return v
    return default


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_str(value: Any) -> str:
    return str(value).strip()


def _display(value: Any) -> str:
    # str() of a huge int is capped by the interpreter
    if isinstance(value, int) and value.bit_length() > 64:
        return "nombre trop grand"
    text = str(value)
    return text if len(text) <= 40 else text[:37] + "..."


def _to_number(value: Any, path: str) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip().replace(",", "."))
    except (ValueError, OverflowError) as exc:
        raise StandardizationError(
            f"{path}: la valeur « {_display(value)} » n'est pas un nombre valide", field=path
        ) from exc
    if math.isnan(number) or math.isinf(number):
        raise StandardizationError(f"{path}: la valeur « {_display(value)} » n'est pas un nombre valide", field=path)
    return number


def _to_date(value: Any, path: str) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    raw = str(value).strip()
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    for fmt in ("%d/%m/%Y", "%d.%m.%Y"):
        try:
            return datetime.strptime(raw, fmt).date().isoformat()
        except ValueError:
            continue
    raise StandardizationError(f"{path}: la valeur « {_display(value)} » n'est pas une date valide", field=path)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _country_code(value: str) -> str:
    code = value.strip()
    if len(code) == 2:
        return code.upper()
    return _COUNTRY_NAMES.get(code.lower(), code)


def _required(raw: Any, entity: str, label: str, *names: str) -> Any:
    value = _get(raw, label, *names)
    if _is_missing(value):
        path = f"{entity}.{label}"
        entity_label = _ENTITY_LABELS.get(entity, entity)
        raise StandardizationError(f"{entity_label}: champ obligatoire manquant: {label}", field=path)
    return value


def _optional_str(raw: Any, *names: str) -> Optional[str]:
    value = _get(raw, *names)
    if _is_missing(value):
        return None
    return _to_str(value)


_ENTITY_LABELS = {
    "company": "Données de l'entreprise",
    "client": "Données du client",
    "invoice": "Données de la facture",
}


def standardize_company(raw: Any) -> Company:
    return Company(
        name=_to_str(_required(raw, "company", "name", "companyName", "company_name")),
        address=_to_str(_required(raw, "company", "address", "street", "companyAddress")),
        postal_code=_to_str(_required(raw, "company", "postalCode", "postal_code", "zip")),
        city=_to_str(_required(raw, "company", "city")),
        country=_country_code(_to_str(_required(raw, "company", "country"))),
        legal_form=_optional_str(raw, "legalForm", "legal_form"),
        vat_number=_optional_str(raw, "vatNumber", "tvaNumber", "vat_number"),
        siret=_optional_str(raw, "siret"),
        siren=_optional_str(raw, "siren"),
        ape_code=_optional_str(raw, "apeCode", "ape_code", "nafCode"),
        rcs=_optional_str(raw, "rcs", "rcsNumber"),
        email=_optional_str(raw, "email"),
        phone=_optional_str(raw, "phone"),
        website=_optional_str(raw, "website"),
        iban=_optional_str(raw, "iban"),
        bic=_optional_str(raw, "bic"),
        bank_name=_optional_str(raw, "bankName", "bank_name"),
        account_holder=_optional_str(raw, "accountHolder", "account_holder"),
        professional_insurance=_to_bool(
            _get(raw, "professionalInsurance", "professional_insurance", default=False)
        ),
        insurance_company=_optional_str(raw, "insuranceCompany", "insurance_company"),
        insurance_policy=_optional_str(raw, "insurancePolicy", "insurance_policy"),
        insurance_coverage=_optional_str(raw, "insuranceCoverage", "insurance_coverage"),
    )


def determine_client_type(client: Any) -> ClientType:
    if _optional_str(client, "vatNumber", "tvaNumber", "vat_number"):
        return ClientType.COMPANY
    country = _optional_str(client, "country")
    if country and _country_code(country) != "FR":
        return ClientType.FOREIGN
    return ClientType.INDIVIDUAL


def standardize_client(raw: Any) -> Client:
    name = _to_str(_required(raw, "client", "name", "companyName", "company_name"))
    address = _to_str(_required(raw, "client", "address", "street"))
    postal_code = _to_str(_required(raw, "client", "postalCode", "postal_code", "zip"))
    city = _to_str(_required(raw, "client", "city"))
    country = _country_code(_to_str(_required(raw, "client", "country")))

    raw_type = _optional_str(raw, "type", "clientType")
    try:
        client_type = ClientType(raw_type.lower()) if raw_type else None
    except ValueError:
        logger.debug("standardize.client unknown type=%s, deriving it", raw_type)
        client_type = None
    if client_type is None:
        client_type = determine_client_type(
            {"vatNumber": _optional_str(raw, "vatNumber", "tvaNumber", "vat_number"), "country": country}
        )

    has_tva = _get(raw, "hasTVA", "has_tva")

    return Client(
        name=name,
        address=address,
        postal_code=postal_code,
        city=city,
        country=country,
        type=client_type,
        has_tva=None if has_tva is None else _to_bool(has_tva),
        vat_number=_optional_str(raw, "vatNumber", "tvaNumber", "vat_number"),
        siret=_optional_str(raw, "siret"),
        contact_person=_optional_str(raw, "contactPerson", "contact_person"),
        email=_optional_str(raw, "email"),
        phone=_optional_str(raw, "phone"),
        delivery_name=_optional_str(raw, "deliveryName", "delivery_name"),
        delivery_address=_optional_str(raw, "deliveryAddress", "delivery_address"),
        delivery_postal_code=_optional_str(raw, "deliveryPostalCode", "delivery_postal_code"),
        delivery_city=_optional_str(raw, "deliveryCity", "delivery_city"),
        delivery_country=_optional_str(raw, "deliveryCountry", "delivery_country"),
    )


def standardize_invoice_meta(raw: Any, *, default_currency: str = "EUR") -> InvoiceMeta:
    invoice_id = _to_str(_required(raw, "invoice", "id", "number", "invoiceNumber"))
    issued = _to_date(_required(raw, "invoice", "date", "invoiceDate"), "invoice.date")
    due = _to_date(_required(raw, "invoice", "dueDate", "due_date"), "invoice.dueDate")
    service_date = _get(raw, "serviceDate", "service_date")

    return InvoiceMeta(
        id=invoice_id,
        date=issued,
        due_date=due,
        currency=(_optional_str(raw, "currency") or default_currency).upper(),
        status=_optional_str(raw, "status") or "pending",
        notes=_optional_str(raw, "notes"),
        service_date=None if _is_missing(service_date) else _to_date(service_date, "invoice.serviceDate"),
    )


def standardize_item(raw: Any, index: int) -> LineItem:
    path = f"items[{index}]"

    def required(name: str, *aliases: str) -> Any:
        value = _get(raw, name, *aliases)
        if _is_missing(value):
            raise StandardizationError(
                f"Ligne {index + 1} ({path}): champ obligatoire manquant: {name}", field=f"{path}.{name}"
            )
        return value

    description = _to_str(required("description"))
    quantity = _to_number(required("quantity"), f"{path}.quantity")
    unit_price = _to_number(required("unitPrice", "unit_price"), f"{path}.unitPrice")
    tva_rate = _to_number(required("tvaRate", "tva_rate", "taxRate"), f"{path}.tvaRate")

    if quantity <= 0:
        raise StandardizationError(
            f"Ligne {index + 1} ({path}): la quantité doit être supérieure à 0", field=f"{path}.quantity"
        )
    if unit_price < 0:
        raise StandardizationError(
            f"Ligne {index + 1} ({path}): le prix unitaire ne peut pas être négatif", field=f"{path}.unitPrice"
        )
    if tva_rate < 0:
        raise StandardizationError(
            f"Ligne {index + 1} ({path}): le taux de TVA ne peut pas être négatif", field=f"{path}.tvaRate"
        )

    total_price = calculate_line_total(quantity, unit_price)
    if not amount_in_range(total_price * (1 + tva_rate / 100)):
        raise StandardizationError(
            f"Ligne {index + 1} ({path}): montant hors limites", field=f"{path}.totalPrice"
        )

    return LineItem(
        description=description,
        quantity=quantity,
        unit_price=unit_price,
        tva_rate=tva_rate,
        total_price=total_price,
    )


def standardize_items(raw_items: Any) -> list[LineItem]:
    if not isinstance(raw_items, (list, tuple)):
        raise StandardizationError("Les lignes de facture doivent être une liste", field="items")
    if not raw_items:
        raise StandardizationError("La facture doit contenir au moins une ligne", field="items")
    return [standardize_item(item, index) for index, item in enumerate(raw_items)]


def _discount(invoice_data: Any) -> float:
    raw = _get(invoice_data, "discount")
    if _is_missing(raw):
        return 0.0
    discount = _to_number(raw, "invoice.discount")
    if discount < 0:
        raise StandardizationError(
            "Données de la facture: la remise ne peut pas être négative", field="invoice.discount"
        )
    return discount


def _assemble(
    company: Company,
    client: Client,
    meta: InvoiceMeta,
    items: list[LineItem],
    discount: float,
    *,
    fallback: bool = False,
) -> CanonicalInvoice:
    totals = calculate_totals(items, discount)
    if not all(amount_in_range(v) for v in (totals.subtotal, totals.total_tva, totals.total)):
        raise StandardizationError("Totaux de facture hors limites", field="totals")
    return CanonicalInvoice(
        company=company,
        client=client,
        invoice=meta,
        items=items,
        totals=totals,
        legal_notes=generate_legal_notes(client.country, totals),
        metadata={
            "standardized": True,
            "timestamp": _now_iso(),
            "country": client.country,
            "fallback": fallback,
        },
    )


def standardize_invoice_data(
    invoice_data: Any,
    user_data: Any,
    client_data: Any,
    *,
    default_currency: str = "EUR",
) -> CanonicalInvoice:
    """
    Builds the canonical invoice record from raw caller input.

    Raises StandardizationError on the first missing or malformed field. Totals,
    line totals and legal notes are always recomputed from the validated items.
    """
    company = standardize_company(user_data)
    client = standardize_client(client_data)
    meta = standardize_invoice_meta(invoice_data, default_currency=default_currency)
    items = standardize_items(_get(invoice_data, "items", default=[]))
    return _assemble(company, client, meta, items, _discount(invoice_data))


def try_standardize(
    invoice_data: Any,
    user_data: Any,
    client_data: Any,
    *,
    default_currency: str = "EUR",
) -> StandardizationResult:
    """Same as standardize_invoice_data but collects one error per entity instead of raising."""
    errors: list[str] = []

    def attempt(fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except StandardizationError as exc:
            errors.append(str(exc))
            return None

    company = attempt(lambda: standardize_company(user_data))
    client = attempt(lambda: standardize_client(client_data))
    meta = attempt(lambda: standardize_invoice_meta(invoice_data, default_currency=default_currency))
    items = attempt(lambda: standardize_items(_get(invoice_data, "items", default=[])))
    discount = attempt(lambda: _discount(invoice_data))

    if errors:
        return StandardizationResult(ok=False, errors=errors)
    return StandardizationResult(ok=True, data=_assemble(company, client, meta, items, discount))


def validate_standardized_data(data: CanonicalInvoice) -> ValidationReport:
    errors: list[str] = []

    for entity, record in (("company", data.company), ("client", data.client)):
        for name in ("name", "address", "postal_code", "city", "country"):
            if _is_missing(getattr(record, name, None)):
                errors.append(f"{_ENTITY_LABELS[entity]}: champ obligatoire manquant: {name}")

    for name in ("id", "date", "due_date"):
        if _is_missing(getattr(data.invoice, name, None)):
            errors.append(f"{_ENTITY_LABELS['invoice']}: champ obligatoire manquant: {name}")

    if not data.items:
        errors.append("La facture doit contenir au moins une ligne")
    for index, item in enumerate(data.items):
        if _is_missing(item.description):
            errors.append(f"Ligne {index + 1} (items[{index}]): champ obligatoire manquant: description")
        if item.quantity <= 0:
            errors.append(f"Ligne {index + 1} (items[{index}]): la quantité doit être supérieure à 0")

    totals = data.totals
    expected = round_cents(totals.subtotal + totals.total_tva - totals.discount)
    if abs(totals.total - expected) > 1e-9:
        errors.append(f"Total incohérent: {totals.total} au lieu de {expected}")

    if not isinstance(data.legal_notes, list):
        errors.append("Les mentions légales doivent être une liste")

    return ValidationReport(is_valid=not errors, errors=errors, timestamp=_now_iso())


def get_sample_data() -> dict[str, Any]:
    return {
        "company": {
            "name": "Exemple Conseil SAS",
            "address": "123 Rue de la Paix",
            "postalCode": "75001",
            "city": "Paris",
            "country": "FR",
            "legalForm": "SAS",
            "vatNumber": "FR12345678901",
            "siret": "12345678901234",
            "email": "contact@example.com",
            "phone": "+33 1 23 45 67 89",
            "iban": "FR76 3000 6000 0112 3456 7890 189",
            "bic": "AGRIFRPP",
        },
        "client": {
            "name": "Client Démo SARL",
            "address": "456 Avenue des Champs-Élysées",
            "postalCode": "75008",
            "city": "Paris",
            "country": "FR",
            "vatNumber": "FR98765432109",
            "type": "company",
        },
        "invoice": {
            "id": "FAC-2024-001",
            "date": "2024-01-15",
            "dueDate": "2024-02-15",
            "currency": "EUR",
            "status": "pending",
            "notes": "Facture d'exemple",
            "items": [
                {"description": "Prestation de conseil", "quantity": 10, "unitPrice": 150.00, "tvaRate": 20},
                {"description": "Support technique", "quantity": 5, "unitPrice": 100.00, "tvaRate": 20},
            ],
        },
    }
