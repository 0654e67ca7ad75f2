from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from facturier.errors import StandardizationError  # noqa: E402
from facturier.labels import get_label  # noqa: E402
from facturier.models import ClientType  # noqa: E402
from facturier.safe_standardizer import safe_standardize  # noqa: E402
from facturier.standardizer import (  # noqa: E402
    determine_client_type,
    get_sample_data,
    standardize_invoice_data,
    try_standardize,
    validate_standardized_data,
)


def _consulting() -> tuple[dict, dict, dict]:
    sample = get_sample_data()
    invoice = sample["invoice"]
    invoice["items"] = [{"description": "Consulting", "quantity": 10, "unitPrice": 150, "tvaRate": 20}]
    return invoice, sample["company"], sample["client"]


def test_consulting_invoice_totals() -> None:
    data = standardize_invoice_data(*_consulting())
    assert data.totals.subtotal == 1500.00
    assert data.totals.total_tva == 300.00
    assert data.totals.total == 1800.00
    assert data.items[0].total_price == 1500.0
    assert data.metadata["standardized"] is True
    assert data.metadata["fallback"] is False


def test_canonical_dict_uses_camel_case_keys() -> None:
    payload = standardize_invoice_data(*_consulting()).to_dict()
    assert payload["totals"]["totalTVA"] == 300.0
    assert payload["company"]["postalCode"] == "75001"
    assert payload["invoice"]["dueDate"] == "2024-02-15"
    assert payload["items"][0]["unitPrice"] == 150.0
    assert payload["legalNotes"]


@pytest.mark.parametrize("field", ["description", "quantity", "unitPrice", "tvaRate"])
def test_missing_item_field_names_index_and_field(field: str) -> None:
    sample = get_sample_data()
    invoice, company, client = sample["invoice"], sample["company"], sample["client"]
    del invoice["items"][1][field]

    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)

    assert exc_info.value.field == f"items[1].{field}"
    assert "items[1]" in str(exc_info.value)
    assert field in str(exc_info.value)


def test_empty_items_are_rejected() -> None:
    invoice, company, client = _consulting()
    invoice["items"] = []
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "items"


def test_non_numeric_quantity_is_rejected() -> None:
    invoice, company, client = _consulting()
    invoice["items"][0]["quantity"] = "beaucoup"
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "items[0].quantity"


def test_missing_company_field_is_rejected() -> None:
    invoice, company, client = _consulting()
    company.pop("city")
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "company.city"


def test_aliases_and_french_number_format() -> None:
    invoice, company, client = _consulting()
    invoice["items"] = [{"description": "Audit", "quantity": "2", "unit_price": "99,50", "taxRate": "5,5"}]
    invoice["date"] = "15/01/2024"
    invoice["dueDate"] = "2024-02-15T00:00:00Z"
    company["companyName"] = company.pop("name")
    client["country"] = "Belgique"

    data = standardize_invoice_data(invoice, company, client)
    assert data.items[0].unit_price == 99.5
    assert data.items[0].tva_rate == 5.5
    assert data.invoice.date == "2024-01-15"
    assert data.invoice.due_date == "2024-02-15"
    assert data.company.name == "Exemple Conseil SAS"
    assert data.client.country == "BE"


def test_currency_defaults_when_absent() -> None:
    invoice, company, client = _consulting()
    invoice.pop("currency")
    data = standardize_invoice_data(invoice, company, client, default_currency="chf")
    assert data.invoice.currency == "CHF"


def test_determine_client_type() -> None:
    assert determine_client_type({"vatNumber": "DE123456789", "country": "DE"}) is ClientType.COMPANY
    assert determine_client_type({"country": "BE"}) is ClientType.FOREIGN
    assert determine_client_type({"country": "France"}) is ClientType.INDIVIDUAL
    assert determine_client_type({}) is ClientType.INDIVIDUAL


def test_try_standardize_collects_errors_per_entity() -> None:
    invoice, company, client = _consulting()
    company.pop("name")
    client.pop("address")
    invoice["items"] = []

    result = try_standardize(invoice, company, client)
    assert result.ok is False
    assert result.data is None
    assert len(result.errors) == 3


def test_try_standardize_ok() -> None:
    result = try_standardize(*_consulting())
    assert result.ok is True
    assert result.errors == []
    assert result.data.totals.total == 1800.0


def test_validate_standardized_data_on_sample() -> None:
    sample = get_sample_data()
    data = standardize_invoice_data(sample["invoice"], sample["company"], sample["client"])
    report = validate_standardized_data(data)
    assert report.is_valid
    assert report.errors == []
    assert report.timestamp


def test_validate_standardized_data_flags_inconsistent_total() -> None:
    data = standardize_invoice_data(*_consulting())
    broken = data.model_copy(update={"totals": data.totals.model_copy(update={"total": 1.0})})
    report = validate_standardized_data(broken)
    assert not report.is_valid
    assert any("Total" in err for err in report.errors)


def test_safe_standardize_substitutes_placeholders() -> None:
    invoice, _, _ = _consulting()
    data = safe_standardize(invoice, {}, {"name": "ACME"})
    assert data.company.name == "Demo Company"
    assert data.company.postal_code == "00000"
    assert data.client.name == "ACME"
    assert data.metadata["fallback"] is True
    assert data.totals.total == 1800.0


def test_safe_standardize_fills_items() -> None:
    data = safe_standardize({"items": [{"quantity": "x"}]}, {}, {})
    assert data.invoice.id == "INV-DEMO"
    assert data.items[0].description == "Item 1"
    assert data.items[0].quantity == 1.0
    assert data.totals.total == 0.0

    empty = safe_standardize({}, {}, {})
    assert len(empty.items) == 1
    assert empty.totals.subtotal == 0.0


def test_safe_standardize_keeps_valid_data() -> None:
    data = safe_standardize(*_consulting())
    assert data.metadata["fallback"] is False
    assert data.company.name == "Exemple Conseil SAS"


def test_labels_fall_back_to_key() -> None:
    assert get_label("total_amount") == "TOTAL TTC"
    assert get_label("vat_self_liquidation") == "TVA (Autoliquidation)"
    assert get_label("no_such_label") == "no_such_label"


def test_integer_too_large_for_float_is_rejected() -> None:
    invoice, company, client = _consulting()
    invoice["items"][0]["quantity"] = 10**400
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "items[0].quantity"
    assert "nombre trop grand" in str(exc_info.value)


def test_overflowing_line_total_is_rejected() -> None:
    invoice, company, client = _consulting()
    invoice["items"] = [{"description": "Huge", "quantity": 1e200, "unitPrice": 1e200, "tvaRate": 20}]
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "items[0].totalPrice"


def test_overflowing_invoice_totals_are_rejected() -> None:
    invoice, company, client = _consulting()
    line = {"description": "Large", "quantity": 1, "unitPrice": 1e306, "tvaRate": 20}
    invoice["items"] = [dict(line), dict(line)]
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "totals"


def test_fallback_with_overflowing_amounts_still_raises_standardization_error() -> None:
    invoice, company, client = _consulting()
    invoice["items"] = [{"description": "Huge", "quantity": 1e200, "unitPrice": 1e200, "tvaRate": 20}]
    with pytest.raises(StandardizationError):
        safe_standardize(invoice, company, client)


def test_negative_discount_is_rejected() -> None:
    invoice, company, client = _consulting()
    invoice["discount"] = -50
    with pytest.raises(StandardizationError) as exc_info:
        standardize_invoice_data(invoice, company, client)
    assert exc_info.value.field == "invoice.discount"


def test_positive_discount_is_kept() -> None:
    invoice, company, client = _consulting()
    invoice["discount"] = "50,00"
    data = standardize_invoice_data(invoice, company, client)
    assert data.totals.discount == 50.0
    assert data.totals.total == 1750.0
