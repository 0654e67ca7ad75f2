from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from facturier.models import TemplateType  # noqa: E402
from facturier.standardizer import get_sample_data, standardize_invoice_data  # noqa: E402
from facturier.templates import render_email, render_invoice_html, vat_line  # noqa: E402


def _invoice(items: list[dict] | None = None, **invoice_overrides):
    sample = get_sample_data()
    if items is not None:
        sample["invoice"]["items"] = items
    sample["invoice"].update(invoice_overrides)
    return standardize_invoice_data(sample["invoice"], sample["company"], sample["client"])


CONSULTING = [{"description": "Consulting", "quantity": 10, "unitPrice": 150, "tvaRate": 20}]


def test_render_is_deterministic() -> None:
    data = _invoice()
    for variant in TemplateType:
        assert render_email(data, variant) == render_email(data, variant)


@pytest.mark.parametrize("unknown", ["french-fancy", "", None, "XML"])
def test_unknown_template_renders_as_standard(unknown) -> None:
    data = _invoice()
    assert render_email(data, unknown) == render_email(data, "french-standard")


def test_template_aliases() -> None:
    data = _invoice(CONSULTING)
    assert render_email(data, "french-auto-liquidation") == render_email(data, TemplateType.SELF_LIQUIDATION)
    assert render_email(data, "vat-exempt") == render_email(data, TemplateType.TVA_EXEMPT)


def test_standard_shows_vat_and_breakdown() -> None:
    html = render_email(_invoice(CONSULTING), "french-standard")
    assert html.startswith("<!DOCTYPE html>")
    assert "Total TVA: 300.00 €" in html
    assert "Détail TVA" in html
    assert "TOTAL TTC: 1800.00 €" in html
    assert "Sous-total HT: 1500.00 €" in html
    assert 'class="variant-notice' not in html


def test_self_liquidation_shows_zero_vat_and_clause() -> None:
    data = _invoice(CONSULTING)
    html = render_email(data, "self-liquidation")
    assert "TVA (Autoliquidation): 0.00 €" in html
    assert "283-2" in html
    assert "Total TVA" not in html
    assert data.totals.total_tva == 300.0


def test_tva_exempt_never_shows_vat_amounts() -> None:
    data = _invoice(CONSULTING)
    html = render_email(data, "tva-exempt")
    assert "TVA: Exonéré" in html
    assert "Total TVA" not in html
    assert "Détail TVA" not in html
    assert "300.00" not in html
    assert "20%" not in html
    assert vat_line(data, TemplateType.TVA_EXEMPT) == "TVA: Exonéré"


def test_variant_notice_precedes_legal_notes() -> None:
    data = _invoice(CONSULTING)
    for variant in (TemplateType.TVA_EXEMPT, TemplateType.SELF_LIQUIDATION):
        html = render_email(data, variant)
        notice = html.index('class="variant-notice')
        legal = html.index('class="legal-notes"')
        footer = html.index('class="footer"')
        assert notice < legal < footer


def test_user_text_is_escaped() -> None:
    data = _invoice(
        [{"description": "<script>alert(1)</script> & co", "quantity": 1, "unitPrice": 10, "tvaRate": 20}],
        notes="Paiement <b>rapide</b>",
    )
    html = render_email(data)
    assert "<script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt; &amp; co" in html
    assert "Paiement &lt;b&gt;rapide&lt;/b&gt;" in html


def test_discount_line_only_when_present() -> None:
    assert "Remise" not in render_email(_invoice(CONSULTING))
    html = render_email(_invoice(CONSULTING, discount=100))
    assert "Remise: -100.00 €" in html
    assert "TOTAL TTC: 1700.00 €" in html


def test_non_euro_currency_uses_code() -> None:
    html = render_email(_invoice(CONSULTING, currency="usd"))
    assert "TOTAL TTC: 1800.00 USD" in html


def test_custom_styles_and_container() -> None:
    html = render_invoice_html(_invoice(), styles=".x { color: red; }", container_class="print-container")
    assert ".x { color: red; }" in html
    assert '<div class="print-container">' in html


def test_no_legal_notes_renders_default_mentions() -> None:
    sample = get_sample_data()
    sample["client"]["country"] = "US"
    sample["client"].pop("vatNumber")
    data = standardize_invoice_data(sample["invoice"], sample["company"], sample["client"])
    assert data.legal_notes == []
    html = render_email(data, "tva-exempt")
    assert "Statut TVA" in html or "TVA non applicable" in html
