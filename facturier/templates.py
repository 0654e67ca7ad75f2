from __future__ import annotations

from html import escape
from typing import Any

from facturier.invoice_calculations import format_amount, format_rate, vat_breakdown
from facturier.labels import get_label
from facturier.models import CanonicalInvoice, TemplateType


EMAIL_STYLES = """
body { font-family: 'Times New Roman', serif; margin: 0; padding: 20px; background-color: #ffffff; color: #000; }
.container { max-width: 800px; margin: 0 auto; background: white; padding: 30px; border: 1px solid #000; }
.header { text-align: center; margin-bottom: 30px; border-bottom: 2px solid #000; padding-bottom: 20px; }
.invoice-title { font-size: 28px; font-weight: bold; text-transform: uppercase; }
.invoice-info { margin: 20px 0; text-align: center; }
.section { margin: 30px 0; }
.section h3 { border-bottom: 1px solid #000; padding-bottom: 8px; font-size: 16px; text-transform: uppercase; }
.company-info, .client-info { display: inline-block; width: 48%; vertical-align: top; }
.company-info { margin-right: 2%; }
.client-info { margin-left: 2%; }
.billing-address, .delivery-address { margin: 15px 0; padding: 10px; border: 1px solid #e0e0e0; }
.contact-info { margin: 10px 0; font-size: 12px; }
.items-table { width: 100%; border-collapse: collapse; margin: 20px 0; border: 1px solid #000; }
.items-table th { background-color: #f0f0f0; border: 1px solid #000; padding: 12px; text-align: left; }
.items-table td { border: 1px solid #000; padding: 12px; text-align: left; }
.items-table .text-right { text-align: right; }
.totals { text-align: right; margin: 20px 0; }
.total-line { margin: 8px 0; font-size: 14px; }
.grand-total { font-weight: bold; font-size: 16px; }
.tva-breakdown { margin: 15px 0; font-size: 12px; }
.payment-info { margin: 20px 0; padding: 15px; background-color: #f0f8ff; border: 1px solid #b0d4f1; }
.notes-section { margin: 20px 0; padding: 15px; background-color: #f8f9fa; border: 1px solid #dee2e6; }
.compliance-section { margin: 20px 0; padding: 15px; background-color: #fff8dc; border: 1px solid #ddd; }
.variant-notice { margin: 15px 0; padding: 15px; border: 1px solid #dee2e6; }
.variant-notice.tva-exempt { background-color: #f8f9fa; border-left: 4px solid #28a745; }
.variant-notice.self-liquidation { background-color: #fff3cd; border-left: 4px solid #856404; }
.legal-notes { font-size: 11px; color: #333; margin-top: 30px; padding: 15px; background-color: #f9f9f9; border: 1px solid #ccc; }
.legal-notes h4 { margin: 0 0 10px 0; font-size: 12px; text-transform: uppercase; }
.footer { text-align: center; margin-top: 30px; padding-top: 20px; border-top: 1px solid #000; color: #666; font-size: 12px; }
""".strip()


def _e(value: Any) -> str:
    return escape("" if value is None else str(value), quote=False)


def _money(value: float, currency: str) -> str:
    symbol = "€" if (currency or "EUR").upper() == "EUR" else currency.upper()
    return f"{format_amount(value)} {symbol}"


def _line(label_key: str, value: Any) -> str:
    return f"<p><strong>{get_label(label_key)}:</strong> {_e(value)}</p>"


def _optional_line(label_key: str, value: Any) -> str:
    return _line(label_key, value) if value else ""


def _header(data: CanonicalInvoice) -> str:
    inv = data.invoice
    return (
        '<div class="header">'
        f'<h1 class="invoice-title">{get_label("invoice_title")}</h1>'
        '<div class="invoice-info">'
        f"{_line('invoice_number', inv.id)}"
        f"{_line('date', inv.date)}"
        f"{_line('due_date', inv.due_date)}"
        f"{_optional_line('service_date', inv.service_date)}"
        "</div>"
        "</div>"
    )


def _seller(data: CanonicalInvoice) -> str:
    c = data.company
    insurance = ""
    if c.professional_insurance:
        insurance = (
            '<div class="contact-info">'
            f"<p><strong>{get_label('professional_insurance')}</strong></p>"
            f"<p>{get_label('insurance_company')}: {_e(c.insurance_company or get_label('not_specified'))}</p>"
            f"<p>{get_label('insurance_policy')}: {_e(c.insurance_policy or get_label('not_specified'))}</p>"
            f"<p>{get_label('insurance_coverage')}: {_e(c.insurance_coverage or 'France et UE')}</p>"
            "</div>"
        )
    return (
        '<div class="company-info">'
        f"<h3>{get_label('seller')}</h3>"
        f"<p><strong>{_e(c.name)}</strong></p>"
        f"{_optional_line('legal_form', c.legal_form)}"
        f"<p>{_e(c.address)}</p>"
        f"<p>{_e(c.postal_code)} {_e(c.city)}</p>"
        f"<p>{_e(c.country)}</p>"
        '<div class="contact-info">'
        f"{_optional_line('company_phone', c.phone)}"
        f"{_optional_line('company_email', c.email)}"
        f"{_optional_line('company_website', c.website)}"
        "</div>"
        f"{_optional_line('vat_number_intra', c.vat_number)}"
        f"{_optional_line('siret', c.siret)}"
        f"{_optional_line('siren', c.siren)}"
        f"{_optional_line('ape_code_full', c.ape_code)}"
        f"{_optional_line('rcs', c.rcs)}"
        f"{insurance}"
        "</div>"
    )


def _buyer(data: CanonicalInvoice) -> str:
    cl = data.client
    attention = f"<p>{get_label('attention_of')}: {_e(cl.contact_person)}</p>" if cl.contact_person else ""

    delivery = ""
    if cl.delivery_address and cl.delivery_address != cl.address:
        delivery = (
            '<div class="delivery-address">'
            f"<h4>{get_label('delivery_address')}</h4>"
            f"<p><strong>{_e(cl.delivery_name or cl.name)}</strong></p>"
            f"<p>{_e(cl.delivery_address)}</p>"
            f"<p>{_e(cl.delivery_postal_code or cl.postal_code)} {_e(cl.delivery_city or cl.city)}</p>"
            f"<p>{_e(cl.delivery_country or cl.country)}</p>"
            "</div>"
        )

    return (
        '<div class="client-info">'
        f"<h3>{get_label('billed_to')}</h3>"
        '<div class="billing-address">'
        f"<h4>{get_label('billing_address')}</h4>"
        f"<p><strong>{_e(cl.name)}</strong></p>"
        f"{attention}"
        f"<p>{_e(cl.address)}</p>"
        f"<p>{_e(cl.postal_code)} {_e(cl.city)}</p>"
        f"<p>{_e(cl.country)}</p>"
        f"{_optional_line('client_phone', cl.phone)}"
        f"{_optional_line('client_email', cl.email)}"
        f"{_optional_line('vat_intra_community_number', cl.vat_number)}"
        "</div>"
        f"{delivery}"
        "</div>"
    )


def _items_table(data: CanonicalInvoice, variant: TemplateType) -> str:
    show_vat = variant is not TemplateType.TVA_EXEMPT
    currency = data.invoice.currency

    head = (
        f"<th>{get_label('description')}</th>"
        f"<th class=\"text-right\">{get_label('quantity')}</th>"
        f"<th class=\"text-right\">{get_label('unit_price')}</th>"
    )
    if show_vat:
        head += f"<th class=\"text-right\">{get_label('vat_rate')}</th>"
    head += f"<th class=\"text-right\">{get_label('line_total_ht')}</th>"
    if show_vat:
        head += f"<th class=\"text-right\">{get_label('line_total_ttc')}</th>"

    rows = ""
    for item in data.items:
        rows += (
            "<tr>"
            f"<td>{_e(item.description)}</td>"
            f"<td class=\"text-right\">{format_rate(item.quantity)}</td>"
            f"<td class=\"text-right\">{_money(item.unit_price, currency)}</td>"
        )
        if show_vat:
            rows += f"<td class=\"text-right\">{format_rate(item.tva_rate)}%</td>"
        rows += f"<td class=\"text-right\">{_money(item.total_price, currency)}</td>"
        if show_vat:
            rows += f"<td class=\"text-right\">{_money(item.total_with_tax, currency)}</td>"
        rows += "</tr>"

    return (
        '<div class="section">'
        f"<h3>{get_label('items_title')}</h3>"
        '<table class="items-table">'
        f"<thead><tr>{head}</tr></thead>"
        f"<tbody>{rows}</tbody>"
        "</table>"
        "</div>"
    )


def vat_line(data: CanonicalInvoice, variant: TemplateType) -> str:
    """The single VAT line of the totals block, as displayed for the variant."""
    if variant is TemplateType.TVA_EXEMPT:
        return f"TVA: {get_label('vat_exempt_value')}"
    if variant is TemplateType.SELF_LIQUIDATION:
        return f"{get_label('vat_self_liquidation')}: {_money(0.0, data.invoice.currency)}"
    return f"{get_label('total_vat')}: {_money(data.totals.total_tva, data.invoice.currency)}"


def _totals(data: CanonicalInvoice, variant: TemplateType) -> str:
    totals = data.totals
    currency = data.invoice.currency

    discount = ""
    if totals.discount:
        discount = f'<p class="total-line">{get_label("discount")}: -{_money(totals.discount, currency)}</p>'

    breakdown = ""
    if variant is TemplateType.FRENCH_STANDARD:
        rows = "".join(
            f"<span>{get_label('vat_rate')} {format_rate(rate)}% ({_money(base, currency)}): "
            f"{_money(amount, currency)}</span><br>"
            for rate, base, amount in vat_breakdown(data.items)
        )
        breakdown = f'<div class="tva-breakdown"><strong>{get_label("vat_breakdown")}:</strong><br>{rows}</div>'

    return (
        '<div class="totals">'
        f'<p class="total-line">{get_label("subtotal")}: {_money(totals.subtotal, currency)}</p>'
        f"{discount}"
        f"{breakdown}"
        f'<p class="total-line vat-line">{vat_line(data, variant)}</p>'
        f'<p class="total-line grand-total">{get_label("total_amount")}: {_money(totals.total, currency)}</p>'
        "</div>"
    )


def _payment(data: CanonicalInvoice) -> str:
    c = data.company
    bank = ""
    if c.iban or c.bic or c.bank_name:
        bank = (
            "<div>"
            f"<h4>{get_label('bank_details')}</h4>"
            f"{_optional_line('account_holder', c.account_holder)}"
            f"{_optional_line('iban', c.iban)}"
            f"{_optional_line('bic', c.bic)}"
            f"{_optional_line('bank_name', c.bank_name)}"
            "</div>"
        )
    return (
        '<div class="payment-info">'
        f"<h4>{get_label('payment_method')}</h4>"
        f"<p><strong>{get_label('payment_terms')}:</strong> {get_label('payment_due')} {_e(data.invoice.due_date)}</p>"
        f"{bank}"
        "</div>"
    )


def _notes(data: CanonicalInvoice) -> str:
    if not data.invoice.notes:
        return ""
    return f'<div class="notes-section"><h4>{get_label("notes")}</h4><p>{_e(data.invoice.notes)}</p></div>'


def _compliance() -> str:
    return (
        '<div class="compliance-section">'
        f"<h4>{get_label('legal_mentions')}</h4>"
        f"<p>{get_label('compliance_statement')}</p>"
        f"<p>{get_label('archiving_statement')}</p>"
        "</div>"
    )


def _tva_exempt_notice() -> str:
    return (
        '<div class="variant-notice tva-exempt">'
        f"<h4>{get_label('vat_exemption')}</h4>"
        f"<p><strong>{get_label('vat_exempt_invoice')}</strong></p>"
        f"<p>{get_label('vat_exemption_applies')}</p>"
        f"<p><strong>{get_label('responsibility')}:</strong> {get_label('provider_certifies')}</p>"
        "</div>"
    )


def _self_liquidation_notice() -> str:
    return (
        '<div class="variant-notice self-liquidation">'
        f"<h4>{get_label('vat_auto_liquidation')}</h4>"
        f"<p><strong>{get_label('vat_charge_to_client')}</strong></p>"
        f"<p>{get_label('intra_community_service')}</p>"
        f"<p><strong>{get_label('client_obligations')}:</strong> {get_label('client_must_declare')}</p>"
        f"<p><strong>{get_label('responsibility')}:</strong> {get_label('french_provider_exempt')}</p>"
        "</div>"
    )


_VARIANT_NOTICES = {
    TemplateType.TVA_EXEMPT: _tva_exempt_notice,
    TemplateType.SELF_LIQUIDATION: _self_liquidation_notice,
}


def _tva_status(data: CanonicalInvoice, variant: TemplateType) -> str:
    if variant is TemplateType.TVA_EXEMPT:
        status = get_label("vat_not_applicable_text")
    elif variant is TemplateType.SELF_LIQUIDATION:
        status = get_label("self_liquidation_text")
    else:
        status = get_label("vat_applicable_article_256")
    vat_number = data.company.vat_number
    return (
        '<div class="tva-status">'
        f"<p><strong>{get_label('vat_status')}:</strong> {status}</p>"
        f"{_optional_line('vat_number_intra', vat_number)}"
        "</div>"
    )


def _legal_notes(data: CanonicalInvoice, variant: TemplateType) -> str:
    if data.legal_notes:
        body = "".join(f"<p>• {_e(note)}</p>" for note in data.legal_notes)
    else:
        c = data.company
        body = (
            f"{_tva_status(data, variant)}"
            f"<p>• {get_label('invoice_compliance')}</p>"
            f"<p>• {get_label('payment_due')}: {_e(data.invoice.due_date)}</p>"
            f"<p>• {get_label('late_payment_penalty')}</p>"
            f"<p>• {get_label('siret')}: {_e(c.siret or get_label('not_provided'))}</p>"
            f"<p>• {get_label('ape_code')}: {_e(c.ape_code or get_label('not_provided'))}</p>"
        )
    return f'<div class="legal-notes"><h4>{get_label("legal_mentions")}</h4>{body}</div>'


def _footer(data: CanonicalInvoice) -> str:
    return (
        '<div class="footer">'
        f"<p><strong>{get_label('payment_terms')}:</strong> {get_label('payment_due')} {_e(data.invoice.due_date)}</p>"
        f"<p><strong>{get_label('late_payment')}:</strong> {get_label('late_payment_interest')}</p>"
        f"<p><strong>{get_label('fixed_penalty')}:</strong> 40 €</p>"
        f"<p>{get_label('thank_you')}</p>"
        "</div>"
    )


def render_invoice_body(data: CanonicalInvoice, template_type: Any) -> str:
    variant = TemplateType.resolve(template_type)
    notice = _VARIANT_NOTICES.get(variant)

    sections = [
        _header(data),
        f'<div class="section">{_seller(data)}{_buyer(data)}</div>',
        _items_table(data, variant),
        _totals(data, variant),
        _payment(data),
        _notes(data),
        _compliance(),
        notice() if notice else "",
        _legal_notes(data, variant),
        _footer(data),
    ]
    return "\n".join(s for s in sections if s)


def render_invoice_html(
    data: CanonicalInvoice,
    template_type: Any = TemplateType.FRENCH_STANDARD,
    *,
    styles: str = EMAIL_STYLES,
    container_class: str = "container",
) -> str:
    """
    Complete HTML document with inline CSS. Unknown template types render as
    french-standard; the output carries no timestamp so equal input gives equal HTML.
    """
    title = f"Facture {_e(data.invoice.id)}"
    return (
        "<!DOCTYPE html>\n"
        '<html lang="fr">\n'
        "<head>\n"
        '<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{title}</title>\n"
        f"<style>\n{styles}\n</style>\n"
        "</head>\n"
        "<body>\n"
        f'<div class="{container_class}">\n'
        f"{render_invoice_body(data, template_type)}\n"
        "</div>\n"
        "</body>\n"
        "</html>\n"
    )


def render_email(data: CanonicalInvoice, template_type: Any = TemplateType.FRENCH_STANDARD) -> str:
    return render_invoice_html(data, template_type)
