# facturier/services/print_template.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from facturier.models import CanonicalInvoice, TemplateType
from facturier.templates import render_invoice_html

logger = logging.getLogger(__name__)


FRENCH_STANDARD_PRINT_STYLES = """
@page { size: A4; margin: 20mm; }
body { font-family: 'Times New Roman', serif; font-size: 12pt; line-height: 1.4; color: #000; background: #fff; margin: 0; padding: 0; }
.print-container { width: 100%; max-width: 210mm; margin: 0 auto; padding: 0; }
.header { text-align: center; margin-bottom: 20pt; border-bottom: 2pt solid #000; padding-bottom: 10pt; }
.invoice-title { font-size: 20pt; font-weight: bold; text-transform: uppercase; }
.section { margin: 15pt 0; page-break-inside: avoid; }
.section h3 { font-size: 12pt; text-transform: uppercase; border-bottom: 1pt solid #000; padding-bottom: 4pt; }
.company-info, .client-info { display: inline-block; width: 48%; vertical-align: top; }
.contact-info { font-size: 10pt; }
.items-table { width: 100%; border-collapse: collapse; margin: 10pt 0; page-break-inside: avoid; }
.items-table th, .items-table td { border: 1pt solid #000; padding: 6pt; text-align: left; }
.items-table th { background-color: #f0f0f0; }
.items-table .text-right { text-align: right; }
.totals { text-align: right; margin: 10pt 0; page-break-inside: avoid; }
.total-line { margin: 4pt 0; }
.grand-total { font-weight: bold; font-size: 14pt; }
.tva-breakdown { font-size: 10pt; }
.payment-info, .notes-section, .compliance-section, .variant-notice { margin: 10pt 0; padding: 8pt; border: 1pt solid #000; page-break-inside: avoid; }
.legal-notes { font-size: 9pt; margin-top: 15pt; padding: 8pt; border: 1pt solid #000; page-break-inside: avoid; }
.footer { text-align: center; font-size: 9pt; margin-top: 15pt; padding-top: 8pt; border-top: 1pt solid #000; }
@media print {
  body { -webkit-print-color-adjust: exact; print-color-adjust: exact; }
  .print-container { box-shadow: none; }
  .no-print { display: none; }
}
""".strip()


PRINT_TEMPLATES: dict[str, dict[str, str]] = {
    TemplateType.FRENCH_STANDARD.value: {
        "name": "Facture française standard",
        "orientation": "portrait",
        "styles": FRENCH_STANDARD_PRINT_STYLES,
    },
}


def get_available_print_templates() -> list[str]:
    return list(PRINT_TEMPLATES)


def render_print_template(data: CanonicalInvoice, template_type: Any = TemplateType.FRENCH_STANDARD) -> dict[str, Any]:
    """
    Print-optimized document. The variant content follows template_type, the styling
    falls back to french-standard for keys without a print layout of their own.
    """
    variant = TemplateType.resolve(template_type)
    layout = PRINT_TEMPLATES.get(variant.value) or PRINT_TEMPLATES[TemplateType.FRENCH_STANDARD.value]

    html = render_invoice_html(
        data,
        variant,
        styles=layout["styles"],
        container_class="print-container",
    )
    logger.debug("render.print invoice=%s template=%s", data.invoice.id, variant.value)
    return {
        "success": True,
        "data": {
            "html": html,
            "format": "A4",
            "orientation": layout["orientation"],
            "styles": layout["styles"],
            "metadata": {
                "templateType": variant.value,
                "createdAt": datetime.now(timezone.utc).isoformat(),
                "optimizedFor": "print",
            },
        },
    }
