from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from facturier.config import Settings, load_settings
from facturier.errors import StandardizationError, UnsupportedFormatError
from facturier.legal_notes import check_legal_requirements
from facturier.logging_setup import setup_logging
from facturier.models import CanonicalInvoice, OutputFormat, TemplateType
from facturier.safe_standardizer import safe_standardize
from facturier.services.email_template import render_email_template
from facturier.services.invoice_pdf import BrowserFactory, PdfRenderer, render_pdf_template
from facturier.services.print_template import render_print_template
from facturier.standardizer import get_sample_data, standardize_invoice_data, validate_standardized_data
from facturier.templates import render_invoice_html

logger = logging.getLogger(__name__)


VALIDATION_FAILED = "数据验证失败"
STANDARDIZE_FAILED = "Erreur lors de la standardisation des données"

_FEATURES = (
    "Rendu unifié des factures",
    "Sorties email, PDF et impression",
    "Standardisation des données",
    "Conformité légale française",
    "Aperçu des modèles",
    "Rendu par lot",
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_payload(name: str, value: Any) -> None:
    if value is None or isinstance(value, (str, bytes, int, float, list, tuple)):
        raise ValueError(f"Données invalides: {name} doit être un objet")


def validate_render_options(fmt: Any, invoice_data: Any, user_data: Any, client_data: Any) -> OutputFormat:
    try:
        output = OutputFormat(str(fmt or "").strip().lower())
    except ValueError:
        raise UnsupportedFormatError(fmt, OutputFormat.values()) from None

    _check_payload("invoiceData", invoice_data)
    _check_payload("userData", user_data)
    _check_payload("clientData", client_data)
    return output


class InvoiceTemplateRenderer:
    """
    Public entry point of the pipeline. Every method returns a {success, ...}
    envelope; exceptions raised below are logged here and never propagate.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        pdf_renderer: Optional[PdfRenderer] = None,
        browser_factory: Optional[BrowserFactory] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.pdf = pdf_renderer or PdfRenderer(self.settings, browser_factory=browser_factory)
        self._by_format: Counter[str] = Counter()
        self._by_template: Counter[str] = Counter()
        self._successful = 0
        self._failed = 0

    def _standardize(self, output: OutputFormat, invoice_data: Any, user_data: Any, client_data: Any) -> CanonicalInvoice:
        currency = self.settings.default_currency
        if output.value in self.settings.fallback_formats:
            return safe_standardize(invoice_data, user_data, client_data, default_currency=currency)
        return standardize_invoice_data(invoice_data, user_data, client_data, default_currency=currency)

    def _record(self, output: Optional[OutputFormat], variant: TemplateType, success: bool) -> None:
        if output is not None:
            self._by_format[output.value] += 1
        self._by_template[variant.value] += 1
        if success:
            self._successful += 1
        else:
            self._failed += 1

    async def render_invoice(
        self,
        format: Any,
        invoice_data: Any,
        user_data: Any,
        client_data: Any,
        template_type: Any = TemplateType.FRENCH_STANDARD,
    ) -> dict[str, Any]:
        variant = TemplateType.resolve(template_type)
        output: Optional[OutputFormat] = None

        try:
            output = validate_render_options(format, invoice_data, user_data, client_data)
        except UnsupportedFormatError as exc:
            logger.warning("render.unsupported_format format=%s", format)
            self._record(None, variant, False)
            return {"success": False, "error": str(exc), "format": exc.format}
        except ValueError as exc:
            logger.warning("render.invalid_options format=%s reason=%s", format, exc)
            self._record(None, variant, False)
            return {"success": False, "error": str(exc)}

        try:
            data = self._standardize(output, invoice_data, user_data, client_data)
        except StandardizationError as exc:
            logger.info("render.validation_failed format=%s field=%s", output.value, exc.field)
            self._record(output, variant, False)
            return {"success": False, "error": VALIDATION_FAILED, "details": [str(exc)]}
        except Exception as exc:
            logger.exception("render.standardize.failed format=%s", output.value)
            self._record(output, variant, False)
            return {"success": False, "error": STANDARDIZE_FAILED, "message": str(exc)}

        report = validate_standardized_data(data)
        if not report.is_valid:
            logger.info("render.validation_failed format=%s errors=%s", output.value, len(report.errors))
            self._record(output, variant, False)
            return {"success": False, "error": VALIDATION_FAILED, "details": report.errors}

        if data.metadata.get("fallback"):
            logger.warning("render.fallback_data format=%s invoice=%s", output.value, data.invoice.id)

        try:
            if output is OutputFormat.EMAIL:
                result = render_email_template(data, variant)
            elif output is OutputFormat.PDF:
                result = await render_pdf_template(self.pdf, data, variant)
            else:
                result = render_print_template(data, variant)
        except Exception as exc:
            logger.exception("render.failed format=%s template=%s", output.value, variant.value)
            self._record(output, variant, False)
            return {
                "success": False,
                "error": f"Erreur lors du rendu {output.value}",
                "message": str(exc),
            }

        success = bool(result.get("success"))
        self._record(output, variant, success)
        if success:
            logger.info("render.ok format=%s template=%s invoice=%s", output.value, variant.value, data.invoice.id)
        return result

    async def render_multiple_formats(
        self,
        invoice_data: Any,
        user_data: Any,
        client_data: Any,
        template_type: Any = TemplateType.FRENCH_STANDARD,
        formats: Iterable[Any] = ("email", "pdf", "print"),
    ) -> dict[str, Any]:
        formats = list(formats)
        results: dict[str, Any] = {}
        errors: list[dict[str, Any]] = []

        for fmt in formats:
            result = await self.render_invoice(fmt, invoice_data, user_data, client_data, template_type)
            results[str(fmt)] = result
            if not result.get("success"):
                errors.append({"format": str(fmt), "error": result.get("error")})

        return {
            "success": not errors,
            "results": results,
            "errors": errors,
            "summary": {
                "total": len(formats),
                "successful": len(formats) - len(errors),
                "failed": len(errors),
                "timestamp": _now_iso(),
            },
        }

    async def get_template_preview(self, template_type: Any, format: str = "html") -> dict[str, Any]:
        """Renders the built-in sample invoice. format='html' returns the bare document."""
        sample = get_sample_data()
        variant = TemplateType.resolve(template_type)

        if format != "html":
            return await self.render_invoice(format, sample["invoice"], sample["company"], sample["client"], variant)

        try:
            data = standardize_invoice_data(
                sample["invoice"],
                sample["company"],
                sample["client"],
                default_currency=self.settings.default_currency,
            )
            html = render_invoice_html(data, variant)
        except Exception as exc:
            logger.exception("render.preview.failed template=%s", variant.value)
            return {"success": False, "error": "Erreur lors de l'aperçu du modèle", "message": str(exc)}

        return {
            "success": True,
            "data": html,
            "metadata": {"templateType": variant.value, "format": "html", "timestamp": _now_iso()},
        }

    def validate_french_legal_requirements(self, invoice_data: Any, user_data: Any, client_data: Any) -> dict[str, Any]:
        try:
            data = standardize_invoice_data(
                invoice_data,
                user_data,
                client_data,
                default_currency=self.settings.default_currency,
            )
        except StandardizationError as exc:
            return {"success": False, "error": VALIDATION_FAILED, "details": [str(exc)]}
        except Exception as exc:
            logger.exception("render.legal_check.failed")
            return {"success": False, "error": STANDARDIZE_FAILED, "message": str(exc)}

        warnings = check_legal_requirements(data)
        return {"success": True, "isCompliant": not warnings, "warnings": warnings, "legalNotes": data.legal_notes}

    def get_available_templates(self) -> list[str]:
        return [member.value for member in TemplateType]

    def get_available_formats(self) -> list[str]:
        return OutputFormat.values()

    def get_render_stats(self) -> dict[str, Any]:
        return {
            "availableTemplates": self.get_available_templates(),
            "availableFormats": self.get_available_formats(),
            "features": list(_FEATURES),
            "stats": {
                "total": self._successful + self._failed,
                "successful": self._successful,
                "failed": self._failed,
                "byFormat": dict(self._by_format),
                "byTemplate": dict(self._by_template),
            },
            "timestamp": _now_iso(),
        }

    async def aclose(self) -> None:
        await self.pdf.close()


def create_renderer(**kwargs: Any) -> InvoiceTemplateRenderer:
    """Configures logging and settings from the environment, for hosts embedding the pipeline."""
    setup_logging()
    return InvoiceTemplateRenderer(load_settings(), **kwargs)
