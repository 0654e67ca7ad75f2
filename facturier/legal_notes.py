from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

from facturier.models import CanonicalInvoice, Totals


FR_VAT_EXEMPTION_NOTE = "TVA non applicable, art. 293 B du CGI (régime de la franchise en base)"
DE_VAT_EXEMPTION_NOTE = "Steuerfreie innergemeinschaftliche Lieferung"

_SIRET_RE = re.compile(r"^\d{14}$")
_SIREN_RE = re.compile(r"^\d{9}$")
_FR_VAT_RE = re.compile(r"^FR[A-Z0-9]{2}\d{9}$")


@dataclass(frozen=True)
class CountryRules:
    legal_notes: tuple[str, ...]
    zero_vat_note: str | None = None
    required_fields: tuple[str, ...] = field(default_factory=tuple)


COUNTRY_RULES: dict[str, CountryRules] = {
    "FR": CountryRules(
        legal_notes=(
            "TVA intracommunautaire due par le preneur",
            "TVA non applicable, art. 293 B du CGI",
            "Conformément à la réglementation française en vigueur",
        ),
        zero_vat_note=FR_VAT_EXEMPTION_NOTE,
        required_fields=("vat_number", "siret"),
    ),
    # Partial alternate set, no German-specific template exists.
    "DE": CountryRules(
        legal_notes=(
            "Steuerfreie innergemeinschaftliche Lieferung",
            "Umkehrung der Steuerschuldnerschaft",
        ),
        zero_vat_note=DE_VAT_EXEMPTION_NOTE,
        required_fields=("vat_number",),
    ),
}


def generate_legal_notes(country: str | None, totals: Totals) -> list[str]:
    rules = COUNTRY_RULES.get((country or "").strip().upper())
    if rules is None:
        return []

    notes = list(rules.legal_notes)
    if totals.total_tva == 0 and rules.zero_vat_note:
        notes.append(rules.zero_vat_note)
    return notes


def check_legal_requirements(data: CanonicalInvoice) -> list[str]:
    """
    French invoicing checks that do not block rendering. Returns human readable
    warnings, empty when the seller and invoice look compliant.
    """
    warnings: list[str] = []
    company = data.company

    rules = COUNTRY_RULES.get(company.country.upper())
    if rules is not None:
        for name in rules.required_fields:
            if not getattr(company, name, None):
                warnings.append(f"Mention obligatoire absente pour le vendeur: {name}")

    if company.siret and not _SIRET_RE.match(company.siret.replace(" ", "")):
        warnings.append("Le SIRET doit comporter 14 chiffres")
    if company.siren and not _SIREN_RE.match(company.siren.replace(" ", "")):
        warnings.append("Le SIREN doit comporter 9 chiffres")
    if company.vat_number and company.country.upper() == "FR":
        if not _FR_VAT_RE.match(company.vat_number.replace(" ", "").upper()):
            warnings.append("Le numéro de TVA doit respecter le format FRXX999999999")

    try:
        issued = date.fromisoformat(data.invoice.date)
        due = date.fromisoformat(data.invoice.due_date)
    except ValueError:
        warnings.append("Dates de facture illisibles")
    else:
        if due < issued:
            warnings.append("La date d'échéance précède la date de facture")

    return warnings
