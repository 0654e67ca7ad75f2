from __future__ import annotations


FRENCH_LABELS: dict[str, str] = {
    # Document types
    "invoice_title": "FACTURE",
    "standard_invoice": "Facture standard",
    "credit_note": "Avoir",
    "debit_note": "Note de débit",
    "proforma_invoice": "Facture pro forma",
    "deposit_invoice": "Facture d'acompte",
    "final_invoice": "Facture de solde",
    "invoice_type": "Type de facture",
    "template": "Modèle",
    # Parties
    "seller": "VENDEUR",
    "billed_to": "FACTURÉ À",
    "recipient": "Destinataire",
    "billing_address": "Adresse de facturation",
    "delivery_address": "Adresse de livraison",
    "attention_of": "À l'attention de",
    "phone": "Tél",
    "email": "Email",
    "vat_number": "TVA",
    "vat_intra_community_number": "Numéro de TVA intracommunautaire",
    "vat_number_intra": "N° TVA intracommunautaire",
    "siren": "SIREN",
    "siret": "SIRET",
    "capital": "Capital",
    "rcs": "RCS",
    "naf_code": "Code NAF",
    "ape_code": "Code APE",
    "ape_code_full": "Code APE (Activité Principale Exercée)",
    "legal_form": "Forme juridique",
    "default_company_name": "Société",
    "company_phone": "Téléphone",
    "company_email": "Email",
    "company_website": "Site web",
    "client_phone": "Téléphone client",
    "client_email": "Email client",
    "client_contact": "Personne de contact",
    "professional_insurance": "Assurance responsabilité civile professionnelle",
    "insurance_company": "Compagnie d'assurance",
    "insurance_policy": "Police d'assurance",
    "insurance_coverage": "Couverture territoriale",
    # Invoice details
    "invoice_details": "DÉTAILS DE LA FACTURE",
    "invoice_number": "N° Facture",
    "date": "Date",
    "due_date": "Échéance",
    "service_date": "Date de prestation",
    "delivery_date": "Date de livraison",
    "service_details": "DÉTAILS DE LA PRESTATION",
    "service_category": "Catégorie de service",
    "service_location": "Lieu de prestation",
    "service_description": "Description détaillée du service",
    "items_title": "DÉTAIL DES PRESTATIONS",
    # Table headers
    "description": "DESCRIPTION",
    "quantity": "QTÉ",
    "unit_price": "PRIX UNIT.",
    "vat_rate": "TVA",
    "line_total_ht": "TOTAL HT",
    "line_total_ttc": "TOTAL TTC",
    "total": "TOTAL",
    # Totals
    "subtotal": "Sous-total HT",
    "discount": "Remise",
    "vat_amount": "TVA",
    "total_vat": "Total TVA",
    "total_amount": "TOTAL TTC",
    "vat_breakdown": "Détail TVA",
    "vat_exempt": "TVA (Exonérée)",
    "vat_exempt_value": "Exonéré",
    "vat_self_liquidation": "TVA (Autoliquidation)",
    "advance_payment": "Acompte versé",
    "remaining_amount": "Montant restant dû",
    # VAT status
    "vat_status": "Statut TVA",
    "vat_applicable_article_256": "TVA applicable selon l'article 256 du CGI",
    "vat_exempt_intra_eu": "TVA exonérée - Livraison intracommunautaire",
    "vat_not_applicable_text": "TVA non applicable, art. 293 B du CGI (régime de la franchise en base).",
    "self_liquidation_text": "Auto-liquidation de la TVA par le destinataire conformément à l'article 283-1 du CGI.",
    # Legal mentions
    "legal_mentions": "MENTIONS LÉGALES",
    "vat_applicable": "TVA applicable selon les taux en vigueur.",
    "vat_deductible": "La TVA est déductible selon l'article 278 du Code Général des Impôts français.",
    "invoice_compliance": "Cette facture respecte les obligations légales françaises en matière de TVA.",
    "vat_subject": "Le prestataire est assujetti à la TVA et applique les taux réglementaires.",
    "compliance_statement": "Facture conforme aux articles 289 et suivants du Code général des impôts.",
    "archiving_statement": (
        "Cette facture est archivée conformément aux obligations légales françaises pour une durée de 10 ans."
    ),
    "legal_compliance_text": (
        "Selon les articles L.441-3 et L.441-6 du Code de commerce français, "
        "cette facture est conforme aux exigences légales françaises."
    ),
    "not_provided": "Non communiqué",
    "not_specified": "Non spécifié",
    # VAT exemption block
    "vat_exemption": "EXONÉRATION DE TVA",
    "vat_exempt_invoice": "Cette facture est exonérée de TVA conformément à la réglementation applicable.",
    "vat_exemption_applies": (
        "L'exonération de TVA s'applique selon les dispositions légales en vigueur. "
        "Cette prestation peut être exonérée en vertu de l'article 293 B du Code Général des Impôts "
        "ou d'autres dispositions spécifiques selon la nature de l'activité et la localisation du client."
    ),
    "responsibility": "Responsabilité",
    "provider_certifies": (
        "Le prestataire certifie que cette exonération est appliquée conformément "
        "à la législation fiscale française et européenne en vigueur."
    ),
    # Self-liquidation block
    "vat_auto_liquidation": "AUTOLIQUIDATION DE LA TVA",
    "vat_charge_to_client": "TVA à la charge du preneur conformément à l'article 283-2 du CGI (auto-liquidation).",
    "intra_community_service": (
        "Dans le cadre de cette prestation intracommunautaire, la TVA est due par le preneur (client) "
        "dans son État membre conformément au mécanisme d'autoliquidation prévu par la directive "
        "européenne 2006/112/CE et l'article 283-2 du Code Général des Impôts français."
    ),
    "client_obligations": "Obligations du client",
    "client_must_declare": (
        "Le client est tenu de déclarer et de payer la TVA applicable dans son pays de résidence "
        "selon les taux et modalités en vigueur dans son État membre."
    ),
    "french_provider_exempt": (
        "Le prestataire français est exonéré de TVA sur cette prestation, "
        "la responsabilité fiscale incombant entièrement au preneur établi dans l'UE."
    ),
    # Payment
    "payment_method": "Mode de paiement",
    "payment_terms": "CONDITIONS DE PAIEMENT",
    "payment_due": "Paiement à échéance",
    "payment_immediate": "Paiement à réception de la facture",
    "late_payment": "RETARD DE PAIEMENT",
    "late_payment_interest": "Intérêts de retard selon conditions légales",
    "late_payment_penalty": (
        "En cas de retard de paiement, des intérêts de retard seront appliqués "
        "conformément à l'article L441-6 du Code de commerce"
    ),
    "fixed_penalty": "Indemnité forfaitaire pour frais de recouvrement",
    "bank_details": "Coordonnées bancaires",
    "account_holder": "Titulaire du compte",
    "iban": "IBAN",
    "bic": "BIC",
    "bank_name": "Banque",
    # Misc
    "notes": "Notes",
    "thank_you": "Merci de votre confiance",
    "contact_us": "Pour toute question, n'hésitez pas à nous contacter",
    "company_information": "Informations de l'entreprise",
    "client_information": "Informations du client",
    "invoice_status": "Statut de la facture",
    "invoice_paid": "Payée",
    "invoice_pending": "En attente",
    "invoice_overdue": "En retard",
}


def get_label(key: str) -> str:
    return FRENCH_LABELS.get(key, key)
