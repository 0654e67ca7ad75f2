# facturier/services/email_template.py
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from facturier.models import CanonicalInvoice, OutputFormat, TemplateType
from facturier.templates import render_email

logger = logging.getLogger(__name__)


_HEAD_RE = re.compile(r"<(head|style|script)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_P_END_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#x27;", "'"),
    ("&amp;", "&"),
)


def html_to_text(html: str) -> str:
    """
    Best-effort plain text for the multipart email body: line breaks for <br>,
    blank line after paragraphs, every other tag dropped, common entities decoded.
    """
    text = _HEAD_RE.sub("", html or "")
    text = _BR_RE.sub("\n", text)
    text = _P_END_RE.sub("\n\n", text)
    text = _TAG_RE.sub("", text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)

    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    return _BLANK_LINES_RE.sub("\n\n", text).strip()


def email_subject(data: CanonicalInvoice) -> str:
    return f"Facture {data.invoice.id}"


def render_email_template(data: CanonicalInvoice, template_type: Any = TemplateType.FRENCH_STANDARD) -> dict[str, Any]:
    variant = TemplateType.resolve(template_type)
    html = render_email(data, variant)
    text = html_to_text(html)
    logger.debug("render.email invoice=%s template=%s bytes=%s", data.invoice.id, variant.value, len(html))
    return {
        "success": True,
        "data": {
            "subject": email_subject(data),
            "html": html,
            "text": text,
        },
        "metadata": {
            "templateType": variant.value,
            "format": OutputFormat.EMAIL.value,
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        },
    }
