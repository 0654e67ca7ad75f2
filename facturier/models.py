from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TemplateType(str, Enum):
    FRENCH_STANDARD = "french-standard"
    TVA_EXEMPT = "tva-exempt"
    SELF_LIQUIDATION = "self-liquidation"

    @classmethod
    def resolve(cls, value: Any) -> "TemplateType":
        """Known aliases map to their variant, anything else renders as french-standard."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        key = _TEMPLATE_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return cls.FRENCH_STANDARD


_TEMPLATE_ALIASES = {
    "standard": "french-standard",
    "french-tva-exempt": "tva-exempt",
    "vat-exempt": "tva-exempt",
    "french-auto-liquidation": "self-liquidation",
    "auto-liquidation": "self-liquidation",
    "autoliquidation": "self-liquidation",
}


class OutputFormat(str, Enum):
    EMAIL = "email"
    PDF = "pdf"
    PRINT = "print"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class ClientType(str, Enum):
    INDIVIDUAL = "individual"
    COMPANY = "company"
    FOREIGN = "foreign"
    GOVERNMENT = "government"


class _CanonicalModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Company(_CanonicalModel):
    name: str
    address: str
    postal_code: str
    city: str
    country: str
    legal_form: Optional[str] = None
    vat_number: Optional[str] = None
    siret: Optional[str] = None
    siren: Optional[str] = None
    ape_code: Optional[str] = None
    rcs: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    iban: Optional[str] = None
    bic: Optional[str] = None
    bank_name: Optional[str] = None
    account_holder: Optional[str] = None
    professional_insurance: bool = False
    insurance_company: Optional[str] = None
    insurance_policy: Optional[str] = None
    insurance_coverage: Optional[str] = None


class Client(_CanonicalModel):
    name: str
    address: str
    postal_code: str
    city: str
    country: str
    type: ClientType = ClientType.INDIVIDUAL
    has_tva: Optional[bool] = Field(default=None, alias="hasTVA")
    vat_number: Optional[str] = None
    siret: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    delivery_name: Optional[str] = None
    delivery_address: Optional[str] = None
    delivery_postal_code: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_country: Optional[str] = None


class InvoiceMeta(_CanonicalModel):
    id: str
    date: str
    due_date: str
    currency: str = "EUR"
    status: str = "pending"
    notes: Optional[str] = None
    service_date: Optional[str] = None


class LineItem(_CanonicalModel):
    description: str
    quantity: float
    unit_price: float
    tva_rate: float
    total_price: float

    @property
    def total_with_tax(self) -> float:
        return self.total_price * (1 + self.tva_rate / 100)


class Totals(_CanonicalModel):
    subtotal: float
    total_tva: float = Field(alias="totalTVA")
    discount: float = 0.0
    total: float


class CanonicalInvoice(_CanonicalModel):
    company: Company
    client: Client
    invoice: InvoiceMeta
    items: list[LineItem]
    totals: Totals
    legal_notes: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
