"""
Pydantic schemas for API request/response validation.

These schemas define the contract with the invoicing frontend.
Amounts are accepted as decimals and returned as strings to avoid
floating point issues.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from swissbill.domain.models import CompanySettings, Invoice


class ReferenceKindEnum(str, Enum):
    """Reference kind in API responses."""
    QRR = "QRR"
    SCOR = "SCOR"
    NON = "NON"


class ReferenceTypeEnum(str, Enum):
    """Reference scheme that can be generated on request."""
    QR = "QR"
    SCOR = "SCOR"


# =============================================================================
# Request Schemas
# =============================================================================

class PartyRequest(BaseModel):
    """Debtor address fields."""
    name: str = ""
    address: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""


class InvoiceRequest(BaseModel):
    """Invoice data needed for a bill."""
    id: str = Field(..., min_length=1, description="Invoice identifier, source of the reference")
    client: str = Field(default="", description="Client display name")
    amount: Decimal = Field(..., ge=0, description="Amount due")
    currency: str = Field(default="", description="CHF or EUR; empty uses the configured default")
    message: str | None = Field(default=None, description="Unstructured message for the payer")
    debtor: PartyRequest | None = None

    def to_domain(self) -> Invoice:
        return Invoice(
            id=self.id,
            client=self.client,
            amount=self.amount,
            currency=self.currency,
            message=self.message,
            debtor=self.debtor.model_dump() if self.debtor else None,
        )


class CompanySettingsRequest(BaseModel):
    """Creditor settings of the billing company."""
    name: str = ""
    address: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""
    qr_iban: str = ""
    iban: str = ""
    qr_reference_type: str = Field(default="NON", description="QR, SCOR or NON")

    def to_domain(self) -> CompanySettings:
        return CompanySettings(**self.model_dump())


class RenderBillRequest(BaseModel):
    """Request to encode or render a QR-bill."""
    invoice: InvoiceRequest
    company: CompanySettingsRequest


class GenerateReferenceRequest(BaseModel):
    """Request to derive a creditor reference from free input."""
    kind: ReferenceTypeEnum
    raw_input: str = Field(default="", max_length=200)


# =============================================================================
# Response Schemas
# =============================================================================

class PayloadResponse(BaseModel):
    """Encoded Swiss Payments Code for a bill."""
    reference_kind: ReferenceKindEnum
    reference: str
    reference_display: str
    currency: str
    amount: str
    encoded_text: str
    lines: list[str]


class ReferenceResponse(BaseModel):
    """A generated creditor reference."""
    kind: ReferenceKindEnum
    value: str
    display: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str
    default_country: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: str | None = None
