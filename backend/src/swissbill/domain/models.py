"""
Domain models for Swiss QR-bill generation.

These models represent the billing data flowing through the pipeline:
billing data -> reference -> SPC payload -> QR symbol -> rendered document.
None of them are persisted; they are built per render request.

Design Decisions:
- Frozen dataclasses so a payload cannot drift from its encoded text
- PartyAddress.create is the single normalization point for parties
- Decimal for all monetary values to avoid floating-point errors
- The encoded payload is derived, never stored independently
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from functools import cached_property
from typing import Any

from .countries import normalize_country
from .errors import EncodingError
from .formatting import format_reference_display, truncate
from .references import (
    SCOR_PREFIX,
    ReferenceKind,
    is_valid_qr_reference,
    is_valid_scor_reference,
)

# Maximum lengths mandated for combined ("K") addresses
MAX_NAME_LENGTH = 70
MAX_ADDRESS_LENGTH = 70
MAX_ZIP_LENGTH = 16
MAX_CITY_LENGTH = 70

# Fixed document geometry (mm)
DOCUMENT_WIDTH_MM = 210
DOCUMENT_HEIGHT_MM = 105
RECEIPT_WIDTH_MM = 62


class ReferenceType(Enum):
    """Reference scheme configured for a company."""
    QR = "QR"
    SCOR = "SCOR"
    NON = "NON"

    @classmethod
    def parse(cls, value: "str | ReferenceType | None") -> "ReferenceType":
        """Resolve a setting value; anything unknown means no reference."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            return cls.NON


@dataclass(frozen=True)
class PartyAddress:
    """
    A creditor or debtor in combined address form.

    Use PartyAddress.create() to build one from raw input; it applies
    truncation and country normalization before anything else sees the data.
    """
    name: str
    address: str
    zip: str
    city: str
    country: str
    account: str = ""

    def __post_init__(self) -> None:
        """Validate the country code shape."""
        if len(self.country) != 2 or not (self.country.isascii() and self.country.isupper()):
            raise EncodingError(f"Country must be an uppercase ISO alpha-2 code, got {self.country!r}")

    @classmethod
    def create(
        cls,
        name: str | None = None,
        address: str | None = None,
        zip: str | None = None,
        city: str | None = None,
        country: str | None = None,
        account: str | None = None,
        default_country: str = "CH",
    ) -> "PartyAddress":
        """Normalize raw party fields into a PartyAddress."""
        return cls(
            name=truncate(name, MAX_NAME_LENGTH),
            address=truncate(address, MAX_ADDRESS_LENGTH),
            zip=truncate(zip, MAX_ZIP_LENGTH),
            city=truncate(city, MAX_CITY_LENGTH),
            country=normalize_country(country, default_country),
            account="".join((account or "").split()).upper(),
        )

    @property
    def zip_city(self) -> str:
        """Second combined address line: "{zip} {city}"."""
        return f"{self.zip} {self.city}".strip()

    @property
    def is_empty(self) -> bool:
        """True if no identifying field is set (country alone does not count)."""
        return not (self.name or self.address or self.zip or self.city)


@dataclass(frozen=True)
class PaymentReference:
    """
    Creditor reference carried by a bill.

    QRR values are 27 digits with a valid mod10 check digit, SCOR values
    are "RF" references that verify mod97, NON has no value.
    """
    kind: ReferenceKind
    value: str = ""

    def __post_init__(self) -> None:
        """Validate the value against its reference kind."""
        if self.kind == ReferenceKind.NON:
            if self.value:
                raise EncodingError("A NON reference must not carry a value")
        elif self.kind == ReferenceKind.QRR:
            if not is_valid_qr_reference(self.value):
                raise EncodingError(f"Invalid QR reference: {self.value!r}")
        elif self.kind == ReferenceKind.SCOR:
            if not self.value.startswith(SCOR_PREFIX) or not is_valid_scor_reference(self.value):
                raise EncodingError(f"Invalid creditor reference: {self.value!r}")

    @property
    def display(self) -> str:
        """Grouped form for the printed panels."""
        return format_reference_display(self.value, self.kind)


@dataclass(frozen=True)
class BillPayload:
    """
    Complete data of one QR-bill.

    `encoded_text` is derived from the other fields on first access and
    cached; the dataclass is frozen so it cannot go stale.
    """
    currency: str
    amount: Decimal
    creditor: PartyAddress
    debtor: PartyAddress
    reference: PaymentReference
    unstructured_message: str = ""
    billing_information: str = ""
    alternative_scheme: str = ""

    def __post_init__(self) -> None:
        """Validate amount precision and sign."""
        if self.amount.as_tuple().exponent != -2:
            raise EncodingError(f"Amount must have exactly 2 decimal places, got {self.amount}")
        if self.amount.is_signed():
            raise EncodingError(f"Amount must not be negative, got {self.amount}")

    @property
    def lines(self) -> list[str]:
        """The SPC lines in canonical order."""
        from .payload import build_spc

        return build_spc(self)

    @cached_property
    def encoded_text(self) -> str:
        """The SPC text block encoded into the QR symbol."""
        from .payload import encode_spc

        return encode_spc(self)


@dataclass(frozen=True)
class Invoice:
    """
    Invoice data supplied by the invoicing collaborator.

    `debtor` holds the client's address fields when known
    (name, address, zip, city, country).
    """
    id: str
    client: str
    amount: Decimal
    currency: str = ""
    message: str | None = None
    debtor: dict[str, Any] | None = None


@dataclass(frozen=True)
class CompanySettings:
    """Creditor settings supplied by the organization collaborator."""
    name: str
    address: str
    zip: str
    city: str
    country: str = ""
    qr_iban: str = ""
    iban: str = ""
    qr_reference_type: str = "NON"


@dataclass(frozen=True)
class RenderedDocument:
    """
    A rendered bill: the SVG string plus the payload it was built from.
    """
    svg: str
    payload: BillPayload
    width_mm: int = DOCUMENT_WIDTH_MM
    height_mm: int = DOCUMENT_HEIGHT_MM
    receipt_width_mm: int = RECEIPT_WIDTH_MM

    @property
    def payment_part_width_mm(self) -> int:
        """Width of the Payment Part panel right of the cut line."""
        return self.width_mm - self.receipt_width_mm
