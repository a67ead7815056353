"""
Swiss Payments Code (SPC) payload encoding.

This module turns invoice and company data into a BillPayload and
encodes it as the line-oriented SPC v0200 text block.
No side effects, no I/O - just normalization and encoding rules.

The SPC format is positional: each line has a fixed meaning, so blank
placeholders are always emitted and never collapsed.

Design Decisions:
- Creditor completeness is checked before anything is built (fail fast)
- Free-text fields are truncated when parties are created, lengths are
  re-checked on the assembled payload
- The reference scheme is chosen by company configuration
- CRLF line separators, as required by the implementation guidelines
"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import ConfigurationError, EncodingError
from .formatting import format_amount_for_payload
from .models import (
    BillPayload,
    CompanySettings,
    Invoice,
    PartyAddress,
    PaymentReference,
    ReferenceType,
)
from .references import ReferenceKind, generate_qr_reference, generate_scor_reference

logger = logging.getLogger(__name__)


# Header fields
QR_TYPE = "SPC"
VERSION = "0200"
CODING_UTF8 = "1"
COMBINED_ADDRESS = "K"
TRAILER = "EPD"

LINE_SEPARATOR = "\r\n"
SPC_LINE_COUNT = 33

ALLOWED_CURRENCIES = ("CHF", "EUR")
MAX_AMOUNT = Decimal("999999999.99")
CENTS = Decimal("0.01")

# QR-IBANs carry an institution id in this range (positions 5-9)
QR_IID_RANGE = (30000, 31999)

# Field limits after truncation
FIELD_LIMITS = {
    "account": 21,
    "name": 70,
    "address": 70,
    "zip_city": 70,
    "reference": 27,
    "scor_reference": 25,
    "unstructured_message": 140,
    "billing_information": 140,
    "alternative_scheme": 100,
}


def is_qr_iban(account: str) -> bool:
    """True if the account is a Swiss/Liechtenstein QR-IBAN."""
    iid = account[4:9]
    if len(account) < 9 or account[:2] not in ("CH", "LI") or not (iid.isascii() and iid.isdigit()):
        return False
    return QR_IID_RANGE[0] <= int(iid) <= QR_IID_RANGE[1]


def _party_lines(party: PartyAddress) -> list[str]:
    """Seven address lines; all blank when the party is absent."""
    if party.is_empty:
        return [""] * 7
    return [
        COMBINED_ADDRESS,
        party.name,
        party.address,
        party.zip_city,
        "",
        "",
        party.country,
    ]


def build_spc(bill: BillPayload) -> list[str]:
    """
    Build the SPC lines for a bill in canonical order.

    Layout:
        1-3    header (SPC, 0200, 1)
        4      creditor account
        5-11   creditor address (K)
        12-18  ultimate creditor (reserved, blank)
        19-20  amount, currency
        21-27  debtor address (K)
        28-30  reference type, reference, unstructured message
        31     trailer (EPD)
        32-33  billing information, alternative scheme

    Returns:
        Exactly SPC_LINE_COUNT lines
    """
    lines = [QR_TYPE, VERSION, CODING_UTF8, bill.creditor.account]
    lines.extend(_party_lines(bill.creditor))
    lines.extend([""] * 7)
    lines.extend([format_amount_for_payload(bill.amount), bill.currency])
    lines.extend(_party_lines(bill.debtor))
    lines.extend([
        bill.reference.kind.value,
        bill.reference.value,
        bill.unstructured_message,
        TRAILER,
        bill.billing_information,
        bill.alternative_scheme,
    ])
    return lines


def encode_spc(bill: BillPayload) -> str:
    """Join the SPC lines with CRLF."""
    return LINE_SEPARATOR.join(build_spc(bill))


def validate_field_lengths(bill: BillPayload) -> None:
    """
    Check every free-text field against its mandated maximum length.

    Raises:
        EncodingError: Naming the first field that is too long
    """
    reference_limit = FIELD_LIMITS["scor_reference" if bill.reference.kind == ReferenceKind.SCOR else "reference"]
    fields = {
        "creditor.account": (bill.creditor.account, FIELD_LIMITS["account"]),
        "reference": (bill.reference.value, reference_limit),
        "unstructured_message": (bill.unstructured_message, FIELD_LIMITS["unstructured_message"]),
        "billing_information": (bill.billing_information, FIELD_LIMITS["billing_information"]),
        "alternative_scheme": (bill.alternative_scheme, FIELD_LIMITS["alternative_scheme"]),
    }
    for role, party in (("creditor", bill.creditor), ("debtor", bill.debtor)):
        fields[f"{role}.name"] = (party.name, FIELD_LIMITS["name"])
        fields[f"{role}.address"] = (party.address, FIELD_LIMITS["address"])
        fields[f"{role}.zip_city"] = (party.zip_city, FIELD_LIMITS["zip_city"])

    for field_path, (value, limit) in fields.items():
        if len(value) > limit:
            raise EncodingError(
                f"Field {field_path} is {len(value)} characters long, maximum is {limit}"
            )


def normalize_amount(amount: Decimal | int | str) -> Decimal:
    """
    Quantize an amount to 2 decimal places and check its range.

    Raises:
        EncodingError: If the amount is not a number, negative or too large
    """
    try:
        value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise EncodingError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise EncodingError(f"Invalid amount: {amount!r}")
    # -0.001 quantizes to -0.00
    if value.is_zero():
        value = value.copy_abs()
    if value.is_signed() or value > MAX_AMOUNT:
        raise EncodingError(f"Amount must be between 0.00 and {MAX_AMOUNT}, got {value}")
    return value


def normalize_currency(currency: str | None, default: str = "CHF") -> str:
    """Uppercase the currency, defaulting when empty; only CHF and EUR are allowed."""
    value = (currency or "").strip().upper() or default
    if value not in ALLOWED_CURRENCIES:
        raise EncodingError(f"Currency must be one of {', '.join(ALLOWED_CURRENCIES)}, got {value!r}")
    return value


def select_reference(invoice_id: str, reference_type: ReferenceType | str | None) -> PaymentReference:
    """
    Derive the bill reference from the invoice id.

    QR   -> QRR built from the digits of the id
    SCOR -> SCOR built from the letters and digits of the id
    NON  -> no reference

    Raises:
        EncodingError: If a SCOR reference is requested for an id without
            letters or digits
    """
    ref_type = ReferenceType.parse(reference_type)

    if ref_type == ReferenceType.QR:
        digits = re.sub(r"[^0-9]", "", invoice_id)
        return PaymentReference(ReferenceKind.QRR, generate_qr_reference(digits))

    if ref_type == ReferenceType.SCOR:
        alnum = re.sub(r"[^A-Za-z0-9]", "", invoice_id)
        if not alnum:
            raise EncodingError(
                f"Invoice id {invoice_id!r} has no letters or digits to build a creditor reference from"
            )
        return PaymentReference(ReferenceKind.SCOR, generate_scor_reference(alnum))

    return PaymentReference(ReferenceKind.NON, "")


def validate_company(company: CompanySettings) -> None:
    """
    Check that the creditor identity and an account are configured.

    Raises:
        ConfigurationError: Listing every missing setting
    """
    missing = [
        label
        for label, value in (
            ("name", company.name),
            ("address", company.address),
            ("zip", company.zip),
            ("city", company.city),
        )
        if not (value or "").strip()
    ]
    if not (company.qr_iban or "").strip() and not (company.iban or "").strip():
        missing.append("qr_iban or iban")
    if missing:
        raise ConfigurationError(
            f"Missing company settings: {', '.join(missing)}. Please configure them in Settings."
        )


def select_account(company: CompanySettings, kind: ReferenceKind) -> str:
    """
    Pick the creditor account matching the reference kind.

    QRR references belong on a QR-IBAN, SCOR and NON on a regular IBAN.
    The other account is used as a fallback with a warning.
    """
    qr_iban = (company.qr_iban or "").strip()
    regular_iban = (company.iban or "").strip()

    if kind == ReferenceKind.QRR:
        preferred, fallback = qr_iban, regular_iban
    else:
        preferred, fallback = regular_iban, qr_iban

    if preferred:
        return preferred

    logger.warning(
        f"No account matching reference kind {kind.value} configured, "
        f"using the other account; banks may reject the bill"
    )
    return fallback


def build_bill_payload(
    invoice: Invoice,
    company: CompanySettings,
    default_country: str = "CH",
    default_currency: str = "CHF",
) -> BillPayload:
    """
    Build the complete payload for an invoice.

    Args:
        invoice: Invoice data (id, client, amount, currency, optional debtor)
        company: Creditor settings
        default_country: Country used for unrecognised country input
        default_currency: Currency used when the invoice has none

    Returns:
        BillPayload ready for encoding and rendering

    Raises:
        ConfigurationError: Creditor identity or account missing
        EncodingError: A field cannot be encoded
    """
    validate_company(company)

    reference = select_reference(invoice.id, company.qr_reference_type)
    account = select_account(company, reference.kind)
    if reference.kind == ReferenceKind.QRR and not is_qr_iban("".join(account.split()).upper()):
        logger.warning(f"Invoice {invoice.id}: QR reference used with a non QR-IBAN account")

    creditor = PartyAddress.create(
        name=company.name,
        address=company.address,
        zip=company.zip,
        city=company.city,
        country=company.country,
        account=account,
        default_country=default_country,
    )

    debtor_fields = dict(invoice.debtor or {})
    debtor = PartyAddress.create(
        name=debtor_fields.get("name") or invoice.client,
        address=debtor_fields.get("address"),
        zip=debtor_fields.get("zip"),
        city=debtor_fields.get("city"),
        country=debtor_fields.get("country"),
        default_country=default_country,
    )

    if invoice.message:
        message = invoice.message.strip()
    elif reference.kind == ReferenceKind.NON:
        message = f"Invoice {invoice.id}"
    else:
        message = ""

    bill = BillPayload(
        currency=normalize_currency(invoice.currency, default_currency),
        amount=normalize_amount(invoice.amount),
        creditor=creditor,
        debtor=debtor,
        reference=reference,
        unstructured_message=message,
    )
    validate_field_lengths(bill)

    logger.debug(f"Built payload for invoice {invoice.id}: reference {reference.kind.value}")
    return bill
