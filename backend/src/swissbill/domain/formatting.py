"""
Text formatting for the encoded payload and the printed panels.

The payload and the human-readable panels follow different rules:
- Payload amounts: fixed 2 decimals, "." separator, never grouped
- Display amounts: 2 decimals with a space as thousands separator
- References are grouped for reading but encoded compact

Design Decisions:
- Formatting never depends on the process locale
- Display helpers round-trip: removing spaces restores the encoded value
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from stdnum import iban

from .references import ReferenceKind

if TYPE_CHECKING:
    from .models import PartyAddress


# QRR display grouping (27 digits)
QRR_GROUPS = (2, 5, 5, 5, 5, 5)
SCOR_GROUP_SIZE = 4


def truncate(value: str | None, limit: int) -> str:
    """Strip surrounding whitespace and cut to at most `limit` characters."""
    return (value or "").strip()[:limit]


def format_amount_for_payload(amount: Decimal) -> str:
    """
    Format an amount for the encoded payload.

    Example:
        >>> format_amount_for_payload(Decimal("1234.5"))
        '1234.50'
    """
    return f"{amount:.2f}"


def format_amount_display(amount: Decimal) -> str:
    """
    Format an amount for the printed panels.

    Example:
        >>> format_amount_display(Decimal("1234567.5"))
        '1 234 567.50'
    """
    return f"{amount:,.2f}".replace(",", " ")


def format_reference_display(value: str, kind: ReferenceKind) -> str:
    """
    Group a reference for display.

    QRR: groups of 2-5-5-5-5-5 digits (27 digits only, otherwise compact).
    SCOR: blocks of 4 characters from the left.
    NON: returned verbatim.
    """
    if not value:
        return ""

    if kind == ReferenceKind.QRR:
        clean = "".join(value.split())
        if len(clean) != sum(QRR_GROUPS):
            return clean
        groups: list[str] = []
        start = 0
        for size in QRR_GROUPS:
            groups.append(clean[start:start + size])
            start += size
        return " ".join(groups)

    if kind == ReferenceKind.SCOR:
        return " ".join(
            value[i:i + SCOR_GROUP_SIZE] for i in range(0, len(value), SCOR_GROUP_SIZE)
        )

    return value


def format_account_display(account: str) -> str:
    """Format an IBAN / QR-IBAN in blocks of 4 characters."""
    if not account:
        return ""
    return iban.format(account)


def assemble_address_block(party: "PartyAddress", include_account: bool = True) -> list[str]:
    """
    Build the printed lines for a party.

    Order: account (if requested), name, address, "{zip} {city}".
    Empty entries are dropped so that missing fields leave no gaps.
    """
    lines = [
        format_account_display(party.account) if include_account else "",
        party.name,
        party.address,
        party.zip_city,
    ]
    return [line for line in lines if line]
