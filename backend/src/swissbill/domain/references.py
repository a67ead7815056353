"""
Creditor reference checksums for the Swiss QR-bill.

Two reference schemes can be carried by a bill:
1. QRR - 27-digit Swiss QR reference, checked with the recursive mod10 table
2. SCOR - ISO 11649 structured creditor reference, checked with ISO 7064 mod97-10

Design Decisions:
- Generators are total: any input, including empty strings, yields a
  well-formed reference
- The SCOR body is kept exactly as supplied (whitespace removed only)
- Verification functions are independent of the generators so that
  references coming from outside can be checked the same way
"""

import re
from enum import Enum


class ReferenceKind(Enum):
    """Reference type as written into the payment payload."""
    QRR = "QRR"
    SCOR = "SCOR"
    NON = "NON"


# Recursive mod10 transition table
MOD10_TABLE = (0, 9, 4, 6, 8, 2, 7, 1, 3, 5)

QR_REFERENCE_BODY_LENGTH = 26
QR_REFERENCE_LENGTH = 27
SCOR_PREFIX = "RF"


def qr_check_digit(digits: str) -> int:
    """
    Compute the mod10 check digit over a string of digits.

    Walks the transition table: carry = table[(carry + digit) % 10],
    then returns (10 - carry) % 10.
    """
    carry = 0
    for char in digits:
        carry = MOD10_TABLE[(carry + int(char)) % 10]
    return (10 - carry) % 10


def generate_qr_reference(raw_input: str) -> str:
    """
    Build a 27-digit QR reference from arbitrary input.

    Non-digit characters are stripped, the result is left-padded with
    zeros to 26 digits (only the last 26 are kept when longer) and the
    mod10 check digit is appended.

    Example:
        >>> generate_qr_reference("INV-0001")
        '000000000000000000000000011'
    """
    digits = re.sub(r"[^0-9]", "", raw_input or "")
    body = digits.zfill(QR_REFERENCE_BODY_LENGTH)[-QR_REFERENCE_BODY_LENGTH:]
    return f"{body}{qr_check_digit(body)}"


def is_valid_qr_reference(value: str) -> bool:
    """True if value is 27 digits and its last digit verifies the first 26."""
    if len(value) != QR_REFERENCE_LENGTH or not (value.isascii() and value.isdigit()):
        return False
    return qr_check_digit(value[:-1]) == int(value[-1])


def _expand_alphanumeric(value: str) -> str:
    """
    Replace letters by their ISO 7064 numeric value.

    Digits pass through, A-Z map to 10-35 and a-z map to 10-35 as well.
    Any other character is dropped.
    """
    parts: list[str] = []
    for char in value:
        code = ord(char)
        if 48 <= code <= 57:
            parts.append(char)
        elif 65 <= code <= 90:
            parts.append(str(code - 55))
        elif 97 <= code <= 122:
            parts.append(str(code - 87))
    return "".join(parts)


def generate_scor_reference(raw_input: str) -> str:
    """
    Build an ISO 11649 creditor reference ("RF" + check digits + input).

    Whitespace is removed from the input, "RF00" is appended, the string
    is expanded to digits and the check digits are 98 - (number mod 97).

    Example:
        >>> generate_scor_reference("539007547034")
        'RF18539007547034'
    """
    raw = re.sub(r"\s", "", raw_input or "")
    remainder = int(_expand_alphanumeric(f"{raw}{SCOR_PREFIX}00")) % 97
    return f"{SCOR_PREFIX}{98 - remainder:02d}{raw}"


def is_valid_scor_reference(value: str) -> bool:
    """
    Verify an ISO 11649 reference.

    The first four characters are moved to the end and the expanded
    number must leave a remainder of 1 modulo 97.
    """
    if len(value) < 5 or not value.startswith(SCOR_PREFIX):
        return False
    if not (value.isascii() and value.isalnum()):
        return False
    if not value[2:4].isdigit():
        return False
    rotated = value[4:] + value[:4]
    return int(_expand_alphanumeric(rotated)) % 97 == 1
