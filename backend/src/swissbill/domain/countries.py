"""
Country code normalization for bill parties.

The payload requires an ISO 3166-1 alpha-2 code. Company settings and
client records often carry full names ("Switzerland") or local spellings
("Schweiz"), so those are mapped before lookup.

Note:
    Unrecognised input falls back to the configured default country.
    This keeps bills printable for incomplete records but can silently
    misrepresent a foreign party, so every fallback is logged.
"""

import logging

from iso3166 import countries

from .errors import EncodingError

logger = logging.getLogger(__name__)


# Local spellings that are not in the ISO English short names
LOCAL_COUNTRY_NAMES = {
    "schweiz": "CH",
    "suisse": "CH",
    "svizzera": "CH",
    "svizra": "CH",
    "fürstentum liechtenstein": "LI",
}


def lookup_country(value: str) -> str | None:
    """Return the alpha-2 code for a code or name, or None if unknown."""
    value = value.strip()
    if not value:
        return None
    if value.lower() in LOCAL_COUNTRY_NAMES:
        return LOCAL_COUNTRY_NAMES[value.lower()]
    try:
        return countries.get(value).alpha2
    except KeyError:
        return None


def normalize_country(value: str | None, default: str = "CH") -> str:
    """
    Normalize a country to an uppercase ISO alpha-2 code.

    Args:
        value: Alpha-2/alpha-3/numeric code or English country name
        default: Code used when value is empty or unknown

    Returns:
        Two-letter uppercase country code

    Raises:
        EncodingError: If the default itself is not a valid country code
    """
    code = lookup_country(value or "")
    if code is not None:
        return code

    fallback = lookup_country(default or "")
    if fallback is None:
        raise EncodingError(f"Invalid default country code: {default!r}")

    if value and value.strip():
        logger.warning(f"Unrecognised country {value!r}, falling back to {fallback}")
    return fallback
