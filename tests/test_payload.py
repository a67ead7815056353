"""
Tests for Swiss Payments Code payload building and encoding.

Run with: pytest tests/test_payload.py -v
"""

import logging
import re
from dataclasses import replace
from decimal import Decimal

import pytest

from swissbill.domain.countries import normalize_country
from swissbill.domain.errors import ConfigurationError, EncodingError
from swissbill.domain.models import (
    BillPayload,
    Invoice,
    PartyAddress,
    PaymentReference,
    ReferenceType,
)
from swissbill.domain.payload import (
    SPC_LINE_COUNT,
    build_bill_payload,
    is_qr_iban,
    normalize_amount,
    select_reference,
)
from swissbill.domain.references import ReferenceKind


def parse_spc(text: str) -> dict:
    """Read an SPC block back by line position."""
    lines = text.split("\r\n")
    return {
        "header": lines[0:3],
        "account": lines[3],
        "creditor": lines[4:11],
        "ultimate_creditor": lines[11:18],
        "amount": lines[18],
        "currency": lines[19],
        "debtor": lines[20:27],
        "reference_type": lines[27],
        "reference": lines[28],
        "message": lines[29],
        "trailer": lines[30],
        "billing_information": lines[31],
        "alternative_scheme": lines[32],
        "line_count": len(lines),
    }


# =============================================================================
# Encoding
# =============================================================================


def test_encoded_text_round_trip(invoice, company):
    payload = build_bill_payload(invoice, company)
    parsed = parse_spc(payload.encoded_text)

    assert parsed["line_count"] == SPC_LINE_COUNT
    assert parsed["header"] == ["SPC", "0200", "1"]
    assert parsed["account"] == "CH4431999123000889012"
    assert parsed["creditor"] == ["K", "Velo Werkstatt AG", "Bahnhofstrasse 12", "8001 Zürich", "", "", "CH"]
    assert parsed["ultimate_creditor"] == [""] * 7
    assert parsed["amount"] == "1250.50"
    assert parsed["currency"] == "CHF"
    assert parsed["debtor"] == ["K", "Anna Muster", "Rue du Rhône 45", "1950 Sion", "", "", "CH"]
    assert parsed["reference_type"] == "QRR"
    assert parsed["reference"] == "000000000000000000000000011"
    assert parsed["message"] == ""
    assert parsed["trailer"] == "EPD"
    assert parsed["billing_information"] == ""
    assert parsed["alternative_scheme"] == ""


def test_lines_joined_with_crlf(invoice, company):
    payload = build_bill_payload(invoice, company)

    assert "\r\n".join(payload.lines) == payload.encoded_text
    assert "\n" not in payload.encoded_text.replace("\r\n", "")


def test_amount_line_format(invoice, company):
    payload = build_bill_payload(replace(invoice, amount=Decimal("1234567")), company)

    assert re.fullmatch(r"\d+\.\d{2}", payload.lines[18])
    assert payload.lines[18] == "1234567.00"


def test_amount_rounds_half_up():
    assert normalize_amount(Decimal("10.005")) == Decimal("10.01")
    assert normalize_amount(0) == Decimal("0.00")


@pytest.mark.parametrize("amount", [Decimal("-1"), Decimal("1000000000"), "abc"])
def test_amount_out_of_range(amount):
    with pytest.raises(EncodingError):
        normalize_amount(amount)


def test_empty_debtor_gives_blank_lines(invoice, company):
    payload = build_bill_payload(replace(invoice, client="", debtor=None), company)

    assert len(payload.lines) == SPC_LINE_COUNT
    assert payload.lines[20:27] == [""] * 7


def test_payload_amount_must_have_two_decimals(invoice, company):
    payload = build_bill_payload(invoice, company)

    with pytest.raises(EncodingError):
        replace(payload, amount=Decimal("1.5"))


# =============================================================================
# Company settings
# =============================================================================


def test_missing_company_fields(invoice, company):
    with pytest.raises(ConfigurationError) as exc_info:
        build_bill_payload(invoice, replace(company, name="", city=" "))

    assert "name" in str(exc_info.value)
    assert "city" in str(exc_info.value)


def test_missing_accounts(invoice, company):
    with pytest.raises(ConfigurationError, match="qr_iban or iban"):
        build_bill_payload(invoice, replace(company, qr_iban="", iban=""))


def test_qr_reference_uses_qr_iban(invoice, company):
    payload = build_bill_payload(invoice, company)

    assert payload.creditor.account == "CH4431999123000889012"
    assert is_qr_iban(payload.creditor.account)


def test_scor_reference_uses_regular_iban(invoice, company):
    payload = build_bill_payload(invoice, replace(company, qr_reference_type="SCOR"))

    assert payload.reference.kind == ReferenceKind.SCOR
    assert payload.reference.value == "RF40INV0001"
    assert payload.creditor.account == "CH9300762011623852957"
    assert not is_qr_iban(payload.creditor.account)


def test_account_fallback_logs_warning(invoice, company, caplog):
    with caplog.at_level(logging.WARNING):
        payload = build_bill_payload(invoice, replace(company, qr_reference_type="SCOR", iban=""))

    assert payload.creditor.account == "CH4431999123000889012"
    assert "No account matching reference kind SCOR" in caplog.text


# =============================================================================
# References and messages
# =============================================================================


def test_select_reference_unknown_type_is_non():
    reference = select_reference("INV-0001", "bogus")

    assert reference.kind == ReferenceKind.NON
    assert reference.value == ""
    assert ReferenceType.parse(None) == ReferenceType.NON


def test_non_reference_message_defaults_to_invoice_id(invoice, company):
    payload = build_bill_payload(invoice, replace(company, qr_reference_type="NON"))

    assert payload.lines[27] == "NON"
    assert payload.lines[28] == ""
    assert payload.lines[29] == "Invoice INV-0001"


def test_explicit_message_is_kept(invoice, company):
    payload = build_bill_payload(replace(invoice, message="  March rent  "), company)

    assert payload.unstructured_message == "March rent"


def test_message_too_long(invoice, company):
    with pytest.raises(EncodingError, match="unstructured_message"):
        build_bill_payload(replace(invoice, message="x" * 141), company)


def test_scor_reference_too_long(invoice, company):
    long_id = "A" * 22
    with pytest.raises(EncodingError, match="reference"):
        build_bill_payload(replace(invoice, id=long_id), replace(company, qr_reference_type="SCOR"))


def test_invalid_payment_reference():
    with pytest.raises(EncodingError):
        PaymentReference(ReferenceKind.QRR, "123")
    with pytest.raises(EncodingError):
        PaymentReference(ReferenceKind.NON, "RF18539007547034")


# =============================================================================
# Parties
# =============================================================================


def test_long_fields_truncated(invoice, company):
    payload = build_bill_payload(replace(invoice, client="N" * 100), company)

    assert payload.debtor.name == "N" * 70


def test_zip_city_too_long(invoice, company):
    debtor = {"name": "Anna", "zip": "9" * 16, "city": "C" * 70, "country": "CH"}

    with pytest.raises(EncodingError, match="debtor.zip_city"):
        build_bill_payload(replace(invoice, debtor=debtor), company)


def test_unsupported_currency(invoice, company):
    with pytest.raises(EncodingError, match="USD"):
        build_bill_payload(replace(invoice, currency="usd"), company)


def test_currency_default_and_case(invoice, company):
    assert build_bill_payload(replace(invoice, currency=""), company, default_currency="EUR").currency == "EUR"
    assert build_bill_payload(replace(invoice, currency="eur"), company).currency == "EUR"


def test_country_names_normalized():
    assert normalize_country("Switzerland") == "CH"
    assert normalize_country("Schweiz") == "CH"
    assert normalize_country("li") == "LI"
    assert normalize_country("DEU") == "DE"


def test_unknown_country_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        assert normalize_country("Atlantis") == "CH"

    assert "Atlantis" in caplog.text


def test_empty_country_uses_default_silently(caplog):
    with caplog.at_level(logging.WARNING):
        assert normalize_country("", default="LI") == "LI"

    assert caplog.text == ""


def test_invalid_default_country():
    with pytest.raises(EncodingError):
        normalize_country("Atlantis", default="XX")


def test_party_rejects_lowercase_country():
    with pytest.raises(EncodingError):
        PartyAddress(name="A", address="", zip="", city="", country="ch")


def test_debtor_country_from_invoice(company):
    invoice = Invoice(
        id="42",
        client="Hans Beispiel",
        amount=Decimal("10"),
        debtor={"city": "Vaduz", "country": "Liechtenstein"},
    )
    payload = build_bill_payload(invoice, company)

    assert payload.debtor.country == "LI"
    assert isinstance(payload, BillPayload)


# =============================================================================
# Edge input
# =============================================================================


@pytest.mark.parametrize("amount", [Decimal("-0"), Decimal("-0.001"), "-0.004"])
def test_negative_zero_amount_encoded_unsigned(amount):
    value = normalize_amount(amount)

    assert value == Decimal("0.00")
    assert not value.is_signed()
    assert str(value) == "0.00"


def test_negative_zero_amount_in_payload(invoice, company):
    payload = build_bill_payload(replace(invoice, amount=Decimal("-0.001")), company)

    assert payload.lines[18] == "0.00"


@pytest.mark.parametrize("amount", ["NaN", "Infinity"])
def test_non_finite_amount(amount):
    with pytest.raises(EncodingError):
        normalize_amount(amount)


def test_payload_rejects_signed_amount(invoice, company):
    payload = build_bill_payload(invoice, company)

    with pytest.raises(EncodingError):
        replace(payload, amount=Decimal("-0.00"))


@pytest.mark.parametrize("invoice_id", ["INV-٤٢", "INV-１２３"])
def test_qr_reference_from_non_ascii_id(invoice_id):
    reference = select_reference(invoice_id, "QR")

    assert reference.value.isascii()
    assert reference.value == "0" * 27


def test_scor_reference_needs_letters_or_digits(invoice, company):
    with pytest.raises(EncodingError, match="no letters or digits"):
        select_reference("--/--", "SCOR")
    with pytest.raises(EncodingError, match="no letters or digits"):
        build_bill_payload(replace(invoice, id="#-#"), replace(company, qr_reference_type="SCOR"))


def test_non_ascii_iid_is_not_qr_iban():
    assert not is_qr_iban("CH44３１９９９123000889012")
