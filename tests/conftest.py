"""
Pytest configuration & fixtures shared by the QR-bill tests.
"""

from decimal import Decimal

import pytest

from swissbill.domain.errors import MatrixGenerationError
from swissbill.domain.models import CompanySettings, Invoice
from swissbill.services.matrix import QRMatrix

QR_IBAN = "CH44 3199 9123 0008 8901 2"
IBAN = "CH93 0076 2011 6238 5295 7"


class FakeSymbolProducer:
    """Returns a fixed matrix and records every payload it was given."""

    def __init__(self, native_unit_count: int = 25, error: Exception | None = None) -> None:
        self.native_unit_count = native_unit_count
        self.error = error
        self.calls: list[str] = []

    def encode(self, text: str) -> QRMatrix:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return QRMatrix(path="M0,0h7v1h-7z", native_unit_count=self.native_unit_count)


@pytest.fixture
def company() -> CompanySettings:
    return CompanySettings(
        name="Velo Werkstatt AG",
        address="Bahnhofstrasse 12",
        zip="8001",
        city="Zürich",
        country="Switzerland",
        qr_iban=QR_IBAN,
        iban=IBAN,
        qr_reference_type="QR",
    )


@pytest.fixture
def invoice() -> Invoice:
    return Invoice(
        id="INV-0001",
        client="Anna Muster",
        amount=Decimal("1250.5"),
        currency="CHF",
        debtor={
            "address": "Rue du Rhône 45",
            "zip": "1950",
            "city": "Sion",
            "country": "CH",
        },
    )


@pytest.fixture
def producer() -> FakeSymbolProducer:
    return FakeSymbolProducer()


@pytest.fixture
def failing_producer() -> FakeSymbolProducer:
    return FakeSymbolProducer(error=MatrixGenerationError("Payload too large for a QR symbol"))


@pytest.fixture
def make_producer():
    return FakeSymbolProducer
