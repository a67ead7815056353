"""
QR-bill orchestrator service.

Coordinates the full generation pipeline:
1. Creditor validation and party normalization
2. Reference derivation
3. SPC payload encoding
4. QR symbol production
5. SVG layout

This is the primary interface for bill generation. Generation is
all-or-nothing: every error propagates and nothing is retried, since
the same input always fails the same way.
"""

import logging
from collections.abc import Mapping

from swissbill.domain.models import BillPayload, CompanySettings, Invoice, RenderedDocument
from swissbill.domain.payload import build_bill_payload

from .layout import render_bill
from .matrix import QRCodeSymbolProducer, QRSymbolProducer

logger = logging.getLogger(__name__)


class QRBillService:
    """
    Builds and renders QR-bills from invoice and company data.

    Example:
        service = QRBillService(default_country="CH")

        document = service.render(invoice, company)
        svg = document.svg
    """

    def __init__(
        self,
        producer: QRSymbolProducer | None = None,
        default_country: str = "CH",
        default_currency: str = "CHF",
        labels: Mapping[str, str] | None = None,
    ) -> None:
        """
        Initialize the bill service.

        Args:
            producer: QR symbol producer (qrcode-backed if None)
            default_country: Country used when a party's country is unknown
            default_currency: Currency used when an invoice has none
            labels: Optional panel headings overriding the defaults
        """
        self.producer = producer or QRCodeSymbolProducer()
        self.default_country = default_country
        self.default_currency = default_currency
        self.labels = labels

    def build_payload(self, invoice: Invoice, company: CompanySettings) -> BillPayload:
        """Validate the inputs and build the bill payload."""
        logger.info(f"Building QR-bill payload for invoice {invoice.id}")
        return build_bill_payload(
            invoice,
            company,
            default_country=self.default_country,
            default_currency=self.default_currency,
        )

    def render_payload(self, payload: BillPayload) -> RenderedDocument:
        """Render an already built payload."""
        return render_bill(payload, self.producer, labels=self.labels)

    def render(self, invoice: Invoice, company: CompanySettings) -> RenderedDocument:
        """
        Build and render the QR-bill for an invoice.

        Raises:
            ConfigurationError: Creditor identity or account missing
            EncodingError: A field cannot be encoded
            MatrixGenerationError: The payload does not fit a QR symbol
        """
        payload = self.build_payload(invoice, company)
        document = self.render_payload(payload)
        logger.info(f"Rendered QR-bill for invoice {invoice.id}")
        return document
