"""
SVG layout of the QR-bill (Receipt + Payment Part).

The document is a fixed 210mm x 105mm canvas in millimetre user units:

    0        62  67            113 118                      210
    +---------+---------------------------------------------+
    | Receipt |  Payment part  |  Account / Payable to      |
    |         |  +----------+  |  Reference                 |
    |         |  | QR 46x46 |  |  Additional information    |
    |         |  +----------+  |  Payable by                |
    |         |  Currency/Amount                            |
    +---------+---------------------------------------------+

Design Decisions:
- Receipt and information column share one block builder, so both
  panels always show the same data from one BillPayload
- Empty values are skipped rather than drawn as blank rows
- Swiss cross proportions are fixed constants, never configurable
- The output is self-contained: no images, links or web fonts
"""

import logging
import textwrap
from collections.abc import Mapping
from types import MappingProxyType
from typing import NamedTuple

import svgwrite
from svgwrite.container import Group

from swissbill.domain.errors import MatrixGenerationError
from swissbill.domain.formatting import assemble_address_block, format_amount_display
from swissbill.domain.models import (
    DOCUMENT_HEIGHT_MM,
    DOCUMENT_WIDTH_MM,
    RECEIPT_WIDTH_MM,
    BillPayload,
    RenderedDocument,
)

from .matrix import QRSymbolProducer

logger = logging.getLogger(__name__)


# Geometry (mm)
MARGIN = 5
RECEIPT_X = MARGIN
PAYMENT_X = RECEIPT_WIDTH_MM + MARGIN          # 67
TITLE_Y = 5
QR_SIZE = 46
QR_X = PAYMENT_X
QR_Y = 15
AMOUNT_Y = QR_Y + QR_SIZE + MARGIN             # 66
INFO_X = PAYMENT_X + QR_SIZE + MARGIN          # 118
INFO_Y = 5
RECEIPT_BLOCKS_Y = 12
RECEIPT_AMOUNT_Y = 75
ACCEPTANCE_POINT_Y = 86
AMOUNT_COLUMN_OFFSET = 15

# Typography (mm)
FONT_FAMILY = "Helvetica, Arial, sans-serif"
FONT_SIZE_TITLE = 3.8
FONT_SIZE_LABEL = 2.5
FONT_SIZE_VALUE = 3.0
LINE_HEIGHT = 3.5
BLOCK_SPACING = 2.0

# Characters per printed line
MAX_CHARS_RECEIPT_LINE = 34
MAX_CHARS_PAYMENT_LINE = 48

SWISS_RED = "#D52B1E"


class CrossLayer(NamedTuple):
    """One rectangle of the Swiss cross, centred on the QR symbol."""
    width: float
    height: float
    fill: str


# Painted in order: mask, border, inner border, red field, cross bars
SWISS_CROSS_LAYERS = (
    CrossLayer(7.0, 7.0, "white"),
    CrossLayer(6.6, 6.6, "black"),
    CrossLayer(6.0, 6.0, "white"),
    CrossLayer(5.2, 5.2, SWISS_RED),
    CrossLayer(1.15, 3.85, "white"),
    CrossLayer(3.85, 1.15, "white"),
)

DEFAULT_LABELS = MappingProxyType({
    "receipt": "Empfangsschein",
    "payment_part": "Zahlteil",
    "account": "Konto / Zahlbar an",
    "reference": "Referenz",
    "additional_information": "Zusätzliche Informationen",
    "payable_by": "Zahlbar durch",
    "currency": "Währung",
    "amount": "Betrag",
    "acceptance_point": "Annahmestelle",
})


def _text(
    dwg: svgwrite.Drawing,
    content: str,
    x: float,
    y: float,
    size: float,
    bold: bool = False,
    anchor: str = "start",
):
    """Top-aligned text element."""
    return dwg.text(
        content,
        insert=(x, y),
        font_family=FONT_FAMILY,
        font_size=size,
        font_weight="bold" if bold else "normal",
        text_anchor=anchor,
        dominant_baseline="hanging",
    )


def _wrap(lines: list[str], max_chars: int) -> list[str]:
    """Split long lines on spaces so they stay inside their panel."""
    wrapped: list[str] = []
    for line in lines:
        wrapped.extend(textwrap.wrap(line, max_chars) or [line])
    return wrapped


def _block(
    dwg: svgwrite.Drawing,
    x: float,
    y: float,
    label: str,
    values: list[str],
    max_chars: int,
) -> tuple[Group | None, float]:
    """
    Draw a heading with its value lines.

    Returns the group (None when there is nothing to show) and the
    y position where the next block starts.
    """
    values = [value for value in values if value]
    if not values:
        return None, y

    group = dwg.g()
    group.add(_text(dwg, label, x, y, FONT_SIZE_LABEL, bold=True))
    y += LINE_HEIGHT
    for line in _wrap(values, max_chars):
        group.add(_text(dwg, line, x, y, FONT_SIZE_VALUE))
        y += LINE_HEIGHT
    return group, y + BLOCK_SPACING


def _information_blocks(
    dwg: svgwrite.Drawing,
    payload: BillPayload,
    labels: Mapping[str, str],
    x: float,
    y: float,
    max_chars: int,
    include_message: bool,
) -> Group:
    """Account, reference, message and debtor blocks stacked from (x, y)."""
    sections = [
        (labels["account"], assemble_address_block(payload.creditor)),
        (labels["reference"], [payload.reference.display]),
    ]
    if include_message:
        sections.append((labels["additional_information"], [payload.unstructured_message]))
    sections.append((labels["payable_by"], assemble_address_block(payload.debtor, include_account=False)))

    group = dwg.g()
    for label, values in sections:
        block, y = _block(dwg, x, y, label, values, max_chars)
        if block is not None:
            group.add(block)
    return group


def _amount_block(
    dwg: svgwrite.Drawing,
    payload: BillPayload,
    labels: Mapping[str, str],
    x: float,
    y: float,
) -> Group:
    """Currency and amount side by side."""
    group = dwg.g()
    amount_x = x + AMOUNT_COLUMN_OFFSET
    group.add(_text(dwg, labels["currency"], x, y, FONT_SIZE_LABEL, bold=True))
    group.add(_text(dwg, payload.currency, x, y + LINE_HEIGHT, FONT_SIZE_VALUE))
    group.add(_text(dwg, labels["amount"], amount_x, y, FONT_SIZE_LABEL, bold=True))
    group.add(_text(dwg, format_amount_display(payload.amount), amount_x, y + LINE_HEIGHT, FONT_SIZE_VALUE))
    return group


def draw_swiss_cross(dwg: svgwrite.Drawing, cx: float, cy: float) -> Group:
    """Swiss cross overlay centred on (cx, cy)."""
    group = dwg.g(id="swiss-cross")
    group.translate(cx, cy)
    for layer in SWISS_CROSS_LAYERS:
        group.add(dwg.rect(
            insert=(-layer.width / 2, -layer.height / 2),
            size=(layer.width, layer.height),
            fill=layer.fill,
        ))
    return group


def render_qr_symbol(
    dwg: svgwrite.Drawing,
    payload: BillPayload,
    producer: QRSymbolProducer,
) -> Group:
    """
    Draw the QR symbol for a payload at its fixed position.

    The producer's path is scaled uniformly into the 46mm square and the
    Swiss cross is drawn over its centre.

    Raises:
        MatrixGenerationError: Propagated from the producer, or raised for
            an empty matrix
    """
    matrix = producer.encode(payload.encoded_text)
    if matrix.native_unit_count <= 0:
        raise MatrixGenerationError("QR symbol producer returned an empty matrix")

    scale = QR_SIZE / matrix.native_unit_count

    group = dwg.g(id="qr-symbol")
    group.translate(QR_X, QR_Y)
    group.add(dwg.rect(insert=(0, 0), size=(QR_SIZE, QR_SIZE), fill="white"))

    modules = dwg.g()
    modules.scale(scale)
    modules.add(dwg.path(d=matrix.path, fill="black"))
    group.add(modules)

    group.add(draw_swiss_cross(dwg, QR_SIZE / 2, QR_SIZE / 2))
    return group


def render_bill(
    payload: BillPayload,
    producer: QRSymbolProducer,
    labels: Mapping[str, str] | None = None,
) -> RenderedDocument:
    """
    Render the complete QR-bill document.

    Args:
        payload: Bill data; both panels are drawn from it
        producer: QR symbol producer
        labels: Optional headings overriding the German defaults

    Returns:
        RenderedDocument holding the SVG string and the payload
    """
    text_labels = {**DEFAULT_LABELS, **(labels or {})}

    dwg = svgwrite.Drawing(
        size=(f"{DOCUMENT_WIDTH_MM}mm", f"{DOCUMENT_HEIGHT_MM}mm"),
        viewBox=f"0 0 {DOCUMENT_WIDTH_MM} {DOCUMENT_HEIGHT_MM}",
    )
    dwg.add(dwg.rect(insert=(0, 0), size=(DOCUMENT_WIDTH_MM, DOCUMENT_HEIGHT_MM), fill="white"))

    # Cut line
    dwg.add(dwg.line(
        start=(RECEIPT_WIDTH_MM, 0),
        end=(RECEIPT_WIDTH_MM, DOCUMENT_HEIGHT_MM),
        stroke="black",
        stroke_width=0.25,
        stroke_dasharray="1 1",
        id="cut-line",
    ))
    dwg.add(_text(dwg, "✂", RECEIPT_WIDTH_MM, 1, 4, anchor="middle"))

    # Receipt
    receipt = dwg.add(dwg.g(id="receipt"))
    receipt.add(_text(dwg, text_labels["receipt"], RECEIPT_X, TITLE_Y, FONT_SIZE_TITLE, bold=True))
    receipt.add(_information_blocks(
        dwg, payload, text_labels, RECEIPT_X, RECEIPT_BLOCKS_Y,
        MAX_CHARS_RECEIPT_LINE, include_message=False,
    ))
    receipt.add(_amount_block(dwg, payload, text_labels, RECEIPT_X, RECEIPT_AMOUNT_Y))
    receipt.add(_text(
        dwg, text_labels["acceptance_point"], RECEIPT_WIDTH_MM - MARGIN, ACCEPTANCE_POINT_Y,
        FONT_SIZE_LABEL, bold=True, anchor="end",
    ))

    # Payment part
    payment = dwg.add(dwg.g(id="payment-part"))
    payment.add(_text(dwg, text_labels["payment_part"], PAYMENT_X, TITLE_Y, FONT_SIZE_TITLE, bold=True))
    payment.add(render_qr_symbol(dwg, payload, producer))
    payment.add(_amount_block(dwg, payload, text_labels, PAYMENT_X, AMOUNT_Y))
    payment.add(_information_blocks(
        dwg, payload, text_labels, INFO_X, INFO_Y,
        MAX_CHARS_PAYMENT_LINE, include_message=True,
    ))

    svg = dwg.tostring()
    logger.info(
        f"Rendered QR-bill: reference {payload.reference.kind.value}, "
        f"{payload.currency} {payload.amount}, {len(svg)} bytes"
    )
    return RenderedDocument(svg=svg, payload=payload)
