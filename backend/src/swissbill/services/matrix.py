"""
QR symbol production for the payment part.

The renderer only depends on the QRSymbolProducer protocol: given the
payload text it returns one SVG path in module units plus the number of
modules per side. QRCodeSymbolProducer implements it with the `qrcode`
library.

Swiss implementation guidelines require:
- Error correction level M
- At most version 25 (117 x 117 modules)
- UTF-8 encoded data
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError

from swissbill.domain.errors import MatrixGenerationError

logger = logging.getLogger(__name__)


MAX_SYMBOL_VERSION = 25


@dataclass(frozen=True)
class QRMatrix:
    """A QR symbol as a single SVG path in module coordinates."""
    path: str
    native_unit_count: int


class QRSymbolProducer(Protocol):
    """Anything that can turn payload text into a QR symbol path."""

    def encode(self, text: str) -> QRMatrix:
        ...


def matrix_to_path(matrix: list[list[bool]]) -> str:
    """
    Convert a module matrix into SVG path data.

    Horizontal runs of dark modules are merged into one rectangle each,
    so the path stays compact for large symbols.
    """
    commands: list[str] = []
    for y, row in enumerate(matrix):
        x = 0
        while x < len(row):
            if not row[x]:
                x += 1
                continue
            start = x
            while x < len(row) and row[x]:
                x += 1
            run = x - start
            commands.append(f"M{start},{y}h{run}v1h-{run}z")
    return "".join(commands)


class QRCodeSymbolProducer:
    """
    QR symbol producer backed by the `qrcode` library.

    Example:
        producer = QRCodeSymbolProducer()
        matrix = producer.encode(payload.encoded_text)
        # matrix.path is in module units, matrix.native_unit_count per side
    """

    def __init__(self, max_version: int = MAX_SYMBOL_VERSION) -> None:
        self.max_version = max_version

    def encode(self, text: str) -> QRMatrix:
        """
        Encode text into a QR matrix without quiet zone.

        Raises:
            MatrixGenerationError: If the text does not fit the symbol
        """
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_M,
            border=0,
        )
        qr.add_data(text)
        try:
            # qrcode 8 raises ValueError instead of DataOverflowError past version 40
            qr.make(fit=True)
        except (DataOverflowError, ValueError) as e:
            raise MatrixGenerationError(f"Payload too large for a QR symbol: {e}") from e

        if qr.version > self.max_version:
            raise MatrixGenerationError(
                f"Payload needs QR version {qr.version}, maximum allowed is {self.max_version}; "
                f"shorten the message or address fields"
            )

        matrix = qr.get_matrix()
        logger.debug(f"QR symbol version {qr.version}, {len(matrix)} modules per side")
        return QRMatrix(path=matrix_to_path(matrix), native_unit_count=len(matrix))
