"""
Services package - QR symbol production, layout and orchestration.
"""

from .billing import QRBillService
from .matrix import QRCodeSymbolProducer, QRMatrix, QRSymbolProducer

__all__ = ["QRBillService", "QRCodeSymbolProducer", "QRMatrix", "QRSymbolProducer"]
