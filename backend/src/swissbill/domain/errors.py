"""Exceptions raised while building or rendering a QR-bill."""


class QRBillError(Exception):
    """Base exception for all QR-bill generation errors."""

    pass


class ConfigurationError(QRBillError):
    """Raised when the creditor identity or account is missing."""

    pass


class EncodingError(QRBillError):
    """Raised when a field cannot be encoded into the payment payload."""

    pass


class MatrixGenerationError(QRBillError):
    """Raised when the QR symbol cannot be produced for a payload."""

    pass
