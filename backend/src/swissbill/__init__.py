"""
swissbill - Swiss QR-bill payment slip generation.

Derives creditor references, encodes the Swiss Payments Code payload
and renders the Receipt / Payment Part document as SVG.
"""

__version__ = "0.1.0"
