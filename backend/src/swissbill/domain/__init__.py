"""
Domain package - Core QR-bill logic with no I/O.

This package contains the reference checksums, formatting rules and
the Swiss Payments Code encoder. Everything here is a pure function
of its inputs.
"""
