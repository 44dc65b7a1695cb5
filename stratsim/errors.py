"""
Exceptions raised to callers of the simulator.

The engine has a single caller-facing failure: malformed input.  It is
raised before any simulation state is created, so a failed call never
leaves partial results behind.
"""

from __future__ import annotations


class InvalidInput(ValueError):
    """Raised for empty or too-short candle sequences and malformed settings."""
