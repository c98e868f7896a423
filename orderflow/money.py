"""Conversions between yuan amounts and integer cents."""

from __future__ import annotations

import math


def convert_string_float_to_cent(s: str) -> int:
    """Parse a decimal yuan string and return it in cents, truncated toward zero."""
    if s != s.strip() or "_" in s:
        raise ValueError(f"invalid number: {s!r}")
    value = float(s) * 100
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {s!r}")
    return int(value)


def convert_cent_to_string_float(cents: int) -> str:
    """Format an amount in cents as a yuan string with two decimals."""
    return f"{cents / 100:.2f}"


def convert_cent_to_float(cents: int) -> float:
    """Return an amount in cents as yuan."""
    return cents / 100


def convert_float_to_cent(f: float) -> int:
    """Return a yuan amount in cents, truncated toward zero."""
    return int(f * 100)