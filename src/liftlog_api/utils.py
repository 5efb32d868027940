"""Utility functions."""
import math
from typing import Any, Optional


def to_int(s: Any) -> Optional[int]:
    """Convert a value to int, returning None if conversion fails."""
    try:
        return int(s) if s is not None else None
    except (TypeError, ValueError):
        return None


def to_number(value: Any) -> Optional[float]:
    """
    Return value as a finite float, or None.

    Booleans and numeric strings are rejected: only real JSON numbers count.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return " ".join(str(text).split())
