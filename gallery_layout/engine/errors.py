"""
errors.py — Error taxonomy for the masonry layout engine.

Precondition errors (InvalidDimension, UnsupportedColumnCount) are raised
loudly. Data-availability errors (MissingDimension, ItemLookupError) are
expected at runtime and recovered by the placer and the request handler.
"""

import math
from typing import Any, Optional


class LayoutError(Exception):
    """Base class for all layout engine errors."""


class InvalidDimension(LayoutError, ValueError):
    """A non-positive or non-finite aspect ratio, width or height."""

    def __init__(self, message: str, item_id: Optional[Any] = None):
        super().__init__(message)
        self.item_id = item_id


class UnsupportedColumnCount(LayoutError, ValueError):
    """The orderer was asked for fewer than two columns."""

    def __init__(self, column_count: int):
        super().__init__(f"column_count must be >= 2, got {column_count}")
        self.column_count = column_count


class MissingDimension(LayoutError, KeyError):
    """An ordering references an id absent from the dimensions map."""

    def __init__(self, item_id: Any):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"no dimensions for item {self.item_id!r}"


class ItemLookupError(LayoutError):
    """The submission store could not produce the items of an item set."""

    def __init__(self, item_set_id: Any, reason: str = ""):
        message = f"could not load items for item set {item_set_id!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.item_set_id = item_set_id


def ensure_positive(value: Any, what: str, item_id: Optional[Any] = None) -> float:
    """Return value as a float, or raise InvalidDimension."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidDimension(f"{what} must be a number, got {value!r}", item_id=item_id)
    if not math.isfinite(value) or value <= 0:
        raise InvalidDimension(f"{what} must be finite and > 0, got {value!r}", item_id=item_id)
    return float(value)
