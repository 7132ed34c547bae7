"""
responsive.py — Viewport helpers around the placer.

Column count comes from breakpoints, column width from the container
width, and rendered item sizes from aspect ratios. These are what a
client does before calling the placer; the service exposes them so the
placement endpoint can work from aspect ratios alone.
"""

import math
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Optional

from .classifier import AspectRatioClassifier, DEFAULT_CLASSIFIER
from .data_models import Item, ItemDimensions, OrderingVariant
from .errors import InvalidDimension
from .skyline import span_for


@dataclass(frozen=True)
class Breakpoints:
    """Screen widths (px) at which the grid changes column count."""
    mobile_breakpoint: int = 768
    tablet_breakpoint: int = 1024
    mobile_columns: int = 2
    tablet_columns: int = 3
    desktop_columns: int = 4


DEFAULT_BREAKPOINTS = Breakpoints()


def choose_column_count(screen_width: int, breakpoints: Breakpoints = DEFAULT_BREAKPOINTS) -> int:
    """Column count for a screen width; 0 (unknown, e.g. server render) means desktop."""
    if screen_width <= 0:
        return breakpoints.desktop_columns
    if screen_width < breakpoints.mobile_breakpoint:
        return breakpoints.mobile_columns
    if screen_width < breakpoints.tablet_breakpoint:
        return breakpoints.tablet_columns
    return breakpoints.desktop_columns


def column_width_for(container_width: float, column_count: int, gap: float) -> int:
    """Whole-pixel column width that fits column_count columns and their gaps."""
    if column_count < 1:
        raise ValueError(f"column_count must be >= 1, got {column_count}")
    if gap < 0:
        raise ValueError(f"gap must be >= 0, got {gap}")
    width = math.floor((container_width - (column_count - 1) * gap) / column_count)
    if width <= 0:
        raise ValueError("container too small for given columns/gap")
    return width


def variant_for_columns(column_count: int) -> OrderingVariant:
    """Precomputed ordering a viewport with column_count columns should use."""
    return OrderingVariant.TWO_COL if column_count <= 2 else OrderingVariant.FOUR_COL


def resolve_dimensions(
    items: Iterable[Item],
    column_count: int,
    column_width: float,
    gap: float,
    classifier: Optional[AspectRatioClassifier] = None,
    extra_height: float = 0,
) -> Dict[Hashable, ItemDimensions]:
    """Rendered size of each item at this column width.

    extra_height is added below the image (caption, metadata row).
    Items with an invalid aspect ratio are left out; the placer then
    reports them as missing.
    """
    classifier = classifier or DEFAULT_CLASSIFIER
    dimensions: Dict[Hashable, ItemDimensions] = {}
    for item in items:
        try:
            is_wide = classifier.is_wide(item.aspect_ratio)
        except InvalidDimension:
            continue
        span = span_for(is_wide, column_count)
        width = span * column_width + (span - 1) * gap
        dimensions[item.id] = ItemDimensions(
            width=width,
            height=round(width / item.aspect_ratio) + extra_height,
            is_wide=is_wide,
        )
    return dimensions
