"""
skyline.py — Skyline placement of an already-ordered sequence.

The placer never reorders: ordering quality belongs to the orderer, and
this module only turns a sequence plus rendered sizes into absolute
(x, y) positions. Each column keeps a running bottom edge (the skyline);
narrow items drop into the lowest column, wide items into the adjacent
pair whose taller edge is lowest.

Progressive loading is supported by tolerance rather than state: ids
without dimensions are skipped and reported, so callers can re-run the
placer as more images finish loading.
"""

import logging
from typing import Hashable, List, Mapping, Optional, Sequence, Tuple

from .data_models import ItemDimensions, LayoutItem, PlacementResult
from .errors import InvalidDimension, MissingDimension, ensure_positive

logger = logging.getLogger(__name__)


def span_for(is_wide: bool, column_count: int) -> int:
    """Columns an item covers. Wide items degrade to one column when only one exists."""
    return 2 if is_wide and column_count >= 2 else 1


class ColumnState:
    """Per-column bottom edges for one placement run.

    Heights only ever grow; a run starts from zeros.
    """

    def __init__(self, column_count: int):
        if column_count < 1:
            raise ValueError(f"column_count must be >= 1, got {column_count}")
        self.heights: List[float] = [0.0] * column_count

    @property
    def column_count(self) -> int:
        return len(self.heights)

    @property
    def tallest(self) -> float:
        return max(self.heights)

    def lowest_column(self) -> int:
        """Index of the shortest column, lowest index on ties."""
        best = 0
        for c in range(1, len(self.heights)):
            if self.heights[c] < self.heights[best]:
                best = c
        return best

    def best_pair(self) -> int:
        """Left index of the adjacent pair with the lowest max(h[c], h[c+1])."""
        if len(self.heights) < 2:
            raise ValueError("a column pair needs at least two columns")
        best = 0
        best_top = max(self.heights[0], self.heights[1])
        for c in range(1, len(self.heights) - 1):
            top = max(self.heights[c], self.heights[c + 1])
            if top < best_top:
                best, best_top = c, top
        return best

    def slot(self, span: int) -> Tuple[int, float]:
        """(column, y) where an item covering `span` columns would land."""
        if span >= 2:
            column = self.best_pair()
            return column, max(self.heights[column], self.heights[column + 1])
        column = self.lowest_column()
        return column, self.heights[column]

    def tallest_after(self, column: int, span: int, bottom: float) -> float:
        """Tallest column if `span` columns from `column` were raised to `bottom`."""
        others = [
            h for c, h in enumerate(self.heights)
            if not column <= c < column + span
        ]
        return max(others + [bottom])

    def occupy(self, column: int, span: int, bottom: float) -> None:
        for c in range(column, column + span):
            if bottom < self.heights[c]:
                raise ValueError(
                    f"column {c} would shrink from {self.heights[c]} to {bottom}"
                )
            self.heights[c] = bottom


class SkylinePlacer:
    """Computes absolute positions for an ordered sequence of items.

    Args:
        strict: Raise InvalidDimension for bad sizes instead of skipping
            the item. Missing dimensions are always skipped.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def place(
        self,
        ordered_ids: Sequence[Hashable],
        dimensions: Mapping[Hashable, ItemDimensions],
        column_count: int,
        column_width: float,
        gap: float,
        strict: Optional[bool] = None,
    ) -> PlacementResult:
        strict = self.strict if strict is None else strict
        if column_width <= 0:
            raise ValueError(f"column_width must be > 0, got {column_width}")
        if gap < 0:
            raise ValueError(f"gap must be >= 0, got {gap}")

        columns = ColumnState(column_count)
        result = PlacementResult()
        seen = set()

        for item_id in ordered_ids:
            if item_id in seen:
                logger.warning(f"Item {item_id!r} appears twice in ordering, keeping first")
                continue
            seen.add(item_id)

            dims = dimensions.get(item_id)
            if dims is None:
                missing = MissingDimension(item_id)
                logger.warning(f"Skipping item: {missing}")
                result.skipped.append(missing)
                continue

            try:
                ensure_positive(dims.width, "width", item_id=item_id)
                height = ensure_positive(dims.height, "height", item_id=item_id)
            except InvalidDimension as e:
                if strict:
                    raise
                logger.warning(f"Skipping item {item_id!r}: {e}")
                result.skipped.append(e)
                continue

            span = span_for(dims.is_wide, column_count)
            column, y = columns.slot(span)
            x = column * (column_width + gap)
            width = span * column_width + (span - 1) * gap

            columns.occupy(column, span, y + height + gap)
            result.layout_items.append(
                LayoutItem(
                    id=item_id,
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                    spans_columns=span,
                )
            )

        result.column_heights = list(columns.heights)
        result.container_height = max(0.0, columns.tallest - gap) if result.layout_items else 0.0
        return result


def place(
    ordered_ids: Sequence[Hashable],
    dimensions: Mapping[Hashable, ItemDimensions],
    column_count: int,
    column_width: float,
    gap: float,
    strict: bool = False,
) -> PlacementResult:
    """Convenience wrapper around SkylinePlacer.place."""
    return SkylinePlacer(strict=strict).place(
        ordered_ids, dimensions, column_count, column_width, gap
    )
