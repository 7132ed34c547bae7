"""
orderer.py — Greedy best-fit ordering for masonry grids.

For a target column count the orderer simulates a skyline fill and, at
each step, picks the remaining item whose placement keeps the tallest
column lowest. Ties go to the earliest item in input order so the result
is deterministic.

Wide (two-column) images are rationed: after `max_wide_streak` wide
picks in a row the next pick must be narrow whenever a narrow item is
left. With `balance_wide` on, wide items are also pulled forward when the
narrow items left would be too few to keep the remaining wide ones apart.
"""

import logging
import math
from typing import Hashable, Iterable, List, Optional, Sequence

from .classifier import AspectRatioClassifier, DEFAULT_CLASSIFIER
from .data_models import Item, OrderItem
from .errors import UnsupportedColumnCount, ensure_positive
from .skyline import ColumnState, span_for

logger = logging.getLogger(__name__)


DEFAULT_CONTAINER_WIDTH = 1200.0
DEFAULT_GAP = 16.0
DEFAULT_MAX_WIDE_STREAK = 1


class GreedyBestFitOrderer:
    """Orders items to minimize uneven column growth.

    Args:
        container_width: Width the simulated grid is laid out in.
        gap: Gutter between columns and between stacked items.
        max_wide_streak: Most wide items allowed back to back.
        balance_wide: Reserve narrow items so wide ones stay separated.
        classifier: Decides which items span two columns.
    """

    def __init__(
        self,
        container_width: float = DEFAULT_CONTAINER_WIDTH,
        gap: float = DEFAULT_GAP,
        max_wide_streak: int = DEFAULT_MAX_WIDE_STREAK,
        balance_wide: bool = True,
        classifier: Optional[AspectRatioClassifier] = None,
    ):
        if max_wide_streak < 1:
            raise ValueError(f"max_wide_streak must be >= 1, got {max_wide_streak}")
        self.container_width = container_width
        self.gap = gap
        self.max_wide_streak = max_wide_streak
        self.balance_wide = balance_wide
        self.classifier = classifier or DEFAULT_CLASSIFIER

    def column_width(self, column_count: int) -> float:
        """W = (container_width - (N-1)*gap) / N"""
        width = (self.container_width - (column_count - 1) * self.gap) / column_count
        if width <= 0:
            raise ValueError(
                f"container width {self.container_width} too small for "
                f"{column_count} columns with gap {self.gap}"
            )
        return width

    def prepare(self, items: Iterable[Item], column_count: int) -> List[OrderItem]:
        """Annotate items with wide flag and rendered height for column_count.

        Raises InvalidDimension for an item with a bad aspect ratio, including
        one so extreme that its rendered height overflows.
        """
        if column_count < 2:
            raise UnsupportedColumnCount(column_count)
        column_width = self.column_width(column_count)

        prepared = []
        for item in items:
            item.validate()
            is_wide = self.classifier.is_wide(item.aspect_ratio)
            span = span_for(is_wide, column_count)
            width = span * column_width + (span - 1) * self.gap
            height = ensure_positive(width / item.aspect_ratio, "rendered height", item_id=item.id)
            prepared.append(OrderItem(id=item.id, is_wide=is_wide, height=height))
        return prepared

    def order_items(self, items: Sequence[Item], column_count: int) -> List[Hashable]:
        """prepare() then order()."""
        return self.order(self.prepare(items, column_count), column_count)

    def order(
        self,
        items: Sequence[OrderItem],
        column_count: int,
        max_wide_streak: Optional[int] = None,
    ) -> List[Hashable]:
        """Return the ids of items as a permutation in best-fit order.

        Raises InvalidDimension when a rendered height is not finite and positive.
        """
        if column_count < 2:
            raise UnsupportedColumnCount(column_count)
        streak_limit = self.max_wide_streak if max_wide_streak is None else max_wide_streak
        if streak_limit < 1:
            raise ValueError(f"max_wide_streak must be >= 1, got {streak_limit}")
        for item in items:
            ensure_positive(item.height, "rendered height", item_id=item.id)

        pool = list(items)
        columns = ColumnState(column_count)
        ordered: List[Hashable] = []
        wide_streak = 0

        while pool:
            candidates = self._candidates(pool, wide_streak, streak_limit)

            best = candidates[0]
            best_tallest: Optional[float] = None
            best_slot = (0, 0.0)
            best_span = 1
            for candidate in candidates:
                span = span_for(candidate.is_wide, column_count)
                column, y = columns.slot(span)
                tallest = columns.tallest_after(column, span, y + candidate.height + self.gap)
                if best_tallest is None or tallest < best_tallest:
                    best, best_tallest = candidate, tallest
                    best_slot, best_span = (column, y), span

            column, y = best_slot
            columns.occupy(column, best_span, y + best.height + self.gap)
            pool.remove(best)
            ordered.append(best.id)

            if best.is_wide:
                wide_streak += 1
            else:
                wide_streak = 0

        logger.debug(
            f"Ordered {len(ordered)} items for {column_count} columns, "
            f"final heights {[round(h, 1) for h in columns.heights]}"
        )
        return ordered

    def _candidates(
        self,
        pool: List[OrderItem],
        wide_streak: int,
        streak_limit: int,
    ) -> List[OrderItem]:
        narrow = [i for i in pool if not i.is_wide]
        wide = [i for i in pool if i.is_wide]

        if wide_streak >= streak_limit:
            return narrow or pool

        # Separating k wide items needs ceil(k / limit) - 1 narrow ones after
        # this pick; if spending a narrow item now breaks that, go wide.
        if self.balance_wide and wide and len(narrow) < math.ceil(len(wide) / streak_limit):
            return wide

        return pool
