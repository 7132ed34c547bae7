"""
handler.py — Entry point that turns an item-set id into orderings.

Looks the items up in the submission store, fingerprints the set, and
serves both column variants through the ordering cache. Any failure on
the way degrades to natural order with source "fallback"; nothing raises
past get_ordering.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence

from gallery_layout.db.cache import OrderingCache
from gallery_layout.db.store import SubmissionStore
from gallery_layout.engine.classifier import AspectRatioClassifier
from gallery_layout.engine.data_models import (
    Item,
    ItemDimensions,
    ItemSet,
    Ordering,
    OrderingVariant,
    PlacementResult,
)
from gallery_layout.engine.errors import InvalidDimension
from gallery_layout.engine.orderer import GreedyBestFitOrderer
from gallery_layout.engine.responsive import variant_for_columns
from gallery_layout.engine.skyline import SkylinePlacer

logger = logging.getLogger(__name__)


FALLBACK_SOURCE = "fallback"


@dataclass
class CacheInfo:
    issue_id: Any
    is_from_cache: bool = False
    data_version_hash: str = "empty"
    calculation_time_ms: float = 0.0
    calculated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class OrderingResponse:
    order: Ordering
    source: str
    cache_info: CacheInfo

    @property
    def ordered_ids(self) -> List[Hashable]:
        """The sequence the requesting viewport should use."""
        if self.source == OrderingVariant.TWO_COL.value:
            return self.order.for_variant(OrderingVariant.TWO_COL)
        return self.order.for_variant(OrderingVariant.FOUR_COL)


class LayoutRequestHandler:
    """Serves precomputed orderings for item sets.

    Args:
        store: Where item sets are looked up.
        cache: Ordering cache shared by all requests.
        orderer: Greedy best-fit orderer used on cache misses.
        placer: Skyline placer used by place().
        default_column_count: Viewport columns assumed when a request
            does not say.
    """

    def __init__(
        self,
        store: SubmissionStore,
        cache: Optional[OrderingCache] = None,
        orderer: Optional[GreedyBestFitOrderer] = None,
        placer: Optional[SkylinePlacer] = None,
        default_column_count: int = 4,
    ):
        self.store = store
        self.cache = cache or OrderingCache()
        self.orderer = orderer or GreedyBestFitOrderer()
        self.placer = placer or SkylinePlacer()
        self.default_column_count = default_column_count
        self._fingerprints: Dict[Hashable, str] = {}
        self._fingerprints_lock = threading.Lock()

    @property
    def classifier(self) -> AspectRatioClassifier:
        return self.orderer.classifier

    # =========================================================================
    # ORDERING
    # =========================================================================

    def get_ordering(
        self,
        item_set_id: Hashable,
        column_count: Optional[int] = None,
        refresh: bool = False,
    ) -> OrderingResponse:
        start = time.perf_counter()
        column_count = column_count or self.default_column_count

        try:
            items = self.store.list_items(item_set_id)
        except Exception as e:
            logger.error(f"Item lookup failed for item set {item_set_id}: {e}", exc_info=True)
            return self._fallback(item_set_id, [], start)

        if not items:
            logger.info(f"No items found for item set {item_set_id}")
            return OrderingResponse(
                order=Ordering(),
                source=variant_for_columns(column_count).value,
                cache_info=CacheInfo(
                    issue_id=item_set_id,
                    calculation_time_ms=_elapsed_ms(start),
                ),
            )

        try:
            return self._ordering_for(item_set_id, ItemSet.of(items), column_count, refresh, start)
        except Exception as e:
            logger.error(f"Ordering failed for item set {item_set_id}: {e}", exc_info=True)
            return self._fallback(item_set_id, [item.id for item in items], start)

    def _ordering_for(
        self,
        item_set_id: Hashable,
        item_set: ItemSet,
        column_count: int,
        refresh: bool,
        start: float,
    ) -> OrderingResponse:
        valid: List[Item] = []
        invalid_ids: List[Hashable] = []
        for item in item_set:
            try:
                item.validate()
                valid.append(item)
            except InvalidDimension as e:
                logger.warning(f"Excluding item {item.id!r} from optimized order: {e}")
                invalid_ids.append(item.id)

        fingerprint = item_set.fingerprint
        self._remember_fingerprint(item_set_id, fingerprint)

        sequences = {}
        hits = 0
        for variant in OrderingVariant:
            ids, from_cache = self.cache.get_or_compute_entry(
                fingerprint,
                variant,
                self._compute_fn(valid, invalid_ids, variant),
                refresh=refresh,
            )
            sequences[variant] = ids
            hits += from_cache

        wide_count = sum(1 for item in valid if self.classifier.is_wide(item.aspect_ratio))
        avg_ratio = sum(item.aspect_ratio for item in valid) / len(valid) if valid else 0.0

        order = Ordering(
            ordered_ids_2col=sequences[OrderingVariant.TWO_COL],
            ordered_ids_4col=sequences[OrderingVariant.FOUR_COL],
            total_items=len(item_set),
            avg_aspect_ratio=avg_ratio,
            wide_image_count=wide_count,
        )
        elapsed = _elapsed_ms(start)
        from_cache = hits == len(OrderingVariant)

        logger.info(
            f"Ordering for item set {item_set_id}: {order.total_items} items, "
            f"{wide_count} wide, cached={from_cache}, {elapsed:.2f}ms"
        )
        return OrderingResponse(
            order=order,
            source=variant_for_columns(column_count).value,
            cache_info=CacheInfo(
                issue_id=item_set_id,
                is_from_cache=from_cache,
                data_version_hash=fingerprint,
                calculation_time_ms=elapsed,
            ),
        )

    def _compute_fn(self, valid: List[Item], invalid_ids: List[Hashable], variant: OrderingVariant):
        def compute() -> List[Hashable]:
            return self.orderer.order_items(valid, variant.column_count) + list(invalid_ids)
        return compute

    def _fallback(self, item_set_id: Hashable, ids: List[Hashable], start: float) -> OrderingResponse:
        logger.warning(f"Serving natural order for item set {item_set_id} ({len(ids)} items)")
        return OrderingResponse(
            order=Ordering.natural(ids),
            source=FALLBACK_SOURCE,
            cache_info=CacheInfo(
                issue_id=item_set_id,
                data_version_hash=FALLBACK_SOURCE,
                calculation_time_ms=_elapsed_ms(start),
            ),
        )

    # =========================================================================
    # INVALIDATION
    # =========================================================================

    def _remember_fingerprint(self, item_set_id: Hashable, fingerprint: str) -> None:
        with self._fingerprints_lock:
            previous = self._fingerprints.get(item_set_id)
            self._fingerprints[item_set_id] = fingerprint
        if previous and previous != fingerprint:
            logger.info(f"Item set {item_set_id} changed membership, dropping stale orderings")
            self.cache.invalidate(previous)

    def invalidate(self, item_set_id: Hashable) -> bool:
        """Drop cached orderings for an item set whose submissions changed.

        Returns False when nothing was cached for it in this process.
        """
        with self._fingerprints_lock:
            fingerprint = self._fingerprints.pop(item_set_id, None)
        if fingerprint is None:
            return False
        self.cache.invalidate(fingerprint)
        logger.info(f"Invalidated orderings for item set {item_set_id}")
        return True

    # =========================================================================
    # PLACEMENT
    # =========================================================================

    def place(
        self,
        ordered_ids: Sequence[Hashable],
        dimensions: Mapping[Hashable, ItemDimensions],
        column_count: int,
        column_width: float,
        gap: float,
    ) -> PlacementResult:
        result = self.placer.place(ordered_ids, dimensions, column_count, column_width, gap)
        if result.skipped:
            logger.info(
                f"Placed {len(result.layout_items)} items, skipped {len(result.skipped)}"
            )
        return result


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
