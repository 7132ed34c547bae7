"""Tests for LayoutRequestHandler."""

import pytest

from gallery_layout.db.cache import OrderingCache
from gallery_layout.db.store import InMemorySubmissionStore
from gallery_layout.engine.data_models import Item, ItemDimensions, ItemSet
from gallery_layout.engine.errors import ItemLookupError
from gallery_layout.engine.handler import FALLBACK_SOURCE, LayoutRequestHandler
from gallery_layout.engine.orderer import GreedyBestFitOrderer


class FailingStore:
    """Store whose lookups always fail."""

    def list_items(self, item_set_id):
        raise ItemLookupError(item_set_id, "database unavailable")


class FailingOrderer(GreedyBestFitOrderer):
    def order_items(self, items, column_count):
        raise RuntimeError("ordering exploded")


class TestGetOrdering:
    """Tests for LayoutRequestHandler.get_ordering."""

    def test_orders_both_variants(self, handler, store, sample_items):
        store.put(7, sample_items)
        response = handler.get_ordering(7)

        order = response.order
        assert sorted(order.ordered_ids_2col) == [1, 2, 3, 4]
        assert sorted(order.ordered_ids_4col) == [1, 2, 3, 4]
        assert order.total_items == 4
        assert order.wide_image_count == 1
        assert order.avg_aspect_ratio == pytest.approx((1.0 + 1.78 + 1.0 + 0.75) / 4)

    def test_cache_info(self, handler, store, sample_items):
        store.put(7, sample_items)
        response = handler.get_ordering(7)

        info = response.cache_info
        assert info.issue_id == 7
        assert info.is_from_cache is False
        assert info.data_version_hash == ItemSet.of(sample_items).fingerprint
        assert info.calculation_time_ms >= 0

    def test_second_request_served_from_cache(self, handler, store, sample_items):
        store.put(7, sample_items)
        first = handler.get_ordering(7)
        second = handler.get_ordering(7)

        assert second.cache_info.is_from_cache is True
        assert second.order.ordered_ids_4col == first.order.ordered_ids_4col

    def test_refresh_bypasses_cache(self, handler, store, sample_items):
        store.put(7, sample_items)
        handler.get_ordering(7)
        assert handler.get_ordering(7, refresh=True).cache_info.is_from_cache is False

    @pytest.mark.parametrize(
        "column_count, source",
        [(None, "4col"), (1, "2col"), (2, "2col"), (3, "4col"), (4, "4col"), (6, "4col")],
    )
    def test_source_follows_column_count(self, handler, store, sample_items, column_count, source):
        store.put(7, sample_items)
        response = handler.get_ordering(7, column_count=column_count)

        assert response.source == source
        expected = response.order.ordered_ids_2col if source == "2col" else response.order.ordered_ids_4col
        assert response.ordered_ids == expected

    def test_empty_item_set(self, handler):
        response = handler.get_ordering(404)

        assert response.source == "4col"
        assert response.order.ordered_ids_2col == []
        assert response.order.ordered_ids_4col == []
        assert response.order.total_items == 0
        assert response.cache_info.data_version_hash == "empty"

    def test_store_failure_falls_back(self):
        handler = LayoutRequestHandler(store=FailingStore())
        response = handler.get_ordering(7)

        assert response.source == FALLBACK_SOURCE
        assert response.order.ordered_ids_4col == []
        assert response.cache_info.data_version_hash == "fallback"
        assert response.cache_info.is_from_cache is False

    def test_orderer_failure_falls_back_to_natural_order(self, store, sample_items):
        store.put(7, sample_items)
        handler = LayoutRequestHandler(store=store, orderer=FailingOrderer())
        response = handler.get_ordering(7)

        assert response.source == FALLBACK_SOURCE
        assert response.order.ordered_ids_2col == [1, 2, 3, 4]
        assert response.order.ordered_ids_4col == [1, 2, 3, 4]
        assert response.order.total_items == 4

    def test_invalid_items_appended_in_natural_order(self, handler, store):
        store.put(7, [
            Item(id=1, aspect_ratio=1.0),
            Item(id=2, aspect_ratio=0.0),
            Item(id=3, aspect_ratio=1.5),
            Item(id=4, aspect_ratio=float("nan")),
        ])
        response = handler.get_ordering(7)

        assert response.source == "4col"
        assert response.order.ordered_ids_2col[-2:] == [2, 4]
        assert response.order.ordered_ids_4col[-2:] == [2, 4]
        assert response.order.total_items == 4
        assert response.order.avg_aspect_ratio == pytest.approx(1.25)

    def test_input_order_does_not_change_result(self, handler, store, sample_items):
        store.put(1, sample_items)
        store.put(2, list(reversed(sample_items)))

        first = handler.get_ordering(1)
        second = handler.get_ordering(2)

        assert first.cache_info.data_version_hash == second.cache_info.data_version_hash
        assert second.cache_info.is_from_cache is True


class TestInvalidation:
    """Tests for cache invalidation on membership change."""

    def test_membership_change_recomputes(self, handler, store, sample_items):
        store.put(7, sample_items)
        handler.get_ordering(7)

        store.put(7, sample_items + [Item(id=5, aspect_ratio=2.0)])
        response = handler.get_ordering(7)

        assert response.cache_info.is_from_cache is False
        assert sorted(response.order.ordered_ids_4col) == [1, 2, 3, 4, 5]

    def test_membership_change_drops_old_entries(self, store, sample_items):
        cache = OrderingCache()
        handler = LayoutRequestHandler(store=store, cache=cache)
        old_fingerprint = ItemSet.of(sample_items).fingerprint

        store.put(7, sample_items)
        handler.get_ordering(7)
        store.put(7, sample_items[:2])
        handler.get_ordering(7)

        _, from_cache = cache.get_or_compute_entry(old_fingerprint, "4col", lambda: [])
        assert from_cache is False

    def test_invalidate(self, handler, store, sample_items):
        store.put(7, sample_items)
        handler.get_ordering(7)

        assert handler.invalidate(7) is True
        assert handler.get_ordering(7).cache_info.is_from_cache is False

    def test_invalidate_unknown_item_set(self, handler):
        assert handler.invalidate(12345) is False


class TestPlace:
    """Tests for LayoutRequestHandler.place."""

    def test_delegates_to_placer(self):
        handler = LayoutRequestHandler(store=InMemorySubmissionStore())
        dims = {1: ItemDimensions(300, 200), 2: ItemDimensions(300, 100)}

        result = handler.place([1, 2, 3], dims, 2, 300, 20)

        assert [item.id for item in result.layout_items] == [1, 2]
        assert result.skipped_ids == [3]
        assert result.find(2).x == 320
