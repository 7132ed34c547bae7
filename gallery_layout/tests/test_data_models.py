"""Tests for the shared layout records."""

from gallery_layout.engine.data_models import (
    Item,
    ItemSet,
    Ordering,
    OrderingVariant,
    fingerprint_ids,
)
from gallery_layout.engine.handler import CacheInfo, OrderingResponse


class TestItemSet:
    """Tests for ItemSet membership and fingerprints."""

    def setup_method(self):
        self.items = ItemSet.of([Item(id=1, aspect_ratio=1.0), Item(id=2, aspect_ratio=1.78)])

    def test_add_changes_fingerprint(self):
        grown = self.items.add(Item(id=3, aspect_ratio=0.75))

        assert grown.ids == [1, 2, 3]
        assert grown.fingerprint != self.items.fingerprint
        assert self.items.ids == [1, 2]

    def test_remove_changes_fingerprint(self):
        shrunk = self.items.remove(2)

        assert shrunk.ids == [1]
        assert shrunk.fingerprint != self.items.fingerprint
        assert len(self.items) == 2

    def test_add_then_remove_restores_fingerprint(self):
        restored = self.items.add(Item(id=3, aspect_ratio=0.75)).remove(3)
        assert restored.fingerprint == self.items.fingerprint

    def test_reorder_keeps_fingerprint(self):
        reordered = ItemSet.of(reversed(list(self.items)))
        assert reordered.ids == [2, 1]
        assert reordered.fingerprint == self.items.fingerprint

    def test_fingerprint_distinguishes_id_types(self):
        assert fingerprint_ids([1]) != fingerprint_ids(["1"])

    def test_fingerprint_ignores_duplicates(self):
        assert fingerprint_ids([1, 2, 2]) == fingerprint_ids([2, 1])


class TestOrdering:
    """Tests for Ordering and the response built on it."""

    def test_for_variant(self):
        order = Ordering(ordered_ids_2col=[2, 1], ordered_ids_4col=[1, 2])
        assert order.for_variant(OrderingVariant.TWO_COL) == [2, 1]
        assert order.for_variant(OrderingVariant.FOUR_COL) == [1, 2]

    def test_natural(self):
        order = Ordering.natural([3, 1, 2])
        assert order.ordered_ids_2col == order.ordered_ids_4col == [3, 1, 2]
        assert order.total_items == 3

    def test_response_ordered_ids_follow_source(self):
        order = Ordering(ordered_ids_2col=[2, 1], ordered_ids_4col=[1, 2])
        info = CacheInfo(issue_id=1)

        assert OrderingResponse(order, "2col", info).ordered_ids == [2, 1]
        assert OrderingResponse(order, "4col", info).ordered_ids == [1, 2]
        assert OrderingResponse(Ordering.natural([5, 4]), "fallback", info).ordered_ids == [5, 4]
