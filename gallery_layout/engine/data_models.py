"""
data_models.py — Typed records shared by the orderer, placer and handler.

Nothing here is persisted. Items and item sets are rebuilt per request;
orderings live only in the ordering cache.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable, Iterable, List, Optional, Tuple

from .errors import LayoutError, ensure_positive


ItemId = Hashable


class OrderingVariant(str, Enum):
    """The two responsive layouts an ordering is precomputed for."""
    TWO_COL = "2col"
    FOUR_COL = "4col"

    @property
    def column_count(self) -> int:
        return 2 if self is OrderingVariant.TWO_COL else 4


# =============================================================================
# INPUT
# =============================================================================

@dataclass(frozen=True)
class Item:
    """One submission to be laid out. aspect_ratio is width / height."""
    id: ItemId
    aspect_ratio: float

    def validate(self) -> None:
        """Raise InvalidDimension unless aspect_ratio is finite and positive."""
        ensure_positive(self.aspect_ratio, "aspect ratio", item_id=self.id)


def fingerprint_ids(ids: Iterable[ItemId]) -> str:
    """Order-independent fingerprint of a set of item ids.

    Ids are keyed with their type name, so 1 and "1" are different items.
    """
    digest = hashlib.sha256()
    for key in sorted({f"{type(i).__name__}:{i}" for i in ids}):
        digest.update(key.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()


@dataclass(frozen=True)
class ItemSet:
    """Immutable collection of items for one issue.

    Identity for caching is membership only: two sets holding the same ids
    in a different order share a fingerprint.
    """
    items: Tuple[Item, ...] = ()

    @classmethod
    def of(cls, items: Iterable[Item]) -> "ItemSet":
        return cls(items=tuple(items))

    @property
    def ids(self) -> List[ItemId]:
        return [item.id for item in self.items]

    @property
    def fingerprint(self) -> str:
        return fingerprint_ids(self.ids)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def add(self, item: Item) -> "ItemSet":
        """Return a new set with item appended."""
        return ItemSet(items=self.items + (item,))

    def remove(self, item_id: ItemId) -> "ItemSet":
        """Return a new set without the item carrying item_id."""
        return ItemSet(items=tuple(i for i in self.items if i.id != item_id))


@dataclass(frozen=True)
class OrderItem:
    """Orderer input: an item with its rendered height at one column width."""
    id: ItemId
    is_wide: bool
    height: float


@dataclass(frozen=True)
class ItemDimensions:
    """Rendered size of one item for the current viewport, in pixels."""
    width: float
    height: float
    is_wide: bool = False


# =============================================================================
# OUTPUT
# =============================================================================

@dataclass
class Ordering:
    """Precomputed orderings for the 2 and 4 column layouts."""
    ordered_ids_2col: List[ItemId] = field(default_factory=list)
    ordered_ids_4col: List[ItemId] = field(default_factory=list)
    total_items: int = 0
    avg_aspect_ratio: float = 0.0
    wide_image_count: int = 0

    def for_variant(self, variant: OrderingVariant) -> List[ItemId]:
        if variant is OrderingVariant.TWO_COL:
            return self.ordered_ids_2col
        return self.ordered_ids_4col

    @classmethod
    def natural(cls, ids: List[ItemId]) -> "Ordering":
        """Both variants in arrival order; used when optimization is unavailable."""
        return cls(
            ordered_ids_2col=list(ids),
            ordered_ids_4col=list(ids),
            total_items=len(ids),
        )


@dataclass(frozen=True)
class LayoutItem:
    """A placed item. x/y are absolute within the masonry container."""
    id: ItemId
    x: float
    y: float
    width: float
    height: float
    spans_columns: int = 1

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class PlacementResult:
    """Output of the skyline placer."""
    layout_items: List[LayoutItem] = field(default_factory=list)
    container_height: float = 0.0
    column_heights: List[float] = field(default_factory=list)
    skipped: List[LayoutError] = field(default_factory=list)

    @property
    def skipped_ids(self) -> List[Any]:
        return [getattr(err, "item_id", None) for err in self.skipped]

    def find(self, item_id: ItemId) -> Optional[LayoutItem]:
        for item in self.layout_items:
            if item.id == item_id:
                return item
        return None
