# Masonry layout engine

from .errors import (
    LayoutError,
    InvalidDimension,
    UnsupportedColumnCount,
    MissingDimension,
    ItemLookupError,
)

from .data_models import (
    Item,
    ItemSet,
    OrderItem,
    ItemDimensions,
    Ordering,
    OrderingVariant,
    LayoutItem,
    PlacementResult,
    fingerprint_ids,
)

from .classifier import (
    AspectRatioClassifier,
    Classification,
    WIDE_THRESHOLD,
)

from .orderer import GreedyBestFitOrderer

from .skyline import (
    ColumnState,
    SkylinePlacer,
    place,
    span_for,
)

from .responsive import (
    Breakpoints,
    choose_column_count,
    column_width_for,
    resolve_dimensions,
    variant_for_columns,
)

__all__ = [
    'LayoutError',
    'InvalidDimension',
    'UnsupportedColumnCount',
    'MissingDimension',
    'ItemLookupError',
    'Item',
    'ItemSet',
    'OrderItem',
    'ItemDimensions',
    'Ordering',
    'OrderingVariant',
    'LayoutItem',
    'PlacementResult',
    'fingerprint_ids',
    'AspectRatioClassifier',
    'Classification',
    'WIDE_THRESHOLD',
    'GreedyBestFitOrderer',
    'ColumnState',
    'SkylinePlacer',
    'place',
    'span_for',
    'Breakpoints',
    'choose_column_count',
    'column_width_for',
    'resolve_dimensions',
    'variant_for_columns',
]
