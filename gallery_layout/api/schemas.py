"""
schemas.py — Pydantic request/response models for the layout API.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


ItemIdSchema = Union[int, str]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# ORDERING
# =============================================================================

class OrderResultSchema(CamelModel):
    """Precomputed orderings plus summary numbers for the client."""
    ordered_ids_2col: List[ItemIdSchema] = Field(default_factory=list, alias="orderedIds2col")
    ordered_ids_4col: List[ItemIdSchema] = Field(default_factory=list, alias="orderedIds4col")
    total_items: int = Field(0, alias="totalItems")
    avg_aspect_ratio: float = Field(0.0, alias="avgAspectRatio")
    wide_image_count: int = Field(0, alias="wideImageCount")


class CacheInfoSchema(CamelModel):
    """Where the ordering came from and how long it took."""
    calculated_at: datetime = Field(alias="calculatedAt")
    issue_id: ItemIdSchema = Field(alias="issueId")
    is_from_cache: bool = Field(False, alias="isFromCache")
    data_version_hash: str = Field("empty", alias="dataVersionHash")
    calculation_time_ms: float = Field(0.0, alias="calculationTimeMs")


class OrderingResponseSchema(CamelModel):
    """Response of GET /layout/order."""
    order: OrderResultSchema
    source: Literal["2col", "4col", "fallback"]
    cache_info: CacheInfoSchema = Field(alias="cacheInfo")


class InvalidateResponseSchema(CamelModel):
    issue_id: int = Field(alias="issueId")
    invalidated: bool


# =============================================================================
# PLACEMENT
# =============================================================================

class DimensionSchema(CamelModel):
    """Rendered size of one item. isWide defaults to width/height classification."""
    width: float
    height: float
    is_wide: Optional[bool] = Field(None, alias="isWide")


class PlacementRequest(CamelModel):
    """Request to place an ordering.

    Sizes come either from `dimensions` (measured on the client) or from
    `aspectRatios`, which the service resolves at the column width.
    The column width is given directly or derived from `containerWidth`.
    """
    ordered_ids: List[ItemIdSchema] = Field(alias="orderedIds")
    dimensions: Optional[Dict[str, DimensionSchema]] = None
    aspect_ratios: Optional[Dict[str, float]] = Field(None, alias="aspectRatios")
    column_count: int = Field(..., ge=1, le=12, alias="columnCount")
    column_width: Optional[float] = Field(None, gt=0, alias="columnWidth")
    container_width: Optional[float] = Field(None, gt=0, alias="containerWidth")
    gap: float = Field(16, ge=0)
    extra_height: float = Field(0, ge=0, alias="extraHeight")

    @model_validator(mode="after")
    def check_sources(self) -> "PlacementRequest":
        if self.dimensions is None and self.aspect_ratios is None:
            raise ValueError("either dimensions or aspectRatios is required")
        if self.column_width is None and self.container_width is None:
            raise ValueError("either columnWidth or containerWidth is required")
        return self

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "orderedIds": [1, 2, 3],
                "dimensions": {
                    "1": {"width": 300, "height": 200},
                    "2": {"width": 620, "height": 180, "isWide": True},
                    "3": {"width": 300, "height": 400},
                },
                "columnCount": 2,
                "columnWidth": 300,
                "gap": 20,
            }
        },
    )


class LayoutItemSchema(CamelModel):
    id: ItemIdSchema
    x: float
    y: float
    width: float
    height: float
    spans_columns: int = Field(1, alias="spansColumns")


class PlacementResponse(CamelModel):
    layout_items: List[LayoutItemSchema] = Field(default_factory=list, alias="layoutItems")
    container_height: float = Field(0.0, alias="containerHeight")
    column_width: float = Field(alias="columnWidth")
    skipped_ids: List[ItemIdSchema] = Field(default_factory=list, alias="skippedIds")
