"""Layout routes: masonry ordering and placement.

Endpoints that touch the ordering cache or the database are plain `def`
so FastAPI runs them in its threadpool.
"""

from datetime import datetime
from typing import Any, Hashable

from fastapi import APIRouter, Depends, HTTPException, Query, status

from gallery_layout.api.config import Settings, get_settings
from gallery_layout.api.dependencies import get_breakpoints, get_classifier, get_layout_handler
from gallery_layout.api.schemas import (
    CacheInfoSchema,
    DimensionSchema,
    InvalidateResponseSchema,
    LayoutItemSchema,
    OrderResultSchema,
    OrderingResponseSchema,
    PlacementRequest,
    PlacementResponse,
)
from gallery_layout.engine.classifier import AspectRatioClassifier
from gallery_layout.engine.data_models import Item, ItemDimensions, ItemSet, OrderingVariant
from gallery_layout.engine.errors import InvalidDimension
from gallery_layout.engine.handler import LayoutRequestHandler, OrderingResponse
from gallery_layout.engine.responsive import (
    Breakpoints,
    choose_column_count,
    column_width_for,
    resolve_dimensions,
)

router = APIRouter()


def _ordering_schema(response: OrderingResponse) -> OrderingResponseSchema:
    order = response.order
    info = response.cache_info
    return OrderingResponseSchema(
        order=OrderResultSchema(
            ordered_ids_2col=order.ordered_ids_2col,
            ordered_ids_4col=order.ordered_ids_4col,
            total_items=order.total_items,
            avg_aspect_ratio=order.avg_aspect_ratio,
            wide_image_count=order.wide_image_count,
        ),
        source=response.source,
        cache_info=CacheInfoSchema(
            calculated_at=info.calculated_at,
            issue_id=info.issue_id,
            is_from_cache=info.is_from_cache,
            data_version_hash=info.data_version_hash,
            calculation_time_ms=info.calculation_time_ms,
        ),
    )


@router.get("/order", response_model=OrderingResponseSchema)
def get_masonry_ordering(
    issue_id: int = Query(..., alias="issueId", gt=0),
    column_count: int | None = Query(None, alias="columnCount", ge=1, le=12),
    screen_width: int | None = Query(None, alias="screenWidth", ge=0),
    refresh: bool = False,
    handler: LayoutRequestHandler = Depends(get_layout_handler),
    breakpoints: Breakpoints = Depends(get_breakpoints),
):
    """Get precomputed 2-column and 4-column orderings for an issue.

    The viewport is described by columnCount, or by screenWidth which is
    mapped through the breakpoints. Always answers 200; failures come back
    with source "fallback" and natural order.
    """
    if column_count is None and screen_width is not None:
        column_count = choose_column_count(screen_width, breakpoints)

    response = handler.get_ordering(issue_id, column_count=column_count, refresh=refresh)
    return _ordering_schema(response)


@router.post("/order/{issue_id}/invalidate", response_model=InvalidateResponseSchema)
def invalidate_ordering(
    issue_id: int,
    handler: LayoutRequestHandler = Depends(get_layout_handler),
):
    """Drop cached orderings after submissions of an issue were added or removed."""
    return InvalidateResponseSchema(issue_id=issue_id, invalidated=handler.invalidate(issue_id))


def _size_is_wide(classifier: AspectRatioClassifier, dims: DimensionSchema) -> bool:
    if dims.is_wide is not None:
        return dims.is_wide
    try:
        return classifier.is_wide(dims.width / dims.height)
    except (InvalidDimension, ZeroDivisionError):
        # The placer rejects the size itself
        return False


@router.post("/place", response_model=PlacementResponse)
def place_items(
    request: PlacementRequest,
    handler: LayoutRequestHandler = Depends(get_layout_handler),
    classifier: AspectRatioClassifier = Depends(get_classifier),
):
    """Compute absolute positions for an ordering at one viewport."""
    try:
        column_width = request.column_width or column_width_for(
            request.container_width, request.column_count, request.gap
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    dimensions: dict[Hashable, ItemDimensions]
    if request.dimensions is not None:
        dimensions = {}
        for item_id in request.ordered_ids:
            dims = request.dimensions.get(str(item_id))
            if dims is not None:
                dimensions[item_id] = ItemDimensions(
                    width=dims.width,
                    height=dims.height,
                    is_wide=_size_is_wide(classifier, dims),
                )
    else:
        items = [
            Item(id=item_id, aspect_ratio=request.aspect_ratios[str(item_id)])
            for item_id in request.ordered_ids
            if str(item_id) in request.aspect_ratios
        ]
        dimensions = resolve_dimensions(
            items,
            request.column_count,
            column_width,
            request.gap,
            classifier=classifier,
            extra_height=request.extra_height,
        )

    try:
        result = handler.place(
            request.ordered_ids,
            dimensions,
            request.column_count,
            column_width,
            request.gap,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PlacementResponse(
        layout_items=[
            LayoutItemSchema(
                id=item.id,
                x=item.x,
                y=item.y,
                width=item.width,
                height=item.height,
                spans_columns=item.spans_columns,
            )
            for item in result.layout_items
        ],
        container_height=result.container_height,
        column_width=column_width,
        skipped_ids=result.skipped_ids,
    )


@router.get("/health")
async def layout_health(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """Health check for the layout service."""
    return {
        "status": "ok",
        "service": settings.app_name,
        "timestamp": datetime.utcnow().isoformat(),
        "supportedViewports": ["mobile", "tablet", "desktop"],
        "supportedColumns": [v.column_count for v in OrderingVariant],
        "cacheBackend": settings.cache_backend,
    }


@router.get("/debug")
def debug_ordering(
    issue_id: int = Query(..., alias="issueId", gt=0),
    settings: Settings = Depends(get_settings),
    handler: LayoutRequestHandler = Depends(get_layout_handler),
) -> dict[str, Any]:
    """Item details behind an ordering. Only available with DEBUG=true."""
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    debug: dict[str, Any] = {
        "issueId": issue_id,
        "algorithm": "Greedy best-fit ordering + skyline placement",
        "supportedColumns": [v.column_count for v in OrderingVariant],
    }
    try:
        items = handler.store.list_items(issue_id)
    except Exception as e:
        debug["error"] = str(e)
        return debug

    details = []
    for item in items:
        try:
            is_wide: bool | None = handler.classifier.is_wide(item.aspect_ratio)
        except InvalidDimension:
            is_wide = None
        details.append({"id": item.id, "aspectRatio": item.aspect_ratio, "isWide": is_wide})

    debug["submissionCount"] = len(items)
    debug["fingerprint"] = ItemSet.of(items).fingerprint
    debug["items"] = details
    return debug
