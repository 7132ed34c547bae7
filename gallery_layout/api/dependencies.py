"""FastAPI dependencies wiring the layout engine from settings."""

from functools import lru_cache

from fastapi import Depends

from gallery_layout.api.config import Settings, get_settings
from gallery_layout.db.cache import CacheConfig, OrderingCache, get_cache
from gallery_layout.db.store import SqlSubmissionStore
from gallery_layout.engine.classifier import AspectRatioClassifier
from gallery_layout.engine.handler import LayoutRequestHandler
from gallery_layout.engine.orderer import GreedyBestFitOrderer
from gallery_layout.engine.responsive import Breakpoints
from gallery_layout.engine.skyline import SkylinePlacer


def build_classifier(settings: Settings) -> AspectRatioClassifier:
    return AspectRatioClassifier(
        wide_threshold=settings.wide_threshold,
        band_tolerance=settings.wide_band_tolerance,
        near_tolerance=settings.wide_near_tolerance,
    )


def build_breakpoints(settings: Settings) -> Breakpoints:
    return Breakpoints(
        mobile_breakpoint=settings.mobile_breakpoint,
        tablet_breakpoint=settings.tablet_breakpoint,
        mobile_columns=settings.mobile_columns,
        tablet_columns=settings.tablet_columns,
        desktop_columns=settings.desktop_columns,
    )


def build_handler(settings: Settings) -> LayoutRequestHandler:
    """Assemble store, cache, orderer and placer from configuration."""
    storage = get_cache(
        CacheConfig(
            backend="redis" if settings.uses_redis else "memory",
            redis_url=settings.redis_url,
            default_ttl=settings.ordering_cache_ttl_seconds,
            prefix=settings.cache_prefix,
        )
    )
    orderer = GreedyBestFitOrderer(
        container_width=settings.ordering_container_width,
        gap=settings.ordering_gap,
        max_wide_streak=settings.max_wide_streak,
        balance_wide=settings.balance_wide,
        classifier=build_classifier(settings),
    )
    return LayoutRequestHandler(
        store=SqlSubmissionStore(),
        cache=OrderingCache(storage, ttl=settings.ordering_cache_ttl_seconds or None),
        orderer=orderer,
        placer=SkylinePlacer(strict=settings.strict_dimensions),
        default_column_count=settings.desktop_columns,
    )


@lru_cache()
def _default_handler() -> LayoutRequestHandler:
    return build_handler(get_settings())


def get_layout_handler() -> LayoutRequestHandler:
    """Process-wide handler; its ordering cache is shared by all requests."""
    return _default_handler()


def get_classifier(settings: Settings = Depends(get_settings)) -> AspectRatioClassifier:
    return build_classifier(settings)


def get_breakpoints(settings: Settings = Depends(get_settings)) -> Breakpoints:
    return build_breakpoints(settings)
