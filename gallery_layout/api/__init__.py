# Gallery layout HTTP API

from .config import get_settings, Settings

__all__ = [
    'get_settings',
    'Settings',
]
