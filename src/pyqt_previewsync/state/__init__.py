"""
Editor state.

Stores and value types shared by the synchronization services:
ConfigStore (user edits), MetadataStore (render scale, timezone, locale)
and the backend-produced PreviewResult / HandlerOption values.
"""

from .metadata_store import (
    MetadataStore,
    MetadataEntry,
    RenderScale,
    detect_environment,
    RENDER_SCALE_KEY,
    TIMEZONE_KEY,
    LOCALE_KEY,
    RESERVED_KEYS,
)
from .config_store import ConfigStore, ConfigEntry, coerce_value
from .preview_result import PreviewResult, ImageFormat, HandlerOption, normalize_options

__all__ = [
    "MetadataStore",
    "MetadataEntry",
    "RenderScale",
    "detect_environment",
    "RENDER_SCALE_KEY",
    "TIMEZONE_KEY",
    "LOCALE_KEY",
    "RESERVED_KEYS",
    "ConfigStore",
    "ConfigEntry",
    "coerce_value",
    "PreviewResult",
    "ImageFormat",
    "HandlerOption",
    "normalize_options",
]
