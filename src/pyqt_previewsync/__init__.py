"""
pyqt-previewsync: state synchronization engine for schema-driven config editors.

Keeps a set of named configuration fields consistent across three live
representations: an in-memory store, a shareable query string, and preview
submissions to a rendering backend. Fields whose options depend on their own
value are resolved through named handlers in the background.

Architecture:
- Tier 1 (Core): Event loop utilities (debounce, background tasks, sequence tracking)
- Tier 2 (Protocols): Backend, runner, history and handler registry contracts
- Tier 3 (State): ConfigStore, MetadataStore and backend value types
- Tier 4 (Sync): URLSync, PreviewSync, HandlerDependencyResolver
- Tier 5 (Editor): ConfigEditor wiring everything on one Qt event loop

Key Features:
- Issue-order supersession: a stale response never overwrites a newer one
- Coalesced preview submission that never starves the first paint
- Lossy query string mirroring (large values stay out of the URL)
- Transactional reset and import
"""

__version__ = "0.1.0"

from .editor import ConfigEditor
from .exceptions import (
    PreviewSyncError,
    PreviewRequestError,
    PreviewRenderError,
    HandlerError,
    ConfigImportError,
    SchemaError,
)
from .protocols import EditorConfig, HandlerRegistry, InMemoryHistory
from .schema import FieldSchema, parse_schema
from .state import (
    ConfigEntry,
    ConfigStore,
    MetadataEntry,
    MetadataStore,
    RenderScale,
    PreviewResult,
    ImageFormat,
    HandlerOption,
)

__all__ = [
    "__version__",
    "ConfigEditor",
    "PreviewSyncError",
    "PreviewRequestError",
    "PreviewRenderError",
    "HandlerError",
    "ConfigImportError",
    "SchemaError",
    "EditorConfig",
    "HandlerRegistry",
    "InMemoryHistory",
    "FieldSchema",
    "parse_schema",
    "ConfigEntry",
    "ConfigStore",
    "MetadataEntry",
    "MetadataStore",
    "RenderScale",
    "PreviewResult",
    "ImageFormat",
    "HandlerOption",
]
