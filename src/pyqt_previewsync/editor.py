"""
ConfigEditor: the application-state object.

Owns the stores and the synchronization services and passes them to each
other explicitly. Store changes are published through Qt signals; every
change schedules one effect evaluation on the event loop, where the query
string, the handler option lists and the preview are brought up to date.

Lifecycle:
    editor = ConfigEditor(backend=client, registry=registry, history=history)
    editor.mount(schema=fields)         # URL -> stores, defaults, loading cleared
    editor.set_field("station", value)  # form edits
    ...
    editor.shutdown()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, Union

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_previewsync.core.background_task import BackgroundTaskPool
from pyqt_previewsync.core.debounce_timer import DebounceTimer
from pyqt_previewsync.exceptions import ConfigImportError
from pyqt_previewsync.io.config_file import dump_config, load_config_file, parse_config, save_config_file
from pyqt_previewsync.io.image_export import export_image
from pyqt_previewsync.protocols.editor_config import EditorConfig, get_editor_config
from pyqt_previewsync.protocols.handler_registry import HandlerRegistry
from pyqt_previewsync.protocols.history import HistoryBackend, InMemoryHistory
from pyqt_previewsync.protocols.preview_backend import PreviewBackend, TaskRunner
from pyqt_previewsync.schema.field_schema import FieldSchema
from pyqt_previewsync.services.field_change_dispatcher import FieldChangeDispatcher, FieldChangeEvent
from pyqt_previewsync.services.flag_context_manager import FlagContextManager
from pyqt_previewsync.state.config_store import ConfigStore
from pyqt_previewsync.state.metadata_store import MetadataStore, RenderScale, detect_environment
from pyqt_previewsync.state.preview_result import HandlerOption, PreviewResult
from pyqt_previewsync.sync.handler_resolver import HandlerDependencyResolver
from pyqt_previewsync.sync.preview_sync import PreviewSync
from pyqt_previewsync.sync.url_sync import URLSync

logger = logging.getLogger(__name__)


class ConfigEditor(QObject):
    """Keeps ConfigStore, the query string and the backend preview consistent."""

    preview_updated = pyqtSignal(object)    # PreviewResult
    preview_error = pyqtSignal(str)
    loading_changed = pyqtSignal(bool)
    options_changed = pyqtSignal(str)       # field id
    notification = pyqtSignal(str)          # user-visible, non-blocking
    mounted = pyqtSignal()

    def __init__(
        self,
        backend: PreviewBackend,
        registry: Optional[HandlerRegistry] = None,
        history: Optional[HistoryBackend] = None,
        runner: Optional[TaskRunner] = None,
        config: Optional[EditorConfig] = None,
        environment: Callable[[], Tuple[str, str]] = detect_environment,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.config = config or get_editor_config()
        self.history = history if history is not None else InMemoryHistory()
        self.runner = runner if runner is not None else BackgroundTaskPool()
        self.registry = registry if registry is not None else HandlerRegistry()
        self._environment = environment
        self.schema: List[FieldSchema] = []

        # Flags (see EditorFlag)
        self._loading = True
        self._in_reset = False
        self._in_import = False
        self._dispatching = False
        self._mounted = False

        self.config_store = ConfigStore(self)
        self.metadata_store = MetadataStore(self)
        self.url_sync = URLSync(
            self.config_store, self.metadata_store, self.history,
            value_limit=self.config.url_value_limit,
        )
        self.preview_sync = PreviewSync(
            backend, self.runner, config=self.config, parent=self,
        )
        self.resolver = HandlerDependencyResolver(self.registry, self.runner, self)

        self._effect_timer = DebounceTimer(self.config.effect_delay_ms, self._run_effects)

        self.config_store.changed.connect(self._schedule_effects)
        self.metadata_store.changed.connect(self._schedule_effects)
        self.preview_sync.preview_updated.connect(self.preview_updated)
        self.preview_sync.error_occurred.connect(self.preview_error)
        self.preview_sync.loading_changed.connect(self.loading_changed)
        self.resolver.options_changed.connect(self.options_changed)

    # ========== STATE ==========

    @property
    def loading(self) -> bool:
        """True until mount() has hydrated every store."""
        return self._loading

    @property
    def preview(self) -> PreviewResult:
        return self.preview_sync.result

    def options(self, field_id: str) -> Tuple[HandlerOption, ...]:
        """Dynamic options for field_id; never blocks, empty until resolved."""
        return self.resolver.options(field_id)

    def values(self) -> Mapping[str, str]:
        return self.config_store.values()

    # ========== LIFECYCLE ==========

    def mount(self, query: Optional[str] = None, schema: Optional[Iterable[FieldSchema]] = None) -> None:
        """
        Populate state at startup.

        Order matters: the query string and the environment defaults must
        both be in the stores before the loading flag clears, because the
        first preview submission is gated on it.

        Args:
            query: Query string to hydrate from (default: the history's current one)
            schema: Field descriptors; defaults fill fields absent from the URL
        """
        if self._mounted:
            raise RuntimeError("ConfigEditor is already mounted")
        self._mounted = True

        if schema is not None:
            self.set_schema(schema)

        with FlagContextManager.loading_context(self):
            self.url_sync.hydrate(query)
            self.metadata_store.inject_defaults(self._environment)
            for field in self.schema:
                if field.has_default and field.id not in self.config_store:
                    self.config_store.set(field.id, field.default_value)

        logger.info(f"Mounted with {len(self.config_store)} field(s)")
        self.mounted.emit()
        self._schedule_effects()

    def set_schema(self, schema: Iterable[FieldSchema]) -> None:
        self.schema = list(schema)
        self.resolver.set_schema(self.schema)

    def shutdown(self) -> None:
        """Stop pending effects and cancel in-flight requests."""
        self._effect_timer.cancel()
        self.runner.cleanup()

    # ========== EDITS ==========

    def set_field(self, field_id: str, value: Any) -> bool:
        return FieldChangeDispatcher.instance().dispatch(FieldChangeEvent(field_id, value, self))

    def remove_field(self, field_id: str) -> bool:
        return FieldChangeDispatcher.instance().dispatch(FieldChangeEvent(field_id, None, self))

    def set_render_scale(self, scale: RenderScale) -> None:
        self.metadata_store.set_render_scale(scale)

    def set_timezone(self, timezone: Optional[str]) -> None:
        self.metadata_store.set_timezone(timezone)

    def set_locale(self, locale: Optional[str]) -> None:
        self.metadata_store.set_locale(locale)

    def reset(self, schema: Optional[Iterable[FieldSchema]] = None) -> List[str]:
        """
        Re-apply schema defaults.

        Only fields that declare a default are overwritten; every other entry
        keeps its current value. The query string is dropped and rebuilt from
        the resulting state at the next effect point.

        Returns:
            Ids whose value changed
        """
        fields = list(schema) if schema is not None else self.schema
        with FlagContextManager.reset_context(self):
            self.url_sync.clear()
            changed = self.config_store.reset_to_defaults(fields)
        logger.info(f"Reset {len(changed)} field(s) to defaults")
        self._schedule_effects()
        return changed

    def import_config(self, data: Union[str, bytes, Mapping[str, Any]]) -> List[str]:
        """
        Replace the whole store with an imported config.

        Raises:
            ConfigImportError: If data is malformed; the store is left untouched
        """
        try:
            values = parse_config(data)
        except ConfigImportError as e:
            logger.warning(f"Rejected config import: {e}")
            self.notification.emit(f"Could not import config: {e}")
            raise

        with FlagContextManager.manage_flags(self, _in_import=True):
            changed = self.config_store.replace_all(values)
        logger.info(f"Imported {len(values)} field(s) ({len(changed)} changed)")
        return changed

    def import_config_file(self, path: Union[str, Path]) -> List[str]:
        try:
            values = load_config_file(path)
        except ConfigImportError as e:
            logger.warning(f"Rejected config file {path}: {e}")
            self.notification.emit(f"Could not import config: {e}")
            raise
        return self.import_config(values)

    def export_config(self) -> str:
        """Serialize the store unmodified, including entries too large for the URL."""
        return dump_config(self.config_store.get_all())

    def export_config_file(self, path: Union[str, Path]) -> Path:
        return save_config_file(self.config_store.get_all(), path)

    def export_image(self, directory: Union[str, Path]) -> Path:
        return export_image(self.preview, directory, prefix=self.config.export_prefix)

    # ========== EFFECTS ==========

    def flush(self) -> None:
        """Run the pending effect evaluation now instead of on the next loop pass."""
        self._effect_timer.force()

    def _schedule_effects(self) -> None:
        self._effect_timer.trigger()

    def _run_effects(self) -> None:
        if self._loading:
            logger.debug("Skipping effects while loading")
            return
        entries = self.config_store.get_all()
        metadata = self.metadata_store.snapshot()

        self.url_sync.sync()
        self.resolver.evaluate({field_id: entry.value for field_id, entry in entries.items()})
        self.preview_sync.evaluate(entries, metadata)
