"""
HandlerDependencyResolver: dynamic option lists for handler fields.

A field whose schema names a handler gets its option list from that handler,
computed from the field's own current value (e.g. the train stations near a
chosen location). Whenever the value changes the handler is invoked in the
background; the newest-issued invocation per field wins.

Results are derived state: they live only here, are recomputed after reload
and are never written back into the ConfigStore.
"""

from __future__ import annotations

import logging
from functools import partial
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_previewsync.core.sequence_tracker import SequenceTracker
from pyqt_previewsync.exceptions import HandlerError
from pyqt_previewsync.protocols.handler_registry import HandlerRegistry
from pyqt_previewsync.protocols.preview_backend import TaskRunner
from pyqt_previewsync.schema.field_schema import FieldSchema
from pyqt_previewsync.state.preview_result import HandlerOption, normalize_options

logger = logging.getLogger(__name__)


class HandlerDependencyResolver(QObject):
    """Invokes named handlers on value change and caches their option lists."""

    options_changed = pyqtSignal(str)   # field id

    def __init__(
        self,
        registry: HandlerRegistry,
        runner: TaskRunner,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.registry = registry
        self.runner = runner
        self._fields: Dict[str, FieldSchema] = {}
        self._trackers: Dict[str, SequenceTracker] = {}
        self._last_values: Dict[str, str] = {}
        self._results: Dict[str, Tuple[HandlerOption, ...]] = {}

    def set_schema(self, schema: Iterable[FieldSchema]) -> None:
        """Register the fields that declare a handler."""
        self._fields = {field.id: field for field in schema if field.handler}
        logger.debug(f"Tracking {len(self._fields)} handler field(s): {sorted(self._fields)}")

    def options(self, field_id: str) -> Tuple[HandlerOption, ...]:
        """Latest resolved options for field_id; empty before the first resolution."""
        return self._results.get(field_id, ())

    def results(self) -> Mapping[str, Tuple[HandlerOption, ...]]:
        return MappingProxyType(dict(self._results))

    def in_flight(self, field_id: str) -> bool:
        tracker = self._trackers.get(field_id)
        return tracker is not None and tracker.in_flight

    def evaluate(self, values: Mapping[str, str]) -> List[str]:
        """Resolve every handler field whose value changed since its last resolution.

        Args:
            values: Current id -> value mapping of the config store

        Returns:
            Ids of the fields for which a handler was invoked
        """
        invoked = []
        for field_id, field in self._fields.items():
            value = values.get(field_id)
            if value is None or self._last_values.get(field_id) == value:
                continue
            # Unbound handlers leave the value unrecorded so a later binding resolves it
            if self.resolve(field, value) is not None:
                self._last_values[field_id] = value
                invoked.append(field_id)
        return invoked

    def resolve(self, field: FieldSchema, value: str) -> Optional[int]:
        """Invoke field's handler for value.

        Returns:
            Sequence number of the invocation, or None if the handler is unknown
        """
        handler = self.registry.get(field.handler)
        if handler is None:
            logger.warning(f"Field {field.id}: no handler bound for '{field.handler}'")
            return None

        tracker = self._trackers.get(field.id)
        if tracker is None:
            tracker = self._trackers[field.id] = SequenceTracker(f"handler:{field.id}")
        seq = tracker.issue()

        serialized = field.serialize_for_handler(value)
        logger.debug(f"Invoking {field.handler} for {field.id} (#{seq})")
        self.runner.run(
            target=handler,
            args=(field.id, serialized),
            on_success=partial(self._on_resolved, field.id, seq),
            on_error=partial(self._on_failed, field.id, seq),
        )
        return seq

    def _on_resolved(self, field_id: str, seq: int, raw) -> None:
        try:
            options = tuple(normalize_options(raw))
        except HandlerError as e:
            self._on_failed(field_id, seq, e)
            return

        if not self._trackers[field_id].settle(seq):
            return
        self._results[field_id] = options
        logger.debug(f"Field {field_id}: {len(options)} option(s) from #{seq}")
        self.options_changed.emit(field_id)

    def _on_failed(self, field_id: str, seq: int, error: Exception) -> None:
        self._trackers[field_id].fail(seq)
        # Previous options stay in place
        logger.warning(f"Handler for {field_id} failed (#{seq}): {error}")
