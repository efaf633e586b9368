"""
PreviewSync: submits the full configuration to the rendering backend.

Evaluated at the editor's effect point after every state change:

1. The inputs (config snapshot, render scale, timezone, locale) are compared
   with the previous evaluation; identical inputs issue nothing.
2. While a request is in flight and a preview has already been received, the
   change is coalesced away. Before the first result arrives every change is
   submitted, so the first paint is never starved.
3. Each request carries a sequence number. A result is applied only if no
   later-issued request has already been applied.

Failures never blank the current image.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Dict, Mapping, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_previewsync.core.sequence_tracker import SequenceTracker
from pyqt_previewsync.protocols.editor_config import EditorConfig, get_editor_config
from pyqt_previewsync.protocols.preview_backend import PreviewBackend, TaskRunner
from pyqt_previewsync.state.config_store import ConfigEntry
from pyqt_previewsync.state.metadata_store import MetadataEntry
from pyqt_previewsync.state.preview_result import PreviewResult

logger = logging.getLogger(__name__)


def build_payload(entries: Mapping[str, ConfigEntry], metadata: MetadataEntry) -> Dict[str, str]:
    """Submission payload: every entry regardless of size, plus metadata."""
    payload = {field_id: entry.value for field_id, entry in entries.items()}
    payload.update(metadata.to_fields())
    return payload


class PreviewSync(QObject):
    """Debounced, coalesced and supersession-safe preview submission."""

    preview_updated = pyqtSignal(object)   # PreviewResult
    error_occurred = pyqtSignal(str)       # Displayable message
    loading_changed = pyqtSignal(bool)

    def __init__(
        self,
        backend: PreviewBackend,
        runner: TaskRunner,
        config: Optional[EditorConfig] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        config = config or get_editor_config()
        self.backend = backend
        self.runner = runner
        self.trailing_refresh = config.preview_trailing_refresh
        self._tracker = SequenceTracker("preview")
        self._result = PreviewResult(title=config.default_title)
        self._has_result = False
        self._error: Optional[str] = None
        self._previous_inputs: Optional[Tuple] = None
        self._latest_payload: Optional[Dict[str, str]] = None
        self._coalesced = False

    @property
    def result(self) -> PreviewResult:
        return self._result

    @property
    def has_result(self) -> bool:
        """True once any preview has been received this session."""
        return self._has_result

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def in_flight(self) -> bool:
        return self._tracker.in_flight

    def evaluate(self, entries: Mapping[str, ConfigEntry], metadata: MetadataEntry) -> Optional[int]:
        """Run the effect for the given state.

        Returns:
            Sequence number of the issued request, or None if nothing was issued
        """
        inputs = (tuple(entries.items()), metadata)
        if inputs == self._previous_inputs:
            return None
        self._previous_inputs = inputs
        self._latest_payload = build_payload(entries, metadata)

        if self._tracker.in_flight and self._has_result:
            logger.debug("Preview request in flight, coalescing change")
            self._coalesced = True
            return None
        return self._submit(self._latest_payload)

    def _submit(self, payload: Dict[str, str]) -> int:
        self._coalesced = False
        seq = self._tracker.issue()
        logger.debug(f"Submitting preview #{seq} ({len(payload)} fields)")
        self._set_loading(True)
        self.runner.run(
            target=self.backend.render,
            args=(payload,),
            on_success=partial(self._on_result, seq),
            on_error=partial(self._on_error, seq),
        )
        return seq

    def _on_result(self, seq: int, result: PreviewResult) -> None:
        if not self._tracker.settle(seq):
            self._after_completion()
            return
        was_loading = self._result.loading
        self._result = result.with_loading(False)
        self._has_result = True
        self._error = None
        logger.debug(f"Applied preview #{seq} ({result.width}x{result.height} {result.image_format.value})")
        self.preview_updated.emit(self._result)
        if was_loading:
            self.loading_changed.emit(False)
        self._after_completion()

    def _on_error(self, seq: int, error: Exception) -> None:
        relevant = self._tracker.fail(seq)
        if relevant:
            self._error = str(error) or type(error).__name__
            logger.error(f"Preview #{seq} failed: {self._error}")
            if not self._tracker.in_flight:
                self._set_loading(False)
            self.error_occurred.emit(self._error)
        else:
            logger.debug(f"Ignoring failure of superseded preview #{seq}: {error}")
        self._after_completion()

    def _after_completion(self) -> None:
        if self._coalesced and self.trailing_refresh and not self._tracker.in_flight:
            logger.debug("Re-submitting coalesced preview change")
            self._submit(self._latest_payload)

    def _set_loading(self, loading: bool) -> None:
        if self._result.loading == loading:
            return
        self._result = self._result.with_loading(loading)
        self.loading_changed.emit(loading)
