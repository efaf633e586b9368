"""
Unified Field Change Dispatcher.

Single entry point for field edits coming from the form layer. Writes the
edit into the editor's ConfigStore; everything downstream (query string,
preview submission, handler resolution) reacts to the store's change signal
at the editor's effect point.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pyqt_previewsync.editor import ConfigEditor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldChangeEvent:
    """Immutable event representing a field change."""
    field_id: str                  # Config field id
    value: Any                     # New value; None unsets the field
    source: 'ConfigEditor'         # Editor whose store receives the change


class FieldChangeDispatcher:
    """Singleton dispatcher for all field changes. Stateless."""

    _instance = None

    @classmethod
    def instance(cls) -> 'FieldChangeDispatcher':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def dispatch(self, event: FieldChangeEvent) -> bool:
        """Handle a field change event.

        Edits arriving while the editor resets or imports are dropped: both
        replace the store in one step and must not be interleaved.

        Returns:
            True if the store changed
        """
        source = event.source
        logger.debug(f"🚀 DISPATCH: {event.field_id} = {repr(event.value)[:50]}")

        # Reentrancy guard
        if source._dispatching:
            logger.warning(f"🚫 DISPATCH BLOCKED: {event.field_id} arrived while dispatching")
            return False

        if source._in_reset or source._in_import:
            logger.debug(f"🚫 DISPATCH BLOCKED: {event.field_id} edited during reset or import")
            return False

        source._dispatching = True
        try:
            if event.value is None:
                changed = source.config_store.remove(event.field_id)
            else:
                changed = source.config_store.set(event.field_id, event.value)
            logger.debug(f"  ✅ {event.field_id} {'changed' if changed else 'unchanged'}")
            return changed
        finally:
            source._dispatching = False
