"""
ConfigStore: the source of truth for user edits.

An ordered mapping of field id to string value. Every public mutation is
applied in full before a single ``changed`` signal is emitted, so listeners
never observe a half-applied reset or import.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, TYPE_CHECKING

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_previewsync.state.metadata_store import RESERVED_KEYS

if TYPE_CHECKING:
    from pyqt_previewsync.schema.field_schema import FieldSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigEntry:
    """One configuration field value. The value is always a string."""
    id: str
    value: str


def coerce_value(value: Any) -> str:
    """Coerce a field value to its string form.

    Composite values (location objects, lists) are JSON encoded and booleans
    use the lowercase spelling the backend expects.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _check_id(field_id: str) -> None:
    if not isinstance(field_id, str) or not field_id:
        raise ValueError(f"Field id must be a non-empty string, got {field_id!r}")
    if field_id in RESERVED_KEYS:
        raise ValueError(f"Field id '{field_id}' is reserved for editor metadata")


class ConfigStore(QObject):
    """Mapping of field id to ConfigEntry with change notification.

    Insertion order is kept for export; it has no effect on synchronization.
    """

    changed = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._entries: Dict[str, ConfigEntry] = {}

    def set(self, field_id: str, value: Any) -> bool:
        """Upsert a field, coercing value to string.

        Returns:
            True if the stored value changed
        """
        _check_id(field_id)
        entry = ConfigEntry(field_id, coerce_value(value))
        if self._entries.get(field_id) == entry:
            return False
        self._entries[field_id] = entry
        logger.debug(f"set {field_id} = {entry.value[:50]!r}")
        self.changed.emit()
        return True

    def remove(self, field_id: str) -> bool:
        """Delete a field that became logically unset."""
        if self._entries.pop(field_id, None) is None:
            return False
        logger.debug(f"removed {field_id}")
        self.changed.emit()
        return True

    def get(self, field_id: str) -> Optional[str]:
        entry = self._entries.get(field_id)
        return entry.value if entry is not None else None

    def get_all(self) -> Mapping[str, ConfigEntry]:
        """Return an immutable snapshot of all entries."""
        return MappingProxyType(dict(self._entries))

    def values(self) -> Dict[str, str]:
        """Return a plain id -> value copy of the store."""
        return {field_id: entry.value for field_id, entry in self._entries.items()}

    def reset_to_defaults(self, schema: Iterable["FieldSchema"]) -> List[str]:
        """Overwrite every field that declares a default; leave the rest alone.

        Args:
            schema: Field descriptors; fields without a default are skipped

        Returns:
            Ids whose value changed
        """
        staged = dict(self._entries)
        for field in schema:
            if field.has_default:
                staged[field.id] = ConfigEntry(field.id, field.default_value)
        return self._publish(staged)

    def replace_all(self, values: Mapping[str, Any]) -> List[str]:
        """Replace the whole store with values (import).

        The new content is built and validated first; on any invalid id the
        store is left untouched.

        Returns:
            Ids that were added, removed or changed
        """
        staged: Dict[str, ConfigEntry] = {}
        for field_id, value in values.items():
            _check_id(field_id)
            staged[field_id] = ConfigEntry(field_id, coerce_value(value))
        return self._publish(staged)

    def _publish(self, staged: Dict[str, ConfigEntry]) -> List[str]:
        touched = [
            field_id for field_id in set(self._entries) | set(staged)
            if self._entries.get(field_id) != staged.get(field_id)
        ]
        if not touched:
            return []
        self._entries = staged
        logger.debug(f"published {len(staged)} entries ({len(touched)} changed)")
        self.changed.emit()
        return sorted(touched)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
