"""
Field schema descriptors.

The rendering backend publishes its config schema as
``{"version": "1", "schema": [{"id": ..., "type": ..., ...}, ...]}``.
The editor only needs a small read-only slice of each field: its id, its type,
its default and the name of its option handler, if any.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from pyqt_previewsync.exceptions import SchemaError
from pyqt_previewsync.state.config_store import coerce_value

logger = logging.getLogger(__name__)

# Field types whose value is a JSON location object
LOCATION_TYPES = frozenset({"location", "locationbased"})

# Location keys forwarded to handlers; display state stays client side
LOCATION_HANDLER_KEYS = ("lat", "lng", "locality", "timezone")


@dataclass(frozen=True)
class FieldSchema:
    """Read-only descriptor of one config field."""
    id: str
    type: str
    name: str = ""
    default: Any = None
    handler: Optional[str] = None

    @property
    def has_default(self) -> bool:
        """Fields with a missing or empty default are not touched by Reset."""
        return self.default is not None and self.default != ""

    @property
    def default_value(self) -> str:
        return coerce_value(self.default)

    @property
    def is_location(self) -> bool:
        return self.type in LOCATION_TYPES

    def serialize_for_handler(self, value: str) -> str:
        """Serialized semantic value passed to this field's handler.

        Location fields forward only the coordinates, locality and timezone of
        their JSON object; every other type forwards the raw value.
        """
        if not self.is_location:
            return value
        try:
            location = json.loads(value)
        except ValueError:
            logger.warning(f"Field {self.id}: location value is not JSON, forwarding raw")
            return value
        if not isinstance(location, dict):
            return value
        return json.dumps(
            {key: location.get(key) for key in LOCATION_HANDLER_KEYS}, separators=(",", ":")
        )


def parse_field(raw: Any) -> FieldSchema:
    """Build a FieldSchema from one schema document entry."""
    if not isinstance(raw, Mapping):
        raise SchemaError(f"Schema field must be an object, got {type(raw).__name__}")
    field_id = raw.get("id")
    field_type = raw.get("type")
    if not isinstance(field_id, str) or not field_id:
        raise SchemaError(f"Schema field has no id: {raw!r}")
    if not isinstance(field_type, str) or not field_type:
        raise SchemaError(f"Schema field '{field_id}' has no type")
    handler = raw.get("handler") or None
    if handler is not None and not isinstance(handler, str):
        raise SchemaError(f"Schema field '{field_id}' has a non-string handler")
    return FieldSchema(
        id=field_id,
        type=field_type,
        name=str(raw.get("name", "")),
        default=raw.get("default"),
        handler=handler,
    )


def parse_schema(document: Union[Mapping[str, Any], Iterable[Any]]) -> List[FieldSchema]:
    """Parse a schema document (or a bare list of fields).

    Raises:
        SchemaError: If the document or any field is malformed
    """
    if isinstance(document, Mapping):
        fields = document.get("schema") or []
    else:
        fields = document
    if isinstance(fields, (str, bytes)) or not isinstance(fields, Iterable):
        raise SchemaError("Schema document has no field list")

    parsed = [parse_field(raw) for raw in fields]
    seen = set()
    for field in parsed:
        if field.id in seen:
            raise SchemaError(f"Duplicate schema field id '{field.id}'")
        seen.add(field.id)
    return parsed
