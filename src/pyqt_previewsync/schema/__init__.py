"""Schema descriptors consumed by the editor."""

from .field_schema import FieldSchema, parse_field, parse_schema, LOCATION_TYPES

__all__ = [
    "FieldSchema",
    "parse_field",
    "parse_schema",
    "LOCATION_TYPES",
]
