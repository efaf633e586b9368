"""
Config export/import files.

A config file is a flat JSON object mapping field id to ``{"value": str}``.
Export writes every entry of the store, including the ones too large for the
query string. Import is validated in full before the caller touches the
store, so a malformed file never leaves a half-imported configuration behind.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from pyqt_previewsync.exceptions import ConfigImportError
from pyqt_previewsync.state.config_store import ConfigEntry
from pyqt_previewsync.state.metadata_store import RESERVED_KEYS

logger = logging.getLogger(__name__)


def dump_config(entries: Mapping[str, ConfigEntry], indent: int = None) -> str:
    """Serialize store entries in insertion order.

    Each object also carries its ``id`` so files stay interchangeable with the
    ones written by the browser editor.
    """
    document = {
        field_id: {"id": field_id, "value": entry.value}
        for field_id, entry in entries.items()
    }
    return json.dumps(document, indent=indent)


def parse_config(data: Union[str, bytes, Mapping[str, Any]]) -> Dict[str, str]:
    """Validate a config document and return its id -> value mapping.

    Args:
        data: Raw file content (str or UTF-8 bytes) or an already decoded object

    Raises:
        ConfigImportError: On invalid encoding, invalid JSON or wrong shape
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ConfigImportError(f"Config file is not valid UTF-8: {e}") from e

    if isinstance(data, str):
        try:
            document = json.loads(data)
        except json.JSONDecodeError as e:
            raise ConfigImportError(f"Config file is not valid JSON: {e}") from e
    else:
        document = data

    if not isinstance(document, Mapping):
        raise ConfigImportError(
            f"Config file must contain a JSON object, got {type(document).__name__}"
        )

    values: Dict[str, str] = {}
    for field_id, item in document.items():
        if not isinstance(field_id, str) or not field_id:
            raise ConfigImportError(f"Invalid field id {field_id!r}")
        if field_id in RESERVED_KEYS:
            raise ConfigImportError(f"Field id '{field_id}' is reserved for editor metadata")
        if not isinstance(item, Mapping) or "value" not in item:
            raise ConfigImportError(f"Field '{field_id}' must be an object with a 'value' key")
        if not isinstance(item["value"], str):
            raise ConfigImportError(
                f"Field '{field_id}' value must be a string, got {type(item['value']).__name__}"
            )
        values[field_id] = item["value"]
    return values


def load_config_file(path: Union[str, Path]) -> Dict[str, str]:
    """Read and validate a config file from disk."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigImportError(f"Cannot read config file {path}: {e}") from e
    values = parse_config(raw)
    logger.debug(f"Loaded {len(values)} field(s) from {path}")
    return values


def save_config_file(entries: Mapping[str, ConfigEntry], path: Union[str, Path]) -> Path:
    """Write store entries to path, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_config(entries, indent=2), encoding="utf-8")
    logger.debug(f"Saved {len(entries)} field(s) to {path}")
    return path
