"""
URLSync: mirrors ConfigStore and MetadataStore into a query string.

Load direction: every reserved metadata key is routed into MetadataStore,
every other key into ConfigStore. Save direction: the query string is rebuilt
from the stores and written with a history *replace*, so editing never grows
the history.

URL state is a lossy subset of full state: values longer than the configured
limit (images, large JSON blobs) are only sent to the backend.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

from pyqt_previewsync.protocols.editor_config import get_editor_config
from pyqt_previewsync.protocols.history import HistoryBackend
from pyqt_previewsync.state.config_store import ConfigEntry, ConfigStore
from pyqt_previewsync.state.metadata_store import (
    LOCALE_KEY,
    RENDER_SCALE_KEY,
    TIMEZONE_KEY,
    MetadataEntry,
    MetadataStore,
    RenderScale,
)

logger = logging.getLogger(__name__)


def build_query(
    entries: Mapping[str, ConfigEntry],
    metadata: MetadataEntry,
    value_limit: int,
) -> str:
    """Serialize entries that fit the limit plus metadata fields."""
    pairs: List[Tuple[str, str]] = [
        (field_id, entry.value)
        for field_id, entry in entries.items()
        if len(entry.value) <= value_limit
    ]
    pairs.extend(metadata.to_fields().items())
    return urlencode(pairs)


class URLSync:
    """Bidirectional translator between the stores and a history location."""

    def __init__(
        self,
        config_store: ConfigStore,
        metadata_store: MetadataStore,
        history: HistoryBackend,
        value_limit: Optional[int] = None,
    ):
        self.config_store = config_store
        self.metadata_store = metadata_store
        self.history = history
        self.value_limit = value_limit if value_limit is not None else get_editor_config().url_value_limit
        self._last_query: Optional[str] = None

    def hydrate(self, query: Optional[str] = None) -> int:
        """Load state from a query string (defaults to the history's current one).

        Returns:
            Number of config fields set
        """
        if query is None:
            query = self.history.current_query()
        query = query.lstrip("?")

        loaded = 0
        for key, value in parse_qsl(query, keep_blank_values=True):
            if key == RENDER_SCALE_KEY:
                scale = RenderScale.from_wire(value)
                if scale is None:
                    logger.warning(f"Ignoring invalid {RENDER_SCALE_KEY}={value!r}")
                    continue
                self.metadata_store.set_render_scale(scale)
            elif key == TIMEZONE_KEY:
                self.metadata_store.set_timezone(value)
            elif key == LOCALE_KEY:
                self.metadata_store.set_locale(value)
            elif key:
                self.config_store.set(key, value)
                loaded += 1

        logger.info(f"Hydrated {loaded} config field(s) from query string")
        self._last_query = query
        return loaded

    def build_query(self) -> str:
        return build_query(
            self.config_store.get_all(),
            self.metadata_store.snapshot(),
            self.value_limit,
        )

    def sync(self) -> bool:
        """Write the current state to history, replacing the current entry.

        Returns:
            True if the query string changed
        """
        query = self.build_query()
        if query == self._last_query:
            return False
        self.history.replace_query(query)
        self._last_query = query
        logger.debug(f"Replaced query string ({len(query)} chars)")
        return True

    def clear(self) -> None:
        """Drop the query string; the next sync rewrites it from state."""
        self.history.replace_query("")
        self._last_query = ""
