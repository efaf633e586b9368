"""
MetadataStore: render scale, timezone and locale.

Metadata rides alongside the configuration in URLs and preview submissions
but is never part of the config schema. It travels under reserved keys that
ConfigStore refuses as field ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from PyQt6.QtCore import QObject, QLocale, QTimeZone, pyqtSignal

logger = logging.getLogger(__name__)

RENDER_SCALE_KEY = "_renderScale"
TIMEZONE_KEY = "_metaTimezone"
LOCALE_KEY = "_metaLocale"
RESERVED_KEYS = frozenset({RENDER_SCALE_KEY, TIMEZONE_KEY, LOCALE_KEY})


class RenderScale(Enum):
    """Preview render scale; UNSET lets the backend pick its own default."""
    UNSET = ""
    X1 = "1"
    X2 = "2"

    @classmethod
    def from_wire(cls, raw: Optional[str]) -> Optional["RenderScale"]:
        """Parse a query/form value; anything but "1" or "2" is not a scale."""
        if raw == cls.X1.value:
            return cls.X1
        if raw == cls.X2.value:
            return cls.X2
        return None


@dataclass(frozen=True)
class MetadataEntry:
    """Snapshot of the metadata side channel. Empty string means unspecified."""
    render_scale: RenderScale = RenderScale.UNSET
    timezone: str = ""
    locale: str = ""

    def to_fields(self) -> Dict[str, str]:
        """Reserved-key fields for query strings and submissions."""
        fields = {TIMEZONE_KEY: self.timezone, LOCALE_KEY: self.locale}
        if self.render_scale is not RenderScale.UNSET:
            fields[RENDER_SCALE_KEY] = self.render_scale.value
        return fields


def detect_environment() -> Tuple[str, str]:
    """Return the runtime's (IANA timezone id, BCP 47 locale)."""
    timezone = bytes(QTimeZone.systemTimeZoneId()).decode("utf-8", errors="replace")
    locale = QLocale.system().bcp47Name()
    return timezone, locale


class MetadataStore(QObject):
    """Key-value holder for render scale, timezone and locale."""

    changed = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._render_scale = RenderScale.UNSET
        self._timezone = ""
        self._locale = ""
        self._defaults_injected = False

    @property
    def render_scale(self) -> RenderScale:
        return self._render_scale

    @property
    def timezone(self) -> str:
        return self._timezone

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def defaults_injected(self) -> bool:
        return self._defaults_injected

    def snapshot(self) -> MetadataEntry:
        return MetadataEntry(self._render_scale, self._timezone, self._locale)

    def set_render_scale(self, scale: RenderScale) -> None:
        if scale is self._render_scale:
            return
        self._render_scale = scale
        self.changed.emit()

    def set_timezone(self, timezone: Optional[str]) -> None:
        timezone = timezone or ""
        if timezone == self._timezone:
            return
        self._timezone = timezone
        self.changed.emit()

    def set_locale(self, locale: Optional[str]) -> None:
        locale = locale or ""
        if locale == self._locale:
            return
        self._locale = locale
        self.changed.emit()

    def inject_defaults(self, detector: Callable[[], Tuple[str, str]] = detect_environment) -> bool:
        """Fill empty timezone/locale from the environment, once per session.

        The latch closes on the first call whatever it finds, so a later
        explicit choice (including an explicit empty string) is never
        overwritten.

        Returns:
            True if this call performed the injection
        """
        if self._defaults_injected:
            return False
        self._defaults_injected = True

        if self._timezone and self._locale:
            return True

        timezone, locale = detector()
        logger.debug(f"Detected environment timezone={timezone!r} locale={locale!r}")
        if not self._timezone:
            self.set_timezone(timezone)
        if not self._locale:
            self.set_locale(locale)
        return True
