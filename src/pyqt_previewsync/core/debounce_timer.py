"""Trailing debounce timer used as the editor's effect point."""

from typing import Callable
from PyQt6.QtCore import QTimer


class DebounceTimer:
    """
    Single-shot timer that runs handler once after a burst of triggers.

    With delay_ms=0 the handler runs on the next event loop iteration, so every
    store change made while the current event is processed collapses into a
    single evaluation. A positive delay waits for that much inactivity.

    Usage:
        self._effect_timer = DebounceTimer(delay_ms=0, handler=self._run_effects)

        def on_store_changed(self):
            self._effect_timer.trigger()
    """

    def __init__(self, delay_ms: int, handler: Callable[[], None]):
        self._handler = handler
        self._timer = QTimer()
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, delay_ms))
        self._timer.timeout.connect(self._handler)

    @property
    def pending(self) -> bool:
        """True while a trigger is waiting to fire."""
        return self._timer.isActive()

    def trigger(self):
        """Schedule the handler, restarting any pending countdown."""
        self._timer.start()

    def cancel(self):
        self._timer.stop()

    def force(self):
        """Drop the pending countdown and run the handler now."""
        self._timer.stop()
        self._handler()
