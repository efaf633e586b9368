"""
Core PyQt6 utilities.

Event loop helpers with no domain-specific logic: timer-based debouncing,
background request tasks and issue-order sequence tracking.
"""

from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskPool
from .sequence_tracker import SequenceTracker

__all__ = [
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskPool",
    "SequenceTracker",
]
