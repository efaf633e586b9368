"""
Protocol definitions and pluggable registries.

Contracts between the synchronization engine and its external collaborators:
the rendering backend, the request runner, the history location and the
handler registry populated by the schema loader.
"""

from .editor_config import EditorConfig, set_editor_config, get_editor_config
from .handler_registry import HandlerFunction, HandlerRegistry
from .history import HistoryBackend, InMemoryHistory
from .preview_backend import PreviewBackend, TaskRunner

__all__ = [
    "EditorConfig",
    "set_editor_config",
    "get_editor_config",
    "HandlerFunction",
    "HandlerRegistry",
    "HistoryBackend",
    "InMemoryHistory",
    "PreviewBackend",
    "TaskRunner",
]
