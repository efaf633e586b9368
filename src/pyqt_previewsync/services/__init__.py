"""
Service layer for the editor.

Cross-cutting concerns: routing field edits into the store and scoped
management of the editor's state flags.
"""

from .flag_context_manager import FlagContextManager, EditorFlag
from .field_change_dispatcher import FieldChangeDispatcher, FieldChangeEvent

__all__ = [
    "FlagContextManager",
    "EditorFlag",
    "FieldChangeDispatcher",
    "FieldChangeEvent",
]
