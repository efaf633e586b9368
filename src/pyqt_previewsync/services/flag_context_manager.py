"""
Context manager factory for the editor's boolean state flags.

Pattern:
    Instead of:
        self._in_reset = True
        try:
            # ... logic
        finally:
            self._in_reset = False

    Use:
        with FlagContextManager.manage_flags(self, _in_reset=True):
            # ... logic

Previous values are restored even when the body raises.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Set
import logging

logger = logging.getLogger(__name__)


class EditorFlag(Enum):
    """
    Registry of valid ConfigEditor flags.

    Add new flags here as they're introduced to the codebase.
    """
    LOADING = '_loading'
    IN_RESET = '_in_reset'
    IN_IMPORT = '_in_import'


class FlagContextManager:
    """
    Context manager factory for boolean flag management.

    Examples:
        # Single flag:
        with FlagContextManager.manage_flags(editor, _in_import=True):
            editor.config_store.replace_all(values)

        # Convenience method for reset:
        with FlagContextManager.reset_context(editor):
            # ... reset logic
    """

    VALID_FLAGS: Set[str] = {flag.value for flag in EditorFlag}

    @staticmethod
    @contextmanager
    def manage_flags(obj: Any, **flags: bool):
        """
        Set flags on entry and restore previous values on exit.

        Args:
            obj: Object to set flags on (typically a ConfigEditor)
            **flags: Flag names and values to set (e.g., _in_reset=True)

        Raises:
            ValueError: If any flag name is not in VALID_FLAGS registry
        """
        invalid_flags = set(flags.keys()) - FlagContextManager.VALID_FLAGS
        if invalid_flags:
            raise ValueError(
                f"Invalid flags: {invalid_flags}. "
                f"Valid flags: {FlagContextManager.VALID_FLAGS}. "
                f"Add new flags to EditorFlag enum."
            )

        # Direct attribute access: every flag must be initialized in __init__
        prev_values: Dict[str, bool] = {}
        for flag_name in flags:
            prev_values[flag_name] = getattr(obj, flag_name)

        for flag_name, flag_value in flags.items():
            setattr(obj, flag_name, flag_value)
            logger.debug(f"Setting flag {flag_name}={flag_value} on {type(obj).__name__}")

        try:
            yield
        finally:
            for flag_name, prev_value in prev_values.items():
                setattr(obj, flag_name, prev_value)
                logger.debug(f"Restoring flag {flag_name}={prev_value} on {type(obj).__name__}")

    @staticmethod
    @contextmanager
    def reset_context(obj: Any):
        """Mark obj as resetting; field edits dispatched meanwhile are blocked."""
        with FlagContextManager.manage_flags(obj, **{EditorFlag.IN_RESET.value: True}):
            yield

    @staticmethod
    @contextmanager
    def loading_context(obj: Any):
        """
        Convenience context manager for the initial mount.

        Sets _loading=True while state is hydrated, then clears it on exit.
        Unlike manage_flags the flag is not restored: loading ends exactly once.
        """
        setattr(obj, EditorFlag.LOADING.value, True)
        try:
            yield
        finally:
            setattr(obj, EditorFlag.LOADING.value, False)

    @staticmethod
    def is_flag_set(obj: Any, flag: EditorFlag) -> bool:
        """Check if a flag is currently set to True."""
        return getattr(obj, flag.value)

    @staticmethod
    def get_flag_state(obj: Any) -> Dict[str, bool]:
        """Get current state of all registered flags (for logging)."""
        return {flag.value: getattr(obj, flag.value) for flag in EditorFlag}
