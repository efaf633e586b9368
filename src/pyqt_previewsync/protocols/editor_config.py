"""Base configuration class for the config editor.

Provides hooks for applications to customize synchronization behavior.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class EditorConfig:
    """Base configuration for editor behavior.

    Applications can subclass this to provide custom configuration.

    Attributes:
        base_url: Root URL of the rendering backend (``/api/v1/...`` is appended)
        request_timeout_s: Timeout for preview and handler requests
        url_value_limit: Longest value (in characters) still written to the query string
        effect_delay_ms: Delay before a state change is synchronized; 0 coalesces
            all changes made during one event loop iteration
        preview_trailing_refresh: Re-submit once after a request completes if a
            change was coalesced away while it was in flight
        export_prefix: File name prefix for exported preview images
        default_title: Preview title shown until the backend names the app
    """

    base_url: str = "http://127.0.0.1:8080/"
    request_timeout_s: float = 30.0
    url_value_limit: int = 1024
    effect_delay_ms: int = 0
    preview_trailing_refresh: bool = False
    export_prefix: str = "preview"
    default_title: str = "Pixlet"


# Global config instance (set by application)
_editor_config: Optional[EditorConfig] = None


def set_editor_config(config: EditorConfig) -> None:
    """Set the global editor configuration.

    Args:
        config: EditorConfig instance
    """
    global _editor_config
    _editor_config = config


def get_editor_config() -> EditorConfig:
    """Get the current editor configuration.

    Returns:
        Current EditorConfig or default if not set
    """
    if _editor_config is None:
        return EditorConfig()
    return _editor_config
