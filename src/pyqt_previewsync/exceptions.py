"""Exception hierarchy for pyqt-previewsync.

None of these are fatal to an editor session: the worst outcome of any of
them is a stale preview image or a stale option list.
"""


class PreviewSyncError(Exception):
    """Base class for all pyqt-previewsync errors."""


class PreviewRequestError(PreviewSyncError):
    """Raised when the rendering backend cannot be reached or answers garbage."""


class PreviewRenderError(PreviewSyncError):
    """Raised when the backend answered but reported a render failure."""


class HandlerError(PreviewSyncError):
    """Raised when a schema handler cannot be invoked or returns a bad payload."""


class ConfigImportError(PreviewSyncError):
    """Raised when an imported config file has invalid encoding or shape."""


class SchemaError(PreviewSyncError):
    """Raised when a schema document cannot be parsed into field descriptors."""
