"""
Synchronization services.

URLSync mirrors state into the query string, PreviewSync submits it to the
rendering backend and HandlerDependencyResolver keeps dynamic option lists
up to date.
"""

from .url_sync import URLSync, build_query
from .preview_sync import PreviewSync, build_payload
from .handler_resolver import HandlerDependencyResolver

__all__ = [
    "URLSync",
    "build_query",
    "PreviewSync",
    "build_payload",
    "HandlerDependencyResolver",
]
