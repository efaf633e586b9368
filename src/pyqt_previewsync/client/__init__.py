"""Backend clients."""

from .http_client import HttpRenderClient

__all__ = ["HttpRenderClient"]
