"""
HTTP client for the rendering backend.

Handles communication with the backend's preview, schema handler and schema
endpoints. All calls block and are meant to run on a BackgroundTask.
"""

import base64
import binascii
import logging
from functools import partial
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote, urljoin

import requests

from pyqt_previewsync.exceptions import (
    HandlerError,
    PreviewRenderError,
    PreviewRequestError,
    SchemaError,
)
from pyqt_previewsync.protocols.editor_config import get_editor_config
from pyqt_previewsync.protocols.handler_registry import HandlerRegistry
from pyqt_previewsync.schema.field_schema import FieldSchema, parse_schema
from pyqt_previewsync.state.preview_result import (
    HandlerOption,
    ImageFormat,
    PreviewResult,
    normalize_options,
)

logger = logging.getLogger(__name__)

PREVIEW_PATH = "api/v1/preview"
HANDLER_PATH = "api/v1/handlers/{handler}"
SCHEMA_PATH = "api/v1/schema"


class HttpRenderClient:
    """
    Client for a rendering backend speaking the ``/api/v1`` protocol.

    Implements PreviewBackend and provides the calls the schema loader binds
    into a HandlerRegistry.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            base_url: Backend root URL (default: EditorConfig.base_url)
            timeout: Request timeout in seconds (default: EditorConfig.request_timeout_s)
            session: requests session to reuse (default: a new one)
        """
        config = get_editor_config()
        base_url = base_url or config.base_url
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout if timeout is not None else config.request_timeout_s
        self.session = session or requests.Session()
        self.default_title = config.default_title

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path)

    def _json(self, response: requests.Response, what: str) -> Any:
        try:
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            body = response.text.strip()[:200]
            raise PreviewRequestError(f"{what} failed with HTTP {response.status_code}: {body}") from e
        except ValueError as e:
            raise PreviewRequestError(f"{what} returned invalid JSON: {e}") from e

    def render(self, payload: Mapping[str, str]) -> PreviewResult:
        """
        Submit the configuration as multipart form data and decode the preview.

        Raises:
            PreviewRequestError: On transport errors or unusable responses
            PreviewRenderError: If the backend reports a render error
        """
        # (None, value) tuples make requests encode plain form fields as multipart
        files = [(key, (None, value)) for key, value in payload.items()]
        try:
            response = self.session.post(self._url(PREVIEW_PATH), files=files, timeout=self.timeout)
        except requests.RequestException as e:
            raise PreviewRequestError(f"Preview request failed: {e}") from e

        data = self._json(response, "Preview request")
        if not isinstance(data, Mapping):
            raise PreviewRequestError("Preview response is not a JSON object")
        if data.get("error"):
            raise PreviewRenderError(str(data["error"]))

        try:
            image_bytes = base64.b64decode(data.get("img") or "", validate=True)
        except (binascii.Error, ValueError) as e:
            raise PreviewRequestError(f"Preview image is not valid base64: {e}") from e

        return PreviewResult(
            image_bytes=image_bytes,
            image_format=ImageFormat.from_wire(data.get("img_type", "")),
            width=int(data.get("width") or 64),
            height=int(data.get("height") or 32),
            title=data.get("title") or self.default_title,
            is2x=bool(data.get("is2x", False)),
        )

    def call_handler(self, handler_name: str, field_id: str, serialized_value: str) -> List[HandlerOption]:
        """
        Invoke a schema handler on the backend.

        Raises:
            HandlerError: On any failure
        """
        url = self._url(HANDLER_PATH.format(handler=quote(handler_name, safe="")))
        body = {"id": field_id, "param": serialized_value}
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
            data = self._json(response, f"Handler {handler_name}")
        except (requests.RequestException, PreviewRequestError) as e:
            raise HandlerError(f"Handler {handler_name} for {field_id} failed: {e}") from e
        return normalize_options(data)

    def fetch_schema(self) -> List[FieldSchema]:
        """Download and parse the backend's config schema."""
        try:
            response = self.session.get(self._url(SCHEMA_PATH), timeout=self.timeout)
            data = self._json(response, "Schema request")
        except (requests.RequestException, PreviewRequestError) as e:
            raise SchemaError(f"Cannot load schema: {e}") from e
        return parse_schema(data)

    def bind_handlers(self, registry: HandlerRegistry, schema: Iterable[FieldSchema]) -> int:
        """Bind every handler named in schema to this backend.

        Returns:
            Number of handlers bound
        """
        names = {field.handler for field in schema if field.handler}
        for name in names:
            registry.register(name, partial(self.call_handler, name))
        logger.info(f"Bound {len(names)} backend handler(s)")
        return len(names)
