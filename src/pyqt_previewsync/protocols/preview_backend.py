"""Protocols for the rendering backend and the request runner."""

from typing import Protocol, Mapping, Callable, Any, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from pyqt_previewsync.state.preview_result import PreviewResult


class PreviewBackend(Protocol):
    """Renders a preview from a flat string payload.

    Called on a background thread. Raises PreviewRequestError on transport
    failure and PreviewRenderError when the backend reports a render error.
    """

    def render(self, payload: Mapping[str, str]) -> "PreviewResult":
        ...


class TaskRunner(Protocol):
    """Runs blocking calls off the event loop thread.

    Callbacks must be invoked on the event loop thread. BackgroundTaskPool is
    the production implementation.
    """

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> Any:
        ...

    def cleanup(self) -> None:
        ...
