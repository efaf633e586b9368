"""pytest configuration and fixtures for pyqt-previewsync tests."""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import pytest
from PyQt6.QtCore import QCoreApplication


@pytest.fixture(scope="session")
def qapp():
    """Create QCoreApplication instance for tests."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@dataclass
class PendingCall:
    target: Callable[..., Any]
    args: tuple
    kwargs: dict
    on_success: Optional[Callable[[Any], None]]
    on_error: Optional[Callable[[Exception], None]]
    done: bool = False


@dataclass
class ManualRunner:
    """TaskRunner that holds calls until the test resolves them, in any order."""

    calls: List[PendingCall] = field(default_factory=list)
    cleaned_up: bool = False

    def run(self, target, args=(), kwargs=None, on_success=None, on_error=None):
        call = PendingCall(target, tuple(args), kwargs or {}, on_success, on_error)
        self.calls.append(call)
        return call

    def cleanup(self):
        self.cleaned_up = True

    @property
    def pending(self) -> List[PendingCall]:
        return [call for call in self.calls if not call.done]

    def resolve(self, index: int):
        """Execute call #index (0-based, issue order) and deliver its outcome."""
        call = self.calls[index]
        assert not call.done, f"call {index} already resolved"
        call.done = True
        try:
            result = call.target(*call.args, **call.kwargs)
        except Exception as e:
            if call.on_error:
                call.on_error(e)
            return None
        if call.on_success:
            call.on_success(result)
        return result

    def resolve_all(self):
        for index, call in enumerate(self.calls):
            if not call.done:
                self.resolve(index)


class RecordingBackend:
    """PreviewBackend that renders the payload it was given into the title."""

    def __init__(self):
        self.payloads = []
        self.fail_with: Optional[Exception] = None

    def render(self, payload):
        from pyqt_previewsync.state import PreviewResult, ImageFormat

        self.payloads.append(dict(payload))
        if self.fail_with is not None:
            raise self.fail_with
        title = payload.get("name", "")
        return PreviewResult(
            image_bytes=f"img:{title}".encode(),
            image_format=ImageFormat.WEBP,
            width=64,
            height=32,
            title=title,
        )


@pytest.fixture
def runner():
    return ManualRunner()


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def editor(qapp, runner, backend):
    """Editor wired to the manual runner and a fixed environment."""
    from pyqt_previewsync import ConfigEditor, EditorConfig, HandlerRegistry, InMemoryHistory

    editor = ConfigEditor(
        backend=backend,
        registry=HandlerRegistry(),
        history=InMemoryHistory(),
        runner=runner,
        config=EditorConfig(),
        environment=lambda: ("America/New_York", "en-US"),
    )
    yield editor
    editor.shutdown()
