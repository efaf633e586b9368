"""Background request tasks with logical cancellation and an in-flight pool."""

from typing import Callable, Any, Tuple, Set
from functools import partial
import logging

from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during shutdown cleanup


class BackgroundTask(QThread):
    """
    Run one blocking call (a network request) off the event loop thread.

    The task object lives on the thread that created it, so results reach
    connected callbacks as queued signals on that thread. State mutation in
    callbacks therefore never interleaves with other event loop work.

    Usage:
        task = BackgroundTask(target=client.render, args=(payload,))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        # Later:
        task.cancel()  # Signals won't emit after this
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)  # Full exception object

    def cancel(self):
        """Cancel task: signals won't emit after this."""
        self.cancelled = True


class BackgroundTaskPool:
    """
    Keeps every running BackgroundTask referenced until it finishes.

    Unlike a single-slot task manager, starting a task never cancels the
    previous one: several requests may be in flight at once and the caller
    decides which result wins (see SequenceTracker).

    Usage:
        self._pool = BackgroundTaskPool()

        self._pool.run(
            target=self.client.render,
            args=(payload,),
            on_success=self._on_preview,
            on_error=self._on_preview_failed,
        )

        def shutdown(self):
            self._pool.cleanup()
    """

    def __init__(self):
        self._tasks: Set[BackgroundTask] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> BackgroundTask:
        """
        Start target on a worker thread.

        Args:
            target: Function to execute in background
            args: Positional arguments for target
            kwargs: Keyword arguments for target
            on_success: Callback for successful result
            on_error: Callback for error (receives Exception, not str)

        Returns:
            The started BackgroundTask
        """
        task = BackgroundTask(target=target, args=args, kwargs=kwargs)
        if on_success:
            task.result_ready.connect(on_success)
        if on_error:
            task.error_occurred.connect(on_error)
        task.finished.connect(partial(self._release, task))

        self._tasks.add(task)
        task.start()
        logger.debug(f"Started background task ({len(self._tasks)} in flight)")
        return task

    def cleanup(self):
        """Cancel and wait for every running task. Call on shutdown."""
        for task in list(self._tasks):
            task.cancel()
            task.wait(CLEANUP_WAIT_MS)
        self._tasks.clear()

    def _release(self, task: BackgroundTask):
        self._tasks.discard(task)
