"""Cancellation token shared by a pipeline run and its child processes."""

import threading
import time


class CancelToken:
    """A cancellation flag with an optional wall-clock deadline.

    ``cancel()`` may be called from any thread. ``deadline`` is expressed in
    ``time.monotonic()`` seconds.
    """

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds until the deadline, or None when there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; return True once cancelled."""
        return self._event.wait(timeout)
