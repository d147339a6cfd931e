"""Progress decoding and monitoring for a running ffmpeg process."""

import re
import subprocess
import threading
from collections import deque
from enum import Enum
from typing import Callable, Iterable

from pydantic import BaseModel

# (percentage, elapsed seconds, total seconds); percentage is None when the
# total duration is unknown
ProgressObserver = Callable[[float | None, float, float], None]

# ffmpeg status line, e.g. "frame=  10 fps=0.0 q=-1.0 size=0kB time=00:01:02.50 bitrate=..."
TIME_PATTERN = re.compile(r"time=(\d{2}):(\d{2}):(\d{2})\.(\d{2})")

# Lines of output kept for error reports
OUTPUT_TAIL_LINES = 200


def decode_progress_line(line: str) -> float | None:
    """
    Extract the elapsed media time from one line of ffmpeg diagnostics.

    Args:
        line: One line of ffmpeg stderr output

    Returns:
        Elapsed media time in seconds, or None if the line carries no time marker
    """
    match = TIME_PATTERN.search(line)
    if not match:
        return None

    hours, minutes, seconds, centiseconds = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds + centiseconds / 100


def compute_percentage(elapsed: float, total: float) -> float | None:
    """Percentage of ``total`` covered by ``elapsed``, capped at 100."""
    if not total or total <= 0:
        return None
    return min(100.0, 100.0 * elapsed / total)


class ProgressSample(BaseModel):
    """One progress reading."""

    elapsed: float
    percentage: float | None = None

    model_config = {"frozen": True}


class MonitorState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ProgressMonitor:
    """Turn a live ffmpeg diagnostic stream into observer updates.

    The monitor is attached to the process it watches and owns its
    cancellation: ``cancel()`` stops reading and kills the process.
    ``consume()`` runs on a dedicated reader thread while another thread
    waits for the process to exit.
    """

    def __init__(self, total_duration: float, observer: ProgressObserver | None = None):
        self.total_duration = total_duration or 0.0
        self.observer = observer
        self.state = MonitorState.IDLE
        self.error: BaseException | None = None
        self.tail: deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)
        self._elapsed = 0.0
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()

    def attach(self, process: subprocess.Popen) -> None:
        """Bind the monitor to a started process."""
        with self._lock:
            if self.state is not MonitorState.IDLE:
                raise RuntimeError(f"monitor already {self.state.value}")
            self._process = process
            self.state = MonitorState.RUNNING

    def consume(self, stream: Iterable[str]) -> None:
        """Read lines until the stream ends or the monitor is cancelled."""
        for line in stream:
            if self.state is MonitorState.CANCELLED:
                break

            line = line.rstrip()
            if line:
                self.tail.append(line)

            elapsed = decode_progress_line(line)
            if elapsed is None:
                continue

            try:
                self._update(elapsed)
            except Exception as e:
                # A failing observer aborts the run; the runner re-raises it
                self.error = e
                self.cancel()
                break

    def _update(self, elapsed: float) -> None:
        with self._lock:
            self._elapsed = elapsed
            observer = self.observer
            total = self.total_duration

        if observer is not None:
            observer(compute_percentage(elapsed, total), elapsed, total)

    def cancel(self) -> None:
        """Stop reading and terminate the watched process immediately."""
        with self._lock:
            if self.state is not MonitorState.RUNNING:
                return
            self.state = MonitorState.CANCELLED
            process = self._process

        if process is not None and process.poll() is None:
            process.kill()

    def complete(self) -> None:
        self._finish(MonitorState.COMPLETED)

    def fail(self) -> None:
        self._finish(MonitorState.FAILED)

    def _finish(self, state: MonitorState) -> None:
        with self._lock:
            if self.state is MonitorState.RUNNING:
                self.state = state

    def snapshot(self) -> ProgressSample:
        """Current elapsed time and percentage."""
        with self._lock:
            elapsed = self._elapsed
            total = self.total_duration
        return ProgressSample(elapsed=elapsed, percentage=compute_percentage(elapsed, total))

    def output_tail(self) -> str:
        return "\n".join(self.tail)
