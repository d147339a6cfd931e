"""Process runner: executable resolution and deadline-bounded subprocess execution."""

import os
import platform
import shlex
import shutil
import subprocess
import threading
import time
from pathlib import Path
from typing import Callable, Sequence, TextIO

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape

from .cancel import CancelToken
from .config import Config
from .errors import (
    ErrorCode,
    ExecutableNotFoundError,
    ExecutionFailedError,
    OperationCancelledError,
    ProcessTimeoutError,
)
from .progress import ProgressMonitor, ProgressObserver

# How often the waiting thread re-checks cancellation and the deadline
POLL_INTERVAL = 0.05


class ProcessRequest(BaseModel):
    """One invocation of an external executable."""

    executable: str
    args: tuple[str, ...] = ()
    timeout: float | None = None

    model_config = {"frozen": True}

    def command(self) -> list[str]:
        return [self.executable, *self.args]

    def display(self) -> str:
        return shlex.join(self.command())


class ProcessResult(BaseModel):
    """Exit status and captured output of a finished process."""

    returncode: int
    output: str = ""


def get_common_ffmpeg_paths() -> list[str]:
    """Return install directories to search when ffmpeg is not on PATH."""
    system = platform.system().lower()
    if system == "windows":
        return [
            "C:\\ffmpeg\\bin",
            "C:\\Program Files\\ffmpeg\\bin",
            "C:\\Program Files (x86)\\ffmpeg\\bin",
        ]
    if system == "darwin":
        return ["/usr/local/bin", "/opt/homebrew/bin", "/usr/bin"]
    if system == "linux":
        return ["/usr/bin", "/usr/local/bin", "/opt/ffmpeg/bin"]
    return ["/usr/bin", "/usr/local/bin"]


def executable_name(base: str) -> str:
    if platform.system().lower() == "windows":
        return f"{base}.exe"
    return base


def detect_executable(base: str) -> str | None:
    """Find ``base`` on PATH, then in the common install directories."""
    name = executable_name(base)

    found = shutil.which(name)
    if found:
        return found

    for directory in get_common_ffmpeg_paths():
        candidate = Path(directory) / name
        if candidate.is_file():
            return str(candidate)

    return None


class ProcessRunner:
    """Run ffmpeg-family executables under a deadline and a cancel token.

    Every call spawns exactly one child and does not return until that child
    has exited, either on its own or because it was killed.
    """

    def __init__(self, config: Config | None = None, console: Console | None = None):
        self.config = config or Config()
        self.console = console or Console()
        self._ffmpeg_path: str | None = None
        self._ffprobe_path: str | None = None

    @property
    def ffmpeg_path(self) -> str:
        """Resolved ffmpeg executable, cached after the first lookup."""
        if self._ffmpeg_path is None:
            path = self.config.ffmpeg_path or detect_executable("ffmpeg")
            if not path:
                raise ExecutableNotFoundError(
                    "ffmpeg executable not found. Install ffmpeg or set FFMPEG_PATH."
                )
            self._ffmpeg_path = path
        return self._ffmpeg_path

    @property
    def ffprobe_path(self) -> str | None:
        """Resolved ffprobe executable, or None if there is none."""
        if self._ffprobe_path is None:
            path = self.config.ffprobe_path
            if not path:
                ffmpeg = Path(self.ffmpeg_path)
                sibling = ffmpeg.with_name(ffmpeg.name.replace("ffmpeg", "ffprobe"))
                if sibling != ffmpeg and sibling.is_file():
                    path = str(sibling)
                else:
                    path = detect_executable("ffprobe")
            self._ffprobe_path = path
        return self._ffprobe_path

    def build_request(
        self,
        args: Sequence[str | os.PathLike],
        timeout: float | None = None,
        executable: str | None = None,
    ) -> ProcessRequest:
        """Build a request for ffmpeg (or ``executable``) with ``args``."""
        return ProcessRequest(
            executable=executable or self.ffmpeg_path,
            args=tuple(str(arg) for arg in args),
            timeout=timeout,
        )

    def verify(self) -> str:
        """Check the resolved executable is ffmpeg and return its version line."""
        result = self.run(self.build_request(["-version"], timeout=10))
        first_line = result.output.splitlines()[0] if result.output else ""
        if "ffmpeg version" not in first_line:
            raise ExecutableNotFoundError(f"not a valid ffmpeg executable: {self.ffmpeg_path}")
        return first_line

    def run(self, request: ProcessRequest, token: CancelToken | None = None) -> ProcessResult:
        """
        Run a process to completion and capture its combined output.

        Raises:
            ProcessTimeoutError: The deadline elapsed first
            OperationCancelledError: The token was cancelled first
            ExecutionFailedError: The process exited with a non-zero status
        """
        chunks: list[str] = []

        def drain(stream: TextIO) -> None:
            chunks.append(stream.read())

        returncode, outcome, timeout = self._execute(request, token, drain)
        output = "".join(chunks)
        self._raise_for_outcome(request, returncode, outcome, timeout, output)
        return ProcessResult(returncode=returncode, output=output)

    def run_with_progress(
        self,
        request: ProcessRequest,
        total_duration: float,
        observer: ProgressObserver | None = None,
        token: CancelToken | None = None,
    ) -> ProcessResult:
        """
        Run a process while decoding its live diagnostics into progress updates.

        Only the last lines of output are kept; they are attached to any error.
        """
        monitor = ProgressMonitor(total_duration, observer)

        returncode, outcome, timeout = self._execute(request, token, monitor.consume, monitor)
        output = monitor.output_tail()

        if monitor.error is not None:
            raise monitor.error

        if outcome is None and returncode == 0:
            monitor.complete()
        else:
            monitor.fail()

        self._raise_for_outcome(request, returncode, outcome, timeout, output)
        return ProcessResult(returncode=returncode, output=output)

    def _execute(
        self,
        request: ProcessRequest,
        token: CancelToken | None,
        drain: Callable[[TextIO], None],
        monitor: ProgressMonitor | None = None,
    ) -> tuple[int, ErrorCode | None, float | None]:
        """Spawn the child, race exit against cancellation and the deadline."""
        timeout = request.timeout if request.timeout is not None else self.config.timeout
        deadline = time.monotonic() + timeout if timeout else None
        if token is not None and token.deadline is not None:
            deadline = token.deadline if deadline is None else min(deadline, token.deadline)
            timeout = token.remaining() if timeout is None else min(timeout, token.remaining())

        if token is not None and token.cancelled:
            return -1, ErrorCode.CANCELLED, timeout

        if self.config.verbose:
            self.console.print(f"[dim]$ {escape(request.display())}[/dim]")

        try:
            process = subprocess.Popen(
                request.command(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise ExecutableNotFoundError(f"executable not found: {request.executable}") from e

        if monitor is not None:
            monitor.attach(process)

        # The reader must run alongside the wait, or a child blocked on a full
        # pipe never exits
        reader = threading.Thread(target=drain, args=(process.stdout,), daemon=True)
        reader.start()

        outcome: ErrorCode | None = None
        try:
            while True:
                try:
                    process.wait(timeout=POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    pass

                if token is not None and token.cancelled:
                    outcome = ErrorCode.CANCELLED
                    break
                if deadline is not None and time.monotonic() >= deadline:
                    outcome = ErrorCode.TIMEOUT
                    break
                if monitor is not None and monitor.error is not None:
                    break
        finally:
            if process.poll() is None:
                if monitor is not None and outcome is ErrorCode.CANCELLED:
                    monitor.cancel()
                process.kill()
                process.wait()
            reader.join()
            process.stdout.close()

        return process.returncode, outcome, timeout

    def _raise_for_outcome(
        self,
        request: ProcessRequest,
        returncode: int,
        outcome: ErrorCode | None,
        timeout: float | None,
        output: str,
    ) -> None:
        name = Path(request.executable).name
        if outcome is ErrorCode.CANCELLED:
            raise OperationCancelledError(f"{name} was cancelled")
        if outcome is ErrorCode.TIMEOUT:
            raise ProcessTimeoutError(
                f"{name} did not finish within {timeout:.1f}s", timeout=timeout, output=output
            )
        if returncode != 0:
            if self.config.verbose:
                self.console.print(f"[red]{name} exited with status {returncode}[/red]")
            raise ExecutionFailedError(
                f"{name} exited with status {returncode}: {request.display()}",
                returncode=returncode,
                output=output,
            )
