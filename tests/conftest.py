"""Shared test fixtures for media-pipeline.

Child processes are the running Python interpreter executing small scripts
that write ffmpeg-style status lines to stderr, so no ffmpeg install is needed.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
from rich.console import Console

from media_pipeline.config import Config
from media_pipeline.runner import ProcessRunner

# argv: input output; appends a marker so the chain order is visible
COPY_SCRIPT = """
import sys
src, dst = sys.argv[1], sys.argv[2]
for t in ("00:00:30.00", "00:01:00.00", "00:02:00.00"):
    sys.stderr.write(f"frame=1 fps=0.0 q=-1.0 size=0kB time={t} bitrate=N/A speed=1x\\r")
    sys.stderr.flush()
with open(src) as fh:
    data = fh.read()
with open(dst, "w") as fh:
    fh.write(data + sys.argv[3])
"""

# argv: input output; leaves a half-written file behind and exits non-zero
FAIL_SCRIPT = """
import sys
with open(sys.argv[2], "w") as fh:
    fh.write("partial")
sys.stderr.write("Invalid data found when processing input\\n")
sys.exit(3)
"""

# argv: input output pidfile; reports progress once then hangs
HANG_SCRIPT = """
import os, sys, time
with open(sys.argv[3], "w") as fh:
    fh.write(str(os.getpid()))
sys.stderr.write("frame=1 time=00:00:01.00 bitrate=N/A\\n")
sys.stderr.flush()
time.sleep(60)
"""


class ScriptOperation:
    """Operation running a Python script as its child process."""

    def __init__(self, script: str, name: str = "script", extra: list[str] | None = None, total: float = 120.0):
        self.script = script
        self.name = name
        self.extra = extra if extra is not None else [name]
        self.total = total
        self.calls: list[tuple[Path, Path]] = []

    @property
    def description(self) -> str:
        return self.name

    def estimate_duration(self) -> float:
        return 1.0

    def execute(self, input_path, output_path, ctx, observer=None):
        self.calls.append((Path(input_path), Path(output_path)))
        request = ctx.runner.build_request(
            ["-c", self.script, str(input_path), str(output_path), *self.extra]
        )
        ctx.runner.run_with_progress(request, self.total, observer, ctx.token)
        return output_path


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def config(scratch_dir: Path) -> Config:
    return Config(ffmpeg_path=sys.executable, ffprobe_path=sys.executable, timeout=30, temp_dir=scratch_dir)


@pytest.fixture
def runner(config: Config, console: Console) -> ProcessRunner:
    return ProcessRunner(config, console)


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "source.mp4"
    path.write_text("src")
    return path


def python_request(runner: ProcessRunner, code: str, *args: str, timeout: float | None = None):
    return runner.build_request(["-c", code, *args], timeout=timeout)
