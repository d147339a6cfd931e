"""Shared behaviour for operations that map to one ffmpeg invocation."""

import re
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel

from ..errors import InvalidOptionsError
from ..pipeline import PipelineContext
from ..progress import ProgressObserver

TIMESTAMP_PATTERN = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)$")


def parse_timestamp(value: str | float | int) -> float:
    """
    Parse an ffmpeg time value into seconds.

    Accepts plain seconds ("90", "12.5") and clock forms ("01:30",
    "00:01:30.50").

    Raises:
        InvalidOptionsError: If the value is not a recognised time
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = value.strip()
        match = TIMESTAMP_PATTERN.match(text)
        if match:
            hours, minutes, secs = match.groups()
            seconds = int(hours or 0) * 3600 + int(minutes) * 60 + float(secs)
        else:
            try:
                seconds = float(text)
            except ValueError:
                raise InvalidOptionsError(f"invalid time value: {value!r}") from None

    if seconds < 0:
        raise InvalidOptionsError(f"time value must not be negative: {value!r}")
    return seconds


class FFmpegOperation(BaseModel):
    """
    Base for operations that run ffmpeg once with a flat argument list.

    Subclasses provide ``description``, ``build_args`` and, when they change
    the media length, ``expected_duration``.
    """

    # Processing time guess used to weight progress before real data arrives
    estimated_seconds: ClassVar[float] = 10.0
    # Extension for intermediate files; None keeps the input's
    output_suffix: ClassVar[str | None] = None

    model_config = {"frozen": True}

    @property
    def description(self) -> str:
        return type(self).__name__

    def estimate_duration(self) -> float:
        return self.estimated_seconds

    def validate_options(self) -> None:
        """Raise InvalidOptionsError if the options are incomplete."""

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        raise NotImplementedError

    def expected_duration(self, input_duration: float) -> float:
        """Length of the produced media, the denominator for progress."""
        return input_duration

    def execute(
        self,
        input_path: Path,
        output_path: Path,
        ctx: PipelineContext,
        observer: ProgressObserver | None = None,
    ) -> Path:
        self.validate_options()

        input_duration = ctx.probe.get_total_duration(input_path, ctx.token)
        request = ctx.runner.build_request(
            self.build_args(input_path, output_path, input_duration)
        )
        ctx.runner.run_with_progress(
            request,
            self.expected_duration(input_duration),
            observer,
            ctx.token,
        )
        return output_path


def video_filter_args(input_path: Path, output_path: Path, video_filter: str) -> list[str]:
    """Arguments for a single video filter that copies the audio stream."""
    return [
        "-i", str(input_path),
        "-vf", video_filter,
        "-c:a", "copy",
        "-y",
        str(output_path),
    ]
