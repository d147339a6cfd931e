"""Cutting and geometry operations."""

from pathlib import Path
from typing import ClassVar

from ..errors import InvalidOptionsError
from .base import FFmpegOperation, parse_timestamp, video_filter_args


class CropTimeOperation(FFmpegOperation):
    """Keep ``duration`` of media starting at ``start``."""

    start: str
    duration: str

    estimated_seconds: ClassVar[float] = 10.0

    @property
    def description(self) -> str:
        return f"Trim {self.duration} from {self.start}"

    def validate_options(self) -> None:
        if not self.start or not self.duration:
            raise InvalidOptionsError("trim start and duration are required")
        if parse_timestamp(self.duration) <= 0:
            raise InvalidOptionsError("trim duration must be positive")
        parse_timestamp(self.start)

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return [
            "-i", str(input_path),
            "-ss", self.start,
            "-t", self.duration,
            "-c", "copy",
            "-y",
            str(output_path),
        ]

    def expected_duration(self, input_duration: float) -> float:
        clip = parse_timestamp(self.duration)
        if input_duration <= 0:
            return clip
        return max(0.0, min(clip, input_duration - parse_timestamp(self.start)))


class CropDimensionOperation(FFmpegOperation):
    """Crop the frame to ``width``x``height`` at offset (``x``, ``y``)."""

    x: int = 0
    y: int = 0
    width: int
    height: int

    estimated_seconds: ClassVar[float] = 15.0

    @property
    def description(self) -> str:
        return f"Crop {self.width}x{self.height} at ({self.x},{self.y})"

    def validate_options(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidOptionsError("crop width and height must be positive")
        if self.x < 0 or self.y < 0:
            raise InvalidOptionsError("crop offset must not be negative")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        crop = f"crop={self.width}:{self.height}:{self.x}:{self.y}"
        return video_filter_args(input_path, output_path, crop)


class ResizeOperation(FFmpegOperation):
    """Scale the frame; -1 for one side keeps the aspect ratio."""

    width: int
    height: int

    estimated_seconds: ClassVar[float] = 20.0

    @property
    def description(self) -> str:
        return f"Resize to {self.width}x{self.height}"

    def validate_options(self) -> None:
        for side in (self.width, self.height):
            if side == 0 or side < -1:
                raise InvalidOptionsError("resize dimensions must be positive or -1")
        if self.width == -1 and self.height == -1:
            raise InvalidOptionsError("at least one resize dimension must be set")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return video_filter_args(input_path, output_path, f"scale={self.width}:{self.height}")


class SpeedOperation(FFmpegOperation):
    """Play back ``factor`` times faster (below 1 slows down)."""

    factor: float

    estimated_seconds: ClassVar[float] = 20.0

    @property
    def description(self) -> str:
        return f"Change speed x{self.factor:g}"

    def validate_options(self) -> None:
        # atempo accepts 0.5 to 100
        if not 0.5 <= self.factor <= 100:
            raise InvalidOptionsError("speed factor must be between 0.5 and 100")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return [
            "-i", str(input_path),
            "-vf", f"setpts={1.0 / self.factor:f}*PTS",
            "-af", f"atempo={self.factor:f}",
            "-y",
            str(output_path),
        ]

    def expected_duration(self, input_duration: float) -> float:
        return input_duration / self.factor
