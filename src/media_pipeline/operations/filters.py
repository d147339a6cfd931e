"""Single video filter operations."""

from pathlib import Path
from typing import ClassVar, Literal

from ..errors import InvalidOptionsError
from .base import FFmpegOperation, video_filter_args


class RotateOperation(FFmpegOperation):
    """Rotate clockwise by ``angle`` degrees."""

    angle: int

    estimated_seconds: ClassVar[float] = 15.0

    @property
    def description(self) -> str:
        return f"Rotate {self.angle} degrees"

    def video_filter(self) -> str:
        angle = self.angle % 360
        if angle == 90:
            return "transpose=1"
        if angle == 180:
            return "transpose=2,transpose=2"
        if angle == 270:
            return "transpose=2"
        return f"rotate={float(angle):f}*PI/180"

    def validate_options(self) -> None:
        if self.angle % 360 == 0:
            raise InvalidOptionsError("rotation angle must not be a multiple of 360")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return video_filter_args(input_path, output_path, self.video_filter())


class MirrorOperation(FFmpegOperation):
    """Flip horizontally or vertically."""

    horizontal: bool = True

    estimated_seconds: ClassVar[float] = 10.0

    @property
    def description(self) -> str:
        return "Mirror horizontally" if self.horizontal else "Mirror vertically"

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        flip = "hflip" if self.horizontal else "vflip"
        return video_filter_args(input_path, output_path, flip)


class BrightnessOperation(FFmpegOperation):
    brightness: float

    estimated_seconds: ClassVar[float] = 10.0

    @property
    def description(self) -> str:
        return f"Brightness {self.brightness:+g}"

    def validate_options(self) -> None:
        if not -1.0 <= self.brightness <= 1.0:
            raise InvalidOptionsError("brightness must be between -1.0 and 1.0")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return video_filter_args(input_path, output_path, f"eq=brightness={self.brightness:f}")


class ContrastOperation(FFmpegOperation):
    contrast: float

    estimated_seconds: ClassVar[float] = 10.0

    @property
    def description(self) -> str:
        return f"Contrast x{self.contrast:g}"

    def validate_options(self) -> None:
        if not -1000.0 <= self.contrast <= 1000.0:
            raise InvalidOptionsError("contrast must be between -1000 and 1000")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return video_filter_args(input_path, output_path, f"eq=contrast={self.contrast:f}")


class BlurOperation(FFmpegOperation):
    radius: float

    estimated_seconds: ClassVar[float] = 15.0

    @property
    def description(self) -> str:
        return f"Blur radius {self.radius:g}"

    def validate_options(self) -> None:
        if self.radius <= 0:
            raise InvalidOptionsError("blur radius must be positive")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return video_filter_args(input_path, output_path, f"boxblur={self.radius:f}")


class FadeOperation(FFmpegOperation):
    """Fade in from black at the start or out to black at the end."""

    direction: Literal["in", "out"]
    duration: float

    estimated_seconds: ClassVar[float] = 10.0

    @property
    def description(self) -> str:
        return f"Fade {self.direction} over {self.duration:g}s"

    def validate_options(self) -> None:
        if self.duration <= 0:
            raise InvalidOptionsError("fade duration must be positive")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        if self.direction == "in":
            fade = f"fade=t=in:st=0:d={self.duration:f}"
        else:
            start = max(0.0, input_duration - self.duration)
            fade = f"fade=t=out:st={start:f}:d={self.duration:f}"
        return video_filter_args(input_path, output_path, fade)



class StabilizeOperation(FFmpegOperation):
    """Smooth out camera shake in a single pass."""

    estimated_seconds: ClassVar[float] = 60.0

    @property
    def description(self) -> str:
        return "Stabilize"

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        return video_filter_args(input_path, output_path, "deshake")
