"""Operations that draw an image or text over the video."""

from pathlib import Path
from typing import ClassVar

from ..errors import InvalidOptionsError
from ..validation import validate_input_file
from .base import FFmpegOperation, video_filter_args


class WatermarkOperation(FFmpegOperation):
    """Overlay ``image_path`` at (``x``, ``y``) with optional transparency."""

    image_path: Path
    x: int = 10
    y: int = 10
    opacity: float = 1.0

    estimated_seconds: ClassVar[float] = 25.0

    @property
    def description(self) -> str:
        return f"Watermark {self.image_path.name} at ({self.x},{self.y})"

    def validate_options(self) -> None:
        if not 0.0 < self.opacity <= 1.0:
            raise InvalidOptionsError("watermark opacity must be in (0, 1]")
        validate_input_file(self.image_path)

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        if self.opacity < 1.0:
            overlay = (
                f"[1:v]format=rgba,colorchannelmixer=aa={self.opacity:f}[wm];"
                f"[0:v][wm]overlay={self.x}:{self.y}"
            )
        else:
            overlay = f"overlay={self.x}:{self.y}"

        return [
            "-i", str(input_path),
            "-i", str(self.image_path),
            "-filter_complex", overlay,
            "-c:a", "copy",
            "-y",
            str(output_path),
        ]


def escape_drawtext(text: str) -> str:
    """Escape characters drawtext treats specially."""
    for char in ("\\", ":", "'", "%"):
        text = text.replace(char, f"\\{char}")
    return text


class TextOperation(FFmpegOperation):
    """Draw ``text`` between ``start`` and ``start + duration`` seconds."""

    text: str
    x: int = 10
    y: int = 10
    font_size: int = 24
    color: str = "white"
    start: float = 0.0
    duration: float | None = None

    estimated_seconds: ClassVar[float] = 15.0

    @property
    def description(self) -> str:
        preview = self.text if len(self.text) <= 20 else f"{self.text[:20]}..."
        return f"Draw text '{preview}'"

    def validate_options(self) -> None:
        if not self.text:
            raise InvalidOptionsError("text must not be empty")
        if self.font_size <= 0:
            raise InvalidOptionsError("font size must be positive")
        if self.start < 0 or (self.duration is not None and self.duration <= 0):
            raise InvalidOptionsError("text timing must be non-negative with a positive duration")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        draw = (
            f"drawtext=text='{escape_drawtext(self.text)}':x={self.x}:y={self.y}"
            f":fontsize={self.font_size}:fontcolor={self.color}"
        )
        if self.duration is not None:
            draw += f":enable='between(t,{self.start:f},{self.start + self.duration:f})'"
        elif self.start > 0:
            draw += f":enable='gte(t,{self.start:f})'"
        return video_filter_args(input_path, output_path, draw)
