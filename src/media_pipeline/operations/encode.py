"""Re-encoding operations: container conversion, compression and audio extraction."""

from pathlib import Path
from typing import ClassVar, Literal

from ..errors import InvalidOptionsError
from .base import FFmpegOperation, parse_timestamp

# Default encoders per output container; anything else gets H.264 + AAC
VIDEO_CODECS = {".webm": "libvpx-vp9", ".wmv": "wmv2"}
AUDIO_CODECS = {".avi": "libmp3lame", ".webm": "libvorbis", ".wmv": "wmav2"}
DEFAULT_VIDEO_CODEC = "libx264"
DEFAULT_AUDIO_CODEC = "aac"

# x264/x265 rate control per quality level
QUALITY_PRESETS = {
    "high": ("18", "slow"),
    "medium": ("23", "medium"),
    "low": ("28", "fast"),
}
CRF_CODECS = ("libx264", "libx265")

AUDIO_FORMATS = {
    "mp3": "libmp3lame",
    "aac": "aac",
    "m4a": "aac",
    "wav": "pcm_s16le",
    "flac": "flac",
    "ogg": "libvorbis",
    "wma": "wmav2",
}
DEFAULT_AUDIO_FORMAT = "mp3"

# Headroom for container overhead when aiming at a file size
SIZE_SAFETY = 0.9

Quality = Literal["high", "medium", "low"]


def default_video_codec(path: Path) -> str:
    return VIDEO_CODECS.get(path.suffix.lower(), DEFAULT_VIDEO_CODEC)


def default_audio_codec(path: Path) -> str:
    return AUDIO_CODECS.get(path.suffix.lower(), DEFAULT_AUDIO_CODEC)


def bitrate_for_size(target_size_mb: float, duration: float) -> str:
    """Video bitrate (``"<n>k"``) that fits ``duration`` seconds into ``target_size_mb``."""
    if duration <= 0:
        raise InvalidOptionsError("cannot aim for a file size without the input duration")
    kbps = int(target_size_mb * 8 * 1024 / duration * SIZE_SAFETY)
    return f"{max(kbps, 1)}k"


class ConvertOperation(FFmpegOperation):
    """
    Re-encode into another container.

    Codecs default from the container extension (``.webm`` gets VP9 and
    Vorbis, ``.wmv`` gets WMV2, everything else H.264 and AAC). ``format``
    picks the extension of intermediate files; the last step always uses the
    pipeline's output extension.
    """

    format: str | None = None
    video_codec: str | None = None
    audio_codec: str | None = None
    quality: Quality | None = "medium"

    estimated_seconds: ClassVar[float] = 30.0

    @property
    def description(self) -> str:
        return f"Convert to {self.format}" if self.format else "Convert"

    @property
    def output_suffix(self) -> str | None:
        return f".{self.format.lstrip('.').lower()}" if self.format else None

    def validate_options(self) -> None:
        if self.format is not None and not self.format.lstrip("."):
            raise InvalidOptionsError("container format must not be empty")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        video_codec = self.video_codec or default_video_codec(output_path)
        audio_codec = self.audio_codec or default_audio_codec(output_path)

        args = ["-i", str(input_path), "-c:v", video_codec, "-c:a", audio_codec]
        if self.quality and video_codec in CRF_CODECS:
            crf, preset = QUALITY_PRESETS[self.quality]
            args += ["-crf", crf, "-preset", preset]
        return args + ["-y", str(output_path)]


class CompressOperation(FFmpegOperation):
    """Shrink a video by quality level, explicit bitrate or target file size."""

    quality: Quality = "medium"
    crf: int | None = None
    preset: str | None = None
    bitrate: str | None = None
    target_size_mb: float | None = None
    width: int = 0
    height: int = 0
    frame_rate: float = 0.0
    video_codec: str = DEFAULT_VIDEO_CODEC
    audio_codec: str = DEFAULT_AUDIO_CODEC

    estimated_seconds: ClassVar[float] = 40.0

    @property
    def description(self) -> str:
        if self.target_size_mb is not None:
            return f"Compress to {self.target_size_mb:g} MB"
        if self.bitrate:
            return f"Compress at {self.bitrate}"
        return f"Compress ({self.quality} quality)"

    def validate_options(self) -> None:
        if self.crf is not None and not 0 <= self.crf <= 51:
            raise InvalidOptionsError("crf must be between 0 and 51")
        if self.bitrate and self.target_size_mb is not None:
            raise InvalidOptionsError("set either a bitrate or a target size, not both")
        if self.target_size_mb is not None and self.target_size_mb <= 0:
            raise InvalidOptionsError("target size must be positive")
        if self.width < 0 or self.height < 0:
            raise InvalidOptionsError("compress dimensions must not be negative")
        if self.frame_rate < 0:
            raise InvalidOptionsError("frame rate must not be negative")

    def scale_filter(self) -> str | None:
        if self.width and self.height:
            return f"scale={self.width}:{self.height}"
        if self.width:
            return f"scale={self.width}:-2"
        if self.height:
            return f"scale=-2:{self.height}"
        return None

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        args = ["-i", str(input_path), "-c:v", self.video_codec, "-c:a", self.audio_codec]

        scale = self.scale_filter()
        if scale:
            args += ["-vf", scale]

        bitrate = self.bitrate
        if self.target_size_mb is not None:
            bitrate = bitrate_for_size(self.target_size_mb, input_duration)

        crf, preset = QUALITY_PRESETS[self.quality]
        if bitrate:
            args += ["-b:v", bitrate]
        if self.crf is not None:
            args += ["-crf", str(self.crf)]
        elif not bitrate:
            args += ["-crf", crf]
        if self.frame_rate:
            args += ["-r", f"{self.frame_rate:.2f}"]

        args += ["-preset", self.preset or preset]
        return args + ["-y", str(output_path)]


class ExtractAudioOperation(FFmpegOperation):
    """Drop the video stream and encode the audio as ``format``."""

    format: str = DEFAULT_AUDIO_FORMAT
    bitrate: str | None = None
    sample_rate: int = 0
    channels: int = 0
    start: str | None = None
    duration: str | None = None

    estimated_seconds: ClassVar[float] = 10.0

    @property
    def description(self) -> str:
        return f"Extract audio as {self.format}"

    @property
    def output_suffix(self) -> str:
        return f".{self.format}"

    def validate_options(self) -> None:
        if self.format not in AUDIO_FORMATS:
            raise InvalidOptionsError(
                f"unsupported audio format {self.format!r}; choose from {', '.join(AUDIO_FORMATS)}"
            )
        if self.sample_rate < 0 or self.channels < 0:
            raise InvalidOptionsError("sample rate and channels must not be negative")
        if self.start is not None:
            parse_timestamp(self.start)
        if self.duration is not None and parse_timestamp(self.duration) <= 0:
            raise InvalidOptionsError("audio duration must be positive")

    def build_args(
        self, input_path: Path, output_path: Path, input_duration: float = 0.0
    ) -> list[str]:
        args = ["-i", str(input_path), "-vn"]
        if self.start is not None:
            args += ["-ss", self.start]
        if self.duration is not None:
            args += ["-t", self.duration]

        args += ["-c:a", AUDIO_FORMATS[self.format]]
        if self.bitrate:
            args += ["-b:a", self.bitrate]
        if self.sample_rate:
            args += ["-ar", str(self.sample_rate)]
        if self.channels:
            args += ["-ac", str(self.channels)]
        return args + ["-y", str(output_path)]

    def expected_duration(self, input_duration: float) -> float:
        start = parse_timestamp(self.start) if self.start is not None else 0.0
        remaining = max(0.0, input_duration - start)
        if self.duration is None:
            return remaining
        clip = parse_timestamp(self.duration)
        return clip if input_duration <= 0 else min(clip, remaining)
