"""Media metadata probing with ffprobe, falling back to ffmpeg's banner."""

import json
import re
from pathlib import Path

from pydantic import BaseModel
from rich.markup import escape

from .cancel import CancelToken
from .errors import ExecutionFailedError
from .runner import ProcessRunner
from .validation import validate_input_file

DURATION_PATTERN = re.compile(r"Duration: (\d{2}):(\d{2}):(\d{2})\.(\d{2})")
RESOLUTION_PATTERN = re.compile(r"Video: (\w+).*?, (\d{2,5})x(\d{2,5})")
AUDIO_CODEC_PATTERN = re.compile(r"Audio: (\w+)")
BITRATE_PATTERN = re.compile(r"bitrate: (\d+) kb/s")

# ffprobe runs are short; do not let one hang a pipeline
PROBE_TIMEOUT = 60


class MediaInfo(BaseModel):
    """Media file information."""

    filename: str
    duration: float = 0.0
    width: int = 0
    height: int = 0
    bitrate: int = 0  # kbps
    frame_rate: float = 0.0
    video_codec: str | None = None
    audio_codec: str | None = None
    file_size: int = 0
    format: str | None = None


def parse_frame_rate(value: str) -> float:
    """Parse an ffprobe rate such as ``30000/1001`` or ``25``."""
    try:
        if "/" in value:
            num, den = value.split("/", 1)
            return float(num) / float(den) if float(den) else 0.0
        return float(value)
    except ValueError:
        return 0.0


def parse_ffprobe_output(output: str, input_path: Path) -> MediaInfo:
    """Build MediaInfo from ``ffprobe -print_format json`` output."""
    data = json.loads(output)
    fmt = data.get("format", {})

    info = MediaInfo(filename=input_path.name, format=fmt.get("format_name"))
    try:
        info.duration = float(fmt.get("duration", 0))
    except (TypeError, ValueError):
        pass
    try:
        info.file_size = int(fmt.get("size", 0))
    except (TypeError, ValueError):
        pass
    try:
        info.bitrate = int(fmt.get("bit_rate", 0)) // 1000
    except (TypeError, ValueError):
        pass

    for stream in data.get("streams", []):
        if stream.get("codec_type") == "video" and info.video_codec is None:
            info.video_codec = stream.get("codec_name")
            info.width = stream.get("width", 0)
            info.height = stream.get("height", 0)
            if stream.get("r_frame_rate"):
                info.frame_rate = parse_frame_rate(stream["r_frame_rate"])
        elif stream.get("codec_type") == "audio" and info.audio_codec is None:
            info.audio_codec = stream.get("codec_name")

    return info


def parse_ffmpeg_banner(output: str, input_path: Path) -> MediaInfo:
    """Build MediaInfo from the stream summary ``ffmpeg -i`` prints."""
    info = MediaInfo(filename=input_path.name)
    if input_path.exists():
        info.file_size = input_path.stat().st_size

    if match := DURATION_PATTERN.search(output):
        hours, minutes, seconds, centiseconds = (int(g) for g in match.groups())
        info.duration = hours * 3600 + minutes * 60 + seconds + centiseconds / 100

    if match := RESOLUTION_PATTERN.search(output):
        info.video_codec = match.group(1)
        info.width = int(match.group(2))
        info.height = int(match.group(3))

    if match := AUDIO_CODEC_PATTERN.search(output):
        info.audio_codec = match.group(1)

    if match := BITRATE_PATTERN.search(output):
        info.bitrate = int(match.group(1))

    return info


class MediaProbe:
    """Read duration and stream details of a media file."""

    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    def get_info(self, path: str | Path, token: CancelToken | None = None) -> MediaInfo:
        input_path = validate_input_file(path)

        probe_path = self.runner.ffprobe_path
        if probe_path:
            request = self.runner.build_request(
                [
                    "-v", "quiet",
                    "-print_format", "json",
                    "-show_format",
                    "-show_streams",
                    str(input_path),
                ],
                timeout=PROBE_TIMEOUT,
                executable=probe_path,
            )
            try:
                result = self.runner.run(request, token)
                return parse_ffprobe_output(result.output, input_path)
            except (ExecutionFailedError, json.JSONDecodeError) as e:
                if self.runner.config.verbose:
                    self.runner.console.print(f"[yellow]ffprobe failed, using ffmpeg: {escape(str(e))}[/yellow]")

        # ffmpeg exits non-zero without an output file but still prints the banner
        request = self.runner.build_request(["-hide_banner", "-i", str(input_path)], timeout=PROBE_TIMEOUT)
        try:
            output = self.runner.run(request, token).output
        except ExecutionFailedError as e:
            output = e.output
        return parse_ffmpeg_banner(output, input_path)

    def get_total_duration(self, path: str | Path, token: CancelToken | None = None) -> float:
        """Total media duration in seconds (0.0 when unknown)."""
        return self.get_info(path, token).duration
