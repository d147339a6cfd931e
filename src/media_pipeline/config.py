"""Configuration management."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# 30 minutes
DEFAULT_TIMEOUT = 30 * 60


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    """Application configuration."""

    # Executables
    ffmpeg_path: str | None = None
    ffprobe_path: str | None = None

    # Default deadline for one process invocation, in seconds
    timeout: float = DEFAULT_TIMEOUT

    # Paths
    temp_dir: Path | None = None

    # Options
    keep_intermediates: bool = False
    verbose: bool = False

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        load_dotenv()
        temp_dir = os.getenv("MEDIA_PIPELINE_TEMP_DIR")
        return cls(
            ffmpeg_path=os.getenv("FFMPEG_PATH"),
            ffprobe_path=os.getenv("FFPROBE_PATH"),
            timeout=float(os.getenv("FFMPEG_TIMEOUT", DEFAULT_TIMEOUT)),
            temp_dir=Path(temp_dir) if temp_dir else None,
            keep_intermediates=_env_flag("MEDIA_PIPELINE_KEEP_INTERMEDIATES"),
            verbose=_env_flag("MEDIA_PIPELINE_VERBOSE"),
        )

    def require_timeout(self) -> None:
        """Validate the default deadline is usable."""
        if self.timeout <= 0:
            raise ValueError("FFMPEG_TIMEOUT must be a positive number of seconds")
