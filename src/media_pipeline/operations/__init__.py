"""Pipeline operations."""

from .base import FFmpegOperation, parse_timestamp
from .edit import CropDimensionOperation, CropTimeOperation, ResizeOperation, SpeedOperation
from .encode import CompressOperation, ConvertOperation, ExtractAudioOperation
from .filters import (
    BlurOperation,
    BrightnessOperation,
    ContrastOperation,
    FadeOperation,
    MirrorOperation,
    RotateOperation,
    StabilizeOperation,
)
from .overlay import TextOperation, WatermarkOperation

__all__ = [
    "FFmpegOperation",
    "parse_timestamp",
    "CropTimeOperation",
    "CropDimensionOperation",
    "ResizeOperation",
    "SpeedOperation",
    "RotateOperation",
    "MirrorOperation",
    "BrightnessOperation",
    "ContrastOperation",
    "BlurOperation",
    "FadeOperation",
    "StabilizeOperation",
    "ConvertOperation",
    "CompressOperation",
    "ExtractAudioOperation",
    "WatermarkOperation",
    "TextOperation",
]
