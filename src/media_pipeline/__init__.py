"""Run chains of ffmpeg transformations with aggregated progress."""

from .cancel import CancelToken
from .config import Config
from .errors import (
    ErrorCode,
    ExecutableNotFoundError,
    ExecutionFailedError,
    InvalidInputError,
    InvalidOptionsError,
    MediaError,
    MediaFileNotFoundError,
    OperationCancelledError,
    PipelineStateError,
    PipelineStepError,
    ProcessTimeoutError,
)
from .pipeline import Operation, Pipeline, PipelineContext
from .probe import MediaInfo, MediaProbe
from .progress import ProgressMonitor, ProgressSample, decode_progress_line
from .runner import ProcessRequest, ProcessResult, ProcessRunner
from .tracker import ProgressStep, ProgressTracker

__all__ = [
    "CancelToken",
    "Config",
    "ErrorCode",
    "ExecutableNotFoundError",
    "ExecutionFailedError",
    "InvalidInputError",
    "InvalidOptionsError",
    "MediaError",
    "MediaFileNotFoundError",
    "OperationCancelledError",
    "PipelineStateError",
    "PipelineStepError",
    "ProcessTimeoutError",
    "Operation",
    "Pipeline",
    "PipelineContext",
    "MediaInfo",
    "MediaProbe",
    "ProgressMonitor",
    "ProgressSample",
    "decode_progress_line",
    "ProcessRequest",
    "ProcessResult",
    "ProcessRunner",
    "ProgressStep",
    "ProgressTracker",
]
