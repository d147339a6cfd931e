"""Error types raised by the runner, the operations and the pipeline."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error categories for diagnostics."""

    INVALID_INPUT = "INVALID_INPUT"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FFMPEG_NOT_FOUND = "FFMPEG_NOT_FOUND"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    INVALID_OPTIONS = "INVALID_OPTIONS"
    INVALID_STATE = "INVALID_STATE"


class MediaError(Exception):
    """Base error for media-pipeline."""

    code: ErrorCode = ErrorCode.EXECUTION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidInputError(MediaError):
    """Raised when a required path or option is missing or empty."""

    code = ErrorCode.INVALID_INPUT


class MediaFileNotFoundError(MediaError, FileNotFoundError):
    """Raised when an input file does not exist."""

    code = ErrorCode.FILE_NOT_FOUND


class ExecutableNotFoundError(MediaError, FileNotFoundError):
    """Raised when the ffmpeg executable cannot be located or verified."""

    code = ErrorCode.FFMPEG_NOT_FOUND


class ExecutionFailedError(MediaError):
    """Raised when the external process exits with a non-zero status."""

    code = ErrorCode.EXECUTION_FAILED

    def __init__(self, message: str, returncode: int | None = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output

    def __str__(self) -> str:
        text = super().__str__()
        if self.output:
            text = f"{text}\n{self.output.strip()}"
        return text


class ProcessTimeoutError(MediaError, TimeoutError):
    """Raised when the deadline elapses before the process exits."""

    code = ErrorCode.TIMEOUT

    def __init__(self, message: str, timeout: float | None = None, output: str = ""):
        super().__init__(message)
        self.timeout = timeout
        self.output = output


class OperationCancelledError(MediaError):
    """Raised when the cancel token fires."""

    code = ErrorCode.CANCELLED


class InvalidOptionsError(MediaError):
    """Raised when an operation or tracker is configured incompletely."""

    code = ErrorCode.INVALID_OPTIONS


class PipelineStateError(MediaError):
    """Raised when a pipeline is modified or re-run after execution started."""

    code = ErrorCode.INVALID_STATE


class PipelineStepError(MediaError):
    """Raised by the pipeline when one of its operations fails.

    ``code`` mirrors the failing error so callers can branch on
    ``err.code is ErrorCode.CANCELLED`` without unwrapping. The original
    exception is chained as ``__cause__``.
    """

    def __init__(self, index: int, description: str, cause: Exception):
        self.index = index
        self.description = description
        self.cause = cause
        self.code = getattr(cause, "code", ErrorCode.EXECUTION_FAILED)
        detail = cause.message if isinstance(cause, MediaError) else str(cause)
        super().__init__(f"step {index + 1} ({description}) failed: {detail}")
