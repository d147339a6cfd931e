"""Input and output path checks run before any process is spawned."""

from pathlib import Path

from .errors import InvalidInputError, MediaFileNotFoundError


def validate_input_file(path: str | Path | None) -> Path:
    """Return the input path if it names an existing file."""
    if path is None or str(path) == "":
        raise InvalidInputError("input file path must not be empty")

    input_path = Path(path)
    try:
        input_path.stat()
    except FileNotFoundError as e:
        raise MediaFileNotFoundError(f"input file does not exist: {input_path}") from e
    except OSError as e:
        raise InvalidInputError(f"cannot access input file: {input_path}") from e

    return input_path


def validate_output_file(path: str | Path | None) -> Path:
    """Return the output path if its parent directory exists."""
    if path is None or str(path) == "":
        raise InvalidInputError("output file path must not be empty")

    output_path = Path(path)
    parent = output_path.parent
    if not parent.is_dir():
        raise InvalidInputError(f"output directory does not exist: {parent}")

    return output_path
