"""Pipeline execution framework."""

import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape

from .cancel import CancelToken
from .errors import (
    InvalidOptionsError,
    OperationCancelledError,
    PipelineStateError,
    PipelineStepError,
    ProcessTimeoutError,
)
from .probe import MediaProbe
from .progress import ProgressObserver
from .runner import ProcessRunner
from .tracker import ProgressTracker
from .validation import validate_input_file, validate_output_file


class PipelineContext(BaseModel):
    """Context passed to every operation of a pipeline run."""

    runner: ProcessRunner
    probe: MediaProbe
    token: CancelToken = Field(default_factory=CancelToken)

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def create(cls, runner: ProcessRunner, token: CancelToken | None = None) -> "PipelineContext":
        return cls(runner=runner, probe=MediaProbe(runner), token=token or CancelToken())


class Operation(Protocol):
    """Pipeline operation interface."""

    @property
    def description(self) -> str:
        """Human-readable summary of the transformation."""
        ...

    def estimate_duration(self) -> float:
        """Rough processing time in seconds, used to weight progress."""
        ...

    def execute(
        self,
        input_path: Path,
        output_path: Path,
        ctx: PipelineContext,
        observer: ProgressObserver | None = None,
    ) -> Path:
        """Write the result to ``output_path`` and return it.

        A different returned path is copied to ``output_path``; the pipeline
        never moves or deletes files it did not create.
        """
        ...


class Pipeline:
    """
    Execute a sequence of operations, each reading the previous one's output.

    Intermediate files live in a scratch directory unique to the run and are
    removed on every exit path. The last operation writes next to the final
    output under a temporary name that is renamed into place only on success.
    A pipeline runs once; build a new one to retry.
    """

    def __init__(
        self,
        source: str | Path,
        output: str | Path,
        runner: ProcessRunner | None = None,
        observer: ProgressObserver | None = None,
        console: Console | None = None,
    ):
        self.source = Path(source)
        self.output = Path(output)
        self.runner = runner or ProcessRunner(console=console)
        self.console = console or self.runner.console
        self.observer = observer
        self.operations: list[Operation] = []
        self._started = False
        self._ctx: PipelineContext | None = None
        self._lock = threading.Lock()

    def add(self, operation: Operation) -> "Pipeline":
        """Append an operation; rejected once execution has started."""
        with self._lock:
            if self._started:
                raise PipelineStateError("cannot add operations after execution has started")
            self.operations.append(operation)
        return self

    def __len__(self) -> int:
        return len(self.operations)

    def cancel(self) -> None:
        """Cancel the running execution, if any."""
        with self._lock:
            ctx = self._ctx
        if ctx is not None:
            ctx.token.cancel()

    def execute(self, ctx: PipelineContext | None = None) -> Path:
        """Run all operations in sequence and return the final output path."""
        with self._lock:
            if self._started:
                raise PipelineStateError("pipeline has already been executed")
            self._started = True
            operations = list(self.operations)
            ctx = ctx or PipelineContext.create(self.runner)
            self._ctx = ctx

        if not operations:
            raise InvalidOptionsError("no operations to execute")

        source = validate_input_file(self.source)
        output = validate_output_file(self.output)

        tracker = ProgressTracker(self.observer)
        for i, op in enumerate(operations):
            tracker.add_step(f"Step {i + 1}: {op.description}", 1.0, op.estimate_duration())

        config = self.runner.config
        workdir = Path(tempfile.mkdtemp(prefix="media_pipeline_", dir=config.temp_dir))
        partial = output.with_name(f".{output.stem}.{workdir.name}.partial{output.suffix}")

        try:
            current = source
            total = len(operations)

            for i, op in enumerate(operations):
                self.console.print(f"\n[bold]Step {i + 1}/{total}: {escape(op.description)}[/bold]")

                if i == total - 1:
                    target = partial
                else:
                    suffix = getattr(op, "output_suffix", None) or current.suffix
                    target = workdir / f"step_{i}{suffix}"

                step_observer = tracker.start_step(i)
                try:
                    if ctx.token.cancelled:
                        raise OperationCancelledError("pipeline was cancelled")
                    if ctx.token.expired:
                        raise ProcessTimeoutError("pipeline deadline passed before the step started")

                    written = Path(op.execute(current, target, ctx, step_observer))
                    if written.resolve() != target.resolve():
                        # Only files the pipeline created may be renamed or removed
                        shutil.copyfile(written, target)

                    tracker.complete_step(i)
                except Exception as e:
                    self.console.print(f"[bold red]Error in {escape(op.description)}:[/bold red] {escape(str(e))}")
                    raise PipelineStepError(i, op.description, e) from e

                current = target

            os.replace(current, output)
        finally:
            self._cleanup(workdir, partial, config.keep_intermediates)

        self.console.print(f"[bold green]Saved to:[/bold green] {escape(str(output))}")
        return output

    def _cleanup(self, workdir: Path, partial: Path, keep: bool) -> None:
        """Remove the partial output and, unless kept, every intermediate file."""
        if partial.exists():
            partial.unlink()

        if keep:
            self.console.print(f"[dim]Intermediate files kept in {escape(str(workdir))}[/dim]")
            return

        try:
            shutil.rmtree(workdir)
        except OSError as e:
            self.console.print(f"[yellow]Failed to remove {escape(str(workdir))}: {escape(str(e))}[/yellow]")
