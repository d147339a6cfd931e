"""Weighted progress aggregation across the steps of a pipeline."""

import threading

from pydantic import BaseModel

from .errors import InvalidOptionsError, PipelineStateError
from .progress import ProgressObserver


class ProgressStep(BaseModel):
    """Progress record for one pipeline stage."""

    name: str
    weight: float = 1.0
    estimated_duration: float = 0.0
    progress: float = 0.0
    elapsed: float = 0.0


class AggregateProgress(BaseModel):
    """Overall progress across every registered step."""

    percentage: float
    elapsed: float
    total: float

    model_config = {"frozen": True}


class ProgressTracker:
    """
    Aggregate several independently progressing steps into one signal.

    Overall percentage is the weighted mean of every registered step, so steps
    that have not started count as 0% at their full weight. Overall total is
    the sum of the estimated durations, fixed when the steps are added.
    """

    def __init__(self, observer: ProgressObserver | None = None):
        self.observer = observer
        self._steps: list[ProgressStep] = []
        self._current = -1
        self._started = False
        self._lock = threading.RLock()

    def add_step(self, name: str, weight: float = 1.0, estimated_duration: float = 0.0) -> int:
        """Register a step and return its index."""
        if not 0 < weight <= 1:
            raise InvalidOptionsError(f"step weight must be in (0, 1], got {weight}")
        if estimated_duration < 0:
            raise InvalidOptionsError("estimated duration must not be negative")

        with self._lock:
            if self._started:
                raise PipelineStateError("cannot add steps after tracking has started")
            self._steps.append(
                ProgressStep(name=name, weight=weight, estimated_duration=estimated_duration)
            )
            return len(self._steps) - 1

    def start_step(self, index: int) -> ProgressObserver:
        """Mark ``index`` as the current step and return its observer."""
        with self._lock:
            self._check_index(index)
            self._started = True
            self._current = index

        def observer(progress: float | None, elapsed: float, total: float = 0.0) -> None:
            self._update(index, progress, elapsed)

        return observer

    def complete_step(self, index: int) -> None:
        """Record ``index`` as finished at 100%."""
        self._update(index, 100.0, None)

    def _update(self, index: int, progress: float | None, elapsed: float | None) -> None:
        with self._lock:
            self._check_index(index)
            step = self._steps[index]

            # Progress never goes backwards within a step
            if progress is not None:
                step.progress = max(step.progress, min(100.0, max(0.0, progress)))
            if elapsed is not None:
                step.elapsed = max(step.elapsed, elapsed)

            if self.observer is not None:
                snapshot = self._aggregate()
                self.observer(snapshot.percentage, snapshot.elapsed, snapshot.total)

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._steps):
            raise InvalidOptionsError(f"no step at index {index}")

    def _aggregate(self) -> AggregateProgress:
        total_weight = sum(step.weight for step in self._steps)
        if total_weight == 0:
            percentage = 0.0
        elif all(step.progress >= 100.0 for step in self._steps):
            percentage = 100.0
        else:
            weighted = sum(step.progress * step.weight for step in self._steps)
            percentage = min(100.0, max(0.0, weighted / total_weight))

        elapsed = 0.0
        for i, step in enumerate(self._steps):
            if i < self._current:
                # Finished steps no longer report, so count their estimate
                elapsed += step.estimated_duration
            elif i == self._current:
                elapsed += step.elapsed

        total = sum(step.estimated_duration for step in self._steps)
        return AggregateProgress(percentage=percentage, elapsed=elapsed, total=total)

    def snapshot(self) -> AggregateProgress:
        with self._lock:
            return self._aggregate()

    def current_step(self) -> tuple[int, ProgressStep | None]:
        """Index and a copy of the current step, or (-1, None) before any start."""
        with self._lock:
            if self._current < 0:
                return -1, None
            return self._current, self._steps[self._current].model_copy()

    def steps(self) -> list[ProgressStep]:
        with self._lock:
            return [step.model_copy() for step in self._steps]

    def __len__(self) -> int:
        return len(self._steps)
