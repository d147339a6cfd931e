"""Tests for weighted progress aggregation."""

import random
import threading

import pytest

from media_pipeline.errors import InvalidOptionsError, PipelineStateError
from media_pipeline.tracker import ProgressTracker


def make_tracker(*weights, observer=None):
    tracker = ProgressTracker(observer)
    for i, weight in enumerate(weights):
        tracker.add_step(f"step {i}", weight=weight, estimated_duration=10.0 * (i + 1))
    return tracker


def test_starts_at_zero():
    tracker = make_tracker(1.0, 1.0)

    snapshot = tracker.snapshot()
    assert snapshot.percentage == 0.0
    assert snapshot.elapsed == 0.0
    assert snapshot.total == 30.0
    assert tracker.current_step() == (-1, None)


def test_weighted_mean_counts_unstarted_steps():
    tracker = make_tracker(0.5, 1.0)

    tracker.start_step(0)(100.0, 10.0)

    assert tracker.snapshot().percentage == pytest.approx(100.0 * 0.5 / 1.5)


def test_exactly_100_when_every_step_completes():
    tracker = make_tracker(0.1, 0.2, 0.3)
    for i in range(3):
        tracker.start_step(i)
        tracker.complete_step(i)

    assert tracker.snapshot().percentage == 100.0


def test_progress_within_step_is_monotonic():
    tracker = make_tracker(1.0)
    observer = tracker.start_step(0)

    observer(50.0, 5.0)
    observer(30.0, 3.0)

    step = tracker.steps()[0]
    assert step.progress == 50.0
    assert step.elapsed == 5.0


def test_unknown_percentage_keeps_progress_and_updates_elapsed():
    tracker = make_tracker(1.0)
    observer = tracker.start_step(0)

    observer(40.0, 4.0)
    observer(None, 6.0)

    step = tracker.steps()[0]
    assert step.progress == 40.0
    assert step.elapsed == 6.0


def test_elapsed_counts_estimates_of_earlier_steps():
    tracker = make_tracker(1.0, 1.0, 1.0)

    tracker.start_step(0)(50.0, 5.0)
    assert tracker.snapshot().elapsed == 5.0

    tracker.complete_step(0)
    tracker.start_step(1)(10.0, 3.0)

    snapshot = tracker.snapshot()
    assert snapshot.elapsed == 13.0
    assert snapshot.total == 60.0

    index, step = tracker.current_step()
    assert index == 1
    assert step.name == "step 1"


def test_observer_receives_aggregate_updates():
    updates = []
    tracker = make_tracker(1.0, 1.0, observer=lambda pct, elapsed, total: updates.append(pct))

    tracker.start_step(0)(50.0, 1.0)
    tracker.complete_step(0)
    tracker.start_step(1)(50.0, 1.0)
    tracker.complete_step(1)

    assert updates == [25.0, 50.0, 75.0, 100.0]


def test_random_updates_stay_in_bounds():
    rng = random.Random(7)
    seen = []
    tracker = make_tracker(0.3, 1.0, 0.7, observer=lambda pct, elapsed, total: seen.append(pct))

    for i in range(3):
        observer = tracker.start_step(i)
        for _ in range(20):
            observer(rng.uniform(-50.0, 150.0), rng.uniform(0.0, 30.0))

    assert all(0.0 <= pct <= 100.0 for pct in seen)
    assert seen == sorted(seen)


def test_concurrent_updates():
    tracker = make_tracker(1.0, 1.0)
    first = tracker.start_step(0)
    second = tracker.start_step(1)

    def report(observer):
        for pct in range(0, 101):
            observer(float(pct), pct / 10)

    threads = [threading.Thread(target=report, args=(obs,)) for obs in (first, second)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert tracker.snapshot().percentage == 100.0


@pytest.mark.parametrize("weight", [0.0, -0.5, 1.5])
def test_rejects_invalid_weight(weight):
    with pytest.raises(InvalidOptionsError):
        ProgressTracker().add_step("bad", weight=weight)


def test_rejects_negative_estimate():
    with pytest.raises(InvalidOptionsError):
        ProgressTracker().add_step("bad", estimated_duration=-1.0)


def test_rejects_add_after_start():
    tracker = make_tracker(1.0)
    tracker.start_step(0)

    with pytest.raises(PipelineStateError):
        tracker.add_step("late")
    assert len(tracker) == 1


def test_rejects_unknown_index():
    tracker = make_tracker(1.0)

    with pytest.raises(InvalidOptionsError):
        tracker.start_step(1)
    with pytest.raises(InvalidOptionsError):
        tracker.complete_step(-1)
