"""Tests for per-chart retries and concurrent generation.

Every test injects :class:`FakeClock`, so backoff waits are recorded
rather than slept.
"""

from __future__ import annotations

import pytest

from conftest import FakeClock, FakeSource, MemorySink
from housedash.charts.models import GeographicalHeatMapSpec, InfrastructureSummarySpec
from housedash.orchestration import (
    ChartState,
    ChartTask,
    any_failed,
    backoff_delay,
    build_tasks,
    run_charts,
    run_tasks,
)
from housedash.series.models import HostStatus
from housedash.style import Style

STYLE = Style(resolution=(160, 120))
HOSTS = [HostStatus(host="nas", online=True, load=0.3)]


def _summary(title: str) -> InfrastructureSummarySpec:
    return InfrastructureSummarySpec(title=title)


def test_backoff_doubles() -> None:
    assert [backoff_delay(n, 8) for n in range(3)] == [8, 16, 32]
    assert sum(backoff_delay(n, 8) for n in range(3)) == 56


def test_three_failures_then_success(now) -> None:
    """The chart succeeds on its fourth attempt after growing waits."""
    clock = FakeClock()
    source = FakeSource({"Servers": HOSTS}, failures={"Servers": 3})
    sink = MemorySink()
    outcome = ChartTask(0, _summary("Servers"), STYLE, source, sink, now, clock=clock).run()

    assert outcome.state is ChartState.SUCCEEDED
    assert outcome.attempts == 4
    assert outcome.delays == [8.0, 16.0, 32.0]
    assert all(a < b for a, b in zip(outcome.delays, outcome.delays[1:]))
    assert clock.waits == outcome.delays
    assert outcome.target is not None
    assert sink.canvases[0].size == (160, 120)


def test_success_needs_no_wait(now) -> None:
    clock = FakeClock()
    outcome = ChartTask(
        0, _summary("Servers"), STYLE, FakeSource({"Servers": HOSTS}), MemorySink(), now, clock=clock
    ).run()
    assert outcome.succeeded
    assert outcome.attempts == 1
    assert clock.waits == []


def test_always_failing_chart_does_not_block_siblings(now) -> None:
    clock = FakeClock()
    source = FakeSource(
        {"A": HOSTS, "B": HOSTS, "C": HOSTS}, failures={"B": -1}
    )
    sink = MemorySink()
    outcomes = run_charts(
        [_summary("A"), _summary("B"), _summary("C")], STYLE, source, sink, now=now, clock=clock
    )

    assert [o.index for o in outcomes] == [0, 1, 2]
    assert [o.state for o in outcomes] == [
        ChartState.SUCCEEDED,
        ChartState.FAILED,
        ChartState.SUCCEEDED,
    ]
    failed = outcomes[1]
    assert failed.attempts == 4
    assert source.calls["B"] == 4
    assert failed.delays == [8.0, 16.0, 32.0]
    assert "4 attempts" in failed.error
    assert sorted(sink.canvases) == [0, 2]
    assert any_failed(outcomes)


def test_render_errors_are_not_retried(now) -> None:
    """A chart that cannot be laid out fails on its first attempt."""
    spec = GeographicalHeatMapSpec(title="Rooms")
    clock = FakeClock()
    outcome = ChartTask(
        0, spec, STYLE, FakeSource({"Rooms": {}}), MemorySink(), now, clock=clock
    ).run()
    assert outcome.state is ChartState.FAILED
    assert outcome.attempts == 1
    assert clock.waits == []
    assert "no regions" in outcome.error


def test_sink_errors_fail_the_chart(now, tmp_path) -> None:
    from housedash.sink import FileSink

    blocker = tmp_path / "file"
    blocker.write_text("")
    outcome = ChartTask(
        0, _summary("A"), STYLE, FakeSource({"A": HOSTS}), FileSink(blocker), now, clock=FakeClock()
    ).run()
    assert outcome.state is ChartState.FAILED
    assert outcome.target is None


def test_unexpected_errors_are_reported(now) -> None:
    class Broken:
        def query(self, spec, window):
            raise KeyError("boom")

    outcome = ChartTask(0, _summary("A"), STYLE, Broken(), MemorySink(), now, clock=FakeClock()).run()
    assert outcome.state is ChartState.FAILED
    assert "boom" in outcome.error


def test_cancel_during_backoff(now) -> None:
    holder = {}
    clock = FakeClock(on_wait=lambda seconds: holder["task"].cancel())
    source = FakeSource({"A": HOSTS}, failures={"A": -1})
    task = ChartTask(0, _summary("A"), STYLE, source, MemorySink(), now, clock=clock)
    holder["task"] = task
    outcome = task.run()
    assert outcome.state is ChartState.FAILED
    assert outcome.error == "cancelled"
    assert outcome.attempts == 1
    assert clock.waits == [8.0]


def test_cancel_before_start_only_affects_that_chart(now) -> None:
    source = FakeSource({"A": HOSTS, "B": HOSTS})
    tasks = build_tasks([_summary("A"), _summary("B")], STYLE, source, MemorySink(), now=now, clock=FakeClock())
    tasks[0].cancel()
    outcomes = run_tasks(tasks)
    assert outcomes[0].error == "cancelled"
    assert outcomes[0].attempts == 0
    assert outcomes[1].succeeded
    assert "A" not in source.calls


def test_task_runs_once(now) -> None:
    task = ChartTask(0, _summary("A"), STYLE, FakeSource({"A": HOSTS}), MemorySink(), now, clock=FakeClock())
    task.run()
    with pytest.raises(RuntimeError):
        task.run()
    with pytest.raises(ValueError):
        ChartTask(0, _summary("A"), STYLE, FakeSource({}), MemorySink(), now, max_attempts=0)


def test_empty_run(now) -> None:
    assert run_charts([], STYLE, FakeSource({}), MemorySink(), now=now, clock=FakeClock()) == []
