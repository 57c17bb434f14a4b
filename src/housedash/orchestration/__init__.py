"""Concurrent, retrying chart generation."""

from .retry import ChartOutcome, ChartState, ChartTask, Clock, SystemClock, backoff_delay
from .runner import any_failed, build_tasks, run_charts, run_tasks

__all__ = [
    "ChartOutcome",
    "ChartState",
    "ChartTask",
    "Clock",
    "SystemClock",
    "any_failed",
    "backoff_delay",
    "build_tasks",
    "run_charts",
    "run_tasks",
]
