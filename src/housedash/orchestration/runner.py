"""Concurrent generation of all configured charts.

Every chart gets its own :class:`ChartTask` on a thread pool.  A chart
that waits for a retry, or fails, never holds back the others.  The run
returns one outcome per chart in configuration order, whatever order
they finished in.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional, Sequence

from loguru import logger

from ..config import RETRY_BASE_SECONDS, RETRY_MAX_ATTEMPTS
from ..providers.base import DataSource
from ..style.models import Style
from .retry import ChartOutcome, ChartState, ChartTask, Clock, Sink, SystemClock


def build_tasks(
    specs: Sequence,
    style: Style,
    source: DataSource,
    sink: Sink,
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None,
    max_attempts: int = RETRY_MAX_ATTEMPTS,
    base_seconds: float = RETRY_BASE_SECONDS,
) -> List[ChartTask]:
    """Create one task per chart, all rendering the same instant ``now``."""
    clock = clock or SystemClock()
    now = now or clock.now()
    return [
        ChartTask(
            index,
            spec,
            style,
            source,
            sink,
            now,
            clock=clock,
            max_attempts=max_attempts,
            base_seconds=base_seconds,
        )
        for index, spec in enumerate(specs)
    ]


def run_tasks(tasks: Sequence[ChartTask], max_workers: Optional[int] = None) -> List[ChartOutcome]:
    """Run ``tasks`` concurrently and return their outcomes in order."""
    if not tasks:
        logger.warning("No charts configured")
        return []
    workers = max_workers or len(tasks)
    logger.info("Generating {} chart(s) with {} worker(s)", len(tasks), workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chart") as pool:
        futures = [pool.submit(task.run) for task in tasks]
        outcomes = [future.result() for future in futures]
    failed = [o for o in outcomes if o.state is ChartState.FAILED]
    if failed:
        logger.warning(
            "{} of {} chart(s) failed: {}",
            len(failed),
            len(outcomes),
            ", ".join(str(o.index + 1) for o in failed),
        )
    else:
        logger.info("All {} chart(s) generated", len(outcomes))
    return outcomes


def run_charts(
    specs: Sequence,
    style: Style,
    source: DataSource,
    sink: Sink,
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None,
    max_workers: Optional[int] = None,
    max_attempts: int = RETRY_MAX_ATTEMPTS,
    base_seconds: float = RETRY_BASE_SECONDS,
) -> List[ChartOutcome]:
    """Generate every chart of ``specs`` and write it to ``sink``.

    Parameters
    ----------
    specs : sequence of chart configurations
        Charts in configuration order; the position is the output index.
    style : Style
        Shared, frozen style.
    source : DataSource
        Queried once per attempt of each chart.
    sink : Sink
        Receives every successfully rendered canvas.
    now : datetime, optional
        Render instant; defaults to ``clock.now()``.

    Returns
    -------
    list of ChartOutcome
        One outcome per chart, in configuration order.
    """
    tasks = build_tasks(specs, style, source, sink, now, clock, max_attempts, base_seconds)
    return run_tasks(tasks, max_workers)


def any_failed(outcomes: Sequence[ChartOutcome]) -> bool:
    return any(o.state is ChartState.FAILED for o in outcomes)


__all__ = ["any_failed", "build_tasks", "run_charts", "run_tasks"]
