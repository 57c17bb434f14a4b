"""Per-chart generation with retries.

A :class:`ChartTask` takes one chart from configuration to output:

``PENDING -> ATTEMPTING(n) -> SUCCEEDED | ATTEMPTING(n + 1) | FAILED``

Only data fetch failures are retried.  After attempt ``n`` (counting
from zero) fails, the task waits ``base * 2**n`` seconds; with the
defaults of four attempts and an 8 second base the waits are 8, 16 and
32 seconds.  Layout, decode and write failures end the task at once.

Time is read and slept through a :class:`Clock` so that tests can run
the state machine without real delays.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol

from loguru import logger
from PIL import Image

from ..charts.dispatch import render
from ..config import RETRY_BASE_SECONDS, RETRY_MAX_ATTEMPTS
from ..errors import DataFetchError, DashboardError
from ..providers.base import DataSource
from ..style.models import Style
from ..style.resolver import StyleResolver


class ChartState(str, Enum):
    PENDING = "Pending"
    ATTEMPTING = "Attempting"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass
class ChartOutcome:
    """Result of one chart task.

    Attributes:
        index: Zero-based position of the chart in the configuration.
        title: Chart title, for reports.
        state: ``SUCCEEDED`` or ``FAILED`` once the task has run.
        attempts: Number of data fetch attempts made.
        delays: Backoff waits, in seconds, scheduled between attempts.
        error: Description of the failure, if any.
        target: Where the chart was written, if it succeeded.
    """

    index: int
    title: str
    state: ChartState = ChartState.PENDING
    attempts: int = 0
    delays: List[float] = field(default_factory=list)
    error: Optional[str] = None
    target: Optional[Path] = None

    @property
    def succeeded(self) -> bool:
        return self.state is ChartState.SUCCEEDED


class Clock(Protocol):
    """Source of the current time and of interruptible waits."""

    def now(self) -> datetime:
        raise NotImplementedError

    def wait(self, seconds: float, cancel_event: threading.Event) -> bool:
        """Wait ``seconds``; return ``True`` if cancelled meanwhile."""
        raise NotImplementedError


class SystemClock:
    """Wall clock backed by :class:`threading.Event` waits."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def wait(self, seconds: float, cancel_event: threading.Event) -> bool:
        return cancel_event.wait(seconds)


class Sink(Protocol):
    def write(self, canvas: Image.Image, index: int) -> Path:
        raise NotImplementedError


def backoff_delay(attempt: int, base: float = RETRY_BASE_SECONDS) -> float:
    """Wait after the failed zero-based ``attempt``."""
    return base * 2**attempt


class ChartTask:
    """Fetch, render and write a single chart, retrying fetch failures.

    Each task builds its own :class:`StyleResolver` from the shared,
    frozen style, so tasks share no mutable state.  :meth:`cancel` may be
    called from any thread; a cancelled task stops at its next attempt
    or backoff wait and ends ``FAILED``.
    """

    def __init__(
        self,
        index: int,
        spec,
        style: Style,
        source: DataSource,
        sink: Sink,
        now: datetime,
        clock: Optional[Clock] = None,
        max_attempts: int = RETRY_MAX_ATTEMPTS,
        base_seconds: float = RETRY_BASE_SECONDS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.index = index
        self.spec = spec
        self.style = style
        self.source = source
        self.sink = sink
        self.now = now
        self.clock = clock or SystemClock()
        self.max_attempts = max_attempts
        self.base_seconds = base_seconds
        self._cancel = threading.Event()
        self.outcome = ChartOutcome(index=index, title=spec.title)

    @property
    def state(self) -> ChartState:
        return self.outcome.state

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self) -> None:
        logger.info("Cancelling chart {}", self.index + 1)
        self._cancel.set()

    def _fail(self, reason: str) -> ChartOutcome:
        self.outcome.state = ChartState.FAILED
        self.outcome.error = reason
        logger.error("Chart {} ('{}') failed: {}", self.index + 1, self.spec.title, reason)
        return self.outcome

    def _fetch(self):
        """Query the data source until it answers or attempts run out.

        Returns ``None`` after marking the outcome failed.
        """
        window = self.spec.window(self.now)
        for attempt in range(self.max_attempts):
            if self.cancelled:
                self._fail("cancelled")
                return None
            self.outcome.state = ChartState.ATTEMPTING
            self.outcome.attempts = attempt + 1
            logger.debug("Chart {}: attempt {}", self.index + 1, attempt + 1)
            try:
                return self.source.query(self.spec, window)
            except DataFetchError as exc:
                if attempt + 1 >= self.max_attempts:
                    self._fail(f"data fetch failed after {attempt + 1} attempts: {exc}")
                    return None
                delay = backoff_delay(attempt, self.base_seconds)
                self.outcome.delays.append(delay)
                logger.warning(
                    "Chart {}: {}; retrying in {} seconds", self.index + 1, exc, delay
                )
                if self.clock.wait(delay, self._cancel):
                    self._fail("cancelled")
                    return None
        return None

    def run(self) -> ChartOutcome:
        if self.outcome.state is not ChartState.PENDING:
            raise RuntimeError(f"chart task {self.index + 1} has already run")
        logger.info("Generating chart {}: '{}'", self.index + 1, self.spec.title)
        try:
            data = self._fetch()
            if self.outcome.state is ChartState.FAILED:
                return self.outcome
            canvas = render(self.spec, StyleResolver(self.style), data, self.now)
            self.outcome.target = self.sink.write(canvas, self.index)
        except DashboardError as exc:
            return self._fail(str(exc))
        except Exception as exc:
            logger.exception("Unexpected error in chart {}", self.index + 1)
            return self._fail(f"unexpected error: {exc!r}")
        self.outcome.state = ChartState.SUCCEEDED
        return self.outcome


__all__ = [
    "ChartOutcome",
    "ChartState",
    "ChartTask",
    "Clock",
    "Sink",
    "SystemClock",
    "backoff_delay",
]
