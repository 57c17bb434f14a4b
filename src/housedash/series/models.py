"""Pydantic models for fetched chart data.

These classes define the canonical representation of what a data source
returns for a chart: tagged time series for trends and heat maps, and
host status rows for the summary charts.  They are transient and owned by
the single chart task that fetched them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Sample = Tuple[datetime, Optional[float]]


def _aware(ts: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


class Series(BaseModel):
    """One tag's samples in ascending timestamp order.

    Attributes:
        tag: Tag value the samples belong to (e.g. a room name).
        samples: ``(timestamp, value)`` pairs; ``value`` may be ``None``
            for a missing reading.  Samples are sorted on construction and
            duplicate timestamps are rejected.
    """

    model_config = ConfigDict(frozen=True)

    tag: str
    samples: List[Sample] = Field(default_factory=list)

    @field_validator("samples")
    @classmethod
    def check_samples(cls, value: List[Sample]) -> List[Sample]:
        normalised = sorted(((_aware(ts), v) for ts, v in value), key=lambda s: s[0])
        for (a, _), (b, _) in zip(normalised, normalised[1:]):
            if a == b:
                raise ValueError(f"duplicate timestamp {a.isoformat()}")
        return normalised

    def timestamps(self) -> List[datetime]:
        return [ts for ts, _ in self.samples]

    def values(self) -> List[Optional[float]]:
        return [v for _, v in self.samples]


class TimeWindow(BaseModel):
    """Half-open query window ``[start, end)``."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self) -> "TimeWindow":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("time window bounds must be timezone-aware")
        if self.end <= self.start:
            raise ValueError(
                f"empty time window [{self.start.isoformat()}, {self.end.isoformat()})"
            )
        return self

    @classmethod
    def ending_at(cls, now: datetime, how_long_ago: timedelta) -> "TimeWindow":
        """Window of length ``how_long_ago`` that ends at ``now``."""
        now = _aware(now)
        return cls(start=now - how_long_ago, end=now)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, ts: datetime) -> bool:
        return self.start <= _aware(ts) < self.end


class HostStatus(BaseModel):
    """Status row of one host in a summary chart.

    Attributes:
        host: Fully qualified host name.
        online: Whether the host answered its last check.
        load: Relative load (0 means idle); ``None`` when unknown.
    """

    model_config = ConfigDict(frozen=True)

    host: str
    online: bool
    load: Optional[float] = Field(default=None, ge=0)


__all__ = ["Sample", "Series", "TimeWindow", "HostStatus"]
