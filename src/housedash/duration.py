"""ISO 8601 duration parsing.

Chart configurations express lookback windows and resampling periods as
ISO 8601 durations such as ``P30D`` or ``PT15M``.  Years and months are
accepted and approximated as 365 and 30 days respectively, which is good
enough for choosing a query window.  Plain numbers are read as seconds.
Chart fields reject zero and negative durations.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Any, Optional

_DURATION_RE = re.compile(
    r"^P"
    r"(?:(?P<years>\d+)Y)?"
    r"(?:(?P<months>\d+)M)?"
    r"(?:(?P<weeks>\d+)W)?"
    r"(?:(?P<days>\d+)D)?"
    r"(?:T"
    r"(?:(?P<hours>\d+)H)?"
    r"(?:(?P<minutes>\d+)M)?"
    r"(?:(?P<seconds>\d+)S)?"
    r")?$"
)


def parse_duration(text: str) -> Optional[timedelta]:
    """Parse an ISO 8601 duration string.

    Returns ``None`` when the string is not a duration.  ``"P"`` and
    ``"PT"`` on their own are rejected because they name no component.
    """
    if not isinstance(text, str):
        return None
    text = text.strip().upper()
    if text in ("P", "PT") or text.endswith("T"):
        return None
    match = _DURATION_RE.match(text)
    if match is None:
        return None
    parts = {key: int(value) for key, value in match.groupdict().items() if value}
    if not parts:
        return None
    days = (
        parts.get("years", 0) * 365
        + parts.get("months", 0) * 30
        + parts.get("weeks", 0) * 7
        + parts.get("days", 0)
    )
    return timedelta(
        days=days,
        hours=parts.get("hours", 0),
        minutes=parts.get("minutes", 0),
        seconds=parts.get("seconds", 0),
    )


def coerce_duration(value: Any) -> Any:
    """Pydantic ``BeforeValidator`` accepting ISO strings and seconds.

    Anything that is neither is passed through unchanged so pydantic
    reports its usual validation error.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if isinstance(value, str):
        parsed = parse_duration(value)
        if parsed is None:
            raise ValueError(f"not an ISO 8601 duration: {value!r}")
        return parsed
    return value


def require_positive(value: timedelta) -> timedelta:
    """Pydantic ``AfterValidator`` rejecting zero and negative durations."""
    if value <= timedelta(0):
        raise ValueError(f"duration must be positive, got {value}")
    return value


__all__ = ["parse_duration", "coerce_duration", "require_positive"]
