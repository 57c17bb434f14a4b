"""Shared fixtures for the housedash test-suite.

Tests never touch the network or sleep: data comes from in-memory fake
sources and retry waits go through :class:`FakeClock`.
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

import PIL
import pytest
from PIL import Image, features

from housedash.errors import DataFetchError
from housedash.series.models import Series
from housedash.sink import encode_bitmap
from housedash.style.models import Style

NOW = datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc)

REFERENCE_DIR = Path(__file__).parent / "data"
REFERENCE_ENVIRONMENT = REFERENCE_DIR / "environment.json"


class FakeClock:
    """Clock recording the requested waits instead of sleeping.

    ``on_wait`` is called with each delay before the cancel flag is
    checked, which lets a test cancel a task in the middle of a backoff.
    """

    def __init__(self, on_wait: Optional[Callable[[float], None]] = None) -> None:
        self.waits: List[float] = []
        self.on_wait = on_wait
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return NOW

    def wait(self, seconds: float, cancel_event: threading.Event) -> bool:
        with self._lock:
            self.waits.append(seconds)
        if self.on_wait is not None:
            self.on_wait(seconds)
        return cancel_event.is_set()


class FakeSource:
    """Data source answering from a dict keyed by chart title.

    ``failures`` maps a title to the number of times its query raises
    :class:`DataFetchError` before succeeding; ``-1`` fails forever.
    """

    def __init__(self, data: Dict[str, object], failures: Optional[Dict[str, int]] = None) -> None:
        self.data = data
        self.failures = dict(failures or {})
        self.calls: Dict[str, int] = {}
        self._lock = threading.Lock()

    def query(self, spec, window):
        with self._lock:
            self.calls[spec.title] = self.calls.get(spec.title, 0) + 1
            remaining = self.failures.get(spec.title, 0)
            if remaining:
                if remaining > 0:
                    self.failures[spec.title] = remaining - 1
                raise DataFetchError(f"{spec.title} unavailable")
        return self.data[spec.title]


class MemorySink:
    """Sink keeping the written canvases in memory."""

    def __init__(self) -> None:
        self.canvases: Dict[int, Image.Image] = {}
        self._lock = threading.Lock()

    def write(self, canvas: Image.Image, index: int) -> Path:
        with self._lock:
            self.canvases[index] = canvas
        return Path(f"memory/{index + 1:02}.bmp")


def hourly_series(tag: str, values: List[Optional[float]], start: datetime) -> Series:
    """One sample per hour from ``start``."""
    return Series(
        tag=tag,
        samples=[(start + timedelta(hours=i), v) for i, v in enumerate(values)],
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def light_style() -> Style:
    return Style(system_palette="Light", resolution=(320, 240), timezone="UTC")


@pytest.fixture
def dark_style() -> Style:
    return Style(system_palette="Dark", resolution=(320, 240), timezone="UTC")


def text_environment() -> Dict[str, Optional[str]]:
    """Versions that decide how Pillow rasterizes text."""
    return {"pillow": PIL.__version__, "freetype2": features.version("freetype2")}


def assert_matches_reference(canvas: Image.Image, name: str) -> None:
    """Compare ``canvas`` byte for byte with ``tests/data/<name>.bmp``.

    Set ``HOUSEDASH_UPDATE_REFERENCES=1`` to (re)write the references and
    commit ``tests/data``.  Glyph shapes depend on the Pillow and FreeType
    build, so the versions that drew the references are recorded next to
    them and other builds skip the comparison.
    """
    path = REFERENCE_DIR / f"{name}.bmp"
    actual = encode_bitmap(canvas)
    if os.getenv("HOUSEDASH_UPDATE_REFERENCES") == "1":
        REFERENCE_DIR.mkdir(exist_ok=True)
        path.write_bytes(actual)
        REFERENCE_ENVIRONMENT.write_text(
            json.dumps(text_environment(), indent=2, sort_keys=True) + "\n"
        )
        return
    if not path.exists():
        pytest.skip(
            f"reference bitmap {path.name} does not exist yet; "
            "run with HOUSEDASH_UPDATE_REFERENCES=1 and commit tests/data"
        )
    recorded = json.loads(REFERENCE_ENVIRONMENT.read_text()) if REFERENCE_ENVIRONMENT.exists() else {}
    if recorded != text_environment():
        pytest.skip(f"references were drawn with {recorded}, this build is {text_environment()}")
    assert actual == path.read_bytes(), (
        f"{name} differs from {path}; if the change is intended, "
        "rerun with HOUSEDASH_UPDATE_REFERENCES=1"
    )
