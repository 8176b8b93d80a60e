from __future__ import annotations

import time
from typing import Callable, Iterator

import pytest


@pytest.fixture
def local_tz(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[str], None]]:
    """Switch the process-local time zone for the duration of a test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")

    def _set(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _set

    monkeypatch.undo()
    time.tzset()
