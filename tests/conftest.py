"""Shared test fixtures for pomolog tests."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pomolog import FrozenClock, Store

T0 = datetime(2026, 6, 14, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """A storage directory that does not exist yet, also exported as POMODORO_DIR."""
    root = tmp_path / ".pomodoro"
    os.environ["POMODORO_DIR"] = str(root)
    yield root
    # Cleanup
    if "POMODORO_DIR" in os.environ:
        del os.environ["POMODORO_DIR"]


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def store(root: Path, clock: FrozenClock) -> Store:
    return Store(root=root, clock=clock)
