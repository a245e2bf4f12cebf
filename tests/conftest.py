"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from nimator.engine import CheckResult, LayerResult, NotificationLevel, SteppingClock

START = datetime(2016, 8, 16, 13, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> SteppingClock:
    """Clock that moves 15 ms forward on every read."""
    return SteppingClock(START)


@pytest.fixture
def make_layer() -> Callable[..., MagicMock]:
    """Factory for mocked layers whose run() returns one check at ``level``."""

    def _make(level: NotificationLevel, name: str = "layer") -> MagicMock:
        layer = MagicMock()
        layer.name = name
        layer.run.return_value = LayerResult(
            name, [CheckResult(f"{name} check", level, f"{level.label} here")],
        )
        return layer

    return _make


@pytest.fixture
def make_check() -> Callable[..., MagicMock]:
    """Factory for mocked checks returning a fixed result."""

    def _make(level: NotificationLevel, name: str = "check", message: str | None = None) -> MagicMock:
        check = MagicMock()
        check.run.return_value = CheckResult(name, level, message)
        return check

    return _make
