"""Pytest configuration and shared fixtures."""

import logging
from datetime import datetime, timezone

import pytest

from daynight.solar import SubsolarPoint


def pytest_configure(config: pytest.Config) -> None:
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s [%(levelname)s] %(message)s",
    )


class EquirectViewport:
    """Plate carree viewport exposing only the scalar pixel_to_geo, counting calls."""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.calls = 0

    def pixel_to_geo(self, x, y):
        self.calls += 1
        lon = x / self.width * 360.0 - 180.0
        lat = 90.0 - y / self.height * 180.0
        return lat, lon


class FunctionViewport:
    """Viewport backed by an arbitrary pixel -> (lat, lon) function."""

    def __init__(self, width, height, func):
        self.width = width
        self.height = height
        self.func = func
        self.calls = []

    def pixel_to_geo(self, x, y):
        self.calls.append((x, y))
        return self.func(x, y)


class RecordingSurface:
    def __init__(self):
        self.blits = []
        self.clears = 0

    def blit(self, buffer):
        self.blits.append(buffer.copy())

    def clear(self):
        self.clears += 1


class FakeTimerHandle:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.stops = 0

    def stop(self):
        self.stops += 1

    def fire(self):
        self.callback()


class FakeTimers:
    def __init__(self):
        self.handles = []

    def set_interval(self, interval, callback):
        handle = FakeTimerHandle(interval, callback)
        self.handles.append(handle)
        return handle


class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def equator_noon():
    """Sun overhead at (0, 0)."""
    return SubsolarPoint(0.0, 0.0)


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 20, 12, 0, tzinfo=timezone.utc))
