"""Shared fixtures for the wind teller test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from collector import StationCollector
from config import CollectorConfig
from publisher import ReadingPublisher


class FakePlugin:
    """Records publish calls the way waggle.plugin.Plugin receives them"""

    def __init__(self):
        self.published = []

    def publish(self, name, value, meta=None, timestamp=None, scope="all", timeout=None):
        self.published.append({
            "name": name,
            "value": value,
            "meta": meta,
            "timestamp": timestamp,
            "scope": scope,
        })

    def values(self, name):
        return [p["value"] for p in self.published if p["name"] == name]


class StepClock:
    """Deterministic clock advancing by a fixed step on every call"""

    def __init__(self, start=None, step=0.5):
        self.now = start or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
        self.step = timedelta(seconds=step)

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def fake_plugin():
    return FakePlugin()


@pytest.fixture
def config():
    return CollectorConfig(station_id="WS", station_height=100.0)


@pytest.fixture
def collector(config, fake_plugin):
    publisher = ReadingPublisher(fake_plugin, station_id=config.station_id, prefix="env.wx")
    return StationCollector(config, publisher, clock=StepClock())
