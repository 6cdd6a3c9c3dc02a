import pytest

from services.maturity_engine.engine import MaturityEngine
from src.storage import MemoryStorage


class FakeClock:
    """Manually advanced clock, in seconds since the epoch."""
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingSink:
    """Analytics sink that keeps everything it receives."""
    def __init__(self):
        self.events = []
        self.timings = []
        self.flushed = 0

    def track_custom_event(self, name, payload):
        self.events.append((name, payload))

    def track_timing(self, category, label, ms):
        self.timings.append((category, label, ms))

    def flush(self):
        self.flushed += 1


@pytest.fixture
def engine():
    return MaturityEngine()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def storage():
    return MemoryStorage()
