"""
- A fake clock the tests move by hand (milliseconds)
- A scripted random source so secrets are known in advance
- A fresh GameStore per test, wired into FastAPI via dependency_overrides
- A client fixture (TestClient(app)) that already has the override applied
"""
import os
from itertools import cycle

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("APP_ENV", "test")

from codebreaker.config import EngineConfig
from codebreaker.main import app, get_store
from codebreaker.store import GameStore
from codebreaker.types import Color

R, G, B, Y, P, O = Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW, Color.PURPLE, Color.ORANGE


class FakeClock:
    def __init__(self, start: int = 1000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class ScriptedRandom:
    """Hands out the given numbers in order (and loops), checking the range."""

    def __init__(self, values):
        self.calls = 0
        self._values = cycle([int(v) for v in values])

    def randint(self, low: int, high: int) -> int:
        self.calls += 1
        value = next(self._values)
        assert low <= value <= high, f"{value} not in [{low}, {high}]"
        return value


SECRET = [R, G, B, Y]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return EngineConfig(num_pegs=4, num_colors=6, allow_repeats=False, max_attempts=10, time_limit_ms=60_000)


@pytest.fixture
def store(clock, config):
    # Every game in this store gets the secret [RED, GREEN, BLUE, YELLOW]
    return GameStore(config, clock=clock, random_factory=lambda cfg, seed: ScriptedRandom(SECRET))


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
