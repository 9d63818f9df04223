"""
- Random sources for secret generation, with a clear fallback
The engine only needs an object with randint(low, high) (both inclusive),
so random.Random(seed) works as-is for local and deterministic play.

RandomOrgSource pulls integers from random.org. If anything goes wrong
(no internet, timeout, bad response) it falls back to a local secure
generator so the game still works.
"""

import logging
import random
from secrets import SystemRandom
from typing import Dict, List, Optional, Protocol, Tuple

import requests

from .config import EngineConfig

logger = logging.getLogger(__name__)

RANDOM_URL = "https://www.random.org/integers/"


class RandomSource(Protocol):
    def randint(self, low: int, high: int) -> int:
        ...


class RandomOrgSource:
    def __init__(self, batch_size: int = 16, timeout_seconds: float = 3.0, fallback=None):
        self.batch_size = batch_size
        # keep network quick; if it takes too long, we just fall back
        self.timeout_seconds = timeout_seconds
        self.fallback = fallback or SystemRandom()
        # Buffered numbers per (low, high) range
        self._buffers: Dict[Tuple[int, int], List[int]] = {}
        # Set after a failed fetch; later draws go straight to the fallback
        self._offline = False

    def randint(self, low: int, high: int) -> int:
        if low > high:
            raise ValueError(f"Empty range [{low}, {high}].")
        key = (low, high)
        buffer = self._buffers.get(key)
        if not buffer:
            if self._offline:
                return self.fallback.randint(low, high)
            try:
                buffer = self._fetch(low, high)
            except (requests.RequestException, ValueError) as exc:
                logger.warning("random.org unavailable (%s); using local secure random", exc)
                self._offline = True
                return self.fallback.randint(low, high)
            self._buffers[key] = buffer
        return buffer.pop(0)

    def _fetch(self, low: int, high: int) -> List[int]:
        params = {
            "num": self.batch_size,  # how many numbers we want
            "min": low,
            "max": high,
            "col": 1,                # one number per line
            "base": 10,
            "format": "plain",
            "rnd": "new",
        }
        response = requests.get(RANDOM_URL, params=params, timeout=self.timeout_seconds)
        response.raise_for_status()

        # The body looks like:
        #   3\n1\n6\n2\n
        numbers = [int(line) for line in response.text.splitlines() if line.strip()]
        if len(numbers) != self.batch_size:
            raise ValueError(f"random.org returned {len(numbers)} values, expected {self.batch_size}.")
        for value in numbers:
            if value < low or value > high:
                raise ValueError(f"random.org number {value} out of range {low}..{high}.")
        return numbers


def make_random_source(config: EngineConfig, seed: Optional[int] = None) -> RandomSource:
    """A seed always wins: seeded games must be reproducible."""
    if seed is not None or config.random_source == "local":
        return random.Random(seed)
    return RandomOrgSource()
