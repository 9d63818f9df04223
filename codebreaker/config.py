"""
Single place to:
- Read game settings from env (a local .env is loaded if present)
- Validate them before any engine is built
- Set up logging for the process

Bad settings fail loudly here instead of producing a broken game later.
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv

from .types import MAX_COLORS

# Load env vars from .env if present (dev convenience)
load_dotenv()

APP_ENV = os.getenv("APP_ENV", "local")

DEFAULT_PEGS = 4
DEFAULT_COLORS = 6
DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_TIME_LIMIT_MS = 90 * 60 * 1000  # 90 minutes

RANDOM_SOURCES = ("local", "random_org")


class ConfigurationError(ValueError):
    """Raised when a game cannot be built from the given settings."""


@dataclass(frozen=True)
class EngineConfig:
    num_pegs: int = DEFAULT_PEGS
    num_colors: int = DEFAULT_COLORS
    allow_repeats: bool = False
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    # None = no time limit
    time_limit_ms: Optional[int] = DEFAULT_TIME_LIMIT_MS
    random_source: str = "local"

    def validate(self) -> "EngineConfig":
        if self.num_pegs < 1:
            raise ConfigurationError("A code needs at least one peg.")
        if self.num_colors < 1 or self.num_colors > MAX_COLORS:
            raise ConfigurationError(f"Number of colors must be between 1 and {MAX_COLORS}.")
        if not self.allow_repeats and self.num_colors < self.num_pegs:
            raise ConfigurationError(
                f"Cannot draw {self.num_pegs} distinct colors out of {self.num_colors}; "
                "allow repeats or add colors."
            )
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1.")
        if self.time_limit_ms is not None and self.time_limit_ms <= 0:
            raise ConfigurationError("time_limit_ms must be positive (or None for no limit).")
        if self.random_source not in RANDOM_SOURCES:
            raise ConfigurationError(
                f"Unknown random source '{self.random_source}'. Use one of {', '.join(RANDOM_SOURCES)}."
            )
        return self

    def with_overrides(self, **overrides) -> "EngineConfig":
        """Copy with the given fields replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        # 0 means "no time limit", same as CODEBREAKER_TIME_LIMIT_MS=0
        if changes.get("time_limit_ms") == 0:
            changes["time_limit_ms"] = None
        return replace(self, **changes).validate()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'.")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> EngineConfig:
    """Build the engine settings from CODEBREAKER_* env vars."""
    # 0 in the env means "no time limit"
    time_limit = _int_env("CODEBREAKER_TIME_LIMIT_MS", DEFAULT_TIME_LIMIT_MS)
    config = EngineConfig(
        num_pegs=_int_env("CODEBREAKER_PEGS", DEFAULT_PEGS),
        num_colors=_int_env("CODEBREAKER_COLORS", DEFAULT_COLORS),
        allow_repeats=_bool_env("CODEBREAKER_ALLOW_REPEATS", False),
        max_attempts=_int_env("CODEBREAKER_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        time_limit_ms=time_limit if time_limit > 0 else None,
        random_source=os.getenv("CODEBREAKER_RANDOM_SOURCE", "local").strip().lower(),
    )
    return config.validate()


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
