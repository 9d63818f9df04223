"""
Game engine: one GameSession plus the rules that move it between phases.

The engine never draws and never reads input devices. Adapters call the
operations below and pull state back through the read-only properties.
Time and randomness are injected, so a fake clock and a seeded
random.Random make every game reproducible in tests.

Operations that are not allowed in the current phase are ignored
(they return False). They come from UI timing, not from real faults.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .config import EngineConfig
from .random_client import RandomSource
from .scoring import count_pegs, is_win, score_guess
from .types import (
    SECRET_VISIBLE_PHASES,
    Color,
    FeedbackPegs,
    LossReason,
    Phase,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass(frozen=True)
class Attempt:
    guess: Tuple[Color, ...]
    feedback: FeedbackPegs

    @property
    def black(self) -> int:
        return count_pegs(self.feedback)[0]

    @property
    def white(self) -> int:
        return count_pegs(self.feedback)[1]


@dataclass
class GameSession:
    secret: Tuple[Color, ...]
    current_guess: List[Color]
    phase: Phase = Phase.PLAYING
    cursor: int = 0
    history: List[Attempt] = field(default_factory=list)
    # Time banked before the current PLAYING stretch started
    elapsed_before_ms: int = 0
    started_at_ms: int = 0
    loss_reason: Optional[LossReason] = None

    @property
    def attempts_used(self) -> int:
        return len(self.history)


# Which phases accept which operation. reset is accepted everywhere.
ALLOWED_PHASES: Dict[str, Tuple[Phase, ...]] = {
    "move_cursor": (Phase.PLAYING,),
    "cycle_color": (Phase.PLAYING,),
    "submit_guess": (Phase.PLAYING,),
    "pause": (Phase.PLAYING,),
    "resume": (Phase.PAUSED,),
    "reveal": (Phase.PLAYING,),
    "hide_reveal": (Phase.REVEALING,),
    "tick": (Phase.PLAYING,),
    "reset": tuple(Phase),
}


def generate_secret(config: EngineConfig, rng: RandomSource) -> Tuple[Color, ...]:
    """
    Draw P colors from 1..N.
    Without repeats, a slot redraws until it gets a color not used by an
    earlier slot (same distribution as sampling without replacement).
    """
    secret: List[Color] = []
    for _ in range(config.num_pegs):
        color = Color(rng.randint(1, config.num_colors))
        if not config.allow_repeats:
            while color in secret:
                color = Color(rng.randint(1, config.num_colors))
        secret.append(color)
    return tuple(secret)


class GameEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        rng: Optional[RandomSource] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        # Bad settings must fail here, not halfway through a game
        self.config = (config or EngineConfig()).validate()
        self._rng = rng if rng is not None else random.Random()
        self._clock = clock or monotonic_ms
        self._session = self._new_session(self._clock())

    # --- Helpers ---

    def _new_session(self, now: int) -> GameSession:
        return GameSession(
            secret=generate_secret(self.config, self._rng),
            current_guess=[Color.NONE] * self.config.num_pegs,
            started_at_ms=now,
        )

    def _now(self, now: Optional[int]) -> int:
        return self._clock() if now is None else now

    def _allowed(self, operation: str) -> bool:
        if self._session.phase in ALLOWED_PHASES[operation]:
            return True
        logger.debug("Ignoring %s while %s", operation, self._session.phase.value)
        return False

    def _freeze(self, now: int) -> None:
        self._session.elapsed_before_ms = self.elapsed_ms(now)

    def _win(self, now: int) -> None:
        self._freeze(now)
        self._session.phase = Phase.WON
        logger.info("Game won in %d attempt(s), %d ms", self.attempts_used, self._session.elapsed_before_ms)

    def _lose(self, now: int, reason: LossReason) -> None:
        self._freeze(now)
        self._session.phase = Phase.LOST
        self._session.loss_reason = reason
        logger.info("Game lost (%s) after %d attempt(s)", reason.value, self.attempts_used)

    # --- Read-only state for render adapters ---

    @property
    def phase(self) -> Phase:
        return self._session.phase

    @property
    def cursor(self) -> int:
        return self._session.cursor

    @property
    def current_guess(self) -> Tuple[Color, ...]:
        return tuple(self._session.current_guess)

    @property
    def history(self) -> Tuple[Attempt, ...]:
        return tuple(self._session.history)

    @property
    def attempts_used(self) -> int:
        return self._session.attempts_used

    @property
    def max_attempts(self) -> int:
        return self.config.max_attempts

    @property
    def time_limit_ms(self) -> Optional[int]:
        return self.config.time_limit_ms

    @property
    def loss_reason(self) -> Optional[LossReason]:
        return self._session.loss_reason

    @property
    def revealed_secret(self) -> Optional[Tuple[Color, ...]]:
        """The secret, but only once it may be shown."""
        if self._session.phase in SECRET_VISIBLE_PHASES:
            return self._session.secret
        return None

    @property
    def can_submit(self) -> bool:
        """True when the UI should offer the OK/submit affordance."""
        session = self._session
        if session.phase != Phase.PLAYING:
            return False
        if Color.NONE in session.current_guess:
            return False
        # First guess is always different
        if session.history and tuple(session.current_guess) == session.history[-1].guess:
            return False
        return True

    def elapsed_ms(self, now: Optional[int] = None) -> int:
        session = self._session
        elapsed = session.elapsed_before_ms
        if session.phase == Phase.PLAYING:
            elapsed += max(0, self._now(now) - session.started_at_ms)
        limit = self.config.time_limit_ms
        if limit is not None and elapsed > limit:
            elapsed = limit
        return elapsed

    # --- Guess editing ---

    def move_cursor(self, delta: int) -> bool:
        if not self._allowed("move_cursor"):
            return False
        last_slot = self.config.num_pegs - 1
        self._session.cursor = max(0, min(last_slot, self._session.cursor + delta))
        return True

    def cycle_color(self, delta: int = 1, slot: Optional[int] = None) -> bool:
        if not self._allowed("cycle_color"):
            return False
        if slot is None:
            slot = self._session.cursor
        if slot < 0 or slot >= self.config.num_pegs:
            logger.debug("Ignoring cycle_color on slot %d", slot)
            return False
        # NONE, 1..N, then back to NONE
        current = self._session.current_guess[slot]
        self._session.current_guess[slot] = Color((int(current) + delta) % (self.config.num_colors + 1))
        return True

    def submit_guess(self, now: Optional[int] = None) -> bool:
        now = self._now(now)
        if not self._allowed("submit_guess"):
            return False
        # The clock may have run out since the last tick
        if self.tick(now):
            return False
        if not self.can_submit:
            logger.debug("Ignoring incomplete or repeated guess %s", self._session.current_guess)
            return False

        session = self._session
        guess = tuple(session.current_guess)
        attempt = Attempt(guess=guess, feedback=score_guess(guess, session.secret))
        session.history.append(attempt)
        # current_guess is kept: it is the starting point of the next guess

        if is_win(guess, session.secret):
            self._win(now)
        elif session.attempts_used >= self.config.max_attempts:
            self._lose(now, LossReason.ATTEMPTS_EXHAUSTED)
        return True

    # --- Phase changes ---

    def pause(self, now: Optional[int] = None) -> bool:
        if not self._allowed("pause"):
            return False
        self._freeze(self._now(now))
        self._session.phase = Phase.PAUSED
        return True

    def resume(self, now: Optional[int] = None) -> bool:
        if not self._allowed("resume"):
            return False
        self._session.started_at_ms = self._now(now)
        self._session.phase = Phase.PLAYING
        return True

    def reveal(self, now: Optional[int] = None) -> bool:
        if not self._allowed("reveal"):
            return False
        self._freeze(self._now(now))
        self._session.phase = Phase.REVEALING
        return True

    def hide_reveal(self, now: Optional[int] = None) -> bool:
        if not self._allowed("hide_reveal"):
            return False
        self._session.started_at_ms = self._now(now)
        self._session.phase = Phase.PLAYING
        return True

    def reset(self, now: Optional[int] = None) -> bool:
        self._session = self._new_session(self._now(now))
        logger.info("New game: %d pegs, %d colors", self.config.num_pegs, self.config.num_colors)
        return True

    def tick(self, now: Optional[int] = None) -> bool:
        """Returns True when this tick ended the game on time."""
        if self._session.phase not in ALLOWED_PHASES["tick"]:
            return False
        limit = self.config.time_limit_ms
        if limit is None or self.elapsed_ms(now) < limit:
            return False
        self._lose(self._now(now), LossReason.TIMED_OUT)
        return True

