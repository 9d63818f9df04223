"""
In-memory store
Holds one GameEngine per game id, plus the scoreboard.

Every engine call runs under one lock: the HTTP server may deliver
requests from several threads, while the engine itself assumes one
event at a time.
"""

import logging
from dataclasses import dataclass, field
from threading import RLock
from time import time
from typing import Callable, Dict, Optional
from uuid import uuid4

from .config import EngineConfig
from .controls import InputEvent, KeypadControls
from .engine import Clock, GameEngine, monotonic_ms
from .random_client import RandomSource, make_random_source
from .schemas import ActionResponse, AttemptOut, GameSnapshot, InputResponse, StatsOut
from .types import TERMINAL_PHASES, LossReason, Phase

logger = logging.getLogger(__name__)

RandomFactory = Callable[[EngineConfig, Optional[int]], RandomSource]


@dataclass
class Game:
    id: str
    engine: GameEngine
    controls: KeypadControls
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)


@dataclass
class Stats:
    games_started: int = 0
    games_won: int = 0
    games_lost: int = 0
    losses_by_attempts: int = 0
    losses_by_timeout: int = 0

    current_streak: int = 0
    best_streak: int = 0

    total_attempts_in_wins: int = 0
    fastest_win_attempts: Optional[int] = None
    fastest_win_ms: Optional[int] = None


def _to_snapshot(game: Game, now: int) -> GameSnapshot:
    engine = game.engine
    secret = engine.revealed_secret
    return GameSnapshot(
        game_id=game.id,
        phase=engine.phase,
        secret=list(secret) if secret is not None else None,
        current_guess=list(engine.current_guess),
        cursor=engine.cursor,
        history=[
            AttemptOut(guess=list(a.guess), feedback=list(a.feedback), black=a.black, white=a.white)
            for a in engine.history
        ],
        attempts_used=engine.attempts_used,
        max_attempts=engine.max_attempts,
        elapsed_ms=engine.elapsed_ms(now),
        time_limit_ms=engine.time_limit_ms,
        loss_reason=engine.loss_reason,
        can_submit=engine.can_submit,
        num_pegs=engine.config.num_pegs,
        num_colors=engine.config.num_colors,
    )


class GameStore:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
        random_factory: Optional[RandomFactory] = None,
    ) -> None:
        self.config = (config or EngineConfig()).validate()
        self.clock = clock or monotonic_ms
        self._random_factory = random_factory or make_random_source
        self._games: Dict[str, Game] = {}
        self._lock = RLock()
        self._stats = Stats()

    # --- Games ---

    def create(self, seed: Optional[int] = None, **overrides) -> GameSnapshot:
        """Overrides are EngineConfig fields; raises ConfigurationError on bad ones."""
        config = self.config.with_overrides(**overrides)
        game_id = str(uuid4())
        engine = GameEngine(config, rng=self._random_factory(config, seed), clock=self.clock)
        game = Game(id=game_id, engine=engine, controls=KeypadControls(engine))
        with self._lock:
            self._games[game_id] = game
            self._stats.games_started += 1
            logger.info("Game %s started (%d pegs, %d colors)", game_id, config.num_pegs, config.num_colors)
            return _to_snapshot(game, self.clock())

    def get(self, game_id: str) -> Optional[GameSnapshot]:
        """Snapshot for a redraw; the time limit is checked first."""
        result = self._run(game_id, lambda engine, now: engine.tick(now))
        return result.snapshot if result else None

    def close(self, game_id: str) -> bool:
        with self._lock:
            removed = self._games.pop(game_id, None)
        if removed:
            logger.info("Game %s closed", game_id)
        return removed is not None

    # --- Engine operations ---

    def move_cursor(self, game_id: str, delta: int) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.move_cursor(delta))

    def cycle_color(self, game_id: str, delta: int = 1, slot: Optional[int] = None) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.cycle_color(delta, slot))

    def submit_guess(self, game_id: str) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.submit_guess(now))

    def pause(self, game_id: str) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.pause(now))

    def resume(self, game_id: str) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.resume(now))

    def reveal(self, game_id: str) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.reveal(now))

    def hide_reveal(self, game_id: str) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.hide_reveal(now))

    def reset(self, game_id: str) -> Optional[ActionResponse]:
        return self._run(game_id, lambda engine, now: engine.reset(now), new_game=True)

    def handle_input(self, game_id: str, event: InputEvent) -> Optional[InputResponse]:
        """Keypad event; an exit closes the game."""
        running = True

        def _apply(engine: GameEngine, now: int) -> bool:
            nonlocal running
            running = game.controls.handle(event, now)
            return True

        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            result = self._run(game_id, _apply)
            if not running:
                self.close(game_id)
                return InputResponse(running=False, snapshot=None)
            return InputResponse(running=True, snapshot=result.snapshot)

    def _run(
        self,
        game_id: str,
        action: Callable[[GameEngine, int], bool],
        new_game: bool = False,
    ) -> Optional[ActionResponse]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None

            engine = game.engine
            now = self.clock()
            old_phase = engine.phase

            applied = action(engine, now)
            game.updated_at = time()

            # A reset always starts a new game, even from a terminal phase
            if new_game:
                self._stats.games_started += 1

            # Scoreboard moves exactly once per finished game
            if old_phase not in TERMINAL_PHASES and engine.phase in TERMINAL_PHASES:
                self._update_stats_on_end(engine, now)

            return ActionResponse(applied=applied, snapshot=_to_snapshot(game, now))

    # --- Scoreboard ---

    def _update_stats_on_end(self, engine: GameEngine, now: int) -> None:
        if engine.phase == Phase.WON:
            self._stats.games_won += 1

            # streaks
            self._stats.current_streak += 1
            if self._stats.current_streak > self._stats.best_streak:
                self._stats.best_streak = self._stats.current_streak

            # guesses and time used
            attempts = engine.attempts_used
            elapsed = engine.elapsed_ms(now)
            self._stats.total_attempts_in_wins += attempts
            if self._stats.fastest_win_attempts is None or attempts < self._stats.fastest_win_attempts:
                self._stats.fastest_win_attempts = attempts
            if self._stats.fastest_win_ms is None or elapsed < self._stats.fastest_win_ms:
                self._stats.fastest_win_ms = elapsed
        else:
            self._stats.games_lost += 1
            self._stats.current_streak = 0
            if engine.loss_reason == LossReason.TIMED_OUT:
                self._stats.losses_by_timeout += 1
            else:
                self._stats.losses_by_attempts += 1

    def get_stats(self) -> StatsOut:
        with self._lock:
            stats = self._stats
            average = (stats.total_attempts_in_wins / stats.games_won) if stats.games_won > 0 else None
            return StatsOut(
                games_started=stats.games_started,
                games_won=stats.games_won,
                games_lost=stats.games_lost,
                losses_by_attempts=stats.losses_by_attempts,
                losses_by_timeout=stats.losses_by_timeout,
                current_streak=stats.current_streak,
                best_streak=stats.best_streak,
                average_attempts_to_win=average,
                fastest_win_attempts=stats.fastest_win_attempts,
                fastest_win_ms=stats.fastest_win_ms,
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._stats = Stats()
