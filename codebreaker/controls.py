"""
Keypad input adapter.
Maps a 5-way pad plus a back key onto engine operations:

  LEFT / RIGHT   move the cursor
  UP / DOWN      cycle the color under the cursor
  OK             submit, resume from pause, or hide the revealed code
  OK (long)      reveal / hide the code
  BACK           pause; a second BACK while paused exits
  BACK (long)    exit
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .engine import GameEngine
from .types import Phase

logger = logging.getLogger(__name__)


class InputKey(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    OK = "ok"
    BACK = "back"


class InputType(str, Enum):
    PRESS = "press"
    REPEAT = "repeat"  # key held, auto-repeat
    LONG = "long"


@dataclass(frozen=True)
class InputEvent:
    key: InputKey
    type: InputType = InputType.PRESS


class KeypadControls:
    def __init__(self, engine: GameEngine):
        self.engine = engine

    def handle(self, event: InputEvent, now: Optional[int] = None) -> bool:
        """
        Applies one input event to the engine.
        Returns False when the host should exit, True otherwise.
        """
        if event.type == InputType.LONG:
            return self._handle_long(event.key, now)
        return self._handle_short(event, now)

    def _handle_short(self, event: InputEvent, now: Optional[int]) -> bool:
        engine = self.engine
        key = event.key

        if key == InputKey.BACK:
            # Auto-repeat must not turn a pause into an exit
            if event.type != InputType.PRESS:
                return True
            if engine.phase == Phase.PAUSED:
                logger.info("Exit requested from pause")
                return False
            engine.pause(now)
        elif key == InputKey.LEFT:
            engine.move_cursor(-1)
        elif key == InputKey.RIGHT:
            engine.move_cursor(1)
        elif key == InputKey.UP:
            engine.cycle_color(1)
        elif key == InputKey.DOWN:
            engine.cycle_color(-1)
        elif key == InputKey.OK:
            if engine.phase == Phase.PLAYING:
                engine.submit_guess(now)
            elif engine.phase == Phase.PAUSED:
                engine.resume(now)
            elif engine.phase == Phase.REVEALING:
                engine.hide_reveal(now)
        return True

    def _handle_long(self, key: InputKey, now: Optional[int]) -> bool:
        engine = self.engine
        if key == InputKey.BACK:
            logger.info("Exit requested")
            return False
        if key == InputKey.OK:
            if engine.phase == Phase.PLAYING:
                engine.reveal(now)
            elif engine.phase == Phase.REVEALING:
                engine.hide_reveal(now)
        return True
