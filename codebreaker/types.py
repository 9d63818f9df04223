"""
Labels for clarity.
"""

from enum import Enum, IntEnum
from typing import Sequence, Tuple


class Color(IntEnum):
    NONE = 0  # unset slot, never part of a secret
    RED = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    PURPLE = 5
    ORANGE = 6


# Named colors available for a game (N can be configured up to this)
MAX_COLORS = len(Color) - 1


class Feedback(str, Enum):
    NONE = "none"
    BLACK = "black"  # right color, right place
    WHITE = "white"  # right color, wrong place


class Phase(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    WON = "won"
    LOST = "lost"
    REVEALING = "revealing"


class LossReason(str, Enum):
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    TIMED_OUT = "timed_out"


TERMINAL_PHASES = (Phase.WON, Phase.LOST)
SECRET_VISIBLE_PHASES = (Phase.REVEALING, Phase.WON, Phase.LOST)

Code = Sequence[Color]  # P pegs
FeedbackPegs = Tuple[Feedback, ...]
