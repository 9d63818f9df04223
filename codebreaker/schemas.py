"""
Explicit validation & Pydantic models
- Requests: what adapters may ask the engine to do.
- Responses: the read-only snapshot a renderer pulls once per redraw.
  The secret is only filled in while revealing or after the game ended.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from .controls import InputKey, InputType
from .types import Color, Feedback, LossReason, Phase


# 1. Optional overrides when starting a game
class NewGameRequest(BaseModel):
    num_pegs: Optional[int] = Field(None, ge=1, le=10, description="Pegs in the code (P)")
    num_colors: Optional[int] = Field(None, ge=1, le=6, description="Colors in play (N)")
    allow_repeats: Optional[bool] = Field(None, description="May the secret repeat a color?")
    max_attempts: Optional[int] = Field(None, ge=1, description="Guesses allowed")
    time_limit_ms: Optional[int] = Field(None, ge=0, description="Time budget in milliseconds; 0 = no limit")
    seed: Optional[int] = Field(None, description="Seed for a reproducible secret")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {},
                {"num_colors": 4, "max_attempts": 99, "time_limit_ms": 0},
                {"allow_repeats": True, "seed": 42},
            ]
        }
    }


# 2. Cursor movement
class CursorRequest(BaseModel):
    delta: Literal[-1, 1] = Field(..., description="-1 = left, 1 = right")


# 3. Color cycling on one slot
class ColorRequest(BaseModel):
    delta: Literal[-1, 1] = Field(1, description="1 = next color, -1 = previous color")
    slot: Optional[int] = Field(None, ge=0, description="Slot to change; defaults to the cursor")


# 4. Raw keypad event
class InputRequest(BaseModel):
    key: InputKey
    type: InputType = InputType.PRESS


# 5. One scored guess
class AttemptOut(BaseModel):
    guess: List[Color] = Field(..., description="The submitted pegs")
    feedback: List[Feedback] = Field(..., description="Black first, then white, then none")
    black: int = Field(..., description="Right color, right place")
    white: int = Field(..., description="Right color, wrong place")


# 6. Everything a renderer needs
class GameSnapshot(BaseModel):
    game_id: str = Field(..., description="Unique ID for the game")
    phase: Phase = Field(..., description="Current phase of the game")
    secret: Optional[List[Color]] = Field(None, description="Only while revealing or once the game is over")
    current_guess: List[Color] = Field(..., description="Pegs being edited (0 = unset)")
    cursor: int = Field(..., description="Slot affected by color changes")
    history: List[AttemptOut] = Field(..., description="All guesses so far with feedback")
    attempts_used: int
    max_attempts: int
    elapsed_ms: int = Field(..., description="Play time, paused time excluded")
    time_limit_ms: Optional[int] = Field(None, description="None = no time limit")
    loss_reason: Optional[LossReason] = None
    can_submit: bool = Field(..., description="Whether submitting the current guess would be accepted")
    num_pegs: int
    num_colors: int


# 7. Result of an engine operation
class ActionResponse(BaseModel):
    applied: bool = Field(..., description="False when the phase or guess did not allow the action")
    snapshot: GameSnapshot


# 8. Result of a keypad event
class InputResponse(BaseModel):
    running: bool = Field(..., description="False when the event closed the game")
    snapshot: Optional[GameSnapshot] = None


# 9. Scoreboard
class StatsOut(BaseModel):
    games_started: int = Field(..., description="Games started, resets included")
    games_won: int
    games_lost: int
    losses_by_attempts: int
    losses_by_timeout: int

    current_streak: int = Field(..., description="Current consecutive wins")
    best_streak: int = Field(..., description="Best consecutive wins")

    average_attempts_to_win: Optional[float] = Field(None, description="Average guesses used in wins")
    fastest_win_attempts: Optional[int] = Field(None, description="Fewest guesses taken to win")
    fastest_win_ms: Optional[int] = Field(None, description="Shortest play time of a win")
