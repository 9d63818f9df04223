'''
Codebreaker API

Endpoints:
POST   /games                  -> start a game (optional overrides)
GET    /games/{id}             -> snapshot for a redraw (checks the time limit)
POST   /games/{id}/cursor      -> move the cursor
POST   /games/{id}/color       -> cycle a peg color
POST   /games/{id}/guess       -> submit the current guess
POST   /games/{id}/pause       -> pause the clock
POST   /games/{id}/resume      -> resume after pause
POST   /games/{id}/reveal      -> show the secret (clock stops)
POST   /games/{id}/hide        -> hide the secret again
POST   /games/{id}/reset       -> new secret, empty board
POST   /games/{id}/input       -> raw keypad event
DELETE /games/{id}             -> discard the game

Extras:
GET  /stats                    -> scoreboard
POST /stats/reset              -> reset scoreboard

Actions that the current phase does not allow answer 200 with applied=false.
'''

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import ConfigurationError, configure_logging, load_config
from .controls import InputEvent
from .schemas import (
    ActionResponse,
    ColorRequest,
    CursorRequest,
    GameSnapshot,
    InputRequest,
    InputResponse,
    NewGameRequest,
    StatsOut,
)
from .store import GameStore

configure_logging()

app = FastAPI(title="Codebreaker API", version="1.0.0")

# Allow everything in dev so the docs and front-ends work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

_store: Optional[GameStore] = None


# One store per process; tests swap it through dependency_overrides
def get_store() -> GameStore:
    global _store
    if _store is None:
        _store = GameStore(load_config())
    return _store


def _found(result):
    if result is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return result

# ---------------- Routes ----------------

@app.post("/games", response_model=GameSnapshot, summary="Start a new game")
def start_game(
    payload: Optional[NewGameRequest] = None,
    store: GameStore = Depends(get_store),
) -> GameSnapshot:
    payload = payload or NewGameRequest()
    overrides = payload.model_dump(exclude={"seed"}, exclude_none=True)
    try:
        return store.create(seed=payload.seed, **overrides)
    except ConfigurationError as ce:
        raise HTTPException(status_code=400, detail=str(ce))

@app.get("/games/{game_id}", response_model=GameSnapshot, summary="Get current game state")
def get_game(game_id: str, store: GameStore = Depends(get_store)) -> GameSnapshot:
    return _found(store.get(game_id))

@app.delete("/games/{game_id}", summary="Discard a game")
def close_game(game_id: str, store: GameStore = Depends(get_store)) -> dict:
    if not store.close(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return {"message": "Game closed."}

@app.post("/games/{game_id}/cursor", response_model=ActionResponse, summary="Move the cursor")
def move_cursor(game_id: str, payload: CursorRequest, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.move_cursor(game_id, payload.delta))

@app.post("/games/{game_id}/color", response_model=ActionResponse, summary="Cycle a peg color")
def cycle_color(game_id: str, payload: ColorRequest, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.cycle_color(game_id, payload.delta, payload.slot))

@app.post("/games/{game_id}/guess", response_model=ActionResponse, summary="Submit the current guess")
def submit_guess(game_id: str, store: GameStore = Depends(get_store)) -> ActionResponse:
    # The engine re-checks completeness and repeats; a rejected guess is applied=false
    return _found(store.submit_guess(game_id))

@app.post("/games/{game_id}/pause", response_model=ActionResponse, summary="Pause the game")
def pause(game_id: str, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.pause(game_id))

@app.post("/games/{game_id}/resume", response_model=ActionResponse, summary="Resume a paused game")
def resume(game_id: str, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.resume(game_id))

@app.post("/games/{game_id}/reveal", response_model=ActionResponse, summary="Reveal the secret")
def reveal(game_id: str, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.reveal(game_id))

@app.post("/games/{game_id}/hide", response_model=ActionResponse, summary="Hide the secret again")
def hide_reveal(game_id: str, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.hide_reveal(game_id))

@app.post("/games/{game_id}/reset", response_model=ActionResponse, summary="Start over with a new secret")
def reset(game_id: str, store: GameStore = Depends(get_store)) -> ActionResponse:
    return _found(store.reset(game_id))

@app.post("/games/{game_id}/input", response_model=InputResponse, summary="Send a keypad event")
def handle_input(game_id: str, payload: InputRequest, store: GameStore = Depends(get_store)) -> InputResponse:
    return _found(store.handle_input(game_id, InputEvent(key=payload.key, type=payload.type)))

@app.get("/stats", response_model=StatsOut, summary="Get scoreboard")
def get_stats(store: GameStore = Depends(get_store)) -> StatsOut:
    return store.get_stats()

@app.post("/stats/reset", summary="Reset the scoreboard")
def reset_stats(store: GameStore = Depends(get_store)) -> dict:
    store.reset_stats()
    return {"message": "Stats reset."}
