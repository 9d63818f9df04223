"""
Pure scoring logic (no engine state, no HTTP).
For each guess we produce one feedback peg per slot:
- BLACK: right color in the right position
- WHITE: right color, wrong position (after exact matches are removed)
- NONE: padding

Feedback is grouped BLACK first, then WHITE, then NONE.
Only the counts matter, the order does not point at positions.
"""

from typing import Tuple

from .types import Code, Color, Feedback, FeedbackPegs


def _check_codes(guess: Code, secret: Code) -> int:
    n = len(secret)
    if n == 0 or len(guess) != n:
        raise ValueError("Secret and guess must be the same non-zero length.")
    if Color.NONE in guess or Color.NONE in secret:
        raise ValueError("Unset pegs cannot be scored.")
    return n


def score_guess(guess: Code, secret: Code) -> FeedbackPegs:
    """
    Example:
      secret = [RED, GREEN, BLUE, YELLOW]
      guess  = [GREEN, RED, BLUE, PURPLE]
      BLUE sits in the same place      -> 1 BLACK
      GREEN and RED are swapped        -> 2 WHITE
      PURPLE is not in the secret      -> NONE
      Returns: (BLACK, WHITE, WHITE, NONE)
    """
    n = _check_codes(guess, secret)

    guess_used = [False] * n
    secret_used = [False] * n
    blacks = 0
    whites = 0

    # 1. Exact matches first, so a BLACK is never counted again as WHITE
    i = 0
    while i < n:
        if guess[i] == secret[i]:
            blacks += 1
            guess_used[i] = True
            secret_used[i] = True
        i += 1

    # 2. Color matches: lowest free secret slot wins
    for i in range(n):
        if guess_used[i]:
            continue
        for j in range(n):
            if not secret_used[j] and guess[i] == secret[j]:
                whites += 1
                secret_used[j] = True
                break

    return (
        (Feedback.BLACK,) * blacks
        + (Feedback.WHITE,) * whites
        + (Feedback.NONE,) * (n - blacks - whites)
    )


def count_pegs(feedback: FeedbackPegs) -> Tuple[int, int]:
    """Returns (black, white)."""
    return feedback.count(Feedback.BLACK), feedback.count(Feedback.WHITE)


def is_win(guess: Code, secret: Code) -> bool:
    """
    Win = every peg is BLACK.
    Works for any length, as long as lengths match.
    """
    if len(secret) == 0 or len(guess) != len(secret):
        return False
    return all(g == s for g, s in zip(guess, secret))
