"""
Pure game logic (no HTTP, no storage).
For each guess we compute one status per letter:
- correct: right letter, right place
- present: letter is in the word but somewhere else (respecting how many
  times the letter appears in the word)
- absent: letter is not in the word, or every copy of it is already used up

We also compute the final score for a finished puzzle.
"""

import math
from typing import List, Optional

from .errors import GuessLengthMismatch
from .types import Feedback


def evaluate(secret: str, guess: str) -> Feedback:
    """
    Two passes so repeated letters are never double counted.

    Example:
      secret = "allow"
      guess  = "lolly"
      pass 1 -> position 2 ('l' == 'l') is correct, secret[2] is used up
      pass 2 -> 'l' at 0 takes secret[1], 'o' at 1 takes secret[3],
                'l' at 3 finds no unused 'l' left, 'y' is not in the word
      result = ["present", "present", "correct", "absent", "absent"]
    """

    # 0. Compare case-insensitively and validate lengths match
    secret = secret.lower()
    guess = guess.lower()
    n = len(secret)
    if len(guess) != n:
        raise GuessLengthMismatch(
            f"Guess must have exactly {n} letters for this puzzle."
        )

    result: Feedback = ["absent"] * n
    used: List[bool] = [False] * n

    # 1. Exact matches consume their secret letter
    i = 0
    while i < n:
        if guess[i] == secret[i]:
            result[i] = "correct"
            used[i] = True
        i += 1

    # 2. Displaced matches take the first unused copy, scanning left to right
    i = 0
    while i < n:
        if result[i] != "correct":
            j = 0
            while j < n:
                if not used[j] and secret[j] == guess[i]:
                    result[i] = "present"
                    used[j] = True
                    break
                j += 1
        i += 1

    return result


def is_solved(feedback: Feedback) -> bool:
    """
    Solved = every position is correct.
    An empty feedback list is never a win.
    """
    if not feedback:
        return False
    return all(status == "correct" for status in feedback)


def solving_attempt(secret: str, attempts: List[str]) -> Optional[int]:
    """1-based index of the first attempt that matches the word, else None."""
    target = secret.lower()
    index = 0
    while index < len(attempts):
        if attempts[index].lower() == target:
            return index + 1
        index += 1
    return None


def compute_score(max_score: int, attempts_used: int, max_attempts: int) -> int:
    """
    Score for a solved puzzle.
      1 attempt  -> the full max_score
      otherwise  -> max_score - attempts_used * penalty, never below 0
    where penalty = ceil(max_score / max_attempts).

    Example (max_score=60, max_attempts=6, penalty=10):
      1 -> 60, 2 -> 40, 3 -> 30, 6 -> 0
    """
    if max_score <= 0 or attempts_used <= 0:
        return 0
    if attempts_used == 1:
        return max_score
    penalty = math.ceil(max_score / max_attempts)
    return max(max_score - attempts_used * penalty, 0)
