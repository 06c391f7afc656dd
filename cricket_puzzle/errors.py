"""
Typed errors raised by the puzzle core.

The engine and stores only raise these; main.py maps each family to an
HTTP status:
  ValidationError -> 400
  NotFound        -> 404
  Forbidden       -> 403
  StateConflict   -> 409
  StoreError      -> 500
"""


class PuzzleError(Exception):
    """Base class for every error the puzzle core raises on purpose."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or "")
        self.message = message or (self.__class__.__doc__ or "").strip()


# 1. Bad input from the caller
class ValidationError(PuzzleError):
    """Request is missing a field or has a malformed value."""


class GuessLengthMismatch(ValidationError):
    """Guess length does not match the word length."""


# 2. Missing records
class NotFound(PuzzleError):
    """Requested record does not exist."""


class NoWordForSlot(NotFound):
    """No word found for this category & level on the requested date."""


class SessionNotFound(NotFound):
    """Puzzle session not found."""


# 3. Ownership
class Forbidden(PuzzleError):
    """This puzzle session belongs to another player."""


# 4. Session already moved past the requested operation
class StateConflict(PuzzleError):
    """Puzzle session cannot accept this operation in its current state."""


class AlreadyFinished(StateConflict):
    """Puzzle already finished."""


class AttemptsExhausted(StateConflict):
    """No attempts left for this puzzle."""


class DuplicateWordSlot(StateConflict):
    """A word already exists for this date, category and level."""


# 5. Persistence failures
class StoreError(PuzzleError):
    """Storage backend failed."""
