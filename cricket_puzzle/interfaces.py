"""
What the session engine needs from storage.

Both the in-memory classes (store.py) and the DB-backed ones
(repository.py) satisfy these, so routes and tests can swap them freely.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from .store import DailyWord, PuzzleSession, SessionDraft


class WordRegistry(Protocol):
    def find_word(self, date: str, category: str, level: str) -> Optional[DailyWord]:
        """Word for one (date, category, level) slot, or None."""

    def get_by_id(self, word_id: str) -> Optional[DailyWord]:
        ...

    def list_categories(self) -> List[str]:
        ...


class SessionStore(Protocol):
    def create(self, draft: SessionDraft) -> PuzzleSession:
        ...

    def get(self, session_id: str) -> Optional[PuzzleSession]:
        ...

    def append_attempt(self, session_id: str, guess: str) -> PuzzleSession:
        """
        Append iff the session is unfinished and has attempts left.
        Raises AlreadyFinished / AttemptsExhausted otherwise, in one atomic step.
        """

    def mark_finished(self, session_id: str, score: int, now: datetime) -> PuzzleSession:
        """Set score + finished_at iff finished_at is still empty; else AlreadyFinished."""
