"""
In-memory store
Holds daily words and puzzle sessions in memory (tests, local play).
The records defined here are also what the DB repository hands back.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from .errors import (
    AlreadyFinished,
    AttemptsExhausted,
    DuplicateWordSlot,
    SessionNotFound,
    ValidationError,
)
from .types import SessionStatus


def normalize_category(category: str) -> str:
    return str(category).strip().lower()


def normalize_level(level: Any) -> str:
    return str(level).strip()


@dataclass(frozen=True)
class DailyWord:
    id: str
    date: str  # YYYY-MM-DD
    category: str
    level: str
    word: str
    points: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DailyWord":
        """
        Build a DailyWord from a loose dict (seed files, older exports).
        Older records call the secret "answer" instead of "word".
        """
        secret = data.get("word") or data.get("answer")
        if not secret:
            raise ValidationError("Word entry has no 'word' (or legacy 'answer').")
        points = data.get("points")
        return cls(
            id=str(data.get("id") or uuid4()),
            date=str(data["date"]).strip()[:10],
            category=normalize_category(data["category"]),
            level=normalize_level(data["level"]),
            word=str(secret).strip().lower(),
            points=int(points) if points is not None else None,
            created_at=data.get("created_at"),
        )


@dataclass
class SessionDraft:
    date: str
    category: str
    level: str
    word_id: str
    max_attempts: int
    expires_at: datetime
    created_at: datetime
    user_id: Optional[str] = None


@dataclass
class PuzzleSession:
    id: str
    date: str
    category: str
    level: str
    word_id: str
    max_attempts: int
    expires_at: datetime
    created_at: datetime
    user_id: Optional[str] = None
    attempts: List[str] = field(default_factory=list)
    score: int = 0
    finished_at: Optional[datetime] = None

    @property
    def attempts_left(self) -> int:
        return max(self.max_attempts - len(self.attempts), 0)

    @property
    def status(self) -> SessionStatus:
        if self.finished_at is not None:
            return "finished"
        if len(self.attempts) >= self.max_attempts:
            return "exhausted"
        return "active"


class InMemoryWordRegistry:
    def __init__(self) -> None:
        self._words: Dict[str, DailyWord] = {}
        self._lock = RLock()

    def add_word(
        self,
        date: str,
        category: str,
        level: Any,
        word: str,
        points: Optional[int] = None,
    ) -> DailyWord:
        entry = DailyWord.from_mapping(
            {"date": date, "category": category, "level": level, "word": word, "points": points}
        )
        with self._lock:
            if self.find_word(entry.date, entry.category, entry.level) is not None:
                raise DuplicateWordSlot()
            self._words[entry.id] = entry
        return entry

    def find_word(self, date: str, category: str, level: Any) -> Optional[DailyWord]:
        category = normalize_category(category)
        level = normalize_level(level)
        with self._lock:
            for entry in self._words.values():
                if entry.date == date and entry.category == category and entry.level == level:
                    return entry
        return None

    def get_by_id(self, word_id: str) -> Optional[DailyWord]:
        with self._lock:
            return self._words.get(word_id)

    def list_categories(self) -> List[str]:
        with self._lock:
            return sorted({entry.category for entry in self._words.values()})


class InMemorySessionStore:
    def __init__(self) -> None:
        self._sessions: Dict[str, PuzzleSession] = {}
        self._lock = RLock()

    def create(self, draft: SessionDraft) -> PuzzleSession:
        session = PuzzleSession(
            id=str(uuid4()),
            date=draft.date,
            category=draft.category,
            level=draft.level,
            word_id=draft.word_id,
            max_attempts=draft.max_attempts,
            expires_at=draft.expires_at,
            created_at=draft.created_at,
            user_id=draft.user_id,
        )
        with self._lock:
            self._sessions[session.id] = session
        return self._copy(session)

    def get(self, session_id: str) -> Optional[PuzzleSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            return self._copy(session) if session else None

    def append_attempt(self, session_id: str, guess: str) -> PuzzleSession:
        # check-and-append happens under one lock so a racing duplicate
        # request can never push attempts past max_attempts
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFound()
            if session.finished_at is not None:
                raise AlreadyFinished()
            if len(session.attempts) >= session.max_attempts:
                raise AttemptsExhausted()
            session.attempts.append(guess)
            return self._copy(session)

    def mark_finished(self, session_id: str, score: int, now: datetime) -> PuzzleSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFound()
            if session.finished_at is not None:
                raise AlreadyFinished()
            session.score = score
            session.finished_at = now
            return self._copy(session)

    @staticmethod
    def _copy(session: PuzzleSession) -> PuzzleSession:
        # callers get a snapshot; only the store mutates the stored record
        return replace(session, attempts=list(session.attempts))
