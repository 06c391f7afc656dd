"""
DB-backed word registry and session store that mirror the in-memory
classes in store.py.

Public methods (DBSessionStore):
- create(draft) -> PuzzleSession
- get(session_id) -> PuzzleSession | None
- append_attempt(session_id, guess) -> PuzzleSession
- mark_finished(session_id, score, now) -> PuzzleSession

Why: lets the engine and routes switch between memory and MySQL without
changing a line. Any SQLAlchemy failure leaves here as StoreError.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Optional
from uuid import uuid4

import pytz
from sqlalchemy import DateTime, Integer, String, func, insert, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import (
    AlreadyFinished,
    AttemptsExhausted,
    DuplicateWordSlot,
    SessionNotFound,
    StateConflict,
    StoreError,
)
from .logging_utils import get_logger
from .models import (
    DailyWord as DailyWordORM,
    PuzzleAttempt as AttemptORM,
    PuzzleSession as SessionORM,
)
from .store import DailyWord, PuzzleSession, SessionDraft, normalize_category, normalize_level

logger = get_logger("cricket_puzzle.repository")


@contextmanager
def _store_errors(db: Session, operation: str) -> Iterator[None]:
    """Roll back and re-raise SQLAlchemy failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("store_error", extra={"event": operation, "error": str(exc)})
        raise StoreError() from exc


# --- Small converters so the engine only ever sees store.py records ---

def _to_db_time(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are stored as naive UTC."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(pytz.utc).replace(tzinfo=None)
    return value

def _from_db_time(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return pytz.utc.localize(value) if value.tzinfo is None else value

def _to_word(row: DailyWordORM) -> DailyWord:
    return DailyWord(
        id=row.id,
        date=row.date,
        category=row.category,
        level=row.level,
        word=row.word,
        points=row.points,
        created_at=_from_db_time(row.created_at),
    )

def _to_session(row: SessionORM, attempts: List[str]) -> PuzzleSession:
    return PuzzleSession(
        id=row.id,
        user_id=row.user_id,
        date=row.date,
        category=row.category,
        level=row.level,
        word_id=row.word_id,
        max_attempts=row.max_attempts,
        expires_at=_from_db_time(row.expires_at),
        created_at=_from_db_time(row.created_at),
        attempts=attempts,
        score=row.score,
        finished_at=_from_db_time(row.finished_at),
    )


class DBWordRegistry:
    """Read side of the daily_words table (plus add_word for seeding)."""

    def __init__(self, db: Session):
        self.db = db

    def find_word(self, date: str, category: str, level: Any) -> Optional[DailyWord]:
        with _store_errors(self.db, "find_word"):
            row = self.db.execute(
                select(DailyWordORM).where(
                    DailyWordORM.date == date,
                    DailyWordORM.category == normalize_category(category),
                    DailyWordORM.level == normalize_level(level),
                )
            ).scalar_one_or_none()
        return _to_word(row) if row else None

    def get_by_id(self, word_id: str) -> Optional[DailyWord]:
        with _store_errors(self.db, "get_by_id"):
            row = self.db.get(DailyWordORM, word_id)
        return _to_word(row) if row else None

    def list_categories(self) -> List[str]:
        with _store_errors(self.db, "list_categories"):
            rows = self.db.execute(
                select(DailyWordORM.category).distinct().order_by(DailyWordORM.category.asc())
            ).scalars().all()
        return list(rows)

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
        row = DailyWordORM(
            id=entry.id,
            date=entry.date,
            category=entry.category,
            level=entry.level,
            word=entry.word,
            points=entry.points,
            created_at=datetime.utcnow(),
        )
        with _store_errors(self.db, "add_word"):
            self.db.add(row)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise DuplicateWordSlot()
            self.db.refresh(row)
        return _to_word(row)


class DBSessionStore:
    """Drop-in replacement for InMemorySessionStore, backed by SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    # --- Public API ---

    def create(self, draft: SessionDraft) -> PuzzleSession:
        row = SessionORM(
            id=str(uuid4()),
            user_id=draft.user_id,
            date=draft.date,
            category=draft.category,
            level=draft.level,
            word_id=draft.word_id,
            max_attempts=draft.max_attempts,
            score=0,
            expires_at=_to_db_time(draft.expires_at),
            finished_at=None,
            created_at=_to_db_time(draft.created_at),
        )
        with _store_errors(self.db, "create"):
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return _to_session(row, attempts=[])

    def get(self, session_id: str) -> Optional[PuzzleSession]:
        with _store_errors(self.db, "get"):
            row = self.db.get(SessionORM, session_id)
            if not row:
                return None
            return _to_session(row, self._attempts(session_id))

    def append_attempt(self, session_id: str, guess: str) -> PuzzleSession:
        with _store_errors(self.db, "append_attempt"):
            row = self._lock_session(session_id)
            if row is None:
                self.db.rollback()
                raise SessionNotFound()
            if row.finished_at is not None:
                self.db.rollback()
                raise AlreadyFinished()
            max_attempts = row.max_attempts

            count = self._attempt_count(session_id)
            if count >= max_attempts:
                self.db.rollback()
                raise AttemptsExhausted()

            # The insert re-checks finished_at itself, so a finish that
            # commits after the read above still wins.
            try:
                inserted = self._insert_if_open(session_id, count, guess)
                if inserted:
                    self.db.commit()
            except IntegrityError:
                # uq_attempt_position: another writer took this slot first
                self.db.rollback()
                raise StateConflict("Another guess for this puzzle was recorded at the same time.")
            if not inserted:
                self.db.rollback()
                raise AlreadyFinished()

            refreshed = self.db.get(SessionORM, session_id)
            return _to_session(refreshed, self._attempts(session_id))

    def mark_finished(self, session_id: str, score: int, now: datetime) -> PuzzleSession:
        with _store_errors(self.db, "mark_finished"):
            # Conditional write: only the first finish gets to set the score
            result = self.db.execute(
                update(SessionORM)
                .where(SessionORM.id == session_id, SessionORM.finished_at.is_(None))
                .values(finished_at=_to_db_time(now), score=score)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.rollback()
                if self.db.get(SessionORM, session_id) is None:
                    raise SessionNotFound()
                raise AlreadyFinished()
            self.db.commit()

            row = self.db.get(SessionORM, session_id)
            return _to_session(row, self._attempts(session_id))

    # --- Helpers ---

    def _lock_session(self, session_id: str) -> Optional[SessionORM]:
        # FOR UPDATE on MySQL; SQLite serializes writers on its own
        return self.db.execute(
            select(SessionORM)
            .where(SessionORM.id == session_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _attempt_count(self, session_id: str) -> int:
        return self.db.execute(
            select(func.count()).select_from(AttemptORM).where(AttemptORM.session_id == session_id)
        ).scalar_one()

    def _insert_if_open(self, session_id: str, position: int, guess: str) -> int:
        """INSERT ... SELECT that only yields a row while the session is unfinished."""
        source = (
            select(
                literal(session_id, String),
                literal(position, Integer),
                literal(guess, String),
                literal(datetime.utcnow(), DateTime),
            )
            .select_from(SessionORM)
            .where(SessionORM.id == session_id, SessionORM.finished_at.is_(None))
        )
        result = self.db.execute(
            insert(AttemptORM.__table__).from_select(["session_id", "position", "guess", "created_at"], source)
        )
        return result.rowcount

    def _attempts(self, session_id: str) -> List[str]:
        rows = self.db.execute(
            select(AttemptORM.guess)
            .where(AttemptORM.session_id == session_id)
            .order_by(AttemptORM.position.asc())
        ).scalars().all()
        return list(rows)
