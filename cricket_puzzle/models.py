"""
SQLAlchemy ORM models (MySQL in prod, SQLite in tests).

Tables:
- daily_words: one secret word per (date, category, level) slot; written by
  the admin/seeding side, only read by the puzzle engine
- puzzle_sessions: one row per started puzzle
- puzzle_attempts: one row per guess, numbered 0..max_attempts-1

Why a separate attempts table instead of a JSON list?
- (session_id, position) is unique, so two racing appends for the same
  session cannot both land: the database keeps the order and the ceiling.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class DailyWord(Base):
    __tablename__ = "daily_words"
    __table_args__ = (
        UniqueConstraint("date", "category", "level", name="uq_daily_word_slot"),
    )

    # UUIDs generated in code; stored as strings
    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(32), nullable=False)

    word: Mapped[str] = mapped_column(String(64), nullable=False)
    points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class PuzzleSession(Base):
    __tablename__ = "puzzle_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Owner; empty for anonymous play
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    # Copied from the word slot so the session outlives edits to daily_words
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    level: Mapped[str] = mapped_column(String(32), nullable=False)
    word_id: Mapped[str] = mapped_column(String(36), ForeignKey("daily_words.id"), nullable=False)

    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Stored as naive UTC
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    attempts: Mapped[list["PuzzleAttempt"]] = relationship(
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="PuzzleAttempt.position.asc()",
    )


class PuzzleAttempt(Base):
    __tablename__ = "puzzle_attempts"
    __table_args__ = (
        UniqueConstraint("session_id", "position", name="uq_attempt_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("puzzle_sessions.id", ondelete="CASCADE"), index=True
    )
    session: Mapped[PuzzleSession] = relationship(back_populates="attempts")

    # 0-based order of the guess within the session
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    guess: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
