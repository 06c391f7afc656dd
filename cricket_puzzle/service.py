"""
Puzzle session lifecycle: init -> guess (up to max_attempts) -> finish.

The engine keeps no state between calls. Everything lives in the
SessionStore; the WordRegistry is only read. Every failure is one of the
typed errors in errors.py.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from . import config
from .clock import Clock, parse_day
from .engine import compute_score, evaluate, is_solved, solving_attempt
from .errors import (
    AlreadyFinished,
    AttemptsExhausted,
    Forbidden,
    GuessLengthMismatch,
    NoWordForSlot,
    NotFound,
    SessionNotFound,
    ValidationError,
)
from .interfaces import SessionStore, WordRegistry
from .logging_utils import get_logger
from .store import DailyWord, PuzzleSession, SessionDraft, normalize_category, normalize_level
from .types import Feedback, Outcome, ScoreMode, SessionStatus

logger = get_logger("cricket_puzzle.service")


@dataclass
class InitResult:
    session_id: str
    max_attempts: int
    word_length: int
    expires_at: datetime
    max_score: int


@dataclass
class GuessResult:
    feedback: Feedback
    solved: bool
    attempts_left: int


@dataclass
class FinishResult:
    score: int
    max_score: int
    answer: str


@dataclass
class AttemptView:
    guess: str
    feedback: Feedback


@dataclass
class SessionState:
    session_id: str
    date: str
    category: str
    level: str
    status: SessionStatus
    attempts: List[AttemptView]
    attempts_left: int
    max_attempts: int
    word_length: int
    solved: bool
    expires_at: datetime
    finished_at: Optional[datetime]
    score: int
    # only filled in once the session is finished
    answer: Optional[str] = None


class PuzzleSessionEngine:
    def __init__(
        self,
        words: WordRegistry,
        sessions: SessionStore,
        clock: Optional[Clock] = None,
        score_mode: Optional[ScoreMode] = None,
        max_attempts: Optional[int] = None,
        default_points: Optional[int] = None,
    ) -> None:
        self.words = words
        self.sessions = sessions
        self.clock = clock or Clock()
        self.score_mode = score_mode or config.SCORE_MODE
        self.max_attempts = max_attempts or config.MAX_ATTEMPTS
        self.default_points = (
            default_points if default_points is not None else config.DEFAULT_WORD_POINTS
        )

    # --- Public API ---

    def init(
        self,
        user_id: Optional[str],
        category: str,
        level: str,
        date: Optional[str] = None,
    ) -> InitResult:
        if category is None or not str(category).strip():
            raise ValidationError("category and level are required")
        if level is None or not str(level).strip():
            raise ValidationError("category and level are required")

        day = self._resolve_day(date)
        category = normalize_category(category)
        level = normalize_level(level)

        word = self.words.find_word(day, category, level)
        if word is None:
            raise NoWordForSlot()

        session = self.sessions.create(
            SessionDraft(
                user_id=user_id,
                date=day,
                category=category,
                level=level,
                word_id=word.id,
                max_attempts=self.max_attempts,
                expires_at=self.clock.end_of_day(day),
                created_at=self.clock.now(),
            )
        )
        logger.info(
            "puzzle_init",
            extra={
                "puzzle_id": session.id,
                "user_id": user_id,
                "category": category,
                "level": level,
                "date": day,
            },
        )
        return InitResult(
            session_id=session.id,
            max_attempts=session.max_attempts,
            word_length=len(word.word),
            expires_at=session.expires_at,
            max_score=self._max_score(word),
        )

    def guess(self, session_id: str, requester_id: Optional[str], guess: str) -> GuessResult:
        session = self._load_owned(session_id, requester_id)
        if session.finished_at is not None:
            raise AlreadyFinished()
        if len(session.attempts) >= session.max_attempts:
            raise AttemptsExhausted()

        if guess is None or not str(guess).strip():
            raise ValidationError("puzzleId and guess are required")
        attempt = str(guess).strip().lower()

        word = self._word_for(session)
        if len(attempt) != len(word.word):
            raise GuessLengthMismatch("Guess length mismatch")

        feedback = evaluate(word.word, attempt)
        updated = self.sessions.append_attempt(session.id, attempt)

        solved = is_solved(feedback)
        attempts_left = max(updated.max_attempts - len(updated.attempts), 0)
        logger.info(
            "puzzle_guess",
            extra={
                "puzzle_id": session.id,
                "user_id": requester_id,
                "attempts": len(updated.attempts),
                "attempts_left": attempts_left,
                "solved": solved,
            },
        )
        return GuessResult(feedback=feedback, solved=solved, attempts_left=attempts_left)

    def finish(
        self,
        session_id: str,
        requester_id: Optional[str],
        outcome: Optional[Outcome] = None,
        score: Optional[float] = None,
    ) -> FinishResult:
        session = self._load_owned(session_id, requester_id)
        if session.finished_at is not None:
            raise AlreadyFinished()

        word = self._word_for(session)
        max_score = self._max_score(word)
        final = self._final_score(session, word, max_score, score)

        finished = self.sessions.mark_finished(session.id, final, self.clock.now())
        logger.info(
            "puzzle_finish",
            extra={
                "puzzle_id": session.id,
                "user_id": requester_id,
                "attempts": len(finished.attempts),
                "score": finished.score,
                "score_mode": self.score_mode,
                "outcome": outcome,
            },
        )
        return FinishResult(score=finished.score, max_score=max_score, answer=word.word)

    def state(self, session_id: str, requester_id: Optional[str]) -> SessionState:
        session = self._load_owned(session_id, requester_id)
        word = self._word_for(session)

        views: List[AttemptView] = []
        solved = False
        for attempt in session.attempts:
            feedback = evaluate(word.word, attempt)
            solved = solved or is_solved(feedback)
            views.append(AttemptView(guess=attempt, feedback=feedback))

        return SessionState(
            session_id=session.id,
            date=session.date,
            category=session.category,
            level=session.level,
            status=session.status,
            attempts=views,
            attempts_left=session.attempts_left,
            max_attempts=session.max_attempts,
            word_length=len(word.word),
            solved=solved,
            expires_at=session.expires_at,
            finished_at=session.finished_at,
            score=session.score,
            answer=word.word if session.finished_at is not None else None,
        )

    def categories(self) -> List[str]:
        return self.words.list_categories()

    # --- Helpers ---

    def _resolve_day(self, date: Optional[str]) -> str:
        if date is None or str(date).strip() == "":
            return self.clock.today()
        try:
            return parse_day(str(date).strip()).isoformat()
        except ValueError:
            raise ValidationError("date must be formatted as YYYY-MM-DD")

    def _load_owned(self, session_id: str, requester_id: Optional[str]) -> PuzzleSession:
        if not session_id:
            raise ValidationError("puzzleId is required")
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound()
        if session.user_id is not None and session.user_id != requester_id:
            raise Forbidden()
        return session

    def _word_for(self, session: PuzzleSession) -> DailyWord:
        word = self.words.get_by_id(session.word_id)
        if word is None:
            # the word was deleted by an admin after the session started
            raise NotFound("The word for this puzzle no longer exists.")
        return word

    def _max_score(self, word: DailyWord) -> int:
        if word.points is not None:
            return max(int(word.points), 0)
        return self.default_points

    def _final_score(
        self,
        session: PuzzleSession,
        word: DailyWord,
        max_score: int,
        claimed: Optional[float],
    ) -> int:
        if self.score_mode == "client" and claimed is not None:
            return min(max(int(claimed), 0), max_score)

        used = solving_attempt(word.word, session.attempts)
        if used is None:
            return 0
        return compute_score(max_score, used, session.max_attempts)
