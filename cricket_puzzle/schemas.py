"""
Explicit validation & Pydantic models
- Validate request bodies before they reach the engine.
- Define the JSON shape of every response.
- The wire format is camelCase (puzzleId, attemptsLeft, ...) to match the
  React client; Python code uses snake_case.
"""

from datetime import date as date_type, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .types import LetterStatus, SessionStatus

# Posted scores outside this range are rejected before they reach the DB
SCORE_LIMIT = 1_000_000


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# 1. Start a puzzle for one category/level/day
class InitRequest(CamelModel):
    category: str = Field(..., min_length=1, description="Category tag, e.g. 'terms'")
    level: Union[str, int] = Field(..., description="Level within the category, e.g. '1' or 'easy'")
    date: Optional[str] = Field(
        None, description="YYYY-MM-DD; defaults to today in the puzzle timezone"
    )

    @field_validator("category")
    @classmethod
    def validate_category(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("category is required")
        return value

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: Union[str, int]) -> str:
        text = str(value).strip()
        if not text:
            raise ValueError("level is required")
        return text

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: Optional[str]) -> Optional[str]:
        """
        Only the first 10 characters are used, so a full ISO timestamp
        like '2025-01-01T08:00:00Z' is accepted too.
        """
        if value is None or value.strip() == "":
            return None
        day = value.strip()[:10]
        date_type.fromisoformat(day)  # raises ValueError on bad input
        return day

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"category": "terms", "level": "1"},
                {"category": "terms", "level": "1", "date": "2025-01-01"},
            ]
        },
    )


class InitResponse(CamelModel):
    puzzle_id: str = Field(..., description="Session id; the word is never returned")
    max_attempts: int = Field(..., description="Guesses allowed")
    word_length: int = Field(..., description="Letters in the hidden word")
    expires_at: datetime = Field(..., description="End of the puzzle day")
    max_score: int = Field(..., description="Score for solving in one guess")


# 2. Submit one guess
class GuessRequest(CamelModel):
    puzzle_id: str = Field(..., min_length=1, description="Session id from /init")
    guess: str = Field(..., min_length=1, description="Word of the same length as the answer")

    @field_validator("guess")
    @classmethod
    def validate_guess(cls, value: str) -> str:
        """
        Only letters. The length is checked by the engine because it
        depends on the session's word.
        """
        word = value.strip()
        if not word.isalpha():
            raise ValueError("guess must contain letters only")
        return word.lower()


class GuessResponse(CamelModel):
    feedback: List[LetterStatus] = Field(..., description="One status per letter")
    solved: bool = Field(..., description="True when every letter is correct")
    attempts_left: int = Field(..., description="Guesses remaining")


# 3. Finish the session and record the score
class FinishRequest(CamelModel):
    puzzle_id: str = Field(..., min_length=1, description="Session id from /init")
    result: Optional[Literal["won", "lost"]] = Field(None, description="Client's view of the outcome")
    score: Optional[int] = Field(
        None,
        ge=-SCORE_LIMIT,
        le=SCORE_LIMIT,
        description="Client score; only used when the server runs with SCORE_MODE=client",
    )


class FinishResponse(CamelModel):
    success: bool = True
    score: int = Field(..., description="Recorded score")
    max_score: int = Field(..., description="Best possible score for this word")
    answer: str = Field(..., description="The word, revealed once the puzzle is over")


# 4. Read the session back (e.g. after a page reload)
class AttemptOut(CamelModel):
    guess: str
    feedback: List[LetterStatus]


class PuzzleStateResponse(CamelModel):
    puzzle_id: str
    date: str
    category: str
    level: str
    status: SessionStatus
    attempts: List[AttemptOut]
    attempts_left: int
    max_attempts: int
    word_length: int
    solved: bool
    expires_at: datetime
    finished_at: Optional[datetime] = None
    score: int
    answer: Optional[str] = Field(None, description="Only present once the puzzle is finished")


class CategoriesResponse(BaseModel):
    categories: List[str]


class ErrorResponse(BaseModel):
    detail: str
