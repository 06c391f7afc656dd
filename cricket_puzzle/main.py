'''
Cricket daily word puzzle API

Endpoints:
POST /api/puzzle/init          -> start today's puzzle for a category/level
POST /api/puzzle/guess         -> submit a guess, get per-letter feedback
POST /api/puzzle/finish        -> close the puzzle and record the score
GET  /api/puzzle/categories    -> categories that have words
GET  /api/puzzle/{puzzle_id}   -> read a session back (attempts + feedback)

Extras:
GET  /health                   -> liveness

Identity comes from an optional bearer token (see auth.py).
'''

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from . import config
from .auth import get_requester_id
from .bootstrap_db import create_all    # dev-only: create tables
from .clock import Clock
from .db import get_db                  # SQLAlchemy Session dependency
from .errors import (
    Forbidden,
    NotFound,
    PuzzleError,
    StateConflict,
    StoreError,
    ValidationError,
)
from .logging_utils import get_logger, setup_logging
from .repository import DBSessionStore, DBWordRegistry
from .schemas import (
    AttemptOut,
    CategoriesResponse,
    ErrorResponse,
    FinishRequest,
    FinishResponse,
    GuessRequest,
    GuessResponse,
    InitRequest,
    InitResponse,
    PuzzleStateResponse,
)
from .service import PuzzleSessionEngine

setup_logging(getattr(logging, config.LOG_LEVEL, logging.INFO))
logger = get_logger("cricket_puzzle.api")

app = FastAPI(title="Cricket Word Puzzle API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Dev convenience: auto-create tables locally ---
if config.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        "request",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


# ---------------- Error mapping ----------------

# Most specific first; the engine's errors never know about HTTP
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (Forbidden, 403),
    (NotFound, 404),
    (StateConflict, 409),
    (StoreError, 500),
)


@app.exception_handler(PuzzleError)
async def puzzle_error_handler(request: Request, exc: PuzzleError):
    status = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status = code
            break
    if status >= 500:
        logger.error("puzzle_error", extra={"path": request.url.path, "error": exc.message})
        return JSONResponse(status_code=status, content={"detail": "Server Error"})
    logger.warning(
        "puzzle_rejected",
        extra={"path": request.url.path, "status": status, "error": type(exc).__name__},
    )
    return JSONResponse(status_code=status, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("validation_error", extra={"path": request.url.path, "errors": exc.errors()})
    return JSONResponse(
        status_code=400,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "message": "Input validation failed",
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("store_error", extra={"path": request.url.path, "error": str(exc)}, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Server Error"})


# ---------------- Dependencies ----------------

def get_clock() -> Clock:
    return Clock()

# Small factory so routes get a per-request engine (bound to the current DB session)
def get_engine(session=Depends(get_db), clock: Clock = Depends(get_clock)) -> PuzzleSessionEngine:
    return PuzzleSessionEngine(
        words=DBWordRegistry(session),
        sessions=DBSessionStore(session),
        clock=clock,
    )


# ---------------- Routes ----------------

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}

router = APIRouter(prefix="/api/puzzle", tags=["puzzle"])


@router.post("/init", response_model=InitResponse, responses=_ERRORS, summary="Start a puzzle session")
def init_puzzle(
    payload: InitRequest,
    engine: PuzzleSessionEngine = Depends(get_engine),
    requester_id: Optional[str] = Depends(get_requester_id),
) -> InitResponse:
    result = engine.init(requester_id, payload.category, payload.level, payload.date)
    return InitResponse(
        puzzle_id=result.session_id,
        max_attempts=result.max_attempts,
        word_length=result.word_length,
        expires_at=result.expires_at,
        max_score=result.max_score,
    )


@router.post("/guess", response_model=GuessResponse, responses=_ERRORS, summary="Submit a guess")
def submit_guess(
    payload: GuessRequest,
    engine: PuzzleSessionEngine = Depends(get_engine),
    requester_id: Optional[str] = Depends(get_requester_id),
) -> GuessResponse:
    result = engine.guess(payload.puzzle_id, requester_id, payload.guess)
    return GuessResponse(
        feedback=result.feedback,
        solved=result.solved,
        attempts_left=result.attempts_left,
    )


@router.post("/finish", response_model=FinishResponse, responses=_ERRORS, summary="Finish the puzzle")
def finish_puzzle(
    payload: FinishRequest,
    engine: PuzzleSessionEngine = Depends(get_engine),
    requester_id: Optional[str] = Depends(get_requester_id),
) -> FinishResponse:
    result = engine.finish(payload.puzzle_id, requester_id, payload.result, payload.score)
    return FinishResponse(score=result.score, max_score=result.max_score, answer=result.answer)


@router.get("/categories", response_model=CategoriesResponse, summary="List categories")
def list_categories(engine: PuzzleSessionEngine = Depends(get_engine)) -> CategoriesResponse:
    return CategoriesResponse(categories=engine.categories())


@router.get("/{puzzle_id}", response_model=PuzzleStateResponse, responses=_ERRORS, summary="Get puzzle state")
def get_puzzle(
    puzzle_id: str,
    engine: PuzzleSessionEngine = Depends(get_engine),
    requester_id: Optional[str] = Depends(get_requester_id),
) -> PuzzleStateResponse:
    state = engine.state(puzzle_id, requester_id)
    return PuzzleStateResponse(
        puzzle_id=state.session_id,
        date=state.date,
        category=state.category,
        level=state.level,
        status=state.status,
        attempts=[AttemptOut(guess=a.guess, feedback=a.feedback) for a in state.attempts],
        attempts_left=state.attempts_left,
        max_attempts=state.max_attempts,
        word_length=state.word_length,
        solved=state.solved,
        expires_at=state.expires_at,
        finished_at=state.finished_at,
        score=state.score,
        answer=state.answer,
    )


app.include_router(router)


@app.get("/health", summary="Liveness check")
def health() -> dict:
    return {"status": "ok"}
