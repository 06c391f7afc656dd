import json
import logging
import os
import sys
from typing import Any, Dict

# Structured fields that handlers pick up from logger.*(..., extra={...})
_EXTRA_FIELDS = (
    "event",
    "method",
    "path",
    "status",
    "duration_ms",
    "puzzle_id",
    "user_id",
    "category",
    "level",
    "date",
    "attempts",
    "attempts_left",
    "solved",
    "score",
    "score_mode",
    "outcome",
    "error",
    "errors",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                payload[key] = val
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Human-friendly single line: LEVEL time logger - message key=value ..."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            record.levelname,
            self.formatTime(record, datefmt="%H:%M:%S"),
            record.name,
            "-",
            record.getMessage(),
        ]
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                parts.append(f"{key}={val}")
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _isatty(stream) -> bool:
    return hasattr(stream, "isatty") and stream.isatty()


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure root and uvicorn loggers.

    - LOG_FORMAT=pretty forces the plain formatter
    - LOG_FORMAT=json forces JSON
    - otherwise: plain if stdout is a TTY, else JSON
    """
    root = logging.getLogger()
    root.setLevel(level)
    # Clear existing handlers to avoid duplicate logs
    for h in root.handlers[:]:
        root.removeHandler(h)

    fmt_env = os.getenv("LOG_FORMAT", "").lower()
    use_pretty = (fmt_env == "pretty") or (fmt_env == "" and _isatty(sys.stdout))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(PlainFormatter() if use_pretty else JsonFormatter())
    root.addHandler(handler)

    # Align uvicorn loggers to the same handler/level
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.handlers = [handler]
        lg.setLevel(level)
        lg.propagate = False

    return root


def get_logger(name: str = "cricket_puzzle") -> logging.Logger:
    return logging.getLogger(name)
