"""
Load daily words from a JSON file.

Each entry: {"date": "2025-01-01", "category": "terms", "level": "1",
"word": "yorker", "points": 60}. "points" is optional; older exports that
call the word "answer" are accepted too. Malformed entries and slots that
already have a word are skipped, so the command is safe to run twice.

Usage:
    python -m cricket_puzzle.seed words.json
"""

import argparse
import json
from typing import Any, Iterable, Mapping, Tuple

from .clock import parse_day
from .errors import DuplicateWordSlot, ValidationError
from .logging_utils import get_logger, setup_logging
from .store import DailyWord

logger = get_logger("cricket_puzzle.seed")


def seed_words(registry, entries: Iterable[Mapping[str, Any]]) -> Tuple[int, int]:
    """Insert entries into any registry with add_word(). Returns (inserted, skipped)."""
    inserted = 0
    skipped = 0
    for raw in entries:
        try:
            if not isinstance(raw, Mapping):
                raise ValidationError("entry must be an object")
            entry = DailyWord.from_mapping(raw)
            if not entry.category or not entry.level:
                raise ValidationError("category and level are required")
            parse_day(entry.date)
            registry.add_word(entry.date, entry.category, entry.level, entry.word, entry.points)
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            skipped += 1
            logger.warning("seed_entry_invalid", extra={"error": str(exc)})
            continue
        except DuplicateWordSlot:
            skipped += 1
            continue
        inserted += 1
    return inserted, skipped


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed daily puzzle words from a JSON array.")
    parser.add_argument("path", help="JSON file holding a list of word entries")
    args = parser.parse_args(argv)

    setup_logging()

    with open(args.path, "r", encoding="utf-8") as f:
        entries = json.load(f)
    if not isinstance(entries, list):
        raise SystemExit("Body must be an array")

    # Imported here so parsing --help works without DATABASE_URL
    from .bootstrap_db import create_all
    from .db import SessionLocal
    from .repository import DBWordRegistry

    create_all()
    with SessionLocal() as db:
        inserted, skipped = seed_words(DBWordRegistry(db), entries)
    logger.info("seed_done", extra={"event": f"inserted={inserted} skipped={skipped}"})


if __name__ == "__main__":
    main()
