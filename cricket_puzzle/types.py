"""
Labels for clarity.
"""

from typing import List, Literal

LetterStatus = Literal["correct", "present", "absent"]
Feedback = List[LetterStatus]  # one status per letter of the guess
SessionStatus = Literal["active", "exhausted", "finished"]
Outcome = Literal["won", "lost"]
ScoreMode = Literal["server", "client"]
