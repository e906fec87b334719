# backend/quizapp/core/__init__.py
"""
Core package for the quiz service: session state machine, stores,
generator contracts and the request/response schemas.
"""

from .errors import (
    InvalidIndexError,
    MissingDataError,
    NotFoundError,
    QuizError,
    UpstreamGenerationError,
    ValidationError,
)
from .models import EXHAUSTED, LeaderboardEntry, Question, Session
from .orchestrator import QuizOrchestrator
from .store import Leaderboard, SessionStore

__all__ = [
    "EXHAUSTED",
    "InvalidIndexError",
    "Leaderboard",
    "LeaderboardEntry",
    "MissingDataError",
    "NotFoundError",
    "Question",
    "QuizError",
    "QuizOrchestrator",
    "Session",
    "SessionStore",
    "UpstreamGenerationError",
    "ValidationError",
]
