# backend/quizapp/core/models.py

import base64
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .errors import InvalidIndexError


# ------------------------------------------------------------
# Questions
# ------------------------------------------------------------
_GENERATED_FIELDS = frozenset({"text", "options", "correct_answer_index", "image"})


@dataclass
class Question:
    text: str
    options: Tuple[str, ...]
    correct_answer_index: int
    image: Optional[bytes] = None
    user_answer_index: Optional[int] = None

    def __post_init__(self):
        self.options = tuple(self.options)
        if not 0 <= self.correct_answer_index < len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} out of range "
                f"for {len(self.options)} options"
            )
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name, value):
        if name in _GENERATED_FIELDS and self.__dict__.get("_sealed"):
            raise AttributeError(f"Question.{name} is read-only once generated")
        super().__setattr__(name, value)

    @property
    def answered(self) -> bool:
        return self.user_answer_index is not None

    @property
    def image_base64(self) -> Optional[str]:
        if self.image is None:
            return None
        return base64.b64encode(self.image).decode("ascii")

    def record_answer(self, answer_index: int) -> bool:
        """Store the user's answer (once) and return whether it was correct."""
        if self.answered:
            raise InvalidIndexError("Question has already been answered")
        self.user_answer_index = answer_index
        return answer_index == self.correct_answer_index

    def view(self, question_index: int) -> Dict[str, Any]:
        """Client-facing payload; never includes the answer key."""
        return {
            "question": self.text,
            "options": list(self.options),
            "image_base64": self.image_base64,
            "question_index": question_index,
        }

    def review(self) -> Dict[str, Any]:
        """Post-quiz payload including the answer key and the user's answer."""
        return {
            "question": self.text,
            "options": list(self.options),
            "correct_answer_index": self.correct_answer_index,
            "user_answer_index": self.user_answer_index,
            "image_base64": self.image_base64,
        }


class _Exhausted:
    """Returned by next_question when every question has been served."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "EXHAUSTED"

    def __bool__(self):
        return False


EXHAUSTED = _Exhausted()


# ------------------------------------------------------------
# Sessions
# ------------------------------------------------------------
@dataclass
class Session:
    session_id: str
    name: str
    difficulty: str
    topic: str
    questions: Tuple[Question, ...]
    index: int = 0
    score: int = 0
    created_at: float = field(default_factory=time.time)
    last_active_at: float = field(default_factory=time.time)

    def __post_init__(self):
        self.questions = tuple(self.questions)
        if not self.questions:
            raise ValueError("A session needs at least one question")

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def exhausted(self) -> bool:
        return self.index >= self.total_questions

    def touch(self, now: Optional[float] = None) -> None:
        """
        Record client activity for the idle-expiry sweep.

        ``last_active_at`` is bookkeeping only; touching from a read-only
        operation (next question, hint) leaves quiz state unchanged.
        """
        self.last_active_at = time.time() if now is None else now

    def question_at(self, question_index: int) -> Optional[Question]:
        if not isinstance(question_index, int) or isinstance(question_index, bool):
            return None
        if 0 <= question_index < self.total_questions:
            return self.questions[question_index]
        return None

    def result(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "total_questions": self.total_questions,
            "questions": [q.review() for q in self.questions],
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    score: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.score}

