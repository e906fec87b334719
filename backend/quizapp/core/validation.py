# backend/quizapp/core/validation.py

"""
Post-call validation of generator output.

The generator is asked for a JSON shape but never trusted to honour it:
everything it returns passes through :func:`parse_question_drafts` before a
session is built from it.
"""

import logging
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from .errors import UpstreamGenerationError

logger = logging.getLogger("quiz.validation")


class QuestionDraft(BaseModel):
    question: str
    options: List[str]
    correct_answer_index: int = Field(
        validation_alias=AliasChoices("correct_answer_index", "correctAnswerIndex")
    )
    image_prompt: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("image_prompt", "imagePrompt")
    )

    model_config = {"strict": True}

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question text is empty")
        return v

    @field_validator("options")
    @classmethod
    def _options_not_blank(cls, v: List[str]) -> List[str]:
        cleaned = [o.strip() for o in v]
        if any(not o for o in cleaned):
            raise ValueError("options must be non-empty strings")
        return cleaned

    @field_validator("image_prompt")
    @classmethod
    def _blank_prompt_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


def parse_question_drafts(
    raw: Any,
    option_count: int = 4,
    visual_mode: bool = False,
    image_count: int = 2,
) -> List[QuestionDraft]:
    """
    Validate raw generator output and return typed drafts.

    Raises UpstreamGenerationError with reason "empty" for an empty result and
    reason "malformed" for anything that does not match the question schema.
    """
    if raw is None or (isinstance(raw, list) and not raw):
        raise UpstreamGenerationError("Generator returned no questions", reason="empty")
    if not isinstance(raw, list):
        raise UpstreamGenerationError(
            f"Generator returned {type(raw).__name__}, expected a list", reason="malformed"
        )

    drafts: List[QuestionDraft] = []
    for i, item in enumerate(raw):
        try:
            draft = QuestionDraft.model_validate(item)
        except PydanticValidationError as e:
            logger.warning(f"Rejected question {i}: {e.errors()}")
            raise UpstreamGenerationError(
                f"Question {i} does not match the question schema", reason="malformed"
            ) from e

        if len(draft.options) != option_count:
            raise UpstreamGenerationError(
                f"Question {i} has {len(draft.options)} options, expected {option_count}",
                reason="malformed",
            )
        if not 0 <= draft.correct_answer_index < option_count:
            raise UpstreamGenerationError(
                f"Question {i} has correct_answer_index {draft.correct_answer_index} out of range",
                reason="malformed",
            )
        if not visual_mode:
            draft.image_prompt = None
        drafts.append(draft)

    if visual_mode:
        with_images = sum(1 for d in drafts if d.image_prompt)
        expected = min(image_count, len(drafts))
        if with_images != expected:
            raise UpstreamGenerationError(
                f"Visual quiz has {with_images} image questions, expected {expected}",
                reason="malformed",
            )

    return drafts
