from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------
# Request models
# ------------------------------------------------------------
class StartQuizRequest(CamelModel):
    name: str
    difficulty: str                # e.g. "Easy", "Medium", "Hard"
    topic: str
    visual: bool = False           # 2 of the questions carry a generated image


class SubmitAnswerRequest(CamelModel):
    session_id: str
    question_index: int
    answer_index: int


class HintRequest(CamelModel):
    session_id: str
    question_index: int


class EndQuizRequest(CamelModel):
    session_id: str


class ExplainMistakeRequest(CamelModel):
    # Optional so that missing fields reach the core and come back as missing_data
    question: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer_index: Optional[int] = None
    user_answer_index: Optional[int] = None


# ------------------------------------------------------------
# Response models
# ------------------------------------------------------------
class StartQuizResponse(CamelModel):
    session_id: str
    total_questions: int


class QuestionView(CamelModel):
    question: str
    options: List[str]
    image_base64: Optional[str] = None
    question_index: int


class ExhaustedResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    status: str = "exhausted"


class SubmitAnswerResponse(CamelModel):
    correct: bool
    score: int


class HintResponse(CamelModel):
    hint: str


class ExplanationResponse(CamelModel):
    explanation: str


class ReviewQuestion(CamelModel):
    question: str
    options: List[str]
    correct_answer_index: int
    user_answer_index: Optional[int] = None
    image_base64: Optional[str] = None


class EndQuizResponse(CamelModel):
    name: str
    score: int
    total_questions: int
    questions: List[ReviewQuestion]


class LeaderboardEntryOut(CamelModel):
    name: str
    score: int
