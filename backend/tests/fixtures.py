"""
Test fixtures: sample generator output and fake collaborators.
"""
from typing import Any, Dict, List

from quizapp.core.orchestrator import QuizOrchestrator
from quizapp.core.store import Leaderboard, SessionStore

FAKE_IMAGE = b"\xff\xd8\xff\xe0fake-jpeg"


class TestFixtures:
    """Centralized sample data for all test modules."""

    @staticmethod
    def raw_questions(count: int = 5, visual: bool = False, image_count: int = 2) -> List[Dict[str, Any]]:
        """Generator-shaped drafts; question i has correct answer i % 4."""
        items = []
        for i in range(count):
            item = {
                "question": f"Question number {i}?",
                "options": [f"Option {i}-{j}" for j in range(4)],
                "correctAnswerIndex": i % 4,
            }
            if visual:
                item["imagePrompt"] = f"A photo for question {i}" if i < image_count else None
            items.append(item)
        return items


class FakeQuestionGenerator:
    def __init__(self, result=None, error: Exception | None = None):
        self.result = TestFixtures.raw_questions() if result is None else result
        self.error = error
        self.calls = []

    async def generate(self, difficulty, topic, count, visual_mode):
        self.calls.append((difficulty, topic, count, visual_mode))
        if self.error is not None:
            raise self.error
        return self.result


class FakeImageGenerator:
    def __init__(self, image: bytes = FAKE_IMAGE, error: Exception | None = None):
        self.image = image
        self.error = error
        self.prompts = []

    async def render(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.image


class FakeHintGenerator:
    def __init__(self, hint: str = "Think about the basics.", error: Exception | None = None):
        self.hint = hint
        self.error = error
        self.questions = []

    async def generate(self, question_text):
        self.questions.append(question_text)
        if self.error is not None:
            raise self.error
        return self.hint


class FakeExplanationGenerator:
    def __init__(self, explanation: str = "Because it is.", error: Exception | None = None):
        self.explanation = explanation
        self.error = error
        self.calls = []

    async def generate(self, question_text, correct_text, user_text):
        self.calls.append((question_text, correct_text, user_text))
        if self.error is not None:
            raise self.error
        return self.explanation


def make_orchestrator(
    question_generator=None,
    image_generator=None,
    hint_generator=None,
    explanation_generator=None,
    leaderboard: Leaderboard | None = None,
) -> QuizOrchestrator:
    return QuizOrchestrator(
        question_generator=question_generator or FakeQuestionGenerator(),
        image_generator=image_generator or FakeImageGenerator(),
        hint_generator=hint_generator or FakeHintGenerator(),
        explanation_generator=explanation_generator or FakeExplanationGenerator(),
        sessions=SessionStore(),
        leaderboard=leaderboard if leaderboard is not None else Leaderboard(5),
    )
