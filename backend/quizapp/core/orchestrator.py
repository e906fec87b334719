# backend/quizapp/core/orchestrator.py

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from .errors import (
    InvalidIndexError,
    MissingDataError,
    NotFoundError,
    QuizError,
    UpstreamGenerationError,
    ValidationError,
)
from .models import EXHAUSTED, LeaderboardEntry, Question, Session, _Exhausted
from .store import Leaderboard, SessionStore
from .validation import QuestionDraft, parse_question_drafts

logger = logging.getLogger("quiz.orchestrator")


# ------------------------------------------------------------
# Collaborator contracts
# ------------------------------------------------------------
class QuestionGenerator(Protocol):
    async def generate(
        self, difficulty: str, topic: str, count: int, visual_mode: bool
    ) -> List[Dict[str, Any]]: ...


class ImageGenerator(Protocol):
    async def render(self, prompt: str) -> bytes: ...


class HintGenerator(Protocol):
    async def generate(self, question_text: str) -> str: ...


class ExplanationGenerator(Protocol):
    async def generate(self, question_text: str, correct_text: str, user_text: str) -> str: ...


def _require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field}' is required")
    return value.strip()


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


async def _call_upstream(what: str, coro):
    """Await a generator call; any failure becomes UpstreamGenerationError."""
    try:
        return await coro
    except QuizError:
        raise
    except Exception as e:
        logger.error(f"{what} failed: {e}", exc_info=True)
        raise UpstreamGenerationError(f"Failed to generate {what}. Please try again.") from e


def _require_generated_text(what: str, text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise UpstreamGenerationError(f"Generator returned an empty {what}", reason="empty")
    return text.strip()


# ------------------------------------------------------------
# Orchestrator
# ------------------------------------------------------------
class QuizOrchestrator:
    """
    Quiz session lifecycle: start, serve questions one at a time, score
    answers, hand out hints, and finalize results onto the leaderboard.

    Stores are injected so the same instances live for the whole process;
    generators are opaque collaborators and are never called while a
    session lock is held.
    """

    def __init__(
        self,
        question_generator: QuestionGenerator,
        image_generator: ImageGenerator,
        hint_generator: HintGenerator,
        explanation_generator: ExplanationGenerator,
        sessions: Optional[SessionStore] = None,
        leaderboard: Optional[Leaderboard] = None,
        question_count: int = 5,
        option_count: int = 4,
        visual_image_count: int = 2,
    ):
        self.question_generator = question_generator
        self.image_generator = image_generator
        self.hint_generator = hint_generator
        self.explanation_generator = explanation_generator
        self.sessions = sessions if sessions is not None else SessionStore()
        self.board = leaderboard if leaderboard is not None else Leaderboard()
        self.question_count = question_count
        self.option_count = option_count
        self.visual_image_count = visual_image_count

    # ---------------- start ----------------
    async def start(
        self, name: str, difficulty: str, topic: str, visual_mode: bool = False
    ) -> Dict[str, Any]:
        name = _require_text("name", name)
        difficulty = _require_text("difficulty", difficulty)
        topic = _require_text("topic", topic)
        visual_mode = bool(visual_mode)

        raw = await _call_upstream(
            "quiz questions",
            self.question_generator.generate(difficulty, topic, self.question_count, visual_mode),
        )
        drafts = parse_question_drafts(
            raw,
            option_count=self.option_count,
            visual_mode=visual_mode,
            image_count=self.visual_image_count,
        )
        questions = await self._build_questions(drafts)

        session = Session(
            session_id=self.sessions.allocate_id(),
            name=name,
            difficulty=difficulty,
            topic=topic,
            questions=questions,
        )
        self.sessions.put(session)
        logger.info(
            f"Started session={session.session_id} for name={name!r} "
            f"topic={topic!r} difficulty={difficulty!r} visual={visual_mode} "
            f"questions={session.total_questions}"
        )
        return {"session_id": session.session_id, "total_questions": session.total_questions}

    async def _build_questions(self, drafts: Sequence[QuestionDraft]) -> List[Question]:
        async def complete(draft: QuestionDraft) -> Question:
            image = None
            if draft.image_prompt:
                image = await self.image_generator.render(draft.image_prompt)
                if not isinstance(image, (bytes, bytearray)) or not image:
                    raise UpstreamGenerationError(
                        "Image generator returned no image data", reason="empty"
                    )
                image = bytes(image)
            return Question(
                text=draft.question,
                options=tuple(draft.options),
                correct_answer_index=draft.correct_answer_index,
                image=image,
            )

        tasks = [asyncio.ensure_future(complete(d)) for d in drafts]
        try:
            return list(await _call_upstream("quiz images", asyncio.gather(*tasks)))
        except BaseException:
            # one render failed: stop the rest so they don't keep spending quota
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    # ---------------- lookup ----------------
    def _session(self, session_id: str) -> Session:
        session = self.sessions.get(session_id) if isinstance(session_id, str) else None
        if session is None:
            raise NotFoundError("Session not found")
        return session

    # ---------------- next question ----------------
    async def next_question(self, session_id: str) -> Union[Dict[str, Any], _Exhausted]:
        self._session(session_id)
        async with self.sessions.lock_for(session_id):
            # re-read: the session may have ended while we waited
            session = self._session(session_id)
            session.touch()
            if session.exhausted:
                return EXHAUSTED
            return session.questions[session.index].view(session.index)

    # ---------------- submit answer ----------------
    async def submit_answer(
        self, session_id: str, question_index: int, answer_index: int
    ) -> Dict[str, Any]:
        self._session(session_id)
        async with self.sessions.lock_for(session_id):
            session = self._session(session_id)
            session.touch()

            question = session.question_at(question_index)
            if question is None:
                raise InvalidIndexError(f"Invalid question index: {question_index}")
            if question_index != session.index:
                raise InvalidIndexError(
                    f"Question {question_index} is not the current question "
                    f"(current is {session.index})"
                )
            if not _is_index(answer_index) or not 0 <= answer_index < len(question.options):
                raise ValidationError(f"Invalid answer index: {answer_index}")

            correct = question.record_answer(answer_index)
            if correct:
                session.score += 1
            session.index += 1

            logger.debug(
                f"Answer session={session_id} q={question_index} "
                f"answer={answer_index} correct={correct} score={session.score}"
            )
            return {"correct": correct, "score": session.score}

    # ---------------- hint ----------------
    async def get_hint(self, session_id: str, question_index: int) -> Dict[str, str]:
        session = self._session(session_id)
        question = session.question_at(question_index)
        if question is None:
            raise NotFoundError("Question not found")
        session.touch()
        question_text = question.text

        hint = await _call_upstream("a hint", self.hint_generator.generate(question_text))
        return {"hint": _require_generated_text("hint", hint)}

    # ---------------- end ----------------
    async def end(self, session_id: str) -> Dict[str, Any]:
        self._session(session_id)
        async with self.sessions.lock_for(session_id):
            session = self._session(session_id)
            result = session.result()
            self.sessions.remove(session_id)
            self.board.insert(LeaderboardEntry(name=session.name, score=session.score))

        logger.info(
            f"Ended session={session_id} name={session.name!r} "
            f"score={session.score}/{session.total_questions}"
        )
        return result

    # ---------------- explain mistake ----------------
    async def explain_mistake(
        self,
        question: Optional[str],
        options: Optional[Sequence[str]],
        correct_answer_index: Optional[int],
        user_answer_index: Optional[int],
    ) -> Dict[str, str]:
        if question is None or options is None or correct_answer_index is None or user_answer_index is None:
            raise MissingDataError("Missing required question data for explanation.")
        question = _require_text("question", question)
        options = list(options)
        for field, idx in (
            ("correctAnswerIndex", correct_answer_index),
            ("userAnswerIndex", user_answer_index),
        ):
            if not _is_index(idx) or not 0 <= idx < len(options):
                raise ValidationError(f"'{field}' does not address an option")

        explanation = await _call_upstream(
            "an explanation",
            self.explanation_generator.generate(
                question, options[correct_answer_index], options[user_answer_index]
            ),
        )
        return {"explanation": _require_generated_text("explanation", explanation)}

    # ---------------- leaderboard ----------------
    def leaderboard(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.board.entries()]

    def reset(self) -> None:
        self.sessions.clear()
        self.board.clear()
        logger.info("Quiz state reset")
