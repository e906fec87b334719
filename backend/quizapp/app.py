# backend/quizapp/app.py

import asyncio
import contextlib
import logging
from typing import List, Union

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from quizapp.config import Settings
from quizapp.core.errors import QuizError
from quizapp.core.models import EXHAUSTED
from quizapp.core.openai_qg import OpenAIImageGenerator, OpenAIQuestionGenerator
from quizapp.core.openai_tutor import OpenAIExplanationGenerator, OpenAIHintGenerator
from quizapp.core.orchestrator import QuizOrchestrator
from quizapp.core.schemas import (
    EndQuizRequest,
    EndQuizResponse,
    ExhaustedResponse,
    ExplainMistakeRequest,
    ExplanationResponse,
    HintRequest,
    HintResponse,
    LeaderboardEntryOut,
    QuestionView,
    StartQuizRequest,
    StartQuizResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)
from quizapp.core.store import Leaderboard, SessionStore

logger = logging.getLogger("quiz")


# ------------------------------------------------------------
# Wiring
# ------------------------------------------------------------
def build_orchestrator(settings: Settings) -> QuizOrchestrator:
    """Create the process-wide stores and the OpenAI-backed collaborators."""
    key = settings.openai_api_key or None
    return QuizOrchestrator(
        question_generator=OpenAIQuestionGenerator(
            api_key=key,
            model_name=settings.text_model,
            option_count=settings.option_count,
            image_count=settings.visual_image_count,
        ),
        image_generator=OpenAIImageGenerator(
            api_key=key, model_name=settings.image_model, size=settings.image_size
        ),
        hint_generator=OpenAIHintGenerator(api_key=key, model_name=settings.text_model),
        explanation_generator=OpenAIExplanationGenerator(api_key=key, model_name=settings.text_model),
        sessions=SessionStore(),
        leaderboard=Leaderboard(settings.leaderboard_size, seed=settings.leaderboard_seed),
        question_count=settings.question_count,
        option_count=settings.option_count,
        visual_image_count=settings.visual_image_count,
    )


async def reap_idle_sessions(store: SessionStore, ttl_seconds: int, interval_seconds: int):
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            store.purge_idle(ttl_seconds)
        except Exception:
            logger.error("Idle-session sweep failed", exc_info=True)


def jsonable_errors(exc: RequestValidationError) -> list:
    # errors() may carry exception objects in "ctx", which JSONResponse can't encode
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


def get_orchestrator(request: Request) -> QuizOrchestrator:
    return request.app.state.orchestrator


# Middleware to log requests
class LogRequestMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            body = await request.body()
            logger.info(
                f"Incoming {request.method} {request.url.path} body={body.decode('utf-8')}"
            )
        except (RuntimeError, UnicodeDecodeError):
            logger.warning("Could not read request body")
        return await call_next(request)


# ------------------------------------------------------------
# App factory
# ------------------------------------------------------------
def create_app(
    settings: Settings | None = None, orchestrator: QuizOrchestrator | None = None
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    orchestrator = orchestrator or build_orchestrator(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        reaper = None
        if settings.session_ttl_seconds > 0:
            reaper = asyncio.create_task(
                reap_idle_sessions(
                    orchestrator.sessions,
                    settings.session_ttl_seconds,
                    settings.reaper_interval_seconds,
                )
            )
            logger.info(f"Idle-session reaper started (ttl={settings.session_ttl_seconds}s)")
        try:
            yield
        finally:
            if reaper is not None:
                reaper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reaper

    app = FastAPI(title="Timed Quiz API", lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LogRequestMiddleware)

    # ------------------------------------------------------------
    # Exception handlers
    # ------------------------------------------------------------
    @app.exception_handler(QuizError)
    async def quiz_exception_handler(request: Request, exc: QuizError):
        if exc.status_code >= 500:
            logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{exc.kind} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error: {exc.errors()} body={exc.body}")
        return JSONResponse(
            status_code=422,
            content={
                "status": "error",
                "kind": "validation_error",
                "message": "Request validation failed",
                "detail": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "kind": "internal_error", "message": str(exc)},
        )

    # ------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------
    @app.post("/startQuiz", response_model=StartQuizResponse)
    async def start_quiz(req: StartQuizRequest, quiz: QuizOrchestrator = Depends(get_orchestrator)):
        return await quiz.start(req.name, req.difficulty, req.topic, req.visual)

    @app.get("/getQuestion", response_model=Union[QuestionView, ExhaustedResponse])
    async def get_question(
        session_id: str = Query(..., alias="sessionId"),
        quiz: QuizOrchestrator = Depends(get_orchestrator),
    ):
        view = await quiz.next_question(session_id)
        if view is EXHAUSTED:
            return ExhaustedResponse()
        return QuestionView(**view)

    @app.post("/submitAnswer", response_model=SubmitAnswerResponse)
    async def submit_answer(req: SubmitAnswerRequest, quiz: QuizOrchestrator = Depends(get_orchestrator)):
        return await quiz.submit_answer(req.session_id, req.question_index, req.answer_index)

    @app.post("/getHint", response_model=HintResponse)
    async def get_hint(req: HintRequest, quiz: QuizOrchestrator = Depends(get_orchestrator)):
        return await quiz.get_hint(req.session_id, req.question_index)

    @app.post("/endQuiz", response_model=EndQuizResponse)
    async def end_quiz(req: EndQuizRequest, quiz: QuizOrchestrator = Depends(get_orchestrator)):
        return await quiz.end(req.session_id)

    @app.post("/explainMistake", response_model=ExplanationResponse)
    async def explain_mistake(req: ExplainMistakeRequest, quiz: QuizOrchestrator = Depends(get_orchestrator)):
        return await quiz.explain_mistake(
            req.question, req.options, req.correct_answer_index, req.user_answer_index
        )

    @app.get("/getLeaderboard", response_model=List[LeaderboardEntryOut])
    def get_leaderboard(quiz: QuizOrchestrator = Depends(get_orchestrator)):
        return quiz.leaderboard()

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()
