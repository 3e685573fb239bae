import logging
import time
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, model_validator

from quizloop.application.progress_service import ProgressService
from quizloop.application.selection import shuffle_options
from quizloop.consts import VERSION
from quizloop.domain.errors import QuestionBankError, UnknownQuestionError
from quizloop.domain.modes import MODES

logger = logging.getLogger("quizloop.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    from quizloop.application.config import resolve_config
    from quizloop.application.factory import build_progress_service
    from quizloop.application.logging_setup import setup_logging

    config = resolve_config()
    setup_logging(config)
    logger.info(f"quizloop server v{VERSION} starting up...")
    try:
        app.state.service = build_progress_service(config).open()
    except QuestionBankError as e:
        logger.error(f"Question bank unusable, serving without one: {e}")
        app.state.service = None
    yield
    # Shutdown
    if app.state.service is not None:
        app.state.service.close()
    logger.info("quizloop server shutting down...")


app = FastAPI(
    title="quizloop server",
    description="HTTP surface for adaptive quiz sessions.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


def get_service(request: Request) -> ProgressService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="No question bank loaded")
    return service


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


class SummaryResponse(BaseModel):
    total_questions: int
    studied: int
    mastered: int
    needs_practice: int
    accuracy: int
    current_streak: int
    best_streak: int
    total_correct: int
    total_incorrect: int
    weak_spot_available: bool


@app.get("/stats", response_model=SummaryResponse)
def get_stats(service: ProgressService = Depends(get_service)):
    return SummaryResponse(**service.summary().to_dict())


class ModeResponse(BaseModel):
    id: str
    name: str
    description: str
    selection: str
    answer_style: str
    timed: bool
    arcade: bool
    enabled: bool


@app.get("/modes", response_model=list[ModeResponse])
def list_modes(service: ProgressService = Depends(get_service)):
    """All modes; weakSpot is disabled while nothing is in the hard tier."""
    has_weak = service.needs_practice_count() > 0
    return [
        ModeResponse(
            id=m.id,
            name=m.name,
            description=m.description,
            selection=m.selection,
            answer_style=m.answer_style,
            timed=m.timed,
            arcade=m.arcade,
            enabled=has_weak or m.selection != "weakSpot",
        )
        for m in MODES.values()
    ]


class SelectRequest(BaseModel):
    mode: Literal["all", "weakSpot"] = "all"
    count: int | None = None  # None = whole eligible pool
    exclude: list[int | str] = []


class QuestionResponse(BaseModel):
    id: int | str
    question: str
    hint: str
    options: list[str]


@app.post("/select", response_model=list[QuestionResponse])
def select_questions(req: SelectRequest, service: ProgressService = Depends(get_service)):
    """
    Ordered questions for a session. Options are shuffled per response; the
    correct answer is not included, grade through /answer.
    """
    count = req.count if req.count is not None else len(service.bank)
    picked = service.select(count, req.mode, exclude=req.exclude)
    logger.debug(f"/select mode={req.mode} count={count} -> {len(picked)}")
    return [
        QuestionResponse(
            id=q.id,
            question=q.question,
            hint=q.hint,
            options=shuffle_options(q, service.rng),
        )
        for q in picked
    ]


class AnswerRequest(BaseModel):
    question_id: int | str
    # Exactly one of: the chosen option text, or a self-grade
    answer: str | None = None
    correct: bool | None = None

    @model_validator(mode="after")
    def one_of_answer_or_correct(self) -> "AnswerRequest":
        if (self.answer is None) == (self.correct is None):
            raise ValueError("provide exactly one of 'answer' or 'correct'")
        return self


class AnswerResponse(BaseModel):
    question_id: int | str
    was_correct: bool
    correct_answer: str
    explanation: str
    difficulty: str
    correct_count: int
    incorrect_count: int
    current_streak: int
    best_streak: int
    saved: bool


@app.post("/answer", response_model=AnswerResponse)
def record_answer(req: AnswerRequest, service: ProgressService = Depends(get_service)):
    try:
        question = service.get_question(req.question_id)
        was_correct = req.correct if req.correct is not None else question.is_correct(req.answer)
        outcome = service.record_answer(req.question_id, was_correct)
    except UnknownQuestionError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None

    return AnswerResponse(
        question_id=outcome.question_id,
        was_correct=outcome.was_correct,
        correct_answer=outcome.correct_answer,
        explanation=outcome.explanation,
        difficulty=outcome.entry.difficulty.value,
        correct_count=outcome.entry.correct_count,
        incorrect_count=outcome.entry.incorrect_count,
        current_streak=outcome.current_streak,
        best_streak=outcome.best_streak,
        saved=outcome.saved,
    )


@app.post("/reset", response_model=SummaryResponse)
def reset_progress(service: ProgressService = Depends(get_service)):
    logger.info("Reset requested via API")
    service.reset()
    return SummaryResponse(**service.summary().to_dict())
