from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.context import ServiceContext, build_context
from ..core.errors import (
    AIConfigurationError,
    BracketError,
    InvalidInputError,
    QuizNotFoundError,
    QuizStateError,
)
from ..core.orchestrator import search_events, validate_event, validate_with_ai
from ..core.runtime_data import get_runtime_paths
from ..core.scorer import build_leaderboard, complete_quiz
from ..core.sqlite_store import (
    connect,
    fetch_quiz,
    fetch_quizzes,
    fetch_submissions,
    insert_submission,
    update_quiz_status,
    upsert_quiz,
)
from ..core.types import Question, Quiz, Submission, check_question_shape

logger = logging.getLogger(__name__)

app = FastAPI(title="Bracket Anything")

Category = Literal["sports", "awards", "tv"]


class QuestionIn(BaseModel):
    id: str = Field(min_length=1)
    type: Literal["multiple", "open"]
    text: str
    points: int = Field(ge=0)
    options: list[str] | None = None

    @model_validator(mode="after")
    def _check_options(self) -> "QuestionIn":
        check_question_shape(self.type, self.options)
        return self

    def to_question(self) -> Question:
        return Question(
            id=self.id, type=self.type, text=self.text, points=self.points, options=self.options
        )


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    category: Category


class ValidateRequest(BaseModel):
    eventId: str = Field(min_length=1)
    category: Category
    questions: list[QuestionIn]
    source: Literal["thesportsdb", "wikipedia"]
    metadata: dict[str, str] = Field(default_factory=dict)


class AIValidateRequest(BaseModel):
    quizTitle: str = Field(min_length=1)
    questions: list[QuestionIn]


class QuizCreateRequest(BaseModel):
    id: str | None = None
    title: str = Field(min_length=1)
    deadline: str | None = None
    questions: list[QuestionIn] = Field(min_length=1)


class SubmissionRequest(BaseModel):
    userId: str = Field(min_length=1)
    userName: str = Field(min_length=1)
    answers: dict[str, str]


class QuizCompleteRequest(BaseModel):
    quizId: str = Field(min_length=1)
    answers: dict[str, str | list[str]]


class QuizStatusRequest(BaseModel):
    quizId: str = Field(min_length=1)
    newStatus: Literal["in-progress", "completed"]


async def get_context() -> AsyncIterator[ServiceContext]:
    ctx = build_context()
    try:
        yield ctx
    finally:
        await ctx.aclose()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.exception_handler(RequestValidationError)
async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(AIConfigurationError)
async def _ai_not_configured(request: Request, exc: AIConfigurationError) -> JSONResponse:
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.user_message})


@app.exception_handler(BracketError)
async def _bracket_error(request: Request, exc: BracketError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/api/auto-complete/search")
async def search(req: SearchRequest, ctx: ServiceContext = Depends(get_context)) -> dict:
    results = await search_events(ctx, req.query, req.category)
    return {"results": [r.to_dict() for r in results]}


@app.post("/api/auto-complete/validate")
async def validate(req: ValidateRequest, ctx: ServiceContext = Depends(get_context)) -> dict:
    questions = [q.to_question() for q in req.questions]
    result = await validate_event(ctx, req.eventId, questions, req.source, req.metadata)
    return result.to_dict()


@app.post("/api/auto-complete/ai")
async def ai_validate(req: AIValidateRequest, ctx: ServiceContext = Depends(get_context)) -> dict:
    questions = [q.to_question() for q in req.questions]
    result = await validate_with_ai(ctx, req.quizTitle, questions)
    return result.to_dict()


@app.get("/api/quizzes")
def list_quizzes() -> dict:
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    quizzes = fetch_quizzes(conn)
    conn.close()
    return {"quizzes": quizzes}


@app.post("/api/quizzes")
def create_quiz(req: QuizCreateRequest) -> dict:
    ids = [q.id for q in req.questions]
    if len(set(ids)) != len(ids):
        raise HTTPException(status_code=400, detail="Question ids must be unique")
    quiz = Quiz(
        id=req.id or uuid.uuid4().hex,
        title=req.title,
        questions=[q.to_question() for q in req.questions],
        created_at=_now(),
        deadline=req.deadline,
    )
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    existing = fetch_quiz(conn, quiz.id)
    if existing is not None:
        conn.close()
        raise HTTPException(status_code=409, detail="Quiz already exists")
    upsert_quiz(conn, quiz)
    conn.close()
    return {"quiz": quiz.to_dict()}


@app.get("/api/quizzes/{quiz_id}")
def get_quiz(quiz_id: str) -> dict:
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    quiz = fetch_quiz(conn, quiz_id)
    conn.close()
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return {"quiz": quiz.to_dict()}


@app.post("/api/quizzes/{quiz_id}/submissions")
def submit_answers(quiz_id: str, req: SubmissionRequest) -> dict:
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    try:
        quiz = fetch_quiz(conn, quiz_id)
        if quiz is None:
            raise QuizNotFoundError("Quiz not found")
        if quiz.status == "completed":
            raise QuizStateError("Quiz is already completed")
        submission = Submission(
            id=uuid.uuid4().hex,
            quiz_id=quiz_id,
            user_id=req.userId,
            user_name=req.userName,
            answers=dict(req.answers),
            submitted_at=_now(),
        )
        insert_submission(conn, submission)
    finally:
        conn.close()
    return {"submission": submission.to_dict()}


@app.get("/api/quizzes/{quiz_id}/leaderboard")
def leaderboard(quiz_id: str) -> dict:
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    quiz = fetch_quiz(conn, quiz_id)
    if quiz is None:
        conn.close()
        raise HTTPException(status_code=404, detail="Quiz not found")
    entries = build_leaderboard(quiz, fetch_submissions(conn, quiz_id))
    conn.close()
    return {
        "quizId": quiz.id,
        "status": quiz.status,
        "totalPoints": quiz.total_points,
        "entries": [e.to_dict() for e in entries],
    }


@app.post("/api/admin/quiz-complete")
def quiz_complete(req: QuizCompleteRequest) -> dict:
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    try:
        report = complete_quiz(conn, req.quizId, dict(req.answers))
    finally:
        conn.close()
    return {"success": True, **report.to_dict()}


@app.patch("/api/admin/quiz-status")
def quiz_status(req: QuizStatusRequest) -> dict:
    runtime_paths = get_runtime_paths()
    conn = connect(runtime_paths.db_path)
    try:
        if fetch_quiz(conn, req.quizId) is None:
            raise QuizNotFoundError("Quiz not found")
        if req.newStatus == "completed":
            # completion has to go through quiz-complete so submissions get scored
            raise InvalidInputError("Use /api/admin/quiz-complete to complete a quiz")
        update_quiz_status(conn, req.quizId, req.newStatus)
    finally:
        conn.close()
    return {"success": True}
