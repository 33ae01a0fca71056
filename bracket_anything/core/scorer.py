from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from pydantic import TypeAdapter, ValidationError

from .errors import InvalidInputError, QuizNotFoundError, QuizStateError
from .sqlite_store import (
    complete_quiz_record,
    fetch_quiz,
    fetch_submissions,
    update_submission_score,
)
from .types import CorrectAnswer, LeaderboardEntry, Question, Quiz, ScoringReport, Submission

logger = logging.getLogger(__name__)

CorrectAnswers = TypeAdapter(dict[str, CorrectAnswer])


def is_correct(submitted: str, correct: CorrectAnswer) -> bool:
    """Trimmed, case-sensitive exact match against one answer or any of several."""
    answer = submitted.strip()
    if isinstance(correct, str):
        return answer == correct.strip()
    if not isinstance(correct, list):
        return False
    return any(isinstance(c, str) and answer == c.strip() for c in correct)


def check_correct_answers(correct_answers: object) -> dict[str, CorrectAnswer]:
    try:
        return CorrectAnswers.validate_python(correct_answers, strict=True)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidInputError(f"Invalid correct answers at {location}: {first['msg']}") from e


def score_submission(
    questions: Iterable[Question],
    correct_answers: Mapping[str, CorrectAnswer],
    answers: Mapping[str, str],
) -> int:
    score = 0
    for question in questions:
        submitted = answers.get(question.id)
        correct = correct_answers.get(question.id)
        if submitted is None or correct is None:
            continue
        if is_correct(submitted, correct):
            score += question.points
    return score


def score_quiz_submissions(
    conn: sqlite3.Connection, quiz: Quiz, correct_answers: Mapping[str, CorrectAnswer]
) -> ScoringReport:
    report = ScoringReport(quiz_id=quiz.id)
    for submission in fetch_submissions(conn, quiz.id):
        score = score_submission(quiz.questions, correct_answers, submission.answers)
        try:
            update_submission_score(conn, submission.id, score)
        except sqlite3.Error as e:
            logger.warning("Could not store score for submission %s: %s", submission.id, e)
            report.failures[submission.id] = str(e)
            continue
        report.scores[submission.id] = score
    logger.info(
        "Scored %d submissions for quiz %s (%d failed)",
        len(report.scores),
        quiz.id,
        len(report.failures),
    )
    return report


def complete_quiz(
    conn: sqlite3.Connection,
    quiz_id: str,
    correct_answers: dict[str, CorrectAnswer],
    completed_at: str | None = None,
) -> ScoringReport:
    correct_answers = check_correct_answers(correct_answers)
    quiz = fetch_quiz(conn, quiz_id)
    if quiz is None:
        raise QuizNotFoundError(f"Quiz {quiz_id} not found")
    if quiz.status == "completed":
        raise QuizStateError(f"Quiz {quiz_id} is already completed")

    completed_at = completed_at or datetime.now(timezone.utc).isoformat()
    complete_quiz_record(conn, quiz_id, correct_answers, completed_at)
    quiz.status = "completed"
    quiz.correct_answers = correct_answers
    quiz.completed_at = completed_at
    return score_quiz_submissions(conn, quiz, correct_answers)


def build_leaderboard(quiz: Quiz, submissions: Iterable[Submission]) -> list[LeaderboardEntry]:
    """Highest score first, earlier submission first on ties; unscored entries last."""
    ordered = sorted(
        submissions,
        key=lambda s: (s.score is None, -(s.score or 0), s.submitted_at),
    )
    total_points = quiz.total_points
    entries: list[LeaderboardEntry] = []
    for position, submission in enumerate(ordered, start=1):
        rank = position
        if entries and entries[-1].score is not None and entries[-1].score == submission.score:
            rank = entries[-1].rank
        entries.append(
            LeaderboardEntry(
                rank=rank,
                submission_id=submission.id,
                user_id=submission.user_id,
                user_name=submission.user_name,
                score=submission.score,
                total_points=total_points,
                submitted_at=submission.submitted_at,
            )
        )
    return entries
