from __future__ import annotations

import json
import sqlite3
from pathlib import Path

from .errors import DuplicateSubmissionError
from .types import CorrectAnswer, Question, Quiz, Submission


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    _init_db(conn)
    return conn


def _init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS quizzes (
            quiz_id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            created_at TEXT NOT NULL,
            deadline TEXT,
            status TEXT NOT NULL,
            questions_json TEXT NOT NULL,
            correct_answers_json TEXT,
            completed_at TEXT
        );

        CREATE TABLE IF NOT EXISTS submissions (
            submission_id TEXT PRIMARY KEY,
            quiz_id TEXT NOT NULL,
            user_id TEXT NOT NULL,
            user_name TEXT NOT NULL,
            answers_json TEXT NOT NULL,
            submitted_at TEXT NOT NULL,
            score INTEGER,
            UNIQUE (quiz_id, user_id)
        );

        CREATE INDEX IF NOT EXISTS submissions_by_quiz ON submissions (quiz_id);
        """
    )
    conn.commit()


def upsert_quiz(conn: sqlite3.Connection, quiz: Quiz) -> None:
    conn.execute(
        """
        INSERT INTO quizzes
        (quiz_id, title, created_at, deadline, status, questions_json, correct_answers_json, completed_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(quiz_id) DO UPDATE SET
            title=excluded.title,
            deadline=excluded.deadline,
            questions_json=excluded.questions_json
        """,
        (
            quiz.id,
            quiz.title,
            quiz.created_at,
            quiz.deadline,
            quiz.status,
            json.dumps([q.to_dict() for q in quiz.questions], ensure_ascii=False),
            json.dumps(quiz.correct_answers, ensure_ascii=False)
            if quiz.correct_answers is not None
            else None,
            quiz.completed_at,
        ),
    )
    conn.commit()


def _quiz_from_row(row: sqlite3.Row) -> Quiz:
    correct = row["correct_answers_json"]
    return Quiz(
        id=row["quiz_id"],
        title=row["title"],
        created_at=row["created_at"],
        deadline=row["deadline"],
        status=row["status"],
        questions=[Question.from_dict(q) for q in json.loads(row["questions_json"])],
        correct_answers=json.loads(correct) if correct else None,
        completed_at=row["completed_at"],
    )


def fetch_quiz(conn: sqlite3.Connection, quiz_id: str) -> Quiz | None:
    row = conn.execute("SELECT * FROM quizzes WHERE quiz_id = ?", (quiz_id,)).fetchone()
    if not row:
        return None
    return _quiz_from_row(row)


def fetch_quizzes(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute(
        """
        SELECT quiz_id, title, created_at, deadline, status, completed_at
        FROM quizzes
        ORDER BY created_at DESC, quiz_id DESC
        """
    ).fetchall()
    return [dict(row) for row in rows]


def complete_quiz_record(
    conn: sqlite3.Connection,
    quiz_id: str,
    correct_answers: dict[str, CorrectAnswer],
    completed_at: str,
) -> None:
    """Write status, correct answers and completion time in one statement."""
    conn.execute(
        """
        UPDATE quizzes
        SET status = 'completed', correct_answers_json = ?, completed_at = ?
        WHERE quiz_id = ?
        """,
        (json.dumps(correct_answers, ensure_ascii=False), completed_at, quiz_id),
    )
    conn.commit()


def update_quiz_status(conn: sqlite3.Connection, quiz_id: str, status: str) -> None:
    conn.execute("UPDATE quizzes SET status = ? WHERE quiz_id = ?", (status, quiz_id))
    conn.commit()


def insert_submission(conn: sqlite3.Connection, submission: Submission) -> None:
    try:
        conn.execute(
            """
            INSERT INTO submissions
            (submission_id, quiz_id, user_id, user_name, answers_json, submitted_at, score)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                submission.id,
                submission.quiz_id,
                submission.user_id,
                submission.user_name,
                json.dumps(submission.answers, ensure_ascii=False),
                submission.submitted_at,
                submission.score,
            ),
        )
    except sqlite3.IntegrityError as e:
        conn.rollback()
        raise DuplicateSubmissionError(
            f"User {submission.user_id} already submitted answers for quiz {submission.quiz_id}"
        ) from e
    conn.commit()


def fetch_submissions(conn: sqlite3.Connection, quiz_id: str) -> list[Submission]:
    rows = conn.execute(
        """
        SELECT submission_id, quiz_id, user_id, user_name, answers_json, submitted_at, score
        FROM submissions
        WHERE quiz_id = ?
        ORDER BY submitted_at ASC, submission_id ASC
        """,
        (quiz_id,),
    ).fetchall()
    return [
        Submission(
            id=row["submission_id"],
            quiz_id=row["quiz_id"],
            user_id=row["user_id"],
            user_name=row["user_name"],
            answers=json.loads(row["answers_json"]),
            submitted_at=row["submitted_at"],
            score=row["score"],
        )
        for row in rows
    ]


def update_submission_score(conn: sqlite3.Connection, submission_id: str, score: int) -> None:
    conn.execute(
        "UPDATE submissions SET score = ? WHERE submission_id = ?", (score, submission_id)
    )
    conn.commit()
