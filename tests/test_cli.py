import sys
from pathlib import Path

import pytest
import typer
import yaml

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from bracket_anything.cli.main import quiz_complete, quiz_import, quiz_validate
from bracket_anything.core.sqlite_store import connect, fetch_quiz, fetch_submissions, insert_submission
from bracket_anything.core.types import Submission


def test_cli_mock_validate_import_and_complete(tmp_path, monkeypatch):
    quiz = {
        "id": "mock-quiz",
        "title": "Mock Quiz",
        "questions": [
            {"id": "Q1", "type": "multiple", "text": "Who won?", "points": 3, "options": ["A", "B"]},
            {"id": "Q2", "type": "open", "text": "Final score?", "points": 2},
        ],
    }
    quiz_path = tmp_path / "quiz.yaml"
    quiz_path.write_text(yaml.safe_dump(quiz), encoding="utf-8")

    runtime_dir = tmp_path / "runtime-data"
    monkeypatch.setenv("BRACKET_RUNTIME_DIR", str(runtime_dir))
    monkeypatch.setenv("BRACKET_ENV", "mock")
    monkeypatch.chdir(tmp_path)

    answers_path = tmp_path / "answers.yaml"
    quiz_validate(quiz_path, source="ai", event_id=None, page_title=None, output=answers_path)
    suggested = yaml.safe_load(answers_path.read_text(encoding="utf-8"))
    assert suggested == {"answers": {"Q1": "A", "Q2": ""}}
    assert (runtime_dir / "logs" / "bracket.log").exists()

    quiz_import(quiz_path)
    db_path = runtime_dir / "db" / "bracket.sqlite3"
    conn = connect(db_path)
    insert_submission(
        conn,
        Submission(
            id="s1",
            quiz_id="mock-quiz",
            user_id="u1",
            user_name="Ann",
            answers={"Q1": "A", "Q2": "3-1"},
            submitted_at="2024-01-01T00:00:00",
        ),
    )
    conn.close()

    answers_path.write_text(yaml.safe_dump({"answers": {"Q1": "A", "Q2": "2-1"}}), encoding="utf-8")
    quiz_complete("mock-quiz", answers_path)

    conn = connect(db_path)
    assert fetch_quiz(conn, "mock-quiz").status == "completed"
    assert [s.score for s in fetch_submissions(conn, "mock-quiz")] == [3]
    conn.close()


def _write_quiz(tmp_path, questions):
    quiz_path = tmp_path / "quiz.yaml"
    quiz_path.write_text(yaml.safe_dump({"id": "qz", "title": "Q", "questions": questions}), encoding="utf-8")
    return quiz_path


def test_cli_complete_with_non_text_answer_leaves_quiz_open(tmp_path, monkeypatch):
    runtime_dir = tmp_path / "runtime-data"
    monkeypatch.setenv("BRACKET_RUNTIME_DIR", str(runtime_dir))
    quiz_import(_write_quiz(tmp_path, [{"id": "m", "type": "open", "text": "Goals?", "points": 1}]))

    conn = connect(runtime_dir / "db" / "bracket.sqlite3")
    insert_submission(
        conn,
        Submission(id="s1", quiz_id="qz", user_id="u1", user_name="Ann",
                   answers={"m": "5"}, submitted_at="2024-01-01T00:00:00"),
    )
    conn.close()

    answers_path = tmp_path / "answers.yaml"
    answers_path.write_text("answers:\n  m: 5\n", encoding="utf-8")
    with pytest.raises(typer.Exit):
        quiz_complete("qz", answers_path)

    conn = connect(runtime_dir / "db" / "bracket.sqlite3")
    assert fetch_quiz(conn, "qz").status == "in-progress"
    conn.close()

    answers_path.write_text("answers:\n  m: '5'\n", encoding="utf-8")
    quiz_complete("qz", answers_path)
    conn = connect(runtime_dir / "db" / "bracket.sqlite3")
    assert [s.score for s in fetch_submissions(conn, "qz")] == [1]
    conn.close()


def test_cli_import_rejects_multiple_choice_without_options(tmp_path, monkeypatch):
    runtime_dir = tmp_path / "runtime-data"
    monkeypatch.setenv("BRACKET_RUNTIME_DIR", str(runtime_dir))
    quiz_path = _write_quiz(tmp_path, [{"id": "m", "type": "multiple", "text": "Who?", "points": 1}])

    with pytest.raises(typer.Exit):
        quiz_import(quiz_path)

    conn = connect(runtime_dir / "db" / "bracket.sqlite3")
    assert fetch_quiz(conn, "qz") is None
    conn.close()
