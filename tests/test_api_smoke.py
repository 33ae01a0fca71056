import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from conftest import FakeSports

from bracket_anything.api.app import app, get_context

QUESTIONS = [
    {"id": "q1", "type": "multiple", "text": "Who won the game?", "points": 10,
     "options": ["Los Angeles Lakers", "Boston Celtics"]},
    {"id": "q2", "type": "open", "text": "What was the final score?", "points": 5},
]


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("BRACKET_RUNTIME_DIR", str(tmp_path / "runtime-data"))
    monkeypatch.delenv("BRACKET_ENV", raising=False)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def fake_client(client, fake_context):
    app.dependency_overrides[get_context] = lambda: fake_context
    return client


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_search_requires_query(client):
    resp = client.post("/api/auto-complete/search", json={"query": "", "category": "sports"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_search_rejects_unknown_category(client):
    resp = client.post("/api/auto-complete/search", json={"query": "Lakers", "category": "chess"})
    assert resp.status_code == 400


def test_search_wikipedia_category(fake_client):
    resp = fake_client.post("/api/auto-complete/search", json={"query": "Oscars", "category": "awards"})
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results[0]["source"] == "wikipedia"
    assert results[0]["category"] == "awards"
    assert "date" not in results[0]


def test_validate_sports_event(fake_client):
    resp = fake_client.post(
        "/api/auto-complete/validate",
        json={"eventId": "1001", "category": "sports", "questions": QUESTIONS, "source": "thesportsdb"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "TheSportsDB"
    assert [m["questionId"] for m in data["matches"]] == ["q1", "q2"]
    assert data["matches"][0]["suggestedAnswer"] == "Los Angeles Lakers"
    assert data["matches"][0]["alternatives"] == ["Boston Celtics"]
    assert data["matches"][1]["suggestedAnswer"] == "100-95"
    assert data["unmatchedQuestions"] == []


def test_validate_missing_fields(client):
    resp = client.post("/api/auto-complete/validate", json={"eventId": "1001", "category": "sports"})
    assert resp.status_code == 400


def test_validate_upstream_failure_is_500(fake_client, fake_context):
    fake_context.sports = FakeSports(events=[])
    resp = fake_client.post(
        "/api/auto-complete/validate",
        json={"eventId": "999", "category": "sports", "questions": QUESTIONS, "source": "thesportsdb"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Event not found"}


def test_ai_without_api_key_is_503(client, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    resp = client.post("/api/auto-complete/ai", json={"quizTitle": "NBA", "questions": QUESTIONS})
    assert resp.status_code == 503
    assert resp.json() == {"error": "AI service not configured. Please contact support."}


def test_ai_with_mock_adapter(client, monkeypatch):
    monkeypatch.setenv("BRACKET_ENV", "mock")
    resp = client.post("/api/auto-complete/ai", json={"quizTitle": "NBA", "questions": QUESTIONS})
    assert resp.status_code == 200
    data = resp.json()
    assert data["source"] == "Claude AI"
    assert data["eventTitle"] == "NBA"
    assert data["unmatchedQuestions"] == ["q2"]


def test_quiz_lifecycle(client):
    resp = client.post("/api/quizzes", json={"id": "nba", "title": "NBA Night", "questions": QUESTIONS})
    assert resp.status_code == 200
    assert resp.json()["quiz"]["status"] == "in-progress"

    assert client.post("/api/quizzes", json={"id": "nba", "title": "Again", "questions": QUESTIONS}).status_code == 409

    ann = {"userId": "ann", "userName": "Ann", "answers": {"q1": "Los Angeles Lakers", "q2": "100-95"}}
    bob = {"userId": "bob", "userName": "Bob", "answers": {"q1": "Boston Celtics", "q2": "100-95"}}
    assert client.post("/api/quizzes/nba/submissions", json=ann).status_code == 200
    assert client.post("/api/quizzes/nba/submissions", json=bob).status_code == 200
    assert client.post("/api/quizzes/nba/submissions", json=ann).status_code == 409

    resp = client.post(
        "/api/admin/quiz-complete",
        json={"quizId": "nba", "answers": {"q1": "Los Angeles Lakers", "q2": ["100-95", "100 - 95"]}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert sorted(body["scores"].values()) == [5, 15]

    board = client.get("/api/quizzes/nba/leaderboard").json()
    assert board["status"] == "completed"
    assert [(e["userName"], e["score"], e["rank"]) for e in board["entries"]] == [
        ("Ann", 15, 1),
        ("Bob", 5, 2),
    ]

    late = {"userId": "cat", "userName": "Cat", "answers": {"q1": "Boston Celtics"}}
    assert client.post("/api/quizzes/nba/submissions", json=late).status_code == 409
    assert client.post("/api/admin/quiz-complete", json={"quizId": "nba", "answers": {}}).status_code == 409


def test_quiz_status_reopen(client):
    client.post("/api/quizzes", json={"id": "tv", "title": "TV", "questions": QUESTIONS})
    client.post("/api/admin/quiz-complete", json={"quizId": "tv", "answers": {"q1": "Boston Celtics"}})
    resp = client.patch("/api/admin/quiz-status", json={"quizId": "tv", "newStatus": "in-progress"})
    assert resp.status_code == 200
    assert client.get("/api/quizzes/tv").json()["quiz"]["status"] == "in-progress"


def test_unknown_quiz(client):
    resp = client.get("/api/quizzes/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Quiz not found"}
    resp = client.post("/api/admin/quiz-complete", json={"quizId": "nope", "answers": {}})
    assert resp.status_code == 404


def test_quiz_status_cannot_complete_without_answers(client):
    client.post("/api/quizzes", json={"id": "st", "title": "Status", "questions": QUESTIONS})
    ann = {"userId": "ann", "userName": "Ann", "answers": {"q1": "Boston Celtics"}}
    client.post("/api/quizzes/st/submissions", json=ann)

    resp = client.patch("/api/admin/quiz-status", json={"quizId": "st", "newStatus": "completed"})
    assert resp.status_code == 400
    assert "quiz-complete" in resp.json()["error"]
    assert client.get("/api/quizzes/st").json()["quiz"]["status"] == "in-progress"

    resp = client.post("/api/admin/quiz-complete", json={"quizId": "st", "answers": {"q1": "Boston Celtics"}})
    assert resp.status_code == 200
    board = client.get("/api/quizzes/st/leaderboard").json()
    assert [e["score"] for e in board["entries"]] == [10]


@pytest.mark.parametrize(
    "question",
    [
        {"id": "m", "type": "multiple", "text": "Who won?", "points": 1},
        {"id": "m", "type": "multiple", "text": "Who won?", "points": 1, "options": ["Only one"]},
        {"id": "o", "type": "open", "text": "Score?", "points": 1, "options": ["1-0", "2-0"]},
    ],
)
def test_create_quiz_rejects_bad_question_shape(client, question):
    resp = client.post("/api/quizzes", json={"id": "bad", "title": "Bad", "questions": [question]})
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert client.get("/api/quizzes/bad").status_code == 404
