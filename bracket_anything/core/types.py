from dataclasses import dataclass, field
from typing import Union

QUESTION_TYPES = ("multiple", "open")
QUIZ_STATUSES = ("in-progress", "completed")
CATEGORIES = ("sports", "awards", "tv")
EVENT_SOURCES = ("thesportsdb", "wikipedia")

CorrectAnswer = Union[str, list[str]]


def check_question_shape(question_type: str, options: Union[list[str], None]) -> None:
    """Multiple-choice questions carry at least two options, open questions none."""
    if question_type not in QUESTION_TYPES:
        raise ValueError(f"Unknown question type: {question_type}")
    if question_type == "multiple" and len(options or []) < 2:
        raise ValueError("Multiple-choice questions need at least two options")
    if question_type == "open" and options:
        raise ValueError("Open questions take no options")


@dataclass
class Question:
    id: str
    type: str
    text: str
    points: int = 1
    options: Union[list[str], None] = None

    def __post_init__(self) -> None:
        check_question_shape(self.type, self.options)

    @property
    def is_multiple_choice(self) -> bool:
        return self.type == "multiple" and bool(self.options)

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        options = data.get("options")
        return cls(
            id=str(data["id"]),
            type=data.get("type", "open"),
            text=data.get("text", ""),
            points=int(data.get("points", 1)),
            options=list(options) if options is not None else None,
        )

    def to_dict(self) -> dict:
        out: dict = {"id": self.id, "type": self.type, "text": self.text, "points": self.points}
        if self.options is not None:
            out["options"] = list(self.options)
        return out


@dataclass
class Quiz:
    id: str
    title: str
    questions: list[Question]
    created_at: str = ""
    deadline: Union[str, None] = None
    status: str = "in-progress"
    correct_answers: Union[dict[str, CorrectAnswer], None] = None
    completed_at: Union[str, None] = None

    def __post_init__(self) -> None:
        if self.status not in QUIZ_STATUSES:
            raise ValueError(f"Unknown quiz status: {self.status}")

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)

    @classmethod
    def from_dict(cls, data: dict) -> "Quiz":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            questions=[Question.from_dict(q) for q in data.get("questions") or []],
            created_at=data.get("createdAt", ""),
            deadline=data.get("deadline"),
            status=data.get("status", "in-progress"),
            correct_answers=data.get("correctAnswers"),
            completed_at=data.get("completedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "deadline": self.deadline,
            "status": self.status,
            "questions": [q.to_dict() for q in self.questions],
            "correctAnswers": self.correct_answers,
            "completedAt": self.completed_at,
        }


@dataclass
class Submission:
    id: str
    quiz_id: str
    user_id: str
    user_name: str
    answers: dict[str, str]
    submitted_at: str
    score: Union[int, None] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quizId": self.quiz_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "answers": dict(self.answers),
            "submittedAt": self.submitted_at,
            "score": self.score,
        }


@dataclass
class EventSearchResult:
    id: str
    title: str
    category: str
    source: str
    date: Union[str, None] = None
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        out = {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "source": self.source,
            "metadata": dict(self.metadata),
        }
        if self.date:
            out["date"] = self.date
        return out


@dataclass
class FactEntry:
    category: str
    value: str
    is_bold: bool


@dataclass
class MatchedAnswer:
    question_id: str
    question_text: str
    suggested_answer: str
    confidence: float
    source: str
    alternatives: Union[list[str], None] = None
    is_edited: bool = False

    def to_dict(self) -> dict:
        out = {
            "questionId": self.question_id,
            "questionText": self.question_text,
            "suggestedAnswer": self.suggested_answer,
            "confidence": self.confidence,
            "source": self.source,
        }
        if self.alternatives is not None:
            out["alternatives"] = list(self.alternatives)
        if self.is_edited:
            out["isEdited"] = True
        return out


@dataclass
class ValidationResult:
    event_title: str
    source: str
    matches: list[MatchedAnswer]
    overall_confidence: float
    unmatched_questions: list[str]

    def to_dict(self) -> dict:
        return {
            "eventTitle": self.event_title,
            "source": self.source,
            "matches": [m.to_dict() for m in self.matches],
            "overallConfidence": self.overall_confidence,
            "unmatchedQuestions": list(self.unmatched_questions),
        }


@dataclass
class ScoringReport:
    quiz_id: str
    scores: dict[str, int] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"quizId": self.quiz_id, "scores": dict(self.scores), "failures": dict(self.failures)}


@dataclass
class LeaderboardEntry:
    rank: int
    submission_id: str
    user_id: str
    user_name: str
    score: Union[int, None]
    total_points: int
    submitted_at: str

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "submissionId": self.submission_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "score": self.score,
            "totalPoints": self.total_points,
            "submittedAt": self.submitted_at,
        }
