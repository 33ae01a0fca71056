from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from ..adapters.base import ChatAdapter
from .errors import ResponseParseError
from .matching_config import DEFAULT_POLICY, MatchingPolicy
from .prompt import SYSTEM_PROMPT, render_prompt
from .types import MatchedAnswer, Question
from .utils import extract_answers_json

logger = logging.getLogger(__name__)

RAW_LOG_LIMIT = 500


class AIAnswer(BaseModel):
    questionId: str
    answer: str = ""
    confidence: float = 0.0
    reason: str = ""

    @field_validator("questionId", "answer", "reason", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_confidence(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class AIAnswerPayload(BaseModel):
    answers: list[AIAnswer]


def parse_answers_payload(text: str) -> AIAnswerPayload:
    snippet = extract_answers_json(text)
    if snippet is None:
        logger.error("AI response did not contain answer JSON: %s", text[:RAW_LOG_LIMIT])
        raise ResponseParseError("AI response did not contain expected answer format")
    try:
        data = json.loads(snippet)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse JSON from AI response: %s", snippet[:RAW_LOG_LIMIT])
        raise ResponseParseError("Failed to parse AI response") from e
    try:
        return AIAnswerPayload.model_validate(data)
    except ValidationError as e:
        logger.error("AI response has unexpected shape: %s", snippet[:RAW_LOG_LIMIT])
        raise ResponseParseError("Invalid AI response format") from e


def reconcile_answer(
    question: Question, answer: AIAnswer | None, policy: MatchingPolicy = DEFAULT_POLICY
) -> MatchedAnswer:
    if answer is None:
        return MatchedAnswer(
            question_id=question.id,
            question_text=question.text,
            suggested_answer="",
            confidence=0.0,
            source="AI could not find this question",
        )

    final_answer = answer.answer
    confidence = min(max(answer.confidence, 0.0), 1.0)
    alternatives = None

    if question.is_multiple_choice:
        wanted = answer.answer.lower()
        option = next((o for o in question.options if o.lower() == wanted), None)
        if option is not None:
            final_answer = option
        elif answer.answer and confidence > 0:
            confidence = min(confidence, policy.ai_mismatch_cap)
        alternatives = [o for o in question.options if o != final_answer]

    return MatchedAnswer(
        question_id=question.id,
        question_text=question.text,
        suggested_answer=final_answer,
        confidence=confidence,
        source=f"AI: {answer.reason}" if answer.reason else "AI-generated answer",
        alternatives=alternatives,
    )


def reconcile_answers(
    questions: list[Question], payload: AIAnswerPayload, policy: MatchingPolicy = DEFAULT_POLICY
) -> list[MatchedAnswer]:
    by_id: dict[str, AIAnswer] = {}
    for answer in payload.answers:
        by_id.setdefault(answer.questionId, answer)
    return [reconcile_answer(q, by_id.get(q.id), policy) for q in questions]


async def fetch_ai_answers(
    adapter: ChatAdapter,
    quiz_title: str,
    questions: list[Question],
    policy: MatchingPolicy = DEFAULT_POLICY,
) -> list[MatchedAnswer]:
    prompt = render_prompt(quiz_title, questions)
    messages = [{"role": "user", "content": prompt}]
    resp = await adapter.send(messages, system=SYSTEM_PROMPT)
    logger.info(
        "%s answered %d questions for %r in %sms",
        adapter.id,
        len(questions),
        quiz_title,
        resp.get("latency_ms"),
    )
    payload = parse_answers_payload(resp["text"])
    return reconcile_answers(questions, payload, policy)
