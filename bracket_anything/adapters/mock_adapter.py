from __future__ import annotations

import json
import re
import time
from typing import Union

from .base import ChatResponse

_QUESTION_LINE = re.compile(r"^\d+\. \[ID: (?P<id>[^\]]+)\]")
_OPTIONS_LINE = re.compile(r"^\s+Options: (?P<options>.+)$")


class MockAdapter:
    """Adapter that answers every question in the prompt with canned data.

    Multiple-choice questions get their first option, open questions an empty
    answer. Pass ``text`` to return a fixed response instead.
    """

    def __init__(self, model: str = "mock", text: Union[str, None] = None) -> None:
        self.id = f"mock:{model}"
        self.text = text
        self.calls: list[list[dict[str, str]]] = []

    async def send(
        self,
        messages: list[dict[str, str]],
        system: Union[str, None] = None,
        params: Union[dict, None] = None,
    ) -> ChatResponse:
        start = time.perf_counter()
        self.calls.append(messages)
        text = self.text if self.text is not None else self._canned_answers(messages)
        latency_ms = int((time.perf_counter() - start) * 1000)
        return ChatResponse(text=text, tokens_in=0, tokens_out=0, latency_ms=latency_ms)

    def _canned_answers(self, messages: list[dict[str, str]]) -> str:
        prompt = messages[-1]["content"] if messages else ""
        answers: list[dict] = []
        for line in prompt.splitlines():
            question = _QUESTION_LINE.match(line)
            if question:
                answers.append(
                    {
                        "questionId": question.group("id"),
                        "answer": "",
                        "confidence": 0.0,
                        "reason": "Mock response.",
                    }
                )
                continue
            options = _OPTIONS_LINE.match(line)
            if options and answers:
                answers[-1]["answer"] = options.group("options").split(" | ")[0]
                answers[-1]["confidence"] = 0.5
        return "Mock research complete.\n" + json.dumps({"answers": answers})

    async def aclose(self) -> None:
        return None
