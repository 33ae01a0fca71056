from __future__ import annotations

import os
import time
from typing import Union

import httpx
from ..core.errors import AIConfigurationError, UpstreamError
from .base import ChatResponse, request_with_retries

DEFAULT_MODEL = "claude-sonnet-4-20250514"

WEB_SEARCH_TOOL = {
    "type": "web_search_20250305",
    "name": "web_search",
    "max_uses": 5,
}


class AnthropicAdapter:
    id = "anthropic"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key_env: str = "ANTHROPIC_API_KEY",
        client: Union[httpx.AsyncClient, None] = None,
        attempts: int = 3,
    ) -> None:
        self.model = model
        self.api_key = os.environ.get(api_key_env, "")
        self.attempts = attempts
        self.client = client or httpx.AsyncClient(base_url="https://api.anthropic.com/v1")

    async def send(
        self,
        messages: list[dict[str, str]],
        system: Union[str, None] = None,
        params: Union[dict, None] = None,
    ) -> ChatResponse:
        if not self.api_key:
            raise AIConfigurationError()
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
        }
        payload = {
            "model": self.model,
            "max_tokens": 4000,
            "messages": messages,
            "tools": [WEB_SEARCH_TOOL],
        }
        if system:
            payload["system"] = system
        if params:
            payload.update(params)
        start = time.perf_counter()
        resp = await request_with_retries(
            lambda: self.client.post("/messages", json=payload, headers=headers, timeout=120),
            self.attempts,
            self._format_api_error,
            "Claude API request failed",
        )
        latency_ms = int((time.perf_counter() - start) * 1000)
        data = resp.json()
        # web search turns interleave tool blocks with several text blocks
        texts = [
            block.get("text", "")
            for block in data.get("content") or []
            if block.get("type") == "text"
        ]
        if not texts:
            raise UpstreamError("No text response from Claude")
        tokens_in = data.get("usage", {}).get("input_tokens")
        tokens_out = data.get("usage", {}).get("output_tokens")
        return ChatResponse(
            text="\n".join(texts),
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            latency_ms=latency_ms,
        )

    def _format_api_error(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        error = payload.get("error", {}) if isinstance(payload, dict) else {}
        message = error.get("message") or response.text[:200]
        status = response.status_code
        if status == 401:
            return "Authentication failed for Claude API. Check ANTHROPIC_API_KEY."
        if status == 429:
            return "Rate limit exceeded for Claude API. Try again in a few moments."
        return f"Claude API error ({status}): {message}"

    async def aclose(self) -> None:
        await self.client.aclose()
