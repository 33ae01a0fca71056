from __future__ import annotations

from typing import Any, Union

import httpx
from ..core.errors import UpstreamError
from .base import request_with_retries

USER_AGENT = "BracketAnything/0.1 (answer auto-complete)"


class WikipediaAdapter:
    """Raw client for the MediaWiki action API on en.wikipedia.org."""

    id = "wikipedia"

    def __init__(self, client: Union[httpx.AsyncClient, None] = None, attempts: int = 3) -> None:
        self.attempts = attempts
        self.client = client or httpx.AsyncClient(
            base_url="https://en.wikipedia.org/w",
            headers={"User-Agent": USER_AGENT},
        )

    async def _get(self, params: dict[str, str], action: str) -> Any:
        query = {"format": "json", "origin": "*", **params}
        resp = await request_with_retries(
            lambda: self.client.get("/api.php", params=query, timeout=30),
            self.attempts,
            lambda r: f"Wikipedia {action} failed: {r.status_code}",
            f"Wikipedia {action} failed",
        )
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"Wikipedia {action} returned invalid JSON") from e

    async def opensearch(self, query: str) -> list[Any]:
        data = await self._get(
            {"action": "opensearch", "search": query, "limit": "10"}, "search"
        )
        return data if isinstance(data, list) else []

    async def parse_page(self, page_title: str) -> dict[str, Any]:
        data = await self._get({"action": "parse", "page": page_title, "prop": "text"}, "parse")
        return data if isinstance(data, dict) else {}

    async def aclose(self) -> None:
        await self.client.aclose()
