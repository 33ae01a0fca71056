from __future__ import annotations

from typing import Any, Union

import httpx
from ..core.errors import UpstreamError
from .base import request_with_retries


class SportsDBAdapter:
    """Raw client for TheSportsDB v1 JSON API (free tier key ``3``)."""

    id = "thesportsdb"

    def __init__(
        self,
        api_key: str = "3",
        client: Union[httpx.AsyncClient, None] = None,
        attempts: int = 3,
    ) -> None:
        self.attempts = attempts
        self.client = client or httpx.AsyncClient(
            base_url=f"https://www.thesportsdb.com/api/v1/json/{api_key}"
        )

    async def _get(self, path: str, params: dict[str, str], action: str) -> dict[str, Any]:
        resp = await request_with_retries(
            lambda: self.client.get(path, params=params, timeout=30),
            self.attempts,
            lambda r: f"TheSportsDB {action} failed: {r.status_code}",
            f"TheSportsDB {action} failed",
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(f"TheSportsDB {action} returned invalid JSON") from e
        return data if isinstance(data, dict) else {}

    async def search_events(self, query: str) -> dict[str, Any]:
        return await self._get("/searchevents.php", {"e": query}, "search")

    async def lookup_event(self, event_id: str) -> dict[str, Any]:
        return await self._get("/lookupevent.php", {"id": event_id}, "lookup")

    async def aclose(self) -> None:
        await self.client.aclose()
