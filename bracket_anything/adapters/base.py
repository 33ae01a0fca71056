from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypedDict, Union

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.errors import UpstreamError


class ChatResponse(TypedDict, total=False):
    text: str
    tokens_in: Union[int, None]
    tokens_out: Union[int, None]
    latency_ms: int


class ChatAdapter(Protocol):
    id: str

    async def send(
        self,
        messages: list[dict[str, str]],
        system: Union[str, None] = None,
        params: Union[dict, None] = None,
    ) -> ChatResponse: ...


class SportsSource(Protocol):
    async def search_events(self, query: str) -> dict[str, Any]: ...

    async def lookup_event(self, event_id: str) -> dict[str, Any]: ...


class EncyclopediaSource(Protocol):
    async def opensearch(self, query: str) -> list[Any]: ...

    async def parse_page(self, page_title: str) -> dict[str, Any]: ...


async def request_with_retries(
    request: Callable[[], Awaitable[httpx.Response]],
    attempts: int,
    describe_status: Callable[[httpx.Response], str],
    failure: str,
) -> httpx.Response:
    """Run ``request``, retrying transport errors only.

    Non-2xx responses become ``UpstreamError(describe_status(response))``;
    any other httpx failure becomes ``UpstreamError(f"{failure}: {error}")``.
    """
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(min=1, max=4),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                resp = await request()
                resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpstreamError(describe_status(e.response)) from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"{failure}: {e}") from e
    return resp
