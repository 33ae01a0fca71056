from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from ..adapters.anthropic_adapter import DEFAULT_MODEL, AnthropicAdapter
from ..adapters.base import ChatAdapter, EncyclopediaSource, SportsSource
from ..adapters.mock_adapter import MockAdapter
from ..adapters.sportsdb_adapter import SportsDBAdapter
from ..adapters.wikipedia_adapter import WikipediaAdapter
from .matching_config import MatchingConfigLoader, MatchingPolicy


def use_mocks() -> bool:
    return os.environ.get("BRACKET_ENV", "real").lower() == "mock"


@dataclass
class ServiceContext:
    """Everything one request needs to reach the outside world."""

    chat: ChatAdapter
    sports: SportsSource
    wikipedia: EncyclopediaSource
    policy: MatchingPolicy = field(default_factory=MatchingPolicy)

    async def aclose(self) -> None:
        for client in (self.chat, self.sports, self.wikipedia):
            close = getattr(client, "aclose", None)
            if close is not None:
                await close()


def build_context(
    mock: Union[bool, None] = None,
    matching_config: Union[Path, None] = None,
) -> ServiceContext:
    mock = use_mocks() if mock is None else mock
    model = os.environ.get("BRACKET_ANTHROPIC_MODEL", "").strip() or DEFAULT_MODEL
    chat: ChatAdapter
    if mock:
        chat = MockAdapter(model=model)
    else:
        chat = AnthropicAdapter(model=model, api_key_env="ANTHROPIC_API_KEY")
    return ServiceContext(
        chat=chat,
        sports=SportsDBAdapter(),
        wikipedia=WikipediaAdapter(),
        policy=MatchingConfigLoader(matching_config).get_policy(),
    )
