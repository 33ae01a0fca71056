"""Configuration loader for the confidence and matching thresholds."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass(frozen=True)
class MatchingPolicy:
    # fuzzy option matches never reach full confidence
    fuzzy_option_cap: float = 0.85
    # multiple-choice answer that fits no option
    option_mismatch_penalty: float = 0.5
    min_similarity: float = 0.4
    sports_fact_threshold: float = 0.5
    sports_fuzzy_scale: float = 0.8
    wikipedia_fact_threshold: float = 0.3
    wikipedia_bold_confidence: float = 0.85
    wikipedia_plain_confidence: float = 0.70
    ai_mismatch_cap: float = 0.5


DEFAULT_POLICY = MatchingPolicy()


class MatchingConfigLoader:
    """Loads matching policy overrides from config/matching.yaml."""

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if config_path is None:
            env_path = os.environ.get("BRACKET_MATCHING_CONFIG", "").strip()
            if env_path:
                config_path = Path(env_path)
            else:
                project_root = Path(__file__).parent.parent.parent
                config_path = project_root / "config" / "matching.yaml"
        self.config_path = config_path
        self._config: dict[str, Any] | None = None

    def _load_config(self) -> None:
        if self._config is not None:
            return
        if not self.config_path.exists():
            self._config = {}
            return
        with self.config_path.open("r", encoding="utf-8") as handle:
            self._config = yaml.safe_load(handle) or {}

    def get_policy(self) -> MatchingPolicy:
        """Return the default policy with any configured values applied."""
        self._load_config()
        overrides = (self._config or {}).get("matching", {})
        if not isinstance(overrides, dict):
            return DEFAULT_POLICY
        known = {f.name for f in fields(MatchingPolicy)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown matching settings: {', '.join(sorted(unknown))}")
        return replace(DEFAULT_POLICY, **{k: float(v) for k, v in overrides.items()})
