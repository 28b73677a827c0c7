"""
Rules config loading for the pointwindow CLI.

Loads YAML/JSON rules files and returns typed config objects. Missing or
non-positive values fall back to the documented defaults instead of failing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .types import (
    CLAIM_DEDUCTION,
    DEFAULT_DAILY_SCORE,
    DEFAULT_FORWARD_DAYS,
    DEFAULT_MAX_DAYS,
    DEFAULT_THRESHOLD,
    WINDOW_DAYS,
    ScoringRules,
)


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(x):
        return None
    return int(x) if x.is_integer() else x


def resolve_daily_score(value: Any) -> float:
    """Absent, unparseable or non-positive -> 17."""
    x = _to_number(value)
    if x is None or x <= 0:
        return DEFAULT_DAILY_SCORE
    return x


def resolve_threshold(value: Any) -> float:
    """
    Absent, unparseable or zero -> 200. Negative values pass through so the
    search can report them as invalid input.
    """
    x = _to_number(value)
    if not x:
        return DEFAULT_THRESHOLD
    return x


def _positive_int(value: Any, default: int) -> int:
    x = _to_number(value)
    if x is None or x < 1:
        return default
    return int(x)


@dataclass(frozen=True)
class RulesConfig:
    """Loaded calculator configuration."""

    daily_score: float = DEFAULT_DAILY_SCORE
    expected_score: float = DEFAULT_THRESHOLD
    max_days: int = DEFAULT_MAX_DAYS
    forward_days: int = DEFAULT_FORWARD_DAYS
    rules: ScoringRules = ScoringRules()

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> RulesConfig:
        r = d.get("rules") or {}
        claim_deduction = _to_number(r.get("claim_deduction"))
        rules = ScoringRules(
            claim_deduction=CLAIM_DEDUCTION if claim_deduction is None or claim_deduction < 0 else claim_deduction,
            window_days=_positive_int(r.get("window_days"), WINDOW_DAYS),
        )
        return cls(
            daily_score=resolve_daily_score(d.get("daily_score")),
            expected_score=resolve_threshold(d.get("expected_score", d.get("threshold"))),
            max_days=_positive_int(d.get("max_days"), DEFAULT_MAX_DAYS),
            forward_days=_positive_int(d.get("forward_days"), DEFAULT_FORWARD_DAYS),
            rules=rules,
        )


def load_rules_config(path: str) -> RulesConfig:
    """
    Load calculator configuration from a YAML or JSON file.

    The file must contain a mapping. An empty file yields the defaults.
    """
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    obj = yaml.safe_load(text)
    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        raise ValueError(f"Rules file must be a YAML/JSON object, got {type(obj).__name__}")
    return RulesConfig.from_dict(obj)
