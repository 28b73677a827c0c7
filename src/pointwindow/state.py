# src/pointwindow/state.py
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .config import resolve_daily_score, resolve_threshold
from .dates import to_date_key


STATE_SCHEMA_VERSION = "pointwindow.state/1"


# =============================================================================
# Canonicalization + hashing
# =============================================================================

def _canonical_json_bytes(obj: Any) -> bytes:
    """
    Canonical JSON for stable hashing:
    - sort_keys=True ensures deterministic key order
    - separators remove whitespace differences
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8")


def _sha256_hex_obj(obj: Any) -> str:
    return hashlib.sha256(_canonical_json_bytes(obj)).hexdigest()


def compute_state_fingerprint(state_obj: Dict[str, Any]) -> str:
    """
    Deterministic fingerprint of a state document, excluding the fingerprint itself.
    """
    tmp = dict(state_obj)
    tmp.pop("fingerprint", None)
    return _sha256_hex_obj(tmp)


# =============================================================================
# Persisted state
# =============================================================================

@dataclass
class CalculatorState:
    """Everything a caller needs to persist to restore one profile."""

    name: str = "default"
    score_data: Dict[str, Dict[str, int]] = field(default_factory=dict)
    daily_score: float = 17
    expected_score: float = 200
    last_update_date: Optional[str] = None
    schema_version: str = STATE_SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "schema_version": self.schema_version,
            "name": self.name,
            "score_data": {k: dict(v) for k, v in sorted(self.score_data.items())},
            "daily_score": self.daily_score,
            "expected_score": self.expected_score,
            "last_update_date": self.last_update_date,
        }
        d["fingerprint"] = compute_state_fingerprint(d)
        return d

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False, sort_keys=True) + "\n"

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "CalculatorState":
        """
        Lenient restore: unknown keys are ignored, missing ones take defaults.
        Accepts the older camelCase layout (scoreData/dailyScore/...) as well.
        """
        score_data = d.get("score_data", d.get("scoreData")) or {}
        if not isinstance(score_data, Mapping):
            score_data = {}
        last = d.get("last_update_date", d.get("lastUpdateDate"))
        return CalculatorState(
            name=str(d.get("name") or "default"),
            score_data={str(k): dict(v) for k, v in score_data.items() if isinstance(v, Mapping)},
            daily_score=resolve_daily_score(d.get("daily_score", d.get("dailyScore"))),
            expected_score=resolve_threshold(d.get("expected_score", d.get("expectedScore"))),
            last_update_date=to_date_key(last) if last else None,
            schema_version=str(d.get("schema_version") or STATE_SCHEMA_VERSION),
        )

    @staticmethod
    def from_json(text: str) -> "CalculatorState":
        obj = json.loads(text)
        if not isinstance(obj, dict):
            raise ValueError(f"State must be a JSON object, got {type(obj).__name__}")
        return CalculatorState.from_dict(obj)
