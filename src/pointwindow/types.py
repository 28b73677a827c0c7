from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


DEFAULT_DAILY_SCORE = 17
DEFAULT_THRESHOLD = 200
DEFAULT_MAX_DAYS = 100
DEFAULT_FORWARD_DAYS = 15
CLAIM_DEDUCTION = 15
WINDOW_DAYS = 15

UNREACHABLE_ADVICE = "Increase the daily score or reduce claims to reach the target."


@dataclass(frozen=True)
class ScoringRules:
    claim_deduction: int = CLAIM_DEDUCTION  # points removed per claim
    window_days: int = WINDOW_DAYS

    def __post_init__(self) -> None:
        if self.window_days < 1:
            raise ValueError(f"window_days must be >= 1, got {self.window_days}")


DEFAULT_RULES = ScoringRules()


@dataclass(frozen=True)
class DailyRecord:
    raw: Optional[int] = None    # None -> caller's default daily score
    claim: Optional[int] = None  # None -> 0

    def to_dict(self) -> dict:
        d = {}
        if self.raw is not None:
            d["raw"] = self.raw
        if self.claim is not None:
            d["claim"] = self.claim
        return d


@dataclass(frozen=True)
class HistoryRow:
    date: str
    raw_score: float
    claim_count: int
    accounted_score: float
    trailing_window_sum: float
    explicit: bool  # day has a ledger entry


@dataclass(frozen=True)
class ForwardRow:
    date: str
    day_offset: int  # 0 == anchor day
    raw_score: float
    claim_count: int
    accounted_score: float
    trailing_window_sum: float
    explicit: bool


@dataclass(frozen=True)
class PredictionHit:
    date: str
    score: float
    day_offset: int


class SearchStatus(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    ALREADY_SATISFIED = "ALREADY_SATISFIED"
    FOUND = "FOUND"
    UNREACHABLE = "UNREACHABLE"


@dataclass(frozen=True)
class SearchResult:
    status: SearchStatus
    threshold: float
    current_window: Optional[float] = None
    hits: Tuple[PredictionHit, ...] = ()
    days_scanned: int = 0
    advice: Optional[str] = None

    @property
    def first_hit(self) -> Optional[PredictionHit]:
        return self.hits[0] if self.hits else None

    def surplus(self, hit: PredictionHit) -> float:
        return hit.score - self.threshold

    def days_after_first(self, hit: PredictionHit) -> int:
        first = self.first_hit
        if first is None:
            return 0
        return hit.day_offset - first.day_offset


@dataclass(frozen=True)
class Suggestion:
    code: str      # stable machine code, e.g. "AT_RISK_TOMORROW"
    message: str


@dataclass(frozen=True)
class Assessment:
    window: float
    accounted_today: float
    tomorrow_window: float
    threshold: float
    eligible: bool
    shortfall: float = 0
    days_needed: Optional[int] = None
    max_claimable: Optional[int] = None
    suggestions: List[Suggestion] = field(default_factory=list)


@dataclass(frozen=True)
class WindowSummary:
    total: float
    average: float
    days: int
