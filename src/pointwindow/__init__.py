"""Rolling 15-day points window: ledger, accounting and threshold search."""

from .calculator import RollingCalculator
from .dates import add_days, to_date_key
from .horizon import find_threshold_crossings
from .ledger import DailyLedger
from .types import (
    DEFAULT_RULES,
    DailyRecord,
    PredictionHit,
    ScoringRules,
    SearchResult,
    SearchStatus,
)
from .window import (
    accounted_score,
    build_forward_table,
    build_history_table,
    rolling_sums,
    trailing_window_sum,
)

__all__ = [
    "RollingCalculator",
    "add_days",
    "to_date_key",
    "find_threshold_crossings",
    "DailyLedger",
    "DEFAULT_RULES",
    "DailyRecord",
    "PredictionHit",
    "ScoringRules",
    "SearchResult",
    "SearchStatus",
    "accounted_score",
    "build_forward_table",
    "build_history_table",
    "rolling_sums",
    "trailing_window_sum",
]
