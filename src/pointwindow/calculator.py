from __future__ import annotations
import logging
from typing import Any, List, Optional

from .advice import assess_day
from .config import resolve_daily_score, resolve_threshold
from .dates import DateLike, add_days, to_date_key, today_key
from .horizon import find_threshold_crossings
from .ledger import DailyLedger
from .state import CalculatorState
from .types import (
    DEFAULT_FORWARD_DAYS,
    DEFAULT_MAX_DAYS,
    DEFAULT_RULES,
    Assessment,
    DailyRecord,
    ForwardRow,
    HistoryRow,
    ScoringRules,
    SearchResult,
    WindowSummary,
)
from .window import build_forward_table, build_history_table, summarize_window, trailing_window_sum

logger = logging.getLogger(__name__)


class RollingCalculator:
    """
    One user profile: a ledger plus its default daily score and target.
    Instances share nothing; switching profiles means restoring another instance.
    """
    def __init__(
        self,
        ledger: Optional[DailyLedger] = None,
        daily_score: Any = None,
        expected_score: Any = None,
        rules: ScoringRules = DEFAULT_RULES,
        last_update_date: Optional[DateLike] = None,
        name: str = "default",
    ):
        self.name = name
        self.ledger = ledger if ledger is not None else DailyLedger()
        self.daily_score = resolve_daily_score(daily_score)
        self.expected_score = resolve_threshold(expected_score)
        self.rules = rules
        self.last_update_date = to_date_key(last_update_date) if last_update_date else None

    def set_day(self, day: DateLike, field: str, value: Any) -> DailyRecord:
        return self.ledger.set_day(day, field, value)

    def current_window(self, today: Optional[DateLike] = None) -> float:
        return trailing_window_sum(self.ledger, today or today_key(), self.daily_score, self.rules)

    def history_table(self, today: Optional[DateLike] = None) -> List[HistoryRow]:
        return build_history_table(today or today_key(), self.daily_score, self.ledger, self.rules)

    def forward_table(self, today: Optional[DateLike] = None, days: int = DEFAULT_FORWARD_DAYS) -> List[ForwardRow]:
        return build_forward_table(today or today_key(), self.daily_score, self.ledger, days, self.rules)

    def predict(
        self,
        today: Optional[DateLike] = None,
        threshold: Any = None,
        max_days: int = DEFAULT_MAX_DAYS,
    ) -> SearchResult:
        th = self.expected_score if threshold is None else resolve_threshold(threshold)
        return find_threshold_crossings(
            today or today_key(), self.daily_score, self.ledger, th, max_days, self.rules
        )

    def assess(self, today: Optional[DateLike] = None) -> Assessment:
        return assess_day(self.ledger, today or today_key(), self.daily_score, self.expected_score, self.rules)

    def summary(self, today: Optional[DateLike] = None) -> WindowSummary:
        return summarize_window(self.ledger, today or today_key(), self.daily_score, self.rules)

    def reset(self) -> None:
        self.ledger.clear()
        self.daily_score = resolve_daily_score(None)
        self.expected_score = resolve_threshold(None)
        self.last_update_date = None
        logger.info("profile %s reset to defaults", self.name)

    def refresh(self, today: Optional[DateLike] = None) -> int:
        """
        Handle a calendar roll-over: when the day changed since the last
        update, drop hypothetical entries further out than one window.
        """
        key = to_date_key(today or today_key())
        removed = 0
        if self.last_update_date and self.last_update_date != key:
            removed = self.ledger.prune_after(add_days(key, self.rules.window_days))
            logger.info("date changed %s -> %s for %s, pruned %d entries", self.last_update_date, key, self.name, removed)
        self.last_update_date = key
        return removed

    def to_state(self) -> CalculatorState:
        return CalculatorState(
            name=self.name,
            score_data=self.ledger.snapshot(),
            daily_score=self.daily_score,
            expected_score=self.expected_score,
            last_update_date=self.last_update_date,
        )

    @classmethod
    def from_state(cls, state: CalculatorState, rules: ScoringRules = DEFAULT_RULES) -> "RollingCalculator":
        return cls(
            ledger=DailyLedger.from_snapshot(state.score_data),
            daily_score=state.daily_score,
            expected_score=state.expected_score,
            rules=rules,
            last_update_date=state.last_update_date,
            name=state.name,
        )
