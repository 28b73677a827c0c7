from __future__ import annotations
from typing import Iterator, List, Tuple

from .config import resolve_daily_score
from .dates import DateLike, add_days, date_range
from .ledger import DailyLedger
from .types import (
    DEFAULT_FORWARD_DAYS,
    DEFAULT_RULES,
    ForwardRow,
    HistoryRow,
    ScoringRules,
    WindowSummary,
)


def accounted_score(
    ledger: DailyLedger,
    day: DateLike,
    default_score: float,
    rules: ScoringRules = DEFAULT_RULES,
) -> float:
    """Raw score for the day minus the per-claim deduction."""
    default_score = resolve_daily_score(default_score)
    return ledger.effective_raw(day, default_score) - rules.claim_deduction * ledger.effective_claim(day)


def window_dates(day: DateLike, rules: ScoringRules = DEFAULT_RULES) -> List[str]:
    """The `window_days` keys strictly before `day`, oldest first."""
    return date_range(add_days(day, -rules.window_days), rules.window_days)


def trailing_window_sum(
    ledger: DailyLedger,
    day: DateLike,
    default_score: float,
    rules: ScoringRules = DEFAULT_RULES,
) -> float:
    default_score = resolve_daily_score(default_score)
    return sum(accounted_score(ledger, d, default_score, rules) for d in window_dates(day, rules))


def rolling_sums(
    ledger: DailyLedger,
    start: DateLike,
    count: int,
    default_score: float,
    rules: ScoringRules = DEFAULT_RULES,
) -> Iterator[Tuple[str, float]]:
    """
    Yield (day, trailing_window_sum(day)) for `count` days from `start`.

    Each window is a full recomputation from the ledger and equals
    trailing_window_sum exactly, float scores included.
    """
    for day in date_range(start, count):
        yield day, trailing_window_sum(ledger, day, default_score, rules)


def _row_values(ledger: DailyLedger, day: str, default_score: float, rules: ScoringRules):
    default_score = resolve_daily_score(default_score)
    raw = ledger.effective_raw(day, default_score)
    claim = ledger.effective_claim(day)
    return (
        raw,
        claim,
        raw - rules.claim_deduction * claim,
        trailing_window_sum(ledger, day, default_score, rules),
        day in ledger,
    )


def build_history_table(
    anchor: DateLike,
    default_score: float,
    ledger: DailyLedger,
    rules: ScoringRules = DEFAULT_RULES,
) -> List[HistoryRow]:
    """Rows for the window days ending the day before `anchor`."""
    rows: List[HistoryRow] = []
    for day in window_dates(anchor, rules):
        raw, claim, acc, window, explicit = _row_values(ledger, day, default_score, rules)
        rows.append(HistoryRow(
            date=day,
            raw_score=raw,
            claim_count=claim,
            accounted_score=acc,
            trailing_window_sum=window,
            explicit=explicit,
        ))
    return rows


def build_forward_table(
    anchor: DateLike,
    default_score: float,
    ledger: DailyLedger,
    days: int = DEFAULT_FORWARD_DAYS,
    rules: ScoringRules = DEFAULT_RULES,
) -> List[ForwardRow]:
    """
    Rows for anchor, anchor+1, ..., anchor+days-1. Future edits in the ledger
    flow into later rows exactly like recorded history does.
    """
    rows: List[ForwardRow] = []
    for offset, day in enumerate(date_range(anchor, days)):
        raw, claim, acc, window, explicit = _row_values(ledger, day, default_score, rules)
        rows.append(ForwardRow(
            date=day,
            day_offset=offset,
            raw_score=raw,
            claim_count=claim,
            accounted_score=acc,
            trailing_window_sum=window,
            explicit=explicit,
        ))
    return rows


def summarize_window(
    ledger: DailyLedger,
    anchor: DateLike,
    default_score: float,
    rules: ScoringRules = DEFAULT_RULES,
) -> WindowSummary:
    days = window_dates(anchor, rules)
    total = sum(accounted_score(ledger, d, default_score, rules) for d in days)
    return WindowSummary(total=total, average=total / len(days) if days else 0.0, days=len(days))
