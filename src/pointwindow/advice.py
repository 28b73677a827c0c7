"""
Eligibility assessment for a single day.

Turns the anchor day's window, its own accounted score and the next day's
window into machine-readable suggestions. Callers decide how to present them.
"""

from __future__ import annotations

import math
from typing import List

from .config import resolve_daily_score
from .dates import DateLike, add_days, to_date_key
from .ledger import DailyLedger
from .types import DEFAULT_RULES, DEFAULT_THRESHOLD, Assessment, ScoringRules, Suggestion
from .window import accounted_score, trailing_window_sum


def max_claimable(window: float, threshold: float, rules: ScoringRules = DEFAULT_RULES) -> int:
    """Claims the window can absorb today; 0 when not eligible."""
    if window < threshold:
        return 0
    if rules.claim_deduction <= 0:
        return 1
    return int(math.floor((window - threshold) / rules.claim_deduction)) + 1


def assess_day(
    ledger: DailyLedger,
    anchor: DateLike,
    default_score: float,
    threshold: float = DEFAULT_THRESHOLD,
    rules: ScoringRules = DEFAULT_RULES,
) -> Assessment:
    default_score = resolve_daily_score(default_score)
    if threshold is None:
        threshold = DEFAULT_THRESHOLD
    day = to_date_key(anchor)
    window = trailing_window_sum(ledger, day, default_score, rules)
    accounted = accounted_score(ledger, day, default_score, rules)
    tomorrow = trailing_window_sum(ledger, add_days(day, 1), default_score, rules)
    raw_today = ledger.effective_raw(day, default_score)
    claims_today = ledger.effective_claim(day)

    eligible = window >= threshold
    suggestions: List[Suggestion] = []
    shortfall: float = 0
    days_needed = None
    max_claims = None

    if not eligible:
        shortfall = threshold - window
        suggestions.append(Suggestion("NOT_ELIGIBLE", "Not eligible yet; keep accumulating points."))
        suggestions.append(Suggestion("SHORTFALL", f"{shortfall:g} more points needed to reach the threshold."))
        if raw_today > 0:
            days_needed = int(math.ceil(shortfall / raw_today))
            suggestions.append(Suggestion(
                "DAYS_NEEDED",
                f"At {raw_today:g} points per day the threshold is about {days_needed} day(s) away.",
            ))
    elif claims_today == 0:
        suggestions.append(Suggestion("CAN_CLAIM", "Eligible today; a claim is possible."))
    else:
        suggestions.append(Suggestion("CLAIMED_TODAY", f"{claims_today} claim(s) recorded today."))
        if tomorrow >= threshold:
            suggestions.append(Suggestion("STILL_ELIGIBLE_TOMORROW", "Still eligible tomorrow."))
        else:
            suggestions.append(Suggestion("AT_RISK_TOMORROW", "Eligibility may be lost tomorrow."))

    if accounted < 0:
        suggestions.append(Suggestion(
            "NEGATIVE_ACCOUNTED",
            f"Today's accounted score is negative ({accounted:g}) and drags the next {rules.window_days} days.",
        ))

    if eligible:
        max_claims = max_claimable(window, threshold, rules)
        if max_claims > claims_today:
            suggestions.append(Suggestion("MAX_CLAIMABLE", f"Up to {max_claims} claim(s) possible today."))

    return Assessment(
        window=window,
        accounted_today=accounted,
        tomorrow_window=tomorrow,
        threshold=threshold,
        eligible=eligible,
        shortfall=shortfall,
        days_needed=days_needed,
        max_claimable=max_claims,
        suggestions=suggestions,
    )
