from __future__ import annotations
import logging
from typing import List

from .config import resolve_daily_score
from .dates import DateLike, add_days, to_date_key
from .ledger import DailyLedger
from .types import (
    DEFAULT_MAX_DAYS,
    DEFAULT_RULES,
    DEFAULT_THRESHOLD,
    UNREACHABLE_ADVICE,
    PredictionHit,
    ScoringRules,
    SearchResult,
    SearchStatus,
)
from .window import rolling_sums, trailing_window_sum

logger = logging.getLogger(__name__)


def find_threshold_crossings(
    anchor: DateLike,
    default_score: float,
    ledger: DailyLedger,
    threshold: float = DEFAULT_THRESHOLD,
    max_days: int = DEFAULT_MAX_DAYS,
    rules: ScoringRules = DEFAULT_RULES,
) -> SearchResult:
    """
    Every day in [anchor+1, anchor+max_days] whose trailing window reaches `threshold`.

    The rolling sum is not monotonic (a claim can pull it back under the
    threshold), so all qualifying days are returned, not only the first one.

    Terminal outcomes:
    - INVALID_INPUT: threshold <= 0 or max_days < 1; nothing is computed.
      A missing threshold or horizon means 200 / 100 days, a missing or
      non-positive default score means 17.
    - ALREADY_SATISFIED: the anchor's own window already meets the threshold;
      no forward day is evaluated.
    - FOUND: at least one hit, ascending by date.
    - UNREACHABLE: no hit within the horizon; `advice` is populated.
    """
    if threshold is None:
        threshold = DEFAULT_THRESHOLD
    if max_days is None:
        max_days = DEFAULT_MAX_DAYS
    if threshold <= 0 or max_days < 1:
        logger.debug("rejecting search: threshold=%r max_days=%r", threshold, max_days)
        return SearchResult(status=SearchStatus.INVALID_INPUT, threshold=threshold)

    default_score = resolve_daily_score(default_score)
    anchor_key = to_date_key(anchor)
    current = trailing_window_sum(ledger, anchor_key, default_score, rules)
    if current >= threshold:
        logger.debug("threshold %s already met on %s (window=%s)", threshold, anchor_key, current)
        return SearchResult(
            status=SearchStatus.ALREADY_SATISFIED,
            threshold=threshold,
            current_window=current,
        )

    hits: List[PredictionHit] = []
    scanned = 0
    start = add_days(anchor_key, 1)
    for offset, (day, window) in enumerate(rolling_sums(ledger, start, max_days, default_score, rules), start=1):
        scanned += 1
        if window >= threshold:
            hits.append(PredictionHit(date=day, score=window, day_offset=offset))

    if not hits:
        logger.debug("threshold %s unreachable within %d days of %s", threshold, max_days, anchor_key)
        return SearchResult(
            status=SearchStatus.UNREACHABLE,
            threshold=threshold,
            current_window=current,
            days_scanned=scanned,
            advice=UNREACHABLE_ADVICE,
        )

    logger.debug("found %d crossing(s), first on %s", len(hits), hits[0].date)
    return SearchResult(
        status=SearchStatus.FOUND,
        threshold=threshold,
        current_window=current,
        hits=tuple(hits),
        days_scanned=scanned,
    )
