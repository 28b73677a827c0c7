from datetime import date, timedelta

from pointwindow.dates import add_days, to_date
from pointwindow.ledger import DailyLedger
from pointwindow.types import ScoringRules
from pointwindow.window import (
    accounted_score,
    build_forward_table,
    build_history_table,
    rolling_sums,
    summarize_window,
    trailing_window_sum,
    window_dates,
)

TODAY = "2026-01-30"


def _claims_before(today: str, days: int) -> DailyLedger:
    ledger = DailyLedger()
    for i in range(1, days + 1):
        ledger.set_day(add_days(today, -i), "claim", 1)
    return ledger


def _irregular_ledger() -> DailyLedger:
    ledger = DailyLedger()
    ledger.set_day("2026-01-02", "raw", 40)
    ledger.set_day("2026-01-09", "claim", 3)
    ledger.set_day("2026-01-17", "raw", 0)
    ledger.set_day("2026-01-17", "claim", 1)
    ledger.set_day("2026-02-03", "raw", -10)
    ledger.set_day("2026-02-14", "claim", 2)
    ledger.set_day("2026-02-20", "raw", 55)
    return ledger


def test_empty_ledger_window_is_fifteen_defaults():
    ledger = DailyLedger()
    for d in ("2020-02-29", TODAY, "2030-12-31"):
        assert trailing_window_sum(ledger, d, 17) == 255


def test_window_always_spans_fifteen_distinct_days_before_date():
    for d in ("2026-01-01", TODAY, "2024-03-10"):
        keys = window_dates(d)
        assert len(keys) == 15
        assert len(set(keys)) == 15
        assert keys[-1] == add_days(d, -1)
        assert all(k < d for k in keys)
        days = [to_date(k) for k in keys]
        assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))


def test_one_claim_per_day_over_the_window():
    ledger = _claims_before(TODAY, 15)
    assert accounted_score(ledger, add_days(TODAY, -1), 17) == 2
    assert trailing_window_sum(ledger, TODAY, 17) == 30


def test_anchor_day_is_excluded_from_its_own_window():
    ledger = DailyLedger()
    ledger.set_day(TODAY, "claim", 10)
    assert trailing_window_sum(ledger, TODAY, 17) == 255
    assert trailing_window_sum(ledger, add_days(TODAY, 1), 17) == 255 - 17 + (17 - 150)


def test_history_table_covers_days_before_anchor():
    ledger = _irregular_ledger()
    rows = build_history_table(TODAY, 17, ledger)
    assert len(rows) == 15
    assert rows[0].date == add_days(TODAY, -15)
    assert rows[-1].date == add_days(TODAY, -1)
    for r in rows:
        assert r.trailing_window_sum == trailing_window_sum(ledger, r.date, 17)
        assert r.accounted_score == accounted_score(ledger, r.date, 17)
    explicit = [r.date for r in rows if r.explicit]
    assert explicit == ["2026-01-17"]


def test_forward_table_sees_future_edits():
    ledger = DailyLedger()
    ledger.set_day(add_days(TODAY, 2), "raw", 100)
    rows = build_forward_table(TODAY, 17, ledger, days=20)
    assert [r.day_offset for r in rows] == list(range(20))
    assert rows[0].date == TODAY
    by_offset = {r.day_offset: r.trailing_window_sum for r in rows}
    assert by_offset[2] == 255
    assert by_offset[3] == 338
    assert by_offset[17] == 338
    assert by_offset[18] == 255
    assert rows[2].accounted_score == 100


def test_tables_are_idempotent():
    ledger = _irregular_ledger()
    assert build_history_table(TODAY, 17, ledger) == build_history_table(TODAY, 17, ledger)
    assert build_forward_table(TODAY, 17, ledger) == build_forward_table(TODAY, 17, ledger)


def test_incremental_sums_match_full_recomputation():
    for ledger in (DailyLedger(), _irregular_ledger(), _claims_before(TODAY, 15)):
        start = "2025-12-20"
        got = list(rolling_sums(ledger, start, 90, 17))
        assert len(got) == 90
        for day, window in got:
            assert window == trailing_window_sum(ledger, day, 17)


def test_rolling_sums_agree_with_full_window_for_fractional_defaults():
    for default in (0.7, 0.1, 16.3):
        for ledger in (DailyLedger(), _irregular_ledger(), _claims_before(TODAY, 1)):
            for day, window in rolling_sums(ledger, "2025-12-20", 90, default):
                assert window == trailing_window_sum(ledger, day, default)


def test_missing_or_non_positive_default_score_means_seventeen():
    ledger = DailyLedger()
    for default in (None, 0, -3, "abc"):
        assert trailing_window_sum(ledger, TODAY, default) == 255
        assert accounted_score(ledger, TODAY, default) == 17
        assert [w for _, w in rolling_sums(ledger, TODAY, 3, default)] == [255, 255, 255]
        assert build_forward_table(TODAY, default, ledger, 2)[0].raw_score == 17


def test_incremental_sums_with_custom_rules():
    rules = ScoringRules(claim_deduction=10, window_days=7)
    ledger = _irregular_ledger()
    for day, window in rolling_sums(ledger, "2026-01-01", 60, 12, rules):
        assert window == trailing_window_sum(ledger, day, 12, rules)
    assert trailing_window_sum(DailyLedger(), TODAY, 17, rules) == 7 * 17


def test_rolling_sums_empty_count():
    assert list(rolling_sums(DailyLedger(), TODAY, 0, 17)) == []


def test_summary_over_window():
    s = summarize_window(DailyLedger(), date(2026, 1, 30), 17)
    assert s.total == 255
    assert s.average == 17.0
    assert s.days == 15
    s = summarize_window(_claims_before(TODAY, 15), TODAY, 17)
    assert s.total == 30
    assert s.average == 2.0
