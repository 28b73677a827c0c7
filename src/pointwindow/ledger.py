from __future__ import annotations
import logging
import math
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .dates import DateLike, to_date_key
from .types import DailyRecord

logger = logging.getLogger(__name__)

FIELD_RAW = "raw"
FIELD_CLAIM = "claim"
FIELDS = (FIELD_RAW, FIELD_CLAIM)

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def parse_int_lenient(value: Any) -> int:
    """
    Integer parse that never fails: leading sign+digits of a string, floats
    truncated toward zero, anything else becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value)
    m = _LEADING_INT.match(str(value))
    if not m:
        return 0
    return int(m.group(1))


class DailyLedger:
    """
    Sparse date -> DailyRecord map shared by history and hypothetical future days.
    Days without an entry resolve to the default score and zero claims.
    """
    def __init__(self, records: Optional[Mapping[str, DailyRecord]] = None):
        self._records: Dict[str, DailyRecord] = {}
        for k, rec in (records or {}).items():
            self._records[to_date_key(k)] = rec

    def set_day(self, day: DateLike, field: str, value: Any) -> DailyRecord:
        if field not in FIELDS:
            raise ValueError(f"Unknown field '{field}', expected one of {FIELDS}")
        key = to_date_key(day)
        parsed = parse_int_lenient(value)
        cur = self._records.get(key) or DailyRecord()
        if field == FIELD_RAW:
            rec = DailyRecord(raw=parsed, claim=cur.claim)
        else:
            rec = DailyRecord(raw=cur.raw, claim=parsed)
        self._records[key] = rec
        return rec

    def get(self, day: DateLike) -> Optional[DailyRecord]:
        return self._records.get(to_date_key(day))

    def effective_raw(self, day: DateLike, default_score: float) -> float:
        rec = self._records.get(to_date_key(day))
        if rec is None or rec.raw is None:
            return default_score
        return rec.raw

    def effective_claim(self, day: DateLike) -> int:
        rec = self._records.get(to_date_key(day))
        if rec is None or rec.claim is None:
            return 0
        return rec.claim

    def dates(self) -> List[str]:
        return sorted(self._records)

    def clear(self) -> None:
        self._records.clear()

    def prune_after(self, cutoff: DateLike) -> int:
        """Drop entries dated strictly after `cutoff`; returns how many were removed."""
        cutoff_key = to_date_key(cutoff)
        stale = [k for k in self._records if k > cutoff_key]
        for k in stale:
            del self._records[k]
        if stale:
            logger.debug("pruned %d ledger entries after %s", len(stale), cutoff_key)
        return len(stale)

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        return {k: self._records[k].to_dict() for k in sorted(self._records)}

    @classmethod
    def from_snapshot(cls, data: Optional[Mapping[str, Any]]) -> "DailyLedger":
        ledger = cls()
        for k, v in (data or {}).items():
            if not isinstance(v, Mapping):
                logger.debug("skipping non-mapping ledger entry for %s", k)
                continue
            raw = v.get(FIELD_RAW)
            claim = v.get(FIELD_CLAIM)
            ledger._records[to_date_key(k)] = DailyRecord(
                raw=None if raw is None else parse_int_lenient(raw),
                claim=None if claim is None else parse_int_lenient(claim),
            )
        return ledger

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, day: object) -> bool:
        try:
            return to_date_key(day) in self._records  # type: ignore[arg-type]
        except ValueError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self.dates())
