from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import List, Union

DateLike = Union[date, str]

DATE_KEY_FORMAT = "%Y-%m-%d"


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), DATE_KEY_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date key '{value}', expected YYYY-MM-DD") from None


def to_date_key(value: DateLike) -> str:
    """Canonical YYYY-MM-DD key; sorts lexicographically in calendar order."""
    return to_date(value).strftime(DATE_KEY_FORMAT)


def add_days(value: DateLike, n: int) -> str:
    return to_date_key(to_date(value) + timedelta(days=n))


def date_range(start: DateLike, count: int) -> List[str]:
    """`count` consecutive keys beginning at `start`."""
    first = to_date(start)
    return [to_date_key(first + timedelta(days=i)) for i in range(max(0, count))]


def today_key() -> str:
    return to_date_key(date.today())
