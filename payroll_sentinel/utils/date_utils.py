"""Date manipulation utilities"""

import math
from datetime import date, datetime, timezone
from typing import Union

from payroll_sentinel.domain.exceptions import InvalidArgumentError

DateLike = Union[date, datetime, str]

SECONDS_PER_DAY = 86_400


def parse_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO-8601 string to a calendar date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid date: {value!r}") from e
    raise InvalidArgumentError(f"Invalid date: {value!r}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_until(target: DateLike, now: datetime) -> int:
    """
    Whole days from `now` to `target`, rounded up.

    Plain dates are compared on calendar days, which is the ceiling of the
    fractional difference to the target's midnight. Datetimes are compared
    to the instant; naive values are taken as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if isinstance(target, str) and len(target) > 10:
        try:
            target = datetime.fromisoformat(target.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid date: {target!r}") from e

    if isinstance(target, datetime):
        if target.tzinfo is None:
            target = target.replace(tzinfo=timezone.utc)
        return math.ceil((target - now).total_seconds() / SECONDS_PER_DAY)

    return (parse_date(target) - now.astimezone(timezone.utc).date()).days
