"""
Leave and attendance arithmetic.

Pure functions over dates and numbers: accrual, pro-rating, inclusive day
counts, overlap tests and worked/overtime hours. Nothing here touches storage
or reads the wall clock; callers pass `today`/`now` explicitly.
"""
import math
from datetime import date, datetime
from typing import Iterable, Optional, Union

DateLike = Union[date, datetime]


def round2(value: float) -> float:
    """Round half up to 2 decimal places."""
    return math.floor(value * 100 + 0.5) / 100


def _as_date(value: DateLike) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def month_diff(start: DateLike, end: DateLike) -> int:
    """Calendar months between two dates, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def monthly_accrual_rate(annual_entitlement: float) -> float:
    return annual_entitlement / 12


def pro_rated_entitlement(
    annual_entitlement: float,
    joining_date: DateLike,
    year: int,
    include_join_month: bool = True,
) -> float:
    """
    Entitlement for an employee who joined during `year`.

    The joining month counts as worked, so someone joining in January gets the
    full annual amount and someone joining in December gets one month's worth.
    Returns 0 when the joining date is not in `year`.
    """
    if joining_date.year != year:
        return 0
    join_month = joining_date.month - 1  # 0-11
    months_remaining = 12 - join_month if include_join_month else 11 - join_month
    return round2(monthly_accrual_rate(annual_entitlement) * months_remaining)


def accrued_days(monthly_rate: float, joining_date: DateLike, current_date: DateLike) -> float:
    """
    Days earned from `joining_date` up to `current_date`.

    The current month counts once the joining day-of-month has been reached.
    Never negative; callers clamp against the year's entitlement.
    """
    months_worked = month_diff(joining_date, current_date)
    if current_date.day >= joining_date.day:
        months_worked += 1
    return round2(monthly_rate * max(0, months_worked))


def is_on_probation(joining_date: DateLike, probation_months: int, current_date: DateLike) -> bool:
    return month_diff(joining_date, current_date) < probation_months


def total_inclusive_days(start_date: DateLike, end_date: DateLike) -> int:
    """
    Days between two dates, both inclusive, after normalizing to midnight.

    Returns 0 when start is after end; callers must reject that range before
    creating a leave request.
    """
    start = _as_date(start_date)
    end = _as_date(end_date)
    if start > end:
        return 0
    return (end - start).days + 1


def ranges_overlap(start_a: DateLike, end_a: DateLike, start_b: DateLike, end_b: DateLike) -> bool:
    """Closed-interval overlap: a shared boundary day counts."""
    return _as_date(start_a) <= _as_date(end_b) and _as_date(end_a) >= _as_date(start_b)


def overlaps_blackout(start_date: DateLike, end_date: DateLike, blackout_windows: Iterable) -> bool:
    return any(
        ranges_overlap(start_date, end_date, window.start, window.end)
        for window in blackout_windows
    )


def worked_hours(check_in: datetime, check_out: datetime) -> float:
    return round2((check_out - check_in).total_seconds() / 3600)


def overtime_hours(hours: float, standard_hours: float = 8) -> float:
    if hours > standard_hours:
        return round2(hours - standard_hours)
    return 0.0


def hours_and_overtime(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
    standard_hours: float = 8,
):
    """(total_hours, overtime_hours) for a record; zeros until both stamps exist."""
    if not check_in or not check_out:
        return 0.0, 0.0
    hours = worked_hours(check_in, check_out)
    return hours, overtime_hours(hours, standard_hours)
