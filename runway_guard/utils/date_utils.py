"""Date manipulation utilities"""

from datetime import date
from typing import Tuple
from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of short months (Jan 31 + 1 = Feb 28)"""
    return from_date + relativedelta(months=months)


def months_between(start: date, end: date) -> float:
    """
    Length of the half-open window [start, end) in calendar months.

    Whole calendar months are counted exactly; leftover days are expressed as a
    fraction of the calendar month that follows the last whole month, so
    Jul 18 -> Oct 18 is exactly 3.0 and Feb 1 -> Feb 15 is 14/28.
    """
    if end <= start:
        return 0.0

    delta = relativedelta(end, start)
    whole = delta.years * 12 + delta.months
    anchor = add_months(start, whole)
    remaining_days = (end - anchor).days
    if remaining_days <= 0:
        return float(whole)

    next_anchor = add_months(start, whole + 1)
    return whole + remaining_days / (next_anchor - anchor).days


def trailing_window(end: date, months: int) -> Tuple[date, date]:
    """Half-open window covering the `months` calendar months before `end`"""
    return add_months(end, -months), end


def month_bounds(day: date) -> Tuple[date, date]:
    """First day of the month containing `day` and the first day of the next month"""
    start = day.replace(day=1)
    return start, add_months(start, 1)
