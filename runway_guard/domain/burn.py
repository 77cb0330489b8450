"""Burn rate engine - monthly-equivalent cash outflow over a date window"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from runway_guard.domain.models import BurnMetrics, Transaction
from runway_guard.utils.date_utils import add_months, month_bounds, months_between, trailing_window

PAYROLL_KEYWORDS = (
    "payroll",
    "salary",
    "wage",
    "gusto",
    "adp",
    "paychex",
    "rippling",
    "justworks",
    "deel",
    "remote.com",
)

ZERO = Decimal("0")


def is_payroll_transaction(txn: Transaction) -> bool:
    """Explicit flag wins; otherwise match well-known payroll vendors"""
    if txn.is_payroll is not None:
        return txn.is_payroll

    vendor = (txn.vendor_normalized or "").lower()
    return any(keyword in vendor for keyword in PAYROLL_KEYWORDS)


def per_month(total: Decimal, months: float) -> Decimal:
    """Scale a window total to a monthly rate"""
    if months <= 0:
        return ZERO
    return total / Decimal(str(months))


def calculate_burn_rate(transactions: Iterable[Transaction], start: date, end: date) -> BurnMetrics:
    """
    Aggregate burn over the half-open window [start, end).

    Gross burn is the sum of debit outflows; net burn subtracts credits, so it
    goes negative when the business grows cash. Every figure is normalized to a
    monthly rate by dividing by the window's calendar-month length (see
    `months_between`), not by a fixed 30-day divisor.

    An empty or degenerate window yields zero burn.
    """
    months = months_between(start, end)

    revenue = ZERO
    gross = ZERO
    payroll = ZERO
    non_payroll = ZERO
    recurring = ZERO
    one_time = ZERO

    for txn in transactions:
        if not (start <= txn.date < end):
            continue

        amount = abs(txn.amount)
        if txn.is_credit:
            revenue += amount
            continue

        gross += amount
        if is_payroll_transaction(txn):
            payroll += amount
        else:
            non_payroll += amount

        if txn.is_recurring:
            recurring += amount
        else:
            one_time += amount

    return BurnMetrics(
        gross_burn=per_month(gross, months),
        net_burn=per_month(gross - revenue, months),
        revenue=per_month(revenue, months),
        payroll=per_month(payroll, months),
        non_payroll=per_month(non_payroll, months),
        recurring=per_month(recurring, months),
        one_time=per_month(one_time, months),
        window_months=months,
    )


def trailing_burn(transactions: Iterable[Transaction], months: int = 3, today: Optional[date] = None) -> BurnMetrics:
    """Burn over the trailing `months` calendar months, today included"""
    start, end = trailing_window(_window_end(today), months)
    return calculate_burn_rate(transactions, start, end)


def calculate_monthly_burn(transactions: Iterable[Transaction], months: int = 3, today: Optional[date] = None) -> Decimal:
    """Most recent monthly net burn estimate"""
    return trailing_burn(transactions, months, today).net_burn


def calculate_burn_trend(
    transactions: Iterable[Transaction],
    months: int = 6,
    today: Optional[date] = None,
) -> List[Tuple[date, Decimal]]:
    """Net burn for each of the last `months` calendar months, oldest first"""
    txns = list(transactions)
    current_month_start, _ = month_bounds(today or date.today())

    trend = []
    for offset in range(months - 1, -1, -1):
        month_start = add_months(current_month_start, -offset)
        month_end = add_months(month_start, 1)
        # Exactly one calendar month, so the divisor is 1
        burn = calculate_burn_rate(txns, month_start, month_end)
        trend.append((month_start, burn.net_burn))

    return trend


def _window_end(today: Optional[date]) -> date:
    """Exclusive end for trailing windows so that today's transactions count"""
    return (today or date.today()) + timedelta(days=1)
