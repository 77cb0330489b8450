"""Unit tests for burn rate calculation"""

import pytest
from datetime import date
from decimal import Decimal
from runway_guard.domain.burn import (
    calculate_burn_rate,
    calculate_burn_trend,
    calculate_monthly_burn,
    is_payroll_transaction,
)


def test_burn_rate_quarter_scenario(steady_quarter):
    """$90k debits / $20k credits over 3 calendar months -> ~$23,333/mo net"""
    burn = calculate_burn_rate(steady_quarter, date(2025, 3, 16), date(2025, 6, 16))

    assert burn.window_months == 3.0
    assert burn.gross_burn == Decimal("30000")
    assert float(burn.net_burn) == pytest.approx(23333.33, abs=0.01)
    assert float(burn.revenue) == pytest.approx(6666.67, abs=0.01)


def test_burn_rate_window_is_half_open(make_txn):
    transactions = [
        make_txn(date(2025, 5, 1), -100),  # On start: included
        make_txn(date(2025, 6, 1), -900),  # On end: excluded
    ]
    burn = calculate_burn_rate(transactions, date(2025, 5, 1), date(2025, 6, 1))

    assert burn.gross_burn == Decimal("100")


def test_burn_rate_empty_window_is_zero(make_txn):
    burn = calculate_burn_rate([], date(2025, 5, 1), date(2025, 6, 1))
    assert burn.gross_burn == 0
    assert burn.net_burn == 0

    # Degenerate window: no division by zero
    burn = calculate_burn_rate([make_txn(date(2025, 5, 1), -100)], date(2025, 5, 1), date(2025, 5, 1))
    assert burn.gross_burn == 0


def test_net_burn_negative_when_credits_exceed_debits(make_txn):
    transactions = [
        make_txn(date(2025, 5, 3), -1000),
        make_txn(date(2025, 5, 10), 4000),
    ]
    burn = calculate_burn_rate(transactions, date(2025, 5, 1), date(2025, 6, 1))

    assert burn.gross_burn == Decimal("1000")
    assert burn.net_burn == Decimal("-3000")
    assert burn.gross_burn >= 0


def test_partial_month_is_scaled_to_monthly_rate(make_txn):
    """Half of February (14 of 28 days) doubles to a monthly figure"""
    transactions = [make_txn(date(2025, 2, 5), -500)]
    burn = calculate_burn_rate(transactions, date(2025, 2, 1), date(2025, 2, 15))

    assert float(burn.gross_burn) == pytest.approx(1000)


def test_burn_breakdown_payroll_and_recurring(make_txn):
    transactions = [
        make_txn(date(2025, 5, 1), -6000, vendor="Gusto Payroll"),  # Keyword match
        make_txn(date(2025, 5, 2), -2000, vendor="Contractor", is_payroll=True),  # Explicit flag
        make_txn(date(2025, 5, 3), -300, vendor="ADP Fees", is_payroll=False),  # Flag beats keyword
        make_txn(date(2025, 5, 4), -700, vendor="Figma", is_recurring=True),
    ]
    burn = calculate_burn_rate(transactions, date(2025, 5, 1), date(2025, 6, 1))

    assert burn.payroll == Decimal("8000")
    assert burn.non_payroll == Decimal("1000")
    assert burn.recurring == Decimal("700")
    assert burn.one_time == Decimal("8300")


def test_is_payroll_transaction_keywords(make_txn):
    assert is_payroll_transaction(make_txn(date(2025, 5, 1), -1, vendor="RIPPLING INC"))
    assert not is_payroll_transaction(make_txn(date(2025, 5, 1), -1, vendor="AWS"))
    assert not is_payroll_transaction(make_txn(date(2025, 5, 1), -1, vendor=None))


def test_monthly_burn_uses_trailing_window(steady_quarter, today):
    assert float(calculate_monthly_burn(steady_quarter, 3, today)) == pytest.approx(23333.33, abs=0.01)


def test_burn_trend_per_calendar_month(make_txn, today):
    transactions = [
        make_txn(date(2025, 4, 10), -1000),
        make_txn(date(2025, 5, 10), -3000),
        make_txn(date(2025, 5, 20), 500),
        make_txn(date(2025, 6, 2), -200),
    ]
    trend = calculate_burn_trend(transactions, months=3, today=today)

    assert [month for month, _ in trend] == [date(2025, 4, 1), date(2025, 5, 1), date(2025, 6, 1)]
    assert [burn for _, burn in trend] == [Decimal("1000"), Decimal("2500"), Decimal("200")]
