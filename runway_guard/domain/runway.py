"""Runway calculation - months of cash remaining at the current net burn"""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from runway_guard.domain.burn import calculate_monthly_burn
from runway_guard.domain.models import RunwayMetrics, RunwayScenario, Transaction, to_decimal
from runway_guard.utils.date_utils import add_months

MAX_ZERO_DATE_MONTHS = 120  # Projections beyond 10 years are meaningless


def project_zero_date(today: date, runway_months: float) -> date:
    """
    Date the cash balance reaches zero.

    Whole months use calendar arithmetic; the fractional remainder is converted
    to days of the calendar month that follows.
    """
    if runway_months >= MAX_ZERO_DATE_MONTHS:
        return add_months(today, MAX_ZERO_DATE_MONTHS)

    whole = int(runway_months)
    fraction = runway_months - whole
    anchor = add_months(today, whole)
    month_length = (add_months(anchor, 1) - anchor).days
    return anchor + timedelta(days=int(fraction * month_length))


def runway_from_burn(current_cash: Decimal, monthly_burn: Decimal, today: Optional[date] = None) -> RunwayMetrics:
    """
    Runway for a given cash position and monthly net burn.

    - net burn <= 0: profitable or break-even, runway is inf with no zero date
    - cash <= 0 while burning: already out, runway is 0 and the zero date is today
    - otherwise cash / burn, unrounded
    """
    today = today or date.today()

    if monthly_burn <= 0:
        return RunwayMetrics(
            runway_months=math.inf,
            zero_date=None,
            current_cash=current_cash,
            monthly_burn=monthly_burn,
        )

    if current_cash <= 0:
        return RunwayMetrics(
            runway_months=0.0,
            zero_date=today,
            current_cash=current_cash,
            monthly_burn=monthly_burn,
        )

    runway_months = float(current_cash / monthly_burn)
    return RunwayMetrics(
        runway_months=runway_months,
        zero_date=project_zero_date(today, runway_months),
        current_cash=current_cash,
        monthly_burn=monthly_burn,
    )


def calculate_runway(
    transactions: Iterable[Transaction],
    current_cash: Decimal,
    today: Optional[date] = None,
    months: int = 3,
) -> RunwayMetrics:
    """Runway using the trailing `months` net burn as the current burn estimate"""
    monthly_burn = calculate_monthly_burn(transactions, months, today)
    return runway_from_burn(to_decimal(current_cash), monthly_burn, today)


def calculate_runway_with_scenarios(
    transactions: Iterable[Transaction],
    current_cash: Decimal,
    scenarios: List[RunwayScenario],
    today: Optional[date] = None,
) -> Dict[str, RunwayMetrics]:
    """Baseline runway plus one entry per named what-if scenario"""
    baseline = calculate_runway(transactions, current_cash, today)
    results = {"baseline": baseline}

    for scenario in scenarios:
        adjusted_burn = baseline.monthly_burn * Decimal(str(scenario.burn_multiplier))
        adjusted_cash = baseline.current_cash + to_decimal(scenario.cash_adjustment)
        results[scenario.name] = runway_from_burn(adjusted_cash, adjusted_burn, today)

    return results
