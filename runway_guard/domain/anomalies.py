"""Spend anomaly detection - vendor spikes and large one-off charges"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from runway_guard.domain.models import Transaction, VendorSpike
from runway_guard.utils.date_utils import add_months

DEFAULT_MATERIALITY_FLOOR = Decimal("100")


def _vendor_totals(transactions: Iterable[Transaction], start: date, end: date) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for txn in transactions:
        if not txn.is_debit or not txn.vendor_normalized:
            continue
        if start <= txn.date < end:
            totals[txn.vendor_normalized] += abs(txn.amount)
    return totals


def detect_vendor_spikes(
    transactions: Iterable[Transaction],
    threshold_percent: float = 30,
    today: Optional[date] = None,
    materiality_floor: Decimal = DEFAULT_MATERIALITY_FLOOR,
    period_months: int = 1,
) -> List[VendorSpike]:
    """
    Compare each vendor's spend in the trailing period against the period
    of equal calendar length before it.

    Exclusions:
    - vendors with no prior-period spend: a new vendor has no meaningful
      percent change, so it is skipped rather than reported as a spike
    - vendors whose current-period spend is below `materiality_floor`
    - changes below `threshold_percent`

    Returns spikes sorted by change_percent, largest first.
    """
    txns = list(transactions)
    period_end = (today or date.today()) + timedelta(days=1)
    current_start = add_months(period_end, -period_months)
    previous_start = add_months(period_end, -2 * period_months)

    current_by_vendor = _vendor_totals(txns, current_start, period_end)
    previous_by_vendor = _vendor_totals(txns, previous_start, current_start)

    spikes = []
    for vendor, current in current_by_vendor.items():
        previous = previous_by_vendor.get(vendor, Decimal("0"))
        if previous <= 0 or current < materiality_floor:
            continue

        change_percent = float((current - previous) / previous * 100)
        if change_percent >= threshold_percent:
            spikes.append(
                VendorSpike(
                    vendor=vendor,
                    previous_period=previous,
                    current_period=current,
                    change_percent=change_percent,
                )
            )

    return sorted(spikes, key=lambda s: s.change_percent, reverse=True)


def find_large_debits(
    transactions: Iterable[Transaction],
    threshold: Decimal,
    today: Optional[date] = None,
    lookback_days: int = 30,
) -> List[Transaction]:
    """Debits in the trailing `lookback_days` whose absolute amount exceeds `threshold`"""
    today = today or date.today()
    since = today - timedelta(days=lookback_days)
    return [
        txn
        for txn in transactions
        if txn.is_debit and since <= txn.date <= today and abs(txn.amount) > threshold
    ]
