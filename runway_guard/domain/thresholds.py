"""Threshold evaluator - turns burn, runway and spend metrics into ranked alerts"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Protocol

from runway_guard.domain.anomalies import detect_vendor_spikes, find_large_debits
from runway_guard.domain.burn import calculate_burn_rate
from runway_guard.domain.models import (
    AlertType,
    BurnMetrics,
    RunwayMetrics,
    Severity,
    ThresholdAlert,
    ThresholdConfig,
    Transaction,
    to_decimal,
)
from runway_guard.domain.runway import runway_from_burn
from runway_guard.utils.date_utils import add_months

MAX_ALERTS = 5
HISTORY_MONTHS = 6
BURN_WINDOW_MONTHS = 3
MAX_VENDOR_SPIKE_ALERTS = 3
VENDOR_SPIKE_REPORT_PERCENT = 50
LARGE_TRANSACTION_LOOKBACK_DAYS = 30


class TransactionSource(Protocol):
    def get_organization_transactions(self, organization_id: str, start: date, end: date) -> List[Transaction]:
        ...


class BalanceSource(Protocol):
    def get_total_cash(self, user_id: str) -> Decimal:
        ...


def format_currency(amount: Decimal) -> str:
    return f"${abs(amount):,.0f}"


def vendor_spike_severity(change_percent: float) -> Severity:
    return Severity.WARNING if change_percent >= 100 else Severity.INFO


def burn_acceleration_severity(change_percent: float) -> Severity:
    return Severity.WARNING if change_percent > 40 else Severity.INFO


def large_transaction_severity(amount: Decimal, threshold: Decimal) -> Severity:
    return Severity.WARNING if amount > threshold * 5 else Severity.INFO


def runway_alert(runway: RunwayMetrics, config: ThresholdConfig) -> Optional[ThresholdAlert]:
    """At most one runway alert; critical supersedes warning"""
    if runway.is_indefinite:
        return None

    months = runway.runway_months
    burn = format_currency(runway.monthly_burn)

    if months < config.runway_critical_months:
        zero_date = runway.zero_date.strftime("%b %d, %Y") if runway.zero_date else "soon"
        return ThresholdAlert(
            type=AlertType.RUNWAY_CRITICAL,
            title="Critical Runway Alert",
            message=(
                f"Your runway is only {months:.1f} months. At current burn rate ({burn}/mo), "
                f"you'll run out of cash by {zero_date}."
            ),
            severity=Severity.CRITICAL,
            metadata={
                "runway_months": months,
                "monthly_burn": float(runway.monthly_burn),
                "current_cash": float(runway.current_cash),
                "zero_date": runway.zero_date.isoformat() if runway.zero_date else None,
            },
        )

    if months < config.runway_warning_months:
        return ThresholdAlert(
            type=AlertType.RUNWAY_WARNING,
            title="Runway Warning",
            message=f"Your runway is {months:.1f} months. Consider reducing burn or raising funds soon.",
            severity=Severity.WARNING,
            metadata={
                "runway_months": months,
                "monthly_burn": float(runway.monthly_burn),
                "current_cash": float(runway.current_cash),
            },
        )

    return None


def burn_acceleration_alert(
    current: BurnMetrics,
    previous: BurnMetrics,
    config: ThresholdConfig,
) -> Optional[ThresholdAlert]:
    """Month-over-month gross burn increase; skipped when last month had no burn"""
    if previous.gross_burn <= 0:
        return None

    change = float((current.gross_burn - previous.gross_burn) / previous.gross_burn * 100)
    if change <= config.burn_acceleration_threshold:
        return None

    return ThresholdAlert(
        type=AlertType.BURN_ACCELERATION,
        title="Burn Rate Acceleration",
        message=(
            f"Your burn rate increased {change:.0f}% this month "
            f"({format_currency(previous.gross_burn)} → {format_currency(current.gross_burn)})."
        ),
        severity=burn_acceleration_severity(change),
        metadata={
            "previous_burn": float(previous.gross_burn),
            "current_burn": float(current.gross_burn),
            "change_percent": change,
        },
    )


@dataclass
class ThresholdEvaluation:
    """Alerts from one evaluation pass; `error` is set when the pass stopped early"""

    alerts: List[ThresholdAlert]
    error: Optional[Exception] = None

    @property
    def partial(self) -> bool:
        return self.error is not None


class ThresholdEvaluator:
    """
    Evaluates an organization's financials against alert thresholds.

    Data comes from injected sources so the evaluator can run against the
    database, a remote API, or in-memory fixtures.
    """

    def __init__(
        self,
        transaction_source: TransactionSource,
        balance_source: BalanceSource,
        config: ThresholdConfig | None = None,
    ):
        self.transaction_source = transaction_source
        self.balance_source = balance_source
        self.config = config or ThresholdConfig()

    def check_thresholds(
        self,
        organization_id: str,
        user_id: str,
        today: date | None = None,
    ) -> List[ThresholdAlert]:
        """At most MAX_ALERTS alerts; never raises (see `evaluate`)"""
        return self.evaluate(organization_id, user_id, today).alerts

    def evaluate(
        self,
        organization_id: str,
        user_id: str,
        today: date | None = None,
    ) -> ThresholdEvaluation:
        """
        Run every threshold check and keep at most MAX_ALERTS alerts.

        Order of checks (and so priority under truncation):
        1. Runway (critical or warning)
        2. Top vendor spikes >= 50%
        3. Month-over-month burn acceleration
        4. Large debits in the trailing 30 days

        Never raises: a failure part-way through is returned as `error`
        alongside the alerts collected so far, so callers such as a dashboard
        load are not blocked by a metrics problem.
        """
        today = today or date.today()
        window_end = today + timedelta(days=1)
        alerts: List[ThresholdAlert] = []

        try:
            transactions = self.transaction_source.get_organization_transactions(
                organization_id,
                add_months(window_end, -HISTORY_MONTHS),
                window_end,
            )
            if not transactions:
                return ThresholdEvaluation(alerts=alerts)

            current_cash = to_decimal(self.balance_source.get_total_cash(user_id))

            # 1. Runway from trailing net burn
            burn = calculate_burn_rate(
                transactions, add_months(window_end, -BURN_WINDOW_MONTHS), window_end
            )
            runway = runway_from_burn(current_cash, burn.net_burn, today)
            alert = runway_alert(runway, self.config)
            if alert:
                alerts.append(alert)

            # 2. Vendor spikes
            spikes = detect_vendor_spikes(transactions, self.config.vendor_spike_threshold, today)
            for spike in spikes[:MAX_VENDOR_SPIKE_ALERTS]:
                if spike.change_percent < VENDOR_SPIKE_REPORT_PERCENT:
                    continue
                alerts.append(
                    ThresholdAlert(
                        type=AlertType.VENDOR_SPIKE,
                        title="Vendor Cost Spike",
                        message=(
                            f"{spike.vendor} spending increased {spike.change_percent:.0f}% this month "
                            f"({format_currency(spike.previous_period)} → {format_currency(spike.current_period)})."
                        ),
                        severity=vendor_spike_severity(spike.change_percent),
                        metadata={
                            "vendor": spike.vendor,
                            "previous_amount": float(spike.previous_period),
                            "current_amount": float(spike.current_period),
                            "change_percent": spike.change_percent,
                        },
                    )
                )

            # 3. Burn acceleration: trailing month vs the month before
            one_month_ago = add_months(window_end, -1)
            this_month = calculate_burn_rate(transactions, one_month_ago, window_end)
            last_month = calculate_burn_rate(transactions, add_months(window_end, -2), one_month_ago)
            alert = burn_acceleration_alert(this_month, last_month, self.config)
            if alert:
                alerts.append(alert)

            # 4. Large transactions
            threshold = Decimal(str(self.config.large_transaction_threshold))
            for txn in find_large_debits(transactions, threshold, today, LARGE_TRANSACTION_LOOKBACK_DAYS):
                amount = abs(txn.amount)
                vendor = txn.vendor_normalized or "an unknown vendor"
                alerts.append(
                    ThresholdAlert(
                        type=AlertType.LARGE_TRANSACTION,
                        title="Large Transaction Detected",
                        message=(
                            f"Unusual charge of {format_currency(amount)} from {vendor} "
                            f"on {txn.date.strftime('%b %d, %Y')}."
                        ),
                        severity=large_transaction_severity(amount, threshold),
                        metadata={
                            "vendor": txn.vendor_normalized,
                            "amount": float(amount),
                            "date": txn.date.isoformat(),
                            "transaction_id": txn.id,
                        },
                    )
                )

        except Exception as e:
            return ThresholdEvaluation(alerts=alerts[:MAX_ALERTS], error=e)

        return ThresholdEvaluation(alerts=alerts[:MAX_ALERTS])
