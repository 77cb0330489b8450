"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from runway_guard.domain.exceptions import ValidationError


class Severity(str, Enum):
    """Ordinal alert importance: info < warning < critical"""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


class AlertType(str, Enum):
    RUNWAY_CRITICAL = "runway_critical"
    RUNWAY_WARNING = "runway_warning"
    VENDOR_SPIKE = "vendor_spike"
    BURN_ACCELERATION = "burn_acceleration"
    LARGE_TRANSACTION = "large_transaction"


class ChannelType(str, Enum):
    EMAIL = "email"
    SLACK = "slack"
    SMS = "sms"


def to_decimal(value: Any) -> Decimal:
    """Parse an external amount; anything unparseable or non-finite counts as zero"""
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


@dataclass(frozen=True)
class Transaction:
    """Bank transaction with signed amount: positive = credit (inflow), negative = debit (outflow)"""

    id: str
    date: date
    amount: Decimal
    type: str  # "credit" or "debit"
    vendor_normalized: Optional[str] = None
    category_id: Optional[str] = None
    is_recurring: bool = False
    is_payroll: Optional[bool] = None  # None = unknown, fall back to vendor keywords

    @property
    def is_debit(self) -> bool:
        return self.type == "debit"

    @property
    def is_credit(self) -> bool:
        return self.type == "credit"

    @classmethod
    def from_record(
        cls,
        id: str,
        date: date | datetime,
        amount: Any,
        type: Optional[str] = None,
        vendor_normalized: Optional[str] = None,
        vendor_original: Optional[str] = None,
        description: Optional[str] = None,
        category_id: Optional[str] = None,
        is_recurring: Optional[bool] = None,
        is_payroll: Optional[bool] = None,
    ) -> "Transaction":
        """
        Normalize an external transaction row into the signed form.

        Sources either store an unsigned amount plus an explicit type, or a
        signed amount with no type. A credit or debit type wins and the sign
        is forced to match it; a missing or unrecognized type ("transfer",
        "adjustment") is derived from the sign.
        """
        value = to_decimal(amount)
        txn_type = (type or "").strip().lower()

        if txn_type in ("credit", "debit"):
            value = abs(value) if txn_type == "credit" else -abs(value)
        else:
            txn_type = "credit" if value >= 0 else "debit"

        if isinstance(date, datetime):
            date = date.date()

        return cls(
            id=str(id),
            date=date,
            amount=value,
            type=txn_type,
            vendor_normalized=vendor_normalized or vendor_original or description or None,
            category_id=category_id,
            is_recurring=bool(is_recurring),
            is_payroll=is_payroll,
        )


@dataclass
class BurnMetrics:
    """Monthly-equivalent cash outflow over a date window"""

    gross_burn: Decimal
    net_burn: Decimal
    revenue: Decimal = Decimal("0")
    payroll: Decimal = Decimal("0")
    non_payroll: Decimal = Decimal("0")
    recurring: Decimal = Decimal("0")
    one_time: Decimal = Decimal("0")
    window_months: float = 0.0


@dataclass
class RunwayMetrics:
    """Months of cash left at current net burn; inf when not burning"""

    runway_months: float
    zero_date: Optional[date]
    current_cash: Decimal
    monthly_burn: Decimal

    @property
    def is_indefinite(self) -> bool:
        return math.isinf(self.runway_months)


@dataclass
class RunwayScenario:
    """What-if adjustment applied on top of the baseline runway"""

    name: str
    burn_multiplier: float = 1.0
    cash_adjustment: Decimal = Decimal("0")


@dataclass
class VendorSpike:
    """Period-over-period spend increase for one normalized vendor"""

    vendor: str
    previous_period: Decimal
    current_period: Decimal
    change_percent: float


@dataclass(frozen=True)
class ThresholdAlert:
    """Alert produced by a single threshold evaluation pass"""

    type: AlertType
    title: str
    message: str
    severity: Severity
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True)
class ThresholdConfig:
    """Alert thresholds; amounts in dollars, changes in percent"""

    runway_warning_months: float = 6
    runway_critical_months: float = 3
    vendor_spike_threshold: float = 30
    burn_acceleration_threshold: float = 20
    large_transaction_threshold: Decimal = Decimal("10000")

    def merged(self, **overrides: Any) -> "ThresholdConfig":
        """Return a copy with the given (non-None) overrides applied"""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValidationError(f"Unknown threshold settings: {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass
class NotificationChannel:
    type: ChannelType
    enabled: bool
    destination: Optional[str] = None


@dataclass
class NotificationPreferences:
    """Per-user delivery preferences; quiet hours are "HH:MM" strings"""

    min_severity: Severity = Severity.WARNING
    quiet_hours_start: Optional[str] = None
    quiet_hours_end: Optional[str] = None
    timezone: Optional[str] = None


@dataclass
class NotificationConfig:
    user_id: str
    channels: List[NotificationChannel]
    preferences: NotificationPreferences
    organization_id: Optional[str] = None

    def active_channels(self) -> List[NotificationChannel]:
        """Enabled channels that have somewhere to deliver to"""
        return [c for c in self.channels if c.enabled and c.destination]


@dataclass
class NotificationMessage:
    """Channel-agnostic notification payload"""

    title: str
    body: str
    severity: Severity
    action_url: Optional[str] = None
    type: str = "alert"  # "insight" | "alert" | "summary"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_alert(cls, alert: ThresholdAlert, action_url: Optional[str] = None) -> "NotificationMessage":
        return cls(
            title=alert.title,
            body=alert.message,
            severity=alert.severity,
            action_url=action_url,
            metadata=dict(alert.metadata),
        )


@dataclass
class NotificationResult:
    """Outcome of one dispatch attempt on one channel"""

    channel: str
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


@dataclass
class DispatchSummary:
    sent: int
    results: List[NotificationResult]


@dataclass
class DigestInsight:
    type: str
    message: str
    severity: Severity


@dataclass
class VendorTotal:
    name: str
    amount: Decimal


@dataclass
class WeeklyDigestData:
    """A week's worth of metrics summarized for the digest email"""

    company_name: str
    current_cash: Decimal
    runway_months: Optional[float]  # None = profitable / indefinite
    monthly_burn: Decimal
    burn_change: float  # Percent vs previous month
    insights: List[DigestInsight]
    top_vendors: List[VendorTotal]
    week_start_date: date
    week_end_date: date


@dataclass
class FormattedDigest:
    subject: str
    body: str
    html: str
