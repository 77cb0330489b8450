"""Unit tests for domain model normalization"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from runway_guard.domain.exceptions import ValidationError
from runway_guard.domain.models import (
    AlertType,
    NotificationMessage,
    Severity,
    ThresholdAlert,
    ThresholdConfig,
    Transaction,
    to_decimal,
)


def test_from_record_type_wins_over_sign():
    debit = Transaction.from_record(id=1, date=date(2025, 6, 1), amount="250.00", type="DEBIT")
    credit = Transaction.from_record(id=2, date=date(2025, 6, 1), amount=-75, type="credit")

    assert debit.amount == Decimal("-250.00")
    assert debit.is_debit
    assert credit.amount == Decimal("75")
    assert credit.is_credit


def test_from_record_derives_type_from_sign():
    txn = Transaction.from_record(id="t", date=datetime(2025, 6, 1, 9, 30), amount=-12.5)

    assert txn.type == "debit"
    assert txn.date == date(2025, 6, 1)
    assert txn.id == "t"


def test_from_record_vendor_fallbacks():
    assert Transaction.from_record(
        id=1, date=date(2025, 6, 1), amount=-1, vendor_normalized="AWS", vendor_original="AMZN WEB SVCS"
    ).vendor_normalized == "AWS"
    assert Transaction.from_record(
        id=1, date=date(2025, 6, 1), amount=-1, vendor_original="AMZN WEB SVCS"
    ).vendor_normalized == "AMZN WEB SVCS"
    assert Transaction.from_record(
        id=1, date=date(2025, 6, 1), amount=-1, description="Wire transfer"
    ).vendor_normalized == "Wire transfer"
    assert Transaction.from_record(id=1, date=date(2025, 6, 1), amount=-1).vendor_normalized is None


def test_from_record_unknown_type_uses_sign():
    transfer_out = Transaction.from_record(id=1, date=date(2025, 6, 1), amount="-300", type="transfer")
    refund = Transaction.from_record(id=2, date=date(2025, 6, 1), amount=40, type="Refund")

    assert (transfer_out.type, transfer_out.amount) == ("debit", Decimal("-300"))
    assert (refund.type, refund.amount) == ("credit", Decimal("40"))


@pytest.mark.parametrize("value,expected", [(None, "0"), ("", "0"), ("abc", "0"), ("NaN", "0"), ("12.34", "12.34"), (7, "7")])
def test_to_decimal(value, expected):
    assert to_decimal(value) == Decimal(expected)


def test_threshold_config_merged():
    config = ThresholdConfig().merged(runway_warning_months=12, runway_critical_months=None)

    assert config.runway_warning_months == 12
    assert config.runway_critical_months == 3
    assert ThresholdConfig().runway_warning_months == 6


def test_threshold_config_rejects_unknown_settings():
    with pytest.raises(ValidationError):
        ThresholdConfig().merged(runway_panic_months=1)


def test_severity_ordering():
    assert Severity.INFO.rank < Severity.WARNING.rank < Severity.CRITICAL.rank


def test_message_from_alert_copies_metadata():
    alert = ThresholdAlert(
        type=AlertType.LARGE_TRANSACTION,
        title="Large Transaction",
        message="$60,000 to Acquisition",
        severity=Severity.WARNING,
        metadata={"vendor": "Acquisition"},
    )
    message = NotificationMessage.from_alert(alert, "https://app.example.com/app")

    assert message.body == alert.message
    assert message.action_url == "https://app.example.com/app"
    message.metadata["vendor"] = "changed"
    assert alert.metadata["vendor"] == "Acquisition"
