"""Integration tests for the database repositories"""

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from runway_guard.domain.exceptions import DataSourceError
from runway_guard.domain.models import ChannelType, Severity
from runway_guard.infrastructure.database.models import BankAccount, NotificationPreference, TransactionRecord
from runway_guard.infrastructure.database.repositories import (
    BankAccountRepository,
    NotificationPreferenceRepository,
    TransactionRepository,
)


@pytest.fixture
def empty_session():
    """Session against a database with no tables, so every query fails"""
    engine = create_engine("sqlite://")
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()


def test_transactions_normalized_and_windowed(db):
    db.add_all(
        [
            TransactionRecord(
                id="t1", organization_id="org_1", date=date(2025, 6, 1), amount=Decimal("120.00"), type="debit",
                vendor_original="AMZN WEB SERVICES", vendor_normalized="AWS", is_recurring=True,
            ),
            TransactionRecord(
                id="t2", organization_id="org_1", date=date(2025, 6, 2), amount=Decimal("-45.50"),
                description="Card purchase",
            ),
            TransactionRecord(
                id="t3", organization_id="org_1", date=date(2025, 6, 3), amount=Decimal("900.00"),
                vendor_original="Stripe payout",
            ),
            TransactionRecord(id="t4", organization_id="org_1", date=date(2025, 7, 1), amount=Decimal("-1.00")),
            TransactionRecord(id="t5", organization_id="org_2", date=date(2025, 6, 2), amount=Decimal("-1.00")),
        ]
    )
    db.commit()

    txns = TransactionRepository(db).get_organization_transactions("org_1", date(2025, 6, 1), date(2025, 7, 1))

    assert [t.id for t in txns] == ["t1", "t2", "t3"]
    assert txns[0].amount == Decimal("-120.00")
    assert txns[0].vendor_normalized == "AWS"
    assert txns[0].is_recurring
    assert (txns[1].type, txns[1].vendor_normalized) == ("debit", "Card purchase")
    assert (txns[2].type, txns[2].amount) == ("credit", Decimal("900.00"))


def test_unrecognized_type_does_not_drop_the_set(db):
    db.add_all(
        [
            TransactionRecord(id="a", organization_id="org_1", date=date(2025, 6, 1), amount=Decimal("500.00"), type="debit"),
            TransactionRecord(id="b", organization_id="org_1", date=date(2025, 6, 2), amount=Decimal("-2500.00"), type="transfer"),
            TransactionRecord(id="c", organization_id="org_1", date=date(2025, 6, 3), amount=Decimal("80.00"), type="ADJUSTMENT"),
        ]
    )
    db.commit()

    txns = TransactionRepository(db).get_organization_transactions("org_1", date(2025, 6, 1), date(2025, 7, 1))

    assert [(t.id, t.type, t.amount) for t in txns] == [
        ("a", "debit", Decimal("-500.00")),
        ("b", "debit", Decimal("-2500.00")),
        ("c", "credit", Decimal("80.00")),
    ]


def test_total_cash_sums_accounts(db):
    db.add_all(
        [
            BankAccount(user_id="user_1", current_balance=Decimal("1500.25")),
            BankAccount(user_id="user_1", current_balance=Decimal("-200.00")),
            BankAccount(user_id="user_1", current_balance=None),
            BankAccount(user_id="user_2", current_balance=Decimal("99999.00")),
        ]
    )
    db.commit()

    repo = BankAccountRepository(db)
    assert repo.get_total_cash("user_1") == Decimal("1300.25")
    assert repo.get_total_cash("nobody") == Decimal("0")


def test_preferences_map_to_channels(db):
    db.add(
        NotificationPreference(
            user_id="user_1",
            email="cfo@example.com",
            email_enabled=True,
            slack_enabled=True,
            slack_webhook_url="https://hooks.slack.test/x",
            sms_enabled=True,
            sms_phone_number="+15550100",
            min_severity="critical",
            quiet_hours_start="22:00",
            quiet_hours_end="07:00",
            timezone="Europe/Berlin",
        )
    )
    db.commit()

    config = NotificationPreferenceRepository(db).get_config("user_1")

    assert [(c.type, c.enabled, c.destination) for c in config.channels] == [
        (ChannelType.EMAIL, True, "cfo@example.com"),
        (ChannelType.SLACK, True, "https://hooks.slack.test/x"),
        (ChannelType.SMS, True, "+15550100"),
    ]
    assert config.preferences.min_severity == Severity.CRITICAL
    assert config.preferences.quiet_hours_start == "22:00"
    assert config.preferences.timezone == "Europe/Berlin"


def test_preferences_unknown_severity_defaults_to_warning(db):
    db.add(NotificationPreference(user_id="user_1", email="a@example.com", min_severity="loud"))
    db.commit()

    config = NotificationPreferenceRepository(db).get_config("user_1")
    assert config.preferences.min_severity == Severity.WARNING


def test_missing_preferences(db):
    assert NotificationPreferenceRepository(db).get_config("nobody") is None


def test_database_errors_become_data_source_errors(empty_session):
    with pytest.raises(DataSourceError):
        TransactionRepository(empty_session).get_organization_transactions("org_1", date(2025, 1, 1), date(2025, 2, 1))
    with pytest.raises(DataSourceError):
        BankAccountRepository(empty_session).get_total_cash("user_1")
    with pytest.raises(DataSourceError):
        NotificationPreferenceRepository(empty_session).get_config("user_1")
