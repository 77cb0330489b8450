"""Data access layer feeding the threshold evaluator and notification dispatch"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from runway_guard.domain.exceptions import DataSourceError
from runway_guard.domain.models import (
    ChannelType,
    NotificationChannel,
    NotificationConfig,
    NotificationPreferences,
    Severity,
    Transaction,
    to_decimal,
)
from runway_guard.infrastructure.database.models import BankAccount, NotificationPreference, TransactionRecord


class TransactionRepository:
    """Repository for organization transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_organization_transactions(self, organization_id: str, start: date, end: date) -> List[Transaction]:
        """Transactions dated in [start, end), normalized to signed amounts"""
        try:
            rows = (
                self.db.query(TransactionRecord)
                .filter(TransactionRecord.organization_id == organization_id)
                .filter(TransactionRecord.date >= start)
                .filter(TransactionRecord.date < end)
                .order_by(TransactionRecord.date)
                .all()
            )
        except SQLAlchemyError as e:
            raise DataSourceError(f"Failed to load transactions for {organization_id}: {e}") from e

        return [
            Transaction.from_record(
                id=row.id,
                date=row.date,
                amount=row.amount,
                type=row.type,
                vendor_normalized=row.vendor_normalized,
                vendor_original=row.vendor_original,
                description=row.description,
                category_id=row.category_id,
                is_recurring=row.is_recurring,
                is_payroll=row.is_payroll,
            )
            for row in rows
        ]


class BankAccountRepository:
    """Repository for linked bank account balances"""

    def __init__(self, db: Session):
        self.db = db

    def get_total_cash(self, user_id: str) -> Decimal:
        """Sum of current balances across the user's linked accounts"""
        try:
            total = (
                self.db.query(func.coalesce(func.sum(BankAccount.current_balance), 0))
                .filter(BankAccount.user_id == user_id)
                .scalar()
            )
        except SQLAlchemyError as e:
            raise DataSourceError(f"Failed to load bank balances for {user_id}: {e}") from e

        return to_decimal(total)


class NotificationPreferenceRepository:
    """Repository for per-user notification settings"""

    def __init__(self, db: Session):
        self.db = db

    def get_config(self, user_id: str) -> Optional[NotificationConfig]:
        """User's notification config, or None when they never set preferences"""
        try:
            pref = (
                self.db.query(NotificationPreference)
                .filter(NotificationPreference.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise DataSourceError(f"Failed to load notification preferences for {user_id}: {e}") from e

        if not pref:
            return None

        try:
            min_severity = Severity(pref.min_severity or "warning")
        except ValueError:
            min_severity = Severity.WARNING

        return NotificationConfig(
            user_id=user_id,
            channels=[
                NotificationChannel(type=ChannelType.EMAIL, enabled=pref.email_enabled, destination=pref.email),
                NotificationChannel(
                    type=ChannelType.SLACK, enabled=pref.slack_enabled, destination=pref.slack_webhook_url
                ),
                NotificationChannel(type=ChannelType.SMS, enabled=pref.sms_enabled, destination=pref.sms_phone_number),
            ],
            preferences=NotificationPreferences(
                min_severity=min_severity,
                quiet_hours_start=pref.quiet_hours_start,
                quiet_hours_end=pref.quiet_hours_end,
                timezone=pref.timezone,
            ),
        )
