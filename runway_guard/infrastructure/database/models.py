"""SQLAlchemy ORM models for the tables the alerting core reads"""

import uuid
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Date, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class TransactionRecord(Base):
    """Bank or ledger transaction as stored by the ingestion pipeline"""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(Text, nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    type = Column(Text, nullable=True)  # null = sign of amount decides
    vendor_original = Column(Text, nullable=True)
    vendor_normalized = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    category_id = Column(Text, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    is_payroll = Column(Boolean, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class BankAccount(Base):
    """Linked bank account with its latest synced balance"""

    __tablename__ = "bank_accounts"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=True)
    current_balance = Column(Numeric(14, 2), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class NotificationPreference(Base):
    """Per-user notification settings"""

    __tablename__ = "notification_preferences"

    user_id = Column(Text, primary_key=True)
    email = Column(Text, nullable=True)
    email_enabled = Column(Boolean, nullable=False, default=True)
    slack_enabled = Column(Boolean, nullable=False, default=False)
    slack_webhook_url = Column(Text, nullable=True)
    sms_enabled = Column(Boolean, nullable=False, default=False)
    sms_phone_number = Column(Text, nullable=True)
    min_severity = Column(Text, nullable=False, default="warning")
    quiet_hours_start = Column(Text, nullable=True)  # "HH:MM"
    quiet_hours_end = Column(Text, nullable=True)
    timezone = Column(Text, nullable=True)
