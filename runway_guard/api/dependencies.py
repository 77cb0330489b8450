"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from runway_guard.domain.thresholds import ThresholdEvaluator
from runway_guard.infrastructure.database.repositories import (
    BankAccountRepository,
    NotificationPreferenceRepository,
    TransactionRepository,
)
from runway_guard.infrastructure.database.session import get_db
from runway_guard.infrastructure.notifications.dispatcher import NotificationDispatcher


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_transaction_repository(db: Session = Depends(get_db)) -> TransactionRepository:
    return TransactionRepository(db)


def get_bank_account_repository(db: Session = Depends(get_db)) -> BankAccountRepository:
    return BankAccountRepository(db)


def get_preference_repository(db: Session = Depends(get_db)) -> NotificationPreferenceRepository:
    return NotificationPreferenceRepository(db)


def get_threshold_evaluator(
    transactions: TransactionRepository = Depends(get_transaction_repository),
    accounts: BankAccountRepository = Depends(get_bank_account_repository),
) -> ThresholdEvaluator:
    """Provide an evaluator wired to the database sources"""
    return ThresholdEvaluator(transactions, accounts)


def get_dispatcher() -> NotificationDispatcher:
    """Provide a notification dispatcher with the configured channels and routing"""
    return NotificationDispatcher()
