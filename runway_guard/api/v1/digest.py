"""GET /v1/digest/preview - render the weekly digest email without sending it"""

from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query, Request

from runway_guard.api.dependencies import (
    get_bank_account_repository,
    get_request_id,
    get_threshold_evaluator,
    get_transaction_repository,
)
from runway_guard.api.v1.alerts import evaluate_thresholds
from runway_guard.api.v1.schemas import DigestResponse
from runway_guard.config import settings
from runway_guard.domain.digest import build_weekly_digest, format_weekly_digest
from runway_guard.domain.thresholds import ThresholdEvaluator
from runway_guard.infrastructure.database.repositories import BankAccountRepository, TransactionRepository
from runway_guard.utils.date_utils import add_months

router = APIRouter()


@router.get("/digest/preview", response_model=DigestResponse)
def preview_digest(
    request: Request,
    organization_id: str = Query(..., min_length=1, description="Organization identifier"),
    user_id: str = Query(..., min_length=1, description="User whose bank balances count as cash"),
    company_name: str = Query("Your Company", description="Name shown in the digest header"),
    transactions: TransactionRepository = Depends(get_transaction_repository),
    accounts: BankAccountRepository = Depends(get_bank_account_repository),
    evaluator: ThresholdEvaluator = Depends(get_threshold_evaluator),
):
    """Digest for the week ending today"""
    today = date.today()
    window_end = today + timedelta(days=1)
    txns = transactions.get_organization_transactions(organization_id, add_months(window_end, -3), window_end)
    cash = accounts.get_total_cash(user_id)
    alerts = evaluate_thresholds(evaluator, organization_id, user_id, get_request_id(request), today)

    data = build_weekly_digest(company_name, txns, cash, alerts, today)
    digest = format_weekly_digest(data, f"{settings.app_base_url}/app")
    return DigestResponse(subject=digest.subject, body=digest.body, html=digest.html)
