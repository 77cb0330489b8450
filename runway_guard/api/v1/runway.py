"""GET /v1/metrics/runway - current burn and runway"""

from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query

from runway_guard.api.dependencies import get_bank_account_repository, get_transaction_repository
from runway_guard.api.v1.schemas import RunwayResponse
from runway_guard.domain.burn import trailing_burn
from runway_guard.domain.runway import runway_from_burn
from runway_guard.infrastructure.database.repositories import BankAccountRepository, TransactionRepository
from runway_guard.utils.date_utils import add_months

router = APIRouter()


@router.get("/metrics/runway", response_model=RunwayResponse)
def get_runway(
    organization_id: str = Query(..., min_length=1, description="Organization identifier"),
    user_id: str = Query(..., min_length=1, description="User whose bank balances count as cash"),
    months: int = Query(3, ge=1, le=12, description="Trailing months used for the burn estimate"),
    transactions: TransactionRepository = Depends(get_transaction_repository),
    accounts: BankAccountRepository = Depends(get_bank_account_repository),
):
    """
    Burn and runway from the trailing window.

    Data source failures surface as 503 through the domain exception handler.
    Indefinite runway (not burning) is returned as null with indefinite=true.
    """
    today = date.today()
    window_end = today + timedelta(days=1)
    txns = transactions.get_organization_transactions(organization_id, add_months(window_end, -months), window_end)
    cash = accounts.get_total_cash(user_id)

    burn = trailing_burn(txns, months, today)
    runway = runway_from_burn(cash, burn.net_burn, today)

    return RunwayResponse(
        organization_id=organization_id,
        current_cash=float(cash),
        gross_burn=float(burn.gross_burn),
        net_burn=float(burn.net_burn),
        revenue=float(burn.revenue),
        payroll=float(burn.payroll),
        runway_months=None if runway.is_indefinite else runway.runway_months,
        indefinite=runway.is_indefinite,
        zero_date=runway.zero_date,
    )
