from datetime import date, datetime, timezone
from fastapi import APIRouter, Depends, Query, Request
from app.core.paging import offset_from_cursor
from app.modules.accounts.schemas import (
    AccountsOut, AccountOut, AccountDetailOut, BalanceOut, TransactionsOut, TransactionType,
)
from app.modules.accounts.service import AccountService
from app.modules.consent.guard import ConsentContext, require_consent
from app.modules.consent.scopes import ConsentScope

router = APIRouter()

def svc(request: Request) -> AccountService:
    return request.app.state.account_service

@router.get("", response_model=AccountsOut)
async def list_accounts(
    ctx: ConsentContext = Depends(require_consent(ConsentScope.ACCOUNTS)),
    service: AccountService = Depends(svc),
):
    accounts = service.list_accounts(ctx.user_id)
    return AccountsOut(accounts=[AccountOut.model_validate(a.model_dump()) for a in accounts])

@router.get("/{account_id}", response_model=AccountDetailOut)
async def get_account(
    account_id: str,
    ctx: ConsentContext = Depends(require_consent(ConsentScope.ACCOUNTS)),
    service: AccountService = Depends(svc),
):
    return AccountDetailOut(account=service.get_account(ctx.user_id, account_id))

@router.get("/{account_id}/balance", response_model=BalanceOut)
async def get_balance(
    account_id: str,
    ctx: ConsentContext = Depends(require_consent(ConsentScope.ACCOUNTS, ConsentScope.BALANCES)),
    service: AccountService = Depends(svc),
):
    acc = service.get_account(ctx.user_id, account_id)
    return BalanceOut(
        account_id=acc.id, balance=acc.balance, available_balance=acc.available_balance,
        as_of=datetime.now(timezone.utc),
    )

@router.get("/{account_id}/transactions", response_model=TransactionsOut)
async def list_transactions(
    account_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
    type: TransactionType | None = None,
    search: str | None = Query(default=None, max_length=100),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = None,
    ctx: ConsentContext = Depends(require_consent(ConsentScope.ACCOUNTS, ConsentScope.TRANSACTIONS)),
    service: AccountService = Depends(svc),
):
    items, total, nxt = service.transactions(
        ctx.user_id, account_id,
        start_date=start_date, end_date=end_date, type=type, search=search,
        limit=limit, offset=offset_from_cursor(cursor),
    )
    return TransactionsOut(transactions=items, total=total, next_cursor=nxt)
