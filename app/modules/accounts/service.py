from datetime import date
from fastapi import HTTPException
from app.core.paging import next_cursor
from app.modules.accounts.repository import AccountRepository
from app.modules.accounts.schemas import Account, Transaction, TransactionType

class AccountService:
    def __init__(self, repo: AccountRepository):
        self.repo = repo

    def list_accounts(self, user_id: str) -> list[Account]:
        return self.repo.list_for_user(user_id)

    def get_account(self, user_id: str, account_id: str) -> Account:
        obj = self.repo.get(account_id)
        # Other users' accounts look exactly like missing ones
        if obj is None or obj.user_id != user_id:
            raise HTTPException(status_code=404, detail="Account not found")
        return obj

    def transactions(
        self,
        user_id: str,
        account_id: str,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        type: TransactionType | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Transaction], int, str | None]:
        self.get_account(user_id, account_id)
        txns = self.repo.transactions_for(account_id)
        if start_date: txns = [t for t in txns if t.date >= start_date]
        if end_date:   txns = [t for t in txns if t.date <= end_date]
        if type:       txns = [t for t in txns if t.type == type]
        if search:
            term = search.lower()
            txns = [t for t in txns if term in t.description.lower() or (t.merchant and term in t.merchant.lower())]
        total = len(txns)
        return txns[offset:offset + limit], total, next_cursor(offset, limit, total)
