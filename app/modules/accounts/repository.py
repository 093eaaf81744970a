from datetime import date, datetime, timezone
from typing import Sequence
from app.modules.accounts.schemas import Account, AccountStatus, AccountType, Transaction, TransactionType

_SAMPLE_ACCOUNTS = [
    Account(
        id="account-1", user_id="user-123", type=AccountType.CHECKING,
        name="Conta Corrente Principal", number="****1234",
        balance=15420.50, available_balance=15200.00, status=AccountStatus.ACTIVE,
        bank="Banco do Brasil", last_updated=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        opening_date=date(2020, 3, 15), daily_limit=10000, monthly_limit=50000,
        holder_name="João Silva Santos",
    ),
    Account(
        id="account-2", user_id="user-123", type=AccountType.SAVINGS,
        name="Conta Poupança", number="****5678",
        balance=50000.00, available_balance=50000.00, status=AccountStatus.ACTIVE,
        bank="Banco do Brasil", last_updated=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        opening_date=date(2019, 6, 10), daily_limit=5000, monthly_limit=20000,
        holder_name="João Silva Santos",
    ),
]

_SAMPLE_TRANSACTIONS = [
    Transaction(id="txn-1", account_id="account-1", date=date(2024, 1, 15), description="Pagamento PIX - João Silva",
                category="PIX", amount=150.00, type=TransactionType.DEBIT, merchant="João Silva", reference="PIX123456789"),
    Transaction(id="txn-2", account_id="account-1", date=date(2024, 1, 14), description="Depósito em conta",
                category="Depósito", amount=2000.00, type=TransactionType.CREDIT, merchant="Banco do Brasil", reference="DEP123456"),
    Transaction(id="txn-3", account_id="account-1", date=date(2024, 1, 13), description="Compra no cartão - Supermercado",
                category="Compra", amount=89.50, type=TransactionType.DEBIT, merchant="Supermercado ABC", reference="COMP789456"),
]

class AccountRepository:
    """Read-only sample data."""

    def __init__(self, accounts: Sequence[Account] | None = None, transactions: Sequence[Transaction] | None = None):
        self._accounts = {a.id: a for a in (accounts if accounts is not None else _SAMPLE_ACCOUNTS)}
        self._transactions = list(transactions if transactions is not None else _SAMPLE_TRANSACTIONS)

    def get(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    def list_for_user(self, user_id: str) -> list[Account]:
        return [a for a in self._accounts.values() if a.user_id == user_id and a.status == AccountStatus.ACTIVE]

    def transactions_for(self, account_id: str) -> list[Transaction]:
        txns = [t for t in self._transactions if t.account_id == account_id]
        return sorted(txns, key=lambda t: t.date, reverse=True)
