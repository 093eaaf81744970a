from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, Field
from app.core.logging import current_request_id

class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    CREDIT = "credit"
    LOAN = "loan"

class AccountStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    CLOSED = "closed"
    PENDING = "pending"

class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"

class Account(BaseModel):
    id: str
    user_id: str
    type: AccountType
    name: str
    number: str
    balance: float
    available_balance: float
    status: AccountStatus
    bank: str
    last_updated: datetime
    opening_date: date
    daily_limit: float
    monthly_limit: float
    holder_name: str

class Transaction(BaseModel):
    id: str
    account_id: str
    date: date
    description: str
    category: str
    amount: float
    type: TransactionType
    merchant: str | None = None
    reference: str | None = None

class AccountOut(BaseModel):
    id: str
    type: AccountType
    name: str
    number: str
    balance: float
    available_balance: float
    status: AccountStatus
    bank: str
    last_updated: datetime

class AccountsOut(BaseModel):
    success: bool = True
    accounts: list[AccountOut]
    correlation_id: str = Field(default_factory=current_request_id)

class AccountDetailOut(BaseModel):
    success: bool = True
    account: Account
    correlation_id: str = Field(default_factory=current_request_id)

class BalanceOut(BaseModel):
    success: bool = True
    account_id: str
    balance: float
    available_balance: float
    as_of: datetime
    correlation_id: str = Field(default_factory=current_request_id)

class TransactionsOut(BaseModel):
    success: bool = True
    transactions: list[Transaction]
    total: int
    next_cursor: str | None = None
    correlation_id: str = Field(default_factory=current_request_id)
