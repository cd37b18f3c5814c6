from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


class AccountType:
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"


class TransactionType:
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    category: str       # e.g. "Bank", "Credit Card"
    type: str           # asset | liability | equity (anything else counts as "other")
    created_at: datetime


# A user-asserted balance: "the account held exactly `amount` as of `date`"
@dataclass(frozen=True)
class Balance:
    id: str
    account_id: str
    amount: float
    date: datetime


@dataclass(frozen=True)
class Transaction:
    id: str
    account_id: Optional[str]  # None for transactions not linked to any account
    amount: float              # unsigned magnitude
    date: datetime
    description: str
    category: str
    type: str                  # income | expense
    seq: int = 0               # creation order, breaks same-timestamp ties


@dataclass(frozen=True)
class DailyBalancePoint:
    day_key: str
    date: datetime
    amount: float


@dataclass(frozen=True)
class ChartPoint:
    id: str          # "<account_id>:<day_key>"
    account_id: str
    amount: float
    date: datetime


@dataclass(frozen=True)
class NetWorthPoint:
    date: datetime
    assets: float
    liabilities: float
    net_worth: float


@dataclass(frozen=True)
class Ledger:
    accounts: Tuple[Account, ...] = ()
    balances: Tuple[Balance, ...] = ()
    transactions: Tuple[Transaction, ...] = ()
