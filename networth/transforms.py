import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, Mapping, Optional, Tuple
from uuid import uuid4

from networth.domain import Account, Balance, Ledger, Transaction
from networth.functional import Maybe, Nothing, Some
from networth.money import Timestamp, day_start, parse_timestamp, round_currency, to_day_key
from networth.series import balance_before

logger = logging.getLogger(__name__)

EDITABLE_ACCOUNT_FIELDS = ("name", "category", "type")
EDITABLE_TRANSACTION_FIELDS = ("account_id", "amount", "date", "description", "category", "type")


class LedgerError(KeyError):
    """Raised when an operation targets an account or transaction that does not exist."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


def find_account(ledger: Ledger, account_id: str) -> Maybe[Account]:
    for a in ledger.accounts:
        if a.id == account_id:
            return Some(a)
    return Nothing()


def _require_account(ledger: Ledger, account_id: str) -> Account:
    account = find_account(ledger, account_id).get_or_else(None)
    if account is None:
        raise LedgerError(f"unknown account {account_id}")
    return account


def add_account(
    ledger: Ledger, name: str, category: str, type: str, created_at: Optional[datetime] = None
) -> Ledger:
    account = Account(
        id=_new_id(),
        name=name,
        category=category,
        type=type,
        created_at=parse_timestamp(created_at or _now()),
    )
    logger.info("account added: %s (%s)", account.id, type)
    return replace(ledger, accounts=ledger.accounts + (account,))


def update_account(ledger: Ledger, account_id: str, **updates) -> Ledger:
    _require_account(ledger, account_id)
    unknown = set(updates) - set(EDITABLE_ACCOUNT_FIELDS)
    if unknown:
        raise ValueError(f"account fields not editable: {sorted(unknown)}")

    return replace(ledger, accounts=tuple(
        replace(a, **updates) if a.id == account_id else a for a in ledger.accounts
    ))


def delete_account(ledger: Ledger, account_id: str) -> Ledger:
    """Drop an account and its balance snapshots; its transactions stay on record."""
    _require_account(ledger, account_id)
    logger.info("account deleted: %s", account_id)
    return replace(
        ledger,
        accounts=tuple(a for a in ledger.accounts if a.id != account_id),
        balances=tuple(b for b in ledger.balances if b.account_id != account_id),
    )


def record_balances(
    ledger: Ledger,
    updates: Iterable[Tuple[str, float]],
    at: Optional[Timestamp] = None,
    replace_existing: bool = False,
) -> Ledger:
    """Append one snapshot per (account_id, amount), all dated midnight UTC of `at`'s day.

    With `replace_existing`, earlier snapshots of the same accounts on that day are
    removed first.
    """
    updates = tuple(updates)
    for account_id, _ in updates:
        _require_account(ledger, account_id)

    day_key = to_day_key(at if at is not None else _now())
    snapshot_date = day_start(day_key)
    touched = {account_id for account_id, _ in updates}

    kept = ledger.balances
    if replace_existing:
        kept = tuple(
            b for b in kept
            if not (b.account_id in touched and to_day_key(b.date) == day_key)
        )

    new_balances = tuple(
        Balance(id=_new_id(), account_id=account_id, amount=round_currency(amount), date=snapshot_date)
        for account_id, amount in updates
    )
    logger.info("recorded %d balance(s) for %s", len(new_balances), day_key)
    return replace(ledger, balances=kept + new_balances)


def record_balance(
    ledger: Ledger, account_id: str, amount: float, at: Optional[Timestamp] = None
) -> Ledger:
    return record_balances(ledger, [(account_id, amount)], at=at)


def balance_baseline(ledger: Ledger, at: Timestamp) -> Dict[str, float]:
    """Per-account balance carried into `at`'s day, used to pre-fill balance entry."""
    return {
        a.id: balance_before(a.id, ledger.balances, ledger.transactions, at)
        for a in ledger.accounts
    }


def record_changed_balances(
    ledger: Ledger,
    entered: Mapping[str, float],
    at: Timestamp,
    replace_existing: bool = False,
) -> Ledger:
    """Record snapshots only for accounts whose entry differs from the carried-in balance.

    Accounts left at their carried-in balance get no snapshot.
    """
    baseline = balance_baseline(ledger, at)
    changed = [
        (account_id, amount) for account_id, amount in entered.items()
        if account_id not in baseline or round_currency(amount) != baseline[account_id]
    ]
    if not changed:
        return ledger
    return record_balances(ledger, changed, at=at, replace_existing=replace_existing)


def _next_seq(transactions: Tuple[Transaction, ...]) -> int:
    return max((t.seq for t in transactions), default=0) + 1


def add_transaction(
    ledger: Ledger,
    amount: float,
    type: str,
    description: str = "",
    category: str = "",
    account_id: Optional[str] = None,
    date: Optional[Timestamp] = None,
) -> Ledger:
    if account_id is not None:
        _require_account(ledger, account_id)

    t = Transaction(
        id=_new_id(),
        account_id=account_id,
        amount=round_currency(amount),
        date=parse_timestamp(date if date is not None else _now()),
        description=description,
        category=category,
        type=type,
        seq=_next_seq(ledger.transactions),
    )
    logger.info("transaction added: %s %s %.2f", t.id, type, t.amount)
    return replace(ledger, transactions=ledger.transactions + (t,))


def update_transaction(ledger: Ledger, transaction_id: str, **updates) -> Ledger:
    if not any(t.id == transaction_id for t in ledger.transactions):
        raise LedgerError(f"unknown transaction {transaction_id}")
    unknown = set(updates) - set(EDITABLE_TRANSACTION_FIELDS)
    if unknown:
        raise ValueError(f"transaction fields not editable: {sorted(unknown)}")
    if updates.get("account_id") is not None:
        _require_account(ledger, updates["account_id"])
    if "amount" in updates:
        updates["amount"] = round_currency(updates["amount"])
    if "date" in updates:
        updates["date"] = parse_timestamp(updates["date"])

    return replace(ledger, transactions=tuple(
        replace(t, **updates) if t.id == transaction_id else t for t in ledger.transactions
    ))


def delete_transaction(ledger: Ledger, transaction_id: str) -> Ledger:
    remaining = tuple(t for t in ledger.transactions if t.id != transaction_id)
    if len(remaining) == len(ledger.transactions):
        raise LedgerError(f"unknown transaction {transaction_id}")
    logger.info("transaction deleted: %s", transaction_id)
    return replace(ledger, transactions=remaining)


def clear_all(ledger: Ledger) -> Ledger:
    logger.info(
        "clearing %d account(s), %d balance(s), %d transaction(s)",
        len(ledger.accounts), len(ledger.balances), len(ledger.transactions),
    )
    return Ledger()
