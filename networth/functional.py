from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Generic, TypeVar

from networth.domain import Account, Balance, Transaction, TransactionType
from networth.money import parse_timestamp, round_currency

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


# --- Validation of raw JSON records (import and storage boundary)

def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _invalid(kind: str, raw: Any, message: str) -> Left:
    return Left({
        "error": f"invalid_{kind}",
        "message": message,
        "record": raw,
    })


def _timestamp(raw: dict, key: str, kind: str, default: datetime = None) -> Either[dict, datetime]:
    value = raw.get(key)
    if value is None and default is not None:
        return Right(default)
    try:
        return Right(parse_timestamp(value))
    except (TypeError, ValueError):
        return _invalid(kind, raw, f"{key} is not a valid timestamp: {value!r}")


def validate_account_record(raw: Any) -> Either[dict, Account]:
    if not isinstance(raw, dict):
        return _invalid("account", raw, "account must be an object")
    for key in ("id", "name", "type", "category"):
        if not _is_text(raw.get(key)):
            return _invalid("account", raw, f"account is missing {key}")

    created = _timestamp(raw, "createdAt", "account", default=datetime.now(timezone.utc))
    return created.map(lambda ts: Account(
        id=raw["id"],
        name=raw["name"],
        category=raw["category"],
        type=raw["type"],
        created_at=ts,
    ))


def validate_balance_record(raw: Any) -> Either[dict, Balance]:
    if not isinstance(raw, dict):
        return _invalid("balance", raw, "balance must be an object")
    if not _is_text(raw.get("id")) or not _is_text(raw.get("accountId")):
        return _invalid("balance", raw, "balance is missing id or accountId")
    if not _is_number(raw.get("amount")):
        return _invalid("balance", raw, "balance amount must be a number")
    if not raw.get("date"):
        return _invalid("balance", raw, "balance is missing date")

    return _timestamp(raw, "date", "balance").map(lambda ts: Balance(
        id=raw["id"],
        account_id=raw["accountId"],
        amount=round_currency(raw["amount"]),
        date=ts,
    ))


def validate_transaction_record(raw: Any) -> Either[dict, Transaction]:
    if not isinstance(raw, dict):
        return _invalid("transaction", raw, "transaction must be an object")
    if not _is_text(raw.get("id")):
        return _invalid("transaction", raw, "transaction is missing id")
    account_id = raw.get("accountId")
    if account_id is not None and not isinstance(account_id, str):
        return _invalid("transaction", raw, "transaction accountId must be a string")
    if not _is_number(raw.get("amount")):
        return _invalid("transaction", raw, "transaction amount must be a number")
    if not isinstance(raw.get("date"), str):
        return _invalid("transaction", raw, "transaction date must be a string")
    if not isinstance(raw.get("description"), str) or not isinstance(raw.get("category"), str):
        return _invalid("transaction", raw, "transaction needs description and category")
    if raw.get("type") not in (TransactionType.INCOME, TransactionType.EXPENSE):
        return _invalid("transaction", raw, f"unknown transaction type {raw.get('type')!r}")
    seq = raw.get("seq", 0)
    if not isinstance(seq, int) or isinstance(seq, bool):
        return _invalid("transaction", raw, "transaction seq must be an integer")

    return _timestamp(raw, "date", "transaction").map(lambda ts: Transaction(
        id=raw["id"],
        account_id=account_id or None,
        amount=round_currency(raw["amount"]),
        date=ts,
        description=raw["description"],
        category=raw["category"],
        type=raw["type"],
        seq=seq,
    ))
