from datetime import datetime, timezone

from networth.domain import Account
from networth.functional import (
    Left,
    Nothing,
    Right,
    Some,
    validate_account_record,
    validate_balance_record,
    validate_transaction_record,
)


def test_maybe_basics():
    assert Some(1).get_or_else(0) == 1
    assert Nothing().get_or_else(0) == 0
    assert Some(1) == Some(1)
    assert Some(1) != Nothing()


def test_either_bind_short_circuits():
    calls = []

    def step(x):
        calls.append(x)
        return Right(x + 1)

    assert Right(1).bind(step) == Right(2)
    assert Left({"error": "e"}).bind(step) == Left({"error": "e"})
    assert calls == [1]


def test_validate_account_record():
    result = validate_account_record({
        "id": "a1", "name": "Checking", "type": "asset", "category": "Bank",
        "createdAt": "2025-01-01T09:00:00Z",
    })
    assert result == Right(Account("a1", "Checking", "Bank", "asset", datetime(2025, 1, 1, 9, tzinfo=timezone.utc)))


def test_validate_account_record_missing_fields():
    result = validate_account_record({"id": "a1", "name": "Checking", "type": "asset"})
    assert not result.is_right()
    assert result.get_error()["error"] == "invalid_account"
    assert "category" in result.get_error()["message"]
    assert not validate_account_record("a1").is_right()


def test_validate_account_record_bad_created_at():
    result = validate_account_record({
        "id": "a1", "name": "n", "type": "asset", "category": "c", "createdAt": "yesterday",
    })
    assert not result.is_right()


def test_validate_balance_record():
    ok = validate_balance_record({"id": "b1", "accountId": "a1", "amount": 10.005, "date": "2025-01-01"})
    balance = ok.get_or_else(None)
    assert balance.amount == 10.01
    assert balance.date == datetime(2025, 1, 1, tzinfo=timezone.utc)

    assert not validate_balance_record({"id": "b1", "accountId": "a1", "amount": "10", "date": "2025-01-01"}).is_right()
    assert not validate_balance_record({"id": "b1", "accountId": "a1", "amount": True, "date": "2025-01-01"}).is_right()
    assert not validate_balance_record({"id": "b1", "accountId": "a1", "amount": 1}).is_right()


def test_validate_transaction_record():
    raw = {
        "id": "t1", "amount": 12.5, "date": "2025-01-02T10:00:00Z",
        "description": "Lunch", "category": "Food", "type": "expense",
    }
    tx = validate_transaction_record(raw).get_or_else(None)
    assert tx.account_id is None
    assert tx.seq == 0

    assert not validate_transaction_record({**raw, "type": "transfer"}).is_right()
    assert not validate_transaction_record({**raw, "accountId": 5}).is_right()
    assert not validate_transaction_record({**raw, "date": "garbage"}).is_right()
    assert not validate_transaction_record({k: v for k, v in raw.items() if k != "description"}).is_right()
