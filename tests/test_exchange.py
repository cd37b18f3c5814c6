import json
from datetime import datetime, timezone

from networth.domain import Account, Balance, Ledger, Transaction
from networth.exchange import EXPORT_VERSION, export_data, import_bytes, import_data, parse_payload, to_payload


def make_ledger():
    ts = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return Ledger(
        accounts=(Account("a1", "Checking", "Bank", "asset", ts),),
        balances=(Balance("b1", "a1", 100.0, ts),),
        transactions=(
            Transaction("t1", "a1", 30.0, ts.replace(hour=12), "Food", "Food", "expense", seq=1),
            Transaction("t2", None, 5.0, ts.replace(hour=13), "Gift", "Gifts", "income", seq=2),
        ),
    )


def test_export_envelope():
    now = datetime(2025, 2, 1, 8, 30, tzinfo=timezone.utc)
    data = json.loads(export_data(make_ledger(), now=now))
    assert data["version"] == EXPORT_VERSION
    assert data["exportDate"] == "2025-02-01T08:30:00Z"
    assert data["accountsExportData"][0]["createdAt"] == "2025-01-01T00:00:00Z"
    assert data["balancesExportData"][0] == {
        "id": "b1", "accountId": "a1", "amount": 100.0, "date": "2025-01-01T00:00:00Z",
    }
    assert "accountId" not in data["transactionsExportData"][1]


def test_export_then_import_restores_ledger():
    ledger = make_ledger()
    result = import_data(export_data(ledger))
    assert result.is_right()
    assert result.get_or_else(None) == ledger


def test_import_plain_keys():
    result = parse_payload(to_payload(make_ledger()))
    assert result.get_or_else(None) == make_ledger()


def test_import_without_transactions():
    payload = to_payload(make_ledger())
    del payload["transactions"]
    ledger = import_data(json.dumps(payload)).get_or_else(None)
    assert ledger.transactions == ()
    assert len(ledger.balances) == 1


def test_import_skips_invalid_transactions():
    payload = to_payload(make_ledger())
    payload["transactions"].append({"id": "bad", "amount": "lots"})
    ledger = import_data(json.dumps(payload)).get_or_else(None)
    assert [t.id for t in ledger.transactions] == ["t1", "t2"]


def test_import_rejects_bad_input():
    assert not import_data("{not json").is_right()
    assert not import_data("[]").is_right()
    assert not import_data(json.dumps({"accounts": []})).is_right()

    payload = to_payload(make_ledger())
    payload["balances"][0]["amount"] = None
    result = import_data(json.dumps(payload))
    assert result.get_error()["error"] == "invalid_balance"

    payload = to_payload(make_ledger())
    del payload["accounts"][0]["name"]
    assert import_data(json.dumps(payload)).get_error()["error"] == "invalid_account"


def test_import_bytes():
    raw = export_data(make_ledger()).encode("utf-8")
    assert import_bytes(raw).get_or_else(None) == make_ledger()
    assert import_bytes(b"\xef\xbb\xbf" + raw).get_or_else(None) == make_ledger()


def test_import_bytes_rejects_non_utf8():
    result = import_bytes("{\"accounts\": [\"Čekový\"]}".encode("utf-16"))
    assert not result.is_right()
    assert result.get_error()["error"] == "invalid_encoding"
    assert import_bytes(b"\xff\xfe\x00garbage").get_error()["error"] == "invalid_encoding"
