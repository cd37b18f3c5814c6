from datetime import datetime, timezone

import pytest

from networth.domain import Account, Balance, Ledger
from networth.storage import LedgerStore, StorageError


def make_ledger():
    ts = datetime(2025, 1, 1, tzinfo=timezone.utc)
    return Ledger(
        accounts=(Account("a1", "Checking", "Bank", "asset", ts),),
        balances=(Balance("b1", "a1", 42.0, ts),),
    )


def test_missing_file_loads_empty(tmp_path):
    assert LedgerStore(tmp_path / "ledger.json").load() == Ledger()


def test_save_and_load(tmp_path):
    store = LedgerStore(tmp_path / "nested" / "ledger.json")
    store.save(make_ledger())
    assert store.path.exists()
    assert store.load() == make_ledger()


def test_clear(tmp_path):
    store = LedgerStore(tmp_path / "ledger.json")
    store.save(make_ledger())
    store.clear()
    assert not store.path.exists()
    store.clear()


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(StorageError):
        LedgerStore(path).load()

    path.write_text('{"accounts": 1}', encoding="utf-8")
    with pytest.raises(StorageError):
        LedgerStore(path).load()
