from datetime import datetime, timezone

from networth.domain import Account, Ledger
from networth.events import (
    BALANCE_ALERT,
    LEDGER_CHANGED,
    Event,
    EventBus,
    check_balance_handler,
    persist_handler,
)
from networth.storage import LedgerStore


def test_publish_without_subscribers():
    assert EventBus().publish(LEDGER_CHANGED, {}) == []


def test_subscribe_publish_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"ok": True}

    bus.subscribe(LEDGER_CHANGED, handler)
    assert bus.publish(LEDGER_CHANGED, {"reason": "test"}) == [{"ok": True}]
    bus.unsubscribe(LEDGER_CHANGED, handler)
    bus.unsubscribe(LEDGER_CHANGED, handler)
    assert bus.publish(LEDGER_CHANGED, {}) == []
    assert seen == [LEDGER_CHANGED]


def test_persist_handler_saves_ledger(tmp_path):
    store = LedgerStore(tmp_path / "ledger.json")
    ledger = Ledger(accounts=(Account("a1", "Checking", "Bank", "asset", datetime(2025, 1, 1, tzinfo=timezone.utc)),))

    bus = EventBus()
    bus.subscribe(LEDGER_CHANGED, persist_handler(store))
    results = bus.publish(LEDGER_CHANGED, {"ledger": ledger, "reason": "add_account"})

    assert results[0]["reason"] == "add_account"
    assert store.load() == ledger


def test_check_balance_handler():
    bus = EventBus()
    bus.subscribe(BALANCE_ALERT, check_balance_handler)

    low = bus.publish(BALANCE_ALERT, {"balance": 50.0, "threshold": 100.0, "account_name": "Checking"})
    assert "Checking" in low[0]["alert"]
    assert bus.publish(BALANCE_ALERT, {"balance": 500.0, "threshold": 100.0}) == [{}]
    assert bus.publish(BALANCE_ALERT, {"balance": -5.0, "threshold": 0}) == [{}]
