from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

from networth.domain import Ledger
from networth.storage import LedgerStore

__all__ = ['LEDGER_CHANGED', 'BALANCE_ALERT', 'Event', 'EventBus', 'persist_handler', 'check_balance_handler']


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in self._subscribers[name]]

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


LEDGER_CHANGED = "LEDGER_CHANGED"
BALANCE_ALERT = "BALANCE_ALERT"


def persist_handler(store: LedgerStore) -> Callable[[Event, dict], dict]:
    """Handler that writes the ledger carried by a LEDGER_CHANGED event to `store`."""
    def _persist(event: Event, payload: dict) -> dict:
        ledger: Ledger = payload["ledger"]
        store.save(ledger)
        return {"saved": str(store.path), "reason": payload.get("reason", "")}

    return _persist


def check_balance_handler(event: Event, payload: dict) -> dict:
    balance = payload.get("balance", 0)
    threshold = payload.get("threshold", 0)

    if balance < threshold and threshold > 0:
        return {
            "alert": f"Balance alert: {payload.get('account_name', 'account')} is at {balance:,.2f}, below {threshold:,.2f}",
            "balance": balance,
            "threshold": threshold,
        }
    return {}
