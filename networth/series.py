from collections import defaultdict
from datetime import timedelta
from typing import Dict, Iterable, List, Tuple

from networth.domain import Account, Balance, DailyBalancePoint, Transaction
from networth.money import (
    Timestamp,
    day_start,
    is_date_only_utc,
    parse_timestamp,
    round_currency,
    signed_amount,
    to_day_key,
)


def _snapshots_by_day(account_id: str, balances: Iterable[Balance]) -> Dict[str, Balance]:
    # Only midnight-UTC balances are user snapshots; anything else is derived output.
    by_day: Dict[str, Balance] = {}
    for b in balances:
        if b.account_id != account_id or not is_date_only_utc(b.date):
            continue
        key = to_day_key(b.date)
        prev = by_day.get(key)
        if prev is None or parse_timestamp(b.date) >= parse_timestamp(prev.date):
            by_day[key] = b
    return by_day


def _transactions_by_day(
    account_id: str, transactions: Iterable[Transaction]
) -> Dict[str, List[Tuple[int, Transaction]]]:
    by_day: Dict[str, List[Tuple[int, Transaction]]] = defaultdict(list)
    for index, t in enumerate(transactions):
        if t.account_id == account_id:
            by_day[to_day_key(t.date)].append((index, t))
    return by_day


def build_daily_series(
    account_id: str,
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
) -> List[DailyBalancePoint]:
    """Reconstruct an account's balance history from snapshots and transactions.

    Each day with a snapshot resets the running amount to it; that day's
    transactions are then applied on top in (timestamp, seq, input order). One
    point is emitted per snapshot and per transaction, transaction points being
    offset by 1s, 2s, ... from the start of the day so they stay strictly ordered.
    """
    snapshots = _snapshots_by_day(account_id, balances or ())
    events = _transactions_by_day(account_id, transactions or ())

    current = 0.0
    points: List[DailyBalancePoint] = []

    for day_key in sorted(set(snapshots) | set(events)):
        base = day_start(day_key)

        snapshot = snapshots.get(day_key)
        if snapshot is not None:
            current = round_currency(snapshot.amount)
            points.append(DailyBalancePoint(day_key=day_key, date=base, amount=current))

        ordered = sorted(
            events.get(day_key, ()),
            key=lambda item: (parse_timestamp(item[1].date), item[1].seq, item[0]),
        )
        for event_index, (_, t) in enumerate(ordered):
            current = round_currency(current + signed_amount(t))
            points.append(
                DailyBalancePoint(
                    day_key=day_key,
                    date=base + timedelta(seconds=event_index + 1),
                    amount=current,
                )
            )

    return points


def current_balance(
    account_id: str,
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
) -> float:
    series = build_daily_series(account_id, balances, transactions)
    return series[-1].amount if series else 0.0


def accounts_with_balances(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
) -> List[Tuple[Account, float]]:
    balances = tuple(balances or ())
    transactions = tuple(transactions or ())
    return [(a, current_balance(a.id, balances, transactions)) for a in accounts]


def balance_before(
    account_id: str,
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
    day: Timestamp,
) -> float:
    """Balance carried into `day`: the last point of any earlier day, or 0."""
    day_key = to_day_key(day)
    earlier = [p for p in build_daily_series(account_id, balances, transactions) if p.day_key < day_key]
    return earlier[-1].amount if earlier else 0.0
