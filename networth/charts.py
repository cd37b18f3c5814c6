from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from networth.domain import (
    Account,
    AccountType,
    Balance,
    ChartPoint,
    DailyBalancePoint,
    NetWorthPoint,
    Transaction,
)
from networth.money import Timestamp, day_start, round_currency, to_day_key
from networth.memo import cached_daily_series

RANGE_PRESETS = ("7d", "30d", "90d", "1y", "all")

_RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def range_start_for(preset: str, now: Optional[datetime] = None) -> datetime:
    """Left edge of a chart window; "all" (or anything unknown) means the epoch."""
    days = _RANGE_DAYS.get(preset)
    if days is None:
        return EPOCH
    now = now or datetime.now(timezone.utc)
    return now - timedelta(days=days)


def _clip_to_range(series: List[DailyBalancePoint], range_key: str) -> List[DailyBalancePoint]:
    first_in = next((i for i, p in enumerate(series) if p.day_key >= range_key), None)
    if first_in is None:
        return []

    kept = series[first_in:]
    # Carry the pre-range balance onto the left edge so the line does not start from 0.
    if first_in > 0 and kept[0].day_key != range_key:
        anchor = DailyBalancePoint(
            day_key=range_key,
            date=day_start(range_key),
            amount=series[first_in - 1].amount,
        )
        kept = [anchor] + kept
    return kept


def synthesize_chart_series(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
    range_start: Optional[Timestamp] = None,
) -> List[ChartPoint]:
    """Flat per-account chart points, optionally clipped to start at `range_start`.

    Output is grouped by account (in `accounts` order) and chronological within
    each account. Accounts without any history are left out.
    """
    balances = tuple(balances or ())
    transactions = tuple(transactions or ())
    range_key = to_day_key(range_start) if range_start is not None else None

    points: List[ChartPoint] = []
    for account in accounts or ():
        series = list(cached_daily_series(account.id, balances, transactions))
        if not series:
            continue
        if range_key is not None:
            series = _clip_to_range(series, range_key)

        points.extend(
            ChartPoint(
                id=f"{account.id}:{p.day_key}",
                account_id=account.id,
                amount=p.amount,
                date=p.date,
            )
            for p in series
        )
    return points


def account_history(points: Iterable[ChartPoint], account_id: str) -> List[ChartPoint]:
    return sorted((p for p in points if p.account_id == account_id), key=lambda p: p.date)


def account_change(points: Iterable[ChartPoint]) -> Tuple[float, float]:
    """(absolute change, percent change) between the first and the latest point."""
    ordered = sorted(points, key=lambda p: p.date)
    if len(ordered) < 2:
        return 0.0, 0.0

    first, latest = ordered[0].amount, ordered[-1].amount
    change = round_currency(latest - first)
    if first == 0:
        return change, 0.0
    return change, (latest - first) / abs(first) * 100


def net_worth_series(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
) -> List[NetWorthPoint]:
    """Assets, liabilities and net worth at the end of every day with activity."""
    balances = tuple(balances or ())
    transactions = tuple(transactions or ())

    end_of_day: Dict[str, Dict[str, float]] = {}
    kinds: Dict[str, str] = {}
    for account in accounts or ():
        if account.type not in (AccountType.ASSET, AccountType.LIABILITY):
            continue
        kinds[account.id] = account.type
        for p in cached_daily_series(account.id, balances, transactions):
            end_of_day.setdefault(p.day_key, {})[account.id] = p.amount

    carried: Dict[str, float] = {}
    result: List[NetWorthPoint] = []
    for day_key in sorted(end_of_day):
        carried.update(end_of_day[day_key])

        assets = sum(v for aid, v in carried.items() if kinds[aid] == AccountType.ASSET)
        liabilities = sum(abs(v) for aid, v in carried.items() if kinds[aid] == AccountType.LIABILITY)
        result.append(
            NetWorthPoint(
                date=day_start(day_key),
                assets=round_currency(assets),
                liabilities=round_currency(liabilities),
                net_worth=round_currency(assets - liabilities),
            )
        )
    return result
