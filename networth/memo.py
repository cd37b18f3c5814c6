from functools import lru_cache

from networth.domain import Balance, DailyBalancePoint, Transaction
from networth.series import build_daily_series


@lru_cache(maxsize=256)
def cached_daily_series(
    account_id: str,
    balances: tuple[Balance, ...],
    transactions: tuple[Transaction, ...],
) -> tuple[DailyBalancePoint, ...]:
    return tuple(build_daily_series(account_id, balances, transactions))
