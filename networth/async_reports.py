import asyncio
from datetime import datetime
from typing import Dict, Iterable, Optional, Tuple

from networth.charts import account_change, synthesize_chart_series
from networth.domain import Account, Balance, Transaction


async def account_changes(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    transactions: Iterable[Transaction],
    range_start: Optional[datetime] = None,
) -> Dict[str, Tuple[float, float]]:
    """(change, percent) per account over the chart window starting at `range_start`.

    Accounts with no history in the window are omitted.
    """
    balances = tuple(balances)
    transactions = tuple(transactions)

    async def one(a: Account) -> Tuple[str, Optional[Tuple[float, float]]]:
        points = synthesize_chart_series([a], balances, transactions, range_start)
        await asyncio.sleep(0)
        return a.id, account_change(points) if points else None

    results = await asyncio.gather(*(one(a) for a in accounts))
    return {k: v for k, v in results if v is not None}
