from datetime import date, datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from networth.domain import Transaction, TransactionType

CENT = Decimal("0.01")

Timestamp = Union[datetime, date, str]


def round_currency(amount: float) -> float:
    """Round to cents, half away from zero.

    Works on the shortest repr of the float, so 1.005 rounds to 1.01 rather than
    falling victim to its binary approximation.
    """
    rounded = Decimal(repr(float(amount))).quantize(CENT, rounding=ROUND_HALF_UP)
    return float(rounded) + 0.0  # folds -0.0 into 0.0


def parse_timestamp(value: Timestamp) -> datetime:
    """Coerce a datetime, date or ISO-8601 string into an aware UTC datetime."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        ts = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        ts = datetime.fromisoformat(text)
    else:
        raise ValueError(f"unsupported timestamp: {value!r}")

    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_day_key(ts: Timestamp) -> str:
    return parse_timestamp(ts).date().isoformat()


def day_start(day_key: str) -> datetime:
    return datetime.combine(date.fromisoformat(day_key), time.min, tzinfo=timezone.utc)


def is_date_only_utc(ts: datetime) -> bool:
    utc = parse_timestamp(ts)
    return utc.time() == time.min


def signed_amount(tx: Transaction) -> float:
    return tx.amount if tx.type == TransactionType.INCOME else -tx.amount
