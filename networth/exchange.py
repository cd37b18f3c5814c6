import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from networth.domain import Account, Balance, Ledger, Transaction
from networth.functional import (
    Either,
    Left,
    Right,
    validate_account_record,
    validate_balance_record,
    validate_transaction_record,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


def _iso(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def account_to_dict(a: Account) -> Dict[str, Any]:
    return {
        "id": a.id,
        "name": a.name,
        "category": a.category,
        "type": a.type,
        "createdAt": _iso(a.created_at),
    }


def balance_to_dict(b: Balance) -> Dict[str, Any]:
    return {"id": b.id, "accountId": b.account_id, "amount": b.amount, "date": _iso(b.date)}


def transaction_to_dict(t: Transaction) -> Dict[str, Any]:
    record = {
        "id": t.id,
        "amount": t.amount,
        "date": _iso(t.date),
        "description": t.description,
        "category": t.category,
        "type": t.type,
        "seq": t.seq,
    }
    if t.account_id is not None:
        record["accountId"] = t.account_id
    return record


def to_payload(ledger: Ledger) -> Dict[str, List[Dict[str, Any]]]:
    """Ledger in the {accounts, balances, transactions} shape used for sync and storage."""
    return {
        "accounts": [account_to_dict(a) for a in ledger.accounts],
        "balances": [balance_to_dict(b) for b in ledger.balances],
        "transactions": [transaction_to_dict(t) for t in ledger.transactions],
    }


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def parse_payload(data: Any) -> Either[dict, Ledger]:
    """Validate a decoded payload, accepting both plain and export key names.

    Accounts and balances are mandatory and every record must be valid. The
    transaction list is optional and bad transaction records are skipped.
    """
    if not isinstance(data, dict):
        return Left({"error": "invalid_format", "message": "payload must be an object"})

    raw_accounts = _first_present(data, "accounts", "accountsExportData")
    raw_balances = _first_present(data, "balances", "balancesExportData")
    if not isinstance(raw_accounts, list) or not isinstance(raw_balances, list):
        return Left({
            "error": "invalid_format",
            "message": "missing accounts or balances arrays",
        })

    accounts = []
    for raw in raw_accounts:
        result = validate_account_record(raw)
        if not result.is_right():
            return result
        accounts.append(result.get_or_else(None))

    balances = []
    for raw in raw_balances:
        result = validate_balance_record(raw)
        if not result.is_right():
            return result
        balances.append(result.get_or_else(None))

    transactions = []
    raw_transactions = _first_present(data, "transactions", "transactionsExportData")
    if isinstance(raw_transactions, list):
        for raw in raw_transactions:
            result = validate_transaction_record(raw)
            if result.is_right():
                transactions.append(result.get_or_else(None))
            else:
                logger.warning("skipping transaction: %s", result.get_error()["message"])

    return Right(Ledger(
        accounts=tuple(accounts),
        balances=tuple(balances),
        transactions=tuple(transactions),
    ))


def export_data(ledger: Ledger, now: Optional[datetime] = None) -> str:
    payload = to_payload(ledger)
    envelope = {
        "version": EXPORT_VERSION,
        "exportDate": _iso(now or datetime.now(timezone.utc)),
        "accountsExportData": payload["accounts"],
        "balancesExportData": payload["balances"],
        "transactionsExportData": payload["transactions"],
    }
    return json.dumps(envelope, indent=2)


def import_data(text: str) -> Either[dict, Ledger]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.error("failed to import data: %s", e)
        return Left({"error": "invalid_json", "message": str(e)})

    result = parse_payload(data)
    if result.is_right():
        ledger = result.get_or_else(None)
        logger.info(
            "imported %d account(s), %d balance(s), %d transaction(s)",
            len(ledger.accounts), len(ledger.balances), len(ledger.transactions),
        )
    else:
        logger.error("invalid import: %s", result.get_error()["message"])
    return result


def import_bytes(raw: bytes) -> Either[dict, Ledger]:
    """`import_data` for an uploaded file's raw content."""
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.error("failed to import data: %s", e)
        return Left({"error": "invalid_encoding", "message": "backup file is not UTF-8 text"})
    return import_data(text)
