import json
import logging
from pathlib import Path
from typing import Union

from networth.domain import Ledger
from networth.exchange import parse_payload, to_payload

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class LedgerStore:
    """On-device JSON file holding the ledger in sync-payload shape."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Ledger:
        if not self.path.exists():
            logger.info("no ledger at %s, starting empty", self.path)
            return Ledger()

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except ValueError as e:
                raise StorageError(f"{self.path} is not valid JSON: {e}") from e

        result = parse_payload(data)
        if not result.is_right():
            raise StorageError(f"{self.path}: {result.get_error()['message']}")
        return result.get_or_else(None)

    def save(self, ledger: Ledger) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(to_payload(ledger), f, indent=2)
        logger.debug("ledger saved to %s", self.path)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("ledger removed from %s", self.path)
