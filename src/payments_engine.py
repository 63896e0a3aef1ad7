import csv
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Mapping, Optional

from account_store import AccountStore
from errors import ProcessingError
from models import Transaction, TransactionType, ClientAccount, ProcessingStats
from transaction_ledger import TransactionLedger
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class RowError(ValueError):
    """A CSV row that cannot be turned into a Transaction."""


def parse_row(row: Mapping[Optional[str], Optional[str]]) -> Transaction:
    """
    Build a Transaction from a csv.DictReader row.

    Headers and values are trimmed and the type is matched case-insensitively.
    Short rows (no trailing amount) are accepted; extra columns are ignored.
    The amount is only read for deposits and withdrawals.
    """
    fields = {}
    for key, value in row.items():
        if key is None:
            continue
        fields[key.lstrip("\ufeff").strip().lower()] = (value or "").strip()

    missing = [name for name in ("type", "client", "tx") if name not in fields]
    if missing:
        raise RowError(f"missing columns {missing}")

    try:
        transaction_type = TransactionType(fields["type"].lower())
    except ValueError:
        raise RowError(f"unknown transaction type {fields['type']!r}") from None

    amount = None
    if transaction_type.moves_funds and fields.get("amount"):
        try:
            amount = Decimal(fields["amount"])
        except InvalidOperation:
            raise RowError(f"amount {fields['amount']!r} is not a decimal") from None
        if not amount.is_finite():
            raise RowError(f"amount {fields['amount']!r} is not finite")

    return Transaction(
        transaction_type=transaction_type,
        client_id=_parse_id("client", fields["client"]),
        transaction_id=_parse_id("tx", fields["tx"]),
        amount=amount,
    )


def _parse_id(name: str, value: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise RowError(f"{name} must be an unsigned integer, got {value!r}")
    return int(value)


class PaymentsEngine:
    """
    Reads transactions in input order and applies them one at a time.
    A bad row or a rejected transaction is logged and counted; it never stops the run.
    """

    def __init__(self):
        self._accounts = AccountStore()
        self._ledger = TransactionLedger()
        self._processor = TransactionProcessor(self._accounts, self._ledger)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        # utf-8-sig drops a leading BOM; undecodable bytes become U+FFFD and fail row parsing.
        with open(filepath, "r", newline="", encoding="utf-8-sig", errors="replace") as f:
            return self.process_stream(f)

    def process_stream(self, lines: Iterable[str]) -> Dict[int, ClientAccount]:
        """Process CSV lines (header first) and return final account states."""
        logger.info("Starting processing")

        reader = csv.DictReader(lines)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                break
            except csv.Error as e:
                # The reader resets on the next line, so only this row is lost.
                logger.warning(f"Unreadable CSV at line {reader.line_num}: {e}")
                self._stats.record_skipped()
                continue

            try:
                transaction = parse_row(row)
            except RowError as e:
                logger.warning(f"Skipping line {reader.line_num}: {e}")
                self._stats.record_skipped()
                continue

            self.apply(transaction)

        logger.info("Processing complete")

        print(
            f"Processed: {self._stats.processed}, "
            f"Failed: {self._stats.failed}, "
            f"Skipped: {self._stats.skipped}",
            file=sys.stderr
        )

        return {account.client_id: account for account in self._accounts.snapshot()}

    def apply(self, transaction: Transaction) -> bool:
        """Apply one parsed transaction. Returns False if it was rejected."""
        try:
            self._processor.process_transaction(transaction)
        except ProcessingError as e:
            self._stats.record_failure(type(e).__name__)
            logger.warning(f"{type(e).__name__}: {e}")
            return False

        self._stats.record_success()
        return True

    def snapshot(self) -> List[ClientAccount]:
        return self._accounts.snapshot()
