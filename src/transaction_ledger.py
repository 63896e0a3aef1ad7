import dataclasses
import logging
from typing import Dict, Optional

from errors import ClientMismatch, InvalidState, UnknownTransaction
from models import ALLOWED_TRANSITIONS, LedgerEntry, Transaction, TransactionStatus

logger = logging.getLogger(__name__)


class TransactionLedger:
    """
    Stores deposits and withdrawals by transaction id and owns their dispute lifecycle.
    Entries are never removed; only their status changes.
    """

    def __init__(self):
        self._entries: Dict[int, LedgerEntry] = {}

    def insert_if_absent(self, entry: LedgerEntry) -> bool:
        """
        Store a new entry. Returns False and keeps the original entry
        if the transaction id is already taken.
        """
        if entry.transaction_id in self._entries:
            return False
        self._entries[entry.transaction_id] = entry
        return True

    def get(self, transaction_id: int) -> Optional[LedgerEntry]:
        """Retrieve stored entry by transaction id."""
        return self._entries.get(transaction_id)

    def transition(self, transaction: Transaction, new_status: TransactionStatus) -> LedgerEntry:
        """
        Move the entry referenced by a dispute, resolve or chargeback record to new_status.

        Raises:
            UnknownTransaction: no deposit/withdrawal stored under the id
            ClientMismatch: the record's client does not own the entry
            InvalidState: the entry's current status does not allow new_status

        Nothing is modified when an error is raised.
        """
        entry = self._entries.get(transaction.transaction_id)

        if entry is None:
            raise UnknownTransaction(transaction, "transaction not found")

        if entry.client_id != transaction.client_id:
            raise ClientMismatch(
                transaction,
                f"client mismatch (expected {entry.client_id}, got {transaction.client_id})",
            )

        if new_status not in ALLOWED_TRANSITIONS[entry.status]:
            raise InvalidState(
                transaction,
                f"cannot move from {entry.status.value} to {new_status.value}",
            )

        updated = dataclasses.replace(entry, status=new_status)
        self._entries[entry.transaction_id] = updated
        logger.debug(f"Tx {entry.transaction_id}: {entry.status.value} -> {new_status.value}")
        return updated

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
