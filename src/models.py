from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def moves_funds(self) -> bool:
        """Deposits and withdrawals carry an amount and get a ledger entry."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class TransactionStatus(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


# Dispute lifecycle: CHARGED_BACK has no outgoing transitions.
ALLOWED_TRANSITIONS = {
    TransactionStatus.NORMAL: {TransactionStatus.DISPUTED},
    TransactionStatus.DISPUTED: {TransactionStatus.NORMAL, TransactionStatus.CHARGED_BACK},
    TransactionStatus.CHARGED_BACK: set(),
}


@dataclass
class Transaction:
    """One parsed input row. amount is None for dispute, resolve and chargeback."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __str__(self) -> str:
        text = f"{self.transaction_type.value} client={self.client_id} tx={self.transaction_id}"
        if self.amount is not None:
            text += f" amount={self.amount}"
        return text


@dataclass
class ClientAccount:
    """
    Balances for one client. available and held are stored; total is always their sum.
    Frozen funds move through freeze/unfreeze so both sides change together.
    """

    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def deposit(self, amount: Decimal) -> None:
        self.available += amount

    def withdraw(self, amount: Decimal) -> None:
        self.available -= amount

    def freeze(self, amount: Decimal, from_available: bool) -> None:
        """Add amount to held, taking it out of available when from_available is set."""
        if from_available:
            self.available -= amount
        self.held += amount

    def unfreeze(self, amount: Decimal, to_available: bool) -> None:
        """Reverse of freeze."""
        self.held -= amount
        if to_available:
            self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        """Held funds leave the account and the account is locked for good."""
        self.held -= amount
        self.locked = True


@dataclass(frozen=True)
class LedgerEntry:
    """
    A stored deposit or withdrawal, kept for dispute lookups.
    Identity fields are frozen; status changes go through TransactionLedger.transition.
    """

    transaction_id: int
    client_id: int
    amount: Decimal
    kind: TransactionType
    status: TransactionStatus = TransactionStatus.NORMAL

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "LedgerEntry":
        return cls(
            transaction_id=transaction.transaction_id,
            client_id=transaction.client_id,
            amount=transaction.amount,
            kind=transaction.transaction_type,
        )


class ProcessingStats:
    """Run counters: applied records, rejections by error class name, unreadable rows."""

    def __init__(self):
        self.processed = 0
        self.skipped = 0
        self.failures: Counter = Counter()

    @property
    def failed(self) -> int:
        return sum(self.failures.values())

    def record_success(self):
        self.processed += 1

    def record_failure(self, kind: str):
        self.failures[kind] += 1

    def record_skipped(self):
        self.skipped += 1
