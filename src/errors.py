from models import Transaction


class ProcessingError(Exception):
    """
    Base class for per-record rejections.
    Never fatal: the engine logs the error and moves on to the next record.
    """

    def __init__(self, transaction: Transaction, reason: str):
        super().__init__(f"{reason} ({transaction})")
        self.transaction = transaction
        self.reason = reason


class InvalidAmount(ProcessingError):
    """Deposit or withdrawal with a missing or non-positive amount."""


class AccountLocked(ProcessingError):
    """Deposit or withdrawal against a charged-back account."""


class InsufficientFunds(ProcessingError):
    """Withdrawal larger than the available balance."""


class DuplicateTransaction(ProcessingError):
    """Deposit or withdrawal reusing a stored transaction id."""


class UnknownTransaction(ProcessingError):
    """Dispute, resolve or chargeback for an id with no stored deposit/withdrawal."""


class ClientMismatch(ProcessingError):
    """Dispute-family record whose client differs from the stored entry's client."""


class InvalidState(ProcessingError):
    """Dispute-family record against an entry not in the required status."""
