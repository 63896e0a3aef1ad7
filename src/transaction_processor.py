import logging

from account_store import AccountStore
from errors import AccountLocked, DuplicateTransaction, InsufficientFunds, InvalidAmount
from models import ClientAccount, LedgerEntry, Transaction, TransactionStatus, TransactionType
from transaction_ledger import TransactionLedger

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the account store and the transaction ledger.
    Every check runs before any balance moves, so a rejected record leaves all state untouched.
    """

    def __init__(self, accounts: AccountStore, ledger: TransactionLedger):
        self._accounts = accounts
        self._ledger = ledger

    def process_transaction(self, transaction: Transaction) -> None:
        """
        Process a single transaction.

        Raises a ProcessingError subclass if the record is rejected:
            AccountLocked, InvalidAmount, InsufficientFunds, DuplicateTransaction
                for deposits and withdrawals, checked in that order
            UnknownTransaction, ClientMismatch, InvalidState
                for disputes, resolves and chargebacks
        """
        account = self._accounts.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                self._handle_dispute(account, transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(account, transaction)

    def _check_movement(self, account: ClientAccount, transaction: Transaction) -> None:
        if account.locked:
            raise AccountLocked(transaction, f"client {account.client_id} is locked")

        if transaction.amount is None or transaction.amount <= 0:
            raise InvalidAmount(transaction, f"invalid amount {transaction.amount}")

    def _record_entry(self, transaction: Transaction) -> None:
        # Last check before balances move; the ledger refuses reused ids.
        if not self._ledger.insert_if_absent(LedgerEntry.from_transaction(transaction)):
            raise DuplicateTransaction(transaction, "transaction id already processed")

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> None:
        self._check_movement(account, transaction)
        self._record_entry(transaction)
        account.deposit(transaction.amount)

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> None:
        self._check_movement(account, transaction)

        if account.available < transaction.amount:
            raise InsufficientFunds(
                transaction,
                f"available {account.available} is less than {transaction.amount}",
            )

        self._record_entry(transaction)
        account.withdraw(transaction.amount)

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._ledger.transition(transaction, TransactionStatus.DISPUTED)
        # A withdrawal already took the funds out of available.
        account.freeze(entry.amount, from_available=entry.kind == TransactionType.DEPOSIT)

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._ledger.transition(transaction, TransactionStatus.NORMAL)
        account.unfreeze(entry.amount, to_available=entry.kind == TransactionType.DEPOSIT)

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> None:
        entry = self._ledger.transition(transaction, TransactionStatus.CHARGED_BACK)
        account.charge_back(entry.amount)
        logger.info(f"Chargeback for tx {entry.transaction_id}: client {account.client_id} locked")
