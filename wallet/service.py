"""
Wallet Service Module

In-memory ledger of accounts, payments and favorite payment templates.
Operations are single-threaded; callers sharing a service across threads
must serialize access themselves. The only concurrent work is done by the
aggregation helpers, which read a snapshot of the payment list.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union
import uuid

from . import aggregator, dump
from .errors import (
    AccountNotFoundError, AmountMustBePositiveError, FavoriteNotFoundError,
    NotEnoughBalanceError, PaymentNotFoundError, PhoneAlreadyRegisteredError
)
from .logging_config import get_logger, log_action
from .models import Account, Favorite, Money, Payment, PaymentStatus


logger = get_logger("wallet.service")


class WalletService:
    """
    Owns the ledger collections and implements all bookkeeping operations

    Collections are dicts keyed by id; insertion order is the ledger order,
    and replacing an existing key keeps its position.
    """

    def __init__(self):
        self._next_account_id = 0
        self._accounts: Dict[int, Account] = {}
        self._payments: Dict[str, Payment] = {}
        self._favorites: Dict[str, Favorite] = {}

    @property
    def accounts(self) -> Tuple[Account, ...]:
        return tuple(self._accounts.values())

    @property
    def payments(self) -> Tuple[Payment, ...]:
        return tuple(self._payments.values())

    @property
    def favorites(self) -> Tuple[Favorite, ...]:
        return tuple(self._favorites.values())

    # Accounts

    def register_account(self, phone: str) -> Account:
        """
        Register a new account with zero balance

        Raises:
            PhoneAlreadyRegisteredError: phone already belongs to an account
        """
        for account in self._accounts.values():
            if account.phone == phone:
                logger.warning(f"Phone {phone} already registered to account {account.id}")
                raise PhoneAlreadyRegisteredError()

        self._next_account_id += 1
        account = Account(id=self._next_account_id, phone=phone, balance=0)
        self._accounts[account.id] = account

        log_action(logger, "info", f"Registered account {account.id}",
                   action="register_account", resource=f"account:{account.id}")
        return account

    def deposit(self, account_id: int, amount: Money) -> None:
        """
        Credit an account

        Raises:
            AmountMustBePositiveError: amount is zero or negative
            AccountNotFoundError: no such account
        """
        if amount <= 0:
            raise AmountMustBePositiveError()

        account = self.find_account_by_id(account_id)
        account.balance += amount

        log_action(logger, "info", f"Deposited {amount} to account {account_id}",
                   action="deposit", resource=f"account:{account_id}",
                   extra={"amount": amount, "balance": account.balance})

    def find_account_by_id(self, account_id: int) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account

    # Payments

    def pay(self, account_id: int, amount: Money, category: str) -> Payment:
        """
        Debit an account and record an in-progress payment

        Raises:
            AmountMustBePositiveError: amount is zero or negative
            AccountNotFoundError: no such account
            NotEnoughBalanceError: balance is lower than amount
        """
        if amount <= 0:
            raise AmountMustBePositiveError()

        account = self.find_account_by_id(account_id)
        if account.balance < amount:
            logger.warning(
                f"Payment of {amount} rejected for account {account_id}: balance {account.balance}"
            )
            raise NotEnoughBalanceError()

        account.balance -= amount
        payment = Payment(
            id=str(uuid.uuid4()),
            account_id=account_id,
            amount=amount,
            category=category,
            status=PaymentStatus.IN_PROGRESS
        )
        self._payments[payment.id] = payment

        log_action(logger, "info", f"Payment {payment.id} created",
                   action="pay", resource=f"payment:{payment.id}",
                   extra={"account_id": account_id, "amount": amount, "category": category})
        return payment

    def find_payment_by_id(self, payment_id: str) -> Payment:
        payment = self._payments.get(payment_id)
        if payment is None:
            raise PaymentNotFoundError()
        return payment

    def reject(self, payment_id: str) -> None:
        """
        Mark a payment as failed and refund its amount

        Raises:
            PaymentNotFoundError: no such payment
            AccountNotFoundError: the payment's account no longer exists
        """
        payment = self.find_payment_by_id(payment_id)
        account = self.find_account_by_id(payment.account_id)

        payment.status = PaymentStatus.FAIL
        account.balance += payment.amount

        log_action(logger, "info", f"Payment {payment_id} rejected",
                   action="reject", resource=f"payment:{payment_id}",
                   extra={"refund": payment.amount, "balance": account.balance})

    def repeat(self, payment_id: str) -> Payment:
        """Create a new payment with the same account, amount and category"""
        payment = self.find_payment_by_id(payment_id)
        return self.pay(payment.account_id, payment.amount, payment.category)

    # Favorites

    def favorite_payment(self, payment_id: str, name: str) -> Favorite:
        """Save a payment as a named template"""
        payment = self.find_payment_by_id(payment_id)

        favorite = Favorite(
            id=str(uuid.uuid4()),
            account_id=payment.account_id,
            name=name,
            amount=payment.amount,
            category=payment.category
        )
        self._favorites[favorite.id] = favorite

        log_action(logger, "info", f"Favorite {favorite.id} created from payment {payment_id}",
                   action="favorite_payment", resource=f"favorite:{favorite.id}")
        return favorite

    def find_favorite_by_id(self, favorite_id: str) -> Favorite:
        favorite = self._favorites.get(favorite_id)
        if favorite is None:
            raise FavoriteNotFoundError()
        return favorite

    def pay_from_favorite(self, favorite_id: str) -> Payment:
        favorite = self.find_favorite_by_id(favorite_id)
        return self.pay(favorite.account_id, favorite.amount, favorite.category)

    # History

    def export_account_history(self, account_id: int) -> List[Payment]:
        """
        Copies of an account's payments in ledger order

        Raises:
            AccountNotFoundError: no such account
        """
        self.find_account_by_id(account_id)
        return [p.copy() for p in self._payments.values() if p.account_id == account_id]

    def history_to_files(self, payments: Sequence[Payment], directory: Union[str, Path],
                         records: int) -> List[Path]:
        """Write payments into numbered dump files; see dump.write_history_files"""
        return dump.write_history_files(payments, directory, records)

    # Aggregation

    def sum_payments(self, worker_count: Optional[int] = None) -> Money:
        """Total amount of every payment, computed by parallel workers"""
        return aggregator.sum_payments(self.payments, worker_count)

    def filter_payments(self, account_id: int, worker_count: Optional[int] = None) -> List[Payment]:
        """
        Payments of one account, computed by parallel workers

        Raises:
            AccountNotFoundError: no such account
        """
        return aggregator.filter_payments(
            self.payments, account_id, worker_count, known_account_ids=self._accounts.keys()
        )

    # Dump

    def export_to_file(self, path: Union[str, Path]) -> None:
        """Write all accounts to a single "|"-separated file"""
        dump.export_accounts_to_file(self.accounts, path)

    def import_from_file(self, path: Union[str, Path]) -> None:
        """
        Append the accounts of a single-file dump

        Raises:
            FileNotFoundError: path does not exist
        """
        for account in dump.import_accounts_from_file(path):
            self._accounts[account.id] = account
        self._sync_next_account_id()

    def export(self, directory: Union[str, Path]) -> List[Path]:
        """Write non-empty collections to dump files in an existing directory"""
        return dump.export_to_directory(directory, self.accounts, self.payments, self.favorites)

    def import_(self, directory: Union[str, Path]) -> None:
        """
        Merge the dump files of a directory into the ledger

        Records replace existing ones with the same id and are appended
        otherwise. Missing dump files are ignored.
        """
        contents = dump.import_from_directory(directory)

        for account in contents.accounts:
            self._accounts[account.id] = account
        for payment in contents.payments:
            self._payments[payment.id] = payment
        for favorite in contents.favorites:
            self._favorites[favorite.id] = favorite

        self._sync_next_account_id()

    def _sync_next_account_id(self) -> None:
        self._next_account_id = max(self._accounts, default=0)
