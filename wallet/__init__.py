"""
Wallet

In-memory ledger of accounts, payments and favorite payment templates, with
thread-parallel payment aggregation and a delimited text dump format.
"""

__version__ = "1.0.0"

from .errors import (
    WalletError, PhoneAlreadyRegisteredError, AmountMustBePositiveError,
    AccountNotFoundError, NotEnoughBalanceError, PaymentNotFoundError,
    FavoriteNotFoundError, InvalidRecordsCountError, DumpFormatError
)
from .models import Account, Payment, Favorite, PaymentStatus, Partition
from .partition import plan_partitions, partition_ranges
from .aggregator import sum_payments, filter_payments, filter_payments_by_fn
from .service import WalletService

__all__ = [
    "WalletError",
    "PhoneAlreadyRegisteredError",
    "AmountMustBePositiveError",
    "AccountNotFoundError",
    "NotEnoughBalanceError",
    "PaymentNotFoundError",
    "FavoriteNotFoundError",
    "InvalidRecordsCountError",
    "DumpFormatError",
    "Account",
    "Payment",
    "Favorite",
    "PaymentStatus",
    "Partition",
    "plan_partitions",
    "partition_ranges",
    "sum_payments",
    "filter_payments",
    "filter_payments_by_fn",
    "WalletService",
]
