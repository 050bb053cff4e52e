"""
Wallet Data Model

Accounts, payments and favorite payment templates held by the ledger.
All money values are integers in minor units (e.g. cents); floats are never
used for amounts.
"""

from dataclasses import dataclass, replace
from enum import Enum


Money = int


class PaymentStatus(Enum):
    """Lifecycle states of a payment, valued by their dump representation"""
    OK = "OK"
    FAIL = "FAIL"
    IN_PROGRESS = "INPROGRESS"


@dataclass
class Account:
    """
    Registered wallet account
    Balance is mutated by deposit, pay and reject
    """
    id: int
    phone: str
    balance: Money = 0


@dataclass
class Payment:
    """
    Payment debited from an account
    Only the status changes after creation (on reject)
    """
    id: str
    account_id: int
    amount: Money
    category: str
    status: PaymentStatus = PaymentStatus.IN_PROGRESS

    @property
    def is_failed(self) -> bool:
        """Check if payment was rejected"""
        return self.status == PaymentStatus.FAIL

    def copy(self) -> 'Payment':
        """Detached copy, safe to hand out to callers"""
        return replace(self)


@dataclass(frozen=True)
class Favorite:
    """Saved payment template used to create new payments"""
    id: str
    account_id: int
    name: str
    amount: Money
    category: str


@dataclass(frozen=True)
class Partition:
    """Half-open index range [start, end) processed by one worker"""
    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start
