"""
Wallet Error Types

Domain-specific exceptions raised by the ledger, the aggregators and the
dump codec. Every error also derives from ValueError so callers that treat
business-rule violations as bad input keep working.
"""

from typing import Optional


class WalletError(Exception):
    """Base class for all wallet errors"""
    message = "wallet error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class PhoneAlreadyRegisteredError(WalletError, ValueError):
    """Raised when registering a phone number that already has an account"""
    message = "phone already registered"


class AmountMustBePositiveError(WalletError, ValueError):
    """Raised when a deposit or payment amount is zero or negative"""
    message = "amount must be greater than zero"


class AccountNotFoundError(WalletError, ValueError):
    """Raised when no account matches the requested id"""
    message = "account not found"


class NotEnoughBalanceError(WalletError, ValueError):
    """Raised when a payment exceeds the account balance"""
    message = "not enough balance"


class PaymentNotFoundError(WalletError, ValueError):
    """Raised when no payment matches the requested id"""
    message = "payment(s) not found"


class FavoriteNotFoundError(WalletError, ValueError):
    """Raised when no favorite matches the requested id"""
    message = "favorite not found"


class InvalidRecordsCountError(WalletError, ValueError):
    """Raised when history files are requested with fewer than one record per file"""
    message = "there must be at least 1 record"


class DumpFormatError(WalletError, ValueError):
    """Raised when a dump record cannot be parsed"""
    message = "malformed dump record"
