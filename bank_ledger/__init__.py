"""
Bank Ledger

Account ledger engine with fixed-point Decimal money, append-only
per-account ledgers and atomic transfers under an engine-wide lock.
"""

from .accounts import Account
from .engine import Bank
from .entries import EntryKind, LedgerEntry
from .errors import (
    AccountNotFoundError, BankingError, InvalidAmountError,
    InvalidArgumentError, OperationResult, OperationStatus
)

__version__ = "1.0.0"

__all__ = [
    "Account",
    "AccountNotFoundError",
    "Bank",
    "BankingError",
    "EntryKind",
    "InvalidAmountError",
    "InvalidArgumentError",
    "LedgerEntry",
    "OperationResult",
    "OperationStatus",
]
