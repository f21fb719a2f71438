"""
Error Taxonomy and Operation Results

Validation failures are raised by account primitives as BankingError
subclasses. The engine converts them into an OperationResult so callers
can branch on a status instead of catching. Insufficient funds is the
DECLINED status: a normal business outcome, never an error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from .accounts import Account
    from .entries import LedgerEntry


class BankingError(ValueError):
    """Base class for ledger validation errors"""


class InvalidArgumentError(BankingError):
    """Malformed holder name, malformed credential or same-account transfer"""


class InvalidAmountError(BankingError):
    """Missing, non-numeric or non-positive amount"""


class AccountNotFoundError(BankingError):
    """Unknown account number in an operation requiring an existing account"""

    def __init__(self, account_number: str):
        super().__init__(f"Account not found: {account_number}")
        self.account_number = account_number


class OperationStatus(Enum):
    """Outcome of an engine operation"""
    SUCCESS = "success"
    DECLINED = "declined"                  # Insufficient funds
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_AMOUNT = "invalid_amount"
    ACCOUNT_NOT_FOUND = "account_not_found"

    @property
    def is_error(self) -> bool:
        return self not in (OperationStatus.SUCCESS, OperationStatus.DECLINED)


_ERROR_TYPES = {
    OperationStatus.INVALID_ARGUMENT: InvalidArgumentError,
    OperationStatus.INVALID_AMOUNT: InvalidAmountError,
}


@dataclass(frozen=True)
class OperationResult:
    """
    Result of a mutating engine operation

    `account` is the primary account involved (the created account for
    create_account, the source account for transfer). `entries` holds the
    ledger entries appended by the operation, in order.
    """
    status: OperationStatus
    message: str = ""
    account: Optional['Account'] = None
    entries: Tuple['LedgerEntry', ...] = ()

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def declined(self) -> bool:
        return self.status == OperationStatus.DECLINED

    @property
    def is_error(self) -> bool:
        return self.status.is_error

    def raise_for_error(self) -> 'OperationResult':
        """Raise the matching BankingError for error statuses, else return self"""
        if self.status == OperationStatus.ACCOUNT_NOT_FOUND:
            raise AccountNotFoundError(self.message.rsplit(": ", 1)[-1])
        error_type = _ERROR_TYPES.get(self.status)
        if error_type:
            raise error_type(self.message)
        return self

    @classmethod
    def success(cls, message: str = "", account: Optional['Account'] = None,
                entries: Tuple['LedgerEntry', ...] = ()) -> 'OperationResult':
        return cls(OperationStatus.SUCCESS, message, account, tuple(entries))

    @classmethod
    def decline(cls, message: str, account: Optional['Account'] = None) -> 'OperationResult':
        return cls(OperationStatus.DECLINED, message, account)

    @classmethod
    def from_error(cls, error: BankingError) -> 'OperationResult':
        """Map a raised BankingError onto its status"""
        if isinstance(error, AccountNotFoundError):
            status = OperationStatus.ACCOUNT_NOT_FOUND
        elif isinstance(error, InvalidAmountError):
            status = OperationStatus.INVALID_AMOUNT
        else:
            status = OperationStatus.INVALID_ARGUMENT
        return cls(status, str(error))
