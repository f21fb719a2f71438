"""
Ledger Engine Module

The Bank owns every account, mints account numbers and serializes all
access through one engine-wide lock. Transfers debit the source and credit
the destination inside a single critical section, so no caller ever
observes only one leg applied.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
import threading

from .accounts import Account
from .config import BankLedgerConfig, get_config
from .errors import (
    AccountNotFoundError, BankingError, InvalidAmountError,
    InvalidArgumentError, OperationResult
)
from .logging_config import get_logger, log_action
from .money import ZERO, format_money, quantize, to_money, to_positive_money
from .security import hash_credential, is_valid_credential, verify_credential


class Bank:
    """
    Ledger engine managing the account collection

    Mutating operations return an OperationResult rather than raising:
    SUCCESS, DECLINED (insufficient funds) or one of the error statuses.
    """

    def __init__(self, config: Optional[BankLedgerConfig] = None, next_sequence: Optional[int] = None):
        self.config = config or get_config()
        self._accounts: Dict[str, Account] = {}
        self._next_sequence = (
            next_sequence if next_sequence is not None else self.config.account_number_start
        )
        self._lock = threading.RLock()
        self.logger = get_logger("bank_ledger.engine")

    @classmethod
    def from_state(
        cls,
        accounts: Iterable[Account],
        next_sequence: int,
        config: Optional[BankLedgerConfig] = None
    ) -> 'Bank':
        """
        Rebuild an engine from restored accounts

        The sequence is advanced past every numeric suffix already in use
        so a restored engine never re-mints an existing number.
        """
        bank = cls(config=config, next_sequence=next_sequence)
        for account in accounts:
            if account.account_number in bank._accounts:
                raise ValueError(f"Duplicate account number {account.account_number}")
            bank._accounts[account.account_number] = account

            suffix = bank._sequence_of(account.account_number)
            if suffix is not None and suffix >= bank._next_sequence:
                bank._next_sequence = suffix + 1
        return bank

    @property
    def next_sequence(self) -> int:
        """Next value of the account number sequence"""
        with self._lock:
            return self._next_sequence

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)

    # ---------- Core operations ----------

    def create_account(
        self,
        holder_name: Optional[str],
        credential: Optional[str],
        opening_deposit: Any = None
    ) -> OperationResult:
        """
        Open a new account

        Args:
            holder_name: Account holder; must be non-empty after trimming
            credential: PIN matching the configured pattern (4-6 digits)
            opening_deposit: Optional opening balance, defaults to 0.00

        Returns:
            OperationResult with the new account on success
        """
        with self._lock:
            try:
                name = holder_name.strip() if isinstance(holder_name, str) else ""
                if not name:
                    raise InvalidArgumentError("Name required")
                if not is_valid_credential(credential, self.config.credential_pattern):
                    raise InvalidArgumentError("PIN must be 4-6 digits")

                opening = ZERO if opening_deposit is None else to_money(opening_deposit)
                if opening < ZERO:
                    raise InvalidAmountError("Opening deposit cannot be negative.")

                account = Account(
                    account_number=self._mint_account_number(),
                    holder_name=name,
                    credential_hash=hash_credential(credential),
                    opening_balance=opening
                )
            except BankingError as e:
                return self._rejected("create_account", None, e)

            self._accounts[account.account_number] = account

            log_action(
                self.logger, "info", "Account created",
                action="create_account", resource=f"account:{account.account_number}",
                extra={"opening_balance": format_money(account.balance)}
            )
            return OperationResult.success(
                "Account created", account=account, entries=account.ledger
            )

    def get_account(self, account_number: str) -> Optional[Account]:
        """Get account by number, or None when it does not exist"""
        with self._lock:
            return self._accounts.get(account_number)

    def authenticate(self, account_number: str, credential: str) -> Optional[Account]:
        """
        Return the account only if the credential matches its stored hash

        Unknown accounts and wrong credentials give the same None result.
        """
        with self._lock:
            account = self._accounts.get(account_number)
            # Hash even when the account is missing so both failures cost the same
            stored_hash = account.credential_hash if account else hash_credential("")
            matched = verify_credential(credential, stored_hash)

            if account and matched:
                return account

            log_action(
                self.logger, "warning", "Authentication failed",
                action="authenticate", resource=f"account:{account_number}"
            )
            return None

    def deposit(self, account_number: str, amount: Any) -> OperationResult:
        """Deposit into an existing account"""
        with self._lock:
            try:
                account = self._get_required(account_number)
                entry = account.deposit(amount)
            except BankingError as e:
                return self._rejected("deposit", account_number, e)

            log_action(
                self.logger, "info", "Deposit posted",
                action="deposit", resource=f"account:{account_number}",
                extra={"amount": format_money(entry.amount),
                       "balance_after": format_money(entry.balance_after)}
            )
            return OperationResult.success("Deposit posted", account=account, entries=(entry,))

    def withdraw(self, account_number: str, amount: Any) -> OperationResult:
        """Withdraw from an existing account; DECLINED on insufficient funds"""
        with self._lock:
            try:
                account = self._get_required(account_number)
                entry = account.withdraw(amount)
            except BankingError as e:
                return self._rejected("withdraw", account_number, e)

            if entry is None:
                return self._declined("withdraw", account)

            log_action(
                self.logger, "info", "Withdrawal posted",
                action="withdraw", resource=f"account:{account_number}",
                extra={"amount": format_money(entry.amount),
                       "balance_after": format_money(entry.balance_after)}
            )
            return OperationResult.success("Withdrawal posted", account=account, entries=(entry,))

    def transfer(self, from_number: str, to_number: str, amount: Any) -> OperationResult:
        """
        Move money between two accounts

        Validation order: same account, both accounts exist, positive
        amount, sufficient funds. Both legs run inside the engine lock.

        Returns:
            OperationResult whose entries are (TRANSFER_OUT, TRANSFER_IN)
        """
        with self._lock:
            try:
                if from_number == to_number:
                    raise InvalidArgumentError("Cannot transfer to the same account")
                source = self._get_required(from_number)
                destination = self._get_required(to_number)
                value = to_positive_money(amount)
            except BankingError as e:
                return self._rejected("transfer", from_number, e)

            if source.balance < value:
                return self._declined("transfer", source)

            debit = source.transfer_out(value, destination.account_number)
            credit = destination.transfer_in(value, source.account_number)

            log_action(
                self.logger, "info", "Transfer posted",
                action="transfer", resource=f"account:{from_number}",
                extra={"amount": format_money(value), "to_account": to_number}
            )
            return OperationResult.success(
                "Transfer posted", account=source, entries=(debit, credit)
            )

    def close_account(self, account_number: str) -> OperationResult:
        """Remove an account; its ledger is discarded"""
        with self._lock:
            account = self._accounts.pop(account_number, None)
            if account is None:
                return self._rejected("close_account", account_number,
                                      AccountNotFoundError(account_number))

            log_action(
                self.logger, "info", "Account closed",
                action="close_account", resource=f"account:{account_number}",
                extra={"final_balance": format_money(account.balance)}
            )
            return OperationResult.success("Account closed", account=account)

    def list_accounts(self) -> List[Account]:
        """All accounts sorted by account number"""
        with self._lock:
            return sorted(self._accounts.values(), key=lambda a: a.account_number)

    def total_holdings(self) -> Decimal:
        """Sum of all balances, read in one critical section"""
        with self._lock:
            return quantize(sum((a.balance for a in self._accounts.values()), ZERO))

    # ---------- Persistence and export ----------

    def snapshot_state(self) -> Dict[str, Any]:
        """Serializable image of the whole engine, taken under the lock"""
        with self._lock:
            return {
                "next_sequence": self._next_sequence,
                "accounts": [
                    {
                        "account_number": account.account_number,
                        "holder_name": account.holder_name,
                        "credential_hash": account.credential_hash,
                        "ledger": [entry.to_dict() for entry in account.ledger]
                    }
                    for account in self.list_accounts()
                ]
            }

    @classmethod
    def load(cls, path: str, config: Optional[BankLedgerConfig] = None) -> 'Bank':
        """Load an engine from a snapshot file, or a fresh one on any failure"""
        from .snapshot import load_snapshot
        return load_snapshot(path, config=config)

    def save(self, path: str) -> bool:
        """Write a snapshot; returns False on failure"""
        from .snapshot import save_snapshot
        return save_snapshot(self, path)

    def export_statement(self, account_number: str, path: str) -> bool:
        """Write a CSV statement; returns False if the account is unknown or the write fails"""
        from .statement import export_statement
        return export_statement(self, account_number, path)

    # ---------- Helpers ----------

    def _mint_account_number(self) -> str:
        number = f"{self.config.account_number_prefix}{self._next_sequence}"
        self._next_sequence += 1
        return number

    def _sequence_of(self, account_number: str) -> Optional[int]:
        prefix = self.config.account_number_prefix
        if not account_number.startswith(prefix):
            return None
        suffix = account_number[len(prefix):]
        return int(suffix) if suffix.isdigit() else None

    def _get_required(self, account_number: str) -> Account:
        account = self._accounts.get(account_number)
        if account is None:
            raise AccountNotFoundError(account_number)
        return account

    def _rejected(self, action: str, account_number: Optional[str], error: BankingError) -> OperationResult:
        result = OperationResult.from_error(error)
        log_action(
            self.logger, "warning", f"{action} rejected: {error}",
            action=action,
            resource=f"account:{account_number}" if account_number else None,
            extra={"status": result.status.value}
        )
        return result

    def _declined(self, action: str, account: Account) -> OperationResult:
        log_action(
            self.logger, "info", f"{action} declined: insufficient funds",
            action=action, resource=f"account:{account.account_number}",
            extra={"balance": format_money(account.balance)}
        )
        return OperationResult.decline("Insufficient funds", account=account)
