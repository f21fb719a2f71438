"""
Account Module

An account owns an append-only ledger of entries. The balance is never
stored separately: it is the balance_after of the newest entry, so the
balance and the ledger can never disagree.
"""

from decimal import Decimal
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from .entries import EntryKind, LedgerEntry
from .errors import InvalidAmountError
from .money import ZERO, MoneyLike, quantize, to_money, to_positive_money

OPENING_NOTE = "Account opened"


class Account:
    """
    Bank account with an immutable transaction history

    deposit() and withdraw() validate their input. transfer_out() and
    transfer_in() are legs of the engine's transfer protocol and perform
    no sufficiency check: the engine checks funds before either leg runs.
    """

    def __init__(
        self,
        account_number: str,
        holder_name: str,
        credential_hash: str,
        opening_balance: MoneyLike = ZERO
    ):
        opening = to_money(opening_balance)
        if opening < ZERO:
            raise InvalidAmountError("Opening balance cannot be negative.")

        self._account_number = account_number
        self._holder_name = holder_name
        self._credential_hash = credential_hash
        self._entries: List[LedgerEntry] = []
        self._append(EntryKind.INITIAL, opening, opening, OPENING_NOTE)

    @classmethod
    def restore(
        cls,
        account_number: str,
        holder_name: str,
        credential_hash: str,
        entries: Iterable[LedgerEntry]
    ) -> 'Account':
        """
        Rebuild an account from persisted ledger entries

        Raises:
            ValueError: If the history does not start with an INITIAL entry
                or its running balances are inconsistent
        """
        history = list(entries)
        if not history or history[0].kind != EntryKind.INITIAL:
            raise ValueError(f"Ledger for {account_number} must start with an INITIAL entry")

        account = cls.__new__(cls)
        account._account_number = account_number
        account._holder_name = holder_name
        account._credential_hash = credential_hash
        account._entries = history

        if not account.verify_integrity():
            raise ValueError(f"Ledger for {account_number} has inconsistent balances")

        return account

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def holder_name(self) -> str:
        return self._holder_name

    @property
    def credential_hash(self) -> str:
        return self._credential_hash

    @property
    def balance(self) -> Decimal:
        """Current balance (balance_after of the newest entry)"""
        return self._entries[-1].balance_after

    @property
    def opening_balance(self) -> Decimal:
        return self._entries[0].amount

    @property
    def ledger(self) -> Tuple[LedgerEntry, ...]:
        """Read-only view of the ledger in chronological order"""
        return tuple(self._entries)

    def deposit(self, amount: MoneyLike) -> LedgerEntry:
        """
        Deposit money into the account

        Raises:
            InvalidAmountError: If amount is missing or not positive
        """
        value = to_positive_money(amount)
        return self._append(EntryKind.DEPOSIT, value, self.balance + value)

    def withdraw(self, amount: MoneyLike) -> Optional[LedgerEntry]:
        """
        Withdraw money if the balance covers it

        Returns:
            The WITHDRAWAL entry, or None when declined for insufficient funds

        Raises:
            InvalidAmountError: If amount is missing or not positive
        """
        value = to_positive_money(amount)
        if self.balance < value:
            return None
        return self._append(EntryKind.WITHDRAWAL, value, self.balance - value)

    def transfer_out(self, amount: Decimal, counterparty: str) -> LedgerEntry:
        """Debit leg of a transfer (engine use only)"""
        value = quantize(amount)
        return self._append(EntryKind.TRANSFER_OUT, value, self.balance - value,
                            f"to {counterparty}")

    def transfer_in(self, amount: Decimal, counterparty: str) -> LedgerEntry:
        """Credit leg of a transfer (engine use only)"""
        value = quantize(amount)
        return self._append(EntryKind.TRANSFER_IN, value, self.balance + value,
                            f"from {counterparty}")

    def verify_integrity(self) -> bool:
        """Recompute the running balance and check every balance_after"""
        running = ZERO
        for index, entry in enumerate(self._entries):
            if index > 0 and entry.kind == EntryKind.INITIAL:
                return False
            if index > 0 and entry.timestamp < self._entries[index - 1].timestamp:
                return False
            running = quantize(running + entry.signed_delta)
            if running != entry.balance_after:
                return False
        return True

    def _append(self, kind: EntryKind, amount: Decimal, balance_after: Decimal,
                note: Optional[str] = None) -> LedgerEntry:
        now = datetime.now(timezone.utc)
        # Keep timestamps non-decreasing even if the wall clock steps back
        if self._entries and now < self._entries[-1].timestamp:
            now = self._entries[-1].timestamp

        entry = LedgerEntry(
            timestamp=now,
            kind=kind,
            amount=amount,
            balance_after=quantize(balance_after),
            note=note
        )
        self._entries.append(entry)
        return entry

    def __repr__(self) -> str:
        return (f"Account(account_number={self._account_number!r}, "
                f"holder_name={self._holder_name!r}, balance={self.balance})")
