"""
Ledger Entry Module

Immutable records of balance-affecting events. Entries are created by
account primitives, never modified, and rendered either for display or as
delimited statement rows.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Any, Dict, Optional
from enum import Enum

from .money import format_money, quantize

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class EntryKind(Enum):
    """Kinds of ledger entries"""
    INITIAL = "INITIAL"            # Opening balance
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"

    @property
    def is_credit(self) -> bool:
        """Check if this kind increases the balance"""
        return self in (EntryKind.INITIAL, EntryKind.DEPOSIT, EntryKind.TRANSFER_IN)


@dataclass(frozen=True)
class LedgerEntry:
    """
    One balance-affecting event on an account

    `amount` is always the magnitude of the event; the direction comes
    from `kind`.
    """
    timestamp: datetime
    kind: EntryKind
    amount: Decimal
    balance_after: Decimal
    note: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'amount', quantize(self.amount))
        object.__setattr__(self, 'balance_after', quantize(self.balance_after))

        if self.amount < Decimal('0'):
            raise ValueError("Ledger entry amount cannot be negative")

        if self.kind != EntryKind.INITIAL and self.amount == Decimal('0'):
            raise ValueError(f"{self.kind.value} entry amount must be positive")

    @property
    def signed_delta(self) -> Decimal:
        """Signed contribution of this entry to the account balance"""
        return self.amount if self.kind.is_credit else -self.amount

    def to_display(self) -> str:
        """Single-line rendering for interactive history views"""
        text = (f"{self.timestamp.strftime(TIMESTAMP_FORMAT)} | {self.kind.value} | "
                f"{format_money(self.amount)} | Bal: {format_money(self.balance_after)}")
        if self.note:
            text += f" | {self.note}"
        return text

    def __str__(self) -> str:
        return self.to_display()

    def to_csv_row(self) -> str:
        """
        Statement row: Timestamp,Type,Amount,BalanceAfter,Note

        The note is always quoted, even when empty, with embedded quotes
        doubled.
        """
        note = (self.note or "").replace('"', '""')
        return ",".join([
            self.timestamp.strftime(TIMESTAMP_FORMAT),
            self.kind.value,
            format_money(self.amount),
            format_money(self.balance_after),
            f'"{note}"'
        ])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for snapshot storage"""
        return {
            'timestamp': self.timestamp.isoformat(),
            'kind': self.kind.value,
            'amount': str(self.amount),
            'balance_after': str(self.balance_after),
            'note': self.note
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LedgerEntry':
        """Create entry from a snapshot dictionary"""
        timestamp = datetime.fromisoformat(data['timestamp'])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)

        return cls(
            timestamp=timestamp,
            kind=EntryKind(data['kind']),
            amount=Decimal(data['amount']),
            balance_after=Decimal(data['balance_after']),
            note=data.get('note')
        )
