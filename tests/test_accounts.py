"""
Test suite for accounts module

Tests account primitives and the balance invariant:
balance == balance_after of the newest entry == sum of signed deltas.
"""

import pytest
from decimal import Decimal
from datetime import timedelta

from bank_ledger.accounts import Account, OPENING_NOTE
from bank_ledger.entries import EntryKind, LedgerEntry
from bank_ledger.errors import InvalidAmountError
from bank_ledger.security import hash_credential


def make_account(opening='100.00'):
    return Account(
        account_number="ACC100100",
        holder_name="Alice",
        credential_hash=hash_credential("1234"),
        opening_balance=Decimal(opening)
    )


def ledger_sum(account):
    return sum((entry.signed_delta for entry in account.ledger), Decimal('0'))


class TestAccountCreation:
    """Test account construction"""

    def test_opening_entry(self):
        """Test a new account starts with one INITIAL entry"""
        account = make_account('100.00')

        assert account.balance == Decimal('100.00')
        assert len(account.ledger) == 1

        entry = account.ledger[0]
        assert entry.kind == EntryKind.INITIAL
        assert entry.amount == Decimal('100.00')
        assert entry.balance_after == Decimal('100.00')
        assert entry.note == OPENING_NOTE
        assert account.opening_balance == Decimal('100.00')

    def test_opening_balance_rounded(self):
        account = make_account('10.005')
        assert account.balance == Decimal('10.01')

    def test_zero_opening_balance(self):
        account = make_account('0')
        assert account.balance == Decimal('0.00')
        assert account.ledger[0].amount == Decimal('0.00')

    def test_negative_opening_balance_rejected(self):
        with pytest.raises(InvalidAmountError):
            make_account('-1.00')

    def test_identity_fields(self):
        account = make_account()
        assert account.account_number == "ACC100100"
        assert account.holder_name == "Alice"
        assert account.credential_hash == hash_credential("1234")
        assert "1234" not in repr(account)


class TestDepositWithdraw:
    """Test customer-facing primitives"""

    def test_deposit(self):
        account = make_account('100.00')
        entry = account.deposit(Decimal('50.00'))

        assert account.balance == Decimal('150.00')
        assert entry.kind == EntryKind.DEPOSIT
        assert entry.amount == Decimal('50.00')
        assert entry.balance_after == Decimal('150.00')
        assert entry.note is None
        assert account.ledger[-1] == entry

    def test_deposit_invalid_amounts(self):
        account = make_account()
        for bad in [None, Decimal('0'), Decimal('-5'), "abc"]:
            with pytest.raises(InvalidAmountError):
                account.deposit(bad)
        assert len(account.ledger) == 1
        assert account.balance == Decimal('100.00')

    def test_withdraw(self):
        account = make_account('100.00')
        entry = account.withdraw(Decimal('40.00'))

        assert entry is not None
        assert entry.kind == EntryKind.WITHDRAWAL
        assert account.balance == Decimal('60.00')

    def test_withdraw_entire_balance(self):
        account = make_account('100.00')
        assert account.withdraw(Decimal('100.00')) is not None
        assert account.balance == Decimal('0.00')

    def test_withdraw_insufficient_funds_declined(self):
        """Test insufficient funds is a declined result, not an error"""
        account = make_account('150.00')
        before = account.ledger

        assert account.withdraw(Decimal('200.00')) is None
        assert account.balance == Decimal('150.00')
        assert account.ledger == before

    def test_withdraw_invalid_amount_raises(self):
        account = make_account()
        with pytest.raises(InvalidAmountError):
            account.withdraw(Decimal('-1'))

    def test_deposit_withdraw_round_trip(self):
        account = make_account('12.34')
        account.deposit(Decimal('99.99'))
        account.withdraw(Decimal('99.99'))
        assert account.balance == Decimal('12.34')


class TestTransferLegs:
    """Test engine-only transfer primitives"""

    def test_transfer_out_annotates_counterparty(self):
        account = make_account('150.00')
        entry = account.transfer_out(Decimal('75.00'), "ACC100101")

        assert entry.kind == EntryKind.TRANSFER_OUT
        assert entry.note == "to ACC100101"
        assert account.balance == Decimal('75.00')

    def test_transfer_in_annotates_counterparty(self):
        account = make_account('0.00')
        entry = account.transfer_in(Decimal('75.00'), "ACC100100")

        assert entry.kind == EntryKind.TRANSFER_IN
        assert entry.note == "from ACC100100"
        assert account.balance == Decimal('75.00')

    def test_transfer_out_has_no_sufficiency_check(self):
        """Test legs adjust unconditionally; the engine checks funds"""
        account = make_account('10.00')
        account.transfer_out(Decimal('25.00'), "ACC100101")
        assert account.balance == Decimal('-15.00')


class TestInvariants:
    """Test ledger invariants"""

    def test_balance_matches_ledger(self):
        account = make_account('100.00')
        account.deposit(Decimal('50.00'))
        account.withdraw(Decimal('30.25'))
        account.transfer_in(Decimal('10.10'), "ACC100101")
        account.transfer_out(Decimal('5.05'), "ACC100101")

        assert account.balance == Decimal('124.80')
        assert account.balance == account.ledger[-1].balance_after
        assert account.balance == ledger_sum(account)
        assert account.verify_integrity()

    def test_ledger_is_append_only(self):
        """Test each earlier ledger is a prefix of the later one"""
        account = make_account()
        before = account.ledger
        account.deposit(Decimal('1.00'))
        after = account.ledger

        assert after[:len(before)] == before
        assert len(after) == len(before) + 1

    def test_ledger_view_is_immutable(self):
        account = make_account()
        view = account.ledger
        assert isinstance(view, tuple)
        with pytest.raises(AttributeError):
            view.append("x")

    def test_timestamps_non_decreasing(self):
        account = make_account()
        for _ in range(20):
            account.deposit(Decimal('1.00'))
        stamps = [entry.timestamp for entry in account.ledger]
        assert stamps == sorted(stamps)


class TestRestore:
    """Test rebuilding accounts from persisted entries"""

    def test_restore_round_trip(self):
        account = make_account('100.00')
        account.deposit(Decimal('5.00'))

        restored = Account.restore(
            account.account_number, account.holder_name,
            account.credential_hash, account.ledger
        )
        assert restored.ledger == account.ledger
        assert restored.balance == Decimal('105.00')

    def test_restore_requires_initial_entry(self):
        account = make_account()
        deposit = account.deposit(Decimal('5.00'))
        with pytest.raises(ValueError, match="INITIAL"):
            Account.restore("ACC1", "Bob", "x", [deposit])

    def test_restore_rejects_inconsistent_balances(self):
        account = make_account('100.00')
        opening = account.ledger[0]
        bogus = LedgerEntry(
            timestamp=opening.timestamp + timedelta(seconds=1),
            kind=EntryKind.DEPOSIT,
            amount=Decimal('5.00'),
            balance_after=Decimal('999.00')
        )
        with pytest.raises(ValueError, match="inconsistent"):
            Account.restore("ACC1", "Bob", "x", [opening, bogus])
