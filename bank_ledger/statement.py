"""
Statement Export Module

Writes an account's ledger as CSV: one header row, then one row per entry
in chronological order.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Union

from .logging_config import get_logger, log_action

if TYPE_CHECKING:
    from .engine import Bank

STATEMENT_HEADER = "Timestamp,Type,Amount,BalanceAfter,Note"

logger = get_logger("bank_ledger.statement")


def default_statement_filename(account_number: str) -> str:
    """File name used when exporting into a directory"""
    return f"{account_number}_statement.csv"


def export_statement(bank: 'Bank', account_number: str, path: Union[str, Path]) -> bool:
    """
    Export the statement for `account_number`

    Args:
        bank: Engine holding the account
        account_number: Account to export
        path: Destination file, or a directory to write the default file name into

    Returns:
        True if the account existed and the file was written
    """
    account = bank.get_account(account_number)
    if account is None:
        log_action(
            logger, "warning", "Statement export for unknown account",
            action="export_statement", resource=f"account:{account_number}"
        )
        return False

    destination = Path(path)
    if destination.is_dir():
        destination = destination / default_statement_filename(account_number)

    entries = account.ledger
    try:
        with open(destination, "w", encoding="utf-8", newline="") as handle:
            handle.write(STATEMENT_HEADER + "\n")
            for entry in entries:
                handle.write(entry.to_csv_row() + "\n")
    except OSError as e:
        log_action(
            logger, "error", f"Statement export failed: {e}",
            action="export_statement", resource=f"account:{account_number}"
        )
        return False

    log_action(
        logger, "info", "Statement exported",
        action="export_statement", resource=f"account:{account_number}",
        extra={"path": str(destination), "rows": len(entries)}
    )
    return True
