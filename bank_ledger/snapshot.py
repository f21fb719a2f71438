"""
Snapshot Persistence Module

Saves and restores the whole engine as one JSON document. Loading never
raises: a missing, unreadable or corrupt snapshot yields a fresh engine.
Saving writes a temporary file beside the target and swaps it in, so a
failed save leaves the previous snapshot intact.
"""

from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import os
import tempfile

from .accounts import Account
from .config import BankLedgerConfig
from .engine import Bank
from .entries import LedgerEntry
from .logging_config import get_logger, log_action

FORMAT_VERSION = 1

logger = get_logger("bank_ledger.snapshot")


class SnapshotError(ValueError):
    """Snapshot document is structurally invalid"""


def save_snapshot(bank: Bank, path: Union[str, Path]) -> bool:
    """
    Write the engine state to `path`

    Returns:
        True on success, False if the destination could not be written
    """
    target = Path(path)
    document = {"format_version": FORMAT_VERSION}
    document.update(bank.snapshot_state())

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
        )
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(document, handle, indent=2)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        log_action(
            logger, "error", f"Snapshot save failed: {e}",
            action="save_snapshot", resource=str(target)
        )
        return False
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    log_action(
        logger, "info", "Snapshot saved",
        action="save_snapshot", resource=str(target),
        extra={"accounts": len(document["accounts"])}
    )
    return True


def load_snapshot(path: Union[str, Path], config: Optional[BankLedgerConfig] = None) -> Bank:
    """
    Restore an engine from `path`

    Returns a fresh empty engine when the file does not exist or cannot be
    parsed into a consistent state.
    """
    source = Path(path)
    if not source.exists():
        return Bank(config=config)

    try:
        with open(source, "r", encoding="utf-8") as handle:
            document = json.load(handle)
        bank = _bank_from_document(document, config)
    except (OSError, ValueError, KeyError, TypeError, AttributeError,
            InvalidOperation, RecursionError) as e:
        # JSONDecodeError and SnapshotError are ValueErrors
        log_action(
            logger, "warning", f"Snapshot unreadable, starting empty: {e}",
            action="load_snapshot", resource=str(source)
        )
        return Bank(config=config)

    log_action(
        logger, "info", "Snapshot loaded",
        action="load_snapshot", resource=str(source),
        extra={"accounts": len(bank)}
    )
    return bank


def _bank_from_document(document: Any, config: Optional[BankLedgerConfig]) -> Bank:
    if not isinstance(document, dict):
        raise SnapshotError("Snapshot root must be an object")

    version = document.get("format_version")
    if version != FORMAT_VERSION:
        raise SnapshotError(f"Unsupported snapshot format version: {version!r}")

    next_sequence = document["next_sequence"]
    if not isinstance(next_sequence, int) or isinstance(next_sequence, bool):
        raise SnapshotError("next_sequence must be an integer")

    accounts: List[Account] = [_account_from_dict(data) for data in document["accounts"]]
    return Bank.from_state(accounts, next_sequence, config=config)


def _account_from_dict(data: Dict[str, Any]) -> Account:
    for key in ("account_number", "holder_name", "credential_hash"):
        value = data[key]
        if not isinstance(value, str) or not value.strip():
            raise SnapshotError(f"Account field {key} must be a non-empty string")

    for entry in data["ledger"]:
        note = entry["note"] if "note" in entry else None
        if note is not None and not isinstance(note, str):
            raise SnapshotError(f"Ledger note for {data['account_number']} must be text")

    entries = [LedgerEntry.from_dict(entry) for entry in data["ledger"]]
    return Account.restore(
        account_number=data["account_number"],
        holder_name=data["holder_name"],
        credential_hash=data["credential_hash"],
        entries=entries
    )
