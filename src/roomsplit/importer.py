"""Load ledgers from JSON exports."""

import json
import logging
from pathlib import Path

from .db import Database
from .ledger import (
    InMemoryLedger,
    expense_from_record,
    member_from_record,
    room_from_record,
)

logger = logging.getLogger(__name__)


def load_ledger_file(path: Path) -> InMemoryLedger:
    """
    Build an in-memory ledger from a JSON export.

    The file holds ``rooms``, ``members`` and ``expenses`` arrays using the
    same camelCase records as the room API.

    Raises:
        InvalidAmountError: If an expense has a missing or invalid amount
        InvalidCategoryError: If an expense has an unknown category
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))

    ledger = InMemoryLedger(
        rooms=[room_from_record(r) for r in data.get("rooms", [])],
        members=[member_from_record(m) for m in data.get("members", [])],
        expenses=[expense_from_record(e) for e in data.get("expenses", [])],
    )

    logger.info(
        f"Loaded {len(ledger.rooms)} rooms, {len(ledger.members)} members and "
        f"{len(ledger.expenses)} expenses from {path}"
    )
    return ledger


def import_into_database(ledger: InMemoryLedger, db: Database) -> int:
    """
    Copy every record of an in-memory ledger into the database.

    Rooms go first so members and expenses can reference them.

    Returns:
        Number of expenses written
    """
    for room in ledger.rooms.values():
        db.save_room(room)
    for member in ledger.members:
        db.save_member(member)
    for expense in ledger.expenses:
        db.save_expense(expense)

    logger.info(f"Imported {len(ledger.expenses)} expenses into {db.db_path}")
    return len(ledger.expenses)
