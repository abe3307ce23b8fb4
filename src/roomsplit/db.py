"""SQLite database operations for RoomSplit."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from .exceptions import RoomNotFoundError
from .ledger import parse_datetime
from .models import Expense, Member, Payment, Room, Share
from .money import parse_amount

logger = logging.getLogger(__name__)


class Database:
    """SQLite-backed ledger.

    Amounts are stored as TEXT so they round-trip as exact decimals.
    Members and expenses come back in insertion order.
    """

    def __init__(self, db_path: Path | str):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS rooms (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                currency_code TEXT NOT NULL DEFAULT 'USD',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS members (
                id TEXT PRIMARY KEY,
                room_id TEXT NOT NULL REFERENCES rooms(id),
                full_name TEXT NOT NULL,
                nickname TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id TEXT PRIMARY KEY,
                room_id TEXT NOT NULL REFERENCES rooms(id),
                title TEXT NOT NULL,
                description TEXT,
                category TEXT NOT NULL,
                expense_date TIMESTAMP NOT NULL
            )
        """
        )

        # member_id is nullable: payments outlive deleted members
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_payments (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                expense_id TEXT NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
                member_id TEXT,
                paid_amount TEXT NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS expense_shares (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                expense_id TEXT NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
                member_id TEXT NOT NULL,
                owed_amount TEXT NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_expenses_room_date
            ON expenses (room_id, expense_date)
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Room operations
    # ========================================================================

    def save_room(self, room: Room):
        """Insert or update a room."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO rooms (id, name, currency_code)
            VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                currency_code = excluded.currency_code
            """,
            (room.id, room.name, room.currency_code),
        )
        self.conn.commit()

    def get_room(self, room_id: str) -> Room:
        """Get a room by ID."""
        cursor = self.conn.cursor()
        cursor.execute(
            "SELECT id, name, currency_code FROM rooms WHERE id = ?", (room_id,)
        )
        row = cursor.fetchone()
        if not row:
            raise RoomNotFoundError(room_id)

        return Room(id=row["id"], name=row["name"], currency_code=row["currency_code"])

    # ========================================================================
    # Member operations
    # ========================================================================

    def save_member(self, member: Member):
        """Insert or update a member."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO members (id, room_id, full_name, nickname, is_active)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                room_id = excluded.room_id,
                full_name = excluded.full_name,
                nickname = excluded.nickname,
                is_active = excluded.is_active
            """,
            (
                member.id,
                member.room_id,
                member.full_name,
                member.nickname,
                int(member.is_active),
            ),
        )
        self.conn.commit()

    def list_active_members(self, room_id: str) -> list[Member]:
        """Get active members of a room, oldest first."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT id, room_id, full_name, nickname, is_active
            FROM members
            WHERE room_id = ? AND is_active = 1
            ORDER BY created_at, rowid
            """,
            (room_id,),
        )
        return [
            Member(
                id=row["id"],
                room_id=row["room_id"],
                full_name=row["full_name"],
                nickname=row["nickname"],
                is_active=bool(row["is_active"]),
            )
            for row in cursor.fetchall()
        ]

    # ========================================================================
    # Expense operations
    # ========================================================================

    def save_expense(self, expense: Expense):
        """Insert or replace an expense along with its payments and shares."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO expenses (
                id, room_id, title, description, category, expense_date
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                room_id = excluded.room_id,
                title = excluded.title,
                description = excluded.description,
                category = excluded.category,
                expense_date = excluded.expense_date
            """,
            (
                expense.id,
                expense.room_id,
                expense.title,
                expense.description,
                expense.category,
                expense.expense_date.isoformat(),
            ),
        )

        cursor.execute(
            "DELETE FROM expense_payments WHERE expense_id = ?", (expense.id,)
        )
        cursor.execute("DELETE FROM expense_shares WHERE expense_id = ?", (expense.id,))

        cursor.executemany(
            """
            INSERT INTO expense_payments (expense_id, member_id, paid_amount)
            VALUES (?, ?, ?)
            """,
            [(expense.id, p.member_id, str(p.paid_amount)) for p in expense.payments],
        )
        cursor.executemany(
            """
            INSERT INTO expense_shares (expense_id, member_id, owed_amount)
            VALUES (?, ?, ?)
            """,
            [(expense.id, s.member_id, str(s.owed_amount)) for s in expense.shares],
        )
        self.conn.commit()

    def list_expenses(
        self,
        room_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Expense]:
        """Get a room's expenses within an optional inclusive date window."""
        query = """
            SELECT id, room_id, title, description, category, expense_date
            FROM expenses
            WHERE room_id = ?
        """
        params: list[str] = [room_id]
        if start is not None:
            query += " AND expense_date >= ?"
            params.append(start.isoformat())
        if end is not None:
            query += " AND expense_date <= ?"
            params.append(end.isoformat())
        query += " ORDER BY expense_date, rowid"

        cursor = self.conn.cursor()
        cursor.execute(query, params)
        rows = cursor.fetchall()

        payments = self._load_payments([row["id"] for row in rows])
        shares = self._load_shares([row["id"] for row in rows])

        expenses = [
            Expense(
                id=row["id"],
                room_id=row["room_id"],
                title=row["title"],
                description=row["description"],
                category=row["category"],
                expense_date=parse_datetime(row["expense_date"]),
                payments=tuple(payments.get(row["id"], [])),
                shares=tuple(shares.get(row["id"], [])),
            )
            for row in rows
        ]

        logger.debug(f"Loaded {len(expenses)} expenses for room {room_id}")
        return expenses

    def _load_payments(self, expense_ids: list[str]) -> dict[str, list[Payment]]:
        """Load payments grouped by expense ID."""
        grouped: dict[str, list[Payment]] = {}
        for row in self._select_children("expense_payments", expense_ids):
            grouped.setdefault(row["expense_id"], []).append(
                Payment(
                    member_id=row["member_id"],
                    paid_amount=parse_amount(
                        row["paid_amount"],
                        field="paid_amount",
                        record_id=row["expense_id"],
                    ),
                )
            )
        return grouped

    def _load_shares(self, expense_ids: list[str]) -> dict[str, list[Share]]:
        """Load shares grouped by expense ID."""
        grouped: dict[str, list[Share]] = {}
        for row in self._select_children("expense_shares", expense_ids):
            grouped.setdefault(row["expense_id"], []).append(
                Share(
                    member_id=row["member_id"],
                    owed_amount=parse_amount(
                        row["owed_amount"],
                        field="owed_amount",
                        record_id=row["expense_id"],
                    ),
                )
            )
        return grouped

    def _select_children(self, table: str, expense_ids: list[str]) -> list[sqlite3.Row]:
        """Select payment or share rows for the given expenses, in insertion order."""
        if not expense_ids:
            return []

        placeholders = ", ".join("?" for _ in expense_ids)
        cursor = self.conn.cursor()
        cursor.execute(
            f"SELECT * FROM {table} WHERE expense_id IN ({placeholders}) ORDER BY id",
            expense_ids,
        )
        return cursor.fetchall()
