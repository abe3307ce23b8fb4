"""Ledger boundary: where rooms, members and expenses come from.

The engine never talks to storage directly. Anything that implements
:class:`LedgerReader` can feed it: the SQLite database, the HTTP API client or
the in-memory ledger used for JSON files and tests.
"""

import logging
from datetime import UTC, datetime
from typing import Any, Protocol

from .exceptions import InvalidCategoryError, RoomNotFoundError
from .models import VALID_CATEGORIES, Expense, Member, Payment, Room, Share
from .money import parse_amount

logger = logging.getLogger(__name__)


class LedgerReader(Protocol):
    """Read access to a room's ledger.

    Implementations must return members and expenses in a stable order; the
    settlement planner breaks ties by member order.
    """

    def get_room(self, room_id: str) -> Room: ...

    def list_active_members(self, room_id: str) -> list[Member]: ...

    def list_expenses(
        self,
        room_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Expense]: ...


class InMemoryLedger:
    """Ledger held in plain lists, in insertion order."""

    def __init__(
        self,
        rooms: list[Room] | None = None,
        members: list[Member] | None = None,
        expenses: list[Expense] | None = None,
    ):
        """Initialize the ledger with optional seed records."""
        self.rooms = {room.id: room for room in rooms or []}
        self.members = list(members or [])
        self.expenses = list(expenses or [])

    def add_room(self, room: Room) -> None:
        self.rooms[room.id] = room

    def add_member(self, member: Member) -> None:
        self.members.append(member)

    def add_expense(self, expense: Expense) -> None:
        self.expenses.append(expense)

    def get_room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def list_active_members(self, room_id: str) -> list[Member]:
        return [m for m in self.members if m.room_id == room_id and m.is_active]

    def list_expenses(
        self,
        room_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Expense]:
        return [
            exp
            for exp in self.expenses
            if exp.room_id == room_id and in_window(exp.expense_date, start, end)
        ]


def in_window(
    value: datetime, start: datetime | None = None, end: datetime | None = None
) -> bool:
    """Check whether ``value`` falls inside an inclusive, optionally open window."""
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


# ============================================================================
# Record parsing
# ============================================================================


def parse_datetime(value: str | datetime) -> datetime:
    """
    Parse an ISO 8601 timestamp into a naive datetime.

    Timezone-aware values are converted to UTC first so every expense date can
    be compared against the naive month windows.
    """
    parsed = (
        value
        if isinstance(value, datetime)
        else datetime.fromisoformat(value.replace("Z", "+00:00"))
    )
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def room_from_record(record: dict[str, Any]) -> Room:
    """Build a Room from a camelCase API/JSON record."""
    return Room(
        id=str(record["id"]),
        name=record["name"],
        currency_code=record.get("currencyCode") or "USD",
    )


def member_from_record(record: dict[str, Any]) -> Member:
    """Build a Member from a camelCase API/JSON record."""
    return Member(
        id=str(record["id"]),
        full_name=record["fullName"],
        room_id=str(record["roomId"]),
        nickname=record.get("nickname"),
        is_active=record.get("isActive", True),
    )


def expense_from_record(record: dict[str, Any]) -> Expense:
    """
    Build an Expense from a camelCase API/JSON record.

    Payments and shares are read from ``expensePayments``/``expenseShares``
    (falling back to ``payments``/``shares``).

    Raises:
        InvalidAmountError: If any paid or owed amount is missing or invalid
        InvalidCategoryError: If the category is not a known category
    """
    expense_id = str(record["id"])

    category = record.get("category")
    if category not in VALID_CATEGORIES:
        raise InvalidCategoryError(
            f"Invalid category {category!r} on expense {expense_id}. "
            f"Must be one of: {', '.join(VALID_CATEGORIES)}"
        )

    payments = [
        Payment(
            member_id=str(p["memberId"]) if p.get("memberId") else None,
            paid_amount=parse_amount(
                p.get("paidAmount"), field="paidAmount", record_id=expense_id
            ),
        )
        for p in record.get("expensePayments", record.get("payments")) or []
    ]
    shares = [
        Share(
            member_id=str(s["memberId"]),
            owed_amount=parse_amount(
                s.get("owedAmount"), field="owedAmount", record_id=expense_id
            ),
        )
        for s in record.get("expenseShares", record.get("shares")) or []
    ]

    return Expense(
        id=expense_id,
        room_id=str(record["roomId"]),
        title=record["title"],
        description=record.get("description"),
        category=category,
        expense_date=parse_datetime(record["expenseDate"]),
        payments=tuple(payments),
        shares=tuple(shares),
    )
