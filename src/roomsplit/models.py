"""Pydantic domain models for RoomSplit."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

from .money import to_display

ExpenseCategory = Literal[
    "rent",
    "groceries",
    "utilities",
    "internet",
    "supplies",
    "maintenance",
    "other",
]

VALID_CATEGORIES: tuple[str, ...] = get_args(ExpenseCategory)


# ============================================================================
# Ledger Models
# ============================================================================


class Room(BaseModel):
    """A group of members sharing expenses in a single currency."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    currency_code: str = "USD"


class Member(BaseModel):
    """A person belonging to a room."""

    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str
    room_id: str
    nickname: str | None = None
    is_active: bool = True


class Payment(BaseModel):
    """A contribution of money toward an expense."""

    model_config = ConfigDict(frozen=True)

    member_id: str | None  # None when the paying member record was removed
    paid_amount: Decimal = Field(ge=0)


class Share(BaseModel):
    """An obligation of a member toward an expense's cost."""

    model_config = ConfigDict(frozen=True)

    member_id: str
    owed_amount: Decimal = Field(ge=0)


class Expense(BaseModel):
    """A shared expense with its payments and owed shares."""

    model_config = ConfigDict(frozen=True)

    id: str
    room_id: str
    title: str
    description: str | None = None
    category: ExpenseCategory
    expense_date: datetime
    payments: tuple[Payment, ...] = ()
    shares: tuple[Share, ...] = ()


# ============================================================================
# Engine Output Models
# ============================================================================


class MemberBalance(BaseModel):
    """A member's net position over a set of expenses.

    Sign convention: positive ``balance`` means the member owes money into the
    group; negative means the group owes the member.
    """

    member_id: str
    member_name: str
    total_paid: Decimal
    total_owed: Decimal
    balance: Decimal

    def to_response(self) -> dict[str, Any]:
        return {
            "memberId": self.member_id,
            "memberName": self.member_name,
            "totalPaid": to_display(self.total_paid),
            "totalOwed": to_display(self.total_owed),
            "balance": to_display(self.balance),
        }


class Transfer(BaseModel):
    """A suggested payment from a debtor to a creditor."""

    from_member_id: str
    from_name: str
    to_member_id: str
    to_name: str
    amount: Decimal = Field(gt=0)

    def to_response(self) -> dict[str, Any]:
        return {
            "fromId": self.from_member_id,
            "from": self.from_name,
            "toId": self.to_member_id,
            "to": self.to_name,
            "amount": to_display(self.amount),
        }


class BalanceReport(BaseModel):
    """Balances for a room together with the transfers that settle them."""

    balances: list[MemberBalance]
    who_owes_whom: list[Transfer]

    def payable_transfers(self) -> list[Transfer]:
        """Transfers worth at least a cent once rounded for display.

        Amounts with more than two decimal places can leave sub-cent
        transfers in ``who_owes_whom``; they are kept there but never shown.
        """
        return [t for t in self.who_owes_whom if to_display(t.amount) > 0]

    def to_response(self) -> dict[str, Any]:
        """Shape the report for API consumers, rounding amounts to cents."""
        return {
            "balances": [b.to_response() for b in self.balances],
            "whoOwesWhom": [t.to_response() for t in self.payable_transfers()],
        }


# ============================================================================
# Analytics Models
# ============================================================================


class Period(BaseModel):
    """An inclusive date-time window."""

    start: datetime
    end: datetime

    def to_response(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


class MemberTotal(BaseModel):
    """Paid and owed totals for a member within a period."""

    member_id: str
    member_name: str
    total_paid: Decimal
    total_owed: Decimal

    def to_response(self) -> dict[str, Any]:
        return {
            "memberId": self.member_id,
            "memberName": self.member_name,
            "totalPaid": to_display(self.total_paid),
            "totalOwed": to_display(self.total_owed),
        }


class MonthlySummary(BaseModel):
    """Spending in a room over one month."""

    period: Period
    total_expenses: Decimal
    expense_count: int
    member_totals: list[MemberTotal]

    def to_response(self) -> dict[str, Any]:
        return {
            "period": self.period.to_response(),
            "totalExpenses": to_display(self.total_expenses),
            "expenseCount": self.expense_count,
            "memberTotals": [m.to_response() for m in self.member_totals],
        }


class CategoryTotal(BaseModel):
    """Spending in one category."""

    category: ExpenseCategory
    total_amount: Decimal
    expense_count: int

    def to_response(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "totalAmount": to_display(self.total_amount),
            "expenseCount": self.expense_count,
        }


class MonthlyTrend(BaseModel):
    """Spending in one calendar month, keyed ``YYYY-MM``."""

    month: str
    total_amount: Decimal
    expense_count: int

    def to_response(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "totalAmount": to_display(self.total_amount),
            "expenseCount": self.expense_count,
        }


class DashboardStats(BaseModel):
    """Headline numbers for a room's dashboard."""

    room: Room
    period: Period
    total_roommates: int
    current_month_total: Decimal
    all_time_total: Decimal
    average_cost_per_person: Decimal  # already rounded for display
    current_month_expense_count: int
    all_time_expense_count: int
    members: list[Member] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        """Shape the dashboard for API consumers, rounding amounts to cents."""
        return {
            "room": {
                "id": self.room.id,
                "name": self.room.name,
                "currencyCode": self.room.currency_code,
            },
            "period": self.period.to_response(),
            "totalRoommates": self.total_roommates,
            "currentMonthTotal": to_display(self.current_month_total),
            "allTimeTotal": to_display(self.all_time_total),
            "averageCostPerPerson": to_display(self.average_cost_per_person),
            "currentMonthExpenseCount": self.current_month_expense_count,
            "allTimeExpenseCount": self.all_time_expense_count,
            "members": [
                {"id": m.id, "fullName": m.full_name, "nickname": m.nickname}
                for m in self.members
            ],
        }
