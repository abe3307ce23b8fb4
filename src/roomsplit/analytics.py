"""Spending summaries over a room's expenses.

Plain aggregation over the same inputs as the balance engine. Nothing here
rounds; callers round for display.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from .balances import aggregate_balances
from .models import (
    CategoryTotal,
    DashboardStats,
    Expense,
    Member,
    MemberTotal,
    MonthlySummary,
    MonthlyTrend,
    Period,
    Room,
)
from .money import ZERO, average, sum_amounts
from .periods import month_key


def expense_total(expense: Expense) -> Decimal:
    """Total paid toward an expense."""
    return sum_amounts(p.paid_amount for p in expense.payments)


def total_spent(expenses: Iterable[Expense]) -> Decimal:
    """Total paid across expenses."""
    return sum_amounts(expense_total(exp) for exp in expenses)


def monthly_summary(
    expenses: Sequence[Expense],
    members: Sequence[Member],
    window: tuple[datetime, datetime],
) -> MonthlySummary:
    """Summarize spending and per-member paid/owed totals for a period."""
    balances = aggregate_balances(expenses, members)
    return MonthlySummary(
        period=Period(start=window[0], end=window[1]),
        total_expenses=total_spent(expenses),
        expense_count=len(expenses),
        member_totals=[
            MemberTotal(
                member_id=b.member_id,
                member_name=b.member_name,
                total_paid=b.total_paid,
                total_owed=b.total_owed,
            )
            for b in balances
        ],
    )


def category_summary(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """Total and count per category, largest total first."""
    totals: dict[str, tuple[Decimal, int]] = {}
    for expense in expenses:
        amount, count = totals.get(expense.category, (ZERO, 0))
        totals[expense.category] = (amount + expense_total(expense), count + 1)

    categories = [
        CategoryTotal(category=category, total_amount=amount, expense_count=count)
        for category, (amount, count) in totals.items()
    ]
    # Stable sort keeps first-seen order for equal totals
    categories.sort(key=lambda c: c.total_amount, reverse=True)
    return categories


def monthly_trends(expenses: Iterable[Expense]) -> list[MonthlyTrend]:
    """Total and count per ``YYYY-MM`` month, oldest first."""
    months: dict[str, tuple[Decimal, int]] = {}
    for expense in expenses:
        key = month_key(expense.expense_date)
        amount, count = months.get(key, (ZERO, 0))
        months[key] = (amount + expense_total(expense), count + 1)

    return [
        MonthlyTrend(month=key, total_amount=amount, expense_count=count)
        for key, (amount, count) in sorted(months.items())
    ]


def dashboard_stats(
    room: Room,
    members: Sequence[Member],
    month_expenses: Sequence[Expense],
    all_expenses: Sequence[Expense],
    window: tuple[datetime, datetime],
) -> DashboardStats:
    """
    Headline numbers for a room.

    The average cost per person divides the month's total by the number of
    active members and is rounded only at the end. It is zero for a room
    with no members.
    """
    month_total = total_spent(month_expenses)
    return DashboardStats(
        room=room,
        period=Period(start=window[0], end=window[1]),
        total_roommates=len(members),
        current_month_total=month_total,
        all_time_total=total_spent(all_expenses),
        average_cost_per_person=average(month_total, len(members)),
        current_month_expense_count=len(month_expenses),
        all_time_expense_count=len(all_expenses),
        members=list(members),
    )
