"""Service layer that feeds ledger data through the balance engine.

The service owns no state beyond its injected ledger; every call reads fresh
records and hands them to the pure functions in ``balances``, ``settlement``
and ``analytics``.
"""

import logging
from datetime import date

from .analytics import (
    category_summary,
    dashboard_stats,
    monthly_summary,
    monthly_trends,
)
from .balances import total_imbalance
from .ledger import LedgerReader
from .models import (
    BalanceReport,
    CategoryTotal,
    DashboardStats,
    MonthlySummary,
    MonthlyTrend,
)
from .periods import month_window, resolve_window, trend_start
from .settlement import compute_report, outstanding_after

logger = logging.getLogger(__name__)


class BalanceService:
    """Computes balances, settlements and spending summaries for rooms."""

    def __init__(self, ledger: LedgerReader, trend_months: int = 6):
        """Initialize the service with a ledger reader."""
        self.ledger = ledger
        self.trend_months = trend_months

    def get_balances(
        self, room_id: str, year: int | None = None, month: int | None = None
    ) -> BalanceReport:
        """
        Compute who owes whom in a room.

        Expenses are limited to one calendar month only when both ``year`` and
        ``month`` are given; otherwise every expense in the room counts.
        Nothing carries over from outside the selected window.

        Args:
            room_id: The room ID
            year: Optional year of the month to settle
            month: Optional month (1-12) to settle

        Returns:
            Balances for every active member and the suggested transfers
        """
        self.ledger.get_room(room_id)

        start = end = None
        if year is not None and month is not None:
            start, end = month_window(year, month)

        expenses = self.ledger.list_expenses(room_id, start=start, end=end)
        members = self.ledger.list_active_members(room_id)

        report = compute_report(expenses, members)

        imbalance = total_imbalance(report.balances)
        if imbalance != 0:
            residual = outstanding_after(report.balances, report.who_owes_whom)
            unmatched = [m for m, amount in residual.items() if amount != 0]
            logger.warning(
                f"Room {room_id} shares and payments differ by {imbalance}; "
                f"{len(unmatched)} members keep an unmatched balance"
            )

        logger.info(
            f"Computed {len(report.balances)} balances and "
            f"{len(report.who_owes_whom)} transfers from {len(expenses)} expenses"
        )
        return report

    def get_monthly_summary(
        self,
        room_id: str,
        year: int | None = None,
        month: int | None = None,
        today: date | None = None,
    ) -> MonthlySummary:
        """Summarize a month of spending (defaults to the current month)."""
        start, end = resolve_window(year, month, today)
        expenses = self.ledger.list_expenses(room_id, start=start, end=end)
        members = self.ledger.list_active_members(room_id)
        return monthly_summary(expenses, members, (start, end))

    def get_category_summary(
        self,
        room_id: str,
        year: int | None = None,
        month: int | None = None,
        today: date | None = None,
    ) -> list[CategoryTotal]:
        """Spending per category for a month (defaults to the current month)."""
        start, end = resolve_window(year, month, today)
        expenses = self.ledger.list_expenses(room_id, start=start, end=end)
        return category_summary(expenses)

    def get_trends(
        self, room_id: str, months: int | None = None, today: date | None = None
    ) -> list[MonthlyTrend]:
        """Spending per month over the last ``months`` months."""
        start = trend_start(self.trend_months if months is None else months, today)
        expenses = self.ledger.list_expenses(room_id, start=start)
        return monthly_trends(expenses)

    def get_dashboard(
        self,
        room_id: str,
        year: int | None = None,
        month: int | None = None,
        today: date | None = None,
    ) -> DashboardStats:
        """
        Headline numbers for a room.

        Raises:
            RoomNotFoundError: If the room does not exist
        """
        room = self.ledger.get_room(room_id)
        start, end = resolve_window(year, month, today)

        members = self.ledger.list_active_members(room_id)
        month_expenses = self.ledger.list_expenses(room_id, start=start, end=end)
        all_expenses = self.ledger.list_expenses(room_id)

        return dashboard_stats(
            room, members, month_expenses, all_expenses, (start, end)
        )
