"""Tests for the BalanceService layer."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from roomsplit.db import Database
from roomsplit.exceptions import LedgerAPIError, RoomNotFoundError
from roomsplit.ledger import InMemoryLedger
from roomsplit.models import Expense, Member, Payment, Room, Share
from roomsplit.service import BalanceService


def make_expense(
    id: str, when: datetime, payer: str, amount: str, shares: dict[str, str]
) -> Expense:
    return Expense(
        id=id,
        room_id="room_1",
        title=id,
        category="groceries",
        expense_date=when,
        payments=[Payment(member_id=payer, paid_amount=Decimal(amount))],
        shares=[Share(member_id=m, owed_amount=Decimal(a)) for m, a in shares.items()],
    )


@pytest.fixture
def ledger():
    """Three roommates with one expense in February and two in March."""
    return InMemoryLedger(
        rooms=[Room(id="room_1", name="Flat")],
        members=[
            Member(id="a", full_name="Ada", room_id="room_1"),
            Member(id="b", full_name="Bo", room_id="room_1"),
            Member(id="c", full_name="Cy", room_id="room_1"),
        ],
        expenses=[
            make_expense(
                "feb", datetime(2024, 2, 10), "c", "90", {"a": "30", "b": "30", "c": "30"}
            ),
            make_expense(
                "mar1", datetime(2024, 3, 3), "a", "30", {"a": "10", "b": "10", "c": "10"}
            ),
            make_expense(
                "mar2", datetime(2024, 3, 20), "b", "15", {"a": "5", "b": "5", "c": "5"}
            ),
        ],
    )


@pytest.fixture
def service(ledger):
    return BalanceService(ledger)


class TestGetBalances:
    def test_month_filter(self, service):
        report = service.get_balances("room_1", year=2024, month=3)

        assert {b.member_id: b.balance for b in report.balances} == {
            "a": Decimal("-15"),
            "b": Decimal("0"),
            "c": Decimal("15"),
        }
        assert [
            (t.from_member_id, t.to_member_id, t.amount) for t in report.who_owes_whom
        ] == [("c", "a", Decimal("15"))]

    def test_no_filter_uses_every_expense(self, service):
        report = service.get_balances("room_1")

        balances = {b.member_id: b.balance for b in report.balances}
        assert balances == {"a": Decimal("15"), "b": Decimal("30"), "c": Decimal("-45")}
        assert [
            (t.from_member_id, t.to_member_id, t.amount) for t in report.who_owes_whom
        ] == [("a", "c", Decimal("15")), ("b", "c", Decimal("30"))]

    def test_year_without_month_is_unfiltered(self, service):
        assert service.get_balances("room_1", year=2024) == service.get_balances(
            "room_1"
        )

    def test_no_carry_over_between_months(self, service):
        report = service.get_balances("room_1", year=2024, month=2)

        assert {b.member_id: b.balance for b in report.balances} == {
            "a": Decimal("30"),
            "b": Decimal("30"),
            "c": Decimal("-60"),
        }

    def test_empty_month(self, service):
        report = service.get_balances("room_1", year=2023, month=1)

        assert all(b.balance == 0 for b in report.balances)
        assert report.who_owes_whom == []

    def test_room_without_members(self, ledger):
        ledger.add_room(Room(id="room_2", name="Empty"))

        report = BalanceService(ledger).get_balances("room_2")

        assert report.balances == []
        assert report.who_owes_whom == []

    def test_unknown_room(self, service):
        with pytest.raises(RoomNotFoundError):
            service.get_balances("nope")

    def test_unbalanced_month_logs_unmatched_members(self, ledger, caplog):
        ledger.add_expense(
            make_expense(
                "apr", datetime(2024, 4, 5), "a", "30", {"a": "15", "b": "15", "c": "15"}
            )
        )

        with caplog.at_level("WARNING", logger="roomsplit.service"):
            report = BalanceService(ledger).get_balances("room_1", year=2024, month=4)

        assert [(t.from_member_id, t.amount) for t in report.who_owes_whom] == [
            ("b", Decimal("15"))
        ]
        assert "differ by 15" in caplog.text
        assert "1 members keep an unmatched balance" in caplog.text

    def test_balanced_month_logs_no_warning(self, service, caplog):
        with caplog.at_level("WARNING", logger="roomsplit.service"):
            service.get_balances("room_1", year=2024, month=3)

        assert not [r for r in caplog.records if r.levelname == "WARNING"]

    def test_ledger_errors_propagate(self):
        ledger = MagicMock()
        ledger.list_expenses.side_effect = LedgerAPIError("database unavailable")

        with pytest.raises(LedgerAPIError, match="database unavailable"):
            BalanceService(ledger).get_balances("room_1")

    def test_window_is_passed_to_ledger(self):
        ledger = MagicMock()
        ledger.list_expenses.return_value = []
        ledger.list_active_members.return_value = []

        BalanceService(ledger).get_balances("room_1", year=2024, month=2)

        ledger.list_expenses.assert_called_once_with(
            "room_1",
            start=datetime(2024, 2, 1),
            end=datetime(2024, 2, 29, 23, 59, 59),
        )

    def test_same_result_from_sqlite(self, ledger, tmp_path):
        db = Database(tmp_path / "ledger.db")
        try:
            for room in ledger.rooms.values():
                db.save_room(room)
            for member in ledger.members:
                db.save_member(member)
            for expense in ledger.expenses:
                db.save_expense(expense)

            from_db = BalanceService(db).get_balances("room_1", year=2024, month=3)
        finally:
            db.close()

        assert from_db == BalanceService(ledger).get_balances(
            "room_1", year=2024, month=3
        )


class TestAnalytics:
    def test_monthly_summary_defaults_to_current_month(self, service):
        summary = service.get_monthly_summary("room_1", today=date(2024, 3, 25))

        assert summary.expense_count == 2
        assert summary.total_expenses == Decimal("45")

    def test_category_summary(self, service):
        result = service.get_category_summary("room_1", year=2024, month=2)

        assert [(c.category, c.total_amount) for c in result] == [
            ("groceries", Decimal("90"))
        ]

    def test_trends(self, service):
        result = service.get_trends("room_1", months=1, today=date(2024, 3, 25))

        assert [t.month for t in result] == ["2024-02", "2024-03"]

    def test_trends_default_window(self, ledger):
        service = BalanceService(ledger, trend_months=0)

        result = service.get_trends("room_1", today=date(2024, 3, 25))

        assert [t.month for t in result] == ["2024-03"]

    def test_dashboard(self, service):
        stats = service.get_dashboard("room_1", year=2024, month=3)

        assert stats.room.name == "Flat"
        assert stats.total_roommates == 3
        assert stats.current_month_total == Decimal("45")
        assert stats.all_time_total == Decimal("135")
        assert stats.average_cost_per_person == Decimal("15.00")

    def test_dashboard_unknown_room(self, service):
        with pytest.raises(RoomNotFoundError):
            service.get_dashboard("nope")
