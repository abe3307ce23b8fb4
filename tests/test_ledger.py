"""Tests for ledger record parsing and the in-memory ledger."""

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from roomsplit.exceptions import (
    InvalidAmountError,
    InvalidCategoryError,
    RoomNotFoundError,
)
from roomsplit.ledger import (
    InMemoryLedger,
    expense_from_record,
    in_window,
    member_from_record,
    parse_datetime,
    room_from_record,
)
from roomsplit.models import Payment, Share


def expense_record(**overrides):
    """A camelCase expense record as returned by the room API."""
    record = {
        "id": "exp_1",
        "roomId": "room_1",
        "title": "Groceries",
        "description": "Weekly shop",
        "category": "groceries",
        "expenseDate": "2024-03-15T18:30:00.000Z",
        "expensePayments": [{"memberId": "m1", "paidAmount": "45.50"}],
        "expenseShares": [
            {"memberId": "m1", "owedAmount": "22.75"},
            {"memberId": "m2", "owedAmount": 22.75},
        ],
    }
    record.update(overrides)
    return record


class TestExpenseFromRecord:
    """Parsing expense records at the ledger boundary."""

    def test_parses_payments_and_shares(self):
        expense = expense_from_record(expense_record())

        assert expense.id == "exp_1"
        assert expense.room_id == "room_1"
        assert expense.category == "groceries"
        assert expense.expense_date == datetime(2024, 3, 15, 18, 30)
        assert expense.payments == (
            Payment(member_id="m1", paid_amount=Decimal("45.50")),
        )
        assert [s.owed_amount for s in expense.shares] == [
            Decimal("22.75"),
            Decimal("22.75"),
        ]

    def test_accepts_short_field_names(self):
        record = expense_record()
        record["payments"] = record.pop("expensePayments")
        record["shares"] = record.pop("expenseShares")

        expense = expense_from_record(record)

        assert len(expense.payments) == 1
        assert len(expense.shares) == 2

    def test_missing_shares_means_no_shares(self):
        record = expense_record()
        del record["expenseShares"]

        assert expense_from_record(record).shares == ()

    def test_payment_without_member_keeps_amount(self):
        record = expense_record(
            expensePayments=[{"memberId": None, "paidAmount": "10"}]
        )

        expense = expense_from_record(record)

        assert expense.payments[0].member_id is None

    def test_missing_owed_amount_is_rejected(self):
        record = expense_record(expenseShares=[{"memberId": "m2"}])

        with pytest.raises(InvalidAmountError) as exc_info:
            expense_from_record(record)

        assert exc_info.value.field == "owedAmount"
        assert exc_info.value.record_id == "exp_1"

    def test_non_numeric_paid_amount_is_rejected(self):
        record = expense_record(
            expensePayments=[{"memberId": "m1", "paidAmount": "twelve"}]
        )

        with pytest.raises(InvalidAmountError, match="paidAmount"):
            expense_from_record(record)

    def test_unknown_category_is_rejected(self):
        with pytest.raises(InvalidCategoryError, match="Must be one of"):
            expense_from_record(expense_record(category="travel"))


class TestModels:
    """Model-level validation."""

    def test_negative_payment_fails_validation(self):
        with pytest.raises(ValidationError):
            Payment(member_id="m1", paid_amount=Decimal("-1"))

    def test_negative_share_fails_validation(self):
        with pytest.raises(ValidationError):
            Share(member_id="m1", owed_amount=Decimal("-0.01"))


class TestOtherRecords:
    """Rooms, members and timestamps."""

    def test_room_defaults_currency(self):
        room = room_from_record({"id": "room_1", "name": "Flat"})

        assert room.currency_code == "USD"

    def test_member_record(self):
        member = member_from_record(
            {
                "id": "m1",
                "fullName": "Ada Lovelace",
                "roomId": "room_1",
                "nickname": "ada",
                "isActive": False,
            }
        )

        assert member.full_name == "Ada Lovelace"
        assert member.is_active is False

    def test_aware_timestamps_become_naive_utc(self):
        assert parse_datetime("2024-03-01T01:00:00+02:00") == datetime(
            2024, 2, 29, 23, 0
        )

    def test_naive_timestamps_are_kept(self):
        assert parse_datetime("2024-03-01T01:00:00") == datetime(2024, 3, 1, 1, 0)


class TestInWindow:
    """Inclusive windows with open ends."""

    def test_bounds_are_inclusive(self):
        start = datetime(2024, 3, 1)
        end = datetime(2024, 3, 31, 23, 59, 59)

        assert in_window(start, start, end)
        assert in_window(end, start, end)
        assert not in_window(datetime(2024, 4, 1), start, end)

    def test_open_window(self):
        assert in_window(datetime(1999, 1, 1))


class TestInMemoryLedger:
    """The dict-backed ledger."""

    @pytest.fixture
    def ledger(self):
        ledger = InMemoryLedger(
            rooms=[room_from_record({"id": "room_1", "name": "Flat"})],
        )
        ledger.add_member(
            member_from_record({"id": "m1", "fullName": "One", "roomId": "room_1"})
        )
        ledger.add_member(
            member_from_record(
                {"id": "m2", "fullName": "Two", "roomId": "room_1", "isActive": False}
            )
        )
        ledger.add_member(
            member_from_record({"id": "x1", "fullName": "Other", "roomId": "room_2"})
        )
        ledger.add_expense(expense_from_record(expense_record()))
        ledger.add_expense(
            expense_from_record(
                expense_record(id="exp_2", expenseDate="2024-04-02T10:00:00Z")
            )
        )
        return ledger

    def test_unknown_room_raises(self, ledger):
        with pytest.raises(RoomNotFoundError):
            ledger.get_room("nope")

    def test_only_active_members_of_the_room(self, ledger):
        assert [m.id for m in ledger.list_active_members("room_1")] == ["m1"]

    def test_expense_window(self, ledger):
        march = ledger.list_expenses(
            "room_1",
            start=datetime(2024, 3, 1),
            end=datetime(2024, 3, 31, 23, 59, 59),
        )

        assert [e.id for e in march] == ["exp_1"]
        assert [e.id for e in ledger.list_expenses("room_1")] == ["exp_1", "exp_2"]
        assert ledger.list_expenses("room_2") == []
