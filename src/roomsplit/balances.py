"""Fold expense payments and shares into one net balance per member."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from .models import Expense, Member, MemberBalance
from .money import ZERO

logger = logging.getLogger(__name__)


@dataclass
class _Totals:
    """Running totals for one member while aggregating."""

    member: Member
    paid: Decimal = ZERO
    owed: Decimal = ZERO


def aggregate_balances(
    expenses: Iterable[Expense], members: Sequence[Member]
) -> list[MemberBalance]:
    """
    Compute a MemberBalance for every active member.

    Steps:
    1. Start every active member at zero paid and zero owed
    2. Add each payment to the payer's total paid
    3. Add each share to the member's total owed
    4. balance = total owed - total paid

    Payments and shares that reference an unknown or inactive member (or no
    member at all) are skipped; they neither raise nor show up in the output.
    Members with no activity are still returned with zero totals.

    The output follows the order of ``members``. That order is the tie-break
    order used by the settlement planner.

    Args:
        expenses: Expenses with their payments and shares
        members: The room's members; inactive ones are ignored

    Returns:
        One balance per active member, in input order
    """
    totals: dict[str, _Totals] = {}
    for member in members:
        if member.is_active and member.id not in totals:
            totals[member.id] = _Totals(member=member)

    skipped = 0
    for expense in expenses:
        for payment in expense.payments:
            entry = totals.get(payment.member_id) if payment.member_id else None
            if entry is None:
                skipped += 1
                continue
            entry.paid += payment.paid_amount

        for share in expense.shares:
            entry = totals.get(share.member_id)
            if entry is None:
                skipped += 1
                continue
            entry.owed += share.owed_amount

    if skipped:
        logger.debug(
            f"Ignored {skipped} payments/shares for unknown or inactive members"
        )

    return [
        MemberBalance(
            member_id=entry.member.id,
            member_name=entry.member.full_name,
            total_paid=entry.paid,
            total_owed=entry.owed,
            balance=entry.owed - entry.paid,
        )
        for entry in totals.values()
    ]


def total_imbalance(balances: Iterable[MemberBalance]) -> Decimal:
    """
    Sum all balances.

    Zero when every expense's shares match its payments. A positive result
    means more was allocated as owed than was actually paid.
    """
    return sum((b.balance for b in balances), ZERO)
