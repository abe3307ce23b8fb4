"""Greedy settlement planning: turn balances into suggested transfers."""

import logging
from collections.abc import Iterable, Sequence
from decimal import Decimal

from .balances import aggregate_balances
from .models import BalanceReport, Expense, Member, MemberBalance, Transfer
from .money import ZERO

logger = logging.getLogger(__name__)


def plan_settlement(balances: Sequence[MemberBalance]) -> list[Transfer]:
    """
    Suggest transfers that bring every balance to zero.

    Members with a positive balance are debtors and members with a negative
    balance are creditors; zero balances take no part. Debtors and creditors
    keep their relative order from ``balances`` and are never sorted by size,
    so the input order decides who pays whom when there is a choice.

    Each debtor, in order, pays creditors in order. A payment is
    min(remaining debt, remaining claim). Creditor claims are tracked across
    the whole run, so a creditor that has been paid in full is skipped by
    later debtors.

    This is a greedy heuristic, not a minimum-transaction solver. It emits
    at most len(debtors) + len(creditors) - 1 transfers.

    Args:
        balances: Member balances, in the order used for tie-breaking

    Returns:
        Transfers in the order they were matched
    """
    debtors = [b for b in balances if b.balance > 0]
    creditors = [b for b in balances if b.balance < 0]
    claims = [-c.balance for c in creditors]

    transfers: list[Transfer] = []
    creditor_idx = 0

    for debtor in debtors:
        remaining_debt = debtor.balance

        while remaining_debt > 0 and creditor_idx < len(creditors):
            if claims[creditor_idx] <= 0:
                creditor_idx += 1
                continue

            creditor = creditors[creditor_idx]
            amount = min(remaining_debt, claims[creditor_idx])
            transfers.append(
                Transfer(
                    from_member_id=debtor.member_id,
                    from_name=debtor.member_name,
                    to_member_id=creditor.member_id,
                    to_name=creditor.member_name,
                    amount=amount,
                )
            )

            remaining_debt -= amount
            claims[creditor_idx] -= amount

        if creditor_idx >= len(creditors):
            # Nobody left to pay; the rest of the debt is unbalanced.
            break

    logger.debug(
        f"Planned {len(transfers)} transfers for {len(debtors)} debtors "
        f"and {len(creditors)} creditors"
    )

    return transfers


def outstanding_after(
    balances: Sequence[MemberBalance], transfers: Sequence[Transfer]
) -> dict[str, Decimal]:
    """
    Apply transfers to balances and return what each member still owes.

    A transfer lowers the payer's balance and raises the receiver's. Useful for
    checking a plan; fully balanced rooms end at zero for every member.
    """
    remaining = {b.member_id: b.balance for b in balances}
    for transfer in transfers:
        remaining[transfer.from_member_id] = (
            remaining.get(transfer.from_member_id, ZERO) - transfer.amount
        )
        remaining[transfer.to_member_id] = (
            remaining.get(transfer.to_member_id, ZERO) + transfer.amount
        )
    return remaining


def compute_report(
    expenses: Iterable[Expense], members: Sequence[Member]
) -> BalanceReport:
    """
    Compute balances for the active members and the transfers that settle them.

    Pure function of its arguments; safe to call from concurrent requests.
    """
    balances = aggregate_balances(expenses, members)
    return BalanceReport(balances=balances, who_owes_whom=plan_settlement(balances))
