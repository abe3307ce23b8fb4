"""RoomSplit - Shared room expense balances and settlement planning."""

__version__ = "0.1.0"

from .balances import aggregate_balances
from .config import Settings, load_settings
from .db import Database
from .ledger import InMemoryLedger, LedgerReader
from .models import (
    BalanceReport,
    Expense,
    Member,
    MemberBalance,
    Payment,
    Room,
    Share,
    Transfer,
)
from .service import BalanceService
from .settlement import compute_report, plan_settlement

__all__ = [
    "Settings",
    "load_settings",
    "Database",
    "InMemoryLedger",
    "LedgerReader",
    "BalanceReport",
    "Expense",
    "Member",
    "MemberBalance",
    "Payment",
    "Room",
    "Share",
    "Transfer",
    "aggregate_balances",
    "compute_report",
    "plan_settlement",
    "BalanceService",
]
