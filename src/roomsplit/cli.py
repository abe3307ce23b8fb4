"""CLI for RoomSplit using Typer."""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .clients.api import ApiLedgerClient
from .config import load_settings
from .db import Database
from .exceptions import ConfigurationError
from .importer import import_into_database, load_ledger_file
from .ledger import LedgerReader
from .models import BalanceReport, DashboardStats
from .money import to_display
from .service import BalanceService

app = typer.Typer(
    name="roomsplit",
    help="Track shared room expenses and work out who owes whom",
)

console = Console()

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "NPR": "Rs."}

FileOption = typer.Option(
    None, "--file", "-f", help="Read the ledger from a JSON export instead"
)
ApiOption = typer.Option(False, "--api", help="Read the ledger from the room API")
YearOption = typer.Option(None, "--year", "-y", help="Year of the month to use")
MonthOption = typer.Option(None, "--month", "-m", min=1, max=12, help="Month (1-12)")
JsonOption = typer.Option(False, "--json", help="Print the raw JSON response")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose output")


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@contextmanager
def open_ledger(file: Path | None, use_api: bool) -> Iterator[LedgerReader]:
    """Open the ledger selected on the command line and close it afterwards."""
    if file is not None:
        yield load_ledger_file(file)
        return

    settings = load_settings()
    if use_api:
        if not settings.api_base_url:
            raise ConfigurationError("ROOMSPLIT_API_BASE_URL is not set")
        with ApiLedgerClient(settings.api_base_url, settings.api_token) as client:
            yield client
        return

    db = Database(settings.database_path)
    try:
        yield db
    finally:
        db.close()


def _fail(e: Exception, verbose: bool):
    """Report an error and exit."""
    console.print(f"\n[bold red]Error:[/bold red] {e}")
    if verbose:
        raise e
    sys.exit(1)


def _print_json(payload: object):
    """Print a JSON payload, rendering decimals as numbers."""
    typer.echo(json.dumps(payload, default=float, indent=2))


def format_money(
    amount: Decimal, currency: str = "USD", use_color: bool = True
) -> str:
    """
    Format money in accounting style with alignment.

    Negative amounts use parentheses: ($85.02)
    Positive amounts have spaces:      $85.02
    """
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    abs_amount = abs(to_display(amount))
    if amount < 0:
        if use_color:
            return f"({symbol}[green]{abs_amount:,.2f}[/green])"
        return f"({symbol}{abs_amount:,.2f})"
    if use_color and amount > 0:
        return f" {symbol}[red]{abs_amount:,.2f}[/red] "
    return f" {symbol}{abs_amount:,.2f} "


def display_report(report: BalanceReport, currency: str = "USD"):
    """Display balances and suggested transfers as tables."""
    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Member", style="cyan")
    table.add_column("Paid", justify="right")
    table.add_column("Owed", justify="right")
    table.add_column("Balance", justify="right")

    for b in report.balances:
        table.add_row(
            b.member_name,
            format_money(b.total_paid, currency, use_color=False),
            format_money(b.total_owed, currency, use_color=False),
            format_money(b.balance, currency),
        )

    console.print(table)
    console.print(
        "[dim]Positive balance = owes the group, "
        "(negative) = the group owes them[/dim]\n"
    )

    transfers = report.payable_transfers()
    if not transfers:
        console.print("[green]✓ Everyone is settled up[/green]")
        return

    console.print("[bold]Who owes whom:[/bold]")
    for t in transfers:
        amount = format_money(t.amount, currency, use_color=False).strip()
        console.print(f"  {t.from_name} → {amount} → {t.to_name}")


def display_dashboard(stats: DashboardStats):
    """Display dashboard numbers."""
    currency = stats.room.currency_code
    console.print(f"\n[bold]{stats.room.name}[/bold] ({currency})")
    console.print(f"  Period: {stats.period.start.date()} to {stats.period.end.date()}")
    console.print(f"  Roommates: {stats.total_roommates}")
    console.print(
        f"  This month: {format_money(stats.current_month_total, currency, False)}"
        f"({stats.current_month_expense_count} expenses)"
    )
    console.print(
        f"  All time:   {format_money(stats.all_time_total, currency, False)}"
        f"({stats.all_time_expense_count} expenses)"
    )
    console.print(
        f"  Per person: "
        f"{format_money(stats.average_cost_per_person, currency, False)}"
    )


@app.command()
def balances(
    room_id: str = typer.Argument(..., help="Room ID"),
    year: int | None = YearOption,
    month: int | None = MonthOption,
    file: Path | None = FileOption,
    api: bool = ApiOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """
    Show each member's balance and who should pay whom.

    Pass both --year and --month to settle a single month; otherwise every
    expense in the room is included.
    """
    setup_logging(verbose)

    try:
        with open_ledger(file, api) as ledger:
            service = BalanceService(ledger)
            report = service.get_balances(room_id, year=year, month=month)
            currency = ledger.get_room(room_id).currency_code

        if as_json:
            _print_json(report.to_response())
        else:
            display_report(report, currency)

    except Exception as e:
        _fail(e, verbose)


@app.command()
def summary(
    room_id: str = typer.Argument(..., help="Room ID"),
    year: int | None = YearOption,
    month: int | None = MonthOption,
    file: Path | None = FileOption,
    api: bool = ApiOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Show a month of spending per member (defaults to the current month)."""
    setup_logging(verbose)

    try:
        with open_ledger(file, api) as ledger:
            result = BalanceService(ledger).get_monthly_summary(
                room_id, year=year, month=month
            )

        if as_json:
            _print_json(result.to_response())
            return

        console.print(
            f"\n[bold]{result.period.start.date()} to {result.period.end.date()}"
            f"[/bold]: {format_money(result.total_expenses, use_color=False)}"
            f"across {result.expense_count} expenses\n"
        )
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Member", style="cyan")
        table.add_column("Paid", justify="right")
        table.add_column("Owed", justify="right")
        for total in result.member_totals:
            table.add_row(
                total.member_name,
                format_money(total.total_paid, use_color=False),
                format_money(total.total_owed, use_color=False),
            )
        console.print(table)

    except Exception as e:
        _fail(e, verbose)


@app.command()
def categories(
    room_id: str = typer.Argument(..., help="Room ID"),
    year: int | None = YearOption,
    month: int | None = MonthOption,
    file: Path | None = FileOption,
    api: bool = ApiOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Show spending per category (defaults to the current month)."""
    setup_logging(verbose)

    try:
        with open_ledger(file, api) as ledger:
            result = BalanceService(ledger).get_category_summary(
                room_id, year=year, month=month
            )

        if as_json:
            _print_json([c.to_response() for c in result])
            return

        table = Table(title="Categories", show_header=True, header_style="bold magenta")
        table.add_column("Category", style="yellow")
        table.add_column("Total", justify="right")
        table.add_column("Expenses", justify="right")
        for c in result:
            table.add_row(
                c.category,
                format_money(c.total_amount, use_color=False),
                str(c.expense_count),
            )
        console.print(table)

    except Exception as e:
        _fail(e, verbose)


@app.command()
def trends(
    room_id: str = typer.Argument(..., help="Room ID"),
    months: int | None = typer.Option(
        None,
        "--months",
        min=0,
        help="Months to look back (settings default; 6 with --file)",
    ),
    file: Path | None = FileOption,
    api: bool = ApiOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Show monthly spending totals."""
    setup_logging(verbose)

    try:
        with open_ledger(file, api) as ledger:
            if months is None and file is None:
                months = load_settings().trend_months
            result = BalanceService(ledger).get_trends(room_id, months=months)

        if as_json:
            _print_json([t.to_response() for t in result])
            return

        table = Table(title="Monthly Trends", show_header=True, header_style="bold")
        table.add_column("Month", style="cyan")
        table.add_column("Total", justify="right")
        table.add_column("Expenses", justify="right")
        for t in result:
            table.add_row(
                t.month,
                format_money(t.total_amount, use_color=False),
                str(t.expense_count),
            )
        console.print(table)

    except Exception as e:
        _fail(e, verbose)


@app.command()
def dashboard(
    room_id: str = typer.Argument(..., help="Room ID"),
    year: int | None = YearOption,
    month: int | None = MonthOption,
    file: Path | None = FileOption,
    api: bool = ApiOption,
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
):
    """Show headline numbers for a room (defaults to the current month)."""
    setup_logging(verbose)

    try:
        with open_ledger(file, api) as ledger:
            stats = BalanceService(ledger).get_dashboard(
                room_id, year=year, month=month
            )

        if as_json:
            _print_json(stats.to_response())
        else:
            display_dashboard(stats)

    except Exception as e:
        _fail(e, verbose)


@app.command("import")
def import_(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON export"),
    verbose: bool = VerboseOption,
):
    """Import rooms, members and expenses from a JSON export into the database."""
    setup_logging(verbose)

    try:
        ledger = load_ledger_file(path)
        settings = load_settings()
        db = Database(settings.database_path)
        try:
            count = import_into_database(ledger, db)
        finally:
            db.close()

        console.print(f"[bold green]✓ Imported {count} expenses[/bold green]")

    except Exception as e:
        _fail(e, verbose)


if __name__ == "__main__":
    app()
