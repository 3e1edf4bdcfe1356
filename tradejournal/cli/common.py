"""Helpers shared by the TradeJournal CLI commands."""

import functools
from datetime import datetime
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from tradejournal.config import AppConfig, load_config
from tradejournal.db.store import JournalStore
from tradejournal.errors import JournalNotFoundError, TradeJournalError
from tradejournal.models import Filters, Journal

console = Console()

DATETIME_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d"]


def get_config(ctx: click.Context) -> AppConfig:
    """Configuration loaded once by the root group."""
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        obj["config"] = load_config()
    return obj["config"]


def get_store(ctx: click.Context) -> JournalStore:
    obj = ctx.ensure_object(dict)
    if "store" not in obj:
        obj["store"] = JournalStore(get_config(ctx).db_path)
    return obj["store"]


def error_panel(message: str, title: str = "Error") -> None:
    """Print an error panel and exit with status 1."""
    console.print(Panel(
        f"[red]{escape(message)}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def resolve_journal(ctx: click.Context, journal_id: Optional[str]) -> Journal:
    """The requested journal, the configured default, or the only journal.

    Raises:
        JournalNotFoundError: If no journal can be chosen.
    """
    store = get_store(ctx)
    journal_id = journal_id or get_config(ctx).journal.default_id
    if journal_id:
        return store.get_journal(journal_id)

    journals = store.list_journals()
    if len(journals) == 1:
        return store.get_journal(journals[0].id)
    if not journals:
        raise JournalNotFoundError(
            "No journals yet. Create one with: tradejournal journals --create TITLE"
        )
    raise JournalNotFoundError("Several journals exist; pick one with --journal")


def journal_option(f):
    return click.option(
        "--journal", "-j", "journal_id", default=None, help="Journal id."
    )(f)


def filter_options(f):
    """Options that narrow the trades fed to an analytics command."""
    options = [
        click.option("--pair", "pairs", multiple=True, help="Only these pairs."),
        click.option(
            "--direction",
            "directions",
            multiple=True,
            type=click.Choice(["Buy", "Sell"]),
            help="Only this direction.",
        ),
        click.option("--strategy", "strategies", multiple=True, help="Only these strategies."),
        click.option(
            "--from", "date_from", type=click.DateTime(DATETIME_FORMATS), default=None,
            help="Opened at or after.",
        ),
        click.option(
            "--to", "date_to", type=click.DateTime(DATETIME_FORMATS), default=None,
            help="Opened at or before (a bare date covers the whole day).",
        ),
        click.option(
            "--day", "days_of_month", multiple=True, type=click.IntRange(1, 31),
            help="Only trades opened on this day of the month.",
        ),
        click.option("--keyword", "keywords", multiple=True, help="Text that must appear."),
        click.option("--invert", is_flag=True, default=False, help="Invert the filter."),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def build_filters(
    pairs: tuple[str, ...] = (),
    directions: tuple[str, ...] = (),
    strategies: tuple[str, ...] = (),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    days_of_month: tuple[int, ...] = (),
    keywords: tuple[str, ...] = (),
    invert: bool = False,
) -> Filters:
    return Filters(
        pair=list(pairs),
        direction=list(directions),
        strategy=list(strategies),
        date_from=date_from,
        date_to=date_to,
        day_of_month=list(days_of_month),
        keywords=list(keywords),
        invert=invert,
    )


def money(value: float) -> str:
    """Signed, colored amount."""
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}{value:,.2f}[/{color}]"


def handle_errors(f):
    """Turn journal and validation errors into an error panel and exit 1."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except TradeJournalError as e:
            error_panel(str(e))
        except ValidationError as e:
            error_panel(f"Invalid input:\n\n{e}")

    return wrapper
