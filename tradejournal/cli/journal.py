"""Journal and trade management commands for TradeJournal CLI.

Handles journal creation, trade entry, listing, the trash, and JSON
export/import.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.cli.common import (
    DATETIME_FORMATS,
    build_filters,
    console,
    filter_options,
    get_config,
    get_store,
    handle_errors,
    journal_option,
    money,
    resolve_journal,
)
from tradejournal.export import export_trades, load_trades
from tradejournal.filters import apply_filters
from tradejournal.models import Score, TradeRecord

JOURNAL_TYPES = ["Real", "Demo", "Backtest", "Funded", "Competition", "Other"]


def _split(text: str, sep: str, param: str) -> tuple[str, str]:
    head, found, tail = text.partition(sep)
    if not found or not head.strip() or not tail.strip():
        raise click.BadParameter(f"expected {param}, got '{text}'")
    return head.strip(), tail.strip()


def parse_custom_fields(values: tuple[str, ...]) -> dict[str, object]:
    """``ID=VALUE`` pairs; an id given more than once collects a list."""
    collected: dict[str, list[str]] = {}
    for text in values:
        field_id, value = _split(text, "=", "ID=VALUE")
        collected.setdefault(field_id, []).append(value)
    return {k: v[0] if len(v) == 1 else v for k, v in collected.items()}


def parse_analysis(values: tuple[str, ...]) -> dict[str, dict[str, list[str]]]:
    """``TIMEFRAME:SUBCATEGORY=OPTION`` selections, grouped by timeframe."""
    selections: dict[str, dict[str, list[str]]] = {}
    for text in values:
        timeframe, rest = _split(text, ":", "TIMEFRAME:SUBCATEGORY=OPTION")
        sub_category, option_id = _split(rest, "=", "TIMEFRAME:SUBCATEGORY=OPTION")
        selections.setdefault(timeframe, {}).setdefault(sub_category, []).append(option_id)
    return selections


@click.command()
@click.option("--create", "title", default=None, help="Create a journal with this title.")
@click.option("--deposit", type=float, default=10000.0, show_default=True, help="Initial deposit.")
@click.option("--capital", type=float, default=None, help="Capital for risk sizing (default: deposit).")
@click.option("--type", "journal_type", type=click.Choice(JOURNAL_TYPES), default="Real", show_default=True)
@click.option("--id", "journal_id", default=None, help="Explicit id for the new journal.")
@click.pass_context
@handle_errors
def journals(
    ctx: click.Context,
    title: Optional[str],
    deposit: float,
    capital: Optional[float],
    journal_type: str,
    journal_id: Optional[str],
) -> None:
    """List journals, or create one with --create.

    \b
    Examples:
      tradejournal journals
      tradejournal journals --create "Funded 100k" --deposit 100000 --type Funded
    """
    store = get_store(ctx)

    if title:
        journal = store.create_journal(title, deposit, journal_type, capital, journal_id)
        console.print(Panel(
            f"Created [bold]{journal.title}[/bold] ({journal.type})\n"
            f"Id: [cyan]{journal.id}[/cyan]\n"
            f"Deposit: {journal.initial_deposit:,.2f}",
            title="[bold green]Journal Created[/bold green]",
            border_style="green",
        ))
        return

    items = store.list_journals()
    if not items:
        console.print(Panel(
            "[dim]No journals yet[/dim]\n\n"
            "Create one with [cyan]tradejournal journals --create TITLE[/cyan]",
            title="[bold]Journals[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Journals", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Type")
    table.add_column("Deposit", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Peak", justify="right")
    table.add_column("Max DD", justify="right")

    for journal in items:
        table.add_row(
            journal.id,
            journal.title,
            journal.type,
            f"{journal.initial_deposit:,.2f}",
            f"{journal.balance:,.2f}",
            f"{journal.peak_balance:,.2f}",
            f"[red]{journal.current_max_drawdown:,.2f}[/red]",
        )
    console.print(table)


@click.command()
@journal_option
@click.option("--pair", required=True, help="Instrument symbol, e.g. EURUSD.")
@click.option("--direction", type=click.Choice(["Buy", "Sell"]), required=True)
@click.option("--open", "opened", type=click.DateTime(DATETIME_FORMATS), required=True, help="Open date/time.")
@click.option("--close", "closed", type=click.DateTime(DATETIME_FORMATS), default=None, help="Close date/time.")
@click.option("--entry", type=float, required=True, help="Entry price.")
@click.option("--exit", "exit_price", type=float, default=None, help="Closing price.")
@click.option("--sl", type=float, default=0.0, help="Stop loss price.")
@click.option("--tp", type=float, default=None, help="Take profit price.")
@click.option("--lots", type=float, required=True, help="Lot size.")
@click.option("--commission", type=float, default=0.0)
@click.option("--swap", type=float, default=0.0)
@click.option("--strategy", default=None)
@click.option("--tag", default=None)
@click.option("--score", "score_value", type=float, default=0.0, help="Discipline score.")
@click.option("--field", "fields", multiple=True, metavar="ID=VALUE", help="Custom field value.")
@click.option(
    "--analysis", "analyses", multiple=True, metavar="TF:SUB=OPTION",
    help="Analysis selection, e.g. H4:bias=bull.",
)
@click.pass_context
@handle_errors
def add(
    ctx: click.Context,
    journal_id: Optional[str],
    pair: str,
    direction: str,
    opened: datetime,
    closed: Optional[datetime],
    entry: float,
    exit_price: Optional[float],
    sl: float,
    tp: Optional[float],
    lots: float,
    commission: float,
    swap: float,
    strategy: Optional[str],
    tag: Optional[str],
    score_value: float,
    fields: tuple[str, ...],
    analyses: tuple[str, ...],
) -> None:
    """Log a trade; its metrics are computed on save.

    \b
    Examples:
      tradejournal add --pair EURUSD --direction Buy --open "2024-03-04 09:15" \\
          --close "2024-03-04 11:40" --entry 1.0850 --exit 1.0890 --sl 1.0830 --lots 1
      tradejournal add ... --field emotion=Calm --analysis H4:bias=bull
    """
    custom_stats = parse_custom_fields(fields)
    analysis_selections = parse_analysis(analyses)
    journal = resolve_journal(ctx, journal_id)
    trade = TradeRecord(
        id=uuid.uuid4().hex,
        journal_id=journal.id,
        pair=pair.upper(),
        direction=direction,
        open_date=opened.date(),
        open_time=opened.time(),
        close_date=closed.date() if closed else None,
        close_time=closed.time() if closed else None,
        entry_price=entry,
        closing_price=exit_price,
        stop_loss=sl,
        take_profit=tp,
        lot_size=lots,
        commission=commission,
        swap=swap,
        strategy=strategy,
        tag=tag,
        custom_stats=custom_stats,
        analysis_selections=analysis_selections,
    )
    stored = get_store(ctx).add_trade(
        journal.id,
        trade,
        get_config(ctx).pair_configs(),
        score=Score(value=score_value),
    )
    auto = stored.auto
    console.print(Panel(
        f"[bold]{stored.pair}[/bold] {stored.direction} {stored.lot_size} lots\n\n"
        f"Result:  {auto.result} / {auto.outcome}\n"
        f"P&L:     {money(auto.pl)} ({auto.pips:.1f} pips)\n"
        f"R:R:     {auto.rr:.2f}   Risk: {auto.risk_percent:.2f}%\n"
        f"Session: {auto.session} ({auto.ipda_zone})\n"
        f"Held:    {auto.holding_time}\n\n"
        f"[dim]Id: {stored.id}[/dim]",
        title="[bold green]Trade Logged[/bold green]",
        border_style="green",
    ))


@click.command()
@journal_option
@filter_options
@click.option("--limit", type=int, default=None, help="Show only the latest N trades.")
@click.pass_context
@handle_errors
def trades(ctx: click.Context, journal_id: Optional[str], limit: Optional[int], **filter_kwargs) -> None:
    """List trades of a journal in chronological order.

    \b
    Examples:
      tradejournal trades
      tradejournal trades --pair EURUSD --limit 20
    """
    journal = resolve_journal(ctx, journal_id)
    selected = apply_filters(journal.trades, build_filters(**filter_kwargs))
    if limit is not None:
        selected = selected[-limit:] if limit > 0 else []

    if not selected:
        console.print(Panel(
            "[dim]No trades found[/dim]",
            title=f"[bold]{journal.title}[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title=f"{journal.title} Trades", show_header=True, header_style="bold cyan")
    table.add_column("Opened", style="dim")
    table.add_column("Pair", style="bold")
    table.add_column("Side", justify="center")
    table.add_column("Lots", justify="right")
    table.add_column("Result", justify="center")
    table.add_column("P&L", justify="right")
    table.add_column("R:R", justify="right")
    table.add_column("Held", justify="right")
    table.add_column("Id", style="dim")

    total = 0.0
    for trade in selected:
        side_color = "green" if trade.direction == "Buy" else "red"
        table.add_row(
            trade.opened_at.strftime("%Y-%m-%d %H:%M"),
            trade.pair,
            f"[{side_color}]{trade.direction}[/{side_color}]",
            f"{trade.lot_size:g}",
            trade.auto.result,
            money(trade.auto.pl),
            f"{trade.auto.rr:.2f}",
            trade.auto.holding_time,
            trade.id[:8],
        )
        total += trade.auto.pl

    console.print(table)
    console.print(f"\n[bold]Total Trades:[/bold] {len(selected)}")
    console.print(f"[bold]Total P&L:[/bold] {money(total)}")


@click.command()
@journal_option
@click.option("--delete", "delete_id", default=None, help="Move a trade to the trash.")
@click.option("--restore", "restore_id", default=None, help="Restore a trashed trade.")
@click.option("--purge", is_flag=True, default=False, help="Permanently empty the trash.")
@click.pass_context
@handle_errors
def trash(
    ctx: click.Context,
    journal_id: Optional[str],
    delete_id: Optional[str],
    restore_id: Optional[str],
    purge: bool,
) -> None:
    """Show the trash, or delete, restore and purge trades.

    \b
    Examples:
      tradejournal trash
      tradejournal trash --delete 3f2a...
      tradejournal trash --restore 3f2a...
      tradejournal trash --purge
    """
    store = get_store(ctx)

    if delete_id:
        trade = store.trash_trade(delete_id)
        console.print(f"[yellow]Moved {trade.pair} trade {trade.id} to the trash[/yellow]")
        return
    if restore_id:
        trade = store.restore_trade(restore_id)
        console.print(f"[green]Restored {trade.pair} trade {trade.id}[/green]")
        return

    journal = resolve_journal(ctx, journal_id)
    if purge:
        removed = store.purge_trash(journal.id)
        console.print(f"[red]Permanently deleted {removed} trade(s)[/red]")
        return

    items = store.get_trash(journal.id)
    if not items:
        console.print(Panel("[dim]Trash is empty[/dim]", title="[bold]Trash[/bold]", border_style="dim"))
        return

    table = Table(title="Trash", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Opened")
    table.add_column("Pair", style="bold")
    table.add_column("P&L", justify="right")
    for trade in items:
        table.add_row(trade.id, trade.opened_at.strftime("%Y-%m-%d %H:%M"), trade.pair, money(trade.auto.pl))
    console.print(table)


@click.command()
@journal_option
@filter_options
@click.option(
    "--dir", "directory", type=click.Path(file_okay=False, path_type=Path), default=Path("."),
    show_default=True, help="Output directory.",
)
@click.pass_context
@handle_errors
def export(ctx: click.Context, journal_id: Optional[str], directory: Path, **filter_kwargs) -> None:
    """Export (filtered) trades to <prefix>_Trades_<date>.json.

    \b
    Examples:
      tradejournal export --dir ~/backups
      tradejournal export --from 2024-01-01 --to 2024-03-31
    """
    journal = resolve_journal(ctx, journal_id)
    selected = apply_filters(journal.trades, build_filters(**filter_kwargs))
    prefix = get_config(ctx).journal.prefix or journal.title
    path = export_trades(selected, directory, prefix)
    console.print(f"[green]Exported {len(selected)} trade(s) to[/green] {path}")


@click.command(name="import")
@journal_option
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--recompute/--keep-metrics", default=False, show_default=True,
    help="Recompute trade metrics instead of keeping the file's.",
)
@click.pass_context
@handle_errors
def import_trades(ctx: click.Context, journal_id: Optional[str], path: Path, recompute: bool) -> None:
    """Import trades from an exported JSON file.

    Trades get fresh ids so re-importing never collides.

    \b
    Examples:
      tradejournal import Main_Trades_2024-03-31.json
    """
    journal = resolve_journal(ctx, journal_id)
    store = get_store(ctx)
    pair_configs = get_config(ctx).pair_configs()

    loaded = load_trades(path)
    for trade in loaded:
        fresh = trade.model_copy(update={"id": uuid.uuid4().hex})
        store.add_trade(journal.id, fresh, pair_configs, recompute=recompute)
    console.print(f"[green]Imported {len(loaded)} trade(s) into[/green] {journal.title}")
