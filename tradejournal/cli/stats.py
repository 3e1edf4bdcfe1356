"""Analytics report commands for TradeJournal CLI.

Every command loads a journal, applies the filter options and renders
the output of one analytics function.
"""

from datetime import datetime
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics import (
    aggregate,
    build_daily_equity_curve,
    build_drawdown_curve,
    build_equity_curve,
    default_registry,
    estimate_income,
    flatten_rows,
    format_duration,
    format_profit_factor,
    group_recursively,
    overall_stats,
    sort_chronologically,
    streak_distribution,
    summarize_streaks,
)
from tradejournal.cli.common import (
    DATETIME_FORMATS,
    build_filters,
    console,
    filter_options,
    get_config,
    handle_errors,
    journal_option,
    money,
    resolve_journal,
)
from tradejournal.filters import apply_filters


def _load(ctx: click.Context, journal_id: Optional[str], filter_kwargs: dict):
    """Journal, its filtered trades in chronological order, and pair data."""
    journal = resolve_journal(ctx, journal_id)
    selected = apply_filters(journal.trades, build_filters(**filter_kwargs))
    return journal, sort_chronologically(selected), get_config(ctx).pair_configs()


def _no_trades(title: str) -> None:
    console.print(Panel(
        "[dim]Not enough data: no trades match[/dim]",
        title=f"[bold]{title}[/bold]",
        border_style="dim",
    ))


@click.command()
@journal_option
@filter_options
@click.pass_context
@handle_errors
def stats(ctx: click.Context, journal_id: Optional[str], **filter_kwargs) -> None:
    """Performance summary: P&L, win rate, profit factor, expectancy.

    \b
    Examples:
      tradejournal stats
      tradejournal stats --pair XAUUSD --from 2024-01-01
    """
    journal, trades, pair_configs = _load(ctx, journal_id, filter_kwargs)
    if not trades:
        _no_trades("Statistics")
        return

    m = aggregate(trades, pair_configs, journal.capital)
    overall = overall_stats(trades)
    streaks = summarize_streaks(trades)

    text = (
        f"[bold]{journal.title}[/bold] ({journal.type})\n\n"
        f"Total P&L:      {money(m.total_pl)} ({m.gain_percent:+.2f}%)\n"
        f"Gross Profit:   {money(m.profit)}\n"
        f"Gross Loss:     {money(m.loss)}\n"
        f"{'─' * 34}\n"
        f"Trades:         {m.trades} ({m.win_count}W / {m.loss_count}L)\n"
        f"Win Rate:       {m.win_rate * 100:.1f}%\n"
        f"Profit Factor:  {format_profit_factor(m.profit_factor)}\n"
        f"Expectancy:     {money(m.expectancy)}\n"
        f"Avg Win/Loss:   {m.avg_win:,.2f} / {m.avg_loss:,.2f}\n"
        f"Total R:        {m.total_r:+.2f}R (avg {m.avg_r:+.2f}R)\n"
        f"{'─' * 34}\n"
        f"Avg Lot Size:   {m.avg_lot_size:.2f}\n"
        f"Avg Duration:   {format_duration(m.avg_duration)}\n"
        f"Avg Gap:        {format_duration(overall.avg_gap, with_days=True)}\n"
        f"Best/Worst Hr:  {overall.best_time} / {overall.worst_time}\n"
        f"Avg Score:      {m.avg_score:.1f} "
        f"(high {overall.highest_score:.0f}, low {overall.lowest_score:.0f})\n"
        f"Max Streaks:    {m.max_win_streak}W / {m.max_loss_streak}L\n"
        f"Current Streak: {streaks.current.count} {streaks.current.type}"
    )
    console.print(Panel(text, title="[bold cyan]Statistics[/bold cyan]", border_style="cyan"))


@click.command()
@journal_option
@filter_options
@click.option(
    "--by", "criteria", multiple=True,
    help="Grouping criterion; repeat to nest (e.g. --by 'Day of Week' --by Session).",
)
@click.option("--list-criteria", is_flag=True, default=False, help="Print the available criteria.")
@click.pass_context
@handle_errors
def pivot(
    ctx: click.Context,
    journal_id: Optional[str],
    criteria: tuple[str, ...],
    list_criteria: bool,
    **filter_kwargs,
) -> None:
    """Pivot table of metrics grouped by one or more criteria.

    \b
    Examples:
      tradejournal pivot --by Pair
      tradejournal pivot --by "Day of Week" --by Session
      tradejournal pivot --by RR --by Outcome
      tradejournal pivot --by custom-emotion
      tradejournal pivot --list-criteria
    """
    settings = get_config(ctx).app_settings()
    registry = default_registry(settings)
    if list_criteria:
        console.print("[dim]Criteria:[/dim] " + ", ".join(registry.names()))
        if not criteria:
            return
    if not criteria:
        raise click.UsageError("Give at least one --by criterion, or --list-criteria.")

    journal, trades, pair_configs = _load(ctx, journal_id, filter_kwargs)
    rows = group_recursively(trades, list(criteria), registry, pair_configs, journal.capital)
    if not rows:
        _no_trades("Pivot")
        return

    table = Table(title=" > ".join(criteria), show_header=True, header_style="bold cyan")
    table.add_column("Group", style="bold")
    table.add_column("Trades", justify="right")
    table.add_column("Win %", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("PF", justify="right")
    table.add_column("Expectancy", justify="right")
    table.add_column("Total R", justify="right")
    table.add_column("Avg Hold", justify="right")

    for row in flatten_rows(rows):
        m = row.metrics
        table.add_row(
            "  " * row.level + row.label,
            str(m.trades),
            f"{m.win_rate * 100:.1f}%",
            money(m.total_pl),
            format_profit_factor(m.profit_factor),
            f"{m.expectancy:,.2f}",
            f"{m.total_r:+.2f}",
            format_duration(m.avg_duration),
        )
    console.print(table)


@click.command()
@journal_option
@filter_options
@click.option("--daily", is_flag=True, default=False, help="One point per close date.")
@click.option("--limit", type=int, default=30, show_default=True, help="Show the last N points.")
@click.pass_context
@handle_errors
def equity(ctx: click.Context, journal_id: Optional[str], daily: bool, limit: int, **filter_kwargs) -> None:
    """Equity curve: balance and cumulative R after each trade.

    \b
    Examples:
      tradejournal equity
      tradejournal equity --daily --limit 60
    """
    journal, trades, pair_configs = _load(ctx, journal_id, filter_kwargs)
    builder = build_daily_equity_curve if daily else build_equity_curve
    points = builder(trades, journal.initial_deposit, pair_configs)

    table = Table(title="Equity Curve", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("P&L", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("With Fees", justify="right")
    table.add_column("Cum. R", justify="right")

    shown = points[-limit:] if limit > 0 else points
    for point in shown:
        table.add_row(
            str(point.trade),
            point.date.isoformat() if point.date else "start",
            money(point.pl) if point.trade else "-",
            f"{point.balance:,.2f}",
            f"{point.balance_with_fees:,.2f}",
            f"{point.cumulative_r:+.2f}",
        )
    console.print(table)


@click.command()
@journal_option
@filter_options
@click.pass_context
@handle_errors
def drawdown(ctx: click.Context, journal_id: Optional[str], **filter_kwargs) -> None:
    """Drawdown statistics from the equity curve.

    \b
    Examples:
      tradejournal drawdown
    """
    journal, trades, pair_configs = _load(ctx, journal_id, filter_kwargs)
    if not trades:
        _no_trades("Drawdown")
        return

    curve = build_equity_curve(trades, journal.initial_deposit, pair_configs)
    points, dd = build_drawdown_curve(curve)
    worst_pct = min(p.drawdown_percent for p in points)
    recovered = (
        f"{dd.trough_to_recovery} trades"
        if dd.recovery_index != -1
        else "[yellow]not yet[/yellow]"
    )
    text = (
        f"Worst Drawdown:    [red]{dd.worst:,.2f}[/red] ({worst_pct:.2f}%)\n"
        f"Average Drawdown:  {dd.average:,.2f}\n"
        f"Current Drawdown:  {dd.current:,.2f}\n"
        f"Peak to Trough:    {dd.peak_to_trough} trades\n"
        f"Trough to Recover: {recovered}\n\n"
        f"[dim]Journal max drawdown: {journal.current_max_drawdown:,.2f}[/dim]"
    )
    console.print(Panel(text, title="[bold cyan]Drawdown[/bold cyan]", border_style="cyan"))


@click.command()
@journal_option
@filter_options
@click.pass_context
@handle_errors
def streaks(ctx: click.Context, journal_id: Optional[str], **filter_kwargs) -> None:
    """Win/loss streaks and the distribution of streak lengths.

    \b
    Examples:
      tradejournal streaks
    """
    _, trades, _ = _load(ctx, journal_id, filter_kwargs)
    if not trades:
        _no_trades("Streaks")
        return

    summary = summarize_streaks(trades)
    current = summary.current
    console.print(Panel(
        f"Current:  {current.count} {current.type} ({money(current.pl)})\n"
        f"Max Win:  {summary.max_win_streak} (best run {money(summary.max_win_streak_pl)})\n"
        f"Max Loss: {summary.max_loss_streak} (worst run {money(summary.max_loss_streak_pl)})",
        title="[bold cyan]Streaks[/bold cyan]",
        border_style="cyan",
    ))

    buckets = streak_distribution(trades)
    if not buckets:
        return
    table = Table(title="Streak Lengths", show_header=True, header_style="bold cyan")
    table.add_column("Length", justify="right")
    table.add_column("Win Runs", justify="right")
    table.add_column("Avg Win P&L", justify="right")
    table.add_column("Loss Runs", justify="right")
    table.add_column("Avg Loss P&L", justify="right")
    for bucket in buckets:
        table.add_row(
            bucket.length,
            str(bucket.win_count),
            money(bucket.avg_win_pl) if bucket.win_count else "-",
            str(bucket.loss_count),
            money(bucket.avg_loss_pl) if bucket.loss_count else "-",
        )
    console.print(table)


@click.command()
@journal_option
@filter_options
@click.option(
    "--as-of", type=click.DateTime(DATETIME_FORMATS), default=None,
    help="End of the elapsed window (default: last trade).",
)
@click.option("--now", "use_now", is_flag=True, default=False, help="Measure elapsed time up to now.")
@click.pass_context
@handle_errors
def income(
    ctx: click.Context,
    journal_id: Optional[str],
    as_of: Optional[datetime],
    use_now: bool,
    **filter_kwargs,
) -> None:
    """Income per hour/day/week/month/year, avg-based vs real-time.

    \b
    Examples:
      tradejournal income
      tradejournal income --now
    """
    journal, trades, pair_configs = _load(ctx, journal_id, filter_kwargs)
    if not trades:
        _no_trades("Income")
        return

    total_pl = aggregate(trades, pair_configs, journal.capital).total_pl
    result = estimate_income(trades, total_pl, datetime.now() if use_now else as_of)

    table = Table(title="Income", show_header=True, header_style="bold cyan")
    table.add_column("Period", style="bold")
    table.add_column("Avg-Based", justify="right")
    table.add_column("Real-Time Rate", justify="right")
    for period in ("hourly", "daily", "weekly", "monthly", "yearly"):
        table.add_row(
            period.capitalize(),
            money(getattr(result.avg_based, period)),
            money(getattr(result.real_time, period)),
        )
    console.print(table)
    console.print(
        f"\n[dim]Days traded: {result.days_traded} | "
        f"Elapsed: {format_duration(result.elapsed_minutes, with_days=True)}[/dim]"
    )
