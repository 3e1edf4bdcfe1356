"""Projection commands for TradeJournal CLI: Monte Carlo and compounding."""

import random
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tradejournal.analytics import (
    format_duration,
    params_from_history,
    run_compounding,
    run_monte_carlo,
    sort_chronologically,
)
from tradejournal.cli.common import (
    console,
    get_config,
    handle_errors,
    journal_option,
    money,
    resolve_journal,
)
from tradejournal.models import CompoundingParams, MonteCarloParams


def _rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed) if seed is not None else random.Random()


@click.command()
@journal_option
@click.option("--from-history", is_flag=True, default=False, help="Seed inputs from the journal's trades.")
@click.option("--balance", type=float, default=None, help="Starting balance (default: journal balance or 10000).")
@click.option("--win-rate", type=float, default=0.5, show_default=True, help="Win probability, 0-1.")
@click.option("--win-r", "avg_win_r", type=float, default=1.5, show_default=True, help="Average win in R.")
@click.option("--loss-r", "avg_loss_r", type=float, default=1.0, show_default=True, help="Average loss in R.")
@click.option("--risk", "risk_per_trade", type=float, default=None, help="Fraction of balance risked per trade.")
@click.option("--trades", "num_trades", type=int, default=None, help="Trades per path.")
@click.option("--runs", "num_simulations", type=int, default=None, help="Number of paths.")
@click.option("--seed", type=int, default=None, help="Random seed for a reproducible run.")
@click.pass_context
@handle_errors
def simulate(
    ctx: click.Context,
    journal_id: Optional[str],
    from_history: bool,
    balance: Optional[float],
    win_rate: float,
    avg_win_r: float,
    avg_loss_r: float,
    risk_per_trade: Optional[float],
    num_trades: Optional[int],
    num_simulations: Optional[int],
    seed: Optional[int],
) -> None:
    """Monte Carlo projection of future equity.

    \b
    Examples:
      tradejournal simulate --win-rate 0.55 --win-r 2 --risk 0.01
      tradejournal simulate --from-history --runs 500 --seed 7
    """
    settings = get_config(ctx).simulation
    risk_per_trade = risk_per_trade if risk_per_trade is not None else settings.risk_per_trade
    num_trades = num_trades or settings.num_trades
    num_simulations = num_simulations or settings.num_simulations
    seed = seed if seed is not None else settings.seed

    if from_history:
        journal = resolve_journal(ctx, journal_id)
        params = params_from_history(
            sort_chronologically(journal.trades),
            get_config(ctx).pair_configs(),
            journal.capital,
            balance or journal.balance,
            num_trades=num_trades,
            num_simulations=num_simulations,
            risk_per_trade=risk_per_trade,
        )
    else:
        params = MonteCarloParams(
            starting_balance=balance or 10000.0,
            win_rate=win_rate,
            avg_win_r=avg_win_r,
            avg_loss_r=avg_loss_r,
            risk_per_trade=risk_per_trade,
            num_trades=num_trades,
            num_simulations=num_simulations,
        )

    result = run_monte_carlo(params, rng=_rng(seed))
    change = result.avg_final_balance - params.starting_balance

    text = (
        f"[dim]Inputs:[/dim] win {params.win_rate * 100:.1f}% | "
        f"+{params.avg_win_r:.2f}R / -{params.avg_loss_r:.2f}R | "
        f"risk {params.risk_per_trade * 100:.2f}% | "
        f"{params.num_simulations} x {params.num_trades} trades\n\n"
        f"Starting Balance:   {params.starting_balance:,.2f}\n"
        f"Avg Final Balance:  {result.avg_final_balance:,.2f} ({money(change)})\n"
        f"Best / Worst Final: {result.max_final_balance:,.2f} / {result.min_final_balance:,.2f}\n"
        f"Lowest / Highest:   {result.overall_min_balance:,.2f} / {result.overall_max_balance:,.2f}\n"
        f"{'─' * 40}\n"
        f"Probability Profit: [green]{result.probability_of_profit * 100:.1f}%[/green]\n"
        f"Probability Ruin:   [red]{result.probability_of_ruin * 100:.1f}%[/red]\n"
        f"Avg Max Streaks:    {result.avg_max_win_streak:.1f}W / {result.avg_max_loss_streak:.1f}L\n"
        f"Projected Time:     {format_duration(result.projected_minutes, with_days=True)}"
    )
    console.print(Panel(text, title="[bold cyan]Monte Carlo[/bold cyan]", border_style="cyan"))


@click.command()
@click.option("--balance", type=float, default=10000.0, show_default=True, help="Starting balance.")
@click.option("--monthly", "monthly_contribution", type=float, default=0.0, show_default=True,
              help="Contribution added at the start of each month.")
@click.option("--win-rate", type=float, default=0.5, show_default=True, help="Win probability, 0-1.")
@click.option("--rr", "risk_reward_ratio", type=float, default=2.0, show_default=True, help="Reward per unit risked.")
@click.option("--risk", "risk_per_trade", type=float, default=0.01, show_default=True,
              help="Fraction of balance risked per trade.")
@click.option("--per-month", "trades_per_month", type=int, default=20, show_default=True)
@click.option("--months", "months_to_project", type=int, default=12, show_default=True)
@click.option("--seed", type=int, default=None, help="Random seed for a reproducible run.")
@click.pass_context
@handle_errors
def compound(
    ctx: click.Context,
    balance: float,
    monthly_contribution: float,
    win_rate: float,
    risk_reward_ratio: float,
    risk_per_trade: float,
    trades_per_month: int,
    months_to_project: int,
    seed: Optional[int],
) -> None:
    """Month-by-month compounding projection.

    \b
    Examples:
      tradejournal compound --balance 5000 --monthly 500 --months 24
    """
    params = CompoundingParams(
        starting_balance=balance,
        monthly_contribution=monthly_contribution,
        win_rate=win_rate,
        risk_reward_ratio=risk_reward_ratio,
        risk_per_trade=risk_per_trade,
        trades_per_month=trades_per_month,
        months_to_project=months_to_project,
    )
    points = run_compounding(params, rng=_rng(seed))

    table = Table(title="Compounding Projection", show_header=True, header_style="bold cyan")
    table.add_column("Month", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Change", justify="right")

    previous = points[0].balance
    for point in points:
        table.add_row(
            str(point.month),
            f"{point.balance:,.2f}",
            money(point.balance - previous) if point.month else "-",
        )
        previous = point.balance
    console.print(table)

    contributed = params.starting_balance + monthly_contribution * (len(points) - 1)
    console.print(f"\n[bold]Contributed:[/bold] {contributed:,.2f}")
    console.print(f"[bold]Final:[/bold] {points[-1].balance:,.2f} ({money(points[-1].balance - contributed)})")
    if points[-1].balance <= 0:
        console.print("[red]Account ruined before the end of the projection[/red]")
