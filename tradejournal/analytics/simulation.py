"""Monte Carlo and compounding projections.

Both simulators draw from a ``random.Random`` instance so runs can be
seeded. Balances are clamped at zero: a ruined path stays at 0 for the
rest of its steps but keeps its full length.
"""

import logging
import random
import threading
from collections.abc import Mapping, Sequence
from typing import Optional

from tradejournal.analytics.aggregate import aggregate
from tradejournal.analytics.timeseries import sort_chronologically
from tradejournal.errors import SimulationCancelled
from tradejournal.models import (
    CompoundingParams,
    CompoundingPoint,
    MonteCarloParams,
    PairConfig,
    SimulationResult,
    TradeRecord,
)

logger = logging.getLogger(__name__)

MIN_HISTORY_TRADES = 5
DEFAULT_WIN_LOSS_RATIO = 1.5


class CancellationToken:
    """Flag a running simulation checks between paths."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SimulationCancelled("Simulation was cancelled")


def _simulate_path(
    params: MonteCarloParams, rng: random.Random
) -> tuple[list[float], int, int]:
    balance = params.starting_balance
    path = [balance]
    max_win = max_loss = wins = losses = 0
    for _ in range(params.num_trades):
        if balance <= 0:
            path.append(0.0)
            continue
        risk = balance * params.risk_per_trade
        if rng.random() < params.win_rate:
            balance += risk * params.avg_win_r
            wins, losses = wins + 1, 0
            max_win = max(max_win, wins)
        else:
            balance = max(0.0, balance - risk * params.avg_loss_r)
            wins, losses = 0, losses + 1
            max_loss = max(max_loss, losses)
        path.append(balance)
    return path, max_win, max_loss


def run_monte_carlo(
    params: MonteCarloParams,
    rng: Optional[random.Random] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> SimulationResult:
    """Run independent synthetic trade sequences and summarize them.

    Args:
        params: Simulation inputs; rates are 0-1 fractions.
        rng: Random source. A fresh unseeded one is used when omitted.
        cancel_token: Checked before each path.

    Returns:
        SimulationResult with every path and the aggregated statistics.
        Probabilities are 0-1 fractions.

    Raises:
        SimulationCancelled: If the token is cancelled mid-run.
    """
    rng = rng or random.Random()
    paths: list[list[float]] = []
    max_wins: list[int] = []
    max_losses: list[int] = []

    for _ in range(params.num_simulations):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        path, max_win, max_loss = _simulate_path(params, rng)
        paths.append(path)
        max_wins.append(max_win)
        max_losses.append(max_loss)

    finals = [path[-1] for path in paths]
    runs = len(paths)
    start = params.starting_balance
    logger.debug("Simulated %d paths of %d trades", runs, params.num_trades)

    return SimulationResult(
        paths=paths,
        avg_final_balance=sum(finals) / runs,
        max_final_balance=max(finals),
        min_final_balance=min(finals),
        probability_of_profit=sum(1 for b in finals if b > start) / runs,
        probability_of_ruin=sum(1 for b in finals if b <= 0) / runs,
        avg_max_win_streak=sum(max_wins) / runs,
        avg_max_loss_streak=sum(max_losses) / runs,
        overall_min_balance=min(min(path) for path in paths),
        overall_max_balance=max(max(path) for path in paths),
        projected_minutes=params.num_trades * (params.avg_holding_minutes + params.avg_gap_minutes),
    )


def _average_gap_minutes(trades: Sequence[TradeRecord]) -> Optional[float]:
    ordered = sort_chronologically(trades)
    gaps = []
    for prev, current in zip(ordered, ordered[1:]):
        previous_end = prev.closed_at or prev.opened_at
        gaps.append((current.opened_at - previous_end).total_seconds() / 60)
    if not gaps:
        return None
    return max(0.0, sum(gaps) / len(gaps))


def params_from_history(
    trades: Sequence[TradeRecord],
    pair_configs: Mapping[str, PairConfig],
    capital: float,
    starting_balance: float,
    num_trades: int = 250,
    num_simulations: int = 100,
    risk_per_trade: float = 0.01,
) -> MonteCarloParams:
    """Seed Monte Carlo inputs from a trade history.

    The average win is expressed in units of the average loss, so
    ``avg_loss_r`` is 1. Fewer than five trades falls back to a 50% win rate
    and a 1.5 win/loss ratio.
    """
    defaults = {
        "starting_balance": starting_balance,
        "risk_per_trade": risk_per_trade,
        "num_trades": num_trades,
        "num_simulations": num_simulations,
        "avg_loss_r": 1.0,
    }
    if len(trades) < MIN_HISTORY_TRADES:
        return MonteCarloParams(win_rate=0.5, avg_win_r=DEFAULT_WIN_LOSS_RATIO, **defaults)

    metrics = aggregate(trades, pair_configs, capital)
    ratio = DEFAULT_WIN_LOSS_RATIO
    if metrics.avg_win > 0 and metrics.avg_loss > 0:
        ratio = metrics.avg_win / metrics.avg_loss
    gap = _average_gap_minutes(trades)
    return MonteCarloParams(
        win_rate=metrics.win_rate,
        avg_win_r=ratio,
        avg_holding_minutes=metrics.avg_duration or 240.0,
        avg_gap_minutes=180.0 if gap is None else gap,
        **defaults,
    )


def run_compounding(
    params: CompoundingParams, rng: Optional[random.Random] = None
) -> list[CompoundingPoint]:
    """Project a balance month by month with per-trade compounding.

    The monthly contribution is added at the start of each month. Each trade
    risks ``risk_per_trade`` of the current balance and wins ``risk * RR``.
    The projection stops at the first month that ends ruined.
    """
    rng = rng or random.Random()
    balance = params.starting_balance
    points = [CompoundingPoint(month=0, balance=balance)]
    for month in range(1, params.months_to_project + 1):
        balance += params.monthly_contribution
        for _ in range(params.trades_per_month):
            risk = balance * params.risk_per_trade
            if rng.random() < params.win_rate:
                balance += risk * params.risk_reward_ratio
            else:
                balance -= risk
            if balance <= 0:
                balance = 0.0
                break
        points.append(CompoundingPoint(month=month, balance=balance))
        if balance <= 0:
            break
    return points
