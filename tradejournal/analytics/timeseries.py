"""Equity, drawdown and streak series.

Every builder walks its input once, carrying the running state forward.
Inputs with no trades produce an empty series (the equity curve still
has its anchor point) and zero-valued stats.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Optional

from tradejournal.analytics.pairs import realized_r
from tradejournal.models import (
    CurrentStreak,
    DrawdownPoint,
    DrawdownStats,
    EquityPoint,
    PairConfig,
    StreakBucket,
    StreakPoint,
    StreakSummary,
    TradeRecord,
)

logger = logging.getLogger(__name__)

STREAK_BUCKET_MAX = 10


def sort_chronologically(trades: Sequence[TradeRecord]) -> list[TradeRecord]:
    """Stable sort by open date and time."""
    return sorted(trades, key=lambda t: t.opened_at)


def _fees(trade: TradeRecord) -> float:
    return trade.auto.commission_cost + trade.auto.spread_cost


# ==================== Equity ====================


def build_equity_curve(
    trades: Sequence[TradeRecord],
    initial_deposit: float,
    pair_configs: Mapping[str, PairConfig],
) -> list[EquityPoint]:
    """Running balance after each trade.

    Args:
        trades: Trades sorted ascending by open timestamp.
        initial_deposit: Balance of the anchor point.
        pair_configs: Pair reference data for realized R.

    Returns:
        The anchor ``EquityPoint(trade=0, balance=initial_deposit)`` followed
        by one point per trade.
    """
    points = [
        EquityPoint(trade=0, balance=initial_deposit, balance_with_fees=initial_deposit)
    ]
    balance = with_fees = initial_deposit
    cumulative_r = 0.0
    for number, trade in enumerate(trades, start=1):
        r = realized_r(trade, pair_configs)
        balance += trade.auto.pl
        with_fees += trade.auto.pl - _fees(trade)
        cumulative_r += r
        points.append(
            EquityPoint(
                trade=number,
                balance=balance,
                realized_r=r,
                cumulative_r=cumulative_r,
                pl=trade.auto.pl,
                balance_with_fees=with_fees,
                trade_id=trade.id,
                date=trade.close_date or trade.open_date,
                trade_count=1,
            )
        )
    return points


def build_daily_equity_curve(
    trades: Sequence[TradeRecord],
    initial_deposit: float,
    pair_configs: Mapping[str, PairConfig],
) -> list[EquityPoint]:
    """Equity curve with one point per close date.

    Open trades (no close date) are skipped. Days appear in the order first
    encountered and each starts from the previous day's balance.
    """
    days: dict[date, list[TradeRecord]] = {}
    for trade in trades:
        if trade.close_date is not None:
            days.setdefault(trade.close_date, []).append(trade)

    points = [
        EquityPoint(trade=0, balance=initial_deposit, balance_with_fees=initial_deposit)
    ]
    balance = with_fees = initial_deposit
    cumulative_r = 0.0
    for number, (day, day_trades) in enumerate(days.items(), start=1):
        pl = sum(t.auto.pl for t in day_trades)
        r = sum(realized_r(t, pair_configs) for t in day_trades)
        balance += pl
        with_fees += pl - sum(_fees(t) for t in day_trades)
        cumulative_r += r
        points.append(
            EquityPoint(
                trade=number,
                balance=balance,
                realized_r=r,
                cumulative_r=cumulative_r,
                pl=pl,
                balance_with_fees=with_fees,
                trade_id=day_trades[-1].id,
                date=day,
                trade_count=len(day_trades),
            )
        )
    return points


def moving_average(values: Sequence[float], period: int) -> list[Optional[float]]:
    """Trailing simple moving average; None until ``period`` values are seen."""
    if period <= 0:
        raise ValueError("period must be positive")
    averages: list[Optional[float]] = []
    window_sum = 0.0
    for i, value in enumerate(values):
        window_sum += value
        if i >= period:
            window_sum -= values[i - period]
        averages.append(window_sum / period if i >= period - 1 else None)
    return averages


# ==================== Drawdown ====================


def build_drawdown_curve(
    equity_curve: Sequence[EquityPoint],
) -> tuple[list[DrawdownPoint], DrawdownStats]:
    """Drawdown from the running peak at every equity point.

    The worst drawdown remembers the peak that preceded it. Recovery is the
    first later point whose balance is back at that peak.

    Returns:
        ``(points, stats)``; an empty curve gives ``([], DrawdownStats())``.
    """
    if not equity_curve:
        return [], DrawdownStats()

    peak = equity_curve[0].balance
    peak_index = 0
    worst = 0.0
    worst_index = -1
    peak_at_worst = 0
    peak_balance_at_worst = peak
    recovery_index = -1
    negatives: list[float] = []
    points: list[DrawdownPoint] = []

    for index, point in enumerate(equity_curve):
        if point.balance > peak:
            peak = point.balance
            peak_index = index
        drawdown = point.balance - peak
        if drawdown < 0:
            negatives.append(drawdown)
        if drawdown < worst:
            worst = drawdown
            worst_index = index
            peak_at_worst = peak_index
            peak_balance_at_worst = peak
            recovery_index = -1
        if worst_index != -1 and recovery_index == -1 and point.balance >= peak_balance_at_worst:
            recovery_index = index
        points.append(
            DrawdownPoint(
                trade=point.trade,
                balance=point.balance,
                peak_balance=peak,
                drawdown=drawdown,
                drawdown_percent=drawdown / peak * 100 if peak > 0 else 0.0,
            )
        )

    stats = DrawdownStats(
        worst=abs(worst),
        average=abs(sum(negatives) / len(negatives)) if negatives else 0.0,
        current=abs(points[-1].drawdown),
        peak_to_trough=worst_index - peak_at_worst if worst_index != -1 else 0,
        trough_to_recovery=recovery_index - worst_index if recovery_index != -1 else 0,
        worst_index=worst_index,
        peak_index=peak_at_worst,
        recovery_index=recovery_index,
    )
    logger.debug("Drawdown over %d points: worst %.2f", len(points), stats.worst)
    return points, stats


# ==================== Streaks ====================


def build_streak_series(trades: Sequence[TradeRecord]) -> list[StreakPoint]:
    """Win/loss streak counters after each trade (chronological input).

    A Neutral outcome resets both counters.
    """
    series = []
    wins = losses = 0
    for number, trade in enumerate(trades, start=1):
        outcome = trade.auto.outcome
        if outcome == "Win":
            wins, losses = wins + 1, 0
        elif outcome == "Loss":
            wins, losses = 0, losses + 1
        else:
            wins = losses = 0
        series.append(
            StreakPoint(
                trade=number,
                trade_id=trade.id,
                outcome=outcome,
                win_streak=wins,
                loss_streak=losses,
            )
        )
    return series


def current_streak(trades: Sequence[TradeRecord]) -> CurrentStreak:
    """Run of outcomes equal to the last trade's, scanning backward."""
    if not trades:
        return CurrentStreak()
    kind = trades[-1].auto.outcome
    count = 0
    pl = 0.0
    for trade in reversed(trades):
        if trade.auto.outcome != kind:
            break
        count += 1
        pl += trade.auto.pl
    return CurrentStreak(type=kind, count=count, pl=pl)


def summarize_streaks(trades: Sequence[TradeRecord]) -> StreakSummary:
    """Longest streaks and the best/worst cumulative P/L reached in a streak."""
    if not trades:
        return StreakSummary()
    max_win = max_loss = 0
    max_win_pl = max_loss_pl = 0.0
    wins = losses = 0
    win_pl = loss_pl = 0.0
    for trade in trades:
        outcome = trade.auto.outcome
        if outcome == "Win":
            wins += 1
            win_pl += trade.auto.pl
            losses, loss_pl = 0, 0.0
            max_win = max(max_win, wins)
            max_win_pl = max(max_win_pl, win_pl)
        elif outcome == "Loss":
            losses += 1
            loss_pl += trade.auto.pl
            wins, win_pl = 0, 0.0
            max_loss = max(max_loss, losses)
            max_loss_pl = min(max_loss_pl, loss_pl)
        else:
            wins = losses = 0
            win_pl = loss_pl = 0.0
    return StreakSummary(
        current=current_streak(trades),
        max_win_streak=max_win,
        max_loss_streak=max_loss,
        max_win_streak_pl=max_win_pl,
        max_loss_streak_pl=max_loss_pl,
    )


def _completed_runs(trades: Sequence[TradeRecord]) -> list[tuple[str, int, float]]:
    runs: list[tuple[str, int, float]] = []
    kind: Optional[str] = None
    length = 0
    pl = 0.0
    for trade in trades:
        outcome = trade.auto.outcome
        if outcome == kind:
            length += 1
            pl += trade.auto.pl
            continue
        if kind in ("Win", "Loss"):
            runs.append((kind, length, pl))
        kind, length, pl = outcome, 1, trade.auto.pl
    if kind in ("Win", "Loss"):
        runs.append((kind, length, pl))
    return runs


def streak_distribution(trades: Sequence[TradeRecord]) -> list[StreakBucket]:
    """How often win and loss runs of each length occurred, with average P/L.

    Runs of length 2 through 10 each get a bucket; longer runs are pooled
    into an ``11+`` bucket that only appears when non-empty. Fewer than two
    trades yields an empty list.
    """
    if len(trades) < 2:
        return []

    totals: dict[str, dict[str, list[float]]] = {}
    for kind, length, pl in _completed_runs(trades):
        if length < 2:
            continue
        label = str(length) if length <= STREAK_BUCKET_MAX else f"{STREAK_BUCKET_MAX + 1}+"
        totals.setdefault(label, {"Win": [], "Loss": []})[kind].append(pl)

    labels = [str(n) for n in range(2, STREAK_BUCKET_MAX + 1)]
    if f"{STREAK_BUCKET_MAX + 1}+" in totals:
        labels.append(f"{STREAK_BUCKET_MAX + 1}+")

    buckets = []
    for label in labels:
        entry = totals.get(label, {"Win": [], "Loss": []})
        win_pls, loss_pls = entry["Win"], entry["Loss"]
        buckets.append(
            StreakBucket(
                length=label,
                win_count=len(win_pls),
                avg_win_pl=sum(win_pls) / len(win_pls) if win_pls else 0.0,
                loss_count=len(loss_pls),
                avg_loss_pl=sum(loss_pls) / len(loss_pls) if loss_pls else 0.0,
            )
        )
    return buckets
