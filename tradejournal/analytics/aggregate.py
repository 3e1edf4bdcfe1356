"""Metrics aggregation over a list of trades.

The aggregator consumes the per-trade ``auto`` block as-is and never
recomputes it. Trades are processed in the order the caller passes them;
streak figures therefore depend on that order.
"""

import math
from collections.abc import Mapping, Sequence

from tradejournal.analytics.pairs import realized_r
from tradejournal.models import AggregateMetrics, PairConfig, TradeRecord


def format_duration(minutes: float, with_days: bool = False) -> str:
    """Format a duration in minutes for display.

    Args:
        minutes: Duration in minutes.
        with_days: Render durations of a day or more as ``N.Nd``.

    Returns:
        ``<1m``, ``Nm``, ``N.Nh`` or (optionally) ``N.Nd``.
    """
    if minutes < 1:
        return "<1m"
    if minutes < 60:
        return f"{minutes:.0f}m"
    if with_days and minutes >= 1440:
        return f"{minutes / 1440:.1f}d"
    return f"{minutes / 60:.1f}h"


def format_profit_factor(value: float) -> str:
    """Render a profit factor, using ``∞`` for the no-loss sentinel."""
    if math.isinf(value):
        return "∞"
    return f"{value:.2f}"


def _max_streaks(trades: Sequence[TradeRecord]) -> tuple[int, int]:
    max_win = max_loss = 0
    current_win = current_loss = 0
    for trade in trades:
        outcome = trade.auto.outcome
        if outcome == "Win":
            current_win += 1
            current_loss = 0
        elif outcome == "Loss":
            current_loss += 1
            current_win = 0
        else:
            current_win = 0
            current_loss = 0
        max_win = max(max_win, current_win)
        max_loss = max(max_loss, current_loss)
    return max_win, max_loss


def aggregate(
    trades: Sequence[TradeRecord],
    pair_configs: Mapping[str, PairConfig],
    capital: float,
) -> AggregateMetrics:
    """Reduce trades to group-level performance metrics.

    Args:
        trades: Trades carrying their ``auto`` metrics, in caller order.
        pair_configs: Pair reference data used for R-multiples.
        capital: Account capital used for ``gain_percent``.

    Returns:
        AggregateMetrics. An empty input yields the all-zero default.
    """
    if not trades:
        return AggregateMetrics()

    total = len(trades)
    wins = [t for t in trades if t.auto.outcome == "Win"]
    losses = [t for t in trades if t.auto.outcome == "Loss"]

    gross_profit = sum(t.auto.pl for t in wins)
    gross_loss = abs(sum(t.auto.pl for t in losses))
    total_pl = gross_profit - gross_loss

    win_rate = len(wins) / total
    loss_rate = len(losses) / total
    avg_win = gross_profit / len(wins) if wins else 0.0
    avg_loss = gross_loss / len(losses) if losses else 0.0
    expectancy = win_rate * avg_win - loss_rate * avg_loss

    if gross_loss > 0:
        profit_factor = gross_profit / gross_loss
    elif gross_profit > 0:
        profit_factor = math.inf
    else:
        profit_factor = 0.0

    total_r = sum(realized_r(t, pair_configs) for t in trades)
    max_win_streak, max_loss_streak = _max_streaks(trades)

    avg_win_score = sum(t.auto.score.value for t in wins) / len(wins) if wins else 0.0
    avg_loss_score = sum(t.auto.score.value for t in losses) / len(losses) if losses else 0.0

    return AggregateMetrics(
        profit=gross_profit,
        loss=-gross_loss,
        trades=total,
        win_rate=win_rate,
        total_r=total_r,
        avg_r=total_r / total,
        profit_factor=profit_factor,
        total_pl=total_pl,
        gain_percent=(total_pl / capital * 100) if capital > 0 else 0.0,
        expectancy=expectancy,
        avg_pl=total_pl / total,
        avg_win=avg_win,
        avg_loss=avg_loss,
        avg_lot_size=sum(t.lot_size for t in trades) / total,
        max_win_streak=max_win_streak,
        max_loss_streak=max_loss_streak,
        avg_duration=sum(t.auto.duration_minutes for t in trades) / total,
        avg_score=sum(t.auto.score.value for t in trades) / total,
        win_count=len(wins),
        loss_count=len(losses),
        avg_win_score=avg_win_score,
        avg_loss_score=avg_loss_score,
    )
