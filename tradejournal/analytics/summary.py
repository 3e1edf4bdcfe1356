"""Journal-wide timing and score statistics."""

from collections.abc import Sequence

from tradejournal.analytics.timeseries import sort_chronologically
from tradejournal.models import OverallStats, TradeRecord

# Gaps of two days or more are treated as breaks, not gaps between trades.
MAX_GAP_MINUTES = 2 * 1440


def trade_gaps(trades: Sequence[TradeRecord]) -> list[float]:
    """Minutes between each close and the next open, chronologically."""
    ordered = sort_chronologically(trades)
    gaps = []
    for prev, current in zip(ordered, ordered[1:]):
        if prev.closed_at is None:
            continue
        gap = (current.opened_at - prev.closed_at).total_seconds() / 60
        if 0 < gap < MAX_GAP_MINUTES:
            gaps.append(gap)
    return gaps


def overall_stats(trades: Sequence[TradeRecord]) -> OverallStats:
    """Counts, P/L, holding/gap extremes, best/worst hour and score range."""
    if not trades:
        return OverallStats()

    wins = [t.auto.pl for t in trades if t.auto.outcome == "Win"]
    losses = [t.auto.pl for t in trades if t.auto.outcome == "Loss"]
    total_pl = sum(wins) + sum(losses)

    durations = [t.auto.duration_minutes for t in trades]
    positive_durations = [d for d in durations if d > 0]
    gaps = trade_gaps(trades)

    pl_by_hour: dict[str, float] = {}
    for trade in trades:
        hour = f"{trade.open_time.hour:02d}:00"
        pl_by_hour[hour] = pl_by_hour.get(hour, 0.0) + trade.auto.pl
    ranked = sorted(pl_by_hour.items(), key=lambda item: item[1], reverse=True)

    scores = [t.auto.score.value for t in trades]
    return OverallStats(
        total_trades=len(trades),
        win_count=len(wins),
        loss_count=len(losses),
        gross_win_pl=sum(wins),
        gross_loss_pl=sum(losses),
        total_pl=total_pl,
        avg_pl=total_pl / len(trades),
        avg_duration=sum(durations) / len(trades),
        longest_duration=max(durations),
        shortest_duration=min(positive_durations) if positive_durations else 0.0,
        avg_gap=sum(gaps) / len(gaps) if gaps else 0.0,
        longest_gap=max(gaps) if gaps else 0.0,
        shortest_gap=min(gaps) if gaps else 0.0,
        best_time=ranked[0][0],
        worst_time=ranked[-1][0],
        avg_score=sum(scores) / len(scores),
        highest_score=max(scores),
        lowest_score=min(scores),
    )
