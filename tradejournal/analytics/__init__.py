"""Trade analytics: aggregation, pivots, time series and projections."""

from tradejournal.analytics.aggregate import aggregate, format_duration, format_profit_factor
from tradejournal.analytics.cache import AnalyticsCache, fingerprint
from tradejournal.analytics.criteria import CriterionRegistry, default_registry
from tradejournal.analytics.income import estimate_income
from tradejournal.analytics.pairs import (
    DEFAULT_PAIRS,
    merge_pairs,
    realized_r,
    resolve_pair,
    risk_amount,
)
from tradejournal.analytics.pivot import flatten_rows, group_recursively, trades_for_row
from tradejournal.analytics.simulation import (
    CancellationToken,
    params_from_history,
    run_compounding,
    run_monte_carlo,
)
from tradejournal.analytics.summary import overall_stats
from tradejournal.analytics.timeseries import (
    build_daily_equity_curve,
    build_drawdown_curve,
    build_equity_curve,
    build_streak_series,
    current_streak,
    moving_average,
    sort_chronologically,
    streak_distribution,
    summarize_streaks,
)
from tradejournal.analytics.trade_metrics import compute_auto, with_auto

__all__ = [
    "DEFAULT_PAIRS",
    "AnalyticsCache",
    "CancellationToken",
    "CriterionRegistry",
    "aggregate",
    "build_daily_equity_curve",
    "build_drawdown_curve",
    "build_equity_curve",
    "build_streak_series",
    "compute_auto",
    "current_streak",
    "default_registry",
    "estimate_income",
    "fingerprint",
    "flatten_rows",
    "format_duration",
    "format_profit_factor",
    "group_recursively",
    "merge_pairs",
    "moving_average",
    "overall_stats",
    "params_from_history",
    "realized_r",
    "resolve_pair",
    "risk_amount",
    "run_compounding",
    "run_monte_carlo",
    "sort_chronologically",
    "streak_distribution",
    "summarize_streaks",
    "trades_for_row",
    "with_auto",
]
