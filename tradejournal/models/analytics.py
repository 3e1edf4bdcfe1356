"""Output models of the analytics core.

All of these are plain data: they serialize with ``model_dump()`` and carry
no behavior beyond trivial accessors.
"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field


class AggregateMetrics(BaseModel):
    """Group-level statistics over a list of trades.

    ``win_rate`` is a 0-1 fraction. ``profit_factor`` is ``inf`` when the
    group has profit but no losses. ``loss`` is the negated gross loss.
    """

    profit: float = 0.0
    loss: float = 0.0
    trades: int = 0
    win_rate: float = 0.0
    total_r: float = 0.0
    avg_r: float = 0.0
    profit_factor: float = 0.0
    total_pl: float = 0.0
    gain_percent: float = 0.0
    expectancy: float = 0.0
    avg_pl: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    avg_lot_size: float = 0.0
    max_win_streak: int = 0
    max_loss_streak: int = 0
    avg_duration: float = Field(default=0.0, description="Mean holding time in minutes")
    avg_score: float = 0.0
    win_count: int = 0
    loss_count: int = 0
    avg_win_score: float = 0.0
    avg_loss_score: float = 0.0

    model_config = {"frozen": True}


class GroupCriterion(BaseModel):
    """One step of a pivot path: criterion name and bucket value."""

    key: str
    value: str

    model_config = {"frozen": True}


class GroupRow(BaseModel):
    """A pivot row; ``metrics`` covers every trade matching ``criteria``."""

    key: str
    level: int = Field(..., ge=0)
    label: str
    metrics: AggregateMetrics
    criteria: list[GroupCriterion] = Field(default_factory=list)
    sub_rows: list["GroupRow"] = Field(default_factory=list)

    model_config = {"frozen": True}


class EquityPoint(BaseModel):
    """Balance after a trade (or after a day when grouped by day)."""

    trade: int = Field(..., ge=0, description="Trade number, 0 for the anchor")
    balance: float
    realized_r: float = 0.0
    cumulative_r: float = 0.0
    pl: float = 0.0
    balance_with_fees: float = 0.0
    trade_id: Optional[str] = None
    date: Optional[dt.date] = None
    trade_count: int = 0

    model_config = {"frozen": True}


class DrawdownPoint(BaseModel):
    trade: int
    balance: float
    peak_balance: float
    drawdown: float = Field(..., le=0)
    drawdown_percent: float

    model_config = {"frozen": True}


class DrawdownStats(BaseModel):
    """Summary of a drawdown curve. Amounts are positive magnitudes."""

    worst: float = 0.0
    average: float = 0.0
    current: float = 0.0
    peak_to_trough: int = 0
    trough_to_recovery: int = 0
    worst_index: int = -1
    peak_index: int = 0
    recovery_index: int = -1

    model_config = {"frozen": True}


StreakType = Literal["Win", "Loss", "Neutral", "N/A"]


class StreakPoint(BaseModel):
    """Streak counters as of one trade in chronological order."""

    trade: int
    trade_id: str
    outcome: Literal["Win", "Loss", "Neutral"]
    win_streak: int = 0
    loss_streak: int = 0

    model_config = {"frozen": True}


class CurrentStreak(BaseModel):
    type: StreakType = "N/A"
    count: int = 0
    pl: float = 0.0

    model_config = {"frozen": True}


class StreakSummary(BaseModel):
    current: CurrentStreak = Field(default_factory=CurrentStreak)
    max_win_streak: int = 0
    max_loss_streak: int = 0
    max_win_streak_pl: float = 0.0
    max_loss_streak_pl: float = 0.0

    model_config = {"frozen": True}


class StreakBucket(BaseModel):
    """Completed runs of one length: how often, and their average P/L."""

    length: str
    win_count: int = 0
    avg_win_pl: float = 0.0
    loss_count: int = 0
    avg_loss_pl: float = 0.0

    model_config = {"frozen": True}


class IncomeRates(BaseModel):
    hourly: float = 0.0
    daily: float = 0.0
    weekly: float = 0.0
    monthly: float = 0.0
    yearly: float = 0.0

    model_config = {"frozen": True}


class IncomeStats(BaseModel):
    """Income per period, shown side by side as "Avg-Based" and "Real-Time Rate"."""

    avg_based: IncomeRates = Field(default_factory=IncomeRates)
    real_time: IncomeRates = Field(default_factory=IncomeRates)
    elapsed_minutes: float = 0.0
    days_traded: int = 0

    model_config = {"frozen": True}


class MonteCarloParams(BaseModel):
    """Inputs of a Monte Carlo run. Rates are 0-1 fractions."""

    starting_balance: float = Field(..., gt=0)
    win_rate: float = Field(..., ge=0, le=1)
    avg_win_r: float = Field(..., gt=0)
    avg_loss_r: float = Field(..., gt=0)
    risk_per_trade: float = Field(..., gt=0, le=1)
    num_trades: int = Field(..., gt=0, le=5000)
    num_simulations: int = Field(..., gt=0, le=1000)
    avg_holding_minutes: float = Field(default=240.0, ge=0)
    avg_gap_minutes: float = Field(default=180.0, ge=0)

    model_config = {"frozen": True}


class SimulationResult(BaseModel):
    """Aggregated Monte Carlo outcome. ``paths[i][j]`` is path i after j trades."""

    paths: list[list[float]] = Field(default_factory=list)
    avg_final_balance: float = 0.0
    max_final_balance: float = 0.0
    min_final_balance: float = 0.0
    probability_of_profit: float = 0.0
    probability_of_ruin: float = 0.0
    avg_max_win_streak: float = 0.0
    avg_max_loss_streak: float = 0.0
    overall_min_balance: float = 0.0
    overall_max_balance: float = 0.0
    projected_minutes: float = 0.0

    model_config = {"frozen": True}


class CompoundingParams(BaseModel):
    """Inputs of the compounding projection. Rates are 0-1 fractions."""

    starting_balance: float = Field(..., gt=0)
    monthly_contribution: float = Field(default=0.0, ge=0)
    win_rate: float = Field(..., ge=0, le=1)
    risk_reward_ratio: float = Field(..., gt=0)
    risk_per_trade: float = Field(..., ge=0.001, le=1)
    trades_per_month: int = Field(..., gt=0)
    months_to_project: int = Field(..., ge=1, le=120)

    model_config = {"frozen": True}


class CompoundingPoint(BaseModel):
    month: int
    balance: float

    model_config = {"frozen": True}


class OverallStats(BaseModel):
    """Journal-wide timing and score statistics."""

    total_trades: int = 0
    win_count: int = 0
    loss_count: int = 0
    gross_win_pl: float = 0.0
    gross_loss_pl: float = 0.0
    total_pl: float = 0.0
    avg_pl: float = 0.0
    avg_duration: float = 0.0
    longest_duration: float = 0.0
    shortest_duration: float = 0.0
    avg_gap: float = 0.0
    longest_gap: float = 0.0
    shortest_gap: float = 0.0
    best_time: str = "N/A"
    worst_time: str = "N/A"
    avg_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0

    model_config = {"frozen": True}
