"""Data models for TradeJournal."""

from tradejournal.models.analytics import (
    AggregateMetrics,
    CompoundingParams,
    CompoundingPoint,
    CurrentStreak,
    DrawdownPoint,
    DrawdownStats,
    EquityPoint,
    GroupCriterion,
    GroupRow,
    IncomeRates,
    IncomeStats,
    MonteCarloParams,
    OverallStats,
    SimulationResult,
    StreakBucket,
    StreakPoint,
    StreakSummary,
)
from tradejournal.models.filters import Filters, NumericRange, TimeRange
from tradejournal.models.journal import Journal, JournalType
from tradejournal.models.pair import PairConfig
from tradejournal.models.settings import (
    AnalysisCategory,
    AnalysisOption,
    AnalysisSubCategory,
    AppSettings,
    CustomField,
    CustomFieldOption,
)
from tradejournal.models.trade import (
    AutoMetrics,
    Breakeven,
    Layer,
    NewsEvent,
    PartialClose,
    Score,
    Sentiment,
    TradeNote,
    TradeRecord,
)

__all__ = [
    "AggregateMetrics",
    "AnalysisCategory",
    "AnalysisOption",
    "AnalysisSubCategory",
    "AppSettings",
    "AutoMetrics",
    "Breakeven",
    "CompoundingParams",
    "CompoundingPoint",
    "CurrentStreak",
    "CustomField",
    "CustomFieldOption",
    "DrawdownPoint",
    "DrawdownStats",
    "EquityPoint",
    "Filters",
    "GroupCriterion",
    "GroupRow",
    "IncomeRates",
    "IncomeStats",
    "Journal",
    "JournalType",
    "Layer",
    "MonteCarloParams",
    "NewsEvent",
    "NumericRange",
    "OverallStats",
    "PairConfig",
    "PartialClose",
    "Score",
    "Sentiment",
    "SimulationResult",
    "StreakBucket",
    "StreakPoint",
    "StreakSummary",
    "TimeRange",
    "TradeNote",
    "TradeRecord",
]
