"""Grouping criteria: a registry of named resolvers.

A resolver maps a trade to the bucket value(s) it belongs to for one
criterion. Resolvers may return a single string or a list; a trade that
resolves to several values is counted in every one of those buckets.
Empty results bucket under ``"N/A"``.
"""

import logging
import math
import re
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

from tradejournal.analytics.pairs import DEFAULT_PAIRS, risk_amount
from tradejournal.errors import DuplicateCriterionError, UnknownCriterionError
from tradejournal.models import AppSettings, PairConfig, TradeRecord

logger = logging.getLogger(__name__)

FALLBACK_VALUE = "N/A"

ResolverOutput = Union[str, list[str], None]
Resolver = Callable[[TradeRecord], ResolverOutput]
SortKey = Callable[[str], Any]


@dataclass(frozen=True)
class Criterion:
    """A registered criterion: resolver plus optional bucket sort key."""

    name: str
    resolver: Resolver
    sort_key: Optional[SortKey] = None


class CriterionRegistry:
    """Maps criterion names to resolvers, validated at registration.

    ``token`` is unique per registry and ``version`` grows with every
    registration, so together they identify the registry's contents.
    """

    def __init__(self):
        self._criteria: dict[str, Criterion] = {}
        self.token = uuid.uuid4().hex
        self.version = 0

    @property
    def identity(self) -> tuple[str, int]:
        return (self.token, self.version)

    def register(
        self,
        name: str,
        resolver: Resolver,
        sort_key: Optional[SortKey] = None,
        replace: bool = False,
    ) -> Criterion:
        """Register a criterion.

        Args:
            name: Criterion name used in grouping paths.
            resolver: Callable mapping a trade to its bucket value(s).
            sort_key: Optional key for ordering sibling buckets. Without one,
                buckets keep first-encounter order.
            replace: Allow overwriting an existing registration.

        Raises:
            ValueError: If the name is empty or a callable is not callable.
            DuplicateCriterionError: If the name exists and ``replace`` is False.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Criterion name must be a non-empty string")
        if not callable(resolver):
            raise ValueError(f"Resolver for '{name}' is not callable")
        if sort_key is not None and not callable(sort_key):
            raise ValueError(f"Sort key for '{name}' is not callable")
        if name in self._criteria and not replace:
            raise DuplicateCriterionError(f"Criterion '{name}' is already registered")

        criterion = Criterion(name=name, resolver=resolver, sort_key=sort_key)
        self._criteria[name] = criterion
        self.version += 1
        return criterion

    def resolve(self, name: str) -> Criterion:
        try:
            return self._criteria[name]
        except KeyError:
            raise UnknownCriterionError(name) from None

    def values(self, name: str, trade: TradeRecord) -> list[str]:
        """Bucket values of ``trade`` for criterion ``name``, never empty."""
        return normalize_values(self.resolve(name).resolver(trade))

    def names(self) -> list[str]:
        return list(self._criteria)

    def __contains__(self, name: object) -> bool:
        return name in self._criteria

    def __len__(self) -> int:
        return len(self._criteria)


def normalize_values(raw: ResolverOutput) -> list[str]:
    """Coerce resolver output to a non-empty list of distinct strings."""
    if raw is None:
        return [FALLBACK_VALUE]
    if isinstance(raw, (list, tuple, set)):
        values = [str(v) for v in raw if v is not None and str(v) != ""]
        return list(dict.fromkeys(values)) or [FALLBACK_VALUE]
    text = str(raw)
    return [text] if text else [FALLBACK_VALUE]


# ==================== Bucket helpers ====================


def rr_bucket(trade: TradeRecord, pair_configs: Mapping[str, PairConfig]) -> str:
    """Realized R rounded to the nearest integer, clamped to [-5, 10]."""
    amount = risk_amount(trade, pair_configs)
    if amount <= 0:
        return "0R"
    rounded = math.floor(trade.auto.pl / amount + 0.5)
    if rounded < -5:
        return "< -5R"
    if rounded > 10:
        return "> 10R"
    return f"{rounded}R"


def score_bucket(score: float) -> str:
    if score >= 90:
        return "A+ (90-100)"
    if score >= 80:
        return "A (80-89)"
    if score >= 70:
        return "B (70-79)"
    if score >= 60:
        return "C (60-69)"
    if score >= 50:
        return "D (50-59)"
    return "F (< 50)"


def lot_size_bucket(lot_size: float) -> str:
    if lot_size <= 0.05:
        return "Micro (<=0.05)"
    if lot_size <= 0.1:
        return "Mini (0.06-0.10)"
    if lot_size <= 0.5:
        return "Small (0.11-0.50)"
    if lot_size <= 1.0:
        return "Standard (0.51-1.00)"
    return "Heavy (>1.00)"


def risk_percent_bucket(percent: float) -> str:
    if percent <= 0.5:
        return "0 - 0.5%"
    if percent <= 1:
        return "0.51 - 1%"
    if percent <= 2:
        return "1.01 - 2%"
    if percent <= 5:
        return "2.01 - 5%"
    return "> 5%"


def holding_time_bucket(minutes: float) -> str:
    if minutes < 5:
        return "< 5 min"
    if minutes <= 15:
        return "5-15 min"
    if minutes <= 30:
        return "15-30 min"
    if minutes <= 60:
        return "30-60 min"
    if minutes <= 240:
        return "1-4 hr"
    if minutes <= 1440:
        return "4-24 hr"
    return "> 1 day"


def week_of_month(day: date) -> int:
    """Week number within the month, weeks starting on Sunday."""
    first_column = (day.replace(day=1).weekday() + 1) % 7
    return (day.day - 1 + first_column) // 7 + 1


# ==================== Sort keys ====================

SCORE_ORDER = ["A+ (90-100)", "A (80-89)", "B (70-79)", "C (60-69)", "D (50-59)", "F (< 50)"]
LOT_SIZE_ORDER = [
    "Micro (<=0.05)",
    "Mini (0.06-0.10)",
    "Small (0.11-0.50)",
    "Standard (0.51-1.00)",
    "Heavy (>1.00)",
]
RISK_PERCENT_ORDER = ["0 - 0.5%", "0.51 - 1%", "1.01 - 2%", "2.01 - 5%", "> 5%"]
HOLDING_TIME_ORDER = [
    "< 5 min",
    "5-15 min",
    "15-30 min",
    "30-60 min",
    "1-4 hr",
    "4-24 hr",
    "> 1 day",
]
DAY_OF_WEEK_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTH_ORDER = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

_RR_PATTERN = re.compile(r"^(-?\d+)R$")
_HOUR_PATTERN = re.compile(r"^(\d{1,2}):00$")


def ordinal_key(order: list[str]) -> SortKey:
    """Sort key placing known labels in ``order`` and anything else last."""
    positions = {label: i for i, label in enumerate(order)}

    def key(value: str) -> tuple[int, int]:
        return (0, positions[value]) if value in positions else (1, 0)

    return key


def rr_sort_key(value: str) -> tuple[int, float]:
    if value == "< -5R":
        return (0, -6)
    if value == "> 10R":
        return (0, 11)
    match = _RR_PATTERN.match(value)
    return (0, int(match.group(1))) if match else (1, 0)


def _numeric_key(pattern: Optional[re.Pattern] = None) -> SortKey:
    def key(value: str) -> tuple[int, int]:
        text = value
        if pattern is not None:
            match = pattern.match(value)
            if not match:
                return (1, 0)
            text = match.group(1)
        return (0, int(text)) if text.isdigit() else (1, 0)

    return key


# ==================== Default registry ====================


def _custom_field_resolver(field_id: str) -> Resolver:
    def resolve(trade: TradeRecord) -> ResolverOutput:
        value = trade.custom_stats.get(field_id)
        if value is None or value == []:
            return FALLBACK_VALUE
        if isinstance(value, list):
            return [str(v) for v in value]
        return str(value)

    return resolve


def _selection_text(timeframe: str, item: Any, option_value: str) -> str:
    modifiers = ""
    if isinstance(item, dict):
        modifiers = ", ".join(str(v) for k, v in item.items() if k != "value")
    suffix = f" ({modifiers})" if modifiers else ""
    return f"{timeframe}: {option_value}{suffix}"


def _analysis_resolver(category) -> Resolver:
    def resolve(trade: TradeRecord) -> ResolverOutput:
        found: list[str] = []
        for timeframe, selections in trade.analysis_selections.items():
            for sub_category in category.sub_categories:
                for item in selections.get(sub_category.id, []):
                    option_id = item.get("value") if isinstance(item, dict) else item
                    option = sub_category.option(option_id)
                    if option is not None:
                        found.append(_selection_text(timeframe, item, option.value))
        return found or FALLBACK_VALUE

    return resolve


def _alignment_resolver(settings: AppSettings) -> Resolver:
    bias = next(
        (
            sub
            for category in settings.analysis_configurations
            for sub in category.sub_categories
            if sub.id == "bias"
        ),
        None,
    )

    def resolve(trade: TradeRecord) -> ResolverOutput:
        if bias is None:
            return FALLBACK_VALUE
        found = []
        for timeframe, selections in trade.analysis_selections.items():
            picked = selections.get("bias") or []
            if not picked:
                continue
            first = picked[0]
            option = bias.option(first.get("value") if isinstance(first, dict) else first)
            if option is None:
                continue
            aligned = (trade.direction == "Buy" and option.value == "Bullish") or (
                trade.direction == "Sell" and option.value == "Bearish"
            )
            found.append(f"{timeframe}: {'Aligned' if aligned else 'Misaligned'}")
        return found or FALLBACK_VALUE

    return resolve


def default_registry(
    settings: Optional[AppSettings] = None,
    pair_configs: Optional[Mapping[str, PairConfig]] = None,
) -> CriterionRegistry:
    """Build a registry with the built-in criteria.

    Custom fields register as ``custom-<field id>``; analysis categories
    register under their title.

    Args:
        settings: App settings providing custom fields and analysis categories.
        pair_configs: Pair data for the ``RR`` criterion. Defaults to the
            settings' pairs, or the built-in table when those are empty.
    """
    settings = settings or AppSettings()
    if pair_configs is None:
        pair_configs = settings.pairs_config or DEFAULT_PAIRS

    registry = CriterionRegistry()
    register = registry.register

    register("Outcome", lambda t: t.auto.outcome)
    register("Result", lambda t: t.auto.result)
    register("Direction", lambda t: t.direction)
    register("Pair", lambda t: t.pair)
    register("Tag", lambda t: t.tag or "Untagged")
    register("Month", lambda t: MONTH_ORDER[t.open_date.month - 1], ordinal_key(MONTH_ORDER))
    register("Week of Month", lambda t: f"Week {week_of_month(t.open_date)}")
    register(
        "Day of Week",
        lambda t: DAY_OF_WEEK_ORDER[t.open_date.weekday()],
        ordinal_key(DAY_OF_WEEK_ORDER),
    )
    register("Day of Month", lambda t: str(t.open_date.day), _numeric_key())
    register("Hour of Day", lambda t: f"{t.open_time.hour}:00", _numeric_key(_HOUR_PATTERN))
    register("Session", lambda t: t.auto.session)
    register("IPDA Zone", lambda t: t.auto.ipda_zone or FALLBACK_VALUE)
    register("Strategy", lambda t: t.strategy or "Unspecified")
    register("Setup", lambda t: t.auto.matched_setups or "No Setup")
    register("News", lambda t: [n.name for n in t.news_events] or "No News")
    register("Sentiments", lambda t: (t.sentiment.all() if t.sentiment else []) or FALLBACK_VALUE)
    register(
        "Plan Adherence",
        lambda t: "Compliant" if t.auto.score.value >= 80 else "Non-Compliant",
    )
    register("RR", lambda t: rr_bucket(t, pair_configs), rr_sort_key)
    register("Score", lambda t: score_bucket(t.auto.score.value), ordinal_key(SCORE_ORDER))
    register("LotSize", lambda t: lot_size_bucket(t.lot_size), ordinal_key(LOT_SIZE_ORDER))
    register(
        "Risk %",
        lambda t: risk_percent_bucket(t.auto.risk_percent),
        ordinal_key(RISK_PERCENT_ORDER),
    )
    register(
        "Holding Time",
        lambda t: holding_time_bucket(t.auto.duration_minutes),
        ordinal_key(HOLDING_TIME_ORDER),
    )
    register("Alignment", _alignment_resolver(settings))

    for field in settings.custom_fields:
        register(f"custom-{field.id}", _custom_field_resolver(field.id), replace=True)

    for category in settings.analysis_configurations:
        if category.title in registry:
            logger.debug("Analysis category '%s' shadows a built-in criterion", category.title)
        register(category.title, _analysis_resolver(category), replace=True)

    return registry
