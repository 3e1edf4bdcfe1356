"""Trade filtering applied before trades reach the analytics core."""

import logging
from collections.abc import Callable, Sequence

from tradejournal.analytics.criteria import DAY_OF_WEEK_ORDER, MONTH_ORDER
from tradejournal.analytics.trade_metrics import time_in_window
from tradejournal.models import Filters, NumericRange, TradeRecord

logger = logging.getLogger(__name__)

# Multi-select filter field -> trade value.
_MULTI_SELECTS: dict[str, Callable[[TradeRecord], object]] = {
    "pair": lambda t: t.pair,
    "direction": lambda t: t.direction,
    "status": lambda t: t.auto.status,
    "outcome": lambda t: t.auto.outcome,
    "result": lambda t: t.auto.result,
    "strategy": lambda t: t.strategy,
    "session": lambda t: t.auto.session,
    "ipda_zone": lambda t: t.auto.ipda_zone,
    "tag": lambda t: t.tag,
}

# Range filter field -> trade value.
_RANGES: dict[str, Callable[[TradeRecord], float]] = {
    "pl_range": lambda t: t.auto.pl,
    "rr_range": lambda t: t.auto.rr,
    "score_range": lambda t: t.auto.score.value,
    "lot_size_range": lambda t: t.lot_size,
    "risk_percent_range": lambda t: t.auto.risk_percent,
    "gain_percent_range": lambda t: t.auto.gain_percent,
    "holding_time_range": lambda t: t.auto.duration_minutes,
}


def searchable_text(trade: TradeRecord) -> str:
    """Lower-cased text that keyword filters search in."""
    parts: list[object] = [
        trade.pair,
        trade.direction,
        trade.strategy,
        trade.tag,
        trade.lot_size,
        trade.entry_price,
        trade.closing_price,
        trade.stop_loss,
        trade.take_profit,
        trade.auto.pl,
        trade.auto.pips,
        trade.auto.rr,
        trade.auto.score.value,
    ]
    for note in trade.note:
        parts.extend([note.title, note.content])
    if trade.sentiment is not None:
        parts.extend(trade.sentiment.all())
    parts.extend(event.name for event in trade.news_events)
    return " ".join(str(p) for p in parts if p is not None).lower()


def is_active(filters: Filters) -> bool:
    """Whether any condition is set (``invert`` alone does not count)."""
    if filters.date_from or filters.date_to or filters.custom:
        return True
    list_fields = ["keywords", "day_of_week", "day_of_month", "month", "time_ranges", *_MULTI_SELECTS]
    if any(getattr(filters, name) for name in list_fields):
        return True
    return any(not getattr(filters, name).is_empty() for name in _RANGES)


def _custom_matches(trade: TradeRecord, wanted: dict[str, list[str]]) -> bool:
    for field_id, allowed in wanted.items():
        if not allowed:
            continue
        value = trade.custom_stats.get(field_id)
        values = value if isinstance(value, list) else [value]
        if not {str(v) for v in values if v is not None} & set(allowed):
            return False
    return True


def matches(trade: TradeRecord, filters: Filters) -> bool:
    """Evaluate every set condition against one trade, ignoring ``invert``."""
    if filters.keywords:
        text = searchable_text(trade)
        if not all(kw.lower() in text for kw in filters.keywords):
            return False

    opened = trade.opened_at
    if filters.date_from is not None and opened < filters.date_from:
        return False
    if filters.date_to is not None and opened > filters.date_to:
        return False
    if filters.day_of_week and DAY_OF_WEEK_ORDER[trade.open_date.weekday()] not in filters.day_of_week:
        return False
    if filters.day_of_month and trade.open_date.day not in filters.day_of_month:
        return False
    if filters.month and MONTH_ORDER[trade.open_date.month - 1] not in filters.month:
        return False
    if filters.time_ranges and not any(
        time_in_window(trade.open_time, r.start, r.end) for r in filters.time_ranges
    ):
        return False

    for name, getter in _MULTI_SELECTS.items():
        allowed = getattr(filters, name)
        if not allowed:
            continue
        value = getter(trade)
        if value is None or str(value) not in allowed:
            return False

    for name, getter in _RANGES.items():
        bounds: NumericRange = getattr(filters, name)
        if not bounds.is_empty() and not bounds.contains(getter(trade)):
            return False

    return _custom_matches(trade, filters.custom)


def apply_filters(trades: Sequence[TradeRecord], filters: Filters) -> list[TradeRecord]:
    """Trades matching ``filters``, in input order.

    With ``invert`` set, the trades that do not match are returned instead.
    A filter with no conditions returns the input unchanged.
    """
    if not is_active(filters):
        return list(trades)
    selected = [t for t in trades if matches(t, filters) != filters.invert]
    logger.debug("Filter kept %d of %d trades", len(selected), len(trades))
    return selected
