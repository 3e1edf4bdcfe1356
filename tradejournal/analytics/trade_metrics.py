"""Per-trade derived metrics (the ``auto`` block).

These run when a trade is saved or edited. The aggregation functions
downstream only read ``trade.auto`` and never call into this module.
"""

import logging
from collections.abc import Mapping
from datetime import time
from typing import Optional

from tradejournal.analytics.pairs import resolve_pair
from tradejournal.models import AutoMetrics, PairConfig, Score, TradeRecord

logger = logging.getLogger(__name__)

# Session windows in New York time; end < start wraps past midnight.
SESSION_WINDOWS: dict[str, tuple[time, time]] = {
    "Sydney": (time(16, 0), time(1, 0)),
    "Asian": (time(20, 0), time(5, 0)),
    "London": (time(3, 0), time(12, 0)),
    "New York": (time(8, 0), time(17, 0)),
}

# (start minute of day, zone); the first matching entry from the top wins.
IPDA_ZONES: list[tuple[int, str]] = [
    (17 * 60, "Asian Range"),
    (12 * 60, "Rest of day"),
    (11 * 60, "London Close Killzon"),
    (8 * 60 + 30, "New York Killzone"),
    (8 * 60, "NewYork open"),
    (5 * 60, "Pre New York"),
    (3 * 60, "London open Killzone"),
    (0, "Judas swing"),
]

SWAP_JOURNAL_TYPES = frozenset({"Funded", "Competition"})
NEWS_IMPACT_ORDER = {"High": 3, "Medium": 2, "Low": 1, "Holiday": 0}


def _minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def time_in_window(value: time, start: time, end: time) -> bool:
    """Whether ``value`` falls in [start, end), wrapping past midnight."""
    minute = _minute_of_day(value)
    lo, hi = _minute_of_day(start), _minute_of_day(end)
    if hi < lo:
        return minute >= lo or minute < hi
    return lo <= minute < hi


def session_for(open_time: time) -> str:
    """Active market sessions at ``open_time``, joined with " / "."""
    active = [
        name
        for name, (start, end) in SESSION_WINDOWS.items()
        if time_in_window(open_time, start, end)
    ]
    return " / ".join(active) if active else "N/A"


def ipda_zone_for(open_time: time) -> str:
    minute = _minute_of_day(open_time)
    for start, zone in IPDA_ZONES:
        if minute >= start:
            return zone
    return "N/A"


def holding_time_text(duration_minutes: float) -> str:
    """Render a duration as ``1d 2h 5m`` style text."""
    if duration_minutes <= 0:
        return "0m"
    total = int(duration_minutes)
    days, rest = divmod(total, 1440)
    hours, minutes = divmod(rest, 60)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def _signed_pips(trade: TradeRecord, exit_price: float, pip_size: float) -> float:
    if trade.direction == "Buy":
        return (exit_price - trade.entry_price) / pip_size
    return (trade.entry_price - exit_price) / pip_size


def gross_pl(trade: TradeRecord, pair: PairConfig) -> float:
    """Gross monetary P/L including partial closes, before costs."""
    if not trade.closing_price or trade.closing_price <= 0:
        return 0.0
    total = 0.0
    remaining = trade.lot_size
    if trade.has_partial:
        for partial in trade.partials:
            pips = _signed_pips(trade, partial.price, pair.pip_size)
            total += pips * partial.lot_size * pair.pip_value
            remaining -= partial.lot_size
    if remaining > 0:
        pips = _signed_pips(trade, trade.closing_price, pair.pip_size)
        total += pips * remaining * pair.pip_value
    return total


def classify_result(trade: TradeRecord, pair: PairConfig) -> str:
    """How the trade exited: TP, SL, BE, Stop, or Running while open."""
    close = trade.closing_price
    if not close or close <= 0:
        return "Running"
    threshold = pair.pip_size * 2
    breakeven = trade.breakeven is not None and trade.breakeven.type == "Break Even"
    if breakeven and abs(close - trade.entry_price) < threshold:
        return "BE"
    if trade.take_profit and abs(close - trade.take_profit) < threshold:
        return "TP"
    if trade.stop_loss > 0 and abs(close - trade.stop_loss) < threshold:
        if trade.direction == "Buy":
            protected = trade.stop_loss >= trade.entry_price
        else:
            protected = trade.stop_loss <= trade.entry_price
        return "Stop" if protected else "SL"
    return "Stop"


def _news_impact(trade: TradeRecord) -> str:
    highest = "N/A"
    level = 0
    for event in trade.news_events:
        if event.impact and NEWS_IMPACT_ORDER[event.impact] > level:
            level = NEWS_IMPACT_ORDER[event.impact]
            highest = event.impact
    return highest


def compute_auto(
    trade: TradeRecord,
    pair_configs: Mapping[str, PairConfig],
    capital: float,
    journal_type: str = "Real",
    score: Optional[Score] = None,
) -> AutoMetrics:
    """Compute the derived metrics of a trade from its raw fields.

    Args:
        trade: The trade; its current ``auto`` block is ignored.
        pair_configs: Pair reference data.
        capital: Account capital for risk and gain percentages.
        journal_type: Swap is only charged on Funded/Competition journals.
        score: Discipline score computed by the caller, default zero.

    Returns:
        A fresh AutoMetrics. Monetary values are rounded to 2 dp.
    """
    session = session_for(trade.open_time)
    ipda_zone = ipda_zone_for(trade.open_time)
    score = score or Score()
    closed_at = trade.closed_at
    status = "Closed" if closed_at is not None and trade.close_time is not None else "Open"

    duration = 0.0
    holding = "Open"
    if status == "Closed":
        duration = (closed_at - trade.opened_at).total_seconds() / 60
        holding = holding_time_text(duration)

    pair = resolve_pair(trade.pair, pair_configs)
    if pair is None:
        logger.debug("Trade %s has no resolvable pair; monetary metrics zeroed", trade.id)
        return AutoMetrics(
            session=session,
            ipda_zone=ipda_zone,
            status=status,
            holding_time=holding,
            duration_minutes=duration,
            score=score,
            news_impact=_news_impact(trade),
        )

    gross = gross_pl(trade, pair)
    commission_cost = trade.commission
    swap_cost = trade.swap if journal_type in SWAP_JOURNAL_TYPES else 0.0
    pl = gross - commission_cost - swap_cost
    pip_money = trade.lot_size * pair.pip_value
    pips = gross / pip_money if pip_money else 0.0

    risk_pips = 0.0
    if trade.stop_loss > 0:
        risk_pips = abs(trade.entry_price - trade.stop_loss) / pair.pip_size
    risk_money = risk_pips * pip_money
    reward_pips = 0.0
    if trade.take_profit:
        reward_pips = abs(trade.take_profit - trade.entry_price) / pair.pip_size
    rr = reward_pips / risk_pips if risk_pips > 0 else 0.0

    result = classify_result(trade, pair)
    outcome = "Neutral"
    if result != "Running":
        if pl > 0:
            outcome = "Win"
        elif pl < 0:
            outcome = "Loss"

    mfe = abs(trade.mfe - trade.entry_price) / pair.pip_size if trade.mfe else 0.0
    mae = abs(trade.entry_price - trade.mae) / pair.pip_size if trade.mae else 0.0

    return AutoMetrics(
        session=session,
        ipda_zone=ipda_zone,
        result=result,
        status=status,
        outcome=outcome,
        pips=round(pips, 2),
        pl=round(pl, 2),
        rr=round(rr, 2),
        risk_percent=round(risk_money / capital * 100, 2) if capital > 0 else 0.0,
        gain_percent=round(pl / capital * 100, 2) if capital > 0 else 0.0,
        holding_time=holding,
        duration_minutes=duration,
        score=score,
        mfe=mfe,
        mae=mae,
        spread_cost=pair.spread * pip_money,
        commission_cost=commission_cost,
        swap_cost=swap_cost,
        news_impact=_news_impact(trade),
    )


def with_auto(
    trade: TradeRecord,
    pair_configs: Mapping[str, PairConfig],
    capital: float,
    journal_type: str = "Real",
    score: Optional[Score] = None,
) -> TradeRecord:
    """Return a copy of ``trade`` with its ``auto`` block recomputed."""
    if score is None:
        score = trade.auto.score
    auto = compute_auto(trade, pair_configs, capital, journal_type, score)
    return trade.model_copy(update={"auto": auto})
