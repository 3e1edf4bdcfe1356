"""Income rates derived from total P/L and the time span of the trades."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from tradejournal.models import IncomeRates, IncomeStats, TradeRecord

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30.44
DAYS_PER_YEAR = 365.25


def latest_timestamp(trades: Sequence[TradeRecord]) -> Optional[datetime]:
    """Latest open or close timestamp in ``trades``."""
    stamps = []
    for trade in trades:
        stamps.append(trade.opened_at)
        if trade.closed_at is not None:
            stamps.append(trade.closed_at)
    return max(stamps) if stamps else None


def estimate_income(
    trades: Sequence[TradeRecord],
    total_pl: float,
    as_of: Optional[datetime] = None,
) -> IncomeStats:
    """Estimate income per hour, day, week, month and year.

    Two blocks are returned side by side. ``avg_based`` divides by the
    number of distinct days traded (daily) or by elapsed days (weekly and
    longer). ``real_time`` scales the per-elapsed-hour rate.

    Args:
        trades: Trades the P/L came from; only their timestamps are used.
        total_pl: Aggregated P/L of ``trades``.
        as_of: End of the elapsed window. Defaults to the latest trade
            timestamp, keeping the result deterministic.

    Returns:
        IncomeStats. No trades gives all zeros.
    """
    if not trades:
        return IncomeStats()

    start = min(t.opened_at for t in trades)
    end = as_of or latest_timestamp(trades)
    elapsed_minutes = max(1.0, (end - start).total_seconds() / 60)
    elapsed_days = max(1, (end - start).days)
    days_traded = len({t.open_date for t in trades})

    hourly = total_pl / (elapsed_minutes / 60)
    per_elapsed_day = total_pl / elapsed_days
    logger.debug(
        "Income over %.0f minutes, %d days traded: %.2f/hour",
        elapsed_minutes,
        days_traded,
        hourly,
    )

    return IncomeStats(
        avg_based=IncomeRates(
            hourly=hourly,
            daily=total_pl / days_traded,
            weekly=per_elapsed_day * DAYS_PER_WEEK,
            monthly=per_elapsed_day * DAYS_PER_MONTH,
            yearly=per_elapsed_day * DAYS_PER_YEAR,
        ),
        real_time=IncomeRates(
            hourly=hourly,
            daily=hourly * HOURS_PER_DAY,
            weekly=hourly * HOURS_PER_DAY * DAYS_PER_WEEK,
            monthly=hourly * HOURS_PER_DAY * DAYS_PER_MONTH,
            yearly=hourly * HOURS_PER_DAY * DAYS_PER_YEAR,
        ),
        elapsed_minutes=elapsed_minutes,
        days_traded=days_traded,
    )
