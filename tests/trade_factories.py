"""Trade builders and hypothesis strategies shared by the test modules."""

import itertools
from datetime import datetime, timedelta

from hypothesis import strategies as st

from tradejournal.models import AutoMetrics, PairConfig, Score, TradeRecord

# Whole-number pips keep risk amounts exact: entry 100 / stop 90 is 10 pips.
PAIRS = {
    "TEST": PairConfig(symbol="TEST", pip_size=1.0, pip_value=10.0),
    "ALT": PairConfig(symbol="ALT", pip_size=1.0, pip_value=5.0),
    "Other": PairConfig(symbol="Other", pip_size=1.0, pip_value=10.0),
}

START = datetime(2024, 1, 1, 9, 0)

_ids = itertools.count(1)

_RESULTS = {"Win": "TP", "Loss": "SL", "Neutral": "BE"}


def make_trade(
    pl: float = 0.0,
    outcome: str | None = None,
    opened: datetime = START,
    duration: float = 60,
    pair: str = "TEST",
    direction: str = "Buy",
    lot_size: float = 1.0,
    score: float = 0.0,
    **fields,
) -> TradeRecord:
    """A closed trade whose ``auto`` block is given directly."""
    if outcome is None:
        outcome = "Win" if pl > 0 else "Loss" if pl < 0 else "Neutral"
    closed = opened + timedelta(minutes=duration)
    auto = AutoMetrics(
        pl=pl,
        outcome=outcome,
        result=_RESULTS[outcome],
        status="Closed",
        duration_minutes=duration,
        score=Score(value=score),
    )
    fields.setdefault("entry_price", 100.0)
    fields.setdefault("stop_loss", 90.0)
    fields.setdefault("closing_price", 100.0)
    return TradeRecord(
        id=f"t{next(_ids)}",
        pair=pair,
        direction=direction,
        open_date=opened.date(),
        open_time=opened.time(),
        close_date=closed.date(),
        close_time=closed.time(),
        lot_size=lot_size,
        auto=auto,
        **fields,
    )


def open_trade(trade: TradeRecord) -> TradeRecord:
    return trade.model_copy(update={"close_date": None, "close_time": None})


@st.composite
def trade_lists(draw, min_size: int = 0, max_size: int = 30) -> list[TradeRecord]:
    """Chronological trades with random outcomes, sizes and timing."""
    count = draw(st.integers(min_value=min_size, max_value=max_size))
    opened = START
    trades = []
    for _ in range(count):
        outcome = draw(st.sampled_from(["Win", "Loss", "Neutral"]))
        amount = draw(st.integers(min_value=1, max_value=500000)) / 100
        pl = {"Win": amount, "Loss": -amount, "Neutral": 0.0}[outcome]
        opened += timedelta(minutes=draw(st.integers(min_value=1, max_value=3 * 1440)))
        trades.append(
            make_trade(
                pl=pl,
                outcome=outcome,
                opened=opened,
                duration=draw(st.integers(min_value=0, max_value=600)),
                pair=draw(st.sampled_from(["TEST", "ALT", "XYZ"])),
                direction=draw(st.sampled_from(["Buy", "Sell"])),
                lot_size=draw(st.sampled_from([0.01, 0.1, 0.5, 1.0, 2.0])),
                score=draw(st.integers(min_value=0, max_value=100)),
            )
        )
    return trades
