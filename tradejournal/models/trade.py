"""TradeRecord data model and its derived `auto` block."""

from datetime import date, datetime, time
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

Direction = Literal["Buy", "Sell"]
Outcome = Literal["Win", "Loss", "Neutral"]
Result = Literal["TP", "SL", "BE", "Stop", "Running"]

# Trades round-trip through JSON using the journal's camelCase keys.
_CAMEL_CONFIG = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}


class Score(BaseModel):
    """Discipline score attached to a trade."""

    value: float = Field(default=0.0, description="Score value")
    remark: str = Field(default="N/A", description="Explanation of deductions")
    color: str = Field(default="#888", description="Display color")

    model_config = _CAMEL_CONFIG


class PartialClose(BaseModel):
    """A portion of the position closed before the final exit."""

    lot_size: float = Field(..., gt=0, description="Lots closed")
    price: float = Field(..., ge=0, description="Exit price of the partial")

    model_config = _CAMEL_CONFIG


class Layer(BaseModel):
    """An additional entry layered into the position."""

    lot_size: float = Field(..., gt=0)
    entry_price: float = Field(..., ge=0)
    closing_price: float = Field(default=0.0, ge=0)
    stop_loss: float = Field(default=0.0, ge=0)
    take_profit: float = Field(default=0.0, ge=0)

    model_config = _CAMEL_CONFIG


class Breakeven(BaseModel):
    """Trade management applied after entry."""

    type: Literal["No Break Even", "Break Even", "Trail SL"] = "No Break Even"
    trigger: Optional[str] = None
    trail_price: Optional[float] = None

    model_config = _CAMEL_CONFIG


class NewsEvent(BaseModel):
    """Economic news released around the trade."""

    name: str = Field(..., min_length=1)
    currency: Optional[str] = None
    impact: Optional[Literal["High", "Medium", "Low", "Holiday"]] = None
    time: Optional[str] = None

    model_config = _CAMEL_CONFIG


class Sentiment(BaseModel):
    """Sentiment keywords recorded before, during and after the trade."""

    before: list[str] = Field(default_factory=list, alias="Before")
    during: list[str] = Field(default_factory=list, alias="During")
    after: list[str] = Field(default_factory=list, alias="After")

    model_config = {"frozen": True, "populate_by_name": True}

    def all(self) -> list[str]:
        """All keywords in recording order, duplicates removed."""
        return list(dict.fromkeys([*self.before, *self.during, *self.after]))


class TradeNote(BaseModel):
    """Free-form note attached to a trade."""

    title: str = ""
    content: str = ""

    model_config = _CAMEL_CONFIG


class AutoMetrics(BaseModel):
    """Per-trade metrics derived from the raw fields at save time."""

    session: str = Field(default="N/A", description="Market session(s) at open")
    ipda_zone: str = Field(default="N/A", description="Intraday time zone at open")
    result: Result = Field(default="Running", description="How the trade exited")
    status: Literal["Open", "Closed"] = Field(default="Open")
    outcome: Outcome = Field(default="Neutral", description="Win, Loss or Neutral")
    pips: float = Field(default=0.0, description="Gross pips captured")
    pl: float = Field(default=0.0, description="Signed profit/loss after costs")
    rr: float = Field(default=0.0, description="Planned reward:risk")
    risk_percent: float = Field(default=0.0, description="Risk as % of capital")
    gain_percent: float = Field(default=0.0, description="P/L as % of capital")
    holding_time: str = Field(default="0m", description="Human readable duration")
    duration_minutes: float = Field(default=0.0, description="Open to close in minutes")
    score: Score = Field(default_factory=Score)
    mfe: float = Field(default=0.0, description="Max favorable excursion in pips")
    mae: float = Field(default=0.0, description="Max adverse excursion in pips")
    spread_cost: float = Field(default=0.0)
    commission_cost: float = Field(default=0.0)
    swap_cost: float = Field(default=0.0)
    matched_setups: list[str] = Field(default_factory=list)
    news_impact: str = Field(default="N/A")

    model_config = _CAMEL_CONFIG


class TradeRecord(BaseModel):
    """One logged position with its raw inputs and derived metrics."""

    id: str = Field(..., min_length=1, description="Unique trade identifier")
    journal_id: str = Field(default="", description="Owning journal")
    pair: str = Field(..., min_length=1, description="Instrument symbol")
    direction: Direction = Field(..., description="Buy or Sell")
    open_date: date = Field(..., description="Open date")
    open_time: time = Field(default=time(0, 0), description="Open time")
    close_date: Optional[date] = Field(default=None, description="Close date")
    close_time: Optional[time] = Field(default=None, description="Close time")
    entry_price: float = Field(..., ge=0, description="Entry price")
    closing_price: Optional[float] = Field(default=None, ge=0, description="Exit price")
    stop_loss: float = Field(default=0.0, ge=0, description="Stop loss price (0 = none)")
    take_profit: Optional[float] = Field(default=None, ge=0, description="Take profit price")
    lot_size: float = Field(..., gt=0, description="Position size in lots")
    commission: float = Field(default=0.0, description="Commission paid")
    swap: float = Field(default=0.0, description="Overnight swap")
    has_partial: bool = False
    partials: list[PartialClose] = Field(default_factory=list)
    is_layered: bool = False
    layers: list[Layer] = Field(default_factory=list)
    breakeven: Optional[Breakeven] = None
    strategy: Optional[str] = None
    tag: Optional[str] = None
    sentiment: Optional[Sentiment] = None
    news_events: list[NewsEvent] = Field(default_factory=list)
    note: list[TradeNote] = Field(default_factory=list)
    custom_stats: dict[str, Any] = Field(default_factory=dict)
    analysis_selections: dict[str, dict[str, list[Any]]] = Field(default_factory=dict)
    mfe: Optional[float] = Field(default=None, description="Best price reached")
    mae: Optional[float] = Field(default=None, description="Worst price reached")
    lessons_learned: Optional[str] = None
    auto: AutoMetrics = Field(default_factory=AutoMetrics)

    model_config = _CAMEL_CONFIG

    @property
    def opened_at(self) -> datetime:
        """Open timestamp."""
        return datetime.combine(self.open_date, self.open_time)

    @property
    def closed_at(self) -> Optional[datetime]:
        """Close timestamp, or None while the trade is open."""
        if self.close_date is None:
            return None
        return datetime.combine(self.close_date, self.close_time or time(0, 0))
