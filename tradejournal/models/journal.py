"""Journal data model."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from tradejournal.models.trade import TradeRecord

JournalType = Literal["Real", "Demo", "Backtest", "Funded", "Competition", "Other"]


class Journal(BaseModel):
    """A trading account: its trades plus balance bookkeeping."""

    id: str = Field(..., min_length=1, description="Journal identifier")
    title: str = Field(..., min_length=1, description="Display name")
    type: JournalType = Field(default="Real", description="Account type")
    initial_deposit: float = Field(..., ge=0, description="Starting deposit")
    capital: float = Field(..., ge=0, description="Capital used for risk sizing")
    balance: float = Field(..., description="Current balance")
    peak_balance: float = Field(..., description="Highest balance reached")
    current_max_drawdown: float = Field(default=0.0, ge=0, description="Largest peak-to-balance drop")
    created_at: datetime = Field(default_factory=datetime.now)
    trades: list[TradeRecord] = Field(default_factory=list)

    model_config = {"frozen": True}
