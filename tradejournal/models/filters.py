"""Filters data model."""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class NumericRange(BaseModel):
    """Inclusive numeric bounds; a missing bound is open."""

    min: Optional[float] = None
    max: Optional[float] = None

    model_config = {"frozen": True}

    def is_empty(self) -> bool:
        return self.min is None and self.max is None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


class TimeRange(BaseModel):
    """Time-of-day window; wraps past midnight when end < start."""

    start: time
    end: time

    model_config = {"frozen": True}


class Filters(BaseModel):
    """Structured predicate applied to a journal's trades.

    ``date_to`` given as a bare date, or as a datetime at midnight, covers
    that whole day.
    """

    keywords: list[str] = Field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    day_of_week: list[str] = Field(default_factory=list)
    day_of_month: list[int] = Field(default_factory=list)
    month: list[str] = Field(default_factory=list)
    time_ranges: list[TimeRange] = Field(default_factory=list)
    pair: list[str] = Field(default_factory=list)
    direction: list[str] = Field(default_factory=list)
    status: list[str] = Field(default_factory=list)
    outcome: list[str] = Field(default_factory=list)
    result: list[str] = Field(default_factory=list)
    strategy: list[str] = Field(default_factory=list)
    session: list[str] = Field(default_factory=list)
    ipda_zone: list[str] = Field(default_factory=list)
    tag: list[str] = Field(default_factory=list)
    pl_range: NumericRange = Field(default_factory=NumericRange)
    rr_range: NumericRange = Field(default_factory=NumericRange)
    score_range: NumericRange = Field(default_factory=NumericRange)
    lot_size_range: NumericRange = Field(default_factory=NumericRange)
    risk_percent_range: NumericRange = Field(default_factory=NumericRange)
    gain_percent_range: NumericRange = Field(default_factory=NumericRange)
    holding_time_range: NumericRange = Field(default_factory=NumericRange)
    custom: dict[str, list[str]] = Field(default_factory=dict)
    invert: bool = False

    model_config = {"frozen": True}

    @field_validator("date_from", mode="before")
    @classmethod
    def start_of_day(cls, value):
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        return value

    @field_validator("date_to", mode="before")
    @classmethod
    def end_of_day(cls, value):
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.max)
        return value

    @field_validator("date_to")
    @classmethod
    def widen_midnight(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.time() == time.min:
            return datetime.combine(value.date(), time.max)
        return value
