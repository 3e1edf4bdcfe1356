"""PairConfig data model."""

from pydantic import BaseModel, Field


class PairConfig(BaseModel):
    """Pip reference data for one instrument."""

    symbol: str = Field(..., min_length=1, description="Instrument symbol")
    pip_size: float = Field(..., gt=0, description="Price distance of one pip")
    pip_value: float = Field(..., gt=0, description="Monetary value of one pip per lot")
    spread: float = Field(default=0.0, ge=0, description="Typical spread in pips")

    model_config = {"frozen": True}
