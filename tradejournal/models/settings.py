"""Application settings consumed by the analytics core."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from tradejournal.models.pair import PairConfig

_CAMEL_CONFIG = {"frozen": True, "populate_by_name": True, "alias_generator": to_camel}

ControlType = Literal["List", "Button", "Plain Text", "Numeric", "Date", "Time"]
ScoreImpact = Literal["Most Positive", "Positive", "Negative", "Most Negative"]


class AnalysisOption(BaseModel):
    """One selectable option inside an analysis sub-category."""

    id: str
    value: str

    model_config = _CAMEL_CONFIG


class AnalysisSubCategory(BaseModel):
    """A group of analysis options, e.g. 'bias' or 'volatility'."""

    id: str
    title: str
    options: list[AnalysisOption] = Field(default_factory=list)

    model_config = _CAMEL_CONFIG

    def option(self, option_id: str) -> AnalysisOption | None:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


class AnalysisCategory(BaseModel):
    """A top-level analysis category usable as a grouping criterion."""

    id: str
    title: str
    is_single_choice: bool = False
    sub_categories: list[AnalysisSubCategory] = Field(default_factory=list)

    model_config = _CAMEL_CONFIG


class CustomFieldOption(BaseModel):
    value: str
    impact: ScoreImpact = "Positive"

    model_config = _CAMEL_CONFIG


class CustomField(BaseModel):
    """User-defined trade field."""

    id: str = Field(..., min_length=1)
    title: str
    type: ControlType = "List"
    allow_multiple: bool = False
    options: list[CustomFieldOption] = Field(default_factory=list)

    model_config = _CAMEL_CONFIG


class AppSettings(BaseModel):
    """Settings snapshot handed to the analytics core."""

    pairs_config: dict[str, PairConfig] = Field(default_factory=dict)
    analysis_configurations: list[AnalysisCategory] = Field(default_factory=list)
    custom_fields: list[CustomField] = Field(default_factory=list)

    model_config = _CAMEL_CONFIG
