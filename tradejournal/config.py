"""Configuration loaded from ``~/.config/tradejournal/config.toml``.

Example::

    [journal]
    default_id = "main"
    prefix = "Main"

    [database]
    path = "~/.config/tradejournal/tradejournal.db"

    [pairs.EURUSD]
    pip_size = 0.0001
    pip_value = 10
    spread = 0.8

    [simulation]
    num_trades = 250
    num_simulations = 100
    risk_per_trade = 0.01

    [[custom_fields]]
    id = "emotion"
    title = "Emotion"
    allow_multiple = true

    [[custom_fields.options]]
    value = "Calm"

    [[analysis]]
    id = "htf"
    title = "Higher Timeframe"

    [[analysis.sub_categories]]
    id = "bias"
    title = "Bias"

    [[analysis.sub_categories.options]]
    id = "bull"
    value = "Bullish"
"""

import logging
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError

from tradejournal.analytics.pairs import merge_pairs
from tradejournal.models import AnalysisCategory, AppSettings, CustomField, PairConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "tradejournal"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "tradejournal.db"


class JournalSettings(BaseModel):
    default_id: Optional[str] = Field(default=None, description="Journal used when none is given")
    prefix: str = Field(default="Journal", description="Export file name prefix")


class DatabaseSettings(BaseModel):
    path: Path = Field(default=DEFAULT_DB_PATH)


class PairOverride(BaseModel):
    pip_size: float = Field(..., gt=0)
    pip_value: float = Field(..., gt=0)
    spread: float = Field(default=0.0, ge=0)


class SimulationSettings(BaseModel):
    num_trades: int = Field(default=250, gt=0, le=5000)
    num_simulations: int = Field(default=100, gt=0, le=1000)
    risk_per_trade: float = Field(default=0.01, gt=0, le=1)
    seed: Optional[int] = None


class AppConfig(BaseModel):
    """Parsed configuration file."""

    journal: JournalSettings = Field(default_factory=JournalSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    pairs: dict[str, PairOverride] = Field(default_factory=dict)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    custom_fields: list[CustomField] = Field(default_factory=list)
    analysis: list[AnalysisCategory] = Field(default_factory=list)

    @property
    def db_path(self) -> Path:
        return self.database.path.expanduser()

    def pair_configs(self) -> dict[str, PairConfig]:
        """Built-in pair table with the configured overrides applied."""
        overrides = {
            symbol: PairConfig(symbol=symbol, **override.model_dump())
            for symbol, override in self.pairs.items()
        }
        return merge_pairs(overrides)

    def app_settings(self) -> AppSettings:
        """Settings snapshot for the analytics core."""
        return AppSettings(
            pairs_config=self.pair_configs(),
            analysis_configurations=self.analysis,
            custom_fields=self.custom_fields,
        )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load the configuration file.

    A missing file yields the defaults. A file that cannot be read or
    parsed also yields the defaults, with a warning.
    """
    path = path or CONFIG_PATH
    if not path.exists():
        return AppConfig()

    try:
        return AppConfig.model_validate(toml.load(path))
    except (OSError, toml.TomlDecodeError, ValidationError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return AppConfig()
