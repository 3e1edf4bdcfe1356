"""Instrument reference data and per-trade risk helpers.

Every monetary calculation looks up the trade's pair here. Unknown symbols
fall back to the ``"Other"`` entry; when that is missing too, the helpers
return 0 so a single unconfigured trade never breaks an aggregation.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from tradejournal.models import PairConfig, TradeRecord

logger = logging.getLogger(__name__)

FALLBACK_SYMBOL = "Other"

# symbol: (pip_size, pip_value, spread)
_DEFAULT_TABLE: dict[str, tuple[float, float, float]] = {
    # Forex majors
    "EURUSD": (0.0001, 10, 0.9),
    "GBPUSD": (0.0001, 10, 1.1),
    "USDJPY": (0.01, 8.86, 1.0),
    "AUDUSD": (0.0001, 10, 0.9),
    "USDCAD": (0.0001, 10, 1.5),
    "USDCHF": (0.0001, 10, 1.4),
    "NZDUSD": (0.0001, 10, 1.4),
    # Forex minors
    "EURGBP": (0.0001, 13.56, 1.0),
    "EURJPY": (0.01, 6.77, 1.6),
    "EURAUD": (0.0001, 6.458, 2.0),
    "EURCAD": (0.0001, 7.222, 2.5),
    "EURCHF": (0.0001, 12.5522, 2.0),
    "GBPJPY": (0.01, 6.7719, 2.5),
    "GBPAUD": (0.0001, 6.6481, 2.5),
    "GBPCAD": (0.0001, 7.222, 3.0),
    "GBPCHF": (0.0001, 12.552249, 2.5),
    "AUDJPY": (0.01, 6.771949, 1.6),
    "AUDCAD": (0.0001, 7.2221, 2.0),
    "AUDCHF": (0.0001, 12.5523, 2.5),
    "CADJPY": (0.01, 6.771948, 1.8),
    "CHFJPY": (0.01, 6.771948, 2.0),
    "NZDJPY": (0.01, 6.771948, 2.2),
    # Forex exotics
    "USDMXN": (0.0001, 5.8, 20.0),
    "USDTRY": (0.0001, 3.1, 35.0),
    "USDZAR": (0.0001, 5.5, 17.5),
    "EURNOK": (0.0001, 9.6, 22.5),
    "EURSEK": (0.0001, 9.5, 15.0),
    "USDHKD": (0.0001, 1.2, 10.0),
    # Metals
    "XAUUSD": (0.1, 10, 1.12),
    "XAGUSD": (0.001, 5, 3.6),
    "XPTUSD": (0.01, 1, 83.2),
    "XPDUSD": (0.01, 1, 190.4),
    # Indices
    "AUS200": (1, 1, 70.7),
    "DE30": (1, 1, 8.5),
    "FR40": (1, 1, 32.1),
    "HK50": (1, 1, 29.5),
    "JP225": (1, 1, 17.8),
    "STOXX50": (1, 1, 51.8),
    "UK100": (0.1, 1, 66.6),
    "US30": (1, 1, 2.6),
    "US500": (0.1, 1, 5.9),
    "USTEC": (0.1, 1, 20.1),
    # Crypto
    "BTCUSD": (0.01, 0.01, 25.0),
    "ETHUSD": (0.01, 1, 1.5),
    # Oil
    "USOIL": (0.01, 10, 0.8),
    FALLBACK_SYMBOL: (0.0001, 10, 2.0),
}

DEFAULT_PAIRS: dict[str, PairConfig] = {
    symbol: PairConfig(symbol=symbol, pip_size=size, pip_value=value, spread=spread)
    for symbol, (size, value, spread) in _DEFAULT_TABLE.items()
}


def merge_pairs(
    overrides: Mapping[str, PairConfig],
    base: Optional[Mapping[str, PairConfig]] = None,
) -> dict[str, PairConfig]:
    """Layer user pair overrides on top of a base table (defaults if omitted)."""
    merged = dict(DEFAULT_PAIRS if base is None else base)
    merged.update(overrides)
    return merged


def resolve_pair(
    symbol: str, pair_configs: Mapping[str, PairConfig]
) -> Optional[PairConfig]:
    """Look up a symbol, falling back to the ``"Other"`` entry.

    Returns:
        The matching config, the fallback config, or None if neither exists.
    """
    config = pair_configs.get(symbol)
    if config is not None:
        return config
    fallback = pair_configs.get(FALLBACK_SYMBOL)
    if fallback is None:
        logger.debug("No pair config for %s and no fallback entry", symbol)
    return fallback


def risk_amount(trade: TradeRecord, pair_configs: Mapping[str, PairConfig]) -> float:
    """Monetary amount at risk between entry and stop loss.

    Returns 0 when the trade has no stop loss or its pair cannot be resolved.
    """
    if not trade.stop_loss or trade.stop_loss <= 0:
        return 0.0
    pair = resolve_pair(trade.pair, pair_configs)
    if pair is None or pair.pip_size <= 0:
        return 0.0
    risk_pips = abs(trade.entry_price - trade.stop_loss) / pair.pip_size
    return risk_pips * trade.lot_size * pair.pip_value


def realized_r(trade: TradeRecord, pair_configs: Mapping[str, PairConfig]) -> float:
    """Realized R-multiple: P/L divided by the amount at risk (0 if unknown)."""
    amount = risk_amount(trade, pair_configs)
    if amount <= 0:
        return 0.0
    return trade.auto.pl / amount
