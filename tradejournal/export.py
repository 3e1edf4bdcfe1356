"""JSON export and import of trade lists.

Files hold a UTF-8 JSON array of trades using the journal's camelCase
keys and are named ``<prefix>_Trades_<YYYY-MM-DD>.json``.
"""

import json
import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter

from tradejournal.models import TradeRecord

logger = logging.getLogger(__name__)

_TRADE_LIST = TypeAdapter(list[TradeRecord])


def export_filename(prefix: str, on: Optional[date] = None) -> str:
    """Export file name for ``prefix`` dated ``on`` (today by default)."""
    on = on or date.today()
    return f"{prefix}_Trades_{on.isoformat()}.json"


def dumps_trades(trades: Sequence[TradeRecord]) -> str:
    payload = [t.model_dump(mode="json", by_alias=True) for t in trades]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def export_trades(
    trades: Sequence[TradeRecord],
    directory: Path,
    prefix: str,
    on: Optional[date] = None,
) -> Path:
    """Write trades to ``directory`` and return the file path.

    Args:
        trades: Trades to export.
        directory: Target directory, created if missing.
        prefix: Journal prefix for the file name.
        on: Date stamped into the file name.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(prefix, on)
    path.write_text(dumps_trades(trades), encoding="utf-8")
    logger.debug("Exported %d trades to %s", len(trades), path)
    return path


def loads_trades(text: str) -> list[TradeRecord]:
    """Parse a JSON array of trades.

    Raises:
        pydantic.ValidationError: If the document is not a valid trade list.
    """
    return _TRADE_LIST.validate_json(text)


def load_trades(path: Path) -> list[TradeRecord]:
    return loads_trades(Path(path).read_text(encoding="utf-8"))
