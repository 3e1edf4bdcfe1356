"""Tests for JSON export and import of trades.

**Feature: trade-journal**
"""

import json
from datetime import date

import pytest
from pydantic import ValidationError

from trade_factories import make_trade
from tradejournal.export import (
    dumps_trades,
    export_filename,
    export_trades,
    load_trades,
    loads_trades,
)
from tradejournal.models import Sentiment


class TestExportFormat:
    """Files are camelCase JSON arrays named by prefix and date."""

    def test_filename(self):
        assert export_filename("Main", date(2024, 3, 31)) == "Main_Trades_2024-03-31.json"

    def test_camel_case_keys(self):
        payload = json.loads(dumps_trades([make_trade(pl=10.0, strategy="Breakout")]))

        assert isinstance(payload, list)
        entry = payload[0]
        assert entry["openDate"] == "2024-01-01"
        assert entry["lotSize"] == 1.0
        assert entry["auto"]["ipdaZone"] == "N/A"
        assert entry["auto"]["pl"] == 10.0

    def test_unicode_kept(self):
        text = dumps_trades([make_trade(pl=1.0, strategy="Café reversal")])

        assert "Café reversal" in text

    def test_sentiment_keys(self):
        payload = json.loads(dumps_trades([make_trade(sentiment=Sentiment(before=["Calm"]))]))

        assert payload[0]["sentiment"]["Before"] == ["Calm"]


class TestExportImport:
    """
    **Feature: trade-journal, Property: Export/import fidelity**

    Exported trades load back unchanged.
    """

    def test_file_round_trip(self, tmp_path):
        trades = [
            make_trade(pl=120.0, strategy="Breakout", custom_stats={"mood": ["calm"]}),
            make_trade(pl=-40.0, sentiment=Sentiment(during=["Fear"])),
        ]

        path = export_trades(trades, tmp_path / "out", "Main", date(2024, 3, 31))

        assert path.name == "Main_Trades_2024-03-31.json"
        assert load_trades(path) == trades

    def test_invalid_document(self):
        with pytest.raises(ValidationError):
            loads_trades('[{"id": "x"}]')
