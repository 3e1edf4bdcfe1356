"""Property-based tests for the journal store.

**Feature: trade-journal**
"""

import tempfile
from datetime import date, time
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from trade_factories import make_trade
from tradejournal.db.store import JournalStore
from tradejournal.errors import JournalNotFoundError, TradeNotFoundError
from tradejournal.models import Score, TradeRecord


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield JournalStore(db_path)


def eurusd(trade_id: str, exit_price: float, day: int = 4) -> TradeRecord:
    return TradeRecord(
        id=trade_id,
        pair="EURUSD",
        direction="Buy",
        open_date=date(2024, 3, day),
        open_time=time(9, 0),
        close_date=date(2024, 3, day),
        close_time=time(10, 0),
        entry_price=1.1000,
        closing_price=exit_price,
        stop_loss=1.0950,
        lot_size=1.0,
    )


class TestDatabaseSchemaCompleteness:
    """
    **Feature: trade-journal, Property: Database Schema Completeness**

    *For any* fresh database, all required tables should exist.
    """

    def test_schema_completeness(self, temp_db: JournalStore):
        tables = temp_db.get_tables()

        for table in JournalStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"


class TestJournals:
    """Journal creation and lookup."""

    def test_create_and_get(self, temp_db: JournalStore):
        created = temp_db.create_journal("Main", 10000, "Funded", journal_id="main")

        journal = temp_db.get_journal("main")

        assert journal.id == created.id == "main"
        assert journal.type == "Funded"
        assert journal.balance == journal.peak_balance == 10000
        assert journal.capital == 10000
        assert journal.trades == []

    def test_explicit_capital(self, temp_db: JournalStore):
        journal = temp_db.create_journal("Prop", 500, capital=100000)

        assert journal.capital == 100000
        assert len(journal.id) == 32

    def test_list_journals(self, temp_db: JournalStore):
        temp_db.create_journal("A", 100, journal_id="a")
        temp_db.create_journal("B", 200, journal_id="b")

        assert {j.id for j in temp_db.list_journals()} == {"a", "b"}

    def test_missing_journal(self, temp_db: JournalStore):
        with pytest.raises(JournalNotFoundError):
            temp_db.get_journal("nope")
        with pytest.raises(JournalNotFoundError):
            temp_db.add_trade("nope", make_trade(pl=1.0))


class TestTradeBookkeeping:
    """
    **Feature: trade-journal, Property: Balance bookkeeping**

    Adding, updating, trashing and restoring trades keeps the balance equal
    to the deposit plus the P/L of the live trades.
    """

    def test_add_computes_metrics(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")

        stored = temp_db.add_trade("main", eurusd("w1", 1.1050), score=Score(value=75))

        assert stored.journal_id == "main"
        assert stored.auto.pl == pytest.approx(500.0)
        assert stored.auto.outcome == "Win"
        assert stored.auto.score.value == 75
        assert temp_db.get_journal("main").trades == [stored]

    def test_balance_peak_and_drawdown(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")

        temp_db.add_trade("main", eurusd("w1", 1.1050))
        temp_db.add_trade("main", eurusd("l1", 1.0980, day=5))

        journal = temp_db.get_journal("main")
        assert journal.balance == pytest.approx(10300.0)
        assert journal.peak_balance == pytest.approx(10500.0)
        assert journal.current_max_drawdown == pytest.approx(200.0)

    def test_update_shifts_balance(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")
        temp_db.add_trade("main", eurusd("w1", 1.1050))

        updated = temp_db.update_trade(eurusd("w1", 1.1020))

        assert updated.auto.pl == pytest.approx(200.0)
        assert temp_db.get_journal("main").balance == pytest.approx(10200.0)

    def test_trash_restore_purge(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")
        temp_db.add_trade("main", eurusd("w1", 1.1050))
        temp_db.add_trade("main", eurusd("w2", 1.1010, day=5))

        temp_db.trash_trade("w1")
        journal = temp_db.get_journal("main")
        assert [t.id for t in journal.trades] == ["w2"]
        assert journal.balance == pytest.approx(10100.0)
        assert [t.id for t in temp_db.get_trash("main")] == ["w1"]

        temp_db.restore_trade("w1")
        assert temp_db.get_journal("main").balance == pytest.approx(10600.0)
        assert temp_db.get_trash("main") == []

        temp_db.trash_trade("w2")
        assert temp_db.purge_trash("main") == 1
        assert [t.id for t in temp_db.get_trades("main", include_deleted=True)] == ["w1"]

    def test_trash_errors(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")
        temp_db.add_trade("main", eurusd("w1", 1.1050))

        with pytest.raises(TradeNotFoundError):
            temp_db.restore_trade("w1")
        temp_db.trash_trade("w1")
        with pytest.raises(TradeNotFoundError):
            temp_db.trash_trade("w1")
        with pytest.raises(TradeNotFoundError):
            temp_db.update_trade(eurusd("w1", 1.1000))
        with pytest.raises(TradeNotFoundError):
            temp_db.trash_trade("missing")

    def test_trades_chronological(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")
        for trade_id, day in (("c", 9), ("a", 4), ("b", 6)):
            temp_db.add_trade("main", eurusd(trade_id, 1.1010, day=day))

        assert [t.id for t in temp_db.get_trades("main")] == ["a", "b", "c"]

    def test_keep_metrics(self, temp_db: JournalStore):
        temp_db.create_journal("Main", 10000, journal_id="main")

        stored = temp_db.add_trade("main", make_trade(pl=-75.0), recompute=False)

        assert stored.auto.pl == -75.0
        assert temp_db.get_journal("main").balance == 9925.0

    @given(pls=st.lists(st.integers(min_value=-5000, max_value=5000), max_size=15))
    @settings(max_examples=25, deadline=None)
    def test_balance_tracks_live_trades(self, pls: list[int]):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = JournalStore(Path(tmpdir) / "test.db")
            store.create_journal("Main", 10000, journal_id="main")
            added = [
                store.add_trade("main", make_trade(pl=float(pl)), recompute=False)
                for pl in pls
            ]
            for trade in added[::2]:
                store.trash_trade(trade.id)

            journal = store.get_journal("main")
            live = sum(t.auto.pl for t in journal.trades)
            assert journal.balance == pytest.approx(10000 + live)
            assert journal.peak_balance >= journal.balance
            assert journal.current_max_drawdown >= journal.peak_balance - journal.balance - 1e-6
