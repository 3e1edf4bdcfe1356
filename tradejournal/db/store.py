"""SQLite journal store for TradeJournal."""

import json
import logging
import sqlite3
import uuid
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Optional

from tradejournal.analytics.pairs import DEFAULT_PAIRS
from tradejournal.analytics.trade_metrics import with_auto
from tradejournal.errors import JournalNotFoundError, TradeNotFoundError
from tradejournal.models import Journal, PairConfig, Score, TradeRecord

logger = logging.getLogger(__name__)


class JournalStore:
    """SQLite-based store for journals and their trades.

    Trades are kept as JSON payloads. Deleting a trade moves it to the
    trash (``deleted_at`` set) until the trash is purged.
    """

    REQUIRED_TABLES = ["journals", "trades"]

    def __init__(self, db_path: Path):
        """Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS journals (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    type TEXT NOT NULL,
                    initial_deposit REAL NOT NULL,
                    capital REAL NOT NULL,
                    balance REAL NOT NULL,
                    peak_balance REAL NOT NULL,
                    current_max_drawdown REAL NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS trades (
                    id TEXT PRIMARY KEY,
                    journal_id TEXT NOT NULL REFERENCES journals(id),
                    opened_at TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    deleted_at TEXT
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_trades_journal ON trades(journal_id, opened_at)"
            )
            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    # ==================== Journals ====================

    def create_journal(
        self,
        title: str,
        initial_deposit: float,
        journal_type: str = "Real",
        capital: Optional[float] = None,
        journal_id: Optional[str] = None,
    ) -> Journal:
        """Create a journal whose balance starts at the initial deposit.

        Args:
            title: Display name.
            initial_deposit: Starting balance.
            journal_type: Account type (Real, Demo, Funded, ...).
            capital: Capital for risk sizing; defaults to the deposit.
            journal_id: Explicit id; a random one is generated otherwise.

        Returns:
            The created journal.
        """
        journal = Journal(
            id=journal_id or uuid.uuid4().hex,
            title=title,
            type=journal_type,
            initial_deposit=initial_deposit,
            capital=initial_deposit if capital is None else capital,
            balance=initial_deposit,
            peak_balance=initial_deposit,
        )
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO journals
                (id, title, type, initial_deposit, capital, balance, peak_balance,
                 current_max_drawdown, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    journal.id,
                    journal.title,
                    journal.type,
                    journal.initial_deposit,
                    journal.capital,
                    journal.balance,
                    journal.peak_balance,
                    journal.current_max_drawdown,
                    journal.created_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Created journal %s", journal.id)
        return journal

    def _row_to_journal(self, row: sqlite3.Row, trades: list[TradeRecord]) -> Journal:
        return Journal(
            id=row["id"],
            title=row["title"],
            type=row["type"],
            initial_deposit=row["initial_deposit"],
            capital=row["capital"],
            balance=row["balance"],
            peak_balance=row["peak_balance"],
            current_max_drawdown=row["current_max_drawdown"],
            created_at=datetime.fromisoformat(row["created_at"]),
            trades=trades,
        )

    def _fetch_journal_row(self, conn: sqlite3.Connection, journal_id: str) -> sqlite3.Row:
        row = conn.execute("SELECT * FROM journals WHERE id = ?", (journal_id,)).fetchone()
        if row is None:
            raise JournalNotFoundError(f"Journal '{journal_id}' not found")
        return row

    def get_journal(self, journal_id: str, include_trades: bool = True) -> Journal:
        """Get a journal, with its live trades in chronological order.

        Raises:
            JournalNotFoundError: If no journal has this id.
        """
        conn = self._get_connection()
        try:
            row = self._fetch_journal_row(conn, journal_id)
        finally:
            conn.close()
        trades = self.get_trades(journal_id) if include_trades else []
        return self._row_to_journal(row, trades)

    def list_journals(self) -> list[Journal]:
        """All journals without their trades, oldest first."""
        conn = self._get_connection()
        try:
            rows = conn.execute("SELECT * FROM journals ORDER BY created_at").fetchall()
            return [self._row_to_journal(row, []) for row in rows]
        finally:
            conn.close()

    def _apply_pl(self, conn: sqlite3.Connection, journal_id: str, delta: float) -> None:
        """Move the balance by ``delta`` and update peak and max drawdown."""
        row = self._fetch_journal_row(conn, journal_id)
        balance = row["balance"] + delta
        peak = max(row["peak_balance"], balance)
        max_drawdown = max(row["current_max_drawdown"], peak - balance)
        conn.execute(
            """
            UPDATE journals SET balance = ?, peak_balance = ?, current_max_drawdown = ?
            WHERE id = ?
            """,
            (balance, peak, max_drawdown, journal_id),
        )

    # ==================== Trades ====================

    def _prepare(
        self,
        journal: Journal,
        trade: TradeRecord,
        pair_configs: Optional[Mapping[str, PairConfig]],
        score: Optional[Score],
        recompute: bool,
    ) -> TradeRecord:
        trade = trade.model_copy(update={"journal_id": journal.id})
        if not recompute:
            return trade
        return with_auto(
            trade,
            pair_configs if pair_configs is not None else DEFAULT_PAIRS,
            journal.capital,
            journal.type,
            score,
        )

    def _get_trade_row(self, conn: sqlite3.Connection, trade_id: str) -> sqlite3.Row:
        row = conn.execute("SELECT * FROM trades WHERE id = ?", (trade_id,)).fetchone()
        if row is None:
            raise TradeNotFoundError(f"Trade '{trade_id}' not found")
        return row

    def add_trade(
        self,
        journal_id: str,
        trade: TradeRecord,
        pair_configs: Optional[Mapping[str, PairConfig]] = None,
        score: Optional[Score] = None,
        recompute: bool = True,
    ) -> TradeRecord:
        """Save a new trade and update the journal's balance bookkeeping.

        Args:
            journal_id: Owning journal.
            trade: Trade to save.
            pair_configs: Pair data for computing ``auto``; built-ins if omitted.
            score: Discipline score to attach.
            recompute: Recompute ``auto`` from the raw fields. Pass False to
                keep the trade's existing metrics (e.g. when importing).

        Returns:
            The stored trade.

        Raises:
            JournalNotFoundError: If the journal does not exist.
        """
        journal = self.get_journal(journal_id, include_trades=False)
        stored = self._prepare(journal, trade, pair_configs, score, recompute)
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO trades (id, journal_id, opened_at, payload) VALUES (?, ?, ?, ?)",
                (
                    stored.id,
                    journal_id,
                    stored.opened_at.isoformat(),
                    stored.model_dump_json(by_alias=True),
                ),
            )
            self._apply_pl(conn, journal_id, stored.auto.pl)
            conn.commit()
        finally:
            conn.close()
        logger.debug("Added trade %s to %s (pl %.2f)", stored.id, journal_id, stored.auto.pl)
        return stored

    def update_trade(
        self,
        trade: TradeRecord,
        pair_configs: Optional[Mapping[str, PairConfig]] = None,
        score: Optional[Score] = None,
        recompute: bool = True,
    ) -> TradeRecord:
        """Replace a live trade, recomputing ``auto`` and shifting the balance.

        Raises:
            TradeNotFoundError: If the trade does not exist or is in the trash.
        """
        conn = self._get_connection()
        try:
            row = self._get_trade_row(conn, trade.id)
        finally:
            conn.close()
        if row["deleted_at"] is not None:
            raise TradeNotFoundError(f"Trade '{trade.id}' is in the trash")

        old = TradeRecord.model_validate_json(row["payload"])
        journal = self.get_journal(row["journal_id"], include_trades=False)
        stored = self._prepare(journal, trade, pair_configs, score, recompute)

        conn = self._get_connection()
        try:
            conn.execute(
                "UPDATE trades SET opened_at = ?, payload = ? WHERE id = ?",
                (stored.opened_at.isoformat(), stored.model_dump_json(by_alias=True), stored.id),
            )
            self._apply_pl(conn, journal.id, stored.auto.pl - old.auto.pl)
            conn.commit()
        finally:
            conn.close()
        return stored

    def trash_trade(self, trade_id: str) -> TradeRecord:
        """Soft-delete a trade and reverse its P/L from the balance.

        Raises:
            TradeNotFoundError: If the trade does not exist or is already trashed.
        """
        conn = self._get_connection()
        try:
            row = self._get_trade_row(conn, trade_id)
            if row["deleted_at"] is not None:
                raise TradeNotFoundError(f"Trade '{trade_id}' is already in the trash")
            trade = TradeRecord.model_validate_json(row["payload"])
            conn.execute(
                "UPDATE trades SET deleted_at = ? WHERE id = ?",
                (datetime.now().isoformat(), trade_id),
            )
            self._apply_pl(conn, row["journal_id"], -trade.auto.pl)
            conn.commit()
            return trade
        finally:
            conn.close()

    def restore_trade(self, trade_id: str) -> TradeRecord:
        """Move a trade back out of the trash and re-apply its P/L.

        Raises:
            TradeNotFoundError: If the trade is not in the trash.
        """
        conn = self._get_connection()
        try:
            row = self._get_trade_row(conn, trade_id)
            if row["deleted_at"] is None:
                raise TradeNotFoundError(f"Trade '{trade_id}' is not in the trash")
            trade = TradeRecord.model_validate_json(row["payload"])
            conn.execute("UPDATE trades SET deleted_at = NULL WHERE id = ?", (trade_id,))
            self._apply_pl(conn, row["journal_id"], trade.auto.pl)
            conn.commit()
            return trade
        finally:
            conn.close()

    def get_trash(self, journal_id: Optional[str] = None) -> list[TradeRecord]:
        """Trashed trades, most recently deleted first."""
        query = "SELECT payload FROM trades WHERE deleted_at IS NOT NULL"
        params: list = []
        if journal_id:
            query += " AND journal_id = ?"
            params.append(journal_id)
        query += " ORDER BY deleted_at DESC"

        conn = self._get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
            return [TradeRecord.model_validate_json(row["payload"]) for row in rows]
        finally:
            conn.close()

    def purge_trash(self, journal_id: Optional[str] = None) -> int:
        """Permanently delete trashed trades. Returns the number removed."""
        query = "DELETE FROM trades WHERE deleted_at IS NOT NULL"
        params: list = []
        if journal_id:
            query += " AND journal_id = ?"
            params.append(journal_id)

        conn = self._get_connection()
        try:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def get_trades(self, journal_id: str, include_deleted: bool = False) -> list[TradeRecord]:
        """Trades of a journal in chronological order of opening."""
        query = "SELECT payload FROM trades WHERE journal_id = ?"
        if not include_deleted:
            query += " AND deleted_at IS NULL"
        query += " ORDER BY opened_at, rowid"

        conn = self._get_connection()
        try:
            rows = conn.execute(query, (journal_id,)).fetchall()
            return [TradeRecord.model_validate_json(row["payload"]) for row in rows]
        finally:
            conn.close()
