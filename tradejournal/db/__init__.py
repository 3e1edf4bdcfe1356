"""SQLite persistence for journals and trades."""

from tradejournal.db.store import JournalStore

__all__ = ["JournalStore"]
