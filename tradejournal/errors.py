"""Exceptions raised by TradeJournal.

Analytics functions are total over their documented inputs and return
sentinel values instead of raising. Everything here signals a caller bug
or a missing record, never a data-quality problem.
"""


class TradeJournalError(Exception):
    """Base class for all TradeJournal errors."""


class UnknownCriterionError(TradeJournalError, KeyError):
    """A grouping criterion name has no registered resolver."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No resolver registered for criterion '{self.name}'"


class DuplicateCriterionError(TradeJournalError, ValueError):
    """A criterion name was registered twice without ``replace=True``."""


class JournalNotFoundError(TradeJournalError, LookupError):
    """No journal exists with the given id."""


class TradeNotFoundError(TradeJournalError, LookupError):
    """No trade exists with the given id."""


class SimulationCancelled(TradeJournalError):
    """A long-running simulation was cancelled through its token."""
