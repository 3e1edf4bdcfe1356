"""CLI commands for TradeJournal.

This package provides the command-line interface: journal and trade
management, analytics reports and projections.
"""

from tradejournal.cli.main import cli, main

__all__ = ["cli", "main"]
