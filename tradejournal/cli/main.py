"""Main CLI entry point for TradeJournal.

Sub-commands live in their own modules and are imported only when
invoked, so ``tradejournal --help`` stays fast.
"""

import importlib
import logging

import click
from rich.console import Console
from rich.logging import RichHandler


class LazyGroup(click.Group):
    """A click Group resolving ``"package.module:attribute"`` entries on demand."""

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self._lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = self.commands.get(cmd_name)
        if command is None and cmd_name in self._lazy_subcommands:
            command = self._import_command(cmd_name)
            self.add_command(command, cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        target = self._lazy_subcommands[cmd_name]
        module_path, _, attr_name = target.partition(":")
        command = getattr(importlib.import_module(module_path), attr_name or cmd_name, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(f"{target} is not a click command")
        return command


LAZY_SUBCOMMANDS = {
    # Journals and trades
    "journals": "tradejournal.cli.journal:journals",
    "add": "tradejournal.cli.journal:add",
    "trades": "tradejournal.cli.journal:trades",
    "trash": "tradejournal.cli.journal:trash",
    "export": "tradejournal.cli.journal:export",
    "import": "tradejournal.cli.journal:import_trades",
    # Analytics
    "stats": "tradejournal.cli.stats:stats",
    "pivot": "tradejournal.cli.stats:pivot",
    "equity": "tradejournal.cli.stats:equity",
    "drawdown": "tradejournal.cli.stats:drawdown",
    "streaks": "tradejournal.cli.stats:streaks",
    "income": "tradejournal.cli.stats:income",
    # Projections
    "simulate": "tradejournal.cli.simulate:simulate",
    "compound": "tradejournal.cli.simulate:compound",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def setup_logging(verbose: bool) -> None:
    """Route log records through rich; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradejournal")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """TradeJournal - trading journal analytics from the command line.

    Log trades into journals, then slice their performance by any
    criterion, follow equity and drawdown, and project income.

    \b
    Quick Start:
      tradejournal journals --create "Main" --deposit 10000
      tradejournal add --pair EURUSD --direction Buy ...
      tradejournal stats
      tradejournal pivot --by "Day of Week" --by Session
    """
    ctx.ensure_object(dict)
    setup_logging(verbose)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
