"""Main CLI entry point."""

import click
from gigbook.database.factories import create_sqlite_storage
from gigbook.utils.logger import configure_logging, resolve_level

# Import and register all commands at module level
from gigbook.cli.commands import (
    event,
    transaction,
    summary,
    report,
    settings,
    data,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides GIGBOOK_DB_PATH environment variable)",
    envvar="GIGBOOK_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Gigbook - Bookkeeping for freelance events.

    Track the expenses, fees and travel of each event, follow it from
    planning to payment and produce reports for client invoicing.
    """
    ctx.ensure_object(dict)
    configure_logging(resolve_level(verbose))

    # Open storage only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "storage" not in ctx.obj:
        storage = create_sqlite_storage(database_path=db_path)
        ctx.obj["storage"] = storage
        ctx.call_on_close(storage.close)


# Register all commands
event.register_commands(cli)
transaction.register_commands(cli)
summary.register_commands(cli)
report.register_commands(cli)
settings.register_commands(cli)
data.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
