"""Backup, restore and CSV export commands."""

import json
from pathlib import Path

import click
from gigbook.cli.error_handling import handle_domain_error, unwrap_or_exit
from gigbook.domain.backup import ExportData, ExportTransactionsToCSV, ImportData


@click.group()
def data_group():
    """Back up, restore and export data."""
    pass


@data_group.command("export")
@click.argument("file_path", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_data(ctx, file_path: str):
    """Write a JSON backup of all events, transactions and settings."""
    storage = ctx.obj["storage"]
    backup = unwrap_or_exit(
        ctx, ExportData(storage.events, storage.transactions, storage.settings).execute()
    )
    Path(file_path).write_text(json.dumps(backup, ensure_ascii=False, indent=2), encoding="utf-8")
    click.echo(
        f"Exported {len(backup['events'])} event(s) and "
        f"{len(backup['transactions'])} transaction(s) to {file_path}"
    )


@data_group.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_data(ctx, file_path: str, yes: bool):
    """Replace all data with a JSON backup.

    Current events, transactions and settings are discarded.
    """
    storage = ctx.obj["storage"]
    if not yes and not click.confirm("This replaces ALL current data. Continue?"):
        click.echo("Import cancelled.")
        return

    try:
        payload = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        handle_domain_error(ctx, f"Could not read {file_path}: {e}")

    summary = unwrap_or_exit(
        ctx, ImportData(storage.events, storage.transactions, storage.settings).execute(payload)
    )
    click.echo(f"Imported {summary.events} event(s) and {summary.transactions} transaction(s)")


@data_group.command("csv")
@click.argument("file_path", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_csv(ctx, file_path: str):
    """Export every transaction as a semicolon-separated CSV file."""
    storage = ctx.obj["storage"]
    content = unwrap_or_exit(
        ctx, ExportTransactionsToCSV(storage.events, storage.transactions).execute()
    )
    # BOM so spreadsheet programs detect UTF-8
    Path(file_path).write_text(content, encoding="utf-8-sig")
    click.echo(f"Exported transactions to {file_path}")


def register_commands(cli):
    """Register data commands with main CLI."""
    cli.add_command(data_group, name="data")
