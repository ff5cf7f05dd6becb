"""Event management commands."""

import click
from gigbook.cli.error_handling import parse_date_or_exit, unwrap_or_exit
from gigbook.domain.event import (
    CreateEvent,
    CreateEventInput,
    DeleteEvent,
    GetEvent,
    ListEvents,
    UpdateEvent,
    UpdateEventInput,
    UpdateEventStatus,
)
from gigbook.domain.transaction import AddTransaction
from gigbook.utils.formatters import format_date

STATUS_LABELS = {
    "PLANNED": "Planejado",
    "DONE": "Realizado",
    "REPORT_SENT": "Relatório enviado",
    "PAID": "Pago",
    "CANCELLED": "Cancelado",
}


def format_event_line(event) -> str:
    return f"{event.id} | {format_date(event.date)} | {event.status.value:11s} | {event.name}"


@click.group()
def event_group():
    """Manage events."""
    pass


@event_group.command("create")
@click.argument("name")
@click.option(
    "--date",
    "event_date",
    required=True,
    help="Event date (YYYY-MM-DD, DD/MM/YYYY or relative like 'today', 'tomorrow')",
)
@click.option("--description", default="", help="Event description")
@click.option("--client", default="", help="Client name")
@click.option("--city", default="", help="City where the event takes place")
@click.option("--start-date", help="First day of work (defaults to the event date)")
@click.option("--end-date", help="Last day of work")
@click.option(
    "--with-daily",
    is_flag=True,
    help="Also add the standard daily fee from settings",
)
@click.pass_context
def create_event(
    ctx,
    name: str,
    event_date: str,
    description: str,
    client: str,
    city: str,
    start_date: str | None,
    end_date: str | None,
    with_daily: bool,
):
    """Create a new event in status PLANNED.

    Examples:
        gigbook event create "Congresso Médico" --date 2024-05-10 --client "Acme" --city "Recife"
        gigbook event create "Feira de Negócios" --date 10/05/2024 --with-daily
    """
    storage = ctx.obj["storage"]
    use_case = CreateEvent(
        storage.events,
        add_transaction=AddTransaction(storage.transactions, storage.events, storage.settings),
        settings_repository=storage.settings,
    )

    data = CreateEventInput(
        name=name,
        date=parse_date_or_exit(ctx, event_date),
        description=description,
        client=client,
        city=city,
        start_date=parse_date_or_exit(ctx, start_date),
        end_date=parse_date_or_exit(ctx, end_date),
        auto_create_daily=with_daily,
    )
    event = unwrap_or_exit(ctx, use_case.execute(data))
    click.echo(f"Created event '{event.name}' (ID: {event.id})")
    if with_daily:
        daily = storage.transactions.find_by_event_id(event.id)
        if daily:
            click.echo(f"Added daily fee '{daily[0].description}'")
        else:
            click.echo("Warning: could not add the daily fee", err=True)


@event_group.command("list")
@click.option(
    "--status",
    type=click.Choice(list(STATUS_LABELS), case_sensitive=False),
    help="Show only events in this status",
)
@click.option("--all", "include_cancelled", is_flag=True, help="Include cancelled events")
@click.option(
    "--order-by",
    type=click.Choice(["date", "name", "created_at"]),
    default="date",
    show_default=True,
    help="Sort field",
)
@click.option("--ascending", is_flag=True, help="Sort oldest/A-Z first")
@click.pass_context
def list_events(ctx, status: str | None, include_cancelled: bool, order_by: str, ascending: bool):
    """List events, newest first."""
    storage = ctx.obj["storage"]
    events = unwrap_or_exit(
        ctx,
        ListEvents(storage.events).execute(
            status=status,
            include_cancelled=include_cancelled,
            order_by=order_by,
            descending=not ascending,
        ),
    )
    if not events:
        click.echo("No events found.")
        return

    click.echo("\nEvents:")
    click.echo("-" * 80)
    for event in events:
        click.echo(format_event_line(event))


@event_group.command("show")
@click.argument("event_id")
@click.pass_context
def show_event(ctx, event_id: str):
    """Show the details of an event."""
    storage = ctx.obj["storage"]
    event = unwrap_or_exit(ctx, GetEvent(storage.events).execute(event_id))

    click.echo(f"ID:          {event.id}")
    click.echo(f"Name:        {event.name}")
    click.echo(f"Date:        {format_date(event.date)}")
    click.echo(f"Status:      {event.status.value} ({STATUS_LABELS[event.status.value]})")
    if event.client:
        click.echo(f"Client:      {event.client}")
    if event.city:
        click.echo(f"City:        {event.city}")
    period = format_date(event.start_date)
    if event.end_date:
        period += f" - {format_date(event.end_date)}"
    click.echo(f"Period:      {period}")
    if event.description:
        click.echo(f"Description: {event.description}")
    if event.expected_payment_date:
        click.echo(f"Payment due: {format_date(event.expected_payment_date)}")


@event_group.command("update")
@click.argument("event_id")
@click.option("--name", help="New event name")
@click.option("--date", "event_date", help="New event date")
@click.option("--description", help="New description")
@click.option("--client", help="New client name")
@click.option("--city", help="New city")
@click.option("--start-date", help="New first day of work")
@click.option("--end-date", help="New last day of work")
@click.option("--clear-end-date", is_flag=True, help="Remove the last day of work")
@click.pass_context
def update_event(
    ctx,
    event_id: str,
    name: str | None,
    event_date: str | None,
    description: str | None,
    client: str | None,
    city: str | None,
    start_date: str | None,
    end_date: str | None,
    clear_end_date: bool,
):
    """Update event details.

    Only PLANNED or DONE events can be edited. Updates only the fields that
    are provided.

    Examples:
        gigbook event update event_123 --name "Congresso de Cardiologia"
        gigbook event update event_123 --date 2024-05-12 --city "Olinda"
    """
    storage = ctx.obj["storage"]
    data = UpdateEventInput(
        name=name,
        date=parse_date_or_exit(ctx, event_date),
        description=description,
        client=client,
        city=city,
        start_date=parse_date_or_exit(ctx, start_date),
        end_date=parse_date_or_exit(ctx, end_date),
        clear_end_date=clear_end_date,
    )
    event = unwrap_or_exit(ctx, UpdateEvent(storage.events).execute(event_id, data))
    click.echo(f"Updated event '{event.name}'")


@event_group.command("status")
@click.argument("event_id")
@click.argument(
    "new_status",
    type=click.Choice(["PLANNED", "DONE", "REPORT_SENT", "PAID"], case_sensitive=False),
)
@click.option(
    "--sent-date",
    help="Date the report was sent (REPORT_SENT only, defaults to today)",
)
@click.pass_context
def change_status(ctx, event_id: str, new_status: str, sent_date: str | None):
    """Move an event to the next status.

    The workflow is PLANNED -> DONE -> REPORT_SENT -> PAID. Marking the
    report as sent schedules the expected payment date.

    Examples:
        gigbook event status event_123 DONE
        gigbook event status event_123 REPORT_SENT --sent-date 2024-05-15
    """
    storage = ctx.obj["storage"]
    use_case = UpdateEventStatus(storage.events, storage.transactions, storage.settings)
    event = unwrap_or_exit(
        ctx,
        use_case.execute(event_id, new_status, report_sent_date=parse_date_or_exit(ctx, sent_date)),
    )
    click.echo(f"Event '{event.name}' is now {event.status.value}")
    if event.expected_payment_date:
        click.echo(f"Expected payment: {format_date(event.expected_payment_date)}")


@event_group.command("delete")
@click.argument("event_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_event(ctx, event_id: str, yes: bool):
    """Delete a PLANNED event and its transactions."""
    storage = ctx.obj["storage"]
    event = unwrap_or_exit(ctx, GetEvent(storage.events).execute(event_id))

    if not yes and not click.confirm(f"Are you sure you want to delete event '{event.name}'?"):
        click.echo("Deletion cancelled.")
        return

    outcome = unwrap_or_exit(
        ctx, DeleteEvent(storage.events, storage.transactions).execute(event_id)
    )
    click.echo(
        f"Deleted event '{event.name}' and {len(outcome.deleted_transactions)} transaction(s)"
    )
    for transaction_id, error in outcome.failed_transactions:
        click.echo(f"Warning: could not delete transaction {transaction_id}: {error}", err=True)


def register_commands(cli):
    """Register event commands with main CLI."""
    cli.add_command(event_group, name="event")
