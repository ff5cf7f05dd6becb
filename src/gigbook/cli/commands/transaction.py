"""Transaction management commands."""

import click
from gigbook.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    unwrap_or_exit,
)
from gigbook.domain.settings import GetSettings
from gigbook.domain.transaction import (
    AddTransaction,
    AddTransactionInput,
    DeleteTransaction,
    ListTransactions,
    MarkReceiptIssued,
    UpdateTransaction,
    UpdateTransactionInput,
)
from gigbook.utils.formatters import format_currency, format_date

FEE_DESCRIPTIONS = {
    "diaria": "Diária Técnica",
    "hora_extra": "Hora Extra",
    "other": "Honorário",
}


def format_transaction_line(transaction) -> str:
    kind = transaction.category or transaction.type.value.lower()
    flags = ""
    if transaction.is_expense():
        flags = " [NF]" if transaction.has_receipt else " [sem NF]"
    return (
        f"{transaction.id} | {format_date(transaction.created_at)} | {kind:12s} | "
        f"{format_currency(transaction.amount):>14s} | {transaction.description}{flags}"
    )


def _add(ctx, data: AddTransactionInput):
    storage = ctx.obj["storage"]
    use_case = AddTransaction(storage.transactions, storage.events, storage.settings)
    transaction = unwrap_or_exit(ctx, use_case.execute(data))
    click.echo(
        f"Added '{transaction.description}' of {format_currency(transaction.amount)} "
        f"(ID: {transaction.id})"
    )
    return transaction


@click.group()
def transaction_group():
    """Manage the transactions of an event."""
    pass


@transaction_group.command("add-expense")
@click.argument("event_id")
@click.argument("description")
@click.option("--amount", required=True, help="Amount paid (e.g., 150.00 or 'R$ 1.234,56')")
@click.option("--receipt", is_flag=True, help="A receipt (nota fiscal) was issued")
@click.option("--accommodation", is_flag=True, help="Mark as a hotel expense")
@click.option("--check-in", help="Hotel check-in date (with --accommodation)")
@click.option("--check-out", help="Hotel check-out date (with --accommodation)")
@click.pass_context
def add_expense(
    ctx,
    event_id: str,
    description: str,
    amount: str,
    receipt: bool,
    accommodation: bool,
    check_in: str | None,
    check_out: str | None,
):
    """Add an expense advanced for the event (reimbursed by the client).

    Examples:
        gigbook transaction add-expense event_123 "Material de escritório" --amount 150
        gigbook transaction add-expense event_123 "Hotel Central" --amount "R$ 560,00" \\
            --accommodation --check-in 2024-05-09 --check-out 2024-05-11 --receipt
    """
    if (check_in or check_out) and not accommodation:
        handle_domain_error(ctx, "--check-in/--check-out require --accommodation")

    _add(
        ctx,
        AddTransactionInput(
            event_id=event_id,
            type="EXPENSE",
            description=description,
            amount=parse_amount_or_exit(ctx, amount),
            category="accommodation" if accommodation else None,
            has_receipt=receipt,
            check_in=parse_date_or_exit(ctx, check_in),
            check_out=parse_date_or_exit(ctx, check_out),
        ),
    )


@transaction_group.command("add-fee")
@click.argument("event_id")
@click.option(
    "--kind",
    type=click.Choice(["diaria", "hora_extra", "other"]),
    default="diaria",
    show_default=True,
    help="Kind of fee",
)
@click.option("--amount", help="Fee amount (daily fee defaults to the standard daily rate)")
@click.option("--hours", type=float, help="Overtime hours (hora_extra)")
@click.option("--description", help="Description (defaults to the kind of fee)")
@click.option(
    "--reimbursement",
    is_flag=True,
    help="Count an uncategorized income as reimbursement instead of fee",
)
@click.pass_context
def add_fee(
    ctx,
    event_id: str,
    kind: str,
    amount: str | None,
    hours: float | None,
    description: str | None,
    reimbursement: bool,
):
    """Add a fee (honorário) earned on the event.

    Overtime given only in hours is priced at the overtime rate.

    Examples:
        gigbook transaction add-fee event_123
        gigbook transaction add-fee event_123 --kind hora_extra --hours 2.5
        gigbook transaction add-fee event_123 --kind other --amount 200 --description "Bônus"
    """
    storage = ctx.obj["storage"]
    fee_amount = parse_amount_or_exit(ctx, amount)
    if fee_amount is None and kind in ("diaria", "hora_extra"):
        settings = unwrap_or_exit(ctx, GetSettings(storage.settings).execute())
        if kind == "diaria":
            fee_amount = settings.standard_daily_rate
        elif hours is not None:
            try:
                fee_amount = settings.calculate_travel_time_value(hours)
            except ValueError as e:
                handle_domain_error(ctx, e)

    _add(
        ctx,
        AddTransactionInput(
            event_id=event_id,
            type="INCOME",
            description=description or FEE_DESCRIPTIONS[kind],
            amount=fee_amount,
            category=None if kind == "other" else kind,
            hours=hours if kind == "hora_extra" else None,
            is_reimbursement=reimbursement,
        ),
    )


@transaction_group.command("add-km")
@click.argument("event_id")
@click.option("--distance", type=float, required=True, help="Kilometers driven")
@click.option("--origin", help="Where the trip started")
@click.option("--destination", help="Where the trip ended")
@click.option("--description", default="Deslocamento", show_default=True, help="Description")
@click.pass_context
def add_km(
    ctx,
    event_id: str,
    distance: float,
    origin: str | None,
    destination: str | None,
    description: str,
):
    """Add kilometers driven, priced at the current km rate.

    Examples:
        gigbook transaction add-km event_123 --distance 100 --origin Recife --destination Caruaru
    """
    _add(
        ctx,
        AddTransactionInput(
            event_id=event_id,
            type="INCOME",
            description=description,
            category="km",
            distance=distance,
            origin=origin,
            destination=destination,
        ),
    )


@transaction_group.command("add-travel-time")
@click.argument("event_id")
@click.option("--hours", required=True, help="Hours spent travelling")
@click.option("--description", default="Tempo de viagem", show_default=True, help="Description")
@click.pass_context
def add_travel_time(ctx, event_id: str, hours: str, description: str):
    """Add travel time, priced at the current overtime rate.

    Examples:
        gigbook transaction add-travel-time event_123 --hours 3
    """
    _add(
        ctx,
        AddTransactionInput(
            event_id=event_id,
            type="INCOME",
            description=description,
            category="tempo_viagem",
            hours=hours.replace(",", "."),
        ),
    )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--description", help="New description")
@click.option("--amount", help="New amount")
@click.option("--receipt/--no-receipt", default=None, help="Set whether a receipt was issued")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    description: str | None,
    amount: str | None,
    receipt: bool | None,
):
    """Update a transaction.

    Updates only the fields that are provided. Transactions of PAID events
    cannot be changed.

    Examples:
        gigbook transaction update expense_123 --amount 175.50
        gigbook transaction update expense_123 --no-receipt
    """
    storage = ctx.obj["storage"]
    data = UpdateTransactionInput(
        description=description,
        amount=parse_amount_or_exit(ctx, amount),
        metadata={"hasReceipt": receipt} if receipt is not None else None,
    )
    transaction = unwrap_or_exit(
        ctx,
        UpdateTransaction(storage.transactions, storage.events).execute(transaction_id, data),
    )
    click.echo(f"Updated transaction {transaction.id}")


@transaction_group.command("receipt")
@click.argument("transaction_id")
@click.pass_context
def mark_receipt(ctx, transaction_id: str):
    """Mark that the receipt (nota fiscal) of an expense was issued."""
    storage = ctx.obj["storage"]
    transaction = unwrap_or_exit(
        ctx,
        MarkReceiptIssued(storage.transactions, storage.events).execute(transaction_id),
    )
    click.echo(f"Receipt registered for '{transaction.description}'")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool):
    """Delete a transaction."""
    storage = ctx.obj["storage"]
    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {transaction_id}?"
    ):
        click.echo("Deletion cancelled.")
        return

    unwrap_or_exit(
        ctx, DeleteTransaction(storage.transactions, storage.events).execute(transaction_id)
    )
    click.echo(f"Deleted transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--event", "event_id", help="Show only transactions of this event")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(["EXPENSE", "INCOME"], case_sensitive=False),
    help="Show only expenses or income",
)
@click.pass_context
def list_transactions(ctx, event_id: str | None, transaction_type: str | None):
    """List transactions, oldest first."""
    storage = ctx.obj["storage"]
    transactions = unwrap_or_exit(
        ctx,
        ListTransactions(storage.transactions).execute(event_id=event_id, type=transaction_type),
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo("\nTransactions:")
    click.echo("-" * 100)
    for transaction in transactions:
        click.echo(format_transaction_line(transaction))
    total = sum(t.amount for t in transactions)
    click.echo("-" * 100)
    click.echo(f"Total: {format_currency(total)} ({len(transactions)} transaction(s))")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
