"""Event summary command."""

import click
from gigbook.cli.error_handling import unwrap_or_exit
from gigbook.domain.summary import GetEventSummary
from gigbook.utils.formatters import format_currency, format_date


def _row(label: str, value) -> str:
    return f"  {label:28s} {format_currency(value):>16s}"


@click.command("summary")
@click.argument("event_id")
@click.option("--details", is_flag=True, help="List the transactions of each group")
@click.pass_context
def summary(ctx, event_id: str, details: bool):
    """Show what an event cost and what it earned.

    Upfront cost is what you paid out of pocket (expenses and km driven).
    Net profit is what you actually earned (fees and travel time).

    Examples:
        gigbook summary event_123
        gigbook summary event_123 --details
    """
    storage = ctx.obj["storage"]
    use_case = GetEventSummary(storage.events, storage.transactions, storage.settings)
    result = unwrap_or_exit(ctx, use_case.execute(event_id))

    click.echo(f"\n{result.event_name} ({format_date(result.event_date)}) - {result.status.value}")
    click.echo("=" * 48)
    click.echo(_row("Expenses", result.total_expenses))
    click.echo(_row("KM driven", result.total_km_cost))
    click.echo(_row("Travel time", result.total_travel_time_cost))
    click.echo(_row("Fees", result.total_fees))
    if result.other_reimbursements:
        click.echo(_row("Other reimbursements", result.total_other_reimbursements))
    click.echo("-" * 48)
    click.echo(_row("Upfront cost", result.upfront_cost))
    click.echo(_row("Reimbursement", result.reimbursement_value))
    click.echo(_row("Net profit", result.net_profit))
    click.echo(_row("Total to receive", result.total_to_receive))
    click.echo("-" * 48)
    click.echo(
        f"  Receipts: {result.expenses_with_receipt} issued, "
        f"{result.expenses_without_receipt} missing"
    )
    click.echo(f"  Transactions: {result.transaction_count}")
    if result.expected_payment_date:
        click.echo(f"  Payment expected on {format_date(result.expected_payment_date)}")
    else:
        click.echo(f"  Expected receipt date: {format_date(result.expected_receipt_date)}")

    if details:
        groups = (
            ("Expenses", result.expenses),
            ("KM driven", result.km),
            ("Travel time", result.travel_time),
            ("Fees", result.fees),
            ("Other reimbursements", result.other_reimbursements),
        )
        for label, transactions in groups:
            if not transactions:
                continue
            click.echo(f"\n{label}:")
            for transaction in transactions:
                click.echo(
                    f"  {format_currency(transaction.amount):>14s}  {transaction.description}"
                )


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
