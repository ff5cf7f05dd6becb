"""Report commands."""

from datetime import date

import click
from gigbook.cli.error_handling import unwrap_or_exit
from gigbook.domain.report import GenerateEventReport, GenerateMonthlyReport
from gigbook.utils.formatters import format_currency, format_date, format_hours


def _echo_section(title: str, section, with_event: bool = False) -> None:
    click.echo(f"\n{title}")
    click.echo("-" * 80)
    if not section.lines:
        click.echo("  (none)")
    for line in section.lines:
        label = f"[{line.category_label}] " if line.category_label else ""
        prefix = f"{format_date(line.event_date)} {line.event_name} - " if with_event else ""
        suffix = ""
        if line.origin and line.destination:
            suffix = f" ({line.distance} km)"
        if line.has_receipt is not None:
            suffix = " [NF]" if line.has_receipt else " [sem NF]"
        click.echo(
            f"  {format_currency(line.amount):>14s}  {prefix}{label}{line.description}{suffix}"
        )
    click.echo(f"  {'Subtotal':>14s}  {format_currency(section.total)}")


@click.group()
def report_group():
    """Generate reports for invoicing."""
    pass


@report_group.command("event")
@click.argument("event_id")
@click.pass_context
def event_report(ctx, event_id: str):
    """Itemized report of one event."""
    storage = ctx.obj["storage"]
    report = unwrap_or_exit(
        ctx, GenerateEventReport(storage.events, storage.transactions).execute(event_id)
    )

    click.echo(f"Relatório: {report.event_name}")
    click.echo(f"Data: {format_date(report.event_date)}")
    if report.client:
        click.echo(f"Cliente: {report.client}")
    if report.city:
        click.echo(f"Cidade: {report.city}")
    _echo_section("1. Serviços Prestados", report.services)
    _echo_section("2. Despesas", report.expenses)
    _echo_section("3. Deslocamentos", report.travel)
    click.echo("=" * 80)
    click.echo(f"  {'Total':>14s}  {format_currency(report.grand_total)}")


@report_group.command("monthly")
@click.option("--month", type=int, help="Month number (defaults to the current month)")
@click.option("--year", type=int, help="Year (defaults to the current year)")
@click.pass_context
def monthly_report(ctx, month: int | None, year: int | None):
    """Consolidated report of every event in a month.

    Examples:
        gigbook report monthly
        gigbook report monthly --month 5 --year 2024
    """
    storage = ctx.obj["storage"]
    today = date.today()
    use_case = GenerateMonthlyReport(storage.events, storage.transactions, storage.settings)
    report = unwrap_or_exit(
        ctx,
        use_case.execute(month if month is not None else today.month, year or today.year),
    )

    click.echo(f"Relatório Mensal - {report.period}")
    click.echo(f"Prazo de pagamento: {report.payment_days} dias")
    if not report.events:
        click.echo("\nNo events in this month.")
        return

    click.echo("\nEventos")
    click.echo("-" * 80)
    for item in report.events:
        click.echo(
            f"  {format_date(item.event_date)}  {item.event_name}  "
            f"(hora extra: {format_hours(item.overtime_hours)}, "
            f"viagem: {format_hours(item.travel_hours)})"
        )
    _echo_section("1. Serviços Prestados", report.services, with_event=True)
    _echo_section("2. Despesas", report.expenses, with_event=True)
    _echo_section("3. Deslocamentos", report.travel, with_event=True)
    click.echo("=" * 80)
    click.echo(f"  {'Total':>14s}  {format_currency(report.grand_total)}")
    click.echo(
        f"  Horas extras: {format_hours(report.total_overtime_hours)}  "
        f"Horas de viagem: {format_hours(report.total_travel_hours)}"
    )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
