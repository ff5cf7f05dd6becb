"""Settings commands."""

import click
from gigbook.cli.error_handling import parse_amount_or_exit, unwrap_or_exit
from gigbook.domain.settings import GetSettings, UpdateSettings, UpdateSettingsInput
from gigbook.utils.formatters import format_currency


@click.group()
def settings_group():
    """View and change rates."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show the current rates."""
    storage = ctx.obj["storage"]
    settings = unwrap_or_exit(ctx, GetSettings(storage.settings).execute())

    click.echo(f"KM rate:               {format_currency(settings.rate_km)} / km")
    click.echo(f"Travel time rate:      {format_currency(settings.rate_travel_time)} / h")
    click.echo(f"Overtime rate:         {format_currency(settings.overtime_rate)} / h")
    click.echo(f"Standard daily rate:   {format_currency(settings.standard_daily_rate)}")
    click.echo(f"Hotel rate ceiling:    {format_currency(settings.max_hotel_rate)}")
    click.echo(f"Payment term:          {settings.default_reimbursement_days} days")


@settings_group.command("update")
@click.option("--rate-km", help="Price per kilometer")
@click.option("--rate-travel-time", help="Price per hour of travel")
@click.option("--overtime-rate", help="Price per overtime hour (also sets the travel time rate)")
@click.option("--daily-rate", help="Standard daily fee")
@click.option("--max-hotel-rate", help="Hotel rate ceiling")
@click.option("--payment-days", type=int, help="Days between report and payment")
@click.pass_context
def update_settings(
    ctx,
    rate_km: str | None,
    rate_travel_time: str | None,
    overtime_rate: str | None,
    daily_rate: str | None,
    max_hotel_rate: str | None,
    payment_days: int | None,
):
    """Change rates.

    Only the given options change. Transactions already recorded keep the
    amounts computed when they were added.

    Examples:
        gigbook settings update --rate-km 1.10
        gigbook settings update --overtime-rate 90 --payment-days 30
    """
    storage = ctx.obj["storage"]
    data = UpdateSettingsInput(
        rate_km=parse_amount_or_exit(ctx, rate_km),
        rate_travel_time=parse_amount_or_exit(ctx, rate_travel_time),
        overtime_rate=parse_amount_or_exit(ctx, overtime_rate),
        standard_daily_rate=parse_amount_or_exit(ctx, daily_rate),
        max_hotel_rate=parse_amount_or_exit(ctx, max_hotel_rate),
        default_reimbursement_days=payment_days,
    )
    unwrap_or_exit(ctx, UpdateSettings(storage.settings).execute(data))
    click.echo("Settings updated")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
