"""CLI error handling helpers."""

from datetime import date
from decimal import Decimal
from typing import Any

import click

from gigbook.domain.errors import DomainError
from gigbook.domain.usecase import UseCaseResult
from gigbook.utils.amount_parser import parse_amount
from gigbook.utils.date_parser import parse_date


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError | str) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def unwrap_or_exit(ctx: click.Context, result: UseCaseResult) -> Any:
    """Return the data of a successful result, or print its error and exit."""
    if not result.success:
        handle_domain_error(ctx, result.error)
    return result.data


def parse_date_or_exit(ctx: click.Context, value: str | None) -> date | None:
    """Parse a CLI date option; None passes through."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        handle_domain_error(ctx, f"Invalid date format: {e}")


def parse_amount_or_exit(ctx: click.Context, value: str | None) -> Decimal | None:
    """Parse a CLI amount option; None passes through."""
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        handle_domain_error(ctx, f"Invalid amount format: {e}")
