"""CLI helpers for date parsing and ranges."""

from datetime import date

import click

from ledgerflow.utils.date_parser import parse_date, tax_year_range


def parse_date_or_exit(ctx, value: str | None, label: str = "date") -> date | None:
    """Parse an optional date option, exiting with a CLI error when invalid."""
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    tax_year: int | None = None,
) -> tuple[date | None, date | None]:
    """Resolve a date range from a tax year or explicit dates."""
    if tax_year is not None and (start_date or end_date):
        click.echo(
            "Error: --tax-year cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if tax_year is not None:
        return tax_year_range(tax_year)

    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")

    if start and end and start > end:
        click.echo("Error: Start date must be on or before end date.", err=True)
        ctx.exit(1)

    return (start, end)
