"""CLI helpers for company resolution."""

from __future__ import annotations

import click
from ledgerflow.domain.company import CompanyService


def resolve_company_or_exit(ctx: click.Context, company: str | int) -> int:
    """Resolve a company name or ID, or exit with a CLI error.

    Numeric values are tried as IDs first, then as names.
    """
    service = CompanyService(ctx.obj["db"])
    value = str(company).strip()

    if value.isdigit() and service.get_company(int(value)) is not None:
        return int(value)

    for candidate in service.list_companies():
        if candidate.name == value:
            return candidate.id

    click.echo(f"Error: Company '{value}' not found", err=True)
    ctx.exit(1)


def company_option(func):
    """Add the common --company option to a command."""
    return click.option(
        "--company",
        required=True,
        envvar="LEDGERFLOW_COMPANY",
        help="Company name or ID (or set LEDGERFLOW_COMPANY)",
    )(func)
