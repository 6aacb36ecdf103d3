"""Main CLI entry point."""

import click
from ledgerflow.database.factories import create_sqlite_database
from ledgerflow.logging_config import LOG_LEVEL_ENV, configure_logging

# Import and register all commands at module level
from ledgerflow.cli.commands import (
    company,
    period,
    account,
    init_accounts,
    bank,
    add,
    rule,
    classify,
    journal,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERFLOW_DB_PATH environment variable)",
    envvar="LEDGERFLOW_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    envvar=LOG_LEVEL_ENV,
    help="Log level for diagnostic output on stderr",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Ledgerflow - Bank transaction classification and double-entry journal.

    Classify imported bank transactions with prioritized rules and post
    balanced journal entries to a company ledger.
    """
    ctx.ensure_object(dict)

    if log_level:
        configure_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
company.register_commands(cli)
period.register_commands(cli)
account.register_commands(cli)
init_accounts.register_commands(cli)
bank.register_commands(cli)
add.register_commands(cli)
rule.register_commands(cli)
classify.register_commands(cli)
journal.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
