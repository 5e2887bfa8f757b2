"""Main CLI entry point."""

import click
from fintrack.database.factories import create_sqlite_database
from fintrack.logging_config import setup_logging

# Import and register all commands at module level
from fintrack.cli.commands import (
    account,
    category,
    detect,
    import_cmd,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINTRACK_DB_PATH environment variable)",
    envvar="FINTRACK_DB_PATH",
)
@click.option(
    "--user",
    default="default",
    show_default=True,
    envvar="FINTRACK_USER",
    help="User whose data is read and written",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="FINTRACK_LOG_LEVEL",
    help="Logging verbosity (logs go to stderr)",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str, log_level: str):
    """Fintrack - personal finance tracker.

    Import bank statements (Trustee and PrivatBank PDF, Monobank CSV,
    HomeBank QIF) into your accounts without creating duplicates.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)
    ctx.obj["user"] = user

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
detect.register_commands(cli)
import_cmd.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
