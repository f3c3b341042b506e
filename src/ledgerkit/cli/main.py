"""Main CLI entry point."""

import click
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.entities import SessionContext
from ledgerkit.logging_config import setup_logging

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    init_reference,
    group,
    voucher,
    inventory,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option(
    "--enterprise-id",
    type=int,
    default=1,
    show_default=True,
    envvar="LEDGERKIT_ENTERPRISE_ID",
    help="Enterprise the session acts for",
)
@click.option("--user-id", type=int, envvar="LEDGERKIT_USER_ID", help="User the session acts as")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="LEDGERKIT_LOG_LEVEL",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    envvar="LEDGERKIT_LOG_FORMAT",
)
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    enterprise_id: int,
    user_id: int | None,
    log_level: str,
    log_format: str,
):
    """Ledgerkit - double-entry vouchers and inventory records.

    Stores vouchers and inventory items in a SQLite database, with every
    multi-row write committed atomically.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level, log_format)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["session"] = SessionContext(enterprise_id=enterprise_id, user_id=user_id)
        ctx.call_on_close(db.disconnect)


# Register all commands
init_reference.register_commands(cli)
group.register_commands(cli)
voucher.register_commands(cli)
inventory.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
