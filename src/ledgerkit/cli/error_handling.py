"""CLI error handling helpers."""

import click

from ledgerkit.domain.errors import ErrorKind, error_kind

# exit status per error category; unexpected ValueErrors exit with 1
EXIT_CODES = {
    ErrorKind.VALIDATION: 1,
    ErrorKind.NOT_FOUND: 2,
    ErrorKind.CONSTRAINT: 3,
    ErrorKind.TRANSPORT: 4,
}


def handle_domain_error(ctx: click.Context, error: ValueError) -> None:
    """Render a domain error and exit with the status of its category."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(EXIT_CODES.get(error_kind(error), 1))
