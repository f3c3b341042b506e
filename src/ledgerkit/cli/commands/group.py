"""Inventory group commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.reference import ReferenceDataService


@click.group()
def group_group():
    """Manage inventory groups."""
    pass


@group_group.command("create")
@click.argument("name", metavar="GROUP_NAME")
@click.option("--code", help="Short group code")
@click.option("--sales-account", type=int, help="Sales account ID")
@click.option("--stock-account", type=int, help="Stock account ID")
@click.option("--cogs-account", type=int, help="Cost of goods sold account ID")
@click.option("--no-expiry", is_flag=True, help="Items of this group do not expire")
@click.pass_context
def create_group(
    ctx,
    name: str,
    code: str | None,
    sales_account: int | None,
    stock_account: int | None,
    cogs_account: int | None,
    no_expiry: bool,
):
    """Create a new inventory group.

    Examples:
        ledgerkit group create "Medicines" --code MED
        ledgerkit group create "Services" --no-expiry
    """
    service = ReferenceDataService(ctx.obj["db"])
    try:
        uid = service.create_group(
            name=name,
            code=code,
            sales_account=sales_account,
            stock_account=stock_account,
            cogs_account=cogs_account,
            expires=not no_expiry,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created group '{name}' (UUID: {uid})")


@group_group.command("list")
@click.pass_context
def list_groups(ctx):
    """List all inventory groups."""
    service = ReferenceDataService(ctx.obj["db"])
    groups = service.list_groups()
    if not groups:
        click.echo("No groups found.")
        return

    click.echo("\nGroups:")
    click.echo("-" * 70)
    for grp in groups:
        click.echo(f"{grp.uuid} | {grp.name:20s} | Code: {grp.code or '-'}")


def register_commands(cli):
    """Register group commands with main CLI."""
    cli.add_command(group_group, name="group")
