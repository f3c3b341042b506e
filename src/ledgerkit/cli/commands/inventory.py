"""Inventory commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.inventory import InventoryService
from ledgerkit.utils.amount_parser import parse_amount


def _price(ctx, value: str | None):
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid price: {e}", err=True)
        ctx.exit(1)


def _print_item(item, verbose: bool = False) -> None:
    flags = "".join(
        mark for mark, is_set in (("L", item.locked), ("C", item.consumable), ("B", item.is_broken)) if is_set
    )
    click.echo(
        f"{item.uuid} | {item.code:10s} | {item.label:30s} | {item.price:>10} | "
        f"{item.unit:5s} | {item.group_name} {flags}".rstrip()
    )
    if verbose:
        click.echo(f"    Type: {item.type} | Stock min/max: {item.stock_min}/{item.stock_max}")
        if item.note:
            click.echo(f"    Note: {item.note}")


@click.group()
def inventory_group():
    """Manage inventory items."""
    pass


@inventory_group.command("list")
@click.option("--text", help="Text contained in the label")
@click.option("--code", help="Exact item code")
@click.option("--group", "group_uuid", help="Group UUID")
@click.option("--type-id", type=int, help="Inventory type ID")
@click.option("--unit-id", type=int, help="Inventory unit ID")
@click.option("--locked/--unlocked", default=None, help="Only locked or unlocked items")
@click.option("--limit", type=int, help="Maximum number of items")
@click.option("--verbose", "-v", is_flag=True, help="Show type, stock limits and notes")
@click.pass_context
def list_items(
    ctx,
    text: str | None,
    code: str | None,
    group_uuid: str | None,
    type_id: int | None,
    unit_id: int | None,
    locked: bool | None,
    limit: int | None,
    verbose: bool,
):
    """List inventory items ordered by code."""
    service = InventoryService(ctx.obj["db"])
    filters = {
        "text": text,
        "code": code,
        "group_uuid": group_uuid,
        "type_id": type_id,
        "unit_id": unit_id,
        "locked": locked,
        "limit": limit,
    }

    try:
        items = service.list_items(filters)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not items:
        click.echo("No inventory items found.")
        return

    click.echo("\nInventory:")
    click.echo("-" * 100)
    for item in items:
        _print_item(item, verbose)


@inventory_group.command("show")
@click.argument("item_uuid", metavar="UUID")
@click.pass_context
def show_item(ctx, item_uuid: str):
    """Show one inventory item."""
    service = InventoryService(ctx.obj["db"])
    try:
        item = service.get_item(item_uuid)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    _print_item(item, verbose=True)


@inventory_group.command("create")
@click.option("--code", required=True, help="Unique item code")
@click.option("--label", required=True, help="Item label")
@click.option("--group", "group_uuid", required=True, help="Group UUID")
@click.option("--type-id", type=int, required=True, help="Inventory type ID")
@click.option("--unit-id", type=int, required=True, help="Inventory unit ID")
@click.option("--price", help="Unit price")
@click.option("--consumable", is_flag=True, help="Item is consumed when used")
@click.option("--note", help="Free-text note")
@click.option("--uuid", "item_uuid", help="Use this UUID instead of generating one")
@click.pass_context
def create_item(
    ctx,
    code: str,
    label: str,
    group_uuid: str,
    type_id: int,
    unit_id: int,
    price: str | None,
    consumable: bool,
    note: str | None,
    item_uuid: str | None,
):
    """Create an inventory item for the session's enterprise.

    Examples:
        ledgerkit inventory create --code A100 --label "Paracetamol 500mg" \\
            --group <GROUP_UUID> --type-id 1 --unit-id 9 --price 0.25
    """
    service = InventoryService(ctx.obj["db"])
    record = {
        "uuid": item_uuid,
        "code": code,
        "label": label,
        "group_uuid": group_uuid,
        "type_id": type_id,
        "unit_id": unit_id,
        "price": _price(ctx, price),
        "consumable": consumable,
        "note": note,
    }
    record = {k: v for k, v in record.items() if v is not None}

    try:
        uid = service.create_item(record, ctx.obj["session"])
        click.echo(f"Created inventory item '{code}' (UUID: {uid})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@inventory_group.command("update")
@click.argument("item_uuid", metavar="UUID")
@click.option("--code", help="Item code")
@click.option("--label", help="Item label")
@click.option("--group", "group_uuid", help="Group UUID")
@click.option("--type-id", type=int, help="Inventory type ID")
@click.option("--unit-id", type=int, help="Inventory unit ID")
@click.option("--price", help="Unit price")
@click.option("--locked/--unlocked", default=None, help="Lock or unlock the item")
@click.option("--note", help="Free-text note")
@click.pass_context
def update_item(
    ctx,
    item_uuid: str,
    code: str | None,
    label: str | None,
    group_uuid: str | None,
    type_id: int | None,
    unit_id: int | None,
    price: str | None,
    locked: bool | None,
    note: str | None,
):
    """Update an inventory item.

    Updates only the fields that are provided; with no options the item is
    shown unchanged.
    """
    service = InventoryService(ctx.obj["db"])
    changes = {
        "code": code,
        "label": label,
        "group_uuid": group_uuid,
        "type_id": type_id,
        "unit_id": unit_id,
        "price": _price(ctx, price),
        "locked": locked,
        "note": note,
    }
    changes = {k: v for k, v in changes.items() if v is not None}

    try:
        item = service.update_item(item_uuid, changes)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if changes:
        click.echo(f"Updated inventory item {item.uuid}")
    _print_item(item, verbose=True)


@inventory_group.command("delete")
@click.argument("item_uuid", metavar="UUID")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_item(ctx, item_uuid: str, force: bool):
    """Delete an inventory item."""
    service = InventoryService(ctx.obj["db"])

    if not force and not click.confirm(f"Delete inventory item {item_uuid}?"):
        click.echo("Cancelled.")
        return

    try:
        service.delete_item(item_uuid)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted inventory item {item_uuid}")


def register_commands(cli):
    """Register inventory commands with main CLI."""
    cli.add_command(inventory_group, name="inventory")
