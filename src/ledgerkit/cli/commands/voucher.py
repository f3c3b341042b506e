"""Voucher commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.voucher import VoucherService


def parse_item_option(value: str) -> dict:
    """Parse an --item value of the form ACCOUNT:DEBIT[:CREDIT].

    Raises:
        click.BadParameter: If the value does not have that shape
    """
    parts = value.split(":")
    if len(parts) not in (2, 3) or not parts[0].strip().isdigit():
        raise click.BadParameter(
            f"'{value}' is not ACCOUNT:DEBIT[:CREDIT] (e.g. 4010:100 or 5700:0:100)",
            param_hint="--item",
        )
    item = {"account_id": int(parts[0]), "debit": parts[1].strip() or "0"}
    credit = parts[2].strip() if len(parts) == 3 else ""
    item["credit"] = credit or "0"
    return item


@click.group()
def voucher_group():
    """Manage vouchers."""
    pass


@voucher_group.command("create")
@click.option("--date", "voucher_date", required=True, help="Voucher date (YYYY-MM-DD, 'today', ...)")
@click.option("--item", "items", multiple=True, required=True, help="Line as ACCOUNT:DEBIT[:CREDIT]")
@click.option("--description", help="Voucher description")
@click.option("--reference", help="Free-text reference")
@click.option("--currency", "currency_id", type=int, help="Currency ID")
@click.option("--project", "project_id", type=int, help="Project ID")
@click.option("--document", "document_uuid", help="UUID of the source document")
@click.option("--uuid", "voucher_uuid", help="Use this UUID instead of generating one")
@click.option("--require-balanced", is_flag=True, help="Reject the voucher if debits and credits differ")
@click.pass_context
def create_voucher(
    ctx,
    voucher_date: str,
    items: tuple[str, ...],
    description: str | None,
    reference: str | None,
    currency_id: int | None,
    project_id: int | None,
    document_uuid: str | None,
    voucher_uuid: str | None,
    require_balanced: bool,
):
    """Create a voucher from two or more lines.

    Examples:
        ledgerkit voucher create --date 2024-01-01 --item 1:100 --item 2:0:100
        ledgerkit voucher create --date today --item 4010:25.50 --item 5700:0:25.50 \\
            --description "Petty cash" --require-balanced
    """
    service = VoucherService(ctx.obj["db"], require_balanced=require_balanced)

    record = {
        "date": voucher_date,
        "description": description,
        "reference": reference,
        "currency_id": currency_id,
        "project_id": project_id,
        "document_uuid": document_uuid,
        "uuid": voucher_uuid,
        "items": [parse_item_option(item) for item in items],
    }
    record = {k: v for k, v in record.items() if v is not None}

    try:
        uid = service.create_voucher(record, ctx.obj["session"])
        click.echo(f"Created voucher {uid}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def _print_voucher(voucher) -> None:
    click.echo(
        f"{voucher.uuid} | {voucher.date.isoformat()} | {voucher.amount:>12} | "
        f"{voucher.description or ''}"
    )


@voucher_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--reference", help="Exact reference")
@click.option("--description", help="Text contained in the description")
@click.option("--account", "account_id", type=int, help="Only vouchers touching this account")
@click.option("--document", "document_uuid", help="Source document UUID")
@click.option("--amount", help="Amount, optionally with an operator (e.g. '>=100')")
@click.pass_context
def list_vouchers(
    ctx,
    start_date: str | None,
    end_date: str | None,
    reference: str | None,
    description: str | None,
    account_id: int | None,
    document_uuid: str | None,
    amount: str | None,
):
    """List vouchers, most recent first."""
    service = VoucherService(ctx.obj["db"])
    filters = {
        "date_from": start_date,
        "date_to": end_date,
        "reference": reference,
        "description": description,
        "account_id": account_id,
        "document_uuid": document_uuid,
        "amount": amount,
    }

    try:
        vouchers = service.list_vouchers(filters)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not vouchers:
        click.echo("No vouchers found.")
        return

    click.echo("\nVouchers:")
    click.echo("-" * 90)
    for voucher in vouchers:
        _print_voucher(voucher)


@voucher_group.command("show")
@click.argument("voucher_uuid", metavar="UUID")
@click.pass_context
def show_voucher(ctx, voucher_uuid: str):
    """Show a voucher and its lines."""
    service = VoucherService(ctx.obj["db"])
    try:
        voucher = service.get_voucher(voucher_uuid)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    _print_voucher(voucher)
    click.echo("-" * 90)
    for item in voucher.items:
        click.echo(f"  Account {item.account_id:>6} | Debit {item.debit:>12} | Credit {item.credit:>12}")
    click.echo(f"  {'Total':>14} | Debit {voucher.total_debit:>12} | Credit {voucher.total_credit:>12}")


def register_commands(cli):
    """Register voucher commands with main CLI."""
    cli.add_command(voucher_group, name="voucher")
