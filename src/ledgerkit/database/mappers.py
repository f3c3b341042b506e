"""Mapper functions to convert query rows into domain entities.

Queries project identifiers with BUID(), so rows already carry canonical
text; these functions only fix up the loose types SQLite hands back
(numbers for decimals, integers for booleans, text for dates).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from ledgerkit.domain import entities as domain


def to_decimal(value: Any) -> Decimal:
    """Convert a stored numeric value to Decimal without float artefacts."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def voucher_item_to_domain(row: Mapping[str, Any]) -> domain.VoucherItem:
    """Convert a voucher/voucher_item row to a domain VoucherItem."""
    return domain.VoucherItem(
        uuid=row["voucher_item_uuid"],
        voucher_uuid=row["uuid"],
        account_id=row["account_id"],
        debit=to_decimal(row["debit"]),
        credit=to_decimal(row["credit"]),
    )


def vouchers_to_domain(rows: Iterable[Mapping[str, Any]]) -> list[domain.Voucher]:
    """Group joined voucher/item rows into Voucher entities.

    Vouchers keep the order in which they first appear in rows, and so do
    the items of each voucher.
    """
    headers: dict[str, Mapping[str, Any]] = {}
    items: dict[str, list[domain.VoucherItem]] = {}
    for row in rows:
        key = row["uuid"]
        if key not in headers:
            headers[key] = row
            items[key] = []
        if row.get("voucher_item_uuid") is not None:
            items[key].append(voucher_item_to_domain(row))

    return [
        domain.Voucher(
            uuid=key,
            date=to_date(row["date"]),
            project_id=row["project_id"],
            reference=row["reference"],
            currency_id=row["currency_id"],
            amount=to_decimal(row["amount"]),
            description=row["description"],
            document_uuid=row["document_uuid"],
            user_id=row["user_id"],
            created_at=to_datetime(row.get("created_at")),
            items=tuple(items[key]),
        )
        for key, row in headers.items()
    ]


def inventory_item_to_domain(row: Mapping[str, Any]) -> domain.InventoryItem:
    """Convert an inventory row joined with group, type and unit."""
    return domain.InventoryItem(
        uuid=row["uuid"],
        code=row["code"],
        label=row["label"],
        price=to_decimal(row["price"]),
        group_uuid=row["group_uuid"],
        group_name=row["group_name"],
        type_id=row["type_id"],
        type=row["type"],
        unit_id=row["unit_id"],
        unit=row["unit"],
        consumable=bool(row["consumable"]),
        locked=bool(row["locked"]),
        is_broken=bool(row["is_broken"]),
        stock_min=to_decimal(row["stock_min"]),
        stock_max=to_decimal(row["stock_max"]),
        unit_weight=to_decimal(row["unit_weight"]),
        unit_volume=to_decimal(row["unit_volume"]),
        default_quantity=row["default_quantity"],
        note=row["note"],
        created_at=to_datetime(row.get("created_at")),
    )


def inventory_group_to_domain(row: Mapping[str, Any]) -> domain.InventoryGroup:
    """Convert an inventory_group row."""
    return domain.InventoryGroup(
        uuid=row["uuid"],
        name=row["name"],
        code=row["code"],
        sales_account=row["sales_account"],
        stock_account=row["stock_account"],
        cogs_account=row["cogs_account"],
        donation_account=row["donation_account"],
        expires=bool(row["expires"]),
        unique_item=bool(row["unique_item"]),
    )


def inventory_type_to_domain(row: Mapping[str, Any]) -> domain.InventoryType:
    return domain.InventoryType(id=row["id"], text=row["text"])


def inventory_unit_to_domain(row: Mapping[str, Any]) -> domain.InventoryUnit:
    return domain.InventoryUnit(id=row["id"], abbr=row["abbr"], text=row["text"])
