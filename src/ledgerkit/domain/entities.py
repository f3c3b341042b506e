"""Domain model entities for ledgerkit.

These are pure data classes representing business concepts, independent of
the storage layout. Identifiers are always in canonical text form here.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class SessionContext:
    """Caller context supplied by the authentication layer."""

    enterprise_id: int
    user_id: Optional[int] = None


@dataclass(frozen=True)
class VoucherItem:
    """One debit or credit line of a voucher."""

    uuid: str
    voucher_uuid: str
    account_id: int
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class Voucher:
    """Double-entry voucher with its ordered items."""

    uuid: str
    date: date
    project_id: Optional[int]
    reference: Optional[str]
    currency_id: Optional[int]
    amount: Decimal
    description: Optional[str]
    document_uuid: Optional[str]
    user_id: Optional[int]
    created_at: Optional[datetime] = None
    items: tuple[VoucherItem, ...] = field(default_factory=tuple)

    @property
    def total_debit(self) -> Decimal:
        return sum((item.debit for item in self.items), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((item.credit for item in self.items), Decimal("0"))


@dataclass(frozen=True)
class InventoryGroup:
    """Inventory group with its accounting configuration."""

    uuid: str
    name: str
    code: Optional[str]
    sales_account: Optional[int]
    stock_account: Optional[int]
    cogs_account: Optional[int]
    donation_account: Optional[int]
    expires: bool
    unique_item: bool


@dataclass(frozen=True)
class InventoryType:
    """Inventory classification (article, assembly, service...)."""

    id: int
    text: str


@dataclass(frozen=True)
class InventoryUnit:
    """Inventory unit of measure."""

    id: int
    abbr: str
    text: str


@dataclass(frozen=True)
class InventoryItem:
    """Inventory item joined with its group, type and unit."""

    uuid: str
    code: str
    label: str
    price: Decimal
    group_uuid: str
    group_name: str
    type_id: int
    type: str
    unit_id: int
    unit: str
    consumable: bool
    locked: bool
    is_broken: bool
    stock_min: Decimal
    stock_max: Decimal
    unit_weight: Decimal
    unit_volume: Decimal
    default_quantity: int
    note: Optional[str]
    created_at: Optional[datetime] = None
