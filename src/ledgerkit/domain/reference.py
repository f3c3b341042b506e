"""Reference data service for inventory groups, types and units."""

import logging
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.database.mappers import (
    inventory_group_to_domain,
    inventory_type_to_domain,
    inventory_unit_to_domain,
)
from ledgerkit.database import statements
from ledgerkit.domain.entities import InventoryGroup, InventoryType, InventoryUnit
from ledgerkit.domain.errors import ValidationError
from ledgerkit.utils.uuid_codec import canonicalize, new_identifier, to_binary

logger = logging.getLogger(__name__)

GROUP_SELECT = """
    SELECT BUID(uuid) AS uuid, name, code, sales_account, stock_account, cogs_account,
      donation_account, expires, unique_item
    FROM inventory_group
"""


class ReferenceDataService:
    """Service for the lookup tables inventory items point to."""

    def __init__(self, db: Database):
        """Initialize reference data service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_group(
        self,
        name: str,
        code: Optional[str] = None,
        uuid: Optional[str] = None,
        sales_account: Optional[int] = None,
        stock_account: Optional[int] = None,
        cogs_account: Optional[int] = None,
        donation_account: Optional[int] = None,
        expires: bool = True,
        unique_item: bool = False,
    ) -> str:
        """Create an inventory group. Returns its canonical identifier.

        Raises:
            ValidationError: If name is empty
            ConstraintError: If a group with this name exists
        """
        if not name or not name.strip():
            raise ValidationError("Inventory group name cannot be empty")

        uid = canonicalize(uuid or new_identifier())
        sql, params = statements.insert(
            "inventory_group",
            {
                "uuid": to_binary(uid),
                "name": name.strip(),
                "code": code,
                "sales_account": sales_account,
                "stock_account": stock_account,
                "cogs_account": cogs_account,
                "donation_account": donation_account,
                "expires": expires,
                "unique_item": unique_item,
            },
        )
        self.db.transaction().add_query(sql, params).execute()
        logger.info("Created inventory group %s (%s)", uid, name)
        return uid

    def list_groups(self) -> list[InventoryGroup]:
        """List inventory groups by name."""
        rows = self.db.exec(GROUP_SELECT + " ORDER BY name")
        return [inventory_group_to_domain(row) for row in rows]

    def create_type(self, text: str) -> int:
        """Create an inventory type. Returns its ID."""
        if not text or not text.strip():
            raise ValidationError("Inventory type cannot be empty")
        sql, params = statements.insert("inventory_type", {"text": text.strip()})
        self.db.transaction().add_query(sql, params).execute()
        return self.db.one("SELECT id FROM inventory_type WHERE text = ?", [text.strip()])["id"]

    def list_types(self) -> list[InventoryType]:
        """List inventory types by ID."""
        rows = self.db.exec("SELECT id, text FROM inventory_type ORDER BY id")
        return [inventory_type_to_domain(row) for row in rows]

    def create_unit(self, abbr: str, text: str) -> int:
        """Create an inventory unit. Returns its ID."""
        if not abbr or not text or not abbr.strip() or not text.strip():
            raise ValidationError("Inventory unit needs an abbreviation and a name")
        sql, params = statements.insert(
            "inventory_unit", {"abbr": abbr.strip(), "text": text.strip()}
        )
        self.db.transaction().add_query(sql, params).execute()
        return self.db.one("SELECT id FROM inventory_unit WHERE text = ?", [text.strip()])["id"]

    def list_units(self) -> list[InventoryUnit]:
        """List inventory units by ID."""
        rows = self.db.exec("SELECT id, abbr, text FROM inventory_unit ORDER BY id")
        return [inventory_unit_to_domain(row) for row in rows]
