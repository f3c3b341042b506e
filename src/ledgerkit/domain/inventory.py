"""Inventory domain service."""

import logging
from typing import Any, Mapping, Optional

from ledgerkit.database.base import Database
from ledgerkit.database.filters import FilterParser
from ledgerkit.database.mappers import inventory_item_to_domain
from ledgerkit.database import statements
from ledgerkit.domain.entities import InventoryItem as InventoryItemEntity, SessionContext
from ledgerkit.domain.errors import NotFoundError, ValidationError, inventory_item_not_found
from ledgerkit.utils.uuid_codec import canonicalize, convert, new_identifier, to_binary

logger = logging.getLogger(__name__)

# boundary field name -> inventory column
FIELD_COLUMNS = {
    "code": "code",
    "label": "text",
    "text": "text",
    "price": "price",
    "default_quantity": "default_quantity",
    "group_uuid": "group_uuid",
    "unit_id": "unit_id",
    "type_id": "type_id",
    "consumable": "consumable",
    "locked": "locked",
    "is_broken": "is_broken",
    "stock_min": "stock_min",
    "stock_max": "stock_max",
    "unit_weight": "unit_weight",
    "unit_volume": "unit_volume",
    "note": "note",
}

# fields stamped or owned by the server, dropped from client payloads
SERVER_FIELDS = ("uuid", "enterprise_id")

INVENTORY_SELECT = """
    SELECT BUID(inventory.uuid) AS uuid, inventory.code, inventory.text AS label,
      inventory.price, iu.abbr AS unit, it.text AS type, ig.name AS group_name,
      BUID(ig.uuid) AS group_uuid, inventory.consumable, inventory.locked,
      inventory.is_broken, inventory.stock_min, inventory.stock_max,
      inventory.created_at, inventory.type_id, inventory.unit_id, inventory.note,
      inventory.unit_weight, inventory.unit_volume, inventory.default_quantity
    FROM inventory
      JOIN inventory_type AS it ON inventory.type_id = it.id
      JOIN inventory_unit AS iu ON inventory.unit_id = iu.id
      JOIN inventory_group AS ig ON inventory.group_uuid = ig.uuid
"""


class InventoryService:
    """Service for managing inventory items."""

    def __init__(self, db: Database):
        """Initialize inventory service.

        Args:
            db: Database instance
        """
        self.db = db

    def _columns(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Map boundary fields to inventory columns, converting identifiers."""
        unknown = set(record) - set(FIELD_COLUMNS)
        if unknown:
            raise ValidationError(f"Unknown inventory fields: {', '.join(sorted(unknown))}")
        if "label" in record and "text" in record:
            raise ValidationError("Give either 'label' or 'text', not both")

        columns = {FIELD_COLUMNS[field]: value for field, value in record.items()}
        if columns.get("group_uuid") is not None:
            columns["group_uuid"] = to_binary(columns["group_uuid"])
        return columns

    def list_items(self, filters: Optional[Mapping[str, Any]] = None) -> list[InventoryItemEntity]:
        """List inventory items matching request filters, ordered by code.

        Recognised filters: text (substring of the label), uuid, group_uuid,
        unit_id, type_id, code, price, consumable, locked, label, is_broken,
        note, inventory_uuids (list of identifiers) and limit. Other filters
        are ignored.

        Raises:
            InvalidIdentifierFormat: If an identifier filter is malformed
        """
        params = convert(filters or {}, ["inventory_uuids", "uuid", "group_uuid"])
        parser = FilterParser(params, table_alias="inventory", auto_parse_statements=False)

        parser.full_text("text", "text", "inventory")
        parser.equals("uuid")
        parser.equals("group_uuid")
        parser.equals("unit_id")
        parser.equals("type_id")
        parser.equals("code")
        parser.equals("price")
        parser.equals("consumable")
        parser.equals("locked")
        parser.equals("label", "text")
        parser.equals("is_broken")
        parser.equals("note")
        parser.custom("inventory_uuids", "inventory.uuid IN (?)", params.get("inventory_uuids"))
        parser.set_order("ORDER BY inventory.code ASC")
        parser.limit("limit")

        query = parser.apply_query(INVENTORY_SELECT)
        rows = self.db.exec(query, parser.parameters())
        return [inventory_item_to_domain(row) for row in rows]

    def get_item(self, uuid: str) -> InventoryItemEntity:
        """Get one inventory item.

        Raises:
            NotFoundError: If no item has this identifier
            InvalidIdentifierFormat: If uuid is malformed
        """
        row = self.db.one(
            INVENTORY_SELECT + " WHERE inventory.uuid = ?",
            [to_binary(uuid)],
            not_found=inventory_item_not_found(uuid),
        )
        return inventory_item_to_domain(row)

    def get_ids(self) -> list[str]:
        """Return the identifiers of every inventory item."""
        rows = self.db.exec("SELECT BUID(i.uuid) AS uuid FROM inventory AS i ORDER BY i.code")
        return [row["uuid"] for row in rows]

    def create_item(self, record: Mapping[str, Any], context: SessionContext) -> str:
        """Create an inventory item.

        The enterprise comes from the session, never from the record. The
        identifier is kept when the record supplies one.

        Args:
            record: Item fields (see FIELD_COLUMNS) and an optional uuid
            context: Caller session

        Returns:
            Canonical identifier of the new item

        Raises:
            ValidationError: If a field is unknown or group_uuid is missing
            ConstraintError: If group, type or unit do not exist, or the code is taken
        """
        fields = {k: v for k, v in record.items() if k not in SERVER_FIELDS}
        if fields.get("group_uuid") is None:
            raise ValidationError("An inventory item needs a group_uuid")

        uid = canonicalize(record.get("uuid") or new_identifier())
        columns = self._columns(fields)
        columns["uuid"] = to_binary(uid)
        columns["enterprise_id"] = context.enterprise_id

        sql, params = statements.insert("inventory", columns)
        self.db.transaction().add_query(sql, params).execute()

        logger.info("Created inventory item %s (%s)", uid, columns.get("code"))
        return uid

    def update_item(self, uuid: str, record: Mapping[str, Any]) -> InventoryItemEntity:
        """Replace the supplied fields of an inventory item.

        Identifier and enterprise fields in the record are discarded. An empty
        change set writes nothing and returns the current item.

        Returns:
            The item as stored after the update

        Raises:
            NotFoundError: If no item has this identifier
            ValidationError: If a field is unknown
            ConstraintError: If the new values break a store constraint
        """
        fields = {k: v for k, v in record.items() if k not in SERVER_FIELDS}
        if not fields:
            return self.get_item(uuid)

        columns = self._columns(fields)
        sql, params = statements.update("inventory", columns, "uuid", to_binary(uuid))
        self.db.transaction().add_query(sql, params).execute()

        logger.info("Updated inventory item %s: %s", uuid, ", ".join(sorted(columns)))
        return self.get_item(uuid)

    def delete_item(self, uuid: str) -> int:
        """Delete an inventory item.

        Returns:
            Number of deleted rows

        Raises:
            NotFoundError: If no item has this identifier
            InvalidIdentifierFormat: If uuid is malformed
        """
        sql = "DELETE FROM inventory WHERE uuid = ?"
        (deleted,) = self.db.transaction().add_query(sql, [to_binary(uuid)]).execute()
        if deleted == 0:
            raise NotFoundError(inventory_item_not_found(uuid))

        logger.info("Deleted inventory item %s", uuid)
        return deleted
