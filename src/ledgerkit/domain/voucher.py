"""Voucher domain service."""

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional

from ledgerkit.database.base import Database
from ledgerkit.database.filters import FilterParser
from ledgerkit.database.mappers import vouchers_to_domain
from ledgerkit.database import statements
from ledgerkit.domain.entities import SessionContext, Voucher as VoucherEntity
from ledgerkit.domain.errors import (
    InsufficientLedgerItems,
    NotFoundError,
    UnbalancedVoucher,
    ValidationError,
    insufficient_items,
    voucher_not_found,
)
from ledgerkit.utils.amount_parser import parse_amount, parse_ledger_amount
from ledgerkit.utils.date_parser import parse_date
from ledgerkit.utils.uuid_codec import canonicalize, convert, new_identifier, to_binary

logger = logging.getLogger(__name__)

VOUCHER_COLUMNS = (
    "uuid",
    "date",
    "project_id",
    "reference",
    "currency_id",
    "amount",
    "description",
    "document_uuid",
    "user_id",
)

ITEM_COLUMNS = ("uuid", "account_id", "debit", "credit", "voucher_uuid")

# columns a list request may compare against through auto-parsed filters
FILTERABLE_COLUMNS = ("amount", "created_at")

VOUCHER_SELECT = """
    SELECT BUID(v.uuid) AS uuid, v.date, v.project_id, v.reference, v.currency_id,
      v.amount, v.description, BUID(v.document_uuid) AS document_uuid, v.user_id,
      v.created_at, BUID(vi.uuid) AS voucher_item_uuid, vi.account_id, vi.debit, vi.credit
    FROM voucher v JOIN voucher_item vi ON vi.voucher_uuid = v.uuid
"""


def check_balanced(items: list[dict[str, Any]]) -> None:
    """Reject a voucher whose debits and credits do not balance.

    Raises:
        UnbalancedVoucher: If total debit differs from total credit
    """
    debit = sum((item["debit"] for item in items), Decimal("0"))
    credit = sum((item["credit"] for item in items), Decimal("0"))
    if debit != credit:
        raise UnbalancedVoucher(
            f"Voucher is not balanced: total debit {debit} does not equal total credit {credit}"
        )


class VoucherService:
    """Service for creating and reading double-entry vouchers."""

    def __init__(self, db: Database, require_balanced: bool = False):
        """Initialize voucher service.

        Args:
            db: Database instance
            require_balanced: Reject vouchers whose debits and credits differ
        """
        self.db = db
        self.require_balanced = require_balanced

    def create_voucher(self, voucher: Mapping[str, Any], context: SessionContext) -> str:
        """Create a voucher and all of its items in one transaction.

        The voucher's `items` are stripped from the record and written as one
        batched insert. Items get fresh identifiers when they have none and
        always reference the voucher being created.

        Args:
            voucher: Voucher fields plus an `items` list of
                {uuid?, account_id, debit, credit}
            context: Caller session; supplies user_id when the voucher has none

        Returns:
            Canonical identifier of the created voucher

        Raises:
            InsufficientLedgerItems: If fewer than two items were given
            UnbalancedVoucher: If require_balanced is set and the items do not balance
            ValidationError: If a field is unknown or cannot be parsed
            ConstraintError: If the store rejected a row (nothing is written)
        """
        record = dict(voucher)
        items = record.pop("items", None) or []

        if len(items) < 2:
            raise InsufficientLedgerItems(insufficient_items(len(items)))

        unknown = set(record) - set(VOUCHER_COLUMNS)
        if unknown:
            raise ValidationError(f"Unknown voucher fields: {', '.join(sorted(unknown))}")

        uid = canonicalize(record.get("uuid") or new_identifier())
        rows = [self._normalize_item(item, uid) for item in items]

        if self.require_balanced:
            check_balanced(rows)

        if record.get("date") is not None:
            record["date"] = self._parse(parse_date, record["date"], "date")
        if record.get("amount") is None:
            record["amount"] = sum((row["debit"] for row in rows), Decimal("0"))
        else:
            record["amount"] = self._parse(parse_amount, record["amount"], "amount")
        if record.get("user_id") is None and context.user_id is not None:
            record["user_id"] = context.user_id
        if record.get("document_uuid"):
            record["document_uuid"] = to_binary(record["document_uuid"])
        record["uuid"] = to_binary(uid)

        voucher_sql, voucher_params = statements.insert("voucher", record)
        items_sql, items_params = statements.insert_many(
            "voucher_item", ITEM_COLUMNS, [[row[c] for c in ITEM_COLUMNS] for row in rows]
        )

        self.db.transaction() \
            .add_query(voucher_sql, voucher_params) \
            .add_query(items_sql, items_params) \
            .execute()

        logger.info("Created voucher %s with %d items", uid, len(rows))
        return uid

    def _normalize_item(self, item: Mapping[str, Any], voucher_uuid: str) -> dict[str, Any]:
        unknown = set(item) - set(ITEM_COLUMNS)
        if unknown:
            raise ValidationError(f"Unknown voucher item fields: {', '.join(sorted(unknown))}")
        if item.get("account_id") is None:
            raise ValidationError("Every voucher item needs an account_id")

        return {
            "uuid": to_binary(item.get("uuid") or new_identifier()),
            "account_id": item["account_id"],
            "debit": self._parse(parse_ledger_amount, item.get("debit"), "debit"),
            "credit": self._parse(parse_ledger_amount, item.get("credit"), "credit"),
            # the server decides which voucher an item belongs to
            "voucher_uuid": to_binary(voucher_uuid),
        }

    @staticmethod
    def _parse(parser, value, field_name: str):
        try:
            return parser(value)
        except ValueError as e:
            raise ValidationError(f"Invalid {field_name}: {e}") from e

    def get_voucher(self, uuid: str) -> VoucherEntity:
        """Get a voucher with its items.

        Raises:
            NotFoundError: If no voucher has this identifier
            InvalidIdentifierFormat: If uuid is malformed
        """
        sql = VOUCHER_SELECT + " WHERE v.uuid = ? ORDER BY vi.rowid"
        rows = self.db.exec(sql, [to_binary(uuid)])
        vouchers = vouchers_to_domain(rows)
        if not vouchers:
            raise NotFoundError(voucher_not_found(uuid))
        return vouchers[0]

    def list_vouchers(self, filters: Optional[Mapping[str, Any]] = None) -> list[VoucherEntity]:
        """List vouchers matching request filters, most recent first.

        Recognised filters: uuid, document_uuid, reference, project_id,
        currency_id, user_id, account_id, description (substring), date_from
        and date_to (both or neither). Any other filter is compared against
        the voucher column of the same name, with an optional leading
        comparison operator (e.g. {"amount": ">=100"}).
        """
        params = convert(filters or {}, ["uuid", "document_uuid"])
        parser = FilterParser(params, table_alias="v", columns=FILTERABLE_COLUMNS)

        parser.equals("uuid")
        parser.equals("document_uuid")
        parser.equals("reference")
        parser.equals("project_id")
        parser.equals("currency_id")
        parser.equals("user_id")
        parser.full_text("description")
        parser.date_range("date_from", "date_to", "date")
        parser.custom(
            "account_id",
            "v.uuid IN (SELECT voucher_uuid FROM voucher_item WHERE account_id IN (?))",
        )
        parser.set_order("ORDER BY v.date DESC, v.created_at DESC, vi.rowid ASC")

        rows = self.db.exec(parser.apply_query(VOUCHER_SELECT), parser.parameters())
        return vouchers_to_domain(rows)
