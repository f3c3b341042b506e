"""SQLAlchemy schema for the ledgerkit database.

Identifier columns hold the 16-byte binary form of a record identifier.
Rows are written and read with plain SQL, so every default that must apply
to those statements is declared server-side.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    LargeBinary,
    create_engine,
    event,
    func,
    text as sql_text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from ledgerkit.utils.uuid_codec import to_binary, to_canonical

Base = declarative_base()

BinaryId = LargeBinary(16)


class Voucher(Base):
    """Double-entry voucher header."""

    __tablename__ = "voucher"

    uuid = Column(BinaryId, primary_key=True)
    date = Column(Date, nullable=False)
    project_id = Column(Integer, nullable=True)
    reference = Column(String(50), nullable=True)
    currency_id = Column(Integer, nullable=True)
    amount = Column(Numeric(19, 4), nullable=False, server_default=sql_text("0"))
    description = Column(Text, nullable=True)
    document_uuid = Column(BinaryId, nullable=True)
    user_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())


class VoucherItem(Base):
    """Debit or credit line belonging to exactly one voucher."""

    __tablename__ = "voucher_item"

    uuid = Column(BinaryId, primary_key=True)
    account_id = Column(Integer, nullable=False)
    debit = Column(Numeric(19, 4), nullable=False, server_default=sql_text("0"))
    credit = Column(Numeric(19, 4), nullable=False, server_default=sql_text("0"))
    voucher_uuid = Column(
        BinaryId, ForeignKey("voucher.uuid", ondelete="CASCADE"), nullable=False, index=True
    )


class InventoryGroup(Base):
    """Inventory group model."""

    __tablename__ = "inventory_group"

    uuid = Column(BinaryId, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    code = Column(String(30), nullable=True)
    sales_account = Column(Integer, nullable=True)
    stock_account = Column(Integer, nullable=True)
    cogs_account = Column(Integer, nullable=True)
    donation_account = Column(Integer, nullable=True)
    expires = Column(Boolean, nullable=False, server_default=sql_text("1"))
    unique_item = Column(Boolean, nullable=False, server_default=sql_text("0"))


class InventoryType(Base):
    """Inventory type model."""

    __tablename__ = "inventory_type"

    id = Column(Integer, primary_key=True)
    text = Column(String(30), unique=True, nullable=False)


class InventoryUnit(Base):
    """Inventory unit model."""

    __tablename__ = "inventory_unit"

    id = Column(Integer, primary_key=True)
    abbr = Column(String(10), nullable=False)
    text = Column(String(100), unique=True, nullable=False)


class Inventory(Base):
    """Inventory item model."""

    __tablename__ = "inventory"

    uuid = Column(BinaryId, primary_key=True)
    enterprise_id = Column(Integer, nullable=False)
    code = Column(String(30), unique=True, nullable=False)
    text = Column(String(100), nullable=False)
    price = Column(Numeric(18, 4), nullable=False, server_default=sql_text("0"))
    default_quantity = Column(Integer, nullable=False, server_default=sql_text("1"))
    group_uuid = Column(BinaryId, ForeignKey("inventory_group.uuid"), nullable=False)
    unit_id = Column(Integer, ForeignKey("inventory_unit.id"), nullable=False)
    type_id = Column(Integer, ForeignKey("inventory_type.id"), nullable=False)
    consumable = Column(Boolean, nullable=False, server_default=sql_text("0"))
    locked = Column(Boolean, nullable=False, server_default=sql_text("0"))
    is_broken = Column(Boolean, nullable=False, server_default=sql_text("0"))
    stock_min = Column(Numeric(18, 4), nullable=False, server_default=sql_text("0"))
    stock_max = Column(Numeric(18, 4), nullable=False, server_default=sql_text("0"))
    unit_weight = Column(Numeric(18, 4), nullable=False, server_default=sql_text("0"))
    unit_volume = Column(Numeric(18, 4), nullable=False, server_default=sql_text("0"))
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())


def _buid(value):
    return None if value is None else to_canonical(value)


def _huid(value):
    return None if value is None else to_binary(value)


def _on_connect(dbapi_connection, connection_record):
    """Enable foreign keys and register the identifier projection functions."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()
    dbapi_connection.create_function("BUID", 1, _buid, deterministic=True)
    dbapi_connection.create_function("HUID", 1, _huid, deterministic=True)


def create_database_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for database_url with identifier functions registered."""
    engine = create_engine(database_url, echo=echo)
    event.listen(engine, "connect", _on_connect)
    return engine
