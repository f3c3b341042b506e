"""Builders for parameterized INSERT and UPDATE statements.

Column names come from service-side allow-lists and are checked against an
identifier pattern. Values are never placed in the SQL text; every builder
returns the statement together with its positional parameter list.
"""

import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Sequence

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def check_identifier(name: str) -> str:
    """Return name unchanged if it is a plain SQL identifier.

    Raises:
        ValueError: If name contains anything but letters, digits and underscores
    """
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier '{name}'")
    return name


def adapt_value(value: Any) -> Any:
    """Convert a Python value into something the DBAPI driver can bind."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return value.bytes
    if isinstance(value, bytearray):
        return bytes(value)
    return value


def adapt_parameters(params: Sequence[Any]) -> tuple:
    """Adapt every value of a positional parameter list."""
    return tuple(adapt_value(value) for value in params)


def insert(table: str, record: Mapping[str, Any]) -> tuple[str, list[Any]]:
    """Build a single-row INSERT for the columns present in record."""
    return insert_many(table, list(record.keys()), [[record[c] for c in record]])


def insert_many(
    table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]
) -> tuple[str, list[Any]]:
    """Build one multi-row INSERT.

    Args:
        table: Target table
        columns: Column names, in the order of each row's values
        rows: One value sequence per row

    Returns:
        Statement and flattened parameter list (row by row)
    """
    if not columns:
        raise ValueError(f"No columns to insert into '{table}'")
    if not rows:
        raise ValueError(f"No rows to insert into '{table}'")

    column_list = ", ".join(check_identifier(c) for c in columns)
    row_placeholder = "(" + ", ".join("?" for _ in columns) + ")"
    params: list[Any] = []
    for row in rows:
        if len(row) != len(columns):
            raise ValueError(
                f"Row has {len(row)} values but {len(columns)} columns were given"
            )
        params.extend(row)

    sql = (
        f"INSERT INTO {check_identifier(table)} ({column_list}) VALUES "
        + ", ".join(row_placeholder for _ in rows)
    )
    return sql, params


def update(
    table: str, changes: Mapping[str, Any], key_column: str, key: Any
) -> tuple[str, list[Any]]:
    """Build an UPDATE setting the columns in changes on the row matching key."""
    if not changes:
        raise ValueError(f"No columns to update in '{table}'")

    assignments = ", ".join(f"{check_identifier(c)} = ?" for c in changes)
    sql = (
        f"UPDATE {check_identifier(table)} SET {assignments} "
        f"WHERE {check_identifier(key_column)} = ?"
    )
    return sql, [*changes.values(), key]
