"""Database layer for ledgerkit application."""

from ledgerkit.database.base import Database
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.database.filters import FilterParser
from ledgerkit.database.transaction import Transaction

__all__ = ["Database", "FilterParser", "Transaction", "create_sqlite_database"]
