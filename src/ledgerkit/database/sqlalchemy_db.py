"""Generic SQLAlchemy database implementation."""

import logging
from typing import Any, Optional, Sequence

from sqlalchemy.engine import Engine

from ledgerkit.database.base import Database
from ledgerkit.database.errors import store_errors
from ledgerkit.database.models import Base, create_database_engine
from ledgerkit.database.statements import adapt_parameters
from ledgerkit.database.transaction import Transaction
from ledgerkit.domain.errors import NotFoundError

logger = logging.getLogger(__name__)


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
            echo: Log every statement through SQLAlchemy's own logger
        """
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[Engine] = None

    @property
    def engine(self) -> Engine:
        """Engine for this database, created on first use."""
        if self._engine is None:
            self._engine = create_database_engine(self.database_url, echo=self.echo)
        return self._engine

    def connect(self) -> None:
        """Connect to the database."""
        with store_errors(), self.engine.connect():
            pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        with store_errors():
            Base.metadata.create_all(self.engine)

    def exec(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run one statement with positional parameters."""
        logger.debug("Executing %s with %d parameters", sql, len(params))
        with store_errors(), self.engine.begin() as connection:
            result = connection.exec_driver_sql(sql, adapt_parameters(params))
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

    def one(self, sql: str, params: Sequence[Any] = (), not_found: str = "") -> dict[str, Any]:
        """Run a query expected to return exactly one row."""
        rows = self.exec(sql, params)
        if not rows:
            raise NotFoundError(not_found or "No record matched the query")
        if len(rows) > 1:
            raise RuntimeError(f"Expected one row but the query returned {len(rows)}")
        return rows[0]

    def transaction(self) -> Transaction:
        """Start a new, empty transaction handle."""
        return Transaction(self.engine)
