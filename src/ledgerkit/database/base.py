"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from ledgerkit.database.transaction import Transaction


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Services talk to the store only through parameterized SQL: reads through
    exec() and one(), writes through a Transaction handle.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def exec(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run one statement with positional parameters.

        Returns:
            Result rows as dictionaries keyed by column label (empty for
            statements that return no rows)
        """
        pass

    @abstractmethod
    def one(self, sql: str, params: Sequence[Any] = (), not_found: str = "") -> dict[str, Any]:
        """Run a query expected to return exactly one row.

        Raises:
            NotFoundError: If the query returned no rows (message not_found)
        """
        pass

    @abstractmethod
    def transaction(self) -> Transaction:
        """Start a new, empty transaction handle."""
        pass
