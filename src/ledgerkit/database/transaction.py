"""Atomic execution of an ordered list of statements."""

import logging
from typing import Any, Sequence

from sqlalchemy.engine import Engine

from ledgerkit.database.errors import store_errors
from ledgerkit.database.statements import adapt_parameters

logger = logging.getLogger(__name__)


class Transaction:
    """Accumulates statements and runs them as one all-or-nothing unit.

    Statements run in the order they were added, inside a single store
    transaction. If any statement fails, everything executed so far in the
    handle is rolled back before the error reaches the caller. A handle is
    scoped to one logical operation and can be executed only once.

    Example:
        db.transaction() \\
            .add_query("INSERT INTO voucher (uuid, date) VALUES (?, ?)", [uid, day]) \\
            .add_query(items_sql, items_params) \\
            .execute()
    """

    def __init__(self, engine: Engine):
        """Initialize an empty transaction handle.

        Args:
            engine: Engine whose connection pool provides the connection
        """
        self._engine = engine
        self._queries: list[tuple[str, tuple]] = []
        self._executed = False

    def add_query(self, sql: str, params: Sequence[Any] = ()) -> "Transaction":
        """Queue a statement. Nothing is executed until execute() is called."""
        if self._executed:
            raise RuntimeError("Transaction has already been executed")
        self._queries.append((sql, adapt_parameters(params)))
        return self

    def __len__(self) -> int:
        return len(self._queries)

    def execute(self) -> list[int]:
        """Run every queued statement and commit.

        Returns:
            Affected row count of each statement, in submission order

        Raises:
            ConstraintError: If the store rejected a statement
            TransportError: If the store could not be reached
        """
        if self._executed:
            raise RuntimeError("Transaction has already been executed")
        self._executed = True

        if not self._queries:
            return []

        results: list[int] = []
        try:
            with store_errors(), self._engine.begin() as connection:
                for sql, params in self._queries:
                    logger.debug("Executing %s with %d parameters", sql, len(params))
                    result = connection.exec_driver_sql(sql, params)
                    results.append(result.rowcount)
        except Exception:
            logger.warning(
                "Rolled back transaction after %d of %d statements",
                len(results),
                len(self._queries),
            )
            raise

        logger.debug("Committed transaction of %d statements", len(self._queries))
        return results
