"""Composition of parameterized WHERE clauses from request filters.

A FilterParser receives the loosely-typed filters of one read request and
collects predicates through explicit calls (equals, full_text, custom, ...).
Each predicate owns both its SQL fragment and the values bound to it, so the
final statement and its parameter list are derived from the same ordered
sequence and placeholders always line up with parameters.

Example:
    filters = FilterParser(params, table_alias="inventory", auto_parse_statements=False)
    filters.full_text("text", "text")
    filters.equals("code")
    filters.custom("inventory_uuids", "inventory.uuid IN (?)")
    filters.set_order("ORDER BY inventory.code ASC")

    db.exec(filters.apply_query(sql), filters.parameters())
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from ledgerkit.database.statements import check_identifier
from ledgerkit.domain.errors import (
    MissingParameters,
    UnsupportedFilterOperator,
    ValidationError,
    missing_date_range,
)
from ledgerkit.utils.date_parser import parse_date

_MISSING = object()

_OPERATOR_PREFIX = re.compile(r"^\s*([<>=!]+)\s*(.*)$", re.DOTALL)

# recognised comparison prefixes and the SQL operator they produce
OPERATORS = {
    "=": "=",
    "!=": "!=",
    "<>": "!=",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
}


class PredicateKind(Enum):
    """Kinds of clause a FilterParser can hold."""

    EQUALS = "equals"
    FULL_TEXT = "full_text"
    CUSTOM = "custom"
    DATE_FROM = "date_from"
    DATE_TO = "date_to"
    AUTO = "auto"
    GROUP = "group"
    ORDER = "order"
    LIMIT = "limit"


@dataclass(frozen=True)
class Predicate:
    """One clause and the values bound to its placeholders, in order."""

    kind: PredicateKind
    clause: str
    values: tuple = ()
    filter_name: Optional[str] = None


def is_present(value: Any) -> bool:
    """Return True unless value is None, an empty string or an empty list.

    Zero and False are real filter values.
    """
    if value is None:
        return False
    if isinstance(value, str) and value == "":
        return False
    if isinstance(value, (list, tuple, set)) and len(value) == 0:
        return False
    return True


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value only ever matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _expand_placeholder(template: str, count: int) -> str:
    return template.replace("?", ", ".join("?" for _ in range(count)), 1)


class FilterParser:
    """Build WHERE, GROUP, ORDER and LIMIT clauses for one read request."""

    def __init__(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        table_alias: Optional[str] = None,
        auto_parse_statements: bool = True,
        columns: Optional[Iterable[str]] = None,
    ):
        """Initialize the parser.

        Args:
            filters: Filter name to filter value mapping (not modified)
            table_alias: Default table alias prefixed to column names
            auto_parse_statements: Turn every filter not consumed by an explicit
                call into a comparison when the query is applied
            columns: Columns auto-parsed filters may target (None allows any
                plain identifier)
        """
        self._filters = dict(filters or {})
        self._table_alias = check_identifier(table_alias) if table_alias else None
        self._auto_parse = auto_parse_statements
        self._columns = frozenset(columns) if columns is not None else None

        self._conditions: list[Predicate] = []
        self._group: Optional[Predicate] = None
        self._order: Optional[Predicate] = None
        self._limit: Optional[Predicate] = None
        self._consumed: set[str] = set()
        self._auto_parsed = False

    @property
    def predicates(self) -> tuple[Predicate, ...]:
        """All predicates in the order they appear in the final statement."""
        trailing = [p for p in (self._group, self._order, self._limit) if p is not None]
        return tuple(self._conditions) + tuple(trailing)

    def _column(self, column: str, table_alias: Optional[str]) -> str:
        alias = table_alias if table_alias is not None else self._table_alias
        check_identifier(column)
        if alias:
            return f"{check_identifier(alias)}.{column}"
        return column

    def _take(self, filter_name: str) -> Any:
        self._consumed.add(filter_name)
        return self._filters.get(filter_name)

    def _add(self, predicate: Predicate) -> "FilterParser":
        self._conditions.append(predicate)
        return self

    def equals(
        self, filter_name: str, column: Optional[str] = None, table_alias: Optional[str] = None
    ) -> "FilterParser":
        """Add `column = ?` when the filter has a value.

        A list value becomes `column IN (?, ...)`. Absent values add nothing.
        """
        value = self._take(filter_name)
        if not is_present(value):
            return self

        target = self._column(column or filter_name, table_alias)
        if isinstance(value, (list, tuple, set)):
            values = tuple(value)
            clause = _expand_placeholder(f"{target} IN (?)", len(values))
            return self._add(Predicate(PredicateKind.EQUALS, clause, values, filter_name))
        return self._add(Predicate(PredicateKind.EQUALS, f"{target} = ?", (value,), filter_name))

    def full_text(
        self, filter_name: str, column: Optional[str] = None, table_alias: Optional[str] = None
    ) -> "FilterParser":
        """Add a case-insensitive substring match when the filter has a value.

        Wildcards in the value are escaped; only the surrounding `%` added here
        act as wildcards.
        """
        value = self._take(filter_name)
        if not is_present(value):
            return self

        target = self._column(column or filter_name, table_alias)
        pattern = f"%{escape_like(str(value).lower())}%"
        clause = f"LOWER({target}) LIKE ? ESCAPE '\\'"
        return self._add(Predicate(PredicateKind.FULL_TEXT, clause, (pattern,), filter_name))

    def custom(self, filter_name: str, template: str, value: Any = _MISSING) -> "FilterParser":
        """Add an arbitrary clause with exactly one `?` placeholder.

        The value defaults to the filter's own value. A list value expands the
        placeholder to one `?` per element. The template's SQL is not checked,
        but the value is always bound, never written into the template.

        Raises:
            ValueError: If the template does not contain exactly one placeholder
        """
        if template.count("?") != 1:
            raise ValueError(f"Custom filter '{filter_name}' needs exactly one placeholder")

        taken = self._take(filter_name)
        if value is _MISSING:
            value = taken
        if not is_present(value):
            return self

        if isinstance(value, (list, tuple, set)):
            values = tuple(value)
            clause = _expand_placeholder(template, len(values))
        else:
            values = (value,)
            clause = template
        return self._add(Predicate(PredicateKind.CUSTOM, clause, values, filter_name))

    def date_range(
        self,
        from_name: str = "date_from",
        to_name: str = "date_to",
        column: str = "date",
        table_alias: Optional[str] = None,
    ) -> "FilterParser":
        """Restrict column to an inclusive date range.

        Raises:
            MissingParameters: If only one end of the range was given
            ValidationError: If a date cannot be parsed
        """
        start = self._take(from_name)
        end = self._take(to_name)
        if not is_present(start) and not is_present(end):
            return self
        if not (is_present(start) and is_present(end)):
            raise MissingParameters(missing_date_range(from_name, to_name))

        try:
            start_date, end_date = parse_date(start), parse_date(end)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        target = self._column(column, table_alias)
        self._add(Predicate(PredicateKind.DATE_FROM, f"DATE({target}) >= DATE(?)", (start_date,), from_name))
        return self._add(Predicate(PredicateKind.DATE_TO, f"DATE({target}) <= DATE(?)", (end_date,), to_name))

    def limit(self, filter_name: str = "limit") -> "FilterParser":
        """Bound the number of rows with `LIMIT ?` when the filter has a value.

        Raises:
            ValidationError: If the value is not a positive integer
        """
        value = self._take(filter_name)
        if not is_present(value):
            return self
        try:
            count = int(value)
        except (TypeError, ValueError):
            count = 0
        if isinstance(value, bool) or count <= 0:
            raise ValidationError(f"Filter '{filter_name}' must be a positive integer, got '{value}'")
        self._limit = Predicate(PredicateKind.LIMIT, "LIMIT ?", (count,), filter_name)
        return self

    def set_group(self, group_clause: str) -> "FilterParser":
        """Set the GROUP BY clause appended after the conditions."""
        self._group = Predicate(PredicateKind.GROUP, group_clause)
        return self

    def set_order(self, order_clause: str) -> "FilterParser":
        """Set the ORDER BY clause appended after the conditions."""
        self._order = Predicate(PredicateKind.ORDER, order_clause)
        return self

    def _auto_predicate(self, filter_name: str, value: Any) -> Predicate:
        try:
            target = self._column(filter_name, None)
        except ValueError as e:
            raise ValidationError(f"Unknown filter '{filter_name}'") from e
        if self._columns is not None and filter_name not in self._columns:
            raise ValidationError(f"Unknown filter '{filter_name}'")

        if isinstance(value, (list, tuple, set)):
            values = tuple(value)
            clause = _expand_placeholder(f"{target} IN (?)", len(values))
            return Predicate(PredicateKind.AUTO, clause, values, filter_name)

        operator = "="
        if isinstance(value, str):
            match = _OPERATOR_PREFIX.match(value)
            if match:
                prefix, value = match.group(1), match.group(2).strip()
                if prefix not in OPERATORS:
                    raise UnsupportedFilterOperator(
                        f"Unsupported operator '{prefix}' in filter '{filter_name}'"
                    )
                if value == "":
                    raise ValidationError(f"Filter '{filter_name}' has an operator but no value")
                operator = OPERATORS[prefix]

        return Predicate(PredicateKind.AUTO, f"{target} {operator} ?", (value,), filter_name)

    def _parse_remaining(self) -> None:
        if not self._auto_parse or self._auto_parsed:
            return
        self._auto_parsed = True
        for filter_name, value in self._filters.items():
            if filter_name in self._consumed or not is_present(value):
                continue
            self._consumed.add(filter_name)
            self._add(self._auto_predicate(filter_name, value))

    def apply_query(self, sql: str) -> str:
        """Return sql followed by the WHERE, GROUP, ORDER and LIMIT clauses.

        WHERE is only emitted when at least one condition was added; conditions
        are joined with AND in the order they were added.
        """
        self._parse_remaining()
        parts = [sql.strip().rstrip(";").rstrip()]
        if self._conditions:
            parts.append("WHERE " + " AND ".join(p.clause for p in self._conditions))
        for trailing in (self._group, self._order, self._limit):
            if trailing is not None:
                parts.append(trailing.clause)
        return " ".join(parts)

    def parameters(self) -> list[Any]:
        """Return bound values in the order their placeholders appear."""
        self._parse_remaining()
        params: list[Any] = []
        for predicate in self.predicates:
            params.extend(predicate.values)
        return params
