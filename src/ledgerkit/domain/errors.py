"""Shared domain error types and their mapping to boundary status codes."""

from enum import Enum


class ErrorKind(Enum):
    """Error categories exposed at the system boundary."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONSTRAINT = "constraint"
    TRANSPORT = "transport"


HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONSTRAINT: 409,
    ErrorKind.TRANSPORT: 503,
}


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    kind: ErrorKind = ErrorKind.VALIDATION
    code = "ERR_DOMAIN"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    code = "ERR_BAD_REQUEST"


class InsufficientLedgerItems(ValidationError):
    """A voucher has fewer than the two lines double-entry requires."""

    code = "ERR_INSUFFICIENT_LEDGER_ITEMS"


class UnbalancedVoucher(ValidationError):
    """Total debits and total credits of a voucher differ."""

    code = "ERR_UNBALANCED_VOUCHER"


class InvalidIdentifierFormat(ValidationError):
    """Text is not a well-formed 128-bit hyphenated identifier."""

    code = "ERR_INVALID_IDENTIFIER"


class UnsupportedFilterOperator(ValidationError):
    """A filter value carries a comparison operator the parser does not know."""

    code = "ERR_UNSUPPORTED_FILTER_OPERATOR"


class MissingParameters(ValidationError):
    """A filter that needs a companion value was given on its own."""

    code = "ERR_MISSING_PARAMETERS"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    kind = ErrorKind.NOT_FOUND
    code = "ERR_NOT_FOUND"


class ConstraintError(DomainError):
    """The store rejected a write (foreign key, uniqueness, not-null)."""

    kind = ErrorKind.CONSTRAINT
    code = "ERR_CONSTRAINT"


class TransportError(DomainError):
    """The store could not be reached or the operation timed out."""

    kind = ErrorKind.TRANSPORT
    code = "ERR_TRANSPORT"


def error_kind(error: Exception) -> ErrorKind | None:
    """Return the boundary category of an error, or None for unexpected errors."""
    if isinstance(error, DomainError):
        return error.kind
    return None


def http_status(error: Exception) -> int:
    """Return the HTTP status an endpoint layer should answer with."""
    kind = error_kind(error)
    if kind is None:
        return 500
    return HTTP_STATUS[kind]


def insufficient_items(count: int) -> str:
    """Return message for a voucher with too few items."""
    return f"Expected there to be at least two items, but only received {count} items."


def voucher_not_found(identifier: str) -> str:
    """Return message for missing voucher."""
    return f"Could not find a voucher with uuid {identifier}"


def inventory_item_not_found(identifier: str) -> str:
    """Return message for missing inventory item."""
    return f"The inventory uuid {identifier} was not found in the database."


def missing_date_range(start_name: str, end_name: str) -> str:
    """Return message when only one side of a date range was given."""
    return (
        "When using date ranges, you must provide both a start and end date "
        f"('{start_name}' and '{end_name}')."
    )
