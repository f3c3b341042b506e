"""Conversion between canonical and binary record identifiers.

Identifiers cross the system boundary as 36-character hyphenated text and are
stored as 16-byte binary values. Both directions are pure functions.
"""

import re
import uuid
from typing import Any, Iterable, Mapping

from ledgerkit.domain.errors import InvalidIdentifierFormat

_CANONICAL_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def to_binary(canonical: str) -> bytes:
    """Convert a canonical identifier into its 16-byte binary form.

    Args:
        canonical: Hyphenated identifier (case-insensitive)

    Returns:
        16 bytes

    Raises:
        InvalidIdentifierFormat: If the text is not a hyphenated 128-bit identifier
    """
    if not isinstance(canonical, str) or not _CANONICAL_PATTERN.match(canonical):
        raise InvalidIdentifierFormat(f"Invalid identifier '{canonical}'")
    return uuid.UUID(canonical).bytes


def to_canonical(binary: bytes) -> str:
    """Convert a 16-byte binary identifier into lower-case canonical text.

    Raises:
        InvalidIdentifierFormat: If the value is not exactly 16 bytes
    """
    if not isinstance(binary, (bytes, bytearray, memoryview)) or len(binary) != 16:
        raise InvalidIdentifierFormat(f"Invalid binary identifier {binary!r}")
    return str(uuid.UUID(bytes=bytes(binary)))


def new_identifier() -> str:
    """Generate a fresh canonical identifier."""
    return str(uuid.uuid4())


def canonicalize(identifier: str) -> str:
    """Return the lower-case canonical spelling of a client-supplied identifier.

    Raises:
        InvalidIdentifierFormat: If the text is not a hyphenated 128-bit identifier
    """
    return to_canonical(to_binary(identifier))


def convert(params: Mapping[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Return a copy of params with the listed identifier keys in binary form.

    Scalar values and lists of values are both converted. Keys that are absent
    or hold None are left untouched.
    """
    converted = dict(params)
    for key in keys:
        value = converted.get(key)
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            converted[key] = [to_binary(v) for v in value]
        else:
            converted[key] = to_binary(value)
    return converted
