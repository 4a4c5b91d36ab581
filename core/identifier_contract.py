"""Identifier contract shared by descriptor ingest and the query layer."""

from __future__ import annotations

from typing import TypedDict

SCOPE_PREFIX = "."
TYPE_SEPARATOR = "."
MEMBER_SEPARATOR = ":"


class ParsedMemberIdentifier(TypedDict):
    """Parsed member identifier payload."""

    scope: str
    name: str


def is_fully_qualified(type_name: str) -> bool:
    """Return True when ``type_name`` is rooted at the package scope."""
    return type_name.startswith(SCOPE_PREFIX)


def file_identifier(package: str, file_name: str) -> str:
    """Create the identifier for a schema file.

    Args:
        package: Declared package, possibly empty.
        file_name: File name as given in the request.

    Returns:
        Identifier in format ``.package:file_name``.
    """
    return f"{SCOPE_PREFIX}{package}{MEMBER_SEPARATOR}{file_name}"


def type_identifier(package: str, name: str, parent: str = "") -> str:
    """Create the identifier for a message, enum or service.

    Root declarations are scoped by their package; nested declarations use
    their enclosing message identifier as prefix.

    Args:
        package: Package of the containing file.
        name: Local declaration name.
        parent: Enclosing message identifier, empty for root declarations.

    Returns:
        Identifier in format ``.package.Name`` or ``parent.Name``.
    """
    if parent:
        return f"{parent}{TYPE_SEPARATOR}{name}"
    if not package:
        # protoc renders references to package-less types as ".Name"
        return f"{SCOPE_PREFIX}{name}"
    return f"{SCOPE_PREFIX}{package}{TYPE_SEPARATOR}{name}"


def member_identifier(parent: str, name: str) -> str:
    """Create the identifier for a field, oneof, enum value or method.

    Members live in a namespace disjoint from types, so a field named like
    a nested message never collides with it.
    """
    if not parent:
        raise ValueError(f"Member '{name}' requires a parent identifier")
    return f"{parent}{MEMBER_SEPARATOR}{name}"


def parse_member_identifier(identifier: str) -> ParsedMemberIdentifier:
    """Split a member identifier into its scope and local name.

    Args:
        identifier: Identifier produced by ``member_identifier``.

    Returns:
        ParsedMemberIdentifier dict.

    Raises:
        ValueError: If the identifier has no member separator.
    """
    scope, sep, name = identifier.rpartition(MEMBER_SEPARATOR)
    if not sep or not scope or not name:
        raise ValueError(f"Malformed member identifier: {identifier}")
    return ParsedMemberIdentifier(scope=scope, name=name)
