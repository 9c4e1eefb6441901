"""Query - Types and Filter AST.

Defines the core type aliases and structures for group queries:
- Document: The stored document type (dict with JSON-like values).
- WhereNode: AST for filter expressions in prefix form.
- QuerySpec: Filter, ordering and pagination for find calls.

Filters are plain values over one implicit document. Two filters built
independently can therefore be AND-composed directly, with no parameter
rebinding: ``and_(eq("id", 1), eq("name", "x"))``.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import (
    Any,
    Literal,
)

# =============================================================================
# BASE TYPE ALIASES
# =============================================================================

#: Document type: dict with JSON-like values, keyed by physical field name.
type Document = dict[str, Any]

#: Field assignments for updates: {field: new_value} ("set" semantics).
type Assignments = dict[str, Any]


# =============================================================================
# WHERE NODE (FILTER AST) - PREFIX FORM
# =============================================================================

#: Comparison operators
type ComparisonOp = Literal["eq", "ne", "gt", "gte", "lt", "lte", "in"]

#: Logical operators for combining conditions
type LogicalOp = Literal["and", "or", "not"]

#: String operators
type StringOp = Literal["contains", "startswith", "endswith"]

#: All supported operator types
type WhereOp = ComparisonOp | LogicalOp | StringOp | Literal["exists"]


# WhereNode AST types (prefix/tuple form for easy serialization)
# Format: (operator, ...args)
# Examples:
#   ("eq", "name", "Alice")
#   ("gt", "age", 18)
#   ("in", "status", ["active", "pending"])
#   ("and", ("eq", "type", "user"), ("gt", "age", 21))
#   ("or", ("eq", "role", "admin"), ("eq", "role", "superuser"))
#   ("not", ("eq", "deleted", True))

#: WhereNode is a recursive tuple structure representing filter AST.
type WhereNode = tuple[Any, ...]


# =============================================================================
# QUERY SPEC
# =============================================================================


@dataclass(frozen=True, slots=True)
class QuerySpec:
    """Query specification for Store.find calls.

    Attributes:
        where: Optional filter AST in prefix tuple form. None matches every
            document.
            Example: ("and", ("eq", "status", "active"), ("gt", "age", 18))

        order_by: Optional ordering - field names with optional "-" prefix
            for descending order.
            Example: ("-created_at", "name") (created_at DESC, name ASC)

        limit: Optional maximum number of results to return.
            None means no limit.

        offset: Starting position for pagination (default 0).
    """

    where: WhereNode | None = None
    order_by: tuple[str, ...] | None = None
    limit: int | None = None
    offset: int = 0


# =============================================================================
# HELPER FUNCTIONS FOR BUILDING WHERE NODES
# =============================================================================


def eq(field: str, value: Any) -> WhereNode:
    """Create an equality condition: field == value."""
    return ("eq", field, value)


def ne(field: str, value: Any) -> WhereNode:
    """Create a not-equal condition: field != value."""
    return ("ne", field, value)


def gt(field: str, value: Any) -> WhereNode:
    """Create a greater-than condition: field > value."""
    return ("gt", field, value)


def gte(field: str, value: Any) -> WhereNode:
    """Create a greater-than-or-equal condition: field >= value."""
    return ("gte", field, value)


def lt(field: str, value: Any) -> WhereNode:
    """Create a less-than condition: field < value."""
    return ("lt", field, value)


def lte(field: str, value: Any) -> WhereNode:
    """Create a less-than-or-equal condition: field <= value."""
    return ("lte", field, value)


def in_(field: str, values: list[Any]) -> WhereNode:
    """Create an 'in' condition: field in [values].

    Args:
        field: Field name to match.
        values: Values to match against. Always stored as a list.

    Returns:
        WhereNode tuple: ("in", field, [values]).
    """
    return ("in", field, list(values))


def and_(*conditions: WhereNode) -> WhereNode:
    """Combine conditions with AND.

    Args:
        *conditions: Two or more WhereNode conditions.

    Returns:
        Combined WhereNode with AND logic.
    """
    if len(conditions) < 2:
        raise ValueError("and_ requires at least 2 conditions")
    result = conditions[0]
    for cond in conditions[1:]:
        result = ("and", result, cond)
    return result


def or_(*conditions: WhereNode) -> WhereNode:
    """Combine conditions with OR.

    Args:
        *conditions: Two or more WhereNode conditions.

    Returns:
        Combined WhereNode with OR logic.
    """
    if len(conditions) < 2:
        raise ValueError("or_ requires at least 2 conditions")
    result = conditions[0]
    for cond in conditions[1:]:
        result = ("or", result, cond)
    return result


def not_(condition: WhereNode) -> WhereNode:
    """Negate a condition."""
    return ("not", condition)


def exists(field: str) -> WhereNode:
    """Check if field exists."""
    return ("exists", field)


def contains(field: str, value: str) -> WhereNode:
    """Check if field contains substring."""
    return ("contains", field, value)


def startswith(field: str, value: str) -> WhereNode:
    """Check if field starts with prefix."""
    return ("startswith", field, value)


def endswith(field: str, value: str) -> WhereNode:
    """Check if field ends with suffix."""
    return ("endswith", field, value)


# =============================================================================
# COMPOSITION AND REWRITING
# =============================================================================


def combine_where(current: WhereNode | None, predicate: WhereNode) -> WhereNode:
    """AND a new predicate onto an accumulated filter.

    Args:
        current: The filter accumulated so far, or None for "match all".
        predicate: The predicate to add.

    Returns:
        ``predicate`` when nothing was accumulated yet, else
        ``("and", current, predicate)``.
    """
    if current is None:
        return predicate
    return and_(current, predicate)


def rename_fields(node: WhereNode, rename: Callable[[str], str]) -> WhereNode:
    """Return a copy of ``node`` with every field name passed through ``rename``.

    Args:
        node: A validated WhereNode.
        rename: Maps an attribute name to the name used in storage.

    Returns:
        A new WhereNode; values are left untouched.
    """
    op = node[0]
    if op in ("and", "or"):
        return (op, rename_fields(node[1], rename), rename_fields(node[2], rename))
    if op == "not":
        return (op, rename_fields(node[1], rename))
    return (op, rename(node[1]), *node[2:])


__all__ = [
    # Type aliases
    "Document",
    "Assignments",
    "WhereOp",
    "WhereNode",
    # Dataclasses
    "QuerySpec",
    # Builder functions
    "eq",
    "ne",
    "gt",
    "gte",
    "lt",
    "lte",
    "in_",
    "and_",
    "or_",
    "not_",
    "exists",
    "contains",
    "startswith",
    "endswith",
    # Composition
    "combine_where",
    "rename_fields",
]
