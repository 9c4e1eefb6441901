"""Query - Filter Validation Module.

Provides centralized validation for WhereNode filters and query shaping
arguments, ensuring:
- WhereNode arity (correct number of arguments per operator)
- Known operators only
- Field allowlisting against the entity's declared fields
- Non-negative pagination values

Builders validate every predicate when it is added, so a malformed filter
fails at the call site instead of inside the store.
"""

from collections.abc import Collection
from typing import Any

from docgroup.core.exceptions import InvalidArgument
from docgroup.core.query.types import WhereNode

# =============================================================================
# OPERATOR ARITY DEFINITIONS
# =============================================================================

# Operators with arity 3: (op, field, value)
ARITY_3_COMPARISON: frozenset[str] = frozenset(
    {
        "eq",
        "ne",
        "gt",
        "gte",
        "lt",
        "lte",
        "in",
        "contains",
        "startswith",
        "endswith",
    }
)

# Operators with arity 2: (op, field) or (op, condition)
ARITY_2_UNARY: frozenset[str] = frozenset(
    {
        "exists",  # (exists, field)
        "not",  # (not, condition)
    }
)

# Operators with arity 3 (binary logical): (op, left, right)
ARITY_3_LOGICAL: frozenset[str] = frozenset(
    {
        "and",
        "or",
    }
)

# All known operators for reference
ALL_KNOWN_OPS: frozenset[str] = ARITY_3_COMPARISON | ARITY_2_UNARY | ARITY_3_LOGICAL


def get_expected_arity(op: str) -> int:
    """Get the expected arity (tuple length) for an operator.

    Args:
        op: Operator name.

    Returns:
        Expected tuple length (including the operator itself).
        Returns 0 if operator is unknown.
    """
    if op in ARITY_3_COMPARISON or op in ARITY_3_LOGICAL:
        return 3
    if op in ARITY_2_UNARY:
        return 2
    return 0


def _check_field(field_name: Any, allowed_fields: Collection[str] | None, path: str) -> None:
    if not isinstance(field_name, str) or not field_name:
        raise InvalidArgument(
            f"Field name must be a non-empty string, got {type(field_name).__name__}",
            argument=path,
            value=field_name,
        )
    if allowed_fields is not None and field_name not in allowed_fields:
        raise InvalidArgument(
            f"Field '{field_name}' is not a declared field",
            argument=path,
            value=field_name,
        )


def validate_where(
    node: WhereNode,
    allowed_fields: Collection[str] | None = None,
    path: str = "where",
) -> WhereNode:
    """Recursively validate a WhereNode AST.

    Args:
        node: WhereNode tuple to validate.
        allowed_fields: Optional set of allowed field names. If None, all fields allowed.
        path: Current path in AST for error messages.

    Returns:
        The node itself, unchanged.

    Raises:
        InvalidArgument: If the node is None, has the wrong shape or arity,
            uses an unknown operator or references an unknown field.
    """
    if node is None:
        raise InvalidArgument("Predicate must not be None", argument=path)

    if not isinstance(node, tuple):
        raise InvalidArgument(
            f"WhereNode must be a tuple, got {type(node).__name__}",
            argument=path,
            value=node,
        )

    if len(node) == 0:
        raise InvalidArgument("WhereNode cannot be empty", argument=path, value=node)

    op = node[0]
    if not isinstance(op, str):
        raise InvalidArgument(
            f"Operator must be a string, got {type(op).__name__}",
            argument=f"{path}[0]",
            value=op,
        )

    expected_arity = get_expected_arity(op)
    if expected_arity == 0:
        raise InvalidArgument(f"Unknown operator '{op}'", argument=path, value=node)

    if len(node) != expected_arity:
        raise InvalidArgument(
            f"Operator '{op}' requires {expected_arity} elements, got {len(node)}",
            argument=path,
            value=node,
        )

    if op in ARITY_3_COMPARISON:
        _check_field(node[1], allowed_fields, f"{path}[1]")
        if op == "in" and not isinstance(node[2], list):
            raise InvalidArgument(
                f"'in' operator values must be a list, got {type(node[2]).__name__}. "
                "Use the in_() builder or provide a list.",
                argument=f"{path}[2]",
                value=node[2],
            )
        if op in ("contains", "startswith", "endswith") and not isinstance(node[2], str):
            raise InvalidArgument(
                f"'{op}' operator value must be a string",
                argument=f"{path}[2]",
                value=node[2],
            )

    elif op == "exists":
        _check_field(node[1], allowed_fields, f"{path}[1]")

    elif op == "not":
        validate_where(node[1], allowed_fields, f"{path}.not")

    else:
        validate_where(node[1], allowed_fields, f"{path}.{op}.left")
        validate_where(node[2], allowed_fields, f"{path}.{op}.right")

    return node


def validate_order_by(
    fields: tuple[str, ...],
    allowed_fields: Collection[str] | None = None,
) -> tuple[str, ...]:
    """Validate order_by entries ("field" or "-field").

    Raises:
        InvalidArgument: If an entry is empty or references an unknown field.
    """
    if not fields:
        raise InvalidArgument("order_by requires at least one field", argument="order_by")
    for i, order_field in enumerate(fields):
        if not isinstance(order_field, str):
            raise InvalidArgument(
                f"Order field must be a string, got {type(order_field).__name__}",
                argument=f"order_by[{i}]",
                value=order_field,
            )
        _check_field(order_field.removeprefix("-"), allowed_fields, f"order_by[{i}]")
    return fields


def validate_non_negative(value: Any, argument: str) -> int:
    """Validate a pagination value (limit/offset).

    Raises:
        InvalidArgument: If the value is not a non-negative integer.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgument(
            f"{argument.capitalize()} must be an integer, got {type(value).__name__}",
            argument=argument,
            value=value,
        )
    if value < 0:
        raise InvalidArgument(f"{argument.capitalize()} must be non-negative", argument=argument, value=value)
    return value


__all__ = [
    "validate_where",
    "validate_order_by",
    "validate_non_negative",
    "get_expected_arity",
    "ALL_KNOWN_OPS",
    "ARITY_2_UNARY",
    "ARITY_3_COMPARISON",
    "ARITY_3_LOGICAL",
]
