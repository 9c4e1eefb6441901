"""In-process evaluation of WhereNode filters against documents.

Used by stores that cannot push filters down to a backend (InMemoryStore).
Semantics follow document-store conventions: ``eq`` against a missing field
compares with None, ordering operators never match missing or incomparable
values.
"""

import operator
from collections.abc import Callable
from typing import Any

from docgroup.core.query.types import Document, WhereNode

_MISSING = object()

_ORDERING: dict[str, Callable[[Any, Any], bool]] = {
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


def _compare(op: str, actual: Any, expected: Any) -> bool:
    if actual is _MISSING or actual is None or expected is None:
        return False
    try:
        return bool(_ORDERING[op](actual, expected))
    except TypeError:
        return False


def matches(node: WhereNode | None, document: Document) -> bool:
    """Return True when ``document`` satisfies ``node``.

    Args:
        node: Filter AST, or None to match every document.
        document: Document keyed by physical field names.

    Returns:
        Whether the document matches.
    """
    if node is None:
        return True

    op = node[0]
    if op == "and":
        return matches(node[1], document) and matches(node[2], document)
    if op == "or":
        return matches(node[1], document) or matches(node[2], document)
    if op == "not":
        return not matches(node[1], document)
    if op == "exists":
        return node[1] in document

    actual = document.get(node[1], _MISSING)
    expected = node[2]

    if op == "eq":
        return (None if actual is _MISSING else actual) == expected
    if op == "ne":
        return (None if actual is _MISSING else actual) != expected
    if op == "in":
        return (None if actual is _MISSING else actual) in expected
    if op in _ORDERING:
        return _compare(op, actual, expected)
    if not isinstance(actual, str):
        return False
    if op == "contains":
        return expected in actual
    if op == "startswith":
        return actual.startswith(expected)
    if op == "endswith":
        return actual.endswith(expected)

    raise ValueError(f"Unknown operator '{op}'")


__all__ = ["matches"]
