from docgroup.core.query.evaluate import matches
from docgroup.core.query.types import (
    Assignments,
    Document,
    QuerySpec,
    WhereNode,
    and_,
    combine_where,
    contains,
    endswith,
    eq,
    exists,
    gt,
    gte,
    in_,
    lt,
    lte,
    ne,
    not_,
    or_,
    startswith,
)
from docgroup.core.query.validation import validate_where

__all__ = [
    "Assignments",
    "Document",
    "QuerySpec",
    "WhereNode",
    "and_",
    "combine_where",
    "contains",
    "endswith",
    "eq",
    "exists",
    "gt",
    "gte",
    "in_",
    "lt",
    "lte",
    "matches",
    "ne",
    "not_",
    "or_",
    "startswith",
    "validate_where",
]
