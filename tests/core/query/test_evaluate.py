"""Tests for in-process filter evaluation."""

import pytest

from docgroup.core.query.evaluate import matches
from docgroup.core.query.types import (
    and_,
    contains,
    endswith,
    eq,
    exists,
    gt,
    gte,
    in_,
    lt,
    ne,
    not_,
    or_,
    startswith,
)

DOC = {"id": 1, "name": "Alice", "age": 30, "email": None}


def test_none_matches_everything():
    assert matches(None, DOC)
    assert matches(None, {})


@pytest.mark.parametrize(
    ("node", "expected"),
    [
        (eq("name", "Alice"), True),
        (eq("name", "Bob"), False),
        (ne("name", "Bob"), True),
        (gt("age", 29), True),
        (gte("age", 30), True),
        (lt("age", 30), False),
        (in_("id", [1, 2]), True),
        (in_("id", [3]), False),
        (contains("name", "lic"), True),
        (startswith("name", "Al"), True),
        (endswith("name", "ce"), True),
        (endswith("name", "x"), False),
        (exists("email"), True),
        (exists("phone"), False),
    ],
)
def test_leaf_operators(node, expected):
    assert matches(node, DOC) is expected


def test_logical_operators():
    assert matches(and_(eq("id", 1), gt("age", 18)), DOC)
    assert not matches(and_(eq("id", 1), gt("age", 40)), DOC)
    assert matches(or_(eq("id", 2), eq("name", "Alice")), DOC)
    assert matches(not_(eq("id", 2)), DOC)


def test_missing_field_compares_as_none():
    assert matches(eq("phone", None), DOC)
    assert not matches(ne("phone", None), DOC)
    assert matches(in_("phone", [None]), DOC)


def test_ordering_never_matches_missing_or_incomparable():
    assert not matches(gt("phone", 1), DOC)
    assert not matches(gt("email", 1), DOC)
    assert not matches(gt("name", 1), DOC)


def test_string_operators_on_non_strings():
    assert not matches(contains("age", "3"), DOC)


def test_unknown_operator_raises():
    with pytest.raises(ValueError, match="Unknown operator"):
        matches(("regex", "name", "A.*"), DOC)
