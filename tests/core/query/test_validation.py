"""Tests for WhereNode and query-shaping validation."""

import pytest

from docgroup.core.exceptions import InvalidArgument
from docgroup.core.query.types import and_, eq, in_, not_
from docgroup.core.query.validation import (
    ALL_KNOWN_OPS,
    ARITY_2_UNARY,
    ARITY_3_COMPARISON,
    ARITY_3_LOGICAL,
    get_expected_arity,
    validate_non_negative,
    validate_order_by,
    validate_where,
)

FIELDS = ("id", "name", "email")


class TestArity:
    """Arity tables and lookup."""

    def test_known_operators(self):
        for op in ("eq", "ne", "gt", "gte", "lt", "lte", "in", "contains"):
            assert op in ARITY_3_COMPARISON
            assert get_expected_arity(op) == 3
        for op in ("and", "or"):
            assert op in ARITY_3_LOGICAL
        for op in ("exists", "not"):
            assert op in ARITY_2_UNARY
            assert get_expected_arity(op) == 2

    def test_unknown_operator(self):
        assert get_expected_arity("regex") == 0
        assert ARITY_2_UNARY | ARITY_3_COMPARISON | ARITY_3_LOGICAL == ALL_KNOWN_OPS


class TestValidateWhere:
    """validate_where accepts well-formed filters only."""

    def test_valid_tree_is_returned(self):
        node = and_(eq("id", 1), not_(in_("name", ["a", "b"])))
        assert validate_where(node, FIELDS) is node

    def test_none_is_rejected(self):
        with pytest.raises(InvalidArgument, match="must not be None"):
            validate_where(None)

    def test_non_tuple_is_rejected(self):
        with pytest.raises(InvalidArgument, match="must be a tuple"):
            validate_where(["eq", "id", 1])

    def test_empty_tuple(self):
        with pytest.raises(InvalidArgument, match="cannot be empty"):
            validate_where(())

    def test_unknown_operator(self):
        with pytest.raises(InvalidArgument, match="Unknown operator 'like'"):
            validate_where(("like", "name", "x"))

    def test_wrong_arity(self):
        with pytest.raises(InvalidArgument, match="requires 3 elements"):
            validate_where(("eq", "name"))

    def test_unknown_field(self):
        with pytest.raises(InvalidArgument, match="'age' is not a declared field"):
            validate_where(eq("age", 3), FIELDS)

    def test_unknown_field_in_nested_node(self):
        with pytest.raises(InvalidArgument) as exc_info:
            validate_where(and_(eq("id", 1), eq("age", 3)), FIELDS)
        assert exc_info.value.argument == "where.and.right[1]"

    def test_in_requires_list(self):
        with pytest.raises(InvalidArgument, match="must be a list"):
            validate_where(("in", "id", (1, 2)))

    def test_string_operator_requires_str(self):
        with pytest.raises(InvalidArgument, match="must be a string"):
            validate_where(("contains", "name", 3))

    def test_invalid_argument_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_where(("eq", "", 1))


class TestShapingValidation:
    """order_by, limit and offset checks."""

    def test_order_by_accepts_descending_prefix(self):
        assert validate_order_by(("-name", "id"), FIELDS) == ("-name", "id")

    def test_order_by_unknown_field(self):
        with pytest.raises(InvalidArgument):
            validate_order_by(("-age",), FIELDS)

    def test_order_by_empty(self):
        with pytest.raises(InvalidArgument, match="at least one field"):
            validate_order_by(())

    @pytest.mark.parametrize("value", [-1, 1.5, "3", True])
    def test_non_negative_rejects(self, value):
        with pytest.raises(InvalidArgument):
            validate_non_negative(value, "limit")

    def test_non_negative_accepts_zero(self):
        assert validate_non_negative(0, "offset") == 0
