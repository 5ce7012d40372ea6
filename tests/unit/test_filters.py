"""Unit tests for FilterBuilder."""

from __future__ import annotations

import pytest

from mongo_transporter.exceptions import MongoQueryError
from mongo_transporter.filters import FilterBuilder, compile_comparison
from mongo_transporter.models import ComparisonOperator, QueryCondition


@pytest.fixture
def builder() -> FilterBuilder:
    return FilterBuilder()


def test_filter_by_type_and_id(builder) -> None:
    assert builder.build_filter({"type": "entry", "id": "x"}, None, {}) == {
        "_id": "entry:x"
    }


def test_filter_by_type_only(builder) -> None:
    assert builder.build_filter({"type": "entry"}, None, {}) == {"type": "entry"}


def test_empty_query_falls_back_to_reference(builder) -> None:
    assert builder.build_filter({"type": "entry", "id": "x"}, [], {}) == {
        "_id": "entry:x"
    }


def test_query_resolves_params_and_values(builder) -> None:
    query = [
        QueryCondition(path="type", param="type"),
        QueryCondition(path="attributes.title", value="Entry 2"),
    ]

    result = builder.build_filter({"type": "entry"}, query, {"type": "entry"})

    assert result == {"type": "entry", "attributes.title": "Entry 2"}


def test_query_ignores_item_reference(builder) -> None:
    query = [QueryCondition(path="status", value="open")]

    assert builder.build_filter({"type": "entry", "id": "x"}, query, {}) == {
        "status": "open"
    }


def test_query_escapes_paths(builder) -> None:
    query = [
        QueryCondition(path="personalia\\.age", op="gt", value=18),
        QueryCondition(path="$type", value="entry"),
    ]

    assert builder.build_filter(None, query, {}) == {
        "personalia\\_age": {"$gt": 18},
        "\\$type": "entry",
    }


def test_later_condition_on_same_path_wins(builder) -> None:
    query = [
        QueryCondition(path="status", value="open"),
        QueryCondition(path="status", value="closed"),
    ]

    assert builder.build_filter(None, query, {}) == {"status": "closed"}


def test_missing_param_resolves_to_none(builder) -> None:
    query = [QueryCondition(path="owner", param="user")]

    assert builder.build_filter(None, query, {}) == {"owner": None}


def test_inputs_are_not_mutated(builder) -> None:
    ref = {"type": "entry", "id": "x"}
    params = {"type": "entry"}
    query = [QueryCondition(path="type", param="type")]

    first = builder.build_filter(ref, query, params)
    first["extra"] = True
    second = builder.build_filter(ref, query, params)

    assert ref == {"type": "entry", "id": "x"}
    assert params == {"type": "entry"}
    assert second == {"type": "entry"}


@pytest.mark.parametrize(
    ("op", "value", "expected"),
    [
        (None, 5, 5),
        (ComparisonOperator.EQ, 5, 5),
        (ComparisonOperator.NE, 5, {"$ne": 5}),
        (ComparisonOperator.GTE, 5, {"$gte": 5}),
        (ComparisonOperator.LT, 5, {"$lt": 5}),
        (ComparisonOperator.IN, "a", {"$in": ["a"]}),
        (ComparisonOperator.NIN, ["a", "b"], {"$nin": ["a", "b"]}),
        (ComparisonOperator.EXISTS, True, {"$exists": True}),
        (ComparisonOperator.REGEX, "^ent", {"$regex": "^ent"}),
    ],
)
def test_compile_comparison(op, value, expected) -> None:
    assert compile_comparison(op, value) == expected


def test_compile_regex_requires_string() -> None:
    with pytest.raises(MongoQueryError, match="regex"):
        compile_comparison(ComparisonOperator.REGEX, 5)


def test_compile_exists_requires_bool() -> None:
    with pytest.raises(MongoQueryError, match="exists"):
        compile_comparison(ComparisonOperator.EXISTS, "yes")
