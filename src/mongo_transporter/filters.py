"""Native filter documents from item references and query conditions."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .escaping import escape_path
from .exceptions import MongoQueryError
from .models import ComparisonOperator, QueryCondition, primary_key

_MONGO_OP_MAP: dict[ComparisonOperator, str] = {
    ComparisonOperator.NE: "$ne",
    ComparisonOperator.GT: "$gt",
    ComparisonOperator.GTE: "$gte",
    ComparisonOperator.LT: "$lt",
    ComparisonOperator.LTE: "$lte",
    ComparisonOperator.IN: "$in",
    ComparisonOperator.NIN: "$nin",
    ComparisonOperator.EXISTS: "$exists",
    ComparisonOperator.REGEX: "$regex",
}


def resolve_value(
    condition: QueryCondition, params: Mapping[str, Any] | None
) -> Any:
    """Return the comparand of a condition, looking up ``param`` if set."""
    if condition.param is not None:
        return (params or {}).get(condition.param)
    return condition.value


def compile_comparison(op: ComparisonOperator | None, value: Any) -> Any:
    """Compile the right-hand side of one condition.

    Equality compiles to the bare value, every other operator to
    ``{"$op": value}``.
    """
    if op is None or op == ComparisonOperator.EQ:
        return value
    mongo_op = _MONGO_OP_MAP[op]
    if op in {ComparisonOperator.IN, ComparisonOperator.NIN}:
        value = value if isinstance(value, list) else [value]
    elif op == ComparisonOperator.REGEX and not isinstance(value, str):
        raise MongoQueryError(f"regex requires a string pattern, got {value!r}")
    elif op == ComparisonOperator.EXISTS and not isinstance(value, bool):
        raise MongoQueryError(f"exists requires a boolean, got {value!r}")
    return {mongo_op: value}


class FilterBuilder:
    """Builds MongoDB filter documents.

    With query conditions the filter is a fold over them; without, it selects
    one item by primary key or all items of a type.
    """

    def fold_conditions(
        self,
        conditions: Sequence[QueryCondition],
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Fold conditions into one filter. Later conditions on a path win."""
        filter_doc: dict[str, Any] = {}
        for condition in conditions:
            filter_doc[escape_path(condition.path)] = compile_comparison(
                condition.op, resolve_value(condition, params)
            )
        return filter_doc

    def build_filter(
        self,
        item_ref: Mapping[str, Any] | None,
        query: Sequence[QueryCondition] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the filter for a read, write or delete.

        Args:
            item_ref: Mapping with ``type`` and optionally ``id``.
            query: Endpoint query conditions, if any.
            params: Request parameters that ``param`` conditions refer to.
        """
        if query:
            return self.fold_conditions(query, params)
        ref = item_ref or {}
        item_type = ref.get("type")
        item_id = ref.get("id")
        if item_id is not None:
            return {"_id": primary_key(item_type, item_id)}
        return {"type": item_type}
