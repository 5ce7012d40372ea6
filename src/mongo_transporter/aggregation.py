"""Aggregation pipelines from sort, group and query stages."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .escaping import escape_key, escape_path
from .exceptions import MongoQueryError
from .filters import FilterBuilder
from .models import (
    AggregationStage,
    GroupStage,
    QueryCondition,
    QueryStage,
    SortStage,
)

logger = logging.getLogger("mongo_transporter.aggregation")


def _field_ref(path: str) -> str:
    return f"${escape_path(path)}"


def _output_key(path: str) -> str:
    return escape_key(path.replace("\\.", "."))


class AggregationPipelineBuilder:
    """Compiles aggregation stages to a MongoDB pipeline.

    Stages without the data they need are dropped rather than rejected. When
    nothing is left the builder returns ``None`` so callers can tell "no
    aggregation" apart from an empty pipeline.
    """

    def __init__(self, filter_builder: FilterBuilder | None = None) -> None:
        self._filter_builder = filter_builder or FilterBuilder()

    def build_sort(self, stage: SortStage) -> dict[str, Any] | None:
        if not stage.sort_by:
            return None
        return {
            "$sort": {
                escape_path(field): direction
                for field, direction in stage.sort_by.items()
            }
        }

    def build_group(self, stage: GroupStage) -> dict[str, Any] | None:
        if not stage.id or not stage.group_by:
            return None
        group: dict[str, Any] = {
            "_id": {_output_key(field): _field_ref(field) for field in stage.id}
        }
        for field, aggregator in stage.group_by.items():
            group[_output_key(field)] = {f"${aggregator}": _field_ref(field)}
        return {"$group": group}

    def build_match(
        self, stage: QueryStage, context: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        if not stage.query:
            return None
        conditions: list[QueryCondition] = []
        item_type = context.get("type")
        if item_type is not None:
            conditions.append(QueryCondition(path="type", value=item_type))
        conditions.extend(stage.query)
        try:
            match = self._filter_builder.fold_conditions(conditions, context)
        except MongoQueryError as e:
            logger.debug("Dropping query stage: %s", e)
            return None
        return {"$match": match}

    def build_stage(
        self, stage: AggregationStage, context: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        if isinstance(stage, SortStage):
            return self.build_sort(stage)
        if isinstance(stage, GroupStage):
            return self.build_group(stage)
        return self.build_match(stage, context)

    def build_pipeline(
        self,
        stages: Sequence[AggregationStage] | None,
        context: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]] | None:
        """Build the pipeline, or ``None`` when there is nothing to run.

        Args:
            stages: Stages in execution order.
            context: Request parameters; ``type`` seeds every match step and
                ``param`` conditions are resolved against it.
        """
        if stages is None:
            return None
        ctx = context or {}
        pipeline = [
            step
            for step in (self.build_stage(stage, ctx) for stage in stages)
            if step is not None
        ]
        if not pipeline:
            logger.debug("All %d aggregation stages dropped", len(stages))
            return None
        return pipeline
