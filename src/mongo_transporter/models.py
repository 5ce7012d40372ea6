"""Request, response and descriptor models exchanged with the host.

Items themselves are plain dicts carrying ``type`` and ``id``; only the
envelope around them and the declarative descriptors are modelled here.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from .exceptions import TransporterValidationError

logger = logging.getLogger("mongo_transporter.models")


class Action(str, Enum):
    """Actions understood by the transporter."""

    GET = "GET"
    SET = "SET"
    DELETE = "DELETE"


class ExchangeStatus(str, Enum):
    """Status of a response or of a single item operation."""

    OK = "ok"
    ERROR = "error"
    NOTFOUND = "notfound"
    NOACTION = "noaction"


class ComparisonOperator(str, Enum):
    """Comparison operators accepted in query conditions."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NIN = "nin"
    EXISTS = "exists"
    REGEX = "regex"


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class QueryCondition(_Descriptor):
    """One ``path <op> comparand`` condition.

    The comparand is either ``value`` or the request parameter named by
    ``param``. A missing ``op`` means equality.
    """

    path: str
    value: Any = None
    param: str | None = None
    op: ComparisonOperator | None = None

    @model_validator(mode="after")
    def _single_comparand(self) -> QueryCondition:
        if self.param is not None and "value" in self.model_fields_set:
            raise ValueError(
                f"Query condition on '{self.path}' sets both 'value' and 'param'"
            )
        return self


class SortStage(_Descriptor):
    type: Literal["sort"] = "sort"
    sort_by: dict[str, int] | None = Field(default=None, alias="sortBy")


class GroupStage(_Descriptor):
    type: Literal["group"] = "group"
    id: list[str] | None = None
    group_by: dict[str, str] | None = Field(default=None, alias="groupBy")


class QueryStage(_Descriptor):
    type: Literal["query"] = "query"
    query: list[QueryCondition] | None = None


AggregationStage = Annotated[
    SortStage | GroupStage | QueryStage, Field(discriminator="type")
]

_STAGE_ADAPTER: TypeAdapter[AggregationStage] = TypeAdapter(AggregationStage)


class SourceOptions(_Descriptor):
    """Source-level connection settings and endpoint defaults."""

    uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("uri", "baseUri", "dbUri"),
    )
    db: str | None = None
    collection: str | None = None
    server_selection_timeout_ms: int = 5000
    connect_timeout_ms: int = 10000


class EndpointOptions(_Descriptor):
    """Per-endpoint options.

    Attributes:
        db: Database name; ``None`` uses the client's default database.
        collection: Collection name. Required by every action.
        query: Conditions replacing the default ``type``/``id`` filter.
        sort: Sort document, ``{field: 1 | -1}``, applied to plain reads.
        aggregation: Aggregation stages; when any survive, reads go through
            ``aggregate`` instead of ``find``. Entries that are not a valid
            stage are dropped.
    """

    db: str | None = None
    collection: str | None = None
    query: list[QueryCondition] | None = None
    sort: dict[str, int] | None = None
    aggregation: list[AggregationStage] | None = None

    @field_validator("aggregation", mode="before")
    @classmethod
    def _drop_invalid_stages(cls, stages: Any) -> Any:
        if not isinstance(stages, list):
            return stages
        valid: list[AggregationStage] = []
        for stage in stages:
            try:
                valid.append(_STAGE_ADAPTER.validate_python(stage))
            except ValidationError as e:
                logger.debug("Dropping aggregation stage %r: %s", stage, e)
        return valid


class RequestOptions(_Descriptor):
    sort: dict[str, int] | None = None


class PagingToken(_Descriptor):
    """Everything needed to fetch the page after the one just returned."""

    type: str | None = None
    query: dict[str, Any] = Field(default_factory=dict)
    page_after: Any = Field(alias="pageAfter")
    page_size: int = Field(alias="pageSize")


class Paging(_Descriptor):
    next: PagingToken | None = None


class OperationResult(_Descriptor):
    """Outcome of a write or delete of one item."""

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)

    id: str | int | None = None
    type: str | None = None
    status: ExchangeStatus = ExchangeStatus.OK
    error: str | None = None


class ExchangeRequest(_Descriptor):
    """A request issued by the host.

    ``type`` and ``id`` may be given on the request itself or in ``params``;
    the request fields win.
    """

    action: str
    type: str | None = None
    id: str | None = None
    data: dict[str, Any] | list[dict[str, Any]] | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    endpoint: EndpointOptions = Field(default_factory=EndpointOptions)
    options: RequestOptions | None = None

    @property
    def item_type(self) -> str | None:
        return self.type or self.params.get("type")

    @property
    def item_id(self) -> str | None:
        return self.id or self.params.get("id")

    @property
    def page_size(self) -> int | None:
        size = self.params.get("pageSize")
        if size is None:
            return None
        try:
            return int(size)
        except (TypeError, ValueError) as e:
            raise TransporterValidationError(
                f"pageSize must be an integer, got {size!r}"
            ) from e

    @property
    def page_after(self) -> str | None:
        return self.params.get("pageAfter")

    @property
    def sort(self) -> dict[str, int] | None:
        if self.options is not None and self.options.sort:
            return self.options.sort
        return self.endpoint.sort or None


class ExchangeResponse(BaseModel):
    """Normalized response handed back to the host."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    status: ExchangeStatus
    data: list[Any] | None = None
    error: str | None = None
    paging: Paging | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the wire shape: camelCase keys, absent fields omitted."""
        response: dict[str, Any] = {"status": self.status}
        if self.data is not None:
            response["data"] = [
                entry.model_dump(exclude_none=True)
                if isinstance(entry, OperationResult)
                else entry
                for entry in self.data
            ]
        if self.error is not None:
            response["error"] = self.error
        if self.paging is not None:
            response["paging"] = self.paging.model_dump(
                by_alias=True, exclude_none=True
            )
        return response


def primary_key(item_type: str | None, item_id: str | None) -> str:
    """Return the store primary key of an item, ``type:id``."""
    return f"{item_type}:{item_id}"
