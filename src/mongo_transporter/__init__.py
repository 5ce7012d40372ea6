"""MongoDB transporter.

Translates storage-agnostic GET/SET/DELETE requests (filters, aggregation
stages, keyset pages, bulk writes) into MongoDB operations through Motor.
"""

from __future__ import annotations

from .aggregation import AggregationPipelineBuilder
from .bulk import BulkOperationExecutor
from .connection import MongoConnectionManager
from .escaping import (
    escape_key,
    escape_keys,
    escape_path,
    unescape_key,
    unescape_keys,
    unescape_path,
)
from .exceptions import (
    MongoConnectionError,
    MongoQueryError,
    TransporterError,
    TransporterValidationError,
)
from .filters import FilterBuilder
from .models import (
    Action,
    AggregationStage,
    ComparisonOperator,
    EndpointOptions,
    ExchangeRequest,
    ExchangeResponse,
    ExchangeStatus,
    GroupStage,
    OperationResult,
    Paging,
    PagingToken,
    QueryCondition,
    QueryStage,
    SortStage,
    SourceOptions,
)
from .pagination import CursorStream, DocumentStream, build_paging_token, read_page
from .retrieval import DocumentReader
from .serialization import doc_to_item, item_to_doc
from .transporter import MongoTransporter

__all__ = [
    # Adapter
    "MongoTransporter",
    "MongoConnectionManager",
    # Translation
    "FilterBuilder",
    "AggregationPipelineBuilder",
    "DocumentReader",
    "BulkOperationExecutor",
    "DocumentStream",
    "CursorStream",
    "read_page",
    "build_paging_token",
    # Escaping and serialization
    "escape_key",
    "unescape_key",
    "escape_path",
    "unescape_path",
    "escape_keys",
    "unescape_keys",
    "item_to_doc",
    "doc_to_item",
    # Models
    "Action",
    "AggregationStage",
    "ComparisonOperator",
    "EndpointOptions",
    "ExchangeRequest",
    "ExchangeResponse",
    "ExchangeStatus",
    "GroupStage",
    "OperationResult",
    "Paging",
    "PagingToken",
    "QueryCondition",
    "QueryStage",
    "SortStage",
    "SourceOptions",
    # Exceptions
    "TransporterError",
    "TransporterValidationError",
    "MongoConnectionError",
    "MongoQueryError",
]
