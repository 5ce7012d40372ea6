"""GET: filtered or aggregated reads with keyset pagination."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from .aggregation import AggregationPipelineBuilder
from .escaping import escape_path
from .filters import FilterBuilder
from .models import ExchangeResponse, ExchangeStatus, Paging
from .pagination import (
    CursorStream,
    build_paging_token,
    read_page,
    resume_filter,
)
from .serialization import doc_to_item

if TYPE_CHECKING:
    from .models import ExchangeRequest

logger = logging.getLogger("mongo_transporter.retrieval")


class DocumentReader:
    """Reads one page of items for a GET request."""

    def __init__(
        self,
        filter_builder: FilterBuilder | None = None,
        pipeline_builder: AggregationPipelineBuilder | None = None,
    ) -> None:
        self._filter_builder = filter_builder or FilterBuilder()
        self._pipeline_builder = pipeline_builder or AggregationPipelineBuilder(
            self._filter_builder
        )

    def _token_fragment(self, request: ExchangeRequest) -> dict[str, Any] | None:
        """Return the paging token's ``query`` when it can narrow this read.

        Only the exact fragment issued for ``pageAfter`` is accepted, and only
        on an unsorted read that is not an id lookup, where the cursor runs in
        ``_id`` order.
        """
        fragment = request.params.get("query")
        if fragment is None:
            return None
        page_after = request.page_after
        if (
            page_after is None
            or request.item_id is not None
            or request.sort
            or fragment != resume_filter(page_after)
        ):
            logger.debug("Ignoring paging query %r", fragment)
            return None
        return resume_filter(page_after)

    def build_read_filter(self, request: ExchangeRequest) -> dict[str, Any]:
        """Filter for a plain read, narrowed by a paging token when safe."""
        filter_doc = self._filter_builder.build_filter(
            {"type": request.item_type, "id": request.item_id},
            request.endpoint.query,
            request.params,
        )
        fragment = self._token_fragment(request)
        if fragment is not None and "_id" not in filter_doc:
            filter_doc.update(fragment)
        return filter_doc

    def cursor_sort(self, request: ExchangeRequest) -> list[tuple[str, int]]:
        """Sort keys for a plain read.

        Paged reads end on ``_id`` so every request walks the same order and
        ``pageAfter`` resumes where the previous page stopped.
        """
        keys = [
            (escape_path(field), direction)
            for field, direction in (request.sort or {}).items()
        ]
        paged = request.page_size is not None or request.page_after is not None
        if paged and all(field != "_id" for field, _ in keys):
            keys.append(("_id", 1))
        return keys

    def open_cursor(self, request: ExchangeRequest, collection: Any) -> Any:
        context = {**request.params, "type": request.item_type}
        pipeline = self._pipeline_builder.build_pipeline(
            request.endpoint.aggregation, context
        )
        if pipeline is not None:
            logger.debug("Aggregating with %d pipeline steps", len(pipeline))
            return collection.aggregate(pipeline)

        cursor = collection.find(self.build_read_filter(request))
        sort = self.cursor_sort(request)
        if sort:
            cursor = cursor.sort(sort)
        return cursor

    async def get_docs(
        self, request: ExchangeRequest, collection: Any
    ) -> ExchangeResponse:
        """Run the read and shape the response.

        An empty result is ``notfound`` only when a specific id was asked for.
        """
        page_size = request.page_size
        try:
            cursor = self.open_cursor(request, collection)
            page = await read_page(
                CursorStream(cursor),
                page_size=page_size,
                page_after=request.page_after,
            )
        except PyMongoError as e:
            logger.warning("Read from %s failed: %s", request.endpoint.collection, e)
            return ExchangeResponse(status=ExchangeStatus.ERROR, error=str(e))

        if not page and request.item_id:
            return ExchangeResponse(
                status=ExchangeStatus.NOTFOUND,
                error=(
                    f"Could not find '{request.item_id}' "
                    f"of type '{request.item_type}'"
                ),
            )

        paging = None
        if page_size:
            paging = Paging(next=build_paging_token(page, request))
        return ExchangeResponse(
            status=ExchangeStatus.OK,
            data=[doc_to_item(doc) for doc in page],
            paging=paging,
        )
