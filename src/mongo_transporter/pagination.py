"""Keyset pagination over a forward-only document stream.

A page is read by skipping the stream up to and including the record whose
``_id`` equals ``page_after``, then taking up to ``page_size`` records. The
returned token names the last record of the page so the next request can
resume after it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from .models import PagingToken

if TYPE_CHECKING:
    from collections.abc import AsyncIterable

    from .models import ExchangeRequest

logger = logging.getLogger("mongo_transporter.pagination")


class DocumentStream(Protocol):
    """Pull-based sequence of documents. ``next()`` returns ``None`` at the end."""

    async def next(self) -> dict[str, Any] | None: ...


class CursorStream:
    """Adapt an async-iterable driver cursor to :class:`DocumentStream`."""

    def __init__(self, cursor: AsyncIterable[dict[str, Any]]) -> None:
        self._iterator = cursor.__aiter__()

    async def next(self) -> dict[str, Any] | None:
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            return None


async def _skip_past(stream: DocumentStream, page_after: str) -> bool:
    """Consume the stream through the record keyed ``page_after``."""
    while True:
        doc = await stream.next()
        if doc is None:
            return False
        if doc.get("_id") == page_after:
            return True


async def read_page(
    stream: DocumentStream,
    *,
    page_size: int | None = None,
    page_after: str | None = None,
) -> list[dict[str, Any]]:
    """Read one page from ``stream``.

    Without ``page_size`` the stream is read to the end. When ``page_after``
    is not found the page is empty, the same as past the last page.
    """
    if page_after and not await _skip_past(stream, page_after):
        logger.debug("Resume key %r not found; returning an empty page", page_after)
        return []

    page: list[dict[str, Any]] = []
    while page_size is None or len(page) < page_size:
        doc = await stream.next()
        if doc is None:
            break
        page.append(doc)
    return page


def resume_filter(page_after: Any) -> dict[str, Any]:
    """Filter selecting ``page_after`` and every key after it in ``_id`` order."""
    return {"_id": {"$gte": page_after}}


def build_paging_token(
    page: list[dict[str, Any]], request: ExchangeRequest
) -> PagingToken | None:
    """Return the token for the page after ``page``.

    ``None`` when the request did not ask for pages or the page is empty.
    The token's ``query`` is an inclusive lower bound on ``_id`` for stores
    that resume by filter instead of by cursor.
    """
    page_size = request.page_size
    if not page_size or not page:
        return None
    page_after = page[-1].get("_id")
    return PagingToken(
        type=request.item_type,
        query=resume_filter(page_after),
        page_after=page_after,
        page_size=page_size,
    )
