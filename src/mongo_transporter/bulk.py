"""SET and DELETE over one or many items with per-item failure isolation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .models import Action, ExchangeResponse, ExchangeStatus, OperationResult
from .serialization import item_key, item_to_doc

logger = logging.getLogger("mongo_transporter.bulk")

_ACTION_NAMES = {Action.SET: "updating", Action.DELETE: "deleting"}


class BulkOperationExecutor:
    """Runs one write or delete per item concurrently.

    Items are addressed by their derived primary key only, so an item
    missing ``type`` or ``id`` fails on its own without touching the store.
    Every item is attempted. A failing item is reported in its own
    :class:`OperationResult`; the response status is ``error`` when any item
    failed.
    """

    async def _perform_one(
        self, item: dict[str, Any], action: Action, collection: Any
    ) -> OperationResult:
        item_id = item.get("id") if isinstance(item, dict) else None
        item_type = item.get("type") if isinstance(item, dict) else None
        try:
            filter_doc = {"_id": item_key(item)}
            if action == Action.SET:
                await collection.replace_one(filter_doc, item_to_doc(item), upsert=True)
            else:
                await collection.delete_one(filter_doc)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "%s of %s:%s failed: %s", action.value, item_type, item_id, e
            )
            return OperationResult(
                id=item_id, type=item_type, status=ExchangeStatus.ERROR, error=str(e)
            )
        return OperationResult(id=item_id, type=item_type)

    async def execute(
        self,
        items: dict[str, Any] | list[dict[str, Any]],
        action: Action,
        collection: Any,
    ) -> ExchangeResponse:
        """Apply ``action`` to every item and aggregate the outcomes.

        Args:
            items: One item or a list of items.
            action: ``Action.SET`` (upsert by primary key) or
                ``Action.DELETE``.
            collection: Motor collection (or anything with the same
                ``replace_one``/``delete_one`` coroutines).

        Returns:
            Response whose ``data`` holds one result per item, in input order.
        """
        batch = items if isinstance(items, list) else [items]
        results = await asyncio.gather(
            *(self._perform_one(item, action, collection) for item in batch)
        )
        if any(result.status == ExchangeStatus.ERROR for result in results):
            return ExchangeResponse(
                status=ExchangeStatus.ERROR,
                error=f"Error {_ACTION_NAMES[action]} item(s) in mongodb",
                data=list(results),
            )
        return ExchangeResponse(status=ExchangeStatus.OK, data=list(results))
