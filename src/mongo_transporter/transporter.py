"""MongoTransporter: the adapter surface the host talks to."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from .bulk import BulkOperationExecutor
from .connection import MongoConnectionManager
from .exceptions import TransporterError, TransporterValidationError
from .filters import FilterBuilder
from .models import (
    Action,
    EndpointOptions,
    ExchangeRequest,
    ExchangeResponse,
    ExchangeStatus,
    SourceOptions,
)
from .retrieval import DocumentReader

logger = logging.getLogger("mongo_transporter.transporter")


def _error_response(message: str) -> dict[str, Any]:
    return ExchangeResponse(status=ExchangeStatus.ERROR, error=message).to_dict()


class MongoTransporter:
    """Translates host requests into MongoDB operations.

    Usage::

        transporter = MongoTransporter()
        connection = await transporter.connect({"uri": "mongodb://db:27017"})
        response = await transporter.send(
            {
                "action": "GET",
                "params": {"type": "entry", "pageSize": 50},
                "endpoint": {"db": "store", "collection": "documents"},
            },
            connection,
        )
        transporter.disconnect(connection)
    """

    def __init__(self, filter_builder: FilterBuilder | None = None) -> None:
        filter_builder = filter_builder or FilterBuilder()
        self._reader = DocumentReader(filter_builder)
        self._executor = BulkOperationExecutor()

    def prepare_endpoint(
        self,
        endpoint_options: EndpointOptions | dict[str, Any] | None,
        source_options: SourceOptions | dict[str, Any] | None = None,
    ) -> EndpointOptions:
        """Merge source-level ``db``/``collection`` under the endpoint options."""
        endpoint = EndpointOptions.model_validate(endpoint_options or {})
        source = SourceOptions.model_validate(source_options or {})
        update: dict[str, Any] = {}
        if endpoint.db is None and source.db is not None:
            update["db"] = source.db
        if endpoint.collection is None and source.collection is not None:
            update["collection"] = source.collection
        return endpoint.model_copy(update=update)

    async def connect(
        self,
        source_options: SourceOptions | dict[str, Any] | None = None,
        connection: MongoConnectionManager | None = None,
    ) -> MongoConnectionManager:
        """Return an open connection, reusing ``connection`` when it is open."""
        if connection is not None and connection.is_connected:
            return connection
        source = SourceOptions.model_validate(source_options or {})
        manager = MongoConnectionManager(
            source.uri,
            database=source.db,
            server_selection_timeout_ms=source.server_selection_timeout_ms,
            connect_timeout_ms=source.connect_timeout_ms,
        )
        await manager.connect()
        return manager

    def disconnect(self, connection: MongoConnectionManager | None) -> None:
        if connection is not None:
            connection.close()

    async def serialize(self, request: Any) -> Any:
        return request

    async def normalize(self, response: Any, request: Any) -> Any:  # noqa: ARG002
        return response

    async def send(
        self,
        request: ExchangeRequest | dict[str, Any],
        connection: MongoConnectionManager,
    ) -> dict[str, Any]:
        """Execute a request and return the response in wire shape."""
        try:
            exchange = ExchangeRequest.model_validate(request)
        except ValidationError as e:
            logger.debug("Rejected malformed request: %s", e)
            return _error_response(f"Malformed request: {e}")

        try:
            action = Action(exchange.action)
        except ValueError:
            return ExchangeResponse(status=ExchangeStatus.NOACTION).to_dict()

        try:
            collection = connection.collection(exchange.endpoint)
            if action == Action.GET:
                response = await self._reader.get_docs(exchange, collection)
            else:
                if exchange.data is None:
                    raise TransporterValidationError(
                        f"No items given to {action.value}"
                    )
                response = await self._executor.execute(
                    exchange.data, action, collection
                )
        except TransporterError as e:
            return _error_response(str(e))
        return response.to_dict()
