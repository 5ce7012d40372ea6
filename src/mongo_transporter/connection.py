"""MongoConnectionManager: Motor client lifecycle and collection lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import MongoConnectionError, TransporterValidationError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient

    from .models import EndpointOptions


class MongoConnectionManager:
    """Wrap a Motor client with lifecycle and health-check helpers."""

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._kwargs = kwargs
        self._client: AsyncIOMotorClient[Any] | None = None

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create and cache the Motor client. Idempotent."""
        if self._client is not None:
            return self._client
        try:
            from motor.motor_asyncio import AsyncIOMotorClient
        except ImportError as e:
            raise MongoConnectionError(
                "motor is required; install with motor>=3.3.0"
            ) from e
        try:
            self._client = AsyncIOMotorClient(
                self._url,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                **self._kwargs,
            )
            return self._client
        except Exception as e:
            raise MongoConnectionError(str(e)) from e

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client; raises if not connected."""
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def close(self) -> None:
        """Close the client (synchronous; Motor client.close() is sync)."""
        if self._client is not None:
            self._client.close()
            self._client = None

    async def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:  # noqa: BLE001
            return False

    def collection(self, endpoint: EndpointOptions) -> Any:
        """Return the collection an endpoint points at.

        ``endpoint.db`` falls back to the manager's database, then to the
        client's default database.
        """
        if not endpoint.collection:
            raise TransporterValidationError(
                "Could not get the collection specified in the request"
            )
        database_name = endpoint.db or self._database
        try:
            if database_name:
                db = self.client.get_database(database_name)
            else:
                db = self.client.get_database()
        except MongoConnectionError:
            raise
        except Exception as e:
            raise TransporterValidationError(
                "Could not get the database specified in the request"
            ) from e
        return db[endpoint.collection]
