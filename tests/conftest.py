"""Test configuration for the MongoDB transporter."""

import pytest

from mongo_transporter import MongoConnectionManager, MongoTransporter

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def mongo_connection():
    """Connection manager backed by mongomock instead of a real server."""
    try:
        from mongomock_motor import AsyncMongoMockClient
    except ImportError:
        pytest.skip("mongomock-motor not installed")

    connection = MongoConnectionManager.__new__(MongoConnectionManager)
    connection._client = AsyncMongoMockClient(default_database_name="test_db")
    connection._database = "test_db"
    connection._url = "mongodb://mock:27017"
    return connection


@pytest.fixture
def collection(mongo_connection):
    """The collection used by the exchange tests."""
    return mongo_connection.client.get_database("test")["documents"]


@pytest.fixture
def endpoint():
    return {"db": "test", "collection": "documents"}


@pytest.fixture
def transporter():
    return MongoTransporter()


@pytest.fixture
def send(transporter, mongo_connection):
    """Send a request through the transporter over the mock connection."""

    async def _send(request):
        return await transporter.send(request, mongo_connection)

    return _send
