"""Shared fixtures: isolated configuration and a fake Cosmos DB client."""

import asyncio
import uuid
from typing import Any, Optional

import pytest
from azure.core.exceptions import ServiceRequestError
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from src.catalog.config import (
    AppConfig,
    CosmosDBConfig,
    DataSourceConfig,
    LoggingConfig,
    ServerConfig,
)

FAKE_CONNECTION_STRING = "AccountEndpoint=https://fake.documents.azure.com:443/;AccountKey=c2VjcmV0;"


def make_config(
    uploads_dir: str = "public/uploads",
    connection_string: Optional[str] = FAKE_CONNECTION_STRING,
    prefer_remote: bool = True,
    activation_timeout: float = 1.0,
    connection_timeout: float = 0.5,
    socket_timeout: float = 2.0,
    page_limit: int = 5,
) -> AppConfig:
    """Build an AppConfig without touching config files or the environment."""
    return AppConfig(
        server=ServerConfig(host="127.0.0.1", port=3000, page_limit=page_limit, uploads_dir=uploads_dir),
        data_source=DataSourceConfig(
            prefer_remote=prefer_remote,
            activation_timeout=activation_timeout,
            connection_timeout=connection_timeout,
            socket_timeout=socket_timeout,
        ),
        cosmosdb=CosmosDBConfig(
            connection_string=connection_string,
            database_name="products_db_test",
            container_name="products",
        ),
        logging=LoggingConfig(level="DEBUG"),
    )


class FakeCosmosDBClient:
    """In-process double of CosmosDBClient.

    Stores documents in a dict, adds Cosmos-style system properties and
    raises the SDK's not-found and precondition-failed errors. Every write
    gets a fresh _etag, and replace_item honours a passed etag. Set
    ``fail_with`` to make every operation after connect raise that exception.
    """

    def __init__(self, connection_string: str = "", connect_delay: float = 0.0,
                 connect_error: Optional[BaseException] = None, **kwargs: Any):
        self.connection_string = connection_string
        self.options = kwargs
        self.connect_delay = connect_delay
        self.connect_error = connect_error
        self.fail_with: Optional[BaseException] = None
        self.connected = False
        self.closed = False
        self.documents: dict[str, dict] = {}

    async def connect(self) -> None:
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def close(self) -> None:
        self.closed = True
        self.connected = False

    def _check(self) -> None:
        if not self.connected:
            raise RuntimeError("CosmosDB client not connected. Call connect() first.")
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _with_system_properties(document: dict) -> dict:
        stored = dict(document)
        stored.update({"_rid": uuid.uuid4().hex[:8], "_self": "dbs/x/colls/y", "_etag": f'"{uuid.uuid4().hex}"',
                       "_attachments": "attachments/", "_ts": 1700000000})
        return stored

    async def create_item(self, item: dict) -> dict:
        self._check()
        stored = self._with_system_properties(item)
        self.documents[item["id"]] = stored
        return dict(stored)

    async def replace_item(self, item_id: str, item: dict, etag: Optional[str] = None) -> dict:
        self._check()
        if item_id not in self.documents:
            raise CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        if etag is not None and etag != self.documents[item_id]["_etag"]:
            raise CosmosAccessConditionFailedError(status_code=412, message="Precondition failed")
        stored = self._with_system_properties(item)
        self.documents[item_id] = stored
        return dict(stored)

    async def read_item(self, item_id: str, partition_key: str) -> dict:
        self._check()
        if item_id not in self.documents:
            raise CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        return dict(self.documents[item_id])

    async def delete_item(self, item_id: str, partition_key: str) -> None:
        self._check()
        if item_id not in self.documents:
            raise CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        del self.documents[item_id]

    async def query_items(self, query: str, parameters=None, partition_key=None) -> list:
        self._check()
        self.last_query = query
        docs = [dict(d) for d in self.documents.values()]
        if "ORDER BY c.created_seq ASC" in query:
            docs.sort(key=lambda d: d.get("created_seq", 0))
        return docs


@pytest.fixture
def fake_client() -> FakeCosmosDBClient:
    client = FakeCosmosDBClient(connection_string=FAKE_CONNECTION_STRING)
    client.connected = True
    return client


@pytest.fixture
def network_error() -> ServiceRequestError:
    return ServiceRequestError("Connection refused")
