"""Azure Cosmos DB client for product document storage."""

import logging
import re
from typing import Any, Optional

from azure.core import MatchConditions
from azure.cosmos.aio import CosmosClient
from azure.cosmos.aio._container import ContainerProxy
from azure.cosmos.aio._database import DatabaseProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

logger = logging.getLogger(__name__)

_ACCOUNT_KEY_RE = re.compile(r"(AccountKey=)[^;]*", re.IGNORECASE)


def redact_connection_string(connection_string: Optional[str]) -> str:
    """Mask the account key of a Cosmos DB connection string for logging."""
    if not connection_string:
        return "<not set>"
    return _ACCOUNT_KEY_RE.sub(r"\1***", connection_string)


class CosmosDBClient:
    """Async Cosmos DB client with connection management.

    Uses the NoSQL API for storing and querying product documents.
    Supports async context manager pattern for proper resource cleanup.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        container_name: str,
        partition_key_path: str = "/id",
        connection_timeout: Optional[float] = None,
        socket_timeout: Optional[float] = None,
    ):
        """Initialize the Cosmos DB client.

        Args:
            connection_string: Cosmos DB account connection string
            database_name: Name of the database to use
            container_name: Name of the container to use
            partition_key_path: Path to the partition key field (default: /id)
            connection_timeout: Seconds allowed to establish a connection
            socket_timeout: Seconds allowed for each read on an open connection
        """
        self._connection_string = connection_string
        self._database_name = database_name
        self._container_name = container_name
        self._partition_key_path = partition_key_path
        self._connection_timeout = connection_timeout
        self._socket_timeout = socket_timeout

        self._client: Optional[CosmosClient] = None
        self._database: Optional[DatabaseProxy] = None
        self._container: Optional[ContainerProxy] = None

    @property
    def is_connected(self) -> bool:
        return self._container is not None

    def _transport_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self._connection_timeout is not None:
            options["connection_timeout"] = self._connection_timeout
        if self._socket_timeout is not None:
            options["read_timeout"] = self._socket_timeout
        return options

    async def connect(self) -> None:
        """Establish connection and ensure database/container exist."""
        self._client = CosmosClient.from_connection_string(
            self._connection_string,
            **self._transport_options(),
        )
        await self._client.__aenter__()

        # Get or create database
        try:
            self._database = self._client.get_database_client(self._database_name)
            # Verify database exists by reading it
            await self._database.read()
        except CosmosResourceNotFoundError:
            logger.info(f"Creating Cosmos DB database '{self._database_name}'")
            self._database = await self._client.create_database(self._database_name)

        # Get or create container
        try:
            container = self._database.get_container_client(self._container_name)
            # Verify container exists by reading it
            await container.read()
        except CosmosResourceNotFoundError:
            logger.info(f"Creating Cosmos DB container '{self._container_name}'")
            container = await self._database.create_container(
                id=self._container_name,
                partition_key={"paths": [self._partition_key_path], "kind": "Hash"},
            )
        self._container = container

    async def close(self) -> None:
        """Close the Cosmos DB connection."""
        if self._client:
            await self._client.close()
            self._client = None
            self._database = None
            self._container = None

    async def __aenter__(self) -> "CosmosDBClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Async context manager exit with cleanup."""
        await self.close()
        return False

    def _require_container(self) -> ContainerProxy:
        if self._container is None:
            raise RuntimeError("CosmosDB client not connected. Call connect() first.")
        return self._container

    async def create_item(self, item: dict[str, Any]) -> dict[str, Any]:
        """Insert a new item; fails if an item with the same id exists.

        Args:
            item: Dictionary containing the item data, including 'id' and
                  the partition key field.

        Returns:
            The created item with any system-generated fields.

        Raises:
            RuntimeError: If client is not connected.
        """
        container = self._require_container()
        result = await container.create_item(body=item)
        return dict(result)

    async def replace_item(
        self, item_id: str, item: dict[str, Any], etag: Optional[str] = None
    ) -> dict[str, Any]:
        """Replace an existing item.

        Args:
            item_id: Id of the item to replace.
            item: The full new item body.
            etag: When given, the replace only succeeds if the stored item
                  still carries this _etag.

        Raises:
            RuntimeError: If client is not connected.
            CosmosResourceNotFoundError: If item not found.
            CosmosAccessConditionFailedError: If the item changed since etag was read.
        """
        container = self._require_container()
        if etag is None:
            result = await container.replace_item(item=item_id, body=item)
        else:
            result = await container.replace_item(
                item=item_id, body=item, etag=etag, match_condition=MatchConditions.IfNotModified
            )
        return dict(result)

    async def query_items(
        self,
        query: str,
        parameters: Optional[list[dict[str, Any]]] = None,
        partition_key: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Query items from the container.

        Args:
            query: SQL query string
            parameters: Optional query parameters as list of {"name": "@param", "value": value}
            partition_key: Optional partition key to scope the query

        Returns:
            List of matching items.

        Raises:
            RuntimeError: If client is not connected.
        """
        container = self._require_container()

        query_options = {}
        if partition_key is not None:
            query_options["partition_key"] = partition_key

        items = []
        async for item in container.query_items(
            query=query,
            parameters=parameters,
            **query_options,
        ):
            items.append(dict(item))

        return items

    async def read_item(self, item_id: str, partition_key: str) -> dict[str, Any]:
        """Read a single item by id and partition key.

        Raises:
            RuntimeError: If client is not connected.
            CosmosResourceNotFoundError: If item not found.
        """
        container = self._require_container()
        result = await container.read_item(item=item_id, partition_key=partition_key)
        return dict(result)

    async def delete_item(self, item_id: str, partition_key: str) -> None:
        """Delete an item by id and partition key.

        Raises:
            RuntimeError: If client is not connected.
            CosmosResourceNotFoundError: If item not found.
        """
        container = self._require_container()
        await container.delete_item(item=item_id, partition_key=partition_key)
