"""Data source that hides which product backend is active.

At startup ``init`` probes Cosmos DB once. If the probe succeeds the Cosmos
store serves every request for the life of the process, otherwise the
in-memory store does. There is no failover or retry after that decision.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from src.catalog.clients import CosmosDBClient, redact_connection_string
from src.catalog.config import AppConfig
from src.catalog.errors import ActivationFailure
from src.catalog.models import Product, validate_product_fields
from src.catalog.services.cosmos_product_store import PARTITION_KEY_PATH, CosmosProductStore
from src.catalog.services.in_memory_store import InMemoryProductStore
from src.catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)

REMOTE_LABEL = "remote"
IN_MEMORY_LABEL = "in-memory"


class DataSource:
    """Single entry point for product persistence.

    Construct one per process (or per test), call ``init`` once, then hand
    it to the route layer.
    """

    def __init__(
        self,
        config: AppConfig,
        client_factory: Optional[Callable[..., CosmosDBClient]] = None,
    ):
        """Initialize the data source.

        Args:
            config: Application configuration (data_source and cosmosdb sections are used).
            client_factory: Builds the Cosmos DB client; defaults to CosmosDBClient.
        """
        self._config = config
        self._client_factory = client_factory or CosmosDBClient
        self._store: Optional[ProductStore] = None
        self._remote_active = False

    # ------------------------------------------------------------------ #
    # Activation
    # ------------------------------------------------------------------ #
    async def init(self, prefer_remote: bool) -> None:
        """Choose the active backend. Must be called exactly once."""
        if self._store is not None:
            raise RuntimeError("Data source already initialized")

        if prefer_remote:
            try:
                self._store = await self._activate_remote()
                self._remote_active = True
            except ActivationFailure as e:
                logger.warning(
                    f"Failed to connect to Cosmos DB, falling back to in-memory store. Reason: {e.reason}"
                )
        else:
            logger.info("Remote data source not preferred; using in-memory store")

        if self._store is None:
            self._store = InMemoryProductStore()
            self._remote_active = False

        logger.info(f"Data source in use: {self.source_label}")

    async def _activate_remote(self) -> ProductStore:
        cosmos_config = self._config.cosmosdb
        ds_config = self._config.data_source

        if not cosmos_config.connection_string:
            raise ActivationFailure("no Cosmos DB connection string configured")

        logger.info(
            f"Attempting to connect to Cosmos DB using "
            f"{redact_connection_string(cosmos_config.connection_string)}"
        )

        client = None
        try:
            client = self._client_factory(
                connection_string=cosmos_config.connection_string,
                database_name=cosmos_config.database_name,
                container_name=cosmos_config.container_name,
                partition_key_path=PARTITION_KEY_PATH,
                connection_timeout=ds_config.connection_timeout,
                socket_timeout=ds_config.socket_timeout,
            )
            await asyncio.wait_for(client.connect(), timeout=ds_config.activation_timeout)
        except asyncio.TimeoutError as e:
            await self._discard(client)
            raise ActivationFailure(
                f"timed out after {ds_config.activation_timeout}s", cause=e
            ) from e
        except Exception as e:
            # Auth, network and malformed connection strings all end up here
            await self._discard(client)
            raise ActivationFailure(f"{type(e).__name__}: {e}", cause=e) from e

        logger.info(
            f"Connected to Cosmos DB database '{cosmos_config.database_name}', "
            f"container '{cosmos_config.container_name}'"
        )
        return CosmosProductStore(client)

    @staticmethod
    async def _discard(client: Optional[CosmosDBClient]) -> None:
        if client is None:
            return
        try:
            await client.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing failed Cosmos DB client: {e}")

    # ------------------------------------------------------------------ #
    # Observability
    # ------------------------------------------------------------------ #
    @property
    def is_initialized(self) -> bool:
        return self._store is not None

    def is_remote_active(self) -> bool:
        return self._remote_active

    @property
    def source_label(self) -> str:
        return REMOTE_LABEL if self._remote_active else IN_MEMORY_LABEL

    # ------------------------------------------------------------------ #
    # Products
    # ------------------------------------------------------------------ #
    def _active_store(self) -> ProductStore:
        if self._store is None:
            raise RuntimeError("Data source not initialized. Call init() first.")
        return self._store

    async def get_all(self) -> List[Product]:
        return await self._active_store().get_all()

    async def get_by_id(self, product_id: str) -> Product:
        return await self._active_store().get_by_id(str(product_id))

    async def create(self, fields: Mapping[str, Any]) -> Product:
        store = self._active_store()
        cleaned = validate_product_fields(fields)
        return await store.create(cleaned)

    async def update(self, product_id: str, fields: Mapping[str, Any]) -> Product:
        store = self._active_store()
        cleaned: Dict[str, Any] = validate_product_fields(fields, partial=True)
        return await store.update(str(product_id), cleaned)

    async def delete(self, product_id: str) -> None:
        await self._active_store().delete(str(product_id))

    async def close(self) -> None:
        """Release the active backend's resources."""
        if self._store is not None:
            await self._store.close()
