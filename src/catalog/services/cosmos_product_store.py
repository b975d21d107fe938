"""Product store backed by an Azure Cosmos DB container.

Each operation maps onto one container call (plus a read for updates,
which replace only if the document is unchanged since that read).
Documents are partitioned on their own id. The canonical product id is
assigned here, and Cosmos system properties never leave this module.
"""

import asyncio
import logging
import time
import uuid
from typing import Any, Dict, List

from azure.core.exceptions import AzureError
from azure.cosmos.exceptions import CosmosAccessConditionFailedError, CosmosResourceNotFoundError

from src.catalog.clients import CosmosDBClient
from src.catalog.errors import BackendUnavailableError, NotFoundError
from src.catalog.models import MUTABLE_FIELDS, Product
from src.catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)

PARTITION_KEY_PATH = "/id"

# Nanosecond creation stamp, used only to keep listing order stable
ORDER_FIELD = "created_seq"

LIST_QUERY = f"SELECT * FROM c ORDER BY c.{ORDER_FIELD} ASC"

# Read-merge-replace rounds before a conflicting update gives up
MAX_UPDATE_ATTEMPTS = 3


def _to_product(document: Dict[str, Any]) -> Product:
    return Product.from_document(document)


def _to_document(product_id: str, fields: Dict[str, Any], created_seq: int) -> Dict[str, Any]:
    document = {name: fields[name] for name in MUTABLE_FIELDS if name in fields}
    document["id"] = product_id
    document[ORDER_FIELD] = created_seq
    return document


class CosmosProductStore(ProductStore):
    """Adapter from the product store interface onto a Cosmos DB container.

    The adapter holds no mutable state of its own; concurrent requests rely
    on the database for consistency.
    """

    def __init__(self, client: CosmosDBClient):
        """Initialize the store.

        Args:
            client: A connected CosmosDBClient whose container is partitioned on /id.
        """
        self._client = client

    async def _call(self, operation: str, product_id, coro):
        try:
            return await coro
        except CosmosResourceNotFoundError:
            raise NotFoundError(str(product_id))
        except CosmosAccessConditionFailedError:
            raise
        except (AzureError, asyncio.TimeoutError) as e:
            logger.error(f"Cosmos DB {operation} failed: {e}")
            raise BackendUnavailableError(f"Cosmos DB {operation} failed: {e}") from e

    async def get_all(self) -> List[Product]:
        documents = await self._call("query", None, self._client.query_items(LIST_QUERY))
        return [_to_product(doc) for doc in documents]

    async def get_by_id(self, product_id: str) -> Product:
        product_id = str(product_id)
        document = await self._call(
            "read", product_id, self._client.read_item(product_id, partition_key=product_id)
        )
        return _to_product(document)

    async def create(self, fields: Dict[str, Any]) -> Product:
        product_id = uuid.uuid4().hex
        document = _to_document(product_id, fields, time.time_ns())
        created = await self._call("create", product_id, self._client.create_item(document))
        logger.debug(f"Created Cosmos DB product {product_id}")
        return _to_product(created)

    async def update(self, product_id: str, fields: Dict[str, Any]) -> Product:
        product_id = str(product_id)
        for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
            existing = await self._call(
                "read", product_id, self._client.read_item(product_id, partition_key=product_id)
            )
            merged = {name: existing.get(name, "") for name in MUTABLE_FIELDS}
            merged.update({k: v for k, v in fields.items() if k in MUTABLE_FIELDS})
            document = _to_document(product_id, merged, existing.get(ORDER_FIELD, 0))
            try:
                replaced = await self._call(
                    "replace",
                    product_id,
                    self._client.replace_item(product_id, document, etag=existing.get("_etag")),
                )
            except CosmosAccessConditionFailedError:
                logger.debug(f"Product {product_id} changed during update (attempt {attempt}), retrying")
                continue
            logger.debug(f"Updated Cosmos DB product {product_id}")
            return _to_product(replaced)

        logger.error(f"Cosmos DB update of {product_id} kept conflicting after {MAX_UPDATE_ATTEMPTS} attempts")
        raise BackendUnavailableError(f"Product '{product_id}' is being modified concurrently")

    async def delete(self, product_id: str) -> None:
        product_id = str(product_id)
        await self._call(
            "delete", product_id, self._client.delete_item(product_id, partition_key=product_id)
        )
        logger.debug(f"Deleted Cosmos DB product {product_id}")

    async def close(self) -> None:
        await self._client.close()
