"""
Volatile product store used when the remote database is unavailable.

Products live in an insertion-ordered list and ids come from a counter
that is never reset, so an id is never handed out twice within a process.
Data does not survive a restart.
"""

import asyncio
import dataclasses
import logging
from typing import Any, Dict, List

from src.catalog.errors import NotFoundError
from src.catalog.models import Product
from src.catalog.services.product_store import ProductStore

logger = logging.getLogger(__name__)


class InMemoryProductStore(ProductStore):
    """In-memory stand-in for the Cosmos DB product store.

    A single lock guards the whole collection, reads included, so no caller
    observes a half-applied mutation.
    """

    def __init__(self) -> None:
        self._products: List[Product] = []
        self._next_id = 1
        self._lock = asyncio.Lock()

    def _index_of(self, product_id: str) -> int:
        for index, product in enumerate(self._products):
            if product.id == product_id:
                return index
        raise NotFoundError(product_id)

    async def get_all(self) -> List[Product]:
        async with self._lock:
            return [dataclasses.replace(p) for p in self._products]

    async def get_by_id(self, product_id: str) -> Product:
        async with self._lock:
            return dataclasses.replace(self._products[self._index_of(str(product_id))])

    async def create(self, fields: Dict[str, Any]) -> Product:
        async with self._lock:
            product = Product(
                id=str(self._next_id),
                name=fields["name"],
                price=fields["price"],
                color=fields["color"],
                description=fields.get("description", ""),
                image=fields.get("image", ""),
            )
            self._next_id += 1
            self._products.append(product)
            logger.debug(f"Created in-memory product {product.id}")
            return dataclasses.replace(product)

    async def update(self, product_id: str, fields: Dict[str, Any]) -> Product:
        async with self._lock:
            index = self._index_of(str(product_id))
            changes = {k: v for k, v in fields.items() if k != "id"}
            updated = dataclasses.replace(self._products[index], **changes)
            self._products[index] = updated
            logger.debug(f"Updated in-memory product {updated.id}")
            return dataclasses.replace(updated)

    async def delete(self, product_id: str) -> None:
        async with self._lock:
            index = self._index_of(str(product_id))
            del self._products[index]
            logger.debug(f"Deleted in-memory product {product_id}")
