"""Storage interface implemented by every product backend.

Concrete stores (in-memory, Cosmos DB) receive field sets that were already
validated by the data source and raise the error kinds from
``src.catalog.errors``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from src.catalog.models import Product


class ProductStore(ABC):

    @abstractmethod
    async def get_all(self) -> List[Product]:
        """Return every product, oldest first."""

    @abstractmethod
    async def get_by_id(self, product_id: str) -> Product:
        """Return one product or raise NotFoundError."""

    @abstractmethod
    async def create(self, fields: Dict[str, Any]) -> Product:
        """Store a new product under a fresh id and return it."""

    @abstractmethod
    async def update(self, product_id: str, fields: Dict[str, Any]) -> Product:
        """Replace the given fields of a product or raise NotFoundError."""

    @abstractmethod
    async def delete(self, product_id: str) -> None:
        """Remove a product or raise NotFoundError."""

    async def close(self) -> None:
        """Release any held resources."""
        return None
