"""Product persistence services."""

from src.catalog.services.cosmos_product_store import CosmosProductStore
from src.catalog.services.data_source import IN_MEMORY_LABEL, REMOTE_LABEL, DataSource
from src.catalog.services.in_memory_store import InMemoryProductStore
from src.catalog.services.pagination import Page, paginate, parse_page_number
from src.catalog.services.product_store import ProductStore

__all__ = [
    "CosmosProductStore",
    "DataSource",
    "IN_MEMORY_LABEL",
    "InMemoryProductStore",
    "Page",
    "ProductStore",
    "REMOTE_LABEL",
    "paginate",
    "parse_page_number",
]
