"""Data models module."""

from src.catalog.models.product import (
    MUTABLE_FIELDS,
    Product,
    validate_product_fields,
)

__all__ = [
    "MUTABLE_FIELDS",
    "Product",
    "validate_product_fields",
]
