"""Error kinds raised by the catalog data source and its backends.

The route layer is the only place these are turned into HTTP responses.
"""

from typing import Dict, Optional


class CatalogError(Exception):
    """Base class for catalog failures."""

    pass


class NotFoundError(CatalogError):
    """Raised when an operation references a product id that does not exist."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' not found")


class ProductValidationError(CatalogError):
    """Raised when product fields are missing or invalid.

    Attributes:
        errors: Mapping of field name to a human-readable message.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid product fields: {fields}")


class BackendUnavailableError(CatalogError):
    """Raised when the remote backend fails after activation."""

    pass


class ActivationFailure(CatalogError):
    """Raised when the remote backend cannot be reached at startup.

    Never surfaced to end users; the data source logs it and falls back
    to the in-memory store.
    """

    def __init__(self, reason: str, cause: Optional[BaseException] = None):
        self.reason = reason
        self.cause = cause
        super().__init__(reason)
