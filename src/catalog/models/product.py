"""Product model shared by every storage backend."""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from src.catalog.errors import ProductValidationError

REQUIRED_FIELDS = ("name", "price", "color")
OPTIONAL_FIELDS = ("description", "image")
MUTABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS


@dataclass
class Product:
    """Product data model representing a catalog record."""

    id: str
    name: str
    price: float
    color: str
    description: str = ""
    image: str = ""  # data URL or path of an uploaded file

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Product":
        """Build a Product from a stored document, filling absent optional fields."""
        return cls(
            id=str(document["id"]),
            name=document.get("name") or "",
            price=float(document.get("price") or 0.0),
            color=document.get("color") or "",
            description=document.get("description") or "",
            image=document.get("image") or "",
        )


def _coerce_price(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("is required")
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValueError("must be a number")
    if math.isnan(price) or math.isinf(price):
        raise ValueError("must be a finite number")
    if price < 0:
        raise ValueError("must not be negative")
    return price


def validate_product_fields(fields: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Normalize a plain key/value field set for create or update.

    Unknown keys and any caller-supplied id are dropped. On create every
    required field must be present and optional fields default to "".
    On update (partial=True) only the supplied fields are checked.

    Args:
        fields: Raw field values, e.g. parsed form data.
        partial: True for updates, where omitted fields keep their values.

    Returns:
        Cleaned field dictionary.

    Raises:
        ProductValidationError: With one message per offending field.
    """
    cleaned: Dict[str, Any] = {}
    errors: Dict[str, str] = {}

    for name in ("name", "color"):
        if name not in fields or fields[name] is None:
            if not partial:
                errors[name] = f"{name.capitalize()} is required"
            continue
        text = str(fields[name]).strip()
        if not text:
            errors[name] = f"{name.capitalize()} is required"
        else:
            cleaned[name] = text

    if "price" in fields and fields["price"] is not None:
        try:
            cleaned["price"] = _coerce_price(fields["price"])
        except ValueError as e:
            errors["price"] = f"Price {e}"
    elif not partial:
        errors["price"] = "Price is required"

    for name in OPTIONAL_FIELDS:
        value = fields.get(name)
        if value is not None:
            cleaned[name] = str(value).strip() if name == "description" else str(value)
        elif not partial:
            cleaned[name] = ""

    if errors:
        raise ProductValidationError(errors)

    return cleaned
