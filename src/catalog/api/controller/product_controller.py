"""REST controller for product CRUD."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from src.catalog.api.dependencies import get_app_config, get_data_source
from src.catalog.api.uploads import discard_upload, save_upload
from src.catalog.config import AppConfig
from src.catalog.errors import CatalogError, ProductValidationError
from src.catalog.services import DataSource

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

_TEXT_FIELDS = ("name", "price", "color", "description")


class ProductResponse(BaseModel):
    """Product as returned to clients."""

    id: str
    name: str
    price: float
    color: str
    description: str = ""
    image: str = ""


class MessageResponse(BaseModel):
    message: str


async def _read_product_fields(request: Request, config: AppConfig) -> Tuple[Dict[str, Any], Optional[str]]:
    """
    Extract product fields from a JSON body or a form submission.

    Form submissions may carry the image as an uploaded file (imageFile)
    or as a data URL (imageUrl). Keys that are absent stay absent, so an
    update leaves those fields untouched.

    Returns:
        The fields, and the URL of the image saved from an upload (None
        when nothing was written to disk).
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ProductValidationError({"body": "Request body must be valid JSON"})
        if not isinstance(body, dict):
            raise ProductValidationError({"body": "Request body must be a JSON object"})
        fields = {k: body[k] for k in _TEXT_FIELDS if k in body}
        image = body.get("image", body.get("imageUrl"))
        if image is not None:
            fields["image"] = image
        return fields, None

    form = await request.form()
    fields = {k: form[k] for k in _TEXT_FIELDS if k in form}

    file_fields = {
        k: "Must be a text value, not a file" for k, v in fields.items() if isinstance(v, UploadFile)
    }
    if file_fields:
        raise ProductValidationError(file_fields)

    saved_image = None
    upload = form.get("imageFile")
    if isinstance(upload, UploadFile) and upload.filename:
        saved_image = await save_upload(upload, config.server.uploads_dir)
        fields["image"] = saved_image
    elif form.get("imageUrl"):
        fields["image"] = form["imageUrl"]
    elif "image" in form and not isinstance(form["image"], UploadFile):
        fields["image"] = form["image"]

    return fields, saved_image


@router.get("", response_model=List[ProductResponse])
async def list_products(data_source: DataSource = Depends(get_data_source)) -> List[dict]:
    products = await data_source.get_all()
    return [p.to_dict() for p in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, data_source: DataSource = Depends(get_data_source)) -> dict:
    product = await data_source.get_by_id(product_id)
    return product.to_dict()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductResponse)
async def create_product(
    request: Request,
    data_source: DataSource = Depends(get_data_source),
    config: AppConfig = Depends(get_app_config),
) -> dict:
    fields, saved_image = await _read_product_fields(request, config)
    try:
        product = await data_source.create(fields)
    except CatalogError:
        await discard_upload(saved_image, config.server.uploads_dir)
        raise
    logger.info(f"Created product {product.id} ({product.name})")
    return product.to_dict()


@router.api_route("/{product_id}", methods=["PUT", "PATCH"], response_model=ProductResponse)
async def update_product(
    product_id: str,
    request: Request,
    data_source: DataSource = Depends(get_data_source),
    config: AppConfig = Depends(get_app_config),
) -> dict:
    fields, saved_image = await _read_product_fields(request, config)
    try:
        product = await data_source.update(product_id, fields)
    except CatalogError:
        await discard_upload(saved_image, config.server.uploads_dir)
        raise
    logger.info(f"Updated product {product.id}")
    return product.to_dict()


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, data_source: DataSource = Depends(get_data_source)) -> dict:
    await data_source.delete(product_id)
    logger.info(f"Deleted product {product_id}")
    return {"message": "Product deleted"}
