"""Controller for the paginated catalog view."""

import socket
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.catalog.api.dependencies import get_app_config, get_data_source
from src.catalog.config import AppConfig
from src.catalog.services import DataSource, paginate, parse_page_number

router = APIRouter(tags=["catalog"])


@router.get("/")
async def catalog_page(
    page: Optional[str] = Query(default=None),
    data_source: DataSource = Depends(get_data_source),
    config: AppConfig = Depends(get_app_config),
) -> dict:
    """
    One page of the catalog, oldest products first.

    The page is sliced here from the full list so the data source stays
    free of paging parameters.
    """
    products = await data_source.get_all()
    current = paginate(products, parse_page_number(page), config.server.page_limit)

    return {
        "products": [p.to_dict() for p in current.items],
        "pagination": current.meta(),
        "hostname": socket.gethostname(),
        "source": data_source.source_label,
    }
