"""FastAPI application setup."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from src.catalog.api.controller import catalog_router, product_router
from src.catalog.api.uploads import UPLOADS_URL_PREFIX, ensure_uploads_dir
from src.catalog.config import AppConfig, get_config
from src.catalog.errors import BackendUnavailableError, NotFoundError, ProductValidationError
from src.catalog.services import DataSource

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    """Translate catalog errors into HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": str(exc)})

    @app.exception_handler(ProductValidationError)
    async def validation_handler(request: Request, exc: ProductValidationError) -> JSONResponse:
        errors = [{"field": field, "msg": msg} for field, msg in exc.errors.items()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": str(exc), "errors": errors},
        )

    @app.exception_handler(BackendUnavailableError)
    async def backend_unavailable_handler(request: Request, exc: BackendUnavailableError) -> JSONResponse:
        logger.error(f"Backend unavailable on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"message": "Product storage is unavailable"},
        )


def create_app(config: Optional[AppConfig] = None, data_source: Optional[DataSource] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application configuration; loaded via get_config() when omitted.
        data_source: Pre-built data source, mainly for tests. When it is not
            initialized yet the lifespan initializes it like a fresh one.
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ensure_uploads_dir(config.server.uploads_dir)

        source = data_source or DataSource(config)
        if not source.is_initialized:
            await source.init(config.data_source.prefer_remote)

        app.state.config = config
        app.state.data_source = source
        try:
            yield
        finally:
            await source.close()

    app = FastAPI(
        title="Product Catalog API",
        description="Product catalog backed by Cosmos DB with an in-memory fallback",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # Include routers
    app.include_router(catalog_router)
    app.include_router(product_router)

    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=config.server.uploads_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health_check(request: Request) -> dict:
        """Health check endpoint."""
        return {"status": "healthy", "data_source": request.app.state.data_source.source_label}

    return app
