"""FastAPI dependencies shared by the controllers."""

from fastapi import Request

from src.catalog.config import AppConfig
from src.catalog.services import DataSource


def get_data_source(request: Request) -> DataSource:
    """Return the data source created by the application lifespan."""
    return request.app.state.data_source


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config
