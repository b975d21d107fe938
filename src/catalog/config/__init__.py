"""Configuration module."""

from src.catalog.config.configuration import (
    AppConfig,
    ConfigurationError,
    CosmosDBConfig,
    DataSourceConfig,
    LoggingConfig,
    ServerConfig,
    get_config,
    get_environment,
    load_config,
    reset_config,
)

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "CosmosDBConfig",
    "DataSourceConfig",
    "LoggingConfig",
    "ServerConfig",
    "get_config",
    "get_environment",
    "load_config",
    "reset_config",
]
