"""Configuration module for the product catalog.

Loads settings from environment-specific config files:
- APP_ENV=dev  → config_dev.yaml (in-memory store, local development)
- APP_ENV=test → config_test.yaml (Cosmos DB store, production-like testing)
- Default      → config.yaml

Secrets (the Cosmos DB connection string) are loaded from the .env file.
A missing connection string is not an error: the data source then runs
on the in-memory store.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_project_root() -> Path:
    """Get the project root directory (where config.yaml lives)."""
    # Navigate from src/catalog/config/ up to project root
    return Path(__file__).parent.parent.parent.parent


def _get_config_filename() -> str:
    """Get config filename based on APP_ENV environment variable.

    Returns:
        Config filename:
        - APP_ENV=dev  → config_dev.yaml
        - APP_ENV=test → config_test.yaml
        - Default      → config.yaml
    """
    app_env = os.environ.get("APP_ENV", "").lower()

    if app_env == "dev":
        return "config_dev.yaml"
    elif app_env == "test":
        return "config_test.yaml"
    else:
        return "config.yaml"


def _load_yaml_config() -> dict:
    """Load configuration from environment-specific config file."""
    config_filename = _get_config_filename()
    config_path = _get_project_root() / config_filename

    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path}. "
            f"Set APP_ENV to 'dev' or 'test', or create {config_filename}."
        )

    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def _get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get optional environment variable with default."""
    return os.environ.get(key, default)


def _as_bool(value, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"'{key}' must be a boolean, got '{value}'")


def _as_positive_float(value, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{key}' must be a number, got '{value}'")
    if number <= 0:
        raise ConfigurationError(f"'{key}' must be greater than zero, got {number}")
    return number


def _as_positive_int(value, key: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{key}' must be an integer, got '{value}'")
    if number <= 0:
        raise ConfigurationError(f"'{key}' must be greater than zero, got {number}")
    return number


def _build_connection_string() -> Optional[str]:
    """Resolve the Cosmos DB connection string from the environment.

    COSMOSDB_CONNECTION_STRING wins; otherwise COSMOSDB_ENDPOINT and
    COSMOSDB_KEY are combined. Returns None when neither is usable.
    """
    connection_string = _get_optional_env("COSMOSDB_CONNECTION_STRING")
    if connection_string and connection_string.strip():
        return connection_string.strip()

    endpoint = _get_optional_env("COSMOSDB_ENDPOINT")
    key = _get_optional_env("COSMOSDB_KEY")
    if endpoint and key:
        return f"AccountEndpoint={endpoint};AccountKey={key};"
    return None


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server configuration."""
    host: str
    port: int
    page_limit: int
    uploads_dir: str


@dataclass(frozen=True)
class DataSourceConfig:
    """Backend activation settings.

    connection_timeout bounds establishing a connection, socket_timeout
    bounds each operation, activation_timeout bounds the whole startup probe.
    """
    prefer_remote: bool
    activation_timeout: float
    connection_timeout: float
    socket_timeout: float


@dataclass(frozen=True)
class CosmosDBConfig:
    """Azure Cosmos DB configuration for the product container."""
    connection_string: Optional[str]
    database_name: str
    container_name: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration container."""
    server: ServerConfig
    data_source: DataSourceConfig
    cosmosdb: CosmosDBConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    """
    Load and validate all application configuration.

    Loads from the YAML config file for non-sensitive settings and .env for
    the Cosmos DB connection string. HOST, PORT and PREFER_REMOTE in the
    environment override the file.

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigurationError: If the config file is missing or a value is invalid.
    """
    # Load environment variables from .env file
    load_dotenv()

    # Load YAML configuration
    yaml_config = _load_yaml_config()

    # Build server config
    server_section = yaml_config.get("server", {})

    server_config = ServerConfig(
        host=_get_optional_env("HOST", server_section.get("host", "0.0.0.0")),
        port=_as_positive_int(_get_optional_env("PORT", server_section.get("port", 3000)), "server.port"),
        page_limit=_as_positive_int(server_section.get("page_limit", 5), "server.page_limit"),
        uploads_dir=server_section.get("uploads_dir", "public/uploads"),
    )

    # Build data source config
    ds_section = yaml_config.get("data_source", {})

    data_source_config = DataSourceConfig(
        prefer_remote=_as_bool(
            _get_optional_env("PREFER_REMOTE", ds_section.get("prefer_remote", True)),
            "data_source.prefer_remote",
        ),
        activation_timeout=_as_positive_float(
            ds_section.get("activation_timeout", 30), "data_source.activation_timeout"
        ),
        connection_timeout=_as_positive_float(
            ds_section.get("connection_timeout", 30), "data_source.connection_timeout"
        ),
        socket_timeout=_as_positive_float(
            ds_section.get("socket_timeout", 45), "data_source.socket_timeout"
        ),
    )

    if data_source_config.connection_timeout >= data_source_config.socket_timeout:
        raise ConfigurationError(
            "data_source.connection_timeout must be shorter than data_source.socket_timeout "
            f"({data_source_config.connection_timeout} >= {data_source_config.socket_timeout})"
        )

    # Build CosmosDB config
    cosmosdb_section = yaml_config.get("cosmosdb", {})

    cosmosdb_config = CosmosDBConfig(
        connection_string=_build_connection_string(),
        database_name=cosmosdb_section.get("database_name", "products_db"),
        container_name=cosmosdb_section.get("container_name", "products"),
    )

    # Build Logging config
    logging_section = yaml_config.get("logging", {})

    logging_config = LoggingConfig(
        level=logging_section.get("level", "INFO"),
    )

    return AppConfig(
        server=server_config,
        data_source=data_source_config,
        cosmosdb=cosmosdb_config,
        logging=logging_config,
    )


# Module-level singleton for convenience
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the application configuration singleton.

    Lazy-loads configuration on first access.
    Config file is selected based on APP_ENV environment variable.

    Returns:
        AppConfig: Application configuration.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_environment() -> str:
    """Get current environment name.

    Returns:
        'dev', 'test', or 'default' based on APP_ENV.
    """
    app_env = os.environ.get("APP_ENV", "").lower()
    return app_env if app_env in ("dev", "test") else "default"


def reset_config() -> None:
    """Reset the config singleton. Useful for testing."""
    global _config
    _config = None
