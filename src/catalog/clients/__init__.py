"""Client modules for external services."""

from src.catalog.clients.cosmosdb_client import CosmosDBClient, redact_connection_string

__all__ = [
    "CosmosDBClient",
    "redact_connection_string",
]
