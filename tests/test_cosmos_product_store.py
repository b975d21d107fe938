"""Tests for the Cosmos DB product store adapter.

These tests run against an in-process fake of CosmosDBClient and verify:
- Canonical string ids and stripping of Cosmos system properties
- Creation-order listing
- Partial updates that keep id and ordering
- Concurrent partial updates that do not overwrite each other
- Mapping of SDK errors to NotFoundError / BackendUnavailableError
"""

import asyncio

import pytest
from azure.core.exceptions import ServiceResponseError
from azure.cosmos.exceptions import CosmosAccessConditionFailedError

from conftest import FAKE_CONNECTION_STRING, FakeCosmosDBClient
from src.catalog.errors import BackendUnavailableError, NotFoundError
from src.catalog.models import Product
from src.catalog.services import CosmosProductStore
from src.catalog.services.cosmos_product_store import LIST_QUERY, MAX_UPDATE_ATTEMPTS


def _fields(name: str, price: float = 1.0) -> dict:
    return {"name": name, "price": price, "color": "red", "description": "", "image": ""}


class TestCosmosProductStore:
    """Test CosmosProductStore against a fake client."""

    @pytest.fixture
    def store(self, fake_client):
        return CosmosProductStore(fake_client)

    @pytest.mark.asyncio
    async def test_create_assigns_string_id(self, store, fake_client):
        """Test that create returns a Product with a fresh canonical id."""
        product = await store.create(_fields("Chair", 49.99))

        assert isinstance(product, Product)
        assert isinstance(product.id, str) and product.id
        assert product.description == ""
        assert product.id in fake_client.documents

        print(f"Created Cosmos product id: {product.id}")

    @pytest.mark.asyncio
    async def test_system_properties_do_not_leak(self, store):
        """Test that _rid/_etag/_ts and the ordering field stay inside the adapter."""
        created = await store.create(_fields("Chair"))
        fetched = await store.get_by_id(created.id)

        assert set(fetched.to_dict()) == {"id", "name", "price", "color", "description", "image"}

    @pytest.mark.asyncio
    async def test_get_all_orders_by_creation(self, store, fake_client):
        """Test that listing uses the creation-order query."""
        for name in ("A", "B", "C"):
            await store.create(_fields(name))

        products = await store.get_all()

        assert [p.name for p in products] == ["A", "B", "C"]
        assert fake_client.last_query == LIST_QUERY

    @pytest.mark.asyncio
    async def test_update_merges_fields_and_keeps_order(self, store, fake_client):
        """Test that partial updates keep other fields, id and creation stamp."""
        created = await store.create(_fields("Chair", 49.99))
        created_seq = fake_client.documents[created.id]["created_seq"]

        updated = await store.update(created.id, {"price": 39.99})

        assert updated.id == created.id
        assert updated.name == "Chair"
        assert updated.price == 39.99
        assert fake_client.documents[created.id]["created_seq"] == created_seq

    @pytest.mark.asyncio
    async def test_not_found_mapping(self, store):
        """Test that missing documents surface as NotFoundError."""
        with pytest.raises(NotFoundError):
            await store.get_by_id("nonexistent-id")
        with pytest.raises(NotFoundError):
            await store.update("nonexistent-id", {"name": "X"})
        with pytest.raises(NotFoundError):
            await store.delete("nonexistent-id")

    @pytest.mark.asyncio
    async def test_delete_removes_document(self, store, fake_client):
        """Test that delete removes the document from the container."""
        created = await store.create(_fields("Chair"))

        await store.delete(created.id)

        assert created.id not in fake_client.documents
        with pytest.raises(NotFoundError):
            await store.get_by_id(created.id)

    @pytest.mark.asyncio
    async def test_backend_errors_become_backend_unavailable(self, store, fake_client):
        """Test that transport failures surface as BackendUnavailableError."""
        fake_client.fail_with = ServiceResponseError("Read timed out")

        with pytest.raises(BackendUnavailableError):
            await store.get_all()
        with pytest.raises(BackendUnavailableError):
            await store.create(_fields("Chair"))

    @pytest.mark.asyncio
    async def test_close_closes_client(self, store, fake_client):
        """Test that closing the store closes the Cosmos client."""
        await store.close()

        assert fake_client.closed is True


class SlowReadClient(FakeCosmosDBClient):
    """Fake client that yields after every read, so concurrent updates interleave."""

    async def read_item(self, item_id: str, partition_key: str) -> dict:
        document = await super().read_item(item_id, partition_key)
        await asyncio.sleep(0.05)
        return document


class AlwaysConflictingClient(FakeCosmosDBClient):
    """Fake client whose conditional replaces always fail."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.replace_attempts = 0

    async def replace_item(self, item_id: str, item: dict, etag=None) -> dict:
        self.replace_attempts += 1
        raise CosmosAccessConditionFailedError(status_code=412, message="Precondition failed")


class TestCosmosProductStoreConcurrentUpdates:
    """Test that updates replace only unchanged documents."""

    @pytest.mark.asyncio
    async def test_concurrent_partial_updates_keep_both_changes(self):
        """Test that updates to different fields of one product both survive."""
        client = SlowReadClient(connection_string=FAKE_CONNECTION_STRING)
        client.connected = True
        store = CosmosProductStore(client)
        created = await store.create(_fields("Chair", 1.0))

        await asyncio.gather(
            store.update(created.id, {"price": 2.0}),
            store.update(created.id, {"color": "blue"}),
        )

        final = await store.get_by_id(created.id)
        assert final.price == 2.0
        assert final.color == "blue"
        assert final.name == "Chair"

        print(f"Final product after concurrent updates: {final}")

    @pytest.mark.asyncio
    async def test_update_passes_read_etag(self, fake_client):
        """Test that a stale etag is rejected by the container."""
        store = CosmosProductStore(fake_client)
        created = await store.create(_fields("Chair"))
        stale_etag = fake_client.documents[created.id]["_etag"]

        await store.update(created.id, {"price": 5.0})

        assert fake_client.documents[created.id]["_etag"] != stale_etag
        with pytest.raises(CosmosAccessConditionFailedError):
            await fake_client.replace_item(created.id, {"id": created.id}, etag=stale_etag)

    @pytest.mark.asyncio
    async def test_persistent_conflict_becomes_backend_unavailable(self):
        """Test that an update gives up after repeated conflicts."""
        client = AlwaysConflictingClient(connection_string=FAKE_CONNECTION_STRING)
        client.connected = True
        store = CosmosProductStore(client)
        created = await store.create(_fields("Chair"))

        with pytest.raises(BackendUnavailableError):
            await store.update(created.id, {"price": 2.0})

        assert client.replace_attempts == MAX_UPDATE_ATTEMPTS
        assert (await store.get_by_id(created.id)).price == 1.0
