"""Tests for DeleteOperation and DeleteQuery."""

import pytest

from docgroup.core.dto.result_dto import StatusCode
from docgroup.core.exceptions import GroupConfigurationError, InvalidArgument
from docgroup.core.operations.delete import DeleteOperation
from docgroup.core.query.types import eq
from docgroup.core.registry.builder import GroupBuilder
from docgroup.core.service import GroupService
from tests.utils import Customer, Product


@pytest.mark.asyncio
async def test_delete_by_id(customers, store):
    await customers.create(Customer(id=1, name="x"))

    result = await customers.delete(1)

    assert result.is_ok()
    assert result.status_code == StatusCode.DELETION_SUCCESS
    assert result.message == "Document deleted successfully"
    assert result.new_data is None
    assert result.old_data is None
    assert store.documents == []


@pytest.mark.asyncio
async def test_delete_missing_leaves_store_unchanged(customers, store):
    await customers.create(Customer(id=1, name="x"))

    result = await customers.delete(2)

    assert result.status_code == StatusCode.NOT_FOUND
    assert result.message == "No document found matching the specified condition"
    assert len(store.documents) == 1


@pytest.mark.asyncio
async def test_delete_by_field(customers, store):
    await customers.create(Customer(id=1, name="x"))
    await customers.create(Customer(id=2, name="y"))

    assert (await customers.delete_by("name", "y")).is_ok()
    assert [d["id"] for d in store.documents] == [1]

    with pytest.raises(InvalidArgument):
        await customers.delete_by("age", 3)


@pytest.mark.asyncio
async def test_delete_removes_at_most_one(customers, store):
    await customers.create(Customer(id=1, name="x", city="Rome"))
    await customers.create(Customer(id=2, name="y", city="Rome"))

    await customers.delete_query().where(eq("city", "Rome")).execute()

    assert len(store.documents) == 1


@pytest.mark.asyncio
async def test_delete_query_composes(customers, store):
    await customers.create(Customer(id=1, name="x", city="Rome"))
    await customers.create(Customer(id=2, name="y", city="Rome"))

    result = await customers.delete_query().where(eq("city", "Rome")).where(eq("name", "y")).execute()

    assert result.is_ok()
    assert [d["id"] for d in store.documents] == [1]


@pytest.mark.asyncio
async def test_delete_requires_id(customers):
    with pytest.raises(InvalidArgument):
        await customers.delete(None)


@pytest.mark.asyncio
async def test_delete_by_id_without_primary_key(registry, store):
    await GroupBuilder("products", Product, store, registry=registry).build()
    with pytest.raises(GroupConfigurationError):
        await DeleteOperation(Product, registry).delete("A1")


@pytest.mark.asyncio
async def test_delete_by_id_with_custom_key(registry, store):
    await (
        GroupBuilder("customers", Customer, store, registry=registry)
        .has_primary_key("id")
        .with_custom_key_field_name("_id")
        .build()
    )
    service = GroupService(Customer, registry)
    await service.create(Customer(id=7, name="x"))
    assert store.documents[0]["_id"] == 7

    assert (await service.delete(7)).is_ok()
    assert store.documents == []
