"""GroupService - per-entity-type entry point to the operation engine."""

import logging
from collections.abc import Awaitable, Mapping
from typing import Any, Generic, TypeVar

from docgroup.core.dto.result_dto import OperationResult
from docgroup.core.operations.create import CreateOperation
from docgroup.core.operations.delete import DeleteOperation, DeleteQuery
from docgroup.core.operations.read import EntityQuery, ReadOperation
from docgroup.core.operations.update import UpdateOperation, UpdateQuery
from docgroup.core.query.types import WhereNode
from docgroup.core.registry.registry import GroupRegistry, get_default_registry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GroupService(Generic[T]):
    """CRUD and fluent query API for one entity type.

    The service holds no state besides the entity type and the registry;
    every call resolves the current group configuration.

    Example:
        >>> customers = GroupService(Customer, registry)
        >>> await customers.create(Customer(id=1, name="x"))
        >>> found = await customers.query().where(eq("name", "x")).to_list()
    """

    def __init__(self, entity_type: type[T], registry: GroupRegistry | None = None):
        self._entity_type = entity_type
        self._registry = registry if registry is not None else get_default_registry()
        self._create = CreateOperation(entity_type, self._registry)
        self._read = ReadOperation(entity_type, self._registry)
        self._update = UpdateOperation(entity_type, self._registry)
        self._delete = DeleteOperation(entity_type, self._registry)
        logger.debug("GroupService created for %s.", entity_type.__name__)

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    async def create(self, entity: T) -> OperationResult[T]:
        return await self._create.create(entity)

    async def read(self, where: WhereNode) -> OperationResult[T]:
        return await self._read.read(where)

    async def update(self, where: WhereNode, assignments: Mapping[str, Any]) -> OperationResult[T]:
        return await self._update.update(where, assignments)

    async def delete(self, id: Any) -> OperationResult[T]:
        return await self._delete.delete(id)

    async def delete_by(self, field_name: str, value: Any) -> OperationResult[T]:
        return await self._delete.delete_by(field_name, value)

    def query(self) -> EntityQuery[T]:
        return EntityQuery(self._entity_type, self._registry)

    def update_query(self) -> UpdateQuery[T]:
        return UpdateQuery(self._entity_type, self._registry)

    def delete_query(self) -> DeleteQuery[T]:
        return DeleteQuery(self._entity_type, self._registry)


async def get_data(result: Awaitable[OperationResult[T]]) -> T | None:
    """Await an operation and return its new_data.

    Example:
        >>> customer = await get_data(customers.read(eq("id", 1)))
    """
    return (await result).new_data


__all__ = ["GroupService", "get_data"]
