"""Delete operation and the fluent DeleteQuery builder."""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Generic, Self, TypeVar

from docgroup.core.dto.result_dto import OperationResult, StatusCode
from docgroup.core.exceptions import GroupConfigurationError, InvalidArgument
from docgroup.core.operations.base import GroupOperation, check_where, physical_where
from docgroup.core.query.types import WhereNode, combine_where, eq
from docgroup.core.registry.group import GroupConfig
from docgroup.core.registry.registry import GroupRegistry, get_default_registry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeleteOperation(GroupOperation[T]):
    """Deletes at most one document per call."""

    async def delete(self, id: Any) -> OperationResult[T]:
        """Delete the entity whose primary key equals ``id``.

        Raises:
            InvalidArgument: If ``id`` is None.
            GroupConfigurationError: If the group declares no primary key.
        """
        if id is None:
            raise InvalidArgument("Id must not be None", argument="id")
        config = self._config()
        if config.primary_key is None:
            raise GroupConfigurationError(
                f"Group '{config.name}' declares no primary key; use delete_by() instead."
            )
        return await self.apply(eq(config.primary_key, id))

    async def delete_by(self, field_name: str, value: Any) -> OperationResult[T]:
        """Delete the first entity whose ``field_name`` equals ``value``.

        Raises:
            InvalidArgument: If the field is not declared on the entity.
        """
        predicate = eq(field_name, value)
        check_where(predicate, self._config().entity_map.field_names)
        return await self.apply(predicate)

    async def apply(self, where: WhereNode | None) -> OperationResult[T]:
        """Delete the first document matching ``where`` (None matches all).

        Returns:
            OperationResult with:
            - success(DELETION_SUCCESS): one document removed
            - fail(NOT_FOUND): nothing matched; the store is unchanged
        """
        config = self._config()
        deleted = await config.store.delete_one(physical_where(config, where))
        if deleted == 0:
            logger.debug("Delete in group '%s' matched nothing.", config.name)
            return OperationResult.fail(
                StatusCode.NOT_FOUND, "No document found matching the specified condition"
            )
        logger.debug("Document deleted from group '%s'.", config.name)
        return OperationResult.success(StatusCode.DELETION_SUCCESS, "Document deleted successfully")


@dataclass(frozen=True, slots=True)
class DeleteQuery(Generic[T]):
    """Immutable delete builder over one group.

    Example:
        >>> result = await service.delete_query().where(eq("id", 99)).execute()
        >>> result.status_code
        'NOT_FOUND'
    """

    entity_type: type[T]
    registry: GroupRegistry = dataclasses.field(default_factory=get_default_registry)
    condition: WhereNode | None = None

    def _config(self) -> GroupConfig[T]:
        return self.registry.get(self.entity_type)

    def where(self, predicate: WhereNode) -> Self:
        """AND ``predicate`` onto the accumulated filter."""
        check_where(predicate, self._config().entity_map.field_names)
        return dataclasses.replace(self, condition=combine_where(self.condition, predicate))

    async def execute(self) -> OperationResult[T]:
        """Delete the first matching document."""
        return await DeleteOperation(self.entity_type, self.registry).apply(self.condition)


__all__ = ["DeleteOperation", "DeleteQuery"]
