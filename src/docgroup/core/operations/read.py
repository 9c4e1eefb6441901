"""Read operation and the fluent EntityQuery builder."""

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Self, TypeVar

from docgroup.core.dto.result_dto import OperationResult, StatusCode
from docgroup.core.exceptions import InvalidArgument
from docgroup.core.operations.base import GroupOperation, check_where, physical_where, to_entity
from docgroup.core.query.types import QuerySpec, WhereNode, combine_where
from docgroup.core.query.validation import validate_non_negative, validate_order_by
from docgroup.core.registry.group import GroupConfig
from docgroup.core.registry.registry import GroupRegistry, get_default_registry

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ReadOperation(GroupOperation[T]):
    """Reads single entities by filter."""

    async def read(self, where: WhereNode) -> OperationResult[T]:
        """Return the first entity matching ``where``.

        Args:
            where: Filter over attribute names.

        Returns:
            OperationResult with:
            - success(READ_SUCCESS): new_data holds the decrypted entity
            - fail(NOT_FOUND): nothing matched

        Raises:
            InvalidArgument: If ``where`` is None or malformed.
            NotRegistered: If the entity type has no group.
        """
        config = self._config()
        check_where(where, config.entity_map.field_names)

        document = await config.store.find_one(physical_where(config, where))
        if document is None:
            logger.debug("Read in group '%s' found nothing.", config.name)
            return OperationResult.fail(
                StatusCode.NOT_FOUND, "No document found matching the specified condition"
            )

        return OperationResult.success(
            StatusCode.READ_SUCCESS,
            "Document read successfully",
            new_data=to_entity(config, document),
        )


@dataclass(frozen=True, slots=True)
class EntityQuery(Generic[T]):
    """Immutable query builder over one group.

    Each shaping call returns a new builder, so partially built queries
    can be shared and extended independently.

    Example:
        >>> active = service.query().where(eq("active", True))
        >>> newest = await active.order_by("-created_at").limit(10).to_list()
        >>> total = await active.count()
    """

    entity_type: type[T]
    registry: GroupRegistry = dataclasses.field(default_factory=get_default_registry)
    condition: WhereNode | None = None
    ordering: tuple[str, ...] | None = None
    max_results: int | None = None
    skip: int = 0

    def _config(self) -> GroupConfig[T]:
        return self.registry.get(self.entity_type)

    def where(self, predicate: WhereNode) -> Self:
        """AND ``predicate`` onto the accumulated filter."""
        check_where(predicate, self._config().entity_map.field_names)
        return dataclasses.replace(self, condition=combine_where(self.condition, predicate))

    def order_by(self, *fields: str) -> Self:
        """Sort by ``fields``; prefix a field with "-" for descending order."""
        validate_order_by(fields, self._config().entity_map.field_names)
        return dataclasses.replace(self, ordering=tuple(fields))

    def limit(self, n: int) -> Self:
        return dataclasses.replace(self, max_results=validate_non_negative(n, "limit"))

    def offset(self, n: int) -> Self:
        return dataclasses.replace(self, skip=validate_non_negative(n, "offset"))

    def _spec(self, config: GroupConfig[T]) -> QuerySpec:
        return QuerySpec(
            where=physical_where(config, self.condition),
            order_by=config.entity_map.rename_order_by(self.ordering),
            limit=self.max_results,
            offset=self.skip,
        )

    async def to_list(self) -> list[T]:
        """Materialize every matching entity, decrypted."""
        config = self._config()
        documents = await config.store.find(self._spec(config))
        logger.debug("Query on group '%s' returned %d documents.", config.name, len(documents))
        return [to_entity(config, doc) for doc in documents]

    async def first_or_default(self, default: T | None = None) -> T | None:
        """Return the first matching entity, or ``default``."""
        config = self._config()
        spec = self._spec(config)
        spec = dataclasses.replace(spec, limit=1 if spec.limit is None else min(spec.limit, 1))
        documents = await config.store.find(spec)
        if not documents:
            return default
        return to_entity(config, documents[0])

    async def project(self, selector: Callable[[T], R]) -> list[R]:
        """Return ``selector(entity)`` for every matching entity."""
        if selector is None:
            raise InvalidArgument("Selector is required", argument="selector")
        return [selector(entity) for entity in await self.to_list()]

    async def count(self) -> int:
        """Count matching documents, ignoring limit and offset."""
        config = self._config()
        return await config.store.count(physical_where(config, self.condition))


__all__ = ["EntityQuery", "ReadOperation"]
