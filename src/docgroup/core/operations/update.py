"""Update operation and the fluent UpdateQuery builder."""

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Self, TypeVar

from docgroup.core.dto.result_dto import OperationResult, StatusCode
from docgroup.core.exceptions import InvalidArgument
from docgroup.core.operations.base import GroupOperation, check_where, physical_where, to_entity
from docgroup.core.query.types import Assignments, WhereNode, combine_where
from docgroup.core.registry.group import GroupConfig
from docgroup.core.registry.registry import GroupRegistry, get_default_registry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _check_assignment_field(config: GroupConfig[Any], field_name: Any) -> None:
    if field_name not in config.entity_map.field_names:
        raise InvalidArgument(
            f"Field '{field_name}' is not declared on {config.entity_type.__name__}",
            argument="field_name",
            value=field_name,
        )


class UpdateOperation(GroupOperation[T]):
    """Applies field assignments to the first document matching a filter."""

    async def update(self, where: WhereNode, assignments: Mapping[str, Any]) -> OperationResult[T]:
        """Set ``assignments`` on the first entity matching ``where``.

        Values of encrypted fields are encrypted before they reach the store.

        Args:
            where: Filter over attribute names.
            assignments: {attribute: new value}.

        Returns:
            See apply().

        Raises:
            InvalidArgument: If the filter or the assignments are missing,
                malformed or reference unknown fields.
            NotRegistered: If the entity type has no group.
        """
        config = self._config()
        check_where(where, config.entity_map.field_names)
        if not assignments:
            raise InvalidArgument("At least one assignment is required", argument="assignments")

        encrypted: Assignments = {}
        for field_name, value in assignments.items():
            _check_assignment_field(config, field_name)
            encrypted[field_name] = config.encryption.encrypt_value(field_name, value)
        return await self.apply(where, encrypted)

    async def apply(self, where: WhereNode | None, assignments: Assignments) -> OperationResult[T]:
        """Apply assignments whose values are already in stored form.

        Args:
            where: Filter over attribute names; None matches every document.
            assignments: {attribute: stored value}.

        Returns:
            OperationResult with:
            - success(UPDATE_SUCCESS): new_data is the decrypted post-image
              when the group returns document state
            - fail(NOT_FOUND): nothing matched
        """
        config = self._config()
        store = config.store
        physical_filter = physical_where(config, where)
        physical_set = config.entity_map.rename_assignments(assignments)

        if config.options.return_document_state:
            document = await store.find_one_and_update(physical_filter, physical_set, return_after=True)
            if document is None:
                return self._not_found(config)
            logger.debug("Document updated in group '%s'.", config.name)
            return OperationResult.success(
                StatusCode.UPDATE_SUCCESS,
                "Document updated successfully",
                new_data=to_entity(config, document),
            )

        if await store.update_one(physical_filter, physical_set) == 0:
            return self._not_found(config)
        logger.debug("Document updated in group '%s'.", config.name)
        return OperationResult.success(StatusCode.UPDATE_SUCCESS, "Document updated successfully")

    @staticmethod
    def _not_found(config: GroupConfig[T]) -> OperationResult[T]:
        logger.debug("Update in group '%s' matched nothing.", config.name)
        return OperationResult.fail(
            StatusCode.NOT_FOUND, "No document found matching the specified condition"
        )


@dataclass(frozen=True, slots=True)
class UpdateQuery(Generic[T]):
    """Immutable update builder over one group.

    ``where`` calls AND-compose; ``set`` calls accumulate, a later ``set`` on
    the same field replacing the earlier value.

    Example:
        >>> result = await (
        ...     service.update_query()
        ...     .where(eq("id", 1))
        ...     .set("name", "y")
        ...     .execute()
        ... )
    """

    entity_type: type[T]
    registry: GroupRegistry = dataclasses.field(default_factory=get_default_registry)
    condition: WhereNode | None = None
    assignments: tuple[tuple[str, Any], ...] = ()

    def _config(self) -> GroupConfig[T]:
        return self.registry.get(self.entity_type)

    def where(self, predicate: WhereNode) -> Self:
        """AND ``predicate`` onto the accumulated filter."""
        check_where(predicate, self._config().entity_map.field_names)
        return dataclasses.replace(self, condition=combine_where(self.condition, predicate))

    def set(self, field_name: str, value: Any) -> Self:
        """Assign ``value`` to ``field_name``, encrypting it when configured."""
        config = self._config()
        _check_assignment_field(config, field_name)
        stored = config.encryption.encrypt_value(field_name, value)
        kept = tuple(item for item in self.assignments if item[0] != field_name)
        return dataclasses.replace(self, assignments=(*kept, (field_name, stored)))

    async def execute(self) -> OperationResult[T]:
        """Run the update.

        Raises:
            InvalidArgument: If no field was set.
        """
        if not self.assignments:
            raise InvalidArgument("Update requires at least one set() call", argument="assignments")
        operation = UpdateOperation(self.entity_type, self.registry)
        return await operation.apply(self.condition, dict(self.assignments))


__all__ = ["UpdateOperation", "UpdateQuery"]
