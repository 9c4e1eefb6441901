"""Create operation."""

import logging
from typing import TypeVar

from docgroup.core.dto.result_dto import OperationResult, StatusCode
from docgroup.core.exceptions import DuplicateKeyError, InvalidArgument
from docgroup.core.operations.base import GroupOperation
from docgroup.core.query.types import eq
from docgroup.core.registry.group import GroupConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CreateOperation(GroupOperation[T]):
    """Inserts entities into their group's store."""

    async def create(self, entity: T) -> OperationResult[T]:
        """Insert ``entity``.

        Unique indexes are checked before the insert; the check is
        best-effort and the store's own unique index remains the final word
        (reported as DUPLICATE_KEY).

        Args:
            entity: Instance of the operation's entity type.

        Returns:
            OperationResult with:
            - success(CREATION_SUCCESS): inserted; new_data is the caller's
              entity when the group returns document state
            - fail(UNIQUE_INDEX_VIOLATION): pre-check found a document with
              the same unique value (context["field"] names the field)
            - fail(DUPLICATE_KEY): the store rejected the insert

        Raises:
            InvalidArgument: If entity is None or of the wrong type.
            NotRegistered: If the entity type has no group.
        """
        if entity is None:
            raise InvalidArgument("Entity must not be None", argument="entity")

        config = self._config()
        if not config.entity_map.is_instance(entity):
            raise InvalidArgument(
                f"Expected {self._entity_type.__name__}, got {type(entity).__name__}",
                argument="entity",
            )

        values = config.entity_map.dump(entity)

        violation = await self._unique_violation(config, values)
        if violation is not None:
            logger.debug("Create in group '%s' violates unique field '%s'.", config.name, violation)
            return OperationResult.fail(
                StatusCode.UNIQUE_INDEX_VIOLATION,
                f"Creation violates the unique index definition for field '{violation}'",
                context={"field": violation},
            )

        document = config.entity_map.to_document(config.encryption.encrypt_values(values))
        store = config.store
        try:
            if config.options.use_transactions:
                async with store.transaction() as txn:
                    await store.insert_one(document, transaction=txn)
            else:
                await store.insert_one(document)
        except DuplicateKeyError as e:
            logger.debug("Store rejected create in group '%s': %s", config.name, e)
            return OperationResult.fail(
                StatusCode.DUPLICATE_KEY,
                "Duplicate key error",
                context={"index": e.index} if e.index else {},
            )

        logger.debug("Document created in group '%s'.", config.name)
        return OperationResult.success(
            StatusCode.CREATION_SUCCESS,
            "Document created successfully",
            new_data=entity if config.options.return_document_state else None,
        )

    async def _unique_violation(self, config: GroupConfig[T], values: dict) -> str | None:
        for index in config.unique_indexes:
            field_name = index.field_name
            if field_name not in values:
                continue
            physical = config.entity_map.element_name(field_name)
            if await config.store.find_one(eq(physical, values[field_name])) is not None:
                return field_name
        return None


__all__ = ["CreateOperation"]
