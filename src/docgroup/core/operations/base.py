"""Shared plumbing for the operation engine.

Operations are stateless: each call resolves the group config from the
registry, so a re-registration is picked up by the next call.
"""

from collections.abc import Collection
from typing import Any, Generic, TypeVar

from docgroup.core.exceptions import InvalidArgument
from docgroup.core.query.types import Document, WhereNode
from docgroup.core.query.validation import validate_where
from docgroup.core.registry.group import GroupConfig
from docgroup.core.registry.registry import GroupRegistry, get_default_registry

T = TypeVar("T")


class GroupOperation(Generic[T]):
    """Base class binding an operation to an entity type and a registry."""

    def __init__(self, entity_type: type[T], registry: GroupRegistry | None = None):
        if entity_type is None:
            raise InvalidArgument("Entity type is required", argument="entity_type")
        self._entity_type = entity_type
        self._registry = registry if registry is not None else get_default_registry()

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def registry(self) -> GroupRegistry:
        return self._registry

    def _config(self) -> GroupConfig[T]:
        return self._registry.get(self._entity_type)


def physical_where(config: GroupConfig[Any], where: WhereNode | None) -> WhereNode | None:
    """Rename a filter over attribute names to the group's physical names."""
    return config.entity_map.rename_where(where)


def check_where(where: WhereNode, fields: Collection[str]) -> WhereNode:
    """Validate a caller-supplied filter against the entity's fields."""
    return validate_where(where, allowed_fields=fields)


def to_entity(config: GroupConfig[T], document: Document) -> T:
    """Decrypt a stored document and build the caller-facing entity."""
    values = config.entity_map.from_document(document)
    return config.entity_map.load(config.encryption.decrypt_values(values))


__all__ = ["GroupOperation", "check_where", "physical_where", "to_entity"]
