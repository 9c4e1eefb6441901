"""EntityMap - attribute to document-field mapping for one entity type.

Entities are pydantic models or dataclasses. Their attribute names are used
everywhere in the public API (filters, assignments, index declarations); an
EntityMap renames them to the physical field names stored in documents.

The map freezes the first time it converts an entity or rewrites a filter,
so every document of a type is written with one consistent set of names.
"""

import dataclasses
import logging
import threading
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, TypeAdapter

from docgroup.core.exceptions import InvalidArgument, MappingFrozen, UnsupportedEntityType
from docgroup.core.query.types import Assignments, Document, WhereNode, rename_fields

logger = logging.getLogger(__name__)

T = TypeVar("T")


def declared_fields(entity_type: Any) -> tuple[str, ...]:
    """Return the attribute names declared by an entity type.

    Raises:
        UnsupportedEntityType: If the type is neither a pydantic model nor a
            dataclass.
    """
    if isinstance(entity_type, type) and issubclass(entity_type, BaseModel):
        return tuple(entity_type.model_fields)
    if isinstance(entity_type, type) and dataclasses.is_dataclass(entity_type):
        return tuple(f.name for f in dataclasses.fields(entity_type))
    raise UnsupportedEntityType(entity_type)


class EntityMap(Generic[T]):
    """Field mapping metadata for one entity type.

    Example:
        >>> emap = EntityMap(Customer)
        >>> emap.set_element_name("id", "_id")
        >>> emap.to_document(Customer(id=1, name="x"))
        {'_id': 1, 'name': 'x'}
    """

    def __init__(self, entity_type: type[T]):
        self._entity_type = entity_type
        self._fields = declared_fields(entity_type)
        self._element_names: dict[str, str] = {name: name for name in self._fields}
        self._attribute_names: dict[str, str] = dict(self._element_names)
        self._frozen = False
        self._lock = threading.Lock()
        # Rebuilds nested dataclasses that asdict() flattened to dicts.
        self._adapter: TypeAdapter[T] | None = None
        if not issubclass(entity_type, BaseModel):
            self._adapter = TypeAdapter(entity_type)
        logger.debug("EntityMap created for %s with fields %s", entity_type.__name__, self._fields)

    @property
    def entity_type(self) -> type[T]:
        return self._entity_type

    @property
    def field_names(self) -> tuple[str, ...]:
        """Declared attribute names, in declaration order."""
        return self._fields

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Lock the mapping; later set_element_name calls raise MappingFrozen."""
        if not self._frozen:
            self._frozen = True
            logger.debug("EntityMap for %s frozen.", self._entity_type.__name__)

    def set_element_name(self, field_name: str, element_name: str) -> None:
        """Store ``field_name`` under ``element_name`` in documents.

        Raises:
            InvalidArgument: If the field is unknown, the element name is
                blank or already used by another field.
            MappingFrozen: If the map was already used.
        """
        if field_name not in self._element_names:
            raise InvalidArgument(
                f"Field '{field_name}' is not declared on {self._entity_type.__name__}",
                argument="field_name",
                value=field_name,
            )
        if not element_name or not element_name.strip():
            raise InvalidArgument("Element name must not be blank", argument="element_name")

        with self._lock:
            if self._frozen:
                raise MappingFrozen(self._entity_type)
            owner = self._attribute_names.get(element_name)
            if owner is not None and owner != field_name:
                raise InvalidArgument(
                    f"Element name '{element_name}' is already used by field '{owner}'",
                    argument="element_name",
                    value=element_name,
                )
            del self._attribute_names[self._element_names[field_name]]
            self._element_names[field_name] = element_name
            self._attribute_names[element_name] = field_name
        logger.debug(
            "Field '%s' of %s mapped to element '%s'.",
            field_name,
            self._entity_type.__name__,
            element_name,
        )

    def element_name(self, field_name: str) -> str:
        """Return the physical name of ``field_name``."""
        try:
            return self._element_names[field_name]
        except KeyError:
            raise InvalidArgument(
                f"Field '{field_name}' is not declared on {self._entity_type.__name__}",
                argument="field_name",
                value=field_name,
            ) from None

    # =========================================================================
    # ENTITY <-> VALUES
    # =========================================================================

    def is_instance(self, entity: Any) -> bool:
        return isinstance(entity, self._entity_type)

    def dump(self, entity: T) -> dict[str, Any]:
        """Return the entity's attribute values keyed by attribute name."""
        if isinstance(entity, BaseModel):
            return entity.model_dump()
        return dataclasses.asdict(entity)

    def load(self, values: Mapping[str, Any]) -> T:
        """Build an entity from attribute values, ignoring unknown keys."""
        known = {name: value for name, value in values.items() if name in self._element_names}
        if issubclass(self._entity_type, BaseModel):
            return self._entity_type.model_validate(known)
        return self._adapter.validate_python(known)

    # =========================================================================
    # VALUES <-> DOCUMENT
    # =========================================================================

    def to_document(self, values: Mapping[str, Any]) -> Document:
        """Rename attribute values to a physical document."""
        self.freeze()
        return {self._element_names[name]: value for name, value in values.items()}

    def from_document(self, document: Document) -> dict[str, Any]:
        """Rename a physical document back to attribute values.

        Document keys that map to no attribute (e.g. a store-generated
        ``_id``) are dropped.
        """
        self.freeze()
        return {
            self._attribute_names[key]: value
            for key, value in document.items()
            if key in self._attribute_names
        }

    def rename_where(self, node: WhereNode | None) -> WhereNode | None:
        """Rewrite a filter over attribute names to physical names."""
        self.freeze()
        if node is None:
            return None
        return rename_fields(node, self.element_name)

    def rename_assignments(self, assignments: Assignments) -> Assignments:
        """Rewrite {attribute: value} assignments to physical names."""
        self.freeze()
        return {self.element_name(name): value for name, value in assignments.items()}

    def rename_order_by(self, order_by: tuple[str, ...] | None) -> tuple[str, ...] | None:
        if order_by is None:
            return None
        self.freeze()
        return tuple(
            ("-" if entry.startswith("-") else "") + self.element_name(entry.removeprefix("-"))
            for entry in order_by
        )


__all__ = ["EntityMap", "declared_fields"]
