"""Group configuration types.

A group binds one entity type to its Store, indexes, options and encryption
policy. GroupConfig instances are built by GroupBuilder and never change
after registration.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Self, TypeVar

from docgroup.core.encryption.policy import EncryptionPolicy
from docgroup.core.registry.mapping import EntityMap
from docgroup.core.settings.settings import Settings, as_bool
from docgroup.core.store.base import Store

T = TypeVar("T")

#: Suffix of generated index names ("<field>_1" = ascending on one field).
INDEX_SUFFIX = "_1"


@dataclass(frozen=True, slots=True)
class IndexSpec:
    """Declared single-field ascending index.

    Attributes:
        field: Attribute name the index covers.
        unique: Whether the index enforces uniqueness.
        name: Index name, always ``f"{field}_1"``.
    """

    field: str
    unique: bool = False
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", f"{self.field}{INDEX_SUFFIX}")

    @property
    def field_name(self) -> str:
        """Field encoded in the index name."""
        return self.name.removesuffix(INDEX_SUFFIX)


@dataclass(frozen=True, slots=True)
class GroupOptions:
    """Behavioral switches of one group.

    Attributes:
        use_transactions: Wrap the create insert in a store transaction.
        return_document_state: Populate new_data on create and update.
    """

    use_transactions: bool = False
    return_document_state: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, group_name: str) -> Self:
        """Resolve options from core defaults overlaid with group overrides.

        Args:
            settings: Loaded settings manager.
            group_name: Name of the group whose overrides apply.

        Returns:
            GroupOptions for the group.
        """
        core: dict[str, Any] = settings.get_core_config()
        overrides: dict[str, Any] = settings.get_group_config(group_name)
        merged = {**core, **overrides}
        return cls(
            use_transactions=as_bool(merged.get("use_transactions", False), "use_transactions"),
            return_document_state=as_bool(
                merged.get("return_document_state", False), "return_document_state"
            ),
        )


@dataclass(frozen=True, slots=True)
class GroupConfig(Generic[T]):
    """Immutable configuration for one entity type.

    Attributes:
        name: Human-readable group name.
        entity_type: The entity class.
        store: Collection the group reads and writes.
        entity_map: Attribute to document-field mapping.
        primary_key: Attribute used by delete-by-id, if declared.
        custom_key_field: Physical name requested for the primary key.
        indexes: Declared indexes, in declaration order.
        options: Behavioral switches.
        encryption: Field-level encryption policy.
    """

    name: str
    entity_type: type[T]
    store: Store
    entity_map: EntityMap[T]
    primary_key: str | None = None
    custom_key_field: str | None = None
    indexes: tuple[IndexSpec, ...] = ()
    options: GroupOptions = field(default_factory=GroupOptions)
    encryption: EncryptionPolicy = field(default_factory=EncryptionPolicy.disabled)

    @property
    def unique_indexes(self) -> tuple[IndexSpec, ...]:
        return tuple(index for index in self.indexes if index.unique)


__all__ = ["GroupConfig", "GroupOptions", "IndexSpec", "INDEX_SUFFIX"]
