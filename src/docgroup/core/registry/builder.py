"""GroupBuilder - fluent, one-time group registration."""

import logging
from typing import TYPE_CHECKING, Generic, Self, TypeVar

from docgroup.core.encryption.policy import EncryptionPolicy
from docgroup.core.exceptions import GroupConfigurationError, InvalidArgument
from docgroup.core.registry.group import GroupConfig, GroupOptions, IndexSpec
from docgroup.core.registry.registry import GroupRegistry, get_default_registry
from docgroup.core.store.base import IndexModel, Store

if TYPE_CHECKING:
    from docgroup.core.settings.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GroupBuilder(Generic[T]):
    """Collects the configuration of one group and registers it.

    Every ``has_*``/``with_*`` method returns the builder so calls can be
    chained; ``build()`` creates missing indexes on the store and registers
    the resulting GroupConfig.

    Example:
        >>> config = await (
        ...     GroupBuilder("customers", Customer, store, registry=registry)
        ...     .has_primary_key("id")
        ...     .with_custom_key_field_name("_id")
        ...     .with_index("email", unique=True)
        ...     .build()
        ... )
    """

    def __init__(
        self,
        name: str,
        entity_type: type[T],
        store: Store,
        options: GroupOptions | None = None,
        *,
        registry: GroupRegistry | None = None,
        settings: "Settings | None" = None,
    ):
        """Initialize the builder.

        Args:
            name: Non-empty group name.
            entity_type: Pydantic model or dataclass stored by the group.
            store: Collection backing the group.
            options: Explicit options. When omitted they are resolved from
                ``settings``, or default to GroupOptions().
            registry: Registry to register into (default: process-wide).
            settings: Settings used to resolve options.

        Raises:
            InvalidArgument: If the name is blank or a handle is missing.
            UnsupportedEntityType: If the entity type cannot be mapped.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument("Group name must not be blank", argument="name", value=name)
        if entity_type is None:
            raise InvalidArgument("Entity type is required", argument="entity_type")
        if store is None:
            raise InvalidArgument("Store is required", argument="store")

        self._name = name
        self._entity_type = entity_type
        self._store = store
        self._registry = registry if registry is not None else get_default_registry()
        self._entity_map = self._registry.entity_map(entity_type)

        if options is not None:
            self._options = options
        elif settings is not None:
            self._options = GroupOptions.from_settings(settings, name)
        else:
            self._options = GroupOptions()

        self._primary_key: str | None = None
        self._custom_key_field: str | None = None
        self._indexes: list[IndexSpec] = []
        self._encryption = EncryptionPolicy.disabled()
        logger.debug("GroupBuilder created for group '%s' (%s).", name, entity_type.__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> GroupOptions:
        return self._options

    def _require_field(self, field_name: str, argument: str) -> None:
        if field_name not in self._entity_map.field_names:
            raise InvalidArgument(
                f"Field '{field_name}' is not declared on {self._entity_type.__name__}",
                argument=argument,
                value=field_name,
            )

    # =========================================================================
    # FLUENT CONFIGURATION
    # =========================================================================

    def has_primary_key(self, field_name: str) -> Self:
        """Declare the primary-key attribute (used by delete-by-id)."""
        self._require_field(field_name, "field_name")
        self._primary_key = field_name
        return self

    def with_custom_key_field_name(self, field_name: str) -> Self:
        """Store the primary key under ``field_name`` in documents.

        Raises:
            InvalidArgument: If the name is blank.
        """
        if not isinstance(field_name, str) or not field_name.strip():
            raise InvalidArgument(
                "Field name must not be blank", argument="field_name", value=field_name
            )
        self._custom_key_field = field_name
        return self

    def with_encryption(self, policy: EncryptionPolicy) -> Self:
        """Install the group's field-level encryption policy."""
        if policy is None:
            raise InvalidArgument("Encryption policy is required", argument="policy")
        for field_name in policy.fields or ():
            self._require_field(field_name, "policy.fields")
        self._encryption = policy
        return self

    def with_index(self, field_name: str, unique: bool = False) -> Self:
        """Declare an ascending index named ``f"{field_name}_1"``."""
        self._require_field(field_name, "field_name")
        self._indexes.append(IndexSpec(field_name, unique))
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    async def build(self) -> GroupConfig[T]:
        """Apply the key mapping, create missing indexes and register the group.

        Returns:
            The registered GroupConfig.

        Raises:
            GroupConfigurationError: If a custom key field was requested
                without a primary key.
            GroupAlreadyRegistered: If the registry refuses overrides.
        """
        if self._custom_key_field is not None:
            self._apply_custom_key()

        await self._ensure_indexes()

        config = GroupConfig(
            name=self._name,
            entity_type=self._entity_type,
            store=self._store,
            entity_map=self._entity_map,
            primary_key=self._primary_key,
            custom_key_field=self._custom_key_field,
            indexes=tuple(self._indexes),
            options=self._options,
            encryption=self._encryption,
        )
        return self._registry.register(config)

    def _apply_custom_key(self) -> None:
        if self._primary_key is None:
            raise GroupConfigurationError(
                f"Group '{self._name}' sets a custom key field but declares no primary key."
            )
        if self._entity_map.is_frozen:
            logger.warning(
                "Field mapping for %s is already in use; custom key field '%s' not applied.",
                self._entity_type.__name__,
                self._custom_key_field,
            )
            return
        self._entity_map.set_element_name(self._primary_key, self._custom_key_field)

    async def _ensure_indexes(self) -> None:
        existing = set(await self._store.list_indexes())
        missing: list[IndexModel] = []
        for spec in self._indexes:
            if spec.name in existing:
                continue
            existing.add(spec.name)
            missing.append(
                IndexModel(
                    key=self._entity_map.element_name(spec.field),
                    unique=spec.unique,
                    name=spec.name,
                )
            )

        if missing:
            await self._store.create_indexes(missing)
            logger.info(
                "Created indexes %s for group '%s'.", [m.name for m in missing], self._name
            )


__all__ = ["GroupBuilder"]
