"""GroupRegistry - entity type to group configuration map.

The registry is written at startup (one registration per entity type) and
read on every operation call. Writes take a lock; reads are plain dict
lookups, so a reader racing a re-registration sees either the old or the
new config.
"""

import logging
import threading
from collections.abc import Iterator
from typing import Any, TypeVar

from docgroup.core.encryption.policy import EncryptionPolicy
from docgroup.core.exceptions import GroupAlreadyRegistered, NotRegistered
from docgroup.core.registry.group import GroupConfig
from docgroup.core.registry.mapping import EntityMap

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GroupRegistry:
    """Registry of group configurations keyed by entity type.

    Besides the configs, the registry owns one EntityMap per entity type, so
    mapping changes made while building a group are visible to every
    operation that resolves the group through the same registry.

    Example:
        >>> registry = GroupRegistry()
        >>> config = await GroupBuilder("customers", Customer, store, registry=registry).build()
        >>> registry.get(Customer) is config
        True
    """

    def __init__(self, *, allow_override: bool = True):
        """Initialize the registry.

        Args:
            allow_override: When False, registering a second config for a
                type raises GroupAlreadyRegistered instead of replacing it.
        """
        self._configs: dict[type, GroupConfig[Any]] = {}
        self._maps: dict[type, EntityMap[Any]] = {}
        self._allow_override = allow_override
        self._lock = threading.Lock()
        logger.debug("GroupRegistry instance created (allow_override=%s).", allow_override)

    @property
    def allow_override(self) -> bool:
        return self._allow_override

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, config: GroupConfig[T]) -> GroupConfig[T]:
        """Register ``config`` for its entity type.

        Args:
            config: The built group configuration.

        Returns:
            The registered config.

        Raises:
            GroupAlreadyRegistered: If the type is already registered with a
                different config and overrides are not allowed.
        """
        entity_type = config.entity_type
        with self._lock:
            previous = self._configs.get(entity_type)
            if previous is config:
                logger.warning(
                    "Group '%s' already registered with the same instance; skipping.",
                    config.name,
                )
                return config
            if previous is not None:
                if not self._allow_override:
                    raise GroupAlreadyRegistered(entity_type, previous.name)
                logger.warning(
                    "Replacing group '%s' registered for %s with group '%s'.",
                    previous.name,
                    entity_type.__name__,
                    config.name,
                )
            self._configs[entity_type] = config
            self._maps[entity_type] = config.entity_map
        logger.info("Group '%s' registered for %s.", config.name, entity_type.__name__)
        return config

    def unregister(self, entity_type: type) -> bool:
        """Remove the config registered for ``entity_type``.

        Returns:
            True if a config was removed, False if none was registered.
        """
        with self._lock:
            config = self._configs.pop(entity_type, None)
        if config is None:
            return False
        logger.debug("Group '%s' unregistered.", config.name)
        return True

    def entity_map(self, entity_type: type[T]) -> EntityMap[T]:
        """Return the type's EntityMap, creating it on first request.

        Raises:
            UnsupportedEntityType: If the type is not a pydantic model or a
                dataclass.
        """
        emap = self._maps.get(entity_type)
        if emap is not None:
            return emap
        with self._lock:
            emap = self._maps.get(entity_type)
            if emap is None:
                emap = EntityMap(entity_type)
                self._maps[entity_type] = emap
        return emap

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get(self, entity_type: type[T]) -> GroupConfig[T]:
        """Return the config registered for ``entity_type``.

        Raises:
            NotRegistered: If no group was registered for the type.
        """
        config = self._configs.get(entity_type)
        if config is None:
            raise NotRegistered(entity_type)
        return config

    def get_encryption_policy(self, entity_type: type) -> EncryptionPolicy:
        """Return the encryption policy of the type's group."""
        return self.get(entity_type).encryption

    def get_all(self) -> list[GroupConfig[Any]]:
        """Return every registered config, in registration order."""
        return list(self._configs.values())

    def has(self, entity_type: type) -> bool:
        return entity_type in self._configs

    def __len__(self) -> int:
        """Return the number of registered groups."""
        return len(self._configs)

    def __iter__(self) -> Iterator[GroupConfig[Any]]:
        """Iterate over registered configs."""
        return iter(list(self._configs.values()))

    def __contains__(self, entity_type: type) -> bool:
        return entity_type in self._configs


# =============================================================================
# DEFAULT REGISTRY
# =============================================================================

_default_registry: GroupRegistry | None = None
_default_lock = threading.Lock()


def get_default_registry() -> GroupRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = GroupRegistry()
    return _default_registry


def reset_default_registry() -> None:
    """Drop the process-wide registry (test teardown)."""
    global _default_registry
    with _default_lock:
        _default_registry = None


__all__ = ["GroupRegistry", "get_default_registry", "reset_default_registry"]
