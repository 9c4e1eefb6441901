"""Core DocGroup facade.

This module defines the main entry point used by applications and tests.
"""

import logging
from typing import Any, TypeVar

from dotenv import load_dotenv

from docgroup.core.registry.builder import GroupBuilder
from docgroup.core.registry.group import GroupOptions
from docgroup.core.registry.registry import GroupRegistry
from docgroup.core.service import GroupService
from docgroup.core.settings.settings import Settings, as_bool
from docgroup.core.store.base import Store

logger = logging.getLogger(__name__)
load_dotenv()

T = TypeVar("T")


class DocGroup:
    """Facade owning the settings and the group registry of an application."""

    def __init__(self, *args, **kwargs):
        """Prevent direct construction; use `DocGroup.create(...)` instead."""
        raise RuntimeError("Use: instance = DocGroup.create(...)")

    def _initialize(self, *, config_path: str | None, registry: GroupRegistry | None) -> None:
        self.settings = Settings(config_path=config_path)
        self._registry = registry
        self._services: dict[type, GroupService[Any]] = {}

    @classmethod
    def create(
        cls,
        *,
        config_path: str | None = None,
        config: dict[str, Any] | None = None,
        registry: GroupRegistry | None = None,
    ) -> "DocGroup":
        """Factory method to create and initialize DocGroup.

        Args:
            config_path: Path to JSON configuration file.
            config: Optional configuration dictionary.
            registry: Registry to share; by default the facade gets its own,
                configured from the ``allow_override`` setting.
        """
        instance = cls.__new__(cls)  # bypass __init__
        instance._initialize(config_path=config_path, registry=registry)
        instance.settings.load(config=config)
        if instance._registry is None:
            allow_override = instance.settings.get_core_config("allow_override", True)
            allow_override = as_bool(allow_override, "allow_override")
            instance._registry = GroupRegistry(allow_override=allow_override)
        logger.debug("DocGroup instance created.")
        return instance

    @property
    def registry(self) -> GroupRegistry:
        return self._registry

    def group(
        self,
        name: str,
        entity_type: type[T],
        store: Store,
        options: GroupOptions | None = None,
    ) -> GroupBuilder[T]:
        """Start building a group registered into this facade's registry."""
        return GroupBuilder(
            name, entity_type, store, options, registry=self._registry, settings=self.settings
        )

    def service(self, entity_type: type[T]) -> GroupService[T]:
        """Return the service for a registered entity type.

        Raises:
            NotRegistered: If no group was built for the type.
        """
        self._registry.get(entity_type)
        service = self._services.get(entity_type)
        if service is None:
            service = GroupService(entity_type, self._registry)
            self._services[entity_type] = service
        return service

    def services(self) -> dict[type, GroupService[Any]]:
        """Return a service for every registered group, keyed by entity type."""
        return {config.entity_type: self.service(config.entity_type) for config in self._registry}
