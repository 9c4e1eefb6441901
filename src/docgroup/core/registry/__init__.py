from docgroup.core.registry.builder import GroupBuilder
from docgroup.core.registry.group import GroupConfig, GroupOptions, IndexSpec
from docgroup.core.registry.mapping import EntityMap
from docgroup.core.registry.registry import (
    GroupRegistry,
    get_default_registry,
    reset_default_registry,
)

__all__ = [
    "EntityMap",
    "GroupBuilder",
    "GroupConfig",
    "GroupOptions",
    "GroupRegistry",
    "IndexSpec",
    "get_default_registry",
    "reset_default_registry",
]
