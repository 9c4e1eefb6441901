"""Tests for GroupRegistry."""

import logging

import pytest

from docgroup.core.encryption.policy import EncryptionPolicy
from docgroup.core.exceptions import GroupAlreadyRegistered, NotRegistered
from docgroup.core.registry.group import GroupConfig
from docgroup.core.registry.registry import (
    GroupRegistry,
    get_default_registry,
    reset_default_registry,
)
from docgroup.core.store.memory import InMemoryStore
from tests.utils import Customer, Product


def _config(registry: GroupRegistry, entity_type=Customer, name="customers", **kwargs) -> GroupConfig:
    return GroupConfig(
        name=name,
        entity_type=entity_type,
        store=InMemoryStore(name),
        entity_map=registry.entity_map(entity_type),
        **kwargs,
    )


class TestRegistration:
    """register / get / unregister."""

    def test_get_registered(self, registry):
        config = registry.register(_config(registry))
        assert registry.get(Customer) is config
        assert registry.has(Customer)
        assert Customer in registry
        assert len(registry) == 1

    def test_get_missing_raises(self, registry):
        with pytest.raises(NotRegistered, match="Product"):
            registry.get(Product)

    def test_not_registered_is_lookup_error(self, registry):
        with pytest.raises(LookupError):
            registry.get(Product)

    def test_encryption_policy_accessor(self, registry):
        policy = EncryptionPolicy.using(str.upper, str.lower)
        registry.register(_config(registry, encryption=policy))
        assert registry.get_encryption_policy(Customer) is policy

    def test_get_all_and_iteration(self, registry):
        first = registry.register(_config(registry))
        second = registry.register(_config(registry, Product, "products"))
        assert registry.get_all() == [first, second]
        assert list(registry) == [first, second]

    def test_unregister(self, registry):
        registry.register(_config(registry))
        assert registry.unregister(Customer)
        assert not registry.unregister(Customer)
        assert not registry.has(Customer)


class TestOverride:
    """Re-registration policy."""

    def test_last_write_wins_with_warning(self, registry, caplog):
        registry.register(_config(registry, name="old"))
        replacement = _config(registry, name="new")

        with caplog.at_level(logging.WARNING):
            registry.register(replacement)

        assert registry.get(Customer) is replacement
        assert "Replacing group 'old'" in caplog.text

    def test_same_instance_is_skipped(self, registry, caplog):
        config = registry.register(_config(registry))
        with caplog.at_level(logging.WARNING):
            assert registry.register(config) is config
        assert "same instance" in caplog.text
        assert len(registry) == 1

    def test_strict_registry_refuses_override(self):
        registry = GroupRegistry(allow_override=False)
        registry.register(_config(registry, name="old"))

        with pytest.raises(GroupAlreadyRegistered) as exc_info:
            registry.register(_config(registry, name="new"))

        assert exc_info.value.name == "old"
        assert registry.get(Customer).name == "old"


class TestEntityMaps:
    """The registry owns one EntityMap per type."""

    def test_entity_map_is_shared(self, registry):
        assert registry.entity_map(Customer) is registry.entity_map(Customer)

    def test_registries_are_isolated(self, registry):
        assert registry.entity_map(Customer) is not GroupRegistry().entity_map(Customer)


def test_default_registry_reset():
    first = get_default_registry()
    assert get_default_registry() is first
    reset_default_registry()
    assert get_default_registry() is not first
