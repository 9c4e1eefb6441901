"""Pytest fixtures.

This file adjusts sys.path for src-layout imports.
"""

# ruff: noqa: E402

import os
import sys

# Ensure `src` is on sys.path so imports like `from docgroup.core...` resolve during tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if os.path.isdir(SRC):
    sys.path.insert(0, SRC)
sys.path.insert(0, ROOT)

import pytest
import pytest_asyncio
from rich.traceback import install

from docgroup.core.registry.builder import GroupBuilder
from docgroup.core.registry.group import GroupOptions
from docgroup.core.registry.registry import GroupRegistry, reset_default_registry
from docgroup.core.service import GroupService
from docgroup.core.store.memory import InMemoryStore
from tests.utils import Customer

# Enable readable tracebacks in development / test environments.
# Can be disabled with PYTEST_RICH=0
if os.getenv("PYTEST_RICH", "1") == "1":
    install(
        show_locals=True,  # show local variables for each frame
        width=None,  # use terminal width
        word_wrap=True,  # wrap long lines
        extra_lines=1,  # some context around lines
        suppress=["/usr/lib/python3", "site-packages"],  # hide "noisy" third-party frames
    )


@pytest.fixture(autouse=True)
def _isolated_default_registry():
    """Give every test a fresh process-wide registry."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def registry() -> GroupRegistry:
    return GroupRegistry()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore("customers")


@pytest_asyncio.fixture
async def customers(registry, store) -> GroupService[Customer]:
    """Customer group with a unique index on name, returning document state."""
    await (
        GroupBuilder(
            "customers",
            Customer,
            store,
            GroupOptions(return_document_state=True),
            registry=registry,
        )
        .has_primary_key("id")
        .with_index("name", unique=True)
        .build()
    )
    return GroupService(Customer, registry)
