from docgroup.core.store.base import IndexModel, Store
from docgroup.core.store.memory import InMemoryStore

__all__ = ["IndexModel", "InMemoryStore", "Store"]
