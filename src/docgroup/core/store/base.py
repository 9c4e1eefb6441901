"""Store - Physical Collection Contract.

Defines the abstract contract the operation engine calls for physical I/O.
A Store wraps exactly one collection. Implementations translate their native
errors: a write that violates a unique index MUST raise DuplicateKeyError;
every other backend error propagates unchanged.

Note:
    - Documents are plain dicts keyed by physical field names.
    - Filters are WhereNode tuples already renamed to physical field names;
      None matches every document.
    - Assignments use "set" semantics: {field: new_value}.
"""

from abc import abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import (
    Any,
    Protocol,
    runtime_checkable,
)

from docgroup.core.query.types import Assignments, Document, QuerySpec, WhereNode


@dataclass(frozen=True, slots=True)
class IndexModel:
    """Physical index definition passed to Store.create_indexes.

    Attributes:
        key: Physical field name (ascending).
        unique: Whether the index enforces uniqueness.
        name: Index name; stores use it to detect existing indexes.
    """

    key: str
    unique: bool
    name: str


@runtime_checkable
class Store(Protocol):
    """Protocol for the document collection behind one group.

    All I/O methods are coroutines. Implementations must be safe to call
    concurrently from many tasks.
    """

    @property
    def name(self) -> str:
        """Human-readable name for this store (usually the collection name)."""
        ...

    # =========================================================================
    # READS
    # =========================================================================

    @abstractmethod
    async def find_one(self, where: WhereNode | None) -> Document | None:
        """Return the first document matching ``where``, or None."""
        ...

    @abstractmethod
    async def find(self, spec: QuerySpec) -> list[Document]:
        """Return every document matching ``spec``.

        Args:
            spec: Filter, ordering and pagination.

        Returns:
            Matching documents, in ``spec.order_by`` order when given.
        """
        ...

    @abstractmethod
    async def count(self, where: WhereNode | None) -> int:
        """Return the number of documents matching ``where``."""
        ...

    # =========================================================================
    # WRITES
    # =========================================================================

    @abstractmethod
    async def insert_one(self, document: Document, *, transaction: Any = None) -> None:
        """Insert a new document.

        Args:
            document: The document to insert.
            transaction: Optional handle yielded by ``transaction()``.

        Raises:
            DuplicateKeyError: If a unique index rejects the document.
        """
        ...

    @abstractmethod
    async def update_one(self, where: WhereNode | None, assignments: Assignments) -> int:
        """Apply ``assignments`` to the first matching document.

        Returns:
            Matched count (0 or 1).
        """
        ...

    @abstractmethod
    async def find_one_and_update(
        self,
        where: WhereNode | None,
        assignments: Assignments,
        *,
        return_after: bool = True,
    ) -> Document | None:
        """Atomically update the first matching document and return it.

        Args:
            where: Filter selecting the document.
            assignments: Field values to set.
            return_after: Return the post-update image (True) or the
                pre-update image (False).

        Returns:
            The selected image, or None when nothing matched.
        """
        ...

    @abstractmethod
    async def delete_one(self, where: WhereNode | None) -> int:
        """Delete the first matching document.

        Returns:
            Deleted count (0 or 1).
        """
        ...

    # =========================================================================
    # SCHEMA
    # =========================================================================

    @abstractmethod
    async def list_indexes(self) -> list[str]:
        """Return the names of the indexes that exist on the collection."""
        ...

    @abstractmethod
    async def create_indexes(self, models: list[IndexModel]) -> None:
        """Create all given indexes in one call."""
        ...

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[Any]:
        """Open a store-managed transaction.

        Used as ``async with store.transaction() as txn:``. The transaction
        commits when the block exits normally and aborts when it raises.
        """
        ...


__all__ = [
    "IndexModel",
    "Store",
]
