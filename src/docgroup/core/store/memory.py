"""In-memory Store implementation for tests and local execution."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from docgroup.core.exceptions import DuplicateKeyError
from docgroup.core.query.evaluate import matches
from docgroup.core.query.types import Assignments, Document, QuerySpec, WhereNode
from docgroup.core.store.base import IndexModel, Store

logger = logging.getLogger(__name__)

#: Index every collection starts with, as in document databases.
PRIMARY_INDEX = IndexModel(key="_id", unique=True, name="_id_")


def sort_key(value: Any) -> tuple[int, Any]:
    """Order values across types the way MongoDB compares BSON types.

    Missing fields and None sort first, then numbers, strings, objects,
    arrays, binary data, booleans and dates. Values of one type compare
    natively; objects and arrays compare by their repr.
    """
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (6, value)
    if isinstance(value, int | float):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, dict):
        return (3, repr(value))
    if isinstance(value, list | tuple):
        return (4, repr(value))
    if isinstance(value, bytes):
        return (5, value)
    if isinstance(value, datetime):
        return (7, value)
    return (8, repr(value))


@dataclass(slots=True)
class MemoryTransaction:
    """Handle yielded by InMemoryStore.transaction()."""

    inserted: list[Document] = field(default_factory=list)


class InMemoryStore(Store):
    """Dict-backed collection.

    Enforces unique indexes (raising DuplicateKeyError) and evaluates
    WhereNode filters in process. Transactions are read-uncommitted: their
    writes are visible immediately and removed again on abort.
    """

    def __init__(self, name: str = "memory") -> None:
        self._name = name
        self._documents: list[Document] = []
        self._indexes: dict[str, IndexModel] = {PRIMARY_INDEX.name: PRIMARY_INDEX}
        self._lock = asyncio.Lock()
        self.committed_transactions = 0
        self.aborted_transactions = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def documents(self) -> list[Document]:
        """Copies of the stored documents, in insertion order."""
        return [copy.deepcopy(doc) for doc in self._documents]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_one(self, where: WhereNode | None) -> Document | None:
        doc = self._first(where)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(self, spec: QuerySpec) -> list[Document]:
        found = [doc for doc in self._documents if matches(spec.where, doc)]
        for order_field in reversed(spec.order_by or ()):
            key = order_field.removeprefix("-")
            found.sort(
                key=lambda doc: sort_key(doc.get(key)),
                reverse=order_field.startswith("-"),
            )
        end = None if spec.limit is None else spec.offset + spec.limit
        return [copy.deepcopy(doc) for doc in found[spec.offset : end]]

    async def count(self, where: WhereNode | None) -> int:
        return sum(1 for doc in self._documents if matches(where, doc))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert_one(self, document: Document, *, transaction: MemoryTransaction | None = None) -> None:
        stored = copy.deepcopy(document)
        async with self._lock:
            self._check_unique(stored, ignore=None)
            self._documents.append(stored)
            if transaction is not None:
                transaction.inserted.append(stored)

    async def update_one(self, where: WhereNode | None, assignments: Assignments) -> int:
        async with self._lock:
            doc = self._first(where)
            if doc is None:
                return 0
            self._apply(doc, assignments)
            return 1

    async def find_one_and_update(
        self,
        where: WhereNode | None,
        assignments: Assignments,
        *,
        return_after: bool = True,
    ) -> Document | None:
        async with self._lock:
            doc = self._first(where)
            if doc is None:
                return None
            before = copy.deepcopy(doc)
            self._apply(doc, assignments)
            return copy.deepcopy(doc) if return_after else before

    async def delete_one(self, where: WhereNode | None) -> int:
        async with self._lock:
            doc = self._first(where)
            if doc is None:
                return 0
            self._remove(doc)
            return 1

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    async def list_indexes(self) -> list[str]:
        return list(self._indexes)

    async def create_indexes(self, models: list[IndexModel]) -> None:
        async with self._lock:
            for model in models:
                if model.unique:
                    self._check_unique_backfill(model)
                self._indexes[model.name] = model
                logger.debug("Index '%s' created on store '%s'.", model.name, self._name)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[MemoryTransaction]:
        txn = MemoryTransaction()
        try:
            yield txn
        except BaseException:
            async with self._lock:
                for doc in txn.inserted:
                    self._remove(doc)
            self.aborted_transactions += 1
            raise
        self.committed_transactions += 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _first(self, where: WhereNode | None) -> Document | None:
        return next((doc for doc in self._documents if matches(where, doc)), None)

    def _remove(self, target: Document) -> None:
        self._documents = [doc for doc in self._documents if doc is not target]

    def _apply(self, doc: Document, assignments: Assignments) -> None:
        candidate = {**doc, **copy.deepcopy(assignments)}
        self._check_unique(candidate, ignore=doc)
        doc.update(candidate)

    def _check_unique(self, candidate: Document, ignore: Document | None) -> None:
        for index in self._indexes.values():
            if not index.unique:
                continue
            if index.key == PRIMARY_INDEX.key and index.key not in candidate:
                continue
            value = candidate.get(index.key)
            for doc in self._documents:
                if doc is ignore:
                    continue
                if doc.get(index.key) == value and (index.key in doc or index.key != PRIMARY_INDEX.key):
                    raise DuplicateKeyError(index=index.name, key=value)

    def _check_unique_backfill(self, model: IndexModel) -> None:
        seen = set()
        for doc in self._documents:
            value = repr(doc.get(model.key))
            if value in seen:
                raise DuplicateKeyError(index=model.name, key=doc.get(model.key))
            seen.add(value)
