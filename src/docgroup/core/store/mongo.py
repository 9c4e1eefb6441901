"""MongoDB Store backed by pymongo's asyncio API."""

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo import IndexModel as MongoIndexModel
from pymongo.asynchronous.client_session import AsyncClientSession
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from docgroup.core.exceptions import DuplicateKeyError
from docgroup.core.query.types import Assignments, Document, QuerySpec, WhereNode
from docgroup.core.store.base import IndexModel, Store

logger = logging.getLogger(__name__)

_COMPARISON = {
    "ne": "$ne",
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
    "in": "$in",
}


def translate_where(node: WhereNode | None) -> dict[str, Any]:
    """Translate a WhereNode into a MongoDB query document.

    Args:
        node: Filter over physical field names; None matches everything.

    Returns:
        Query document for find/update/delete calls.

    Raises:
        ValueError: If the node uses an unknown operator.
    """
    if node is None:
        return {}

    op = node[0]
    if op == "and":
        return {"$and": [translate_where(node[1]), translate_where(node[2])]}
    if op == "or":
        return {"$or": [translate_where(node[1]), translate_where(node[2])]}
    if op == "not":
        return {"$nor": [translate_where(node[1])]}
    if op == "exists":
        return {node[1]: {"$exists": True}}
    if op == "eq":
        return {node[1]: {"$eq": node[2]}}
    if op in _COMPARISON:
        return {node[1]: {_COMPARISON[op]: node[2]}}
    if op == "contains":
        return {node[1]: {"$regex": re.escape(node[2])}}
    if op == "startswith":
        return {node[1]: {"$regex": f"^{re.escape(node[2])}"}}
    if op == "endswith":
        return {node[1]: {"$regex": f"{re.escape(node[2])}$"}}

    raise ValueError(f"Unknown operator '{op}'")


def translate_sort(order_by: tuple[str, ...]) -> list[tuple[str, int]]:
    """Translate ("-a", "b") into [("a", DESCENDING), ("b", ASCENDING)]."""
    return [
        (entry[1:], DESCENDING) if entry.startswith("-") else (entry, ASCENDING)
        for entry in order_by
    ]


class MongoStore(Store):
    """Store over one MongoDB collection.

    Example:
        >>> client = AsyncMongoClient("mongodb://localhost:27017")
        >>> store = MongoStore(client["shop"]["customers"])
    """

    def __init__(self, collection: AsyncCollection):
        """Initialize the store.

        Args:
            collection: pymongo asynchronous collection.
        """
        self._collection = collection
        logger.debug("MongoStore created for collection '%s'.", collection.name)

    @property
    def name(self) -> str:
        return self._collection.name

    @property
    def collection(self) -> AsyncCollection:
        return self._collection

    # =========================================================================
    # READS
    # =========================================================================

    async def find_one(self, where: WhereNode | None) -> Document | None:
        return await self._collection.find_one(translate_where(where))

    async def find(self, spec: QuerySpec) -> list[Document]:
        cursor = self._collection.find(translate_where(spec.where))
        if spec.order_by:
            cursor = cursor.sort(translate_sort(spec.order_by))
        if spec.offset:
            cursor = cursor.skip(spec.offset)
        if spec.limit is not None:
            if spec.limit == 0:
                # pymongo treats limit(0) as "no limit"
                return []
            cursor = cursor.limit(spec.limit)
        return await cursor.to_list()

    async def count(self, where: WhereNode | None) -> int:
        return await self._collection.count_documents(translate_where(where))

    # =========================================================================
    # WRITES
    # =========================================================================

    async def insert_one(
        self, document: Document, *, transaction: AsyncClientSession | None = None
    ) -> None:
        try:
            await self._collection.insert_one(dict(document), session=transaction)
        except MongoDuplicateKeyError as e:
            raise _duplicate_key(e) from e

    async def update_one(self, where: WhereNode | None, assignments: Assignments) -> int:
        try:
            result = await self._collection.update_one(
                translate_where(where), {"$set": dict(assignments)}
            )
        except MongoDuplicateKeyError as e:
            raise _duplicate_key(e) from e
        return result.matched_count

    async def find_one_and_update(
        self,
        where: WhereNode | None,
        assignments: Assignments,
        *,
        return_after: bool = True,
    ) -> Document | None:
        try:
            return await self._collection.find_one_and_update(
                translate_where(where),
                {"$set": dict(assignments)},
                return_document=ReturnDocument.AFTER if return_after else ReturnDocument.BEFORE,
            )
        except MongoDuplicateKeyError as e:
            raise _duplicate_key(e) from e

    async def delete_one(self, where: WhereNode | None) -> int:
        result = await self._collection.delete_one(translate_where(where))
        return result.deleted_count

    # =========================================================================
    # SCHEMA
    # =========================================================================

    async def list_indexes(self) -> list[str]:
        return list(await self._collection.index_information())

    async def create_indexes(self, models: list[IndexModel]) -> None:
        mongo_models = [
            MongoIndexModel([(model.key, ASCENDING)], unique=model.unique, name=model.name)
            for model in models
        ]
        try:
            await self._collection.create_indexes(mongo_models)
        except MongoDuplicateKeyError as e:
            raise _duplicate_key(e) from e

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncClientSession]:
        """Run the block in a MongoDB transaction (requires a replica set)."""
        client = self._collection.database.client
        async with client.start_session() as session:
            async with await session.start_transaction():
                yield session


def _duplicate_key(error: MongoDuplicateKeyError) -> DuplicateKeyError:
    details = error.details or {}
    key_value = details.get("keyValue")
    index_name = None
    match = re.search(r"index: (\S+)", str(error))
    if match:
        index_name = match.group(1)
    return DuplicateKeyError(index=index_name, key=key_value, cause=error)


__all__ = ["MongoStore", "translate_sort", "translate_where"]
