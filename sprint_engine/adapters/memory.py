"""In-memory document store."""

from __future__ import annotations

import asyncio
import copy

from ..workflow.interface import (
    RETRO_ACTIONS,
    RETRO_CARDS,
    RETRO_SESSIONS,
    SPRINTS,
    TASKS,
    Document,
    Filter,
    Sort,
    Update,
)
from .query import apply_update, matches, sort_documents

ID_PREFIXES = {
    TASKS: "t",
    SPRINTS: "s",
    RETRO_SESSIONS: "rs",
    RETRO_CARDS: "rc",
    RETRO_ACTIONS: "ra",
}


class InMemoryDocumentStore:
    """DocumentStore backed by dicts. For tests and demos.

    Documents are copied on the way in and out, so callers never hold a
    reference into the store's own state.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, Document]] = {}
        self._next_ids: dict[str, int] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def _new_id(self, collection: str) -> str:
        n = self._next_ids.get(collection, 1)
        self._next_ids[collection] = n + 1
        prefix = ID_PREFIXES.get(collection, collection[:2])
        return f"{prefix}-{n}"

    def _first(self, collection: str, filter: Filter) -> Document | None:
        for doc in self._collection(collection).values():
            if matches(doc, filter):
                return doc
        return None

    async def find_one(self, collection: str, filter: Filter) -> Document | None:
        doc = self._first(collection, filter)
        return copy.deepcopy(doc) if doc is not None else None

    async def find(
        self,
        collection: str,
        filter: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        docs = [
            copy.deepcopy(d)
            for d in self._collection(collection).values()
            if matches(d, filter)
        ]
        docs = sort_documents(docs, sort)
        if limit is not None:
            docs = docs[:limit]
        return docs

    async def insert_one(self, collection: str, doc: Document) -> str:
        async with self._lock:
            doc = copy.deepcopy(doc)
            if not doc.get("id"):
                doc["id"] = self._new_id(collection)
            elif doc["id"] in self._collection(collection):
                raise ValueError(f"Duplicate id in {collection}: {doc['id']}")
            self._collection(collection)[doc["id"]] = doc
            return doc["id"]

    async def update_one(self, collection: str, filter: Filter, update: Update) -> bool:
        return await self.find_one_and_update(collection, filter, update) is not None

    async def find_one_and_update(
        self, collection: str, filter: Filter, update: Update
    ) -> Document | None:
        async with self._lock:
            doc = self._first(collection, filter)
            if doc is None:
                return None
            apply_update(doc, update)
            return copy.deepcopy(doc)

    async def delete_one(self, collection: str, filter: Filter) -> bool:
        async with self._lock:
            doc = self._first(collection, filter)
            if doc is None:
                return False
            del self._collection(collection)[doc["id"]]
            return True

    async def delete_many(self, collection: str, filter: Filter) -> int:
        async with self._lock:
            docs = self._collection(collection)
            doomed = [doc_id for doc_id, d in docs.items() if matches(d, filter)]
            for doc_id in doomed:
                del docs[doc_id]
            return len(doomed)
