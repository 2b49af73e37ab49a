"""File-based document store using a .sprint-engine/ directory."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from ..workflow.interface import Document, Filter, Sort, Update
from .memory import InMemoryDocumentStore

logger = logging.getLogger(__name__)


class JsonFileDocumentStore(InMemoryDocumentStore):
    """DocumentStore persisted as one JSON file per collection.

    Directory layout:
        {root}/.sprint-engine/
            tasks.json
            sprints.json
            retrospective_sessions.json
            ...

    Each file holds ``{"next_id": int, "documents": {id: doc}}``. Collections
    are read lazily on first use and rewritten after every mutation, so the
    data survives process restarts.
    """

    def __init__(self, root: Path | str):
        super().__init__()
        self.root = Path(root)
        self.state_dir = self.root / ".sprint-engine"
        self._loaded: set[str] = set()
        # held across load, mutate and save so the file always reflects the newest state
        self._io_lock = asyncio.Lock()

    def _path(self, collection: str) -> Path:
        return self.state_dir / f"{collection}.json"

    async def _ensure_loaded(self, collection: str) -> None:
        if collection in self._loaded:
            return
        async with self._io_lock:
            await self._load(collection)

    async def _load(self, collection: str) -> None:
        """Read a collection from disk once. Caller holds ``_io_lock``."""
        if collection in self._loaded:
            return
        path = self._path(collection)

        def _read():
            if not path.exists():
                return None
            return json.loads(path.read_text(encoding="utf-8"))

        data = await asyncio.to_thread(_read)
        if data is not None:
            self._collections[collection] = data.get("documents", {})
            self._next_ids[collection] = data.get("next_id", 1)
            logger.debug("Loaded %d %s from %s", len(self._collections[collection]), collection, path)
        self._loaded.add(collection)

    async def _save(self, collection: str) -> None:
        """Rewrite a collection's file. Caller holds ``_io_lock``."""
        path = self._path(collection)
        data = {
            "next_id": self._next_ids.get(collection, 1),
            "documents": self._collection(collection),
        }
        text = json.dumps(data, indent=2, default=str)

        def _write():
            self.state_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        await asyncio.to_thread(_write)

    async def find_one(self, collection: str, filter: Filter) -> Document | None:
        await self._ensure_loaded(collection)
        return await super().find_one(collection, filter)

    async def find(
        self,
        collection: str,
        filter: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[Document]:
        await self._ensure_loaded(collection)
        return await super().find(collection, filter, sort=sort, limit=limit)

    async def insert_one(self, collection: str, doc: Document) -> str:
        async with self._io_lock:
            await self._load(collection)
            doc_id = await super().insert_one(collection, doc)
            await self._save(collection)
        return doc_id

    async def find_one_and_update(
        self, collection: str, filter: Filter, update: Update
    ) -> Document | None:
        async with self._io_lock:
            await self._load(collection)
            doc = await super().find_one_and_update(collection, filter, update)
            if doc is not None:
                await self._save(collection)
        return doc

    async def delete_one(self, collection: str, filter: Filter) -> bool:
        async with self._io_lock:
            await self._load(collection)
            deleted = await super().delete_one(collection, filter)
            if deleted:
                await self._save(collection)
        return deleted

    async def delete_many(self, collection: str, filter: Filter) -> int:
        async with self._io_lock:
            await self._load(collection)
            count = await super().delete_many(collection, filter)
            if count:
                await self._save(collection)
        return count
