"""Abstract document store protocol."""

from typing import Any, Protocol

TASKS = "tasks"
SPRINTS = "sprints"
RETRO_SESSIONS = "retrospective_sessions"
RETRO_CARDS = "retrospective_cards"
RETRO_ACTIONS = "retrospective_actions"

COLLECTIONS = (TASKS, SPRINTS, RETRO_SESSIONS, RETRO_CARDS, RETRO_ACTIONS)

Document = dict[str, Any]
Filter = dict[str, Any]
Update = dict[str, dict[str, Any]]
Sort = list[tuple[str, int]]


class DocumentStore(Protocol):
    """Interface that any persistence collaborator must implement.

    Documents are plain dicts keyed by ``id``. Filters support equality plus
    ``$in`` and ``$ne``; updates support ``$set``, ``$unset``, ``$addToSet``
    and ``$pull``. Each call is atomic for the one document it touches and
    nothing more.
    """

    async def find_one(self, collection: str, filter: Filter) -> Document | None: ...

    async def find(
        self,
        collection: str,
        filter: Filter | None = None,
        sort: Sort | None = None,
        limit: int | None = None,
    ) -> list[Document]: ...

    async def insert_one(self, collection: str, doc: Document) -> str: ...

    async def update_one(self, collection: str, filter: Filter, update: Update) -> bool: ...

    async def find_one_and_update(
        self, collection: str, filter: Filter, update: Update
    ) -> Document | None: ...

    async def delete_one(self, collection: str, filter: Filter) -> bool: ...

    async def delete_many(self, collection: str, filter: Filter) -> int: ...
