"""Unit tests for InMemoryDocumentStore and its query semantics."""

import pytest

from sprint_engine.adapters.memory import InMemoryDocumentStore
from sprint_engine.adapters.query import apply_update, matches, sort_documents
from sprint_engine.workflow.interface import RETRO_CARDS, SPRINTS, TASKS


@pytest.fixture
def store():
    return InMemoryDocumentStore()


class TestInsert:
    @pytest.mark.asyncio
    async def test_sequential_ids_per_collection(self, store):
        assert await store.insert_one(TASKS, {"title": "a"}) == "t-1"
        assert await store.insert_one(TASKS, {"title": "b"}) == "t-2"
        assert await store.insert_one(SPRINTS, {"name": "s"}) == "s-1"
        assert await store.insert_one(RETRO_CARDS, {"content": "c"}) == "rc-1"

    @pytest.mark.asyncio
    async def test_keeps_explicit_id(self, store):
        assert await store.insert_one(TASKS, {"id": "custom"}) == "custom"
        with pytest.raises(ValueError, match="Duplicate id"):
            await store.insert_one(TASKS, {"id": "custom"})

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self, store):
        doc_id = await store.insert_one(TASKS, {"tags": ["a"]})
        doc = await store.find_one(TASKS, {"id": doc_id})
        doc["tags"].append("mutated")
        again = await store.find_one(TASKS, {"id": doc_id})
        assert again["tags"] == ["a"]


class TestFind:
    @pytest.mark.asyncio
    async def test_filter_sort_limit(self, store):
        for n in (3, 1, 2):
            await store.insert_one(TASKS, {"n": n, "project_id": "p"})
        await store.insert_one(TASKS, {"n": 9, "project_id": "other"})
        docs = await store.find(TASKS, {"project_id": "p"}, sort=[("n", -1)], limit=2)
        assert [d["n"] for d in docs] == [3, 2]

    @pytest.mark.asyncio
    async def test_missing_collection_is_empty(self, store):
        assert await store.find("nothing") == []
        assert await store.find_one("nothing", {"id": "x"}) is None


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_find_one_and_update_returns_new_doc(self, store):
        doc_id = await store.insert_one(RETRO_CARDS, {"votes": []})
        doc = await store.find_one_and_update(
            RETRO_CARDS, {"id": doc_id}, {"$addToSet": {"votes": "u-1"}}
        )
        assert doc["votes"] == ["u-1"]

    @pytest.mark.asyncio
    async def test_update_missing_returns_false(self, store):
        assert await store.update_one(TASKS, {"id": "t-9"}, {"$set": {"x": 1}}) is False

    @pytest.mark.asyncio
    async def test_delete_one_and_many(self, store):
        for session in ("rs-1", "rs-1", "rs-2"):
            await store.insert_one(RETRO_CARDS, {"session_id": session})
        assert await store.delete_many(RETRO_CARDS, {"session_id": "rs-1"}) == 2
        assert await store.delete_one(RETRO_CARDS, {"session_id": "rs-2"}) is True
        assert await store.delete_one(RETRO_CARDS, {"session_id": "rs-2"}) is False
        assert await store.find(RETRO_CARDS) == []


class TestQuery:
    def test_array_membership(self):
        assert matches({"votes": ["a", "b"]}, {"votes": "a"})
        assert not matches({"votes": ["a", "b"]}, {"votes": "c"})

    def test_none_matches_missing_field(self):
        assert matches({"sprint_id": None}, {"sprint_id": None})
        assert matches({}, {"sprint_id": None})

    def test_in_and_ne(self):
        doc = {"status": "done", "tags": ["x"]}
        assert matches(doc, {"status": {"$in": ["done", "todo"]}})
        assert matches(doc, {"tags": {"$in": ["x", "y"]}})
        assert not matches(doc, {"status": {"$ne": "done"}})

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            matches({"a": 1}, {"a": {"$gt": 0}})

    def test_update_operators(self):
        doc = {"a": 1, "b": 2, "votes": ["u-1"]}
        apply_update(doc, {"$set": {"a": 5}, "$unset": {"b": ""}})
        apply_update(doc, {"$addToSet": {"votes": "u-1"}})
        apply_update(doc, {"$addToSet": {"votes": "u-2"}})
        apply_update(doc, {"$pull": {"votes": "u-1"}})
        assert doc == {"a": 5, "votes": ["u-2"]}

    def test_sort_puts_none_first_and_is_stable(self):
        docs = [{"k": 2, "i": 0}, {"k": None, "i": 1}, {"k": 1, "i": 2}, {"k": 1, "i": 3}]
        assert [d["i"] for d in sort_documents(docs, [("k", 1)])] == [1, 2, 3, 0]
