"""Tests for the JSON file document store."""

import asyncio
import json

import pytest

from sprint_engine.adapters.jsonfile import JsonFileDocumentStore
from sprint_engine.workflow.interface import SPRINTS, TASKS


class TestJsonFileStore:
    @pytest.mark.asyncio
    async def test_writes_collection_file(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path)
        doc_id = await store.insert_one(TASKS, {"title": "Persist me"})

        path = tmp_path / ".sprint-engine" / "tasks.json"
        data = json.loads(path.read_text())
        assert data["next_id"] == 2
        assert data["documents"][doc_id]["title"] == "Persist me"

    @pytest.mark.asyncio
    async def test_survives_restart(self, tmp_path):
        first = JsonFileDocumentStore(tmp_path)
        sprint_id = await first.insert_one(SPRINTS, {"name": "S1", "completed_points": 0})
        await first.update_one(SPRINTS, {"id": sprint_id}, {"$set": {"completed_points": 8}})

        second = JsonFileDocumentStore(tmp_path)
        doc = await second.find_one(SPRINTS, {"id": sprint_id})
        assert doc["completed_points"] == 8
        # ids keep counting after a reload
        assert await second.insert_one(SPRINTS, {"name": "S2"}) == "s-2"

    @pytest.mark.asyncio
    async def test_delete_persists(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path)
        doc_id = await store.insert_one(TASKS, {"title": "x"})
        assert await store.delete_one(TASKS, {"id": doc_id})

        reloaded = JsonFileDocumentStore(tmp_path)
        assert await reloaded.find(TASKS) == []

    @pytest.mark.asyncio
    async def test_empty_root_reads_nothing(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path)
        assert await store.find(TASKS) == []
        assert not (tmp_path / ".sprint-engine").exists()

    @pytest.mark.asyncio
    async def test_concurrent_inserts_before_first_load(self, tmp_path):
        seed = JsonFileDocumentStore(tmp_path)
        await seed.insert_one(TASKS, {"title": "Seed"})

        store = JsonFileDocumentStore(tmp_path)
        ids = await asyncio.gather(
            *(store.insert_one(TASKS, {"title": f"Task {n}"}) for n in range(20))
        )
        assert len(set(ids)) == 20
        assert "t-1" not in ids
        assert len(await store.find(TASKS)) == 21

        data = json.loads((tmp_path / ".sprint-engine" / "tasks.json").read_text())
        assert len(data["documents"]) == 21
        assert data["next_id"] == 22

    @pytest.mark.asyncio
    async def test_concurrent_updates_all_persist(self, tmp_path):
        store = JsonFileDocumentStore(tmp_path)
        doc_id = await store.insert_one(SPRINTS, {"name": "S1", "votes": []})

        fresh = JsonFileDocumentStore(tmp_path)
        await asyncio.gather(
            *(
                fresh.update_one(SPRINTS, {"id": doc_id}, {"$addToSet": {"votes": f"u-{n}"}})
                for n in range(10)
            ),
            fresh.find(SPRINTS),
        )

        reloaded = JsonFileDocumentStore(tmp_path)
        doc = await reloaded.find_one(SPRINTS, {"id": doc_id})
        assert sorted(doc["votes"]) == sorted(f"u-{n}" for n in range(10))
