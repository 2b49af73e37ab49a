"""Tests for the sprint-engine command line."""

import asyncio
import json
from datetime import date, datetime, timezone

import pytest

from sprint_engine.adapters.jsonfile import JsonFileDocumentStore
from sprint_engine.cli import COMMANDS, build_parser, main
from sprint_engine.clock import fixed_clock
from sprint_engine.engine import Engine

MOMENT = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


def _seed(root) -> str:
    """Write a completed sprint with one done and one open task; return its id."""

    async def seed():
        engine = Engine(JsonFileDocumentStore(root), clock=fixed_clock(MOMENT))
        sprint = await engine.sprints.create_sprint(
            project_id="p-1", name="Sprint 1", start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 15), capacity=20,
        )
        done = await engine.tasks.create_task(
            project_id="p-1", title="Done", reporter_id="u-1", sprint_id=sprint.id,
            story_points=5, assignee_ids=["u-2"],
        )
        await engine.tasks.create_task(
            project_id="p-1", title="Open", reporter_id="u-1", sprint_id=sprint.id,
            story_points=3,
        )
        await engine.sprints.start_sprint(sprint.id)
        await engine.tasks.update_status(done.id, "done")
        await engine.sprints.complete_sprint(sprint.id)
        return sprint.id

    return asyncio.run(seed())


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch):
    monkeypatch.delenv("SPRINT_ENGINE_CONFIG", raising=False)


class TestParser:
    def test_all_commands_registered(self):
        parser = build_parser()
        for name in COMMANDS:
            args = parser.parse_args([name, "x-1"])
            assert args.command == name

    def test_common_options(self):
        args = build_parser().parse_args(["velocity", "p-1", "--count", "3", "--json", "--root", "/tmp/x"])
        assert args.count == 3
        assert args.json is True
        assert args.root == "/tmp/x"

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
        assert "sprint-engine" in capsys.readouterr().out


class TestCommands:
    def test_summary(self, tmp_path, capsys):
        sprint_id = _seed(tmp_path)
        main(["summary", sprint_id, "--root", str(tmp_path)])
        out = capsys.readouterr().out
        assert "Sprint 1" in out
        assert "Points: 5/8 (63%)" in out

    def test_summary_json(self, tmp_path, capsys):
        sprint_id = _seed(tmp_path)
        main(["summary", sprint_id, "--root", str(tmp_path), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["completed_points"] == 5
        assert data["status"] == "completed"

    def test_velocity(self, tmp_path, capsys):
        _seed(tmp_path)
        main(["velocity", "p-1", "--root", str(tmp_path)])
        out = capsys.readouterr().out
        assert "Average velocity: 5 over 1 sprints" in out

    def test_workload_json(self, tmp_path, capsys):
        _seed(tmp_path)
        main(["workload", "p-1", "--root", str(tmp_path), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert [e["user_id"] for e in data] == ["u-2"]

    def test_burndown(self, tmp_path, capsys):
        sprint_id = _seed(tmp_path)
        main(["burndown", sprint_id, "--root", str(tmp_path), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert len(data["points"]) == 15
        assert data["points"][-1]["remaining"] == 3

    def test_recompute(self, tmp_path, capsys):
        sprint_id = _seed(tmp_path)
        main(["recompute", sprint_id, "--root", str(tmp_path)])
        assert f"Sprint {sprint_id}: 5 completed points" in capsys.readouterr().out

    def test_missing_sprint(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["health", "s-404", "--root", str(tmp_path)])
        assert exc.value.code == 1
        assert "Error: Sprint not found: s-404" in capsys.readouterr().err
