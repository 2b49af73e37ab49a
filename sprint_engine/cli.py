"""CLI entry point for sprint metrics and repairs.

Usage:
  sprint-engine summary <sprint_id> [--root PATH] [--json]
  sprint-engine health <sprint_id> [--root PATH]
  sprint-engine burndown <sprint_id> [--root PATH] [--json]
  sprint-engine velocity <project_id> [--count N] [--root PATH] [--json]
  sprint-engine workload <project_id> [--sprint SPRINT_ID] [--root PATH] [--json]
  sprint-engine recompute <sprint_id> [--root PATH]

Data is read from the JSON file store under ``<root>/.sprint-engine/``.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

from .adapters.jsonfile import JsonFileDocumentStore
from .config import load_config
from .engine import Engine
from .logging_config import setup_logging
from .workflow.documents import encode_value
from .workflow.exceptions import EngineError


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--root", default=".", help="Directory holding .sprint-engine/ (default: .)")
    common.add_argument("--config", default=None, help="YAML config file")
    common.add_argument("--log-level", default=None, help="Override the configured log level")
    common.add_argument("--json", action="store_true", help="Print raw JSON")

    parser = argparse.ArgumentParser(prog="sprint-engine", description="Sprint metrics CLI")
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("summary", "Show a sprint summary"),
        ("health", "Classify sprint health"),
        ("burndown", "Print the burndown series"),
        ("recompute", "Recompute a sprint's completed points"),
    ):
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("sprint_id", help="Sprint ID")

    velocity = subparsers.add_parser("velocity", parents=[common], help="Show project velocity")
    velocity.add_argument("project_id", help="Project ID")
    velocity.add_argument("--count", type=int, default=None, help="Number of completed sprints")

    workload = subparsers.add_parser("workload", parents=[common], help="Show team workload")
    workload.add_argument("project_id", help="Project ID")
    workload.add_argument("--sprint", default=None, help="Limit to one sprint")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config)
        setup_logging(args.log_level or config.log_level)
        engine = Engine(JsonFileDocumentStore(Path(args.root)), config)
        asyncio.run(COMMANDS[args.command](args, engine))
    except EngineError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


def _print_json(data) -> None:
    print(json.dumps(encode_value(data), indent=2))


async def _summary_command(args, engine: Engine) -> None:
    s = await engine.metrics.sprint_summary(args.sprint_id)
    if args.json:
        _print_json(asdict(s))
        return
    print(f"Sprint {s.sprint_name} ({s.sprint_id}) [{s.status}]")
    print(f"  Points: {s.completed_points}/{s.committed_points} ({s.percentage_completed}%)")
    print(f"  Capacity: {s.capacity}{' (over capacity)' if s.is_over_capacity else ''}")
    print(f"  Days remaining: {s.days_remaining}/{s.total_days}")
    print(f"  Scope creep: {s.scope_creep}")
    if s.average_cycle_time is not None:
        print(f"  Average cycle time: {s.average_cycle_time} days")
    print(f"  Tasks: {s.tasks_total}")
    for status, count in s.tasks_by_status.items():
        if count:
            print(f"    {status}: {count}")


async def _health_command(args, engine: Engine) -> None:
    h = await engine.metrics.sprint_health(args.sprint_id)
    if args.json:
        _print_json(asdict(h))
        return
    print(f"{h.status.value.upper()}: {h.reason}")
    print(f"  Expected progress: {h.expected_progress:.1f}%  Deviation: {h.deviation:+.1f}")


async def _burndown_command(args, engine: Engine) -> None:
    b = await engine.metrics.burndown(args.sprint_id)
    if args.json:
        _print_json(asdict(b))
        return
    print(f"Burndown for {b.sprint_name} ({b.total_points} points)")
    for p in b.points:
        print(f"  {p.date.isoformat()}  ideal {p.ideal:>6.1f}  remaining {p.remaining:>4}")


async def _velocity_command(args, engine: Engine) -> None:
    v = await engine.metrics.velocity(args.project_id, args.count)
    if args.json:
        _print_json({**asdict(v), "sprint_count": v.sprint_count})
        return
    print(f"Average velocity: {v.average_velocity} over {v.sprint_count} sprints")
    for p in v.points:
        print(f"  {p.sprint_name}: {p.completed_points}/{p.committed_points} ({p.percentage_completed}%)")


async def _workload_command(args, engine: Engine) -> None:
    entries = await engine.metrics.team_workload(args.project_id, args.sprint)
    if args.json:
        _print_json([asdict(e) for e in entries])
        return
    if not entries:
        print("No assigned tasks")
    for e in entries:
        print(f"  {e.user_id}: {e.total_tasks} tasks, {e.total_story_points} points")


async def _recompute_command(args, engine: Engine) -> None:
    sprint = await engine.sprints.recompute_completed_points(args.sprint_id)
    print(f"Sprint {sprint.id}: {sprint.completed_points} completed points")


COMMANDS = {
    "summary": _summary_command,
    "health": _health_command,
    "burndown": _burndown_command,
    "velocity": _velocity_command,
    "workload": _workload_command,
    "recompute": _recompute_command,
}
