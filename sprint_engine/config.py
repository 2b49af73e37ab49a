"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .workflow.exceptions import ValidationError

CONFIG_ENV_VAR = "SPRINT_ENGINE_CONFIG"


def _default_wip_limits() -> dict[str, int]:
    return {"in_progress": 5, "in_review": 3, "in_testing": 3}


@dataclass
class EngineConfig:
    """Tunables for validation bounds, metrics thresholds and board limits."""

    task_title_max_length: int = 200
    sprint_name_max_length: int = 100
    sprint_goal_max_length: int = 500
    max_capacity: int = 500
    max_sprint_days: int = 60
    card_content_max_length: int = 500
    action_title_max_length: int = 200

    default_votes_per_person: int = 5
    max_votes_per_person: int = 20
    max_timer_minutes: int = 120

    velocity_sprint_count: int = 6
    workload_top_n: int = 10

    # Health classification thresholds
    scope_creep_threshold: int = 10
    behind_deviation: float = -15.0
    at_risk_deviation: float = -5.0
    closing_window_days: int = 2
    closing_min_progress: int = 80

    wip_limits: dict[str, int] = field(default_factory=_default_wip_limits)

    log_level: str = "INFO"


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Load an EngineConfig from YAML.

    Falls back to the file named by ``SPRINT_ENGINE_CONFIG`` and then to the
    defaults when neither is given. Keys missing from the file keep their
    defaults; unknown keys are rejected.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return EngineConfig()

    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(
            f"Unknown config keys: {', '.join(unknown)}", field=unknown[0]
        )

    config = EngineConfig(**data)
    if "wip_limits" in data:
        # a partial mapping overrides only the columns it names
        config.wip_limits = {**_default_wip_limits(), **(data["wip_limits"] or {})}
    return config
