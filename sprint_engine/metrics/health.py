"""Sprint health classification.

Rules are evaluated in order and the first match wins, so a sprint that is
both over capacity and behind schedule reports the capacity problem.
"""

from __future__ import annotations

from ..config import EngineConfig
from .models import HealthStatus, SprintHealth, SprintSummary


def expected_progress(total_days: int, days_remaining: int) -> float:
    """Percentage of the sprint's calendar time already used."""
    if total_days <= 0:
        return 0.0
    return (total_days - days_remaining) * 100 / total_days


def classify_health(
    summary: SprintSummary, config: EngineConfig | None = None
) -> SprintHealth:
    cfg = config or EngineConfig()
    expected = expected_progress(summary.total_days, summary.days_remaining)
    deviation = summary.percentage_completed - expected

    def result(status: HealthStatus, reason: str) -> SprintHealth:
        return SprintHealth(
            status=status,
            reason=reason,
            expected_progress=expected,
            deviation=deviation,
        )

    if summary.is_over_capacity:
        over = summary.committed_points - summary.capacity
        return result(HealthStatus.AT_RISK, f"Sprint is over capacity by {over} points")

    if summary.scope_creep > cfg.scope_creep_threshold:
        return result(
            HealthStatus.AT_RISK,
            f"High scope creep: {summary.scope_creep} points added mid-sprint",
        )

    # inclusive: landing exactly on the threshold is behind, not at-risk
    if deviation <= cfg.behind_deviation:
        return result(
            HealthStatus.BEHIND, f"{abs(round(deviation))}% behind expected progress"
        )
    if deviation < cfg.at_risk_deviation:
        return result(
            HealthStatus.AT_RISK, f"{abs(round(deviation))}% behind expected progress"
        )

    if (
        summary.days_remaining <= cfg.closing_window_days
        and summary.percentage_completed < cfg.closing_min_progress
    ):
        return result(
            HealthStatus.AT_RISK,
            f"Only {summary.days_remaining} days left with "
            f"{summary.percentage_completed}% complete",
        )

    return result(
        HealthStatus.ON_TRACK,
        f"Sprint is progressing as expected ({summary.percentage_completed}% complete)",
    )
