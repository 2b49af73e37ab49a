"""Sprint state-machine transitions defined as data."""

from .exceptions import InvalidTransitionError
from .models import SprintStatus

VALID_TRANSITIONS: frozenset[tuple[SprintStatus, SprintStatus]] = frozenset(
    {
        (SprintStatus.PLANNING, SprintStatus.ACTIVE),       # start
        (SprintStatus.ACTIVE, SprintStatus.COMPLETED),      # complete
        (SprintStatus.COMPLETED, SprintStatus.ARCHIVED),    # archive
        (SprintStatus.PLANNING, SprintStatus.ARCHIVED),     # drop before start
    }
)


def validate_transition(
    sprint_id: str,
    from_status: SprintStatus,
    to_status: SprintStatus,
) -> None:
    """Raise InvalidTransitionError if the transition is not allowed."""
    if (from_status, to_status) not in VALID_TRANSITIONS:
        raise InvalidTransitionError(sprint_id, from_status, to_status)
