"""Engine exception types.

Every error carries a machine-readable ``code`` that the tool boundary puts
into its error envelope.
"""


class EngineError(Exception):
    """Base class for all engine errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(EngineError):
    """Raised when input is malformed, missing, or outside its allowed set."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field is not None:
            data["field"] = self.field
        return data


class NotFoundError(EngineError):
    """Raised when a referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class ForbiddenError(EngineError):
    """Raised when the actor may not perform a facilitator- or author-only mutation."""

    code = "FORBIDDEN"


class ConflictError(EngineError):
    """Raised when an entity already exists where only one is allowed."""

    code = "CONFLICT"


class LimitExceededError(EngineError):
    """Raised when a user has used up their votes in a retrospective session."""

    code = "LIMIT_EXCEEDED"

    def __init__(self, user_id: str, limit: int):
        self.user_id = user_id
        self.limit = limit
        super().__init__(f"User {user_id} has already used all {limit} votes")


class InvalidTransitionError(ValidationError):
    """Raised when an undefined sprint state transition is attempted."""

    def __init__(self, sprint_id: str, from_status, to_status):
        self.sprint_id = sprint_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition for sprint {sprint_id}: "
            f"{from_status.value} → {to_status.value}",
            field="status",
        )
