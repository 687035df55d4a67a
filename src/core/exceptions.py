"""Error taxonomy for the workout scheduling and session engine.

Routers translate these into HTTP responses; services raise them before any
write when the failure is a validation problem.
"""
import uuid


class WorkoutEngineError(Exception):
    """Base exception for engine errors."""

    pass


class NotAuthenticated(WorkoutEngineError):
    """No user context was supplied for a user-scoped operation."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFoundError(WorkoutEngineError):
    """A referenced record does not exist (or is not visible to the user)."""

    entity = "Record"

    def __init__(self, record_id: uuid.UUID | str | None = None):
        self.record_id = record_id
        detail = f"{self.entity} not found"
        if record_id is not None:
            detail = f"{detail}: {record_id}"
        super().__init__(detail)


class TemplateNotFound(NotFoundError):
    entity = "Template"


class SessionNotFound(NotFoundError):
    entity = "Session"


class SessionExerciseNotFound(NotFoundError):
    entity = "Session exercise"


class SetLogNotFound(NotFoundError):
    entity = "Set log"


class NoExercisesInTemplate(WorkoutEngineError):
    """The template has no exercises to build a session from."""

    def __init__(self, plan_id: uuid.UUID):
        self.plan_id = plan_id
        super().__init__(f"No exercises found in template {plan_id}")


class InvalidInput(WorkoutEngineError):
    """Caller-supplied values failed validation. Raised before any write."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidSessionTransition(WorkoutEngineError):
    """The session is in a state that does not allow the requested change."""

    def __init__(self, session_id: uuid.UUID, current: str, attempted: str):
        self.session_id = session_id
        self.current = current
        self.attempted = attempted
        super().__init__(f"Cannot {attempted} session {session_id} in status '{current}'")


class SessionAlreadyInProgress(WorkoutEngineError):
    """The user already has an in-progress session; it must be resumed or finalized first."""

    def __init__(self, session_id: uuid.UUID):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is already in progress")


class PlanAlreadyCompleted(WorkoutEngineError):
    """The plan already has a completed session on the requested day."""

    def __init__(self, plan_id: uuid.UUID, day):
        self.plan_id = plan_id
        self.day = day
        super().__init__(f"Plan {plan_id} was already completed on {day.isoformat()}")


class PersistenceFailure(WorkoutEngineError):
    """Opaque wrapper around an underlying storage error.

    The original exception is always chained as ``__cause__``.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Persistence failure during {operation}")


class AccessDenied(WorkoutEngineError):
    """The context user may not perform this operation."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)
