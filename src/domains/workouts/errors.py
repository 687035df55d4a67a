"""Translation of engine errors into HTTP responses."""
import logging

from fastapi import HTTPException, status

from src.core.exceptions import (
    AccessDenied,
    InvalidInput,
    InvalidSessionTransition,
    NoExercisesInTemplate,
    NotAuthenticated,
    NotFoundError,
    PersistenceFailure,
    PlanAlreadyCompleted,
    SessionAlreadyInProgress,
    WorkoutEngineError,
)
from src.core.observability import capture_exception

logger = logging.getLogger(__name__)

_STATUS_CODES: list[tuple[type[WorkoutEngineError], int]] = [
    (NotAuthenticated, status.HTTP_401_UNAUTHORIZED),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (SessionAlreadyInProgress, status.HTTP_409_CONFLICT),
    (PlanAlreadyCompleted, status.HTTP_409_CONFLICT),
    (InvalidSessionTransition, status.HTTP_409_CONFLICT),
    (NoExercisesInTemplate, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidInput, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (PersistenceFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http_exception(error: WorkoutEngineError) -> HTTPException:
    """Map an engine error to its fixed status code.

    Storage failures get a generic message and are reported to GlitchTip.
    """
    if isinstance(error, PersistenceFailure):
        logger.error(f"Persistence failure: {error.operation}", exc_info=error)
        capture_exception(error, tags={"operation": error.operation})
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Operation failed, please try again",
        )

    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))

    logger.error(f"Unmapped engine error: {error!r}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Operation failed",
    )
