"""Central import of all domain models.

This file imports all models to ensure they are registered with SQLAlchemy's
metadata before any database operations (like creating tables).
"""

# Users domain
from src.domains.users.models import (
    User,
    UserRole,
)

# Workouts domain
from src.domains.workouts.models import (
    PlanAssignment,
    PlanExercise,
    PlanStatus,
    ScheduleType,
    SessionExercise,
    SessionStatus,
    SetLog,
    TrainingPlan,
    WorkoutSession,
)

__all__ = [
    # Users
    "User",
    "UserRole",
    # Workouts
    "TrainingPlan",
    "PlanExercise",
    "PlanAssignment",
    "WorkoutSession",
    "SessionExercise",
    "SetLog",
    "PlanStatus",
    "ScheduleType",
    "SessionStatus",
]
