"""Workout router: thin entry point that includes all sub-routers.

Sub-routers:
  - schedule_router: Occurrence views and per-date completion
  - sessions_router: Session lifecycle, set logging, history
  - assignments_router: Plan assignment endpoints
"""
from fastapi import APIRouter

from src.domains.workouts.assignments_router import assignments_router
from src.domains.workouts.schedule_router import schedule_router
from src.domains.workouts.sessions_router import sessions_router

router = APIRouter()

# Include sub-routers (no prefix, the main app adds /api/v1/workouts)
router.include_router(schedule_router)
router.include_router(sessions_router)
router.include_router(assignments_router)
