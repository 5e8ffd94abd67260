"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    academic_sessions,
    aggregates,
    disciplinary,
    exams,
    health,
    hostel,
    leave,
    promotions,
    subjects,
    transitions,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(transitions.router, prefix="/transitions", tags=["transitions"])
api_router.include_router(subjects.router, prefix="/subjects", tags=["subjects"])
api_router.include_router(aggregates.router, prefix="/aggregates", tags=["aggregates"])
api_router.include_router(
    disciplinary.router, prefix="/disciplinary", tags=["disciplinary"]
)
api_router.include_router(exams.router, prefix="/exams", tags=["exams"])
api_router.include_router(leave.router, prefix="/leave", tags=["leave"])
api_router.include_router(promotions.router, prefix="/promotions", tags=["promotions"])
api_router.include_router(
    academic_sessions.router, prefix="/academic-sessions", tags=["academic-sessions"]
)
api_router.include_router(hostel.router, prefix="/hostel", tags=["hostel"])
