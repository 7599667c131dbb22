"""
Student portal endpoints. Each listing route is a thin wrapper over core.listings;
query parameters keep the client's camelCase names (studentId, courseCode, ...).
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlmodel import Session

from api.schemas import DashboardSummary, ErrorResponse, HealthResponse
from core.config import AppSettings
from core.db import get_session, settings as app_settings
from core.errors import ValidationError
from core.listings import get_listing, run_listing
from core.store import QueryExecutor, SqlModelExecutor
from core.summary import summarize

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="",
    tags=["api"],
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def get_settings(request: Request) -> AppSettings:
    """Settings the app was created with; module defaults otherwise."""
    return getattr(request.app.state, "settings", app_settings)


def get_executor(
    session: Session = Depends(get_session),
    settings: AppSettings = Depends(get_settings),
) -> QueryExecutor:
    return SqlModelExecutor(session, default_limit=settings.listing_limit)


async def _listing(
    name: str,
    request: Request,
    executor: QueryExecutor,
    settings: AppSettings,
) -> list[dict[str, Any]]:
    params = dict(request.query_params)
    view = params.pop("view", None)
    return await run_listing(
        get_listing(name),
        params,
        executor,
        view=view,
        window_days=settings.upcoming_window_days,
    )


async def _single(name: str, request: Request, executor, settings, missing: str) -> dict[str, Any]:
    rows = await _listing(name, request, executor, settings)
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=missing)
    return rows[0]


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    return HealthResponse(status="ok", service="student-portal")


# ==================== Courses ====================

@router.get("/courses")
async def list_courses(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    """
    Current courses, optionally filtered by student, code, name, instructor,
    credit range, attendance range or grade.
    """
    return await _listing("courses", request, executor, settings)


@router.get("/course-current")
async def current_courses(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    return await _listing("course-current", request, executor, settings)


@router.get("/past-course")
async def past_courses(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    return await _listing("past-course", request, executor, settings)


# ==================== Assignments ====================

@router.get("/assignments")
async def list_assignments(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    """All assignments in due-date order, optionally filtered."""
    return await _listing("assignments", request, executor, settings)


@router.get("/assignments-ongoing")
async def ongoing_assignments(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    """Pending and submitted work, soonest due first, with due_in_days/due_soon estimates."""
    return await _listing("assignments-ongoing", request, executor, settings)


@router.get("/assignments-past")
async def past_assignments(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    """Graded work, most recent first."""
    return await _listing("assignments-past", request, executor, settings)


# ==================== Schedule ====================

@router.get("/schedule-current")
async def current_schedule(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    return await _listing("schedule-current", request, executor, settings)


@router.get("/future-schedule")
async def future_schedule(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> list[dict]:
    return await _listing("future-schedule", request, executor, settings)


# ==================== Profile ====================

@router.get("/profile-personal")
async def personal_profile(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> dict:
    return await _single("profile-personal", request, executor, settings, "Student not found")


@router.get("/profile-academic")
async def academic_profile(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> dict:
    return await _single("profile-academic", request, executor, settings, "Academic profile not found")


# ==================== Dashboard ====================

@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
    settings: AppSettings = Depends(get_settings),
) -> DashboardSummary:
    """Summary cards: GPA, credits, attendance and work due this week."""
    student_id = request.query_params.get("studentId", "").strip()
    if not student_id:
        raise ValidationError("studentId", "is required")
    params = {"studentId": student_id}
    courses = await run_listing(get_listing("course-current"), params, executor)
    assignments = await run_listing(
        get_listing("assignments-ongoing"),
        params,
        executor,
        window_days=settings.upcoming_window_days,
    )
    metrics = summarize(courses, assignments, window_days=settings.upcoming_window_days)
    return DashboardSummary(student_id=student_id, window_days=settings.upcoming_window_days, **metrics)
