from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    service: str


class ErrorResponse(BaseModel):
    error: str
    field: Optional[str] = Field(default=None, description="Request parameter that failed validation")


class DashboardSummary(BaseModel):
    """Metrics shown on the dashboard cards."""
    student_id: str
    gpa: float = Field(..., ge=0, le=4)
    total_credits: int = Field(..., ge=0)
    average_attendance: int = Field(..., ge=0, le=100)
    upcoming_assignments: int = Field(..., ge=0, description="Pending work due within the window")
    course_count: int
    assignment_count: int
    window_days: int
