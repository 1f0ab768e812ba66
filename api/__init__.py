"""API module for the School Journal system."""
from .routes import performance_router, journal_router, grades_router, schedules_router
from .schemas import (
    CreateGradeRequest,
    UpdateGradeRequest,
    ScheduleStatusRequest,
    ComputePerformanceRequest,
    PerformanceEntry,
    ClassPerformanceResponse,
    StudentSubjectPerformanceResponse,
    SuccessResponse,
)

__all__ = [
    "performance_router",
    "journal_router",
    "grades_router",
    "schedules_router",
    "CreateGradeRequest",
    "UpdateGradeRequest",
    "ScheduleStatusRequest",
    "ComputePerformanceRequest",
    "PerformanceEntry",
    "ClassPerformanceResponse",
    "StudentSubjectPerformanceResponse",
    "SuccessResponse",
]
