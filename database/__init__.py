"""Database module."""
from .models import (
    Base,
    User,
    SchoolClass,
    Subject,
    StudentClass,
    Subgroup,
    StudentSubgroup,
    Schedule,
    Assignment,
    Grade,
    AcademicPeriodBoundary,
)
from .connection import engine, SessionLocal, get_db, get_db_context, init_db

__all__ = [
    "Base",
    "User",
    "SchoolClass",
    "Subject",
    "StudentClass",
    "Subgroup",
    "StudentSubgroup",
    "Schedule",
    "Assignment",
    "Grade",
    "AcademicPeriodBoundary",
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "init_db",
]
