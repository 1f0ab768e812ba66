"""
Tools module for the School Journal system.

Database-backed services around the performance engine. Every entry point
enforces authorization before touching data.
"""
from .exceptions import (
    AuthorizationError,
    StudentAccessDenied,
    TeacherOnlyError,
    GradeOwnershipError,
    InvalidUserError,
    NotFoundError,
    ValidationError,
    DuplicateGradeError,
    LessonNotFinishedError,
)

from .authorization import (
    AuthorizationService,
    get_authorization_service,
)

from .data_store import (
    get_grades_by_student,
    get_grades_by_class,
    get_grades_by_subject,
    get_schedules_by_class,
    get_schedule,
    get_assignments_by_subject,
    get_assignments_by_schedule,
    get_student_subgroups,
    get_subgroups_by_class,
    get_class,
    get_class_students,
    get_subgroup_members,
    build_class_snapshot,
)

from .grades_write import (
    create_grade,
    update_grade,
    delete_grade,
)

from .schedules import update_schedule_status

from .journal import (
    get_journal,
    export_journal_csv,
)

from .reporting import (
    get_class_performance,
    get_student_subject_performance,
)

__all__ = [
    # Exceptions
    "AuthorizationError",
    "StudentAccessDenied",
    "TeacherOnlyError",
    "GradeOwnershipError",
    "InvalidUserError",
    "NotFoundError",
    "ValidationError",
    "DuplicateGradeError",
    "LessonNotFinishedError",
    # Authorization
    "AuthorizationService",
    "get_authorization_service",
    # Data store
    "get_grades_by_student",
    "get_grades_by_class",
    "get_grades_by_subject",
    "get_schedules_by_class",
    "get_schedule",
    "get_assignments_by_subject",
    "get_assignments_by_schedule",
    "get_student_subgroups",
    "get_subgroups_by_class",
    "get_class",
    "get_class_students",
    "get_subgroup_members",
    "build_class_snapshot",
    # Grades Write
    "create_grade",
    "update_grade",
    "delete_grade",
    # Schedules
    "update_schedule_status",
    # Journal
    "get_journal",
    "export_journal_csv",
    # Reporting
    "get_class_performance",
    "get_student_subject_performance",
]
