"""
Custom exceptions for the School Journal system.
"""
from datetime import datetime
from typing import Optional


class AuthorizationError(Exception):
    """Raised when a user attempts an unauthorized action."""

    def __init__(self, message: str, user_id: int = None, action: str = None):
        self.message = message
        self.user_id = user_id
        self.action = action
        super().__init__(self.message)


class StudentAccessDenied(AuthorizationError):
    """Raised when a student tries to access another student's data."""

    def __init__(self, requester_id: int, target_id: int):
        message = f"Access denied: Student {requester_id} cannot access data of student {target_id}"
        super().__init__(message, user_id=requester_id, action="access_other_student")


class TeacherOnlyError(AuthorizationError):
    """Raised when a non-teacher tries to perform a teacher-only action."""

    def __init__(self, user_id: int, action: str):
        message = f"Access denied: Only teachers can perform '{action}'"
        super().__init__(message, user_id=user_id, action=action)


class GradeOwnershipError(AuthorizationError):
    """Raised when a teacher edits or deletes a grade another teacher created."""

    def __init__(self, user_id: int, grade_id: int, action: str):
        self.grade_id = grade_id
        message = f"Access denied: Grade {grade_id} was created by another teacher"
        super().__init__(message, user_id=user_id, action=action)


class InvalidUserError(Exception):
    """Raised when a user is not found."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with id {user_id} not found")


class NotFoundError(Exception):
    """Raised when a class, subject, lesson or grade does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id} not found")


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


class DuplicateGradeError(Exception):
    """
    Raised when a conducted lesson's assignment already has a grade for the
    student. Carries the id of the grade already recorded.
    """

    def __init__(self, student_id: int, assignment_id: int, existing_grade_id: int):
        self.student_id = student_id
        self.assignment_id = assignment_id
        self.existing_grade_id = existing_grade_id
        super().__init__(
            f"Student {student_id} already has grade {existing_grade_id} "
            f"for assignment {assignment_id}"
        )


class LessonNotFinishedError(Exception):
    """Raised when a lesson is marked conducted before it has ended."""

    def __init__(self, schedule_id: int, end_time: Optional[datetime]):
        self.schedule_id = schedule_id
        self.end_time = end_time
        ends = end_time.strftime("%Y-%m-%d %H:%M") if end_time else "an unknown time"
        super().__init__(f"Lesson {schedule_id} cannot be marked conducted before it ends at {ends}")
