"""
Authorization module for the School Journal system.
Implements role-based access control with enforcement at the tool layer.

RULES:
1. Never trust the client for role - always get from DB
2. Students can only access their own performance
3. Teachers can read any journal and write grades
4. Only the teacher who created a grade may change or delete it
"""
from sqlalchemy.orm import Session

from database import User, Grade
from .exceptions import (
    StudentAccessDenied,
    TeacherOnlyError,
    GradeOwnershipError,
    InvalidUserError,
)


class AuthorizationService:
    """
    Service for handling authorization checks.
    All role information is fetched from the database, never trusted from client.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> User:
        """
        Get user from database.

        Args:
            user_id: The user ID to look up

        Returns:
            User object with id, name, and role

        Raises:
            InvalidUserError: If user not found
        """
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise InvalidUserError(user_id)
        return user

    def get_user_role(self, user_id: int) -> str:
        """Role from the database ('student' or 'teacher')."""
        return self.get_user(user_id).role

    def is_teacher(self, user_id: int) -> bool:
        """Check if user is a teacher."""
        return self.get_user_role(user_id) == "teacher"

    def enforce_teacher_only(self, user_id: int, action: str) -> None:
        """
        Enforce that only teachers can perform an action.

        Args:
            user_id: The requesting user's ID
            action: Description of the action being attempted

        Raises:
            TeacherOnlyError: If user is not a teacher
        """
        if not self.is_teacher(user_id):
            raise TeacherOnlyError(user_id, action)

    def enforce_student_data_access(self, requester_id: int, target_student_id: int) -> None:
        """
        Enforce that students can only access their own data.
        Teachers can access any student's data.

        Args:
            requester_id: The ID of the user making the request
            target_student_id: The ID of the student whose data is being accessed

        Raises:
            StudentAccessDenied: If a student tries to access another student's data
        """
        role = self.get_user_role(requester_id)

        if role == "teacher":
            return

        if requester_id != target_student_id:
            raise StudentAccessDenied(requester_id, target_student_id)

    def enforce_grade_owner(self, user_id: int, grade: Grade, action: str) -> None:
        """
        Enforce that a grade is changed only by the teacher who created it.

        Raises:
            TeacherOnlyError: If user is not a teacher
            GradeOwnershipError: If the grade belongs to another teacher
        """
        self.enforce_teacher_only(user_id, action)
        if grade.teacher_id is not None and grade.teacher_id != user_id:
            raise GradeOwnershipError(user_id, grade.id, action)


def get_authorization_service(db: Session) -> AuthorizationService:
    """Factory function to create AuthorizationService."""
    return AuthorizationService(db)
