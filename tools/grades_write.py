"""
Grade writing tools for the School Journal system.
All write operations are restricted to teachers; changes and deletes are
further restricted to the teacher who created the grade.

Creating a grade against an assignment of a conducted lesson is guarded
against duplicates. The lesson row is locked for the rest of the
transaction (on SQLite the whole transaction holds the write lock) so two
concurrent submissions cannot both pass the check.
"""
import logging
import math
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from database import Assignment, Grade, SchoolClass, Schedule, Subject, User
from performance import GradingSystem, find_duplicate_grade
from performance.calculator import FIVE_POINT_MAX, FIVE_POINT_MIN
from .authorization import AuthorizationService
from .data_store import to_grade_record, to_schedule_record
from .exceptions import DuplicateGradeError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _validate_grade_type(grade_type: str) -> None:
    if not isinstance(grade_type, str) or not grade_type.strip():
        raise ValidationError("Grade type must be a non-empty string", "grade_type")


def _validate_value(value: float, school_class: SchoolClass, assignment: Optional[Assignment]) -> None:
    """
    Check a grade value against the class's grading system.

    Five-point grades lie in [1, 5]. Cumulative grades lie in
    [0, max_score] of the assignment, or of the virtual maximum when the
    grade has no assignment.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError("Grade value must be a finite number", "grade")

    if school_class.grading_system == GradingSystem.FIVE_POINT.value:
        if not FIVE_POINT_MIN <= value <= FIVE_POINT_MAX:
            raise ValidationError(
                f"Grade value must be between {FIVE_POINT_MIN} and {FIVE_POINT_MAX}", "grade"
            )
        return

    max_score = assignment.max_score if assignment is not None else settings.virtual_max_score
    if not 0 <= value <= max_score:
        raise ValidationError(f"Grade value must be between 0 and {max_score:g}", "grade")


def create_grade(
    db: Session,
    teacher_id: int,
    student_id: int,
    subject_id: int,
    class_id: int,
    grade: float,
    grade_type: str = "classwork",
    comment: Optional[str] = None,
    schedule_id: Optional[int] = None,
    assignment_id: Optional[int] = None,
    subgroup_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Record a new grade.

    AUTHORIZATION: Teacher only.

    Args:
        db: Database session
        teacher_id: ID of the teacher recording the grade
        student_id: ID of the student receiving the grade
        subject_id: ID of the subject
        class_id: ID of the class
        grade: Grade value
        grade_type: Weight category (e.g. "test", "homework")
        comment: Free-text comment (optional)
        schedule_id: Lesson the grade was given in (optional)
        assignment_id: Assignment the grade scores (optional)
        subgroup_id: Subgroup tag; defaults to the lesson's subgroup

    Returns:
        Created grade data

    Raises:
        TeacherOnlyError: If requester is not a teacher
        NotFoundError: If the class, subject, lesson or assignment is missing
        ValidationError: If validation fails
        DuplicateGradeError: If the student already has a grade for this
            assignment of a conducted lesson
    """
    auth_service = AuthorizationService(db)

    # ENFORCEMENT: Only teachers can add grades
    auth_service.enforce_teacher_only(teacher_id, "create_grade")

    student = db.query(User).filter(User.id == student_id).first()
    if not student:
        raise ValidationError(f"Student with id {student_id} not found", "student_id")
    if student.role != "student":
        raise ValidationError(f"User {student_id} is not a student", "student_id")

    school_class = db.query(SchoolClass).filter(SchoolClass.id == class_id).first()
    if not school_class:
        raise NotFoundError("Class", class_id)

    if not db.query(Subject).filter(Subject.id == subject_id).first():
        raise NotFoundError("Subject", subject_id)

    _validate_grade_type(grade_type)

    schedule = None
    if schedule_id is not None:
        # Row lock held until commit; serialises the duplicate check below
        schedule = (
            db.query(Schedule)
            .filter(Schedule.id == schedule_id)
            .with_for_update()
            .first()
        )
        if not schedule:
            raise NotFoundError("Schedule", schedule_id)
        if schedule.class_id != class_id or schedule.subject_id != subject_id:
            raise ValidationError(
                f"Schedule {schedule_id} is not a {subject_id} lesson of class {class_id}",
                "schedule_id",
            )

    assignment = None
    if assignment_id is not None:
        assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
        if not assignment:
            raise NotFoundError("Assignment", assignment_id)
        if schedule_id is not None and assignment.schedule_id != schedule_id:
            raise ValidationError(
                f"Assignment {assignment_id} does not belong to schedule {schedule_id}",
                "assignment_id",
            )

    _validate_value(grade, school_class, assignment)

    if schedule is not None and assignment_id is not None:
        existing = (
            db.query(Grade)
            .filter(Grade.student_id == student_id)
            .filter(Grade.assignment_id == assignment_id)
            .all()
        )
        duplicate = find_duplicate_grade(
            student_id,
            assignment_id,
            to_schedule_record(schedule),
            [to_grade_record(g) for g in existing],
        )
        if duplicate is not None:
            logger.info(
                "Rejected duplicate grade for student %s, assignment %s (existing %s)",
                student_id, assignment_id, duplicate.id,
            )
            raise DuplicateGradeError(student_id, assignment_id, duplicate.id)

    if subgroup_id is None and schedule is not None:
        subgroup_id = schedule.subgroup_id

    new_grade = Grade(
        student_id=student_id,
        subject_id=subject_id,
        class_id=class_id,
        teacher_id=teacher_id,
        grade=grade,
        grade_type=grade_type,
        comment=comment,
        schedule_id=schedule_id,
        assignment_id=assignment_id,
        subgroup_id=subgroup_id,
    )

    db.add(new_grade)
    db.commit()
    db.refresh(new_grade)

    logger.info("Grade %s recorded for student %s by teacher %s", new_grade.id, student_id, teacher_id)

    return {
        "success": True,
        "message": f"Grade added successfully for student {student.name}",
        "grade": new_grade.to_dict(),
    }


def update_grade(
    db: Session,
    teacher_id: int,
    grade_id: int,
    grade: Optional[float] = None,
    comment: Optional[str] = None,
    grade_type: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Update an existing grade's value, comment or type.

    AUTHORIZATION: The teacher who created the grade.

    Raises:
        NotFoundError: If the grade does not exist
        GradeOwnershipError: If another teacher created the grade
        ValidationError: If validation fails
    """
    existing = db.query(Grade).filter(Grade.id == grade_id).first()
    if not existing:
        raise NotFoundError("Grade", grade_id)

    AuthorizationService(db).enforce_grade_owner(teacher_id, existing, "update_grade")

    if grade is not None:
        school_class = db.query(SchoolClass).filter(SchoolClass.id == existing.class_id).first()
        if not school_class:
            raise NotFoundError("Class", existing.class_id)
        assignment = None
        if existing.assignment_id is not None:
            assignment = db.query(Assignment).filter(Assignment.id == existing.assignment_id).first()
        _validate_value(grade, school_class, assignment)
        existing.grade = grade

    if grade_type is not None:
        _validate_grade_type(grade_type)
        existing.grade_type = grade_type

    if comment is not None:
        existing.comment = comment

    db.commit()
    db.refresh(existing)

    return {
        "success": True,
        "message": "Grade updated successfully",
        "grade": existing.to_dict(),
    }


def delete_grade(db: Session, teacher_id: int, grade_id: int) -> Dict[str, Any]:
    """
    Delete a grade.

    AUTHORIZATION: The teacher who created the grade.

    Raises:
        NotFoundError: If the grade does not exist
        GradeOwnershipError: If another teacher created the grade
    """
    existing = db.query(Grade).filter(Grade.id == grade_id).first()
    if not existing:
        raise NotFoundError("Grade", grade_id)

    AuthorizationService(db).enforce_grade_owner(teacher_id, existing, "delete_grade")

    db.delete(existing)
    db.commit()

    logger.info("Grade %s deleted by teacher %s", grade_id, teacher_id)

    return {
        "success": True,
        "message": "Grade deleted successfully",
        "grade_id": grade_id,
    }
