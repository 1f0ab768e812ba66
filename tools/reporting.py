"""
Performance reporting tools for the School Journal system.

All numbers come from the performance engine; this module only loads the
class snapshot, resolves the date window and enforces access rules.
"""
import logging
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from database import StudentClass
from performance import aggregate_performance, compute_subject_performance, resolve_window
from .authorization import AuthorizationService
from .data_store import build_class_snapshot, get_class, get_period_boundaries
from .exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _resolve_window(
    db: Session,
    class_id: int,
    from_date: Optional[date],
    to_date: Optional[date],
    period: Optional[str],
    reference_date: Optional[date],
):
    if from_date and to_date and from_date > to_date:
        raise ValidationError("from_date must not be after to_date", "from_date")
    boundaries = get_period_boundaries(db, class_id) if period else []
    try:
        return resolve_window(from_date, to_date, period, reference_date or date.today(), boundaries)
    except ValueError as e:
        raise ValidationError(str(e), "period")


def get_class_performance(
    db: Session,
    requester_id: int,
    class_id: int,
    student_id: Optional[int] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    period: Optional[str] = None,
    reference_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Per-student, per-subject and overall performance for a class.

    AUTHORIZATION:
    - Teachers: Whole class or any student
    - Students: Only themselves (student_id must be their own id)

    Args:
        db: Database session
        requester_id: ID of the user making the request
        class_id: ID of the class
        student_id: Restrict to one student (optional)
        from_date: Window start (optional)
        to_date: Window end (optional)
        period: Academic period key, used when no explicit dates are given
        reference_date: Date that picks the academic year (defaults to today)

    Returns:
        Dictionary with class info, the applied window and the results

    Raises:
        TeacherOnlyError: If a student requests the whole class
        StudentAccessDenied: If a student requests another student
        NotFoundError: If the class does not exist
        ValidationError: If the window or period is invalid
    """
    auth_service = AuthorizationService(db)
    if student_id is None:
        auth_service.enforce_teacher_only(requester_id, "view_class_performance")
    else:
        auth_service.enforce_student_data_access(requester_id, student_id)

    snapshot = build_class_snapshot(db, class_id)
    if student_id is not None:
        if student_id not in snapshot.student_ids:
            raise ValidationError(f"Student {student_id} is not in class {class_id}", "student_id")
        snapshot.student_ids = [student_id]

    window = _resolve_window(db, class_id, from_date, to_date, period, reference_date)

    performance = aggregate_performance(
        snapshot,
        window=window,
        high_score_correction=settings.cumulative_high_score_correction,
        virtual_max_score=settings.virtual_max_score,
    )
    logger.debug("Computed performance for %d students of class %s", len(performance), class_id)

    return {
        "class_id": class_id,
        "grading_system": snapshot.grading_system.value,
        "filters_applied": {
            "student_id": student_id,
            "period": period,
            "from_date": window[0].isoformat() if window else None,
            "to_date": window[1].isoformat() if window else None,
        },
        "total_students": len(performance),
        "performance": performance,
    }


def get_student_subject_performance(
    db: Session,
    requester_id: int,
    student_id: int,
    subject_id: int,
    subgroup_id: Optional[int] = None,
    class_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    One student's result in one subject.

    AUTHORIZATION:
    - Teachers: Any student
    - Students: Only themselves

    Args:
        db: Database session
        requester_id: ID of the user making the request
        student_id: ID of the student
        subject_id: ID of the subject
        subgroup_id: Restrict to one subgroup journal (optional)
        class_id: Class to use; defaults to the student's first class

    Raises:
        StudentAccessDenied: If a student requests another student
        NotFoundError: If the class does not exist
        ValidationError: If the student is not enrolled in a class
    """
    AuthorizationService(db).enforce_student_data_access(requester_id, student_id)

    if class_id is None:
        enrolment = (
            db.query(StudentClass)
            .filter(StudentClass.student_id == student_id)
            .order_by(StudentClass.class_id)
            .first()
        )
        if not enrolment:
            raise ValidationError(f"Student {student_id} is not enrolled in any class", "student_id")
        class_id = enrolment.class_id
    elif get_class(db, class_id) is None:
        raise NotFoundError("Class", class_id)

    snapshot = build_class_snapshot(db, class_id)
    result = compute_subject_performance(
        snapshot,
        student_id,
        subject_id,
        subgroup_id=subgroup_id,
        high_score_correction=settings.cumulative_high_score_correction,
        virtual_max_score=settings.virtual_max_score,
    )

    return {
        "student_id": student_id,
        "subject_id": subject_id,
        "class_id": class_id,
        "subgroup_id": subgroup_id,
        "grading_system": snapshot.grading_system.value,
        "performance": result.to_dict(),
    }
