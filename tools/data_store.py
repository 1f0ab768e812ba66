"""
Read access for the performance engine.

Each query converts ORM rows into the engine's immutable records. A failed
lookup is logged and degrades to an empty result, so one broken table never
aborts a whole aggregation: affected grades simply lose their scoping or
eligibility signal.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import (
    AcademicPeriodBoundary,
    Assignment,
    Grade,
    SchoolClass,
    Schedule,
    StudentClass,
    StudentSubgroup,
    Subgroup,
    User,
)
from performance import (
    AssignmentRecord,
    GradeRecord,
    GradingSystem,
    PerformanceSnapshot,
    ScheduleRecord,
    ScheduleStatus,
    SubgroupMembership,
)
from performance.periods import PeriodBoundary
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)


# --------------- Row conversion ---------------

def to_schedule_record(row: Schedule) -> ScheduleRecord:
    return ScheduleRecord(
        id=row.id,
        class_id=row.class_id,
        subject_id=row.subject_id,
        schedule_date=row.schedule_date,
        start_time=row.start_time,
        end_time=row.end_time,
        status=ScheduleStatus(row.status) if row.status else ScheduleStatus.NOT_CONDUCTED,
        subgroup_id=row.subgroup_id,
    )


def to_assignment_record(row: Assignment) -> AssignmentRecord:
    return AssignmentRecord(
        id=row.id,
        schedule_id=row.schedule_id,
        subject_id=row.subject_id,
        class_id=row.class_id,
        max_score=row.max_score,
        assignment_type=row.assignment_type or "",
        planned_for=bool(row.planned_for),
        subgroup_id=row.subgroup_id,
    )


def to_grade_record(row: Grade) -> GradeRecord:
    return GradeRecord(
        id=row.id,
        student_id=row.student_id,
        subject_id=row.subject_id,
        class_id=row.class_id,
        grade=row.grade,
        grade_type=row.grade_type or "",
        teacher_id=row.teacher_id,
        schedule_id=row.schedule_id,
        assignment_id=row.assignment_id,
        subgroup_id=row.subgroup_id,
        created_at=row.created_at,
    )


def _safe_query(description: str, run) -> list:
    try:
        return run()
    except SQLAlchemyError:
        logger.exception("Lookup failed: %s", description)
        return []


# --------------- Grades ---------------

def get_grades_by_student(db: Session, student_id: int) -> List[GradeRecord]:
    return _safe_query(
        f"grades of student {student_id}",
        lambda: [
            to_grade_record(g)
            for g in db.query(Grade).filter(Grade.student_id == student_id).order_by(Grade.id).all()
        ],
    )


def get_grades_by_class(db: Session, class_id: int) -> List[GradeRecord]:
    return _safe_query(
        f"grades of class {class_id}",
        lambda: [
            to_grade_record(g)
            for g in db.query(Grade).filter(Grade.class_id == class_id).order_by(Grade.id).all()
        ],
    )


def get_grades_by_subject(db: Session, subject_id: int, class_id: Optional[int] = None) -> List[GradeRecord]:
    def run():
        query = db.query(Grade).filter(Grade.subject_id == subject_id)
        if class_id is not None:
            query = query.filter(Grade.class_id == class_id)
        return [to_grade_record(g) for g in query.order_by(Grade.id).all()]

    return _safe_query(f"grades of subject {subject_id}", run)


# --------------- Lessons and assignments ---------------

def get_schedules_by_class(db: Session, class_id: int) -> List[ScheduleRecord]:
    return _safe_query(
        f"schedules of class {class_id}",
        lambda: [
            to_schedule_record(s)
            for s in db.query(Schedule).filter(Schedule.class_id == class_id).order_by(Schedule.id).all()
        ],
    )


def get_schedule(db: Session, schedule_id: int) -> Optional[ScheduleRecord]:
    """Single lesson, or None when missing or unreadable."""
    rows = _safe_query(
        f"schedule {schedule_id}",
        lambda: db.query(Schedule).filter(Schedule.id == schedule_id).all(),
    )
    return to_schedule_record(rows[0]) if rows else None


def get_assignments_by_subject(db: Session, subject_id: int, class_id: Optional[int] = None) -> List[AssignmentRecord]:
    def run():
        query = db.query(Assignment).filter(Assignment.subject_id == subject_id)
        if class_id is not None:
            query = query.filter(Assignment.class_id == class_id)
        return [to_assignment_record(a) for a in query.order_by(Assignment.id).all()]

    return _safe_query(f"assignments of subject {subject_id}", run)


def get_assignments_by_schedule(db: Session, schedule_id: int) -> List[AssignmentRecord]:
    return _safe_query(
        f"assignments of schedule {schedule_id}",
        lambda: [
            to_assignment_record(a)
            for a in db.query(Assignment).filter(Assignment.schedule_id == schedule_id).order_by(Assignment.id).all()
        ],
    )


def get_assignments_by_class(db: Session, class_id: int) -> List[AssignmentRecord]:
    return _safe_query(
        f"assignments of class {class_id}",
        lambda: [
            to_assignment_record(a)
            for a in db.query(Assignment).filter(Assignment.class_id == class_id).order_by(Assignment.id).all()
        ],
    )


# --------------- Subgroups ---------------

def get_student_subgroups(db: Session, student_id: int) -> List[SubgroupMembership]:
    return _safe_query(
        f"subgroups of student {student_id}",
        lambda: [
            SubgroupMembership(student_id=m.student_id, subgroup_id=m.subgroup_id)
            for m in db.query(StudentSubgroup).filter(StudentSubgroup.student_id == student_id).all()
        ],
    )


def get_subgroups_by_class(db: Session, class_id: int) -> List[Subgroup]:
    return _safe_query(
        f"subgroups of class {class_id}",
        lambda: db.query(Subgroup).filter(Subgroup.class_id == class_id).order_by(Subgroup.id).all(),
    )


def get_subgroup_members(db: Session, subgroup_id: int) -> List[int]:
    return _safe_query(
        f"members of subgroup {subgroup_id}",
        lambda: [
            m.student_id
            for m in db.query(StudentSubgroup).filter(StudentSubgroup.subgroup_id == subgroup_id).all()
        ],
    )


def get_class_memberships(db: Session, class_id: int) -> List[SubgroupMembership]:
    return _safe_query(
        f"subgroup memberships of class {class_id}",
        lambda: [
            SubgroupMembership(student_id=m.student_id, subgroup_id=m.subgroup_id)
            for m in (
                db.query(StudentSubgroup)
                .join(Subgroup, Subgroup.id == StudentSubgroup.subgroup_id)
                .filter(Subgroup.class_id == class_id)
                .all()
            )
        ],
    )


# --------------- Classes ---------------

def get_class(db: Session, class_id: int) -> Optional[SchoolClass]:
    """Class row (exposes grading_system), or None."""
    rows = _safe_query(
        f"class {class_id}",
        lambda: db.query(SchoolClass).filter(SchoolClass.id == class_id).all(),
    )
    return rows[0] if rows else None


def get_class_students(db: Session, class_id: int) -> List[User]:
    """Students of a class ordered by name."""
    return _safe_query(
        f"students of class {class_id}",
        lambda: (
            db.query(User)
            .join(StudentClass, User.id == StudentClass.student_id)
            .filter(StudentClass.class_id == class_id)
            .filter(User.role == "student")
            .order_by(User.name, User.id)
            .all()
        ),
    )


def get_period_boundaries(db: Session, class_id: int) -> List[PeriodBoundary]:
    return _safe_query(
        f"period boundaries of class {class_id}",
        lambda: [
            PeriodBoundary(
                period_key=b.period_key,
                start_date=b.start_date,
                end_date=b.end_date,
                academic_year=b.academic_year,
                period_name=b.period_name or "",
            )
            for b in db.query(AcademicPeriodBoundary).filter(AcademicPeriodBoundary.class_id == class_id).all()
        ],
    )


def build_class_snapshot(db: Session, class_id: int) -> PerformanceSnapshot:
    """
    Collect everything the engine needs for one class.

    Raises:
        NotFoundError: If the class does not exist
    """
    school_class = get_class(db, class_id)
    if school_class is None:
        raise NotFoundError("Class", class_id)

    return PerformanceSnapshot(
        grading_system=GradingSystem(school_class.grading_system),
        student_ids=[s.id for s in get_class_students(db, class_id)],
        grades=get_grades_by_class(db, class_id),
        schedules=get_schedules_by_class(db, class_id),
        assignments=get_assignments_by_class(db, class_id),
        memberships=get_class_memberships(db, class_id),
    )
