"""
Subject journal: lesson columns, one row per student, and each student's
result for the view being rendered. Also exports the same grid as CSV.

AUTHORIZATION: Teacher only.
"""
import csv
import io
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from config.settings import settings
from database import Subject
from performance import (
    GradeRecord,
    LessonSlot,
    PerformanceEngine,
    filter_grades_for_view,
    filter_students_for_view,
    resolve_lesson_slots,
)
from .authorization import AuthorizationService
from .data_store import build_class_snapshot, get_class, get_class_students, get_subgroups_by_class
from .exceptions import NotFoundError


def _grade_cell(grade: GradeRecord) -> Dict[str, Any]:
    return {
        "id": grade.id,
        "grade": grade.grade,
        "grade_type": grade.grade_type,
        "schedule_id": grade.schedule_id,
        "assignment_id": grade.assignment_id,
        "subgroup_id": grade.subgroup_id,
        "teacher_id": grade.teacher_id,
    }


def _slot_dict(slot: LessonSlot) -> Dict[str, Any]:
    return {
        "schedule_id": slot.schedule_id,
        "date": slot.date.isoformat(),
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "status": slot.status.value,
        "assignments": [
            {
                "id": a.id,
                "assignment_type": a.assignment_type,
                "max_score": a.max_score,
                "planned_for": a.planned_for,
            }
            for a in slot.assignments
        ],
    }


def get_journal(
    db: Session,
    requester_id: int,
    class_id: int,
    subject_id: int,
    subgroup_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Build the journal grid for one class, subject and (optionally) subgroup.

    Args:
        db: Database session
        requester_id: ID of the requesting teacher
        class_id: ID of the class
        subject_id: ID of the subject
        subgroup_id: Subgroup journal to render; None for the main journal

    Returns:
        Dictionary with the lessons (ordered columns) and one entry per
        student holding their grades per lesson and their result

    Raises:
        TeacherOnlyError: If requester is not a teacher
        NotFoundError: If the class, subject or subgroup does not exist
    """
    AuthorizationService(db).enforce_teacher_only(requester_id, "view_journal")

    school_class = get_class(db, class_id)
    if school_class is None:
        raise NotFoundError("Class", class_id)

    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise NotFoundError("Subject", subject_id)

    if subgroup_id is not None and subgroup_id not in {s.id for s in get_subgroups_by_class(db, class_id)}:
        raise NotFoundError("Subgroup", subgroup_id)

    snapshot = build_class_snapshot(db, class_id)
    engine = PerformanceEngine(
        snapshot,
        high_score_correction=settings.cumulative_high_score_correction,
        virtual_max_score=settings.virtual_max_score,
    )

    # Main journal shows whole-class lessons, a subgroup journal only its own
    view_schedules = [s for s in snapshot.schedules if s.subgroup_id == subgroup_id]
    slots = resolve_lesson_slots(subject_id, view_schedules, snapshot.assignments, class_id=class_id)

    view_grades = filter_grades_for_view(
        engine.usable_grades(), engine.scope_for(subject_id, subgroup_id), subgroup_id,
    )
    by_student: Dict[int, List[GradeRecord]] = defaultdict(list)
    for grade in view_grades:
        by_student[grade.student_id].append(grade)

    results = engine.view_performance(subject_id, subgroup_id)
    names = {s.id: s.name for s in get_class_students(db, class_id)}
    roster = filter_students_for_view(snapshot.student_ids, snapshot.memberships, subgroup_id)
    slot_ids = {slot.schedule_id for slot in slots}

    students = []
    for student_id in roster:
        cells: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        other = []
        for grade in by_student.get(student_id, []):
            if grade.schedule_id in slot_ids:
                cells[grade.schedule_id].append(_grade_cell(grade))
            else:
                other.append(_grade_cell(grade))
        students.append({
            "student_id": student_id,
            "student_name": names.get(student_id, ""),
            "grades": {slot.schedule_id: cells.get(slot.schedule_id, []) for slot in slots},
            "unscheduled_grades": other,
            "performance": results[student_id].to_dict(),
        })

    return {
        "class": {
            "id": school_class.id,
            "name": school_class.name,
            "grading_system": school_class.grading_system,
        },
        "subject": {"id": subject.id, "name": subject.name},
        "subgroup_id": subgroup_id,
        "lessons": [_slot_dict(slot) for slot in slots],
        "total_students": len(students),
        "students": students,
    }


def _format_value(value: float) -> str:
    return f"{value:g}"


def export_journal_csv(
    db: Session,
    requester_id: int,
    class_id: int,
    subject_id: int,
    subgroup_id: Optional[int] = None,
) -> str:
    """
    Render the journal as CSV.

    Header is Student, one dd.MM column per lesson, Average. Several grades
    in one lesson share a cell, separated by ';'.
    """
    journal = get_journal(db, requester_id, class_id, subject_id, subgroup_id)
    lessons = journal["lessons"]

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    header = ["Student"]
    for lesson in lessons:
        year, month, day = lesson["date"].split("-")
        header.append(f"{day}.{month}")
    header.append("Average")
    writer.writerow(header)

    for student in journal["students"]:
        row = [student["student_name"]]
        for lesson in lessons:
            cell = student["grades"].get(lesson["schedule_id"], [])
            row.append(";".join(_format_value(g["grade"]) for g in cell))
        row.append(student["performance"]["average"])
        writer.writerow(row)

    return buffer.getvalue()
