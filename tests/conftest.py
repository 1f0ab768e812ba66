"""
Shared test configuration.

Points the application at a throwaway SQLite database before any project
module reads its settings, and provides the seeded journal used by the
database-backed tests.
"""
import os
import sys
import tempfile
from datetime import date, datetime

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="school_journal_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import (  # noqa: E402
    init_db, get_db_context,
    User, SchoolClass, Subject, StudentClass, Subgroup, StudentSubgroup,
    Schedule, Assignment, Grade, AcademicPeriodBoundary,
)
from database.seed import clear_database  # noqa: E402


def _populate(db):
    db.add_all([
        User(id=1, name="Olga Petrova", role="teacher"),
        User(id=2, name="Ivan Sokolov", role="teacher"),
        User(id=3, name="Anna Smirnova", role="student"),
        User(id=4, name="Boris Ivanov", role="student"),
        User(id=5, name="Daria Kuznetsova", role="student"),
        User(id=6, name="Egor Popov", role="student"),
        User(id=7, name="Maria Volkova", role="student"),
    ])
    db.add_all([
        SchoolClass(id=1, name="7A", grading_system="five_point"),
        SchoolClass(id=2, name="9B", grading_system="cumulative"),
        Subject(id=1, name="Mathematics"),
        Subject(id=2, name="English"),
    ])
    db.flush()

    db.add_all([
        StudentClass(student_id=3, class_id=1),
        StudentClass(student_id=4, class_id=1),
        StudentClass(student_id=5, class_id=2),
        StudentClass(student_id=6, class_id=2),
        StudentClass(student_id=7, class_id=2),
        Subgroup(id=1, class_id=2, name="English group 1"),
    ])
    db.flush()
    db.add_all([
        StudentSubgroup(student_id=5, subgroup_id=1),
        StudentSubgroup(student_id=6, subgroup_id=1),
    ])

    def lesson(id, class_id, subject_id, day, start, end, status="conducted", subgroup_id=None, teacher_id=2):
        return Schedule(
            id=id, class_id=class_id, subject_id=subject_id, teacher_id=teacher_id,
            subgroup_id=subgroup_id, schedule_date=day, start_time=start, end_time=end, status=status,
        )

    db.add_all([
        lesson(10, 1, 1, date(2024, 3, 4), "08:30", "09:15", teacher_id=1),
        lesson(11, 1, 1, date(2024, 3, 1), "10:30", "11:15", teacher_id=1),
        lesson(20, 2, 1, date(2024, 3, 1), "09:25", "10:10"),
        lesson(21, 2, 1, date(2024, 3, 5), "09:25", "10:10", status="not_conducted"),
        lesson(30, 2, 2, date(2024, 3, 2), "11:30", "12:15", subgroup_id=1),
        lesson(31, 2, 2, date(2024, 3, 3), "11:30", "12:15"),
        lesson(40, 2, 2, date(2099, 9, 1), "08:30", "09:15", status="not_conducted", subgroup_id=1),
        lesson(41, 2, 1, date(2024, 2, 20), "08:30", "09:15", status="not_conducted"),
    ])
    db.flush()

    db.add_all([
        Assignment(id=100, schedule_id=20, subject_id=1, class_id=2, teacher_id=2, max_score=10),
        Assignment(id=101, schedule_id=21, subject_id=1, class_id=2, teacher_id=2, max_score=10, planned_for=True),
        Assignment(id=102, schedule_id=30, subject_id=2, class_id=2, teacher_id=2, max_score=5, subgroup_id=1),
        Assignment(id=103, schedule_id=31, subject_id=2, class_id=2, teacher_id=2, max_score=10),
    ])
    db.flush()

    def grade(id, student_id, subject_id, class_id, value, created, teacher_id=2, **kwargs):
        return Grade(
            id=id, student_id=student_id, subject_id=subject_id, class_id=class_id,
            teacher_id=teacher_id, grade=value, created_at=created, **kwargs,
        )

    db.add_all([
        # 7A, five-point
        grade(1000, 3, 1, 1, 5, datetime(2024, 3, 1, 11, 0), teacher_id=1, grade_type="test", schedule_id=11),
        grade(1001, 3, 1, 1, 3, datetime(2024, 3, 4, 9, 0), teacher_id=1, grade_type="homework", schedule_id=10),
        grade(1002, 4, 1, 1, 4, datetime(2024, 3, 4, 9, 0), teacher_id=1, grade_type="classwork", schedule_id=10),
        # 9B, cumulative
        grade(2000, 5, 1, 2, 8, datetime(2024, 3, 1, 10, 0), schedule_id=20, assignment_id=100),
        grade(2001, 5, 1, 2, 10, datetime(2024, 3, 5, 10, 0), schedule_id=21, assignment_id=101),
        grade(2002, 6, 1, 2, 9, datetime(2024, 1, 15, 10, 0), schedule_id=20, assignment_id=100),
        grade(2003, 5, 2, 2, 4, datetime(2024, 3, 2, 12, 0), schedule_id=30, assignment_id=102, subgroup_id=1),
        grade(2004, 7, 2, 2, 7, datetime(2024, 3, 3, 12, 0), schedule_id=31, assignment_id=103),
        grade(2005, 6, 2, 2, 6, datetime(2024, 3, 10, 12, 0)),
    ])

    db.add(AcademicPeriodBoundary(
        class_id=2, period_key="quarter3", period_name="Winter term",
        start_date=date(2024, 1, 8), end_date=date(2024, 1, 31), academic_year=2023,
    ))


@pytest.fixture(scope="module")
def setup_database():
    """Set up test database."""
    init_db()

    with get_db_context() as db:
        clear_database(db)

    with get_db_context() as db:
        _populate(db)

    yield

    # Cleanup after tests
    with get_db_context() as db:
        clear_database(db)
