"""
Tests for database-backed performance reports and the data store.
"""
from datetime import date

import pytest

from database import get_db_context
from tools import (
    get_class_performance,
    get_student_subject_performance,
    build_class_snapshot,
    get_schedule,
    get_subgroup_members,
    get_assignments_by_schedule,
    get_grades_by_subject,
    NotFoundError,
    StudentAccessDenied,
    TeacherOnlyError,
    ValidationError,
)
from performance import GradingSystem, ScheduleStatus


class TestDataStore:
    """Tests for the read layer."""

    def test_build_class_snapshot(self, setup_database):
        with get_db_context() as db:
            snapshot = build_class_snapshot(db, 2)
            assert snapshot.grading_system == GradingSystem.CUMULATIVE
            assert snapshot.student_ids == [5, 6, 7]
            assert {g.id for g in snapshot.grades} == {2000, 2001, 2002, 2003, 2004, 2005}
            assert len(snapshot.assignments) == 4
            assert {(m.student_id, m.subgroup_id) for m in snapshot.memberships} == {(5, 1), (6, 1)}

    def test_missing_class(self, setup_database):
        with get_db_context() as db:
            with pytest.raises(NotFoundError):
                build_class_snapshot(db, 99)

    def test_single_lookups(self, setup_database):
        with get_db_context() as db:
            schedule = get_schedule(db, 20)
            assert schedule.status == ScheduleStatus.CONDUCTED
            assert get_schedule(db, 999) is None
            assert sorted(get_subgroup_members(db, 1)) == [5, 6]
            assert [a.id for a in get_assignments_by_schedule(db, 21)] == [101]
            assert {g.id for g in get_grades_by_subject(db, 2, class_id=2)} == {2003, 2004, 2005}


class TestClassPerformance:
    """Tests for get_class_performance."""

    def test_cumulative_class(self, setup_database):
        with get_db_context() as db:
            result = get_class_performance(db, requester_id=2, class_id=2)

        performance = result["performance"]
        assert result["grading_system"] == "cumulative"
        assert performance[5] == {
            1: {"average": "8.0", "percentage": "80.0%"},
            2: {"average": "4.0", "percentage": "80.0%"},
            "overall": {"average": "12.0", "percentage": "80.0%"},
        }
        assert performance[6]["overall"] == {"average": "15.0", "percentage": "75.0%"}
        assert performance[6][2] == {"average": "6.0", "percentage": "60.0%"}
        assert performance[7] == {
            2: {"average": "7.0", "percentage": "70.0%"},
            "overall": {"average": "7.0", "percentage": "70.0%"},
        }

    def test_five_point_class(self, setup_database):
        with get_db_context() as db:
            result = get_class_performance(db, requester_id=1, class_id=1, student_id=3)
        assert result["performance"] == {
            3: {1: {"average": "4.3", "percentage": "-"}, "overall": {"average": "4.3", "percentage": "-"}},
        }

    def test_student_sees_only_self(self, setup_database):
        with get_db_context() as db:
            result = get_class_performance(db, requester_id=5, class_id=2, student_id=5)
            assert list(result["performance"]) == [5]

            with pytest.raises(TeacherOnlyError):
                get_class_performance(db, requester_id=5, class_id=2)
            with pytest.raises(StudentAccessDenied):
                get_class_performance(db, requester_id=5, class_id=2, student_id=6)

    def test_student_not_in_class(self, setup_database):
        with get_db_context() as db:
            with pytest.raises(ValidationError):
                get_class_performance(db, requester_id=1, class_id=2, student_id=3)

    def test_date_window(self, setup_database):
        with get_db_context() as db:
            result = get_class_performance(
                db, requester_id=2, class_id=2, from_date=date(2024, 3, 1), to_date=date(2024, 3, 31),
            )
        student = result["performance"][6]
        assert 1 not in student
        assert student["overall"] == {"average": "6.0", "percentage": "60.0%"}
        assert result["filters_applied"]["from_date"] == "2024-03-01"

    def test_period_uses_class_boundaries(self, setup_database):
        """quarter3 of 2023/24 is overridden to Jan 8 - Jan 31 for this class."""
        with get_db_context() as db:
            result = get_class_performance(
                db, requester_id=2, class_id=2, period="quarter3", reference_date=date(2024, 2, 1),
            )
        performance = result["performance"]
        assert performance[6] == {
            1: {"average": "9.0", "percentage": "90.0%"},
            "overall": {"average": "9.0", "percentage": "90.0%"},
        }
        assert performance[5] == {"overall": {"average": "-", "percentage": "-"}}
        assert result["filters_applied"]["to_date"] == "2024-01-31"

    def test_invalid_window(self, setup_database):
        with get_db_context() as db:
            with pytest.raises(ValidationError):
                get_class_performance(db, requester_id=2, class_id=2, period="trimester")
            with pytest.raises(ValidationError):
                get_class_performance(
                    db, requester_id=2, class_id=2, from_date=date(2024, 3, 2), to_date=date(2024, 3, 1),
                )


class TestStudentSubjectPerformance:
    """Tests for get_student_subject_performance."""

    def test_own_result(self, setup_database):
        with get_db_context() as db:
            result = get_student_subject_performance(db, requester_id=6, student_id=6, subject_id=2)
        assert result["class_id"] == 2
        assert result["performance"] == {"average": "6.0", "percentage": "60.0%"}

    def test_subgroup_view(self, setup_database):
        with get_db_context() as db:
            in_group = get_student_subject_performance(db, 2, 5, 2, subgroup_id=1)
            main = get_student_subject_performance(db, 2, 5, 2)
        assert in_group["performance"] == {"average": "4.0", "percentage": "80.0%"}
        assert main["performance"] == in_group["performance"]

    def test_access_denied(self, setup_database):
        with get_db_context() as db:
            with pytest.raises(StudentAccessDenied):
                get_student_subject_performance(db, requester_id=5, student_id=6, subject_id=2)
            with pytest.raises(NotFoundError):
                get_student_subject_performance(db, requester_id=2, student_id=5, subject_id=2, class_id=99)
