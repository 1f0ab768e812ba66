"""
Tests for the subject journal and its CSV export.
"""
import pytest

from database import get_db_context
from tools import create_grade, delete_grade, get_journal, export_journal_csv, NotFoundError, TeacherOnlyError


class TestJournal:
    """Tests for get_journal."""

    def test_main_math_journal(self, setup_database):
        """Lessons are ordered by date; grades sit under their lesson."""
        with get_db_context() as db:
            journal = get_journal(db, requester_id=2, class_id=2, subject_id=1)

        assert [lesson["schedule_id"] for lesson in journal["lessons"]] == [41, 20, 21]
        assert journal["lessons"][1]["assignments"][0]["max_score"] == 10

        students = {s["student_id"]: s for s in journal["students"]}
        assert list(students) == [5, 6, 7]
        assert [g["id"] for g in students[5]["grades"][20]] == [2000]
        assert [g["id"] for g in students[5]["grades"][21]] == [2001]
        assert students[5]["performance"] == {"average": "8.0", "percentage": "80.0%"}
        assert students[7]["performance"] == {"average": "-", "percentage": "-"}

    def test_views_split_english(self, setup_database):
        """Subgroup lessons and member grades stay out of the main journal."""
        with get_db_context() as db:
            main = get_journal(db, requester_id=2, class_id=2, subject_id=2)
            group = get_journal(db, requester_id=2, class_id=2, subject_id=2, subgroup_id=1)

        assert [lesson["schedule_id"] for lesson in main["lessons"]] == [31]
        assert [lesson["schedule_id"] for lesson in group["lessons"]] == [30, 40]

        main_ids = {g["id"] for s in main["students"] for cell in s["grades"].values() for g in cell}
        main_ids |= {g["id"] for s in main["students"] for g in s["unscheduled_grades"]}
        group_ids = {g["id"] for s in group["students"] for cell in s["grades"].values() for g in cell}
        group_ids |= {g["id"] for s in group["students"] for g in s["unscheduled_grades"]}

        assert main_ids == {2004}
        assert group_ids == {2003, 2005}
        assert [s["student_id"] for s in group["students"]] == [5, 6]

        group_students = {s["student_id"]: s for s in group["students"]}
        assert group_students[6]["performance"] == {"average": "6.0", "percentage": "60.0%"}

    def test_subgroup_journal_without_subject_lessons(self, setup_database):
        """Subgroup 1 has no math lessons; a member's tagged math grade still shows in its journal."""
        with get_db_context() as db:
            created = create_grade(db, teacher_id=2, student_id=5, subject_id=1, class_id=2, grade=6, subgroup_id=1)
            grade_id = created["grade"]["id"]

        try:
            with get_db_context() as db:
                journal = get_journal(db, requester_id=2, class_id=2, subject_id=1, subgroup_id=1)

            assert journal["lessons"] == []
            students = {s["student_id"]: s for s in journal["students"]}
            assert list(students) == [5, 6]
            assert [g["id"] for g in students[5]["unscheduled_grades"]] == [grade_id]
            assert students[5]["performance"] == {"average": "6.0", "percentage": "60.0%"}
            assert students[6]["performance"] == {"average": "-", "percentage": "-"}
        finally:
            with get_db_context() as db:
                delete_grade(db, teacher_id=2, grade_id=grade_id)

    def test_access_and_missing(self, setup_database):
        with get_db_context() as db:
            with pytest.raises(TeacherOnlyError):
                get_journal(db, requester_id=5, class_id=2, subject_id=1)
            with pytest.raises(NotFoundError):
                get_journal(db, requester_id=2, class_id=99, subject_id=1)
            with pytest.raises(NotFoundError):
                get_journal(db, requester_id=2, class_id=2, subject_id=99)
            with pytest.raises(NotFoundError):
                get_journal(db, requester_id=2, class_id=2, subject_id=2, subgroup_id=42)


class TestJournalExport:
    """Tests for export_journal_csv."""

    def test_math_csv(self, setup_database):
        with get_db_context() as db:
            content = export_journal_csv(db, requester_id=2, class_id=2, subject_id=1)

        assert content.splitlines() == [
            "Student,20.02,01.03,05.03,Average",
            "Daria Kuznetsova,,8,10,8.0",
            "Egor Popov,,9,,9.0",
            "Maria Volkova,,,,-",
        ]

    def test_subgroup_csv(self, setup_database):
        with get_db_context() as db:
            content = export_journal_csv(db, requester_id=2, class_id=2, subject_id=2, subgroup_id=1)

        assert content.splitlines() == [
            "Student,02.03,01.09,Average",
            "Daria Kuznetsova,4,,4.0",
            "Egor Popov,,,6.0",
        ]

    def test_several_grades_share_a_cell(self, setup_database):
        with get_db_context() as db:
            create_grade(db, teacher_id=1, student_id=4, subject_id=1, class_id=1, grade=5, schedule_id=10)

        with get_db_context() as db:
            content = export_journal_csv(db, requester_id=1, class_id=1, subject_id=1)

        assert content.splitlines() == [
            "Student,01.03,04.03,Average",
            "Anna Smirnova,5,3,4.3",
            "Boris Ivanov,,4;5,4.5",
        ]
