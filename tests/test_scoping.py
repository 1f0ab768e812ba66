"""
Tests for subgroup scoping of journal views.
"""
from datetime import date

from performance import (
    GradeRecord,
    ScheduleRecord,
    SubgroupMembership,
    SubgroupScope,
    filter_grades_for_view,
    filter_students_for_view,
    grade_owner,
    partition_grades,
)

SUBJECT = 1
GROUP_A = 10
GROUP_B = 20


def _grade(id, student_id, schedule_id=None, subgroup_id=None, subject_id=SUBJECT, assignment_id=None):
    return GradeRecord(
        id=id,
        student_id=student_id,
        subject_id=subject_id,
        class_id=1,
        grade=4,
        schedule_id=schedule_id,
        assignment_id=assignment_id,
        subgroup_id=subgroup_id,
    )


SCHEDULES = [
    ScheduleRecord(id=100, class_id=1, subject_id=SUBJECT, schedule_date=date(2024, 3, 1)),
    ScheduleRecord(id=101, class_id=1, subject_id=SUBJECT, schedule_date=date(2024, 3, 2), subgroup_id=GROUP_A),
    ScheduleRecord(id=102, class_id=1, subject_id=SUBJECT, schedule_date=date(2024, 3, 3), subgroup_id=GROUP_B),
    ScheduleRecord(id=200, class_id=1, subject_id=2, schedule_date=date(2024, 3, 3), subgroup_id=30),
]

MEMBERSHIPS = [
    SubgroupMembership(student_id=1, subgroup_id=GROUP_A),
    SubgroupMembership(student_id=2, subgroup_id=GROUP_B),
    SubgroupMembership(student_id=4, subgroup_id=30),
]


class TestSubgroupScope:
    """Tests for SubgroupScope ownership."""

    def test_known_subgroups_come_from_subject_lessons(self):
        """Only subgroups referenced by this subject's lessons are known."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        assert scope.subgroup_ids == frozenset({GROUP_A, GROUP_B})
        assert scope.is_split
        assert scope.subgroups_of(4) == frozenset()

    def test_schedule_linkage_wins(self):
        """A subgroup lesson owns its grades whatever the tag says."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        grade = _grade(1, student_id=1, schedule_id=102, subgroup_id=GROUP_A)
        assert grade_owner(grade, scope) == GROUP_B

    def test_tag_used_for_whole_class_lesson(self):
        """A known subgroup tag on a whole-class lesson grade decides ownership."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        assert scope.owner(_grade(1, student_id=1, schedule_id=100, subgroup_id=GROUP_A)) == GROUP_A
        assert scope.owner(_grade(2, student_id=1, schedule_id=100)) is None

    def test_unknown_tag_ignored(self):
        """A tag naming a subgroup of another subject does not move the grade."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        assert scope.owner(_grade(1, student_id=3, subgroup_id=30)) is None

    def test_unscheduled_member_grade_defaults_to_subgroup(self):
        """An unlinked grade of a subgroup member belongs to that subgroup."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        assert scope.owner(_grade(1, student_id=1)) == GROUP_A
        assert scope.owner(_grade(2, student_id=3)) is None

    def test_several_memberships_pick_lowest_id(self):
        memberships = MEMBERSHIPS + [SubgroupMembership(student_id=2, subgroup_id=GROUP_A)]
        scope = SubgroupScope(SUBJECT, SCHEDULES, memberships)
        assert scope.owner(_grade(1, student_id=2)) == GROUP_A

    def test_extra_subgroup_ids(self):
        """Callers may declare subgroups that have no lessons yet."""
        scope = SubgroupScope(SUBJECT, SCHEDULES[:1], MEMBERSHIPS, extra_subgroup_ids=[GROUP_A])
        assert scope.owner(_grade(1, student_id=1)) == GROUP_A

    def test_visible_to_student(self):
        """Students see main-journal grades and grades of their own subgroups."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        assert scope.visible_to_student(_grade(1, student_id=1, schedule_id=101))
        assert scope.visible_to_student(_grade(2, student_id=3, schedule_id=100))
        assert not scope.visible_to_student(_grade(3, student_id=1, schedule_id=102))


class TestViews:
    """Tests for the view filters built on ownership."""

    def test_grade_on_other_subgroup_lesson(self):
        """Member of A graded on a B lesson: only B's journal shows it."""
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        grade = _grade(1, student_id=1, schedule_id=102)

        assert filter_grades_for_view([grade], scope, GROUP_A) == []
        assert filter_grades_for_view([grade], scope, None) == []
        assert filter_grades_for_view([grade], scope, GROUP_B) == [grade]

    def test_partition_with_one_subgroup(self):
        """Every grade of the subject lands in exactly one view."""
        schedules = SCHEDULES[:2]
        memberships = [SubgroupMembership(student_id=1, subgroup_id=GROUP_A)]
        scope = SubgroupScope(SUBJECT, schedules, memberships)
        grades = [
            _grade(1, student_id=1, schedule_id=101),
            _grade(2, student_id=2, schedule_id=101),
            _grade(3, student_id=1, schedule_id=100),
            _grade(4, student_id=2, schedule_id=100, subgroup_id=GROUP_A),
            _grade(5, student_id=1),
            _grade(6, student_id=2),
            _grade(7, student_id=2, subgroup_id=99),
            _grade(8, student_id=1, subgroup_id=GROUP_A),
            _grade(9, student_id=2, schedule_id=555),
        ]

        subgroup_view = {g.id for g in filter_grades_for_view(grades, scope, GROUP_A)}
        main_view = {g.id for g in filter_grades_for_view(grades, scope, None)}

        assert subgroup_view.isdisjoint(main_view)
        assert subgroup_view | main_view == {g.id for g in grades}
        assert subgroup_view == {1, 2, 4, 5, 8}

    def test_partition_grades_ignores_other_subjects(self):
        scope = SubgroupScope(SUBJECT, SCHEDULES, MEMBERSHIPS)
        grades = [_grade(1, student_id=1), _grade(2, student_id=3), _grade(3, student_id=3, subject_id=2)]
        views = partition_grades(grades, scope)
        assert {k: [g.id for g in v] for k, v in views.items()} == {GROUP_A: [1], None: [2]}

    def test_students_for_view(self):
        """Main view lists everyone, a subgroup view only its members."""
        assert filter_students_for_view([1, 2, 3], MEMBERSHIPS) == [1, 2, 3]
        assert filter_students_for_view([1, 2, 3], MEMBERSHIPS, GROUP_B) == [2]
