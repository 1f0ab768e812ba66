"""
Subgroup scoping: which journal a grade belongs to.

When a subject is split into subgroups, each grade of that subject must be
shown in exactly one journal: one subgroup's, or the main class journal.
Ownership is decided once per grade, in this order:

1. a lesson that belongs to a subgroup owns its grades outright;
2. a subgroup tag on the grade, if it names one of the subject's subgroups;
3. an unscheduled grade of a subgroup member goes to that member's subgroup
   (lowest id when the student is in several);
4. everything else stays in the main journal.

The views below are all derived from `SubgroupScope.owner`, so the
partition holds by construction.
"""
import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Optional

from .entities import (
    AssignmentLinked,
    AssignmentRecord,
    GradeRecord,
    ScheduleLinked,
    ScheduleRecord,
    SubgroupMembership,
)

logger = logging.getLogger(__name__)

MAIN_JOURNAL = None


class SubgroupScope:
    """
    Subgroup structure of one subject.

    A subgroup is known for the subject when one of the subject's lessons or
    assignments references it, or when the caller names it explicitly.

    Attributes:
        subject_id: Subject being scoped
        schedules_by_id: The subject's lessons
        subgroup_ids: Subgroups known for this subject
    """

    def __init__(
        self,
        subject_id: int,
        schedules: Iterable[ScheduleRecord],
        memberships: Iterable[SubgroupMembership],
        assignments: Iterable[AssignmentRecord] = (),
        extra_subgroup_ids: Iterable[int] = (),
    ):
        self.subject_id = subject_id
        self.schedules_by_id: Dict[int, ScheduleRecord] = {
            s.id: s for s in schedules if s.subject_id == subject_id
        }

        known = {s.subgroup_id for s in self.schedules_by_id.values() if s.subgroup_id is not None}
        known.update(
            a.subgroup_id for a in assignments
            if a.subject_id == subject_id and a.subgroup_id is not None
        )
        known.update(extra_subgroup_ids)
        self.subgroup_ids: FrozenSet[int] = frozenset(known)

        student_subgroups = defaultdict(set)
        for membership in memberships:
            if membership.subgroup_id in self.subgroup_ids:
                student_subgroups[membership.student_id].add(membership.subgroup_id)
        self._student_subgroups = {k: frozenset(v) for k, v in student_subgroups.items()}

    @property
    def is_split(self) -> bool:
        return bool(self.subgroup_ids)

    def subgroups_of(self, student_id: int) -> FrozenSet[int]:
        """The subject's subgroups this student belongs to."""
        return self._student_subgroups.get(student_id, frozenset())

    def is_member(self, student_id: int, subgroup_id: int) -> bool:
        return subgroup_id in self.subgroups_of(student_id)

    def owner(self, grade: GradeRecord) -> Optional[int]:
        """
        The journal a grade belongs to.

        Returns:
            Subgroup id, or None for the main journal
        """
        linkage = grade.linkage
        if isinstance(linkage, (ScheduleLinked, AssignmentLinked)):
            schedule = self.schedules_by_id.get(linkage.schedule_id)
            if schedule is not None and schedule.subgroup_id is not None:
                return schedule.subgroup_id

        if grade.subgroup_id is not None:
            if grade.subgroup_id in self.subgroup_ids:
                return grade.subgroup_id
            logger.debug(
                "Grade %s tagged with subgroup %s outside subject %s, tag ignored",
                grade.id, grade.subgroup_id, self.subject_id,
            )

        if grade.schedule_id is None:
            own = self.subgroups_of(grade.student_id)
            if own:
                return min(own)

        return MAIN_JOURNAL

    def belongs_to_view(self, grade: GradeRecord, subgroup_id: Optional[int] = None) -> bool:
        return self.owner(grade) == subgroup_id

    def visible_to_student(self, grade: GradeRecord) -> bool:
        """Main-journal grades, or grades of a subgroup the student is in."""
        owner = self.owner(grade)
        return owner is MAIN_JOURNAL or self.is_member(grade.student_id, owner)


def filter_grades_for_view(
    grades: Iterable[GradeRecord],
    scope: SubgroupScope,
    subgroup_id: Optional[int] = None,
) -> List[GradeRecord]:
    """Grades shown in one journal view (subgroup_id None is the main view)."""
    return [
        g for g in grades
        if g.subject_id == scope.subject_id and scope.belongs_to_view(g, subgroup_id)
    ]


def partition_grades(
    grades: Iterable[GradeRecord],
    scope: SubgroupScope,
) -> Dict[Optional[int], List[GradeRecord]]:
    """Split a subject's grades by owning journal."""
    views: Dict[Optional[int], List[GradeRecord]] = defaultdict(list)
    for grade in grades:
        if grade.subject_id != scope.subject_id:
            continue
        views[scope.owner(grade)].append(grade)
    return dict(views)


def filter_students_for_view(
    student_ids: Iterable[int],
    memberships: Iterable[SubgroupMembership],
    subgroup_id: Optional[int] = None,
) -> List[int]:
    """Roster of a view: every student for the main view, members otherwise."""
    if subgroup_id is None:
        return list(student_ids)
    members = {m.student_id for m in memberships if m.subgroup_id == subgroup_id}
    return [sid for sid in student_ids if sid in members]


def grade_owner(grade: GradeRecord, scope: SubgroupScope) -> Optional[int]:
    """Owning journal of a grade: a subgroup id, or None for the main journal."""
    return scope.owner(grade)
