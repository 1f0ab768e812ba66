"""
Aggregation orchestrator.

Composes lesson scoping, eligibility and the grading-system calculator into
per-student, per-subject and overall results:

    {student_id: {subject_id: {"average": ..., "percentage": ...},
                  "overall":  {"average": ..., "percentage": ...}}}

This is the single place averages are computed; the journal, the reports and
the API all go through it.
"""
import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .calculator import VIRTUAL_MAX_SCORE, get_calculator
from .eligibility import AssignmentIndex, filter_eligible
from .entities import (
    GradeRecord,
    PerformanceResult,
    PerformanceSnapshot,
    PLACEHOLDER,
    is_finite_number,
    is_valid_id,
)
from .scoping import SubgroupScope, filter_grades_for_view

logger = logging.getLogger(__name__)

OVERALL = "overall"

DateWindow = Tuple[date, date]
StudentPerformance = Dict[Union[int, str], Dict[str, str]]


def is_well_formed(grade: GradeRecord) -> bool:
    """Identifiers present and grade numeric; anything else is skipped."""
    return (
        is_valid_id(grade.student_id)
        and is_valid_id(grade.subject_id)
        and is_finite_number(grade.grade)
    )


def in_window(grade: GradeRecord, window: Optional[DateWindow]) -> bool:
    """Grades without a creation date are never filtered out."""
    if window is None or grade.created_at is None:
        return True
    created = grade.created_at.date() if isinstance(grade.created_at, datetime) else grade.created_at
    start, end = window
    return start <= created <= end


class PerformanceEngine:
    """
    Performance computation over one class snapshot.

    The engine keeps no state between calls beyond the indexes it derives
    from the snapshot, so calling any method twice gives the same answer.
    """

    def __init__(
        self,
        snapshot: PerformanceSnapshot,
        high_score_correction: bool = True,
        virtual_max_score: float = VIRTUAL_MAX_SCORE,
    ):
        self.snapshot = snapshot
        self.calculator = get_calculator(
            snapshot.grading_system,
            high_score_correction=high_score_correction,
            virtual_max_score=virtual_max_score,
        )
        self.index = AssignmentIndex(snapshot.assignments)
        self.schedules_by_id = {s.id: s for s in snapshot.schedules}
        self._scopes: Dict[Tuple[int, Optional[int]], SubgroupScope] = {}

    def scope_for(self, subject_id: int, subgroup_id: Optional[int] = None) -> SubgroupScope:
        """
        Subgroup scope of a subject, as seen from one journal view.

        A subgroup view always counts its own subgroup as one of the
        subject's, even before any of the subject's lessons reference it.
        """
        key = (subject_id, subgroup_id)
        scope = self._scopes.get(key)
        if scope is None:
            scope = SubgroupScope(
                subject_id,
                self.snapshot.schedules,
                self.snapshot.memberships,
                assignments=self.snapshot.assignments,
                extra_subgroup_ids=() if subgroup_id is None else (subgroup_id,),
            )
            self._scopes[key] = scope
        return scope

    def usable_grades(self, window: Optional[DateWindow] = None) -> List[GradeRecord]:
        usable = []
        for grade in self.snapshot.grades:
            if not is_well_formed(grade):
                logger.warning("Skipping malformed grade record %r", grade)
                continue
            if in_window(grade, window):
                usable.append(grade)
        return usable

    def evaluate(self, grades: Iterable[GradeRecord]) -> PerformanceResult:
        """Eligibility filter then calculator."""
        eligible = filter_eligible(grades, self.index, self.schedules_by_id)
        return self.calculator.calculate(eligible, self.index)

    def aggregate(self, window: Optional[DateWindow] = None) -> Dict[int, StudentPerformance]:
        """Per-student, per-subject and overall results for the snapshot's students."""
        by_student: Dict[int, List[GradeRecord]] = defaultdict(list)
        for grade in self.usable_grades(window):
            by_student[grade.student_id].append(grade)

        result: Dict[int, StudentPerformance] = {}
        for student_id in self.snapshot.student_ids:
            if not is_valid_id(student_id):
                logger.warning("Skipping invalid student id %r", student_id)
                continue

            entry: StudentPerformance = {}
            counted: List[GradeRecord] = []
            student_grades = by_student.get(student_id, [])

            for subject_id in sorted({g.subject_id for g in student_grades}):
                scope = self.scope_for(subject_id)
                visible = [
                    g for g in student_grades
                    if g.subject_id == subject_id and scope.visible_to_student(g)
                ]
                if not visible:
                    continue
                eligible = filter_eligible(visible, self.index, self.schedules_by_id)
                entry[subject_id] = self.calculator.calculate(eligible, self.index).to_dict()
                counted.extend(eligible)

            if entry:
                entry[OVERALL] = self.calculator.calculate(counted, self.index).to_dict()
            else:
                entry[OVERALL] = PLACEHOLDER.to_dict()
            result[student_id] = entry

        return result

    def subject_performance(
        self,
        student_id: int,
        subject_id: int,
        subgroup_id: Optional[int] = None,
        window: Optional[DateWindow] = None,
    ) -> PerformanceResult:
        """
        One student's result for one subject.

        With subgroup_id, only that subgroup journal's grades are used;
        otherwise every grade the student can see for the subject.
        """
        grades = [
            g for g in self.usable_grades(window)
            if g.student_id == student_id and g.subject_id == subject_id
        ]
        scope = self.scope_for(subject_id, subgroup_id)
        if subgroup_id is not None:
            grades = filter_grades_for_view(grades, scope, subgroup_id)
        else:
            grades = [g for g in grades if scope.visible_to_student(g)]

        if not grades:
            return PLACEHOLDER
        return self.evaluate(grades)

    def view_performance(
        self,
        subject_id: int,
        subgroup_id: Optional[int] = None,
        window: Optional[DateWindow] = None,
    ) -> Dict[int, PerformanceResult]:
        """Results of every student in one journal view."""
        scope = self.scope_for(subject_id, subgroup_id)
        view = filter_grades_for_view(self.usable_grades(window), scope, subgroup_id)

        by_student: Dict[int, List[GradeRecord]] = defaultdict(list)
        for grade in view:
            by_student[grade.student_id].append(grade)

        return {
            student_id: self.evaluate(by_student[student_id]) if by_student.get(student_id) else PLACEHOLDER
            for student_id in self.snapshot.student_ids
        }


def aggregate_performance(
    snapshot: PerformanceSnapshot,
    window: Optional[DateWindow] = None,
    high_score_correction: bool = True,
    virtual_max_score: float = VIRTUAL_MAX_SCORE,
) -> Dict[int, StudentPerformance]:
    """Shortcut for PerformanceEngine(snapshot).aggregate(window)."""
    engine = PerformanceEngine(
        snapshot,
        high_score_correction=high_score_correction,
        virtual_max_score=virtual_max_score,
    )
    return engine.aggregate(window)


def compute_subject_performance(
    snapshot: PerformanceSnapshot,
    student_id: int,
    subject_id: int,
    subgroup_id: Optional[int] = None,
    window: Optional[DateWindow] = None,
    high_score_correction: bool = True,
    virtual_max_score: float = VIRTUAL_MAX_SCORE,
) -> PerformanceResult:
    """Shortcut for PerformanceEngine(snapshot).subject_performance(...)."""
    engine = PerformanceEngine(
        snapshot,
        high_score_correction=high_score_correction,
        virtual_max_score=virtual_max_score,
    )
    return engine.subject_performance(student_id, subject_id, subgroup_id=subgroup_id, window=window)
