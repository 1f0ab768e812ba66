"""
Grade eligibility for aggregates.

Teachers may stage assignments ahead of a lesson ("planned"). Scores entered
against them are displayed but do not count until the lesson is conducted.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .entities import AssignmentRecord, GradeRecord, ScheduleRecord

logger = logging.getLogger(__name__)


class AssignmentIndex:
    """Assignments looked up by id and by lesson."""

    def __init__(self, assignments: Iterable[AssignmentRecord]):
        self.by_id: Dict[int, AssignmentRecord] = {}
        self.by_schedule: Dict[int, List[AssignmentRecord]] = {}
        for assignment in assignments:
            self.by_id[assignment.id] = assignment
            self.by_schedule.setdefault(assignment.schedule_id, []).append(assignment)

    def for_schedule(self, schedule_id: Optional[int]) -> Sequence[AssignmentRecord]:
        if schedule_id is None:
            return ()
        return self.by_schedule.get(schedule_id, ())


def resolve_assignment(grade: GradeRecord, index: AssignmentIndex) -> Optional[AssignmentRecord]:
    """
    The assignment a grade is scored against.

    On a lesson with assignments: the grade's own assignment when it is one
    of them, otherwise the lesson's first assignment. On a lesson without
    assignments: none. Off a lesson: the grade's assignment id, if it
    resolves.
    """
    on_lesson = index.for_schedule(grade.schedule_id)
    if on_lesson:
        if grade.assignment_id is not None:
            for assignment in on_lesson:
                if assignment.id == grade.assignment_id:
                    return assignment
        return on_lesson[0]
    if grade.schedule_id is None and grade.assignment_id is not None:
        return index.by_id.get(grade.assignment_id)
    return None


def is_grade_eligible(
    grade: GradeRecord,
    index: AssignmentIndex,
    schedules_by_id: Mapping[int, ScheduleRecord],
) -> bool:
    """
    Whether a grade may move an aggregate.

    Counts when there is no linked assignment, when the assignment is not
    planned, or when it is planned and its lesson has been conducted.
    """
    assignment = resolve_assignment(grade, index)
    if assignment is None:
        if grade.assignment_id is not None and grade.schedule_id is None:
            logger.warning(
                "Grade %s references unknown assignment %s, excluded from aggregates",
                grade.id, grade.assignment_id,
            )
            return False
        return True

    if not assignment.planned_for:
        return True

    schedule = schedules_by_id.get(assignment.schedule_id) or schedules_by_id.get(grade.schedule_id)
    if schedule is not None and schedule.is_conducted:
        return True

    logger.debug(
        "Grade %s on planned assignment %s not counted, lesson not conducted",
        grade.id, assignment.id,
    )
    return False


def filter_eligible(
    grades: Iterable[GradeRecord],
    index: AssignmentIndex,
    schedules_by_id: Mapping[int, ScheduleRecord],
) -> List[GradeRecord]:
    return [g for g in grades if is_grade_eligible(g, index, schedules_by_id)]
