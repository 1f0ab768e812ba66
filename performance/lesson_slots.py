"""
Lesson slot resolution: the ordered columns of a subject journal.
"""
import logging
from collections import defaultdict
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional

from .entities import AssignmentRecord, LessonSlot, ScheduleRecord, ScheduleStatus

logger = logging.getLogger(__name__)


def _compare_schedules(a: ScheduleRecord, b: ScheduleRecord) -> int:
    if a.schedule_date != b.schedule_date:
        return -1 if a.schedule_date < b.schedule_date else 1
    # "HH:MM" sorts correctly as a string; a missing start keeps input order
    if a.start_time and b.start_time and a.start_time != b.start_time:
        return -1 if a.start_time < b.start_time else 1
    return 0


def group_assignments_by_schedule(
    assignments: Iterable[AssignmentRecord],
) -> Dict[int, List[AssignmentRecord]]:
    """Index assignments by the lesson they belong to, keeping input order."""
    by_schedule: Dict[int, List[AssignmentRecord]] = defaultdict(list)
    for assignment in assignments:
        by_schedule[assignment.schedule_id].append(assignment)
    return by_schedule


def resolve_lesson_slots(
    subject_id: int,
    schedules: Iterable[ScheduleRecord],
    assignments: Iterable[AssignmentRecord],
    class_id: Optional[int] = None,
    subgroup_id: Optional[int] = None,
) -> List[LessonSlot]:
    """
    Build the ordered lesson slots for a subject.

    Args:
        subject_id: Subject whose lessons are wanted
        schedules: Candidate lessons (any subject)
        assignments: Candidate assignments; attached by schedule id only
        class_id: Restrict to one class (optional)
        subgroup_id: Restrict to one subgroup's lessons (optional)

    Returns:
        Slots sorted by date, then start time
    """
    kept = []
    for schedule in schedules:
        if schedule.subject_id != subject_id:
            continue
        if class_id is not None and schedule.class_id != class_id:
            continue
        if subgroup_id is not None and schedule.subgroup_id != subgroup_id:
            continue
        if schedule.schedule_date is None:
            logger.debug("Schedule %s has no date, left out of lesson slots", schedule.id)
            continue
        kept.append(schedule)

    kept.sort(key=cmp_to_key(_compare_schedules))
    by_schedule = group_assignments_by_schedule(assignments)

    return [
        LessonSlot(
            date=s.schedule_date,
            schedule_id=s.id,
            start_time=s.start_time or "",
            end_time=s.end_time or "",
            status=s.status or ScheduleStatus.NOT_CONDUCTED,
            assignments=tuple(by_schedule.get(s.id, ())),
        )
        for s in kept
    ]
