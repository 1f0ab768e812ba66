"""
Write-time checks: duplicate grades and the lesson status gate.
"""
from datetime import datetime, time
from typing import Iterable, Optional

from .entities import GradeRecord, ScheduleRecord, ScheduleStatus, parse_time


def find_duplicate_grade(
    student_id: int,
    assignment_id: Optional[int],
    schedule: Optional[ScheduleRecord],
    existing_grades: Iterable[GradeRecord],
) -> Optional[GradeRecord]:
    """
    Return the grade that already occupies (student, assignment), if any.

    Only applies once the lesson is conducted; before that the same
    assignment may collect several provisional scores.
    """
    if assignment_id is None or schedule is None or not schedule.is_conducted:
        return None
    for grade in existing_grades:
        if grade.student_id == student_id and grade.assignment_id == assignment_id:
            return grade
    return None


def lesson_end(schedule: ScheduleRecord) -> Optional[datetime]:
    """End of the lesson as a naive local datetime; end of day if no end time."""
    if schedule.schedule_date is None:
        return None
    parsed = parse_time(schedule.end_time)
    end = time(parsed[0], parsed[1]) if parsed else time.max
    return datetime.combine(schedule.schedule_date, end)


def can_mark_conducted(schedule: ScheduleRecord, now: datetime) -> bool:
    """
    A lesson held today may be marked conducted once it has ended.

    Lessons on any other date are not time-gated.
    """
    if schedule.schedule_date != now.date():
        return True
    end = lesson_end(schedule)
    return end is None or now >= end


def check_status_transition(
    schedule: ScheduleRecord,
    new_status: ScheduleStatus,
    now: datetime,
) -> Optional[datetime]:
    """
    Validate a status change.

    Returns:
        None when allowed, otherwise the lesson end that has not passed yet
    """
    if new_status == ScheduleStatus.CONDUCTED and not can_mark_conducted(schedule, now):
        return lesson_end(schedule)
    return None
