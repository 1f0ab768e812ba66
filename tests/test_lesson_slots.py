"""
Tests for lesson slot resolution.
"""
from datetime import date

from performance import AssignmentRecord, ScheduleRecord, ScheduleStatus, resolve_lesson_slots


def _schedule(id, day, start=None, subject_id=1, class_id=1, subgroup_id=None):
    return ScheduleRecord(
        id=id,
        class_id=class_id,
        subject_id=subject_id,
        schedule_date=day,
        start_time=start,
        end_time=None,
        subgroup_id=subgroup_id,
    )


class TestLessonSlots:
    """Tests for resolve_lesson_slots."""

    def test_sorted_by_date_then_start_time(self):
        """Slots come out by date, then by start time."""
        schedules = [
            _schedule(1, date(2024, 3, 2), "10:00"),
            _schedule(2, date(2024, 3, 1), "12:00"),
            _schedule(3, date(2024, 3, 1), "08:30"),
            _schedule(4, date(2024, 2, 28), "09:00"),
        ]
        slots = resolve_lesson_slots(1, schedules, [])
        assert [s.schedule_id for s in slots] == [4, 3, 2, 1]

    def test_missing_start_time_keeps_input_order(self):
        """Same day without start times keeps the order given."""
        schedules = [
            _schedule(7, date(2024, 3, 1)),
            _schedule(5, date(2024, 3, 1)),
        ]
        slots = resolve_lesson_slots(1, schedules, [])
        assert [s.schedule_id for s in slots] == [7, 5]
        assert slots[0].start_time == ""

    def test_filters_subject_and_dateless(self):
        """Other subjects and lessons without a date are left out."""
        schedules = [
            _schedule(1, date(2024, 3, 1), subject_id=2),
            _schedule(2, None),
            _schedule(3, date(2024, 3, 1)),
        ]
        slots = resolve_lesson_slots(1, schedules, [])
        assert [s.schedule_id for s in slots] == [3]

    def test_class_and_subgroup_filters(self):
        """Optional class and subgroup restrictions."""
        schedules = [
            _schedule(1, date(2024, 3, 1), class_id=1),
            _schedule(2, date(2024, 3, 2), class_id=2),
            _schedule(3, date(2024, 3, 3), class_id=1, subgroup_id=9),
        ]
        assert [s.schedule_id for s in resolve_lesson_slots(1, schedules, [], class_id=1)] == [1, 3]
        assert [s.schedule_id for s in resolve_lesson_slots(1, schedules, [], subgroup_id=9)] == [3]

    def test_assignments_attached_by_schedule(self):
        """Assignments attach to their lesson regardless of their own subgroup."""
        schedules = [_schedule(1, date(2024, 3, 1), "09:00")]
        assignments = [
            AssignmentRecord(id=10, schedule_id=1, subject_id=1, class_id=1, max_score=10),
            AssignmentRecord(id=11, schedule_id=1, subject_id=1, class_id=1, max_score=5, subgroup_id=4),
            AssignmentRecord(id=12, schedule_id=2, subject_id=1, class_id=1, max_score=5),
        ]
        slots = resolve_lesson_slots(1, schedules, assignments)
        assert [a.id for a in slots[0].assignments] == [10, 11]
        assert slots[0].status == ScheduleStatus.NOT_CONDUCTED
