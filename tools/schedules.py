"""
Lesson status tools.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from database import Schedule
from performance import ScheduleStatus, check_status_transition
from .authorization import AuthorizationService
from .data_store import to_schedule_record
from .exceptions import LessonNotFinishedError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def update_schedule_status(
    db: Session,
    requester_id: int,
    schedule_id: int,
    status: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Move a lesson between not_conducted and conducted.

    AUTHORIZATION: Teacher only.

    Args:
        db: Database session
        requester_id: ID of the requesting teacher
        schedule_id: Lesson to update
        status: 'conducted' or 'not_conducted'
        now: Current local time (defaults to datetime.now())

    Raises:
        TeacherOnlyError: If requester is not a teacher
        NotFoundError: If the lesson does not exist
        ValidationError: If status is not a known value
        LessonNotFinishedError: If marking conducted before the lesson ends
    """
    AuthorizationService(db).enforce_teacher_only(requester_id, "update_schedule_status")

    try:
        new_status = ScheduleStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in ScheduleStatus)
        raise ValidationError(f"Invalid status '{status}'. Valid values: {valid}", "status")

    schedule = db.query(Schedule).filter(Schedule.id == schedule_id).first()
    if not schedule:
        raise NotFoundError("Schedule", schedule_id)

    blocking_end = check_status_transition(to_schedule_record(schedule), new_status, now or datetime.now())
    if blocking_end is not None:
        raise LessonNotFinishedError(schedule_id, blocking_end)

    previous = schedule.status
    schedule.status = new_status.value
    db.commit()
    db.refresh(schedule)

    logger.info("Schedule %s status %s -> %s", schedule_id, previous, schedule.status)

    return {
        "success": True,
        "message": f"Schedule status set to {schedule.status}",
        "schedule": {
            "id": schedule.id,
            "class_id": schedule.class_id,
            "subject_id": schedule.subject_id,
            "subgroup_id": schedule.subgroup_id,
            "schedule_date": schedule.schedule_date.isoformat() if schedule.schedule_date else None,
            "start_time": schedule.start_time,
            "end_time": schedule.end_time,
            "status": schedule.status,
        },
    }
