"""
Snapshot records for the performance engine.

The engine never touches the database. Callers hand it immutable records
built from whatever store they use, and every component works on these.
"""
import math
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class GradingSystem(str, Enum):
    """Class-level grading model."""
    FIVE_POINT = "five_point"
    CUMULATIVE = "cumulative"


class ScheduleStatus(str, Enum):
    """Two-state lesson lifecycle."""
    NOT_CONDUCTED = "not_conducted"
    CONDUCTED = "conducted"


@dataclass(frozen=True)
class ScheduleRecord:
    """
    One lesson occurrence.

    Attributes:
        id: Schedule identifier
        class_id: Class the lesson is taught to
        subject_id: Subject of the lesson
        schedule_date: Calendar date, None when unknown
        start_time: "HH:MM" start, optional
        end_time: "HH:MM" end, optional
        status: conducted / not_conducted
        subgroup_id: Set when the lesson is for one subgroup only
    """
    id: int
    class_id: int
    subject_id: int
    schedule_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: ScheduleStatus = ScheduleStatus.NOT_CONDUCTED
    subgroup_id: Optional[int] = None

    @property
    def is_conducted(self) -> bool:
        return self.status == ScheduleStatus.CONDUCTED


@dataclass(frozen=True)
class AssignmentRecord:
    """An assignment scored against max_score (cumulative model only)."""
    id: int
    schedule_id: int
    subject_id: int
    class_id: int
    max_score: float
    assignment_type: str = ""
    planned_for: bool = False
    subgroup_id: Optional[int] = None


@dataclass(frozen=True)
class GradeRecord:
    """
    A single grade.

    schedule_id, assignment_id and subgroup_id are independent; none of
    them implies another. Use `linkage` for the combined view.
    """
    id: int
    student_id: int
    subject_id: int
    class_id: int
    grade: float
    grade_type: str = ""
    teacher_id: Optional[int] = None
    schedule_id: Optional[int] = None
    assignment_id: Optional[int] = None
    subgroup_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def linkage(self) -> "Linkage":
        return linkage_of(self)


@dataclass(frozen=True)
class SubgroupMembership:
    """A student belonging to a subgroup."""
    student_id: int
    subgroup_id: int


@dataclass(frozen=True)
class LessonSlot:
    """One ordered journal column: a lesson plus its assignments."""
    date: date
    schedule_id: int
    start_time: str
    end_time: str
    status: ScheduleStatus
    assignments: Tuple[AssignmentRecord, ...] = ()


@dataclass(frozen=True)
class PerformanceResult:
    """Rendered aggregate for one student (per subject or overall)."""
    average: str
    percentage: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


PLACEHOLDER = PerformanceResult(average="-", percentage="-")


@dataclass
class PerformanceSnapshot:
    """Everything the orchestrator needs for one class."""
    grading_system: GradingSystem
    student_ids: List[int]
    grades: List[GradeRecord] = field(default_factory=list)
    schedules: List[ScheduleRecord] = field(default_factory=list)
    assignments: List[AssignmentRecord] = field(default_factory=list)
    memberships: List[SubgroupMembership] = field(default_factory=list)


# --------------- Grade linkage ---------------

@dataclass(frozen=True)
class Unlinked:
    """No lesson, no subgroup tag."""


@dataclass(frozen=True)
class SubgroupTagged:
    """No lesson, but tagged with a subgroup."""
    subgroup_id: int


@dataclass(frozen=True)
class ScheduleLinked:
    """Tied to a lesson without a specific assignment."""
    schedule_id: int
    subgroup_id: Optional[int] = None


@dataclass(frozen=True)
class AssignmentLinked:
    """Tied to a lesson and one of its assignments."""
    schedule_id: int
    assignment_id: int
    subgroup_id: Optional[int] = None


Linkage = Union[Unlinked, SubgroupTagged, ScheduleLinked, AssignmentLinked]


def linkage_of(grade: GradeRecord) -> Linkage:
    """Classify a grade by its three optional foreign keys."""
    if grade.schedule_id is not None:
        if grade.assignment_id is not None:
            return AssignmentLinked(grade.schedule_id, grade.assignment_id, grade.subgroup_id)
        return ScheduleLinked(grade.schedule_id, grade.subgroup_id)
    if grade.subgroup_id is not None:
        return SubgroupTagged(grade.subgroup_id)
    return Unlinked()


# --------------- Defensive parsing ---------------

def is_valid_id(value: Any) -> bool:
    """Positive integer, booleans excluded."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_date(value: Any) -> Optional[date]:
    """Accept date, datetime or ISO string; anything else is None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value[:10]).date()
        except ValueError:
            return None
    return None


def parse_time(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse "HH:MM" (seconds ignored) into (hours, minutes)."""
    if not value:
        return None
    parts = value.split(":")
    try:
        hours, minutes = int(parts[0]), int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        return None
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return hours, minutes
