"""
Academic performance engine.

Pure computation over snapshots of grades, lessons, assignments and subgroup
memberships. No database access happens here.
"""
from .entities import (
    GradingSystem,
    ScheduleStatus,
    ScheduleRecord,
    AssignmentRecord,
    GradeRecord,
    SubgroupMembership,
    LessonSlot,
    PerformanceResult,
    PerformanceSnapshot,
    PLACEHOLDER,
    Unlinked,
    SubgroupTagged,
    ScheduleLinked,
    AssignmentLinked,
    linkage_of,
)
from .lesson_slots import resolve_lesson_slots
from .scoping import (
    SubgroupScope,
    filter_grades_for_view,
    partition_grades,
    filter_students_for_view,
    grade_owner,
)
from .eligibility import AssignmentIndex, resolve_assignment, is_grade_eligible, filter_eligible
from .calculator import (
    FivePointCalculator,
    CumulativeCalculator,
    get_calculator,
    format_one_decimal,
    FIVE_POINT_WEIGHTS,
)
from .aggregation import OVERALL, PerformanceEngine, aggregate_performance, compute_subject_performance
from .guards import find_duplicate_grade, check_status_transition, lesson_end
from .periods import PeriodBoundary, PeriodWindow, period_window, current_period, resolve_window

__all__ = [
    # Entities
    "GradingSystem",
    "ScheduleStatus",
    "ScheduleRecord",
    "AssignmentRecord",
    "GradeRecord",
    "SubgroupMembership",
    "LessonSlot",
    "PerformanceResult",
    "PerformanceSnapshot",
    "PLACEHOLDER",
    "Unlinked",
    "SubgroupTagged",
    "ScheduleLinked",
    "AssignmentLinked",
    "linkage_of",
    # Lesson slots
    "resolve_lesson_slots",
    # Scoping
    "SubgroupScope",
    "filter_grades_for_view",
    "partition_grades",
    "filter_students_for_view",
    "grade_owner",
    # Eligibility
    "AssignmentIndex",
    "resolve_assignment",
    "is_grade_eligible",
    "filter_eligible",
    # Calculators
    "FivePointCalculator",
    "CumulativeCalculator",
    "get_calculator",
    "format_one_decimal",
    "FIVE_POINT_WEIGHTS",
    # Orchestrator
    "OVERALL",
    "PerformanceEngine",
    "aggregate_performance",
    "compute_subject_performance",
    # Write-time guards
    "find_duplicate_grade",
    "check_status_transition",
    "lesson_end",
    # Periods
    "PeriodBoundary",
    "PeriodWindow",
    "period_window",
    "current_period",
    "resolve_window",
]
