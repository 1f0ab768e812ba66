"""
Average / percentage calculators for the two grading models.

FIVE_POINT: weighted arithmetic mean of 1..5 grades, weight by grade type.
CUMULATIVE: points earned over points possible, shown as a percentage.

Both take already scoped and eligible grades and return a PerformanceResult
with one-decimal strings, so the journal, the reports and the API all render
the same numbers.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Mapping, Optional, Tuple

from .eligibility import AssignmentIndex, resolve_assignment
from .entities import (
    GradeRecord,
    GradingSystem,
    PerformanceResult,
    PLACEHOLDER,
    is_finite_number,
)

logger = logging.getLogger(__name__)


# Grade type labels are an opaque lookup: localized aliases share weights
FIVE_POINT_WEIGHTS: Dict[str, float] = {
    "test": 2,
    "exam": 3,
    "homework": 1,
    "project": 2,
    "classwork": 1,
    "Текущая": 1,
    "Контрольная": 2,
    "Экзамен": 3,
    "Практическая": 1.5,
    "Домашняя": 1,
}
DEFAULT_WEIGHT = 1

FIVE_POINT_MIN = 1
FIVE_POINT_MAX = 5

VIRTUAL_MAX_SCORE = 10.0

EMPTY_CUMULATIVE = PerformanceResult(average="0", percentage="0%")


def format_one_decimal(value: float) -> str:
    """Render with one decimal, rounding half away from zero."""
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_percentage(value: float) -> str:
    return f"{format_one_decimal(value)}%"


class FivePointCalculator:
    """Type-weighted mean over a 1..5 scale."""

    grading_system = GradingSystem.FIVE_POINT

    def __init__(self, weights: Optional[Mapping[str, float]] = None):
        self.weights = dict(FIVE_POINT_WEIGHTS if weights is None else weights)

    def weight_for(self, grade_type: Optional[str]) -> float:
        return self.weights.get(grade_type, DEFAULT_WEIGHT)

    def calculate(
        self,
        grades: Iterable[GradeRecord],
        index: Optional[AssignmentIndex] = None,
    ) -> PerformanceResult:
        weighted_sum = 0.0
        total_weight = 0.0

        for grade in grades:
            if not is_finite_number(grade.grade) or not FIVE_POINT_MIN <= grade.grade <= FIVE_POINT_MAX:
                logger.warning("Five-point grade %s has value %r, skipped", grade.id, grade.grade)
                continue
            weight = self.weight_for(grade.grade_type)
            weighted_sum += grade.grade * weight
            total_weight += weight

        if total_weight == 0:
            return PLACEHOLDER

        return PerformanceResult(
            average=format_one_decimal(weighted_sum / total_weight),
            percentage="-",
        )


class CumulativeCalculator:
    """
    Points-to-percentage.

    Each grade contributes (earned, max). A grade on a lesson with
    assignments is scored against the matching assignment (or the lesson's
    first one); any other grade is scored against a virtual maximum.

    high_score_correction reproduces a display rule of the journal: when at
    least 9 points were earned out of at most 10, the percentage shown is
    90 + (earned - 9) * 10 instead of the raw ratio. The result is capped at
    100 either way.
    """

    grading_system = GradingSystem.CUMULATIVE

    def __init__(
        self,
        high_score_correction: bool = True,
        virtual_max_score: float = VIRTUAL_MAX_SCORE,
    ):
        self.high_score_correction = high_score_correction
        self.virtual_max_score = virtual_max_score

    def points_for(self, grade: GradeRecord, index: AssignmentIndex) -> Tuple[float, float]:
        if grade.schedule_id is not None:
            assignment = resolve_assignment(grade, index)
            if assignment is not None:
                max_score = assignment.max_score
                if is_finite_number(max_score) and max_score > 0:
                    return grade.grade, float(max_score)
                logger.warning(
                    "Assignment %s has max score %r, using virtual maximum",
                    assignment.id, max_score,
                )
        return grade.grade, self.virtual_max_score

    def totals(self, grades: Iterable[GradeRecord], index: AssignmentIndex) -> Tuple[float, float]:
        earned_total = 0.0
        max_total = 0.0
        for grade in grades:
            if not is_finite_number(grade.grade) or grade.grade < 0:
                logger.warning("Cumulative grade %s has value %r, skipped", grade.id, grade.grade)
                continue
            earned, possible = self.points_for(grade, index)
            earned_total += earned
            max_total += possible
        return earned_total, max_total

    def calculate(
        self,
        grades: Iterable[GradeRecord],
        index: Optional[AssignmentIndex] = None,
    ) -> PerformanceResult:
        earned, possible = self.totals(grades, index or AssignmentIndex(()))
        if possible == 0:
            return EMPTY_CUMULATIVE

        percentage = min(100.0, earned / possible * 100)
        if self.high_score_correction and earned >= 9 and possible <= 10:
            percentage = 90.0 + (earned - 9) * 10
        percentage = max(0.0, min(100.0, percentage))

        return PerformanceResult(
            average=format_one_decimal(earned),
            percentage=format_percentage(percentage),
        )


def get_calculator(
    grading_system: GradingSystem,
    high_score_correction: bool = True,
    virtual_max_score: float = VIRTUAL_MAX_SCORE,
):
    """Pick the strategy for a class's grading system."""
    if grading_system == GradingSystem.CUMULATIVE:
        return CumulativeCalculator(
            high_score_correction=high_score_correction,
            virtual_max_score=virtual_max_score,
        )
    if grading_system == GradingSystem.FIVE_POINT:
        return FivePointCalculator()
    raise ValueError(f"Unknown grading system: {grading_system!r}")
