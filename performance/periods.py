"""
Academic periods: date windows used to restrict aggregation.

The academic year starts on September 1st. Quarters and semesters follow the
default school calendar unless a class defines its own boundaries.
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

PERIOD_KEYS = (
    "quarter1", "quarter2", "quarter3", "quarter4",
    "semester1", "semester2", "year",
)

# key -> ((year offset, month, day) start, (year offset, month, day) end, label)
_DEFAULT_CALENDAR = {
    "quarter1": ((0, 9, 1), (0, 10, 31), "1st quarter"),
    "quarter2": ((0, 11, 1), (0, 12, 31), "2nd quarter"),
    "quarter3": ((1, 1, 1), (1, 3, 31), "3rd quarter"),
    "quarter4": ((1, 4, 1), (1, 6, 30), "4th quarter"),
    "semester1": ((0, 9, 1), (0, 12, 31), "1st semester"),
    "semester2": ((1, 1, 1), (1, 6, 30), "2nd semester"),
    "year": ((0, 9, 1), (1, 6, 30), "Academic year"),
}


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive date range of an academic period."""
    key: str
    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class PeriodBoundary:
    """Class-specific override for one period."""
    period_key: str
    start_date: date
    end_date: date
    academic_year: int
    period_name: str = ""


def academic_year_of(day: date) -> int:
    """First calendar year of the academic year containing `day`."""
    return day.year if day.month >= 9 else day.year - 1


def current_period(day: date) -> str:
    """Quarter a date falls into; the summer break maps to quarter4."""
    month = day.month
    if month in (9, 10):
        return "quarter1"
    if month in (11, 12):
        return "quarter2"
    if month in (1, 2, 3):
        return "quarter3"
    return "quarter4"


def period_window(
    period: str,
    reference_date: date,
    boundaries: Iterable[PeriodBoundary] = (),
) -> PeriodWindow:
    """
    Date window of a period in the academic year of reference_date.

    Raises:
        ValueError: If period is not a known key
    """
    if period not in _DEFAULT_CALENDAR:
        raise ValueError(f"Unknown academic period '{period}'")

    academic_year = academic_year_of(reference_date)
    start_point, end_point, label = _DEFAULT_CALENDAR[period]

    for boundary in boundaries:
        if boundary.period_key == period and boundary.academic_year == academic_year:
            return PeriodWindow(
                key=period,
                start=boundary.start_date,
                end=boundary.end_date,
                label=boundary.period_name or label,
            )

    def _resolve(point: Tuple[int, int, int]) -> date:
        offset, month, day_of_month = point
        return date(academic_year + offset, month, day_of_month)

    if period == "year":
        label = f"{label} {academic_year}-{academic_year + 1}"

    return PeriodWindow(key=period, start=_resolve(start_point), end=_resolve(end_point), label=label)


def resolve_window(
    from_date: Optional[date],
    to_date: Optional[date],
    period: Optional[str],
    reference_date: date,
    boundaries: Iterable[PeriodBoundary] = (),
) -> Optional[Tuple[date, date]]:
    """
    Explicit from/to wins over a named period; None means no window.
    A single explicit bound leaves the other side open.
    """
    if from_date or to_date:
        return from_date or date.min, to_date or date.max
    if period:
        window = period_window(period, reference_date, boundaries)
        return window.start, window.end
    return None
