"""
Pydantic schemas for API requests and responses.
"""
from datetime import date, datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field

from performance import (
    AssignmentRecord,
    GradeRecord,
    GradingSystem,
    PerformanceSnapshot,
    ScheduleRecord,
    ScheduleStatus,
    SubgroupMembership,
)


# Request schemas
class CreateGradeRequest(BaseModel):
    """Request to record a grade."""
    teacher_id: int = Field(..., gt=0, description="ID of the teacher recording the grade")
    student_id: int = Field(..., gt=0, description="ID of the student")
    subject_id: int = Field(..., gt=0, description="ID of the subject")
    class_id: int = Field(..., gt=0, description="ID of the class")
    grade: float = Field(..., description="Grade value (1-5 or points, depending on the class)")
    grade_type: str = Field("classwork", description="Grade type, determines the five-point weight")
    comment: Optional[str] = Field(None, description="Teacher's comment")
    schedule_id: Optional[int] = Field(None, gt=0, description="Lesson the grade was given in")
    assignment_id: Optional[int] = Field(None, gt=0, description="Assignment the grade scores")
    subgroup_id: Optional[int] = Field(None, gt=0, description="Subgroup tag")


class UpdateGradeRequest(BaseModel):
    """Request to update a grade."""
    teacher_id: int = Field(..., gt=0, description="ID of the teacher")
    grade: Optional[float] = Field(None, description="New grade value")
    comment: Optional[str] = Field(None, description="New comment")
    grade_type: Optional[str] = Field(None, description="New grade type")


class ScheduleStatusRequest(BaseModel):
    """Request to change a lesson's status."""
    requester_id: int = Field(..., gt=0, description="ID of the requesting teacher")
    status: str = Field(..., description="'conducted' or 'not_conducted'")


class GradeIn(BaseModel):
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


class ScheduleIn(BaseModel):
    id: int
    class_id: int
    subject_id: int
    schedule_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: ScheduleStatus = ScheduleStatus.NOT_CONDUCTED
    subgroup_id: Optional[int] = None


class AssignmentIn(BaseModel):
    id: int
    schedule_id: int
    subject_id: int
    class_id: int
    max_score: float
    assignment_type: str = ""
    planned_for: bool = False
    subgroup_id: Optional[int] = None


class MembershipIn(BaseModel):
    student_id: int
    subgroup_id: int


class ComputePerformanceRequest(BaseModel):
    """A client-supplied snapshot to run the performance engine on."""
    grading_system: GradingSystem = Field(..., description="'five_point' or 'cumulative'")
    student_ids: List[int] = Field(..., description="Students to report on")
    grades: List[GradeIn] = Field(default_factory=list)
    schedules: List[ScheduleIn] = Field(default_factory=list)
    assignments: List[AssignmentIn] = Field(default_factory=list)
    memberships: List[MembershipIn] = Field(default_factory=list)
    from_date: Optional[date] = Field(None, description="Window start")
    to_date: Optional[date] = Field(None, description="Window end")

    def to_snapshot(self) -> PerformanceSnapshot:
        return PerformanceSnapshot(
            grading_system=self.grading_system,
            student_ids=list(self.student_ids),
            grades=[GradeRecord(**g.model_dump()) for g in self.grades],
            schedules=[ScheduleRecord(**s.model_dump()) for s in self.schedules],
            assignments=[AssignmentRecord(**a.model_dump()) for a in self.assignments],
            memberships=[SubgroupMembership(**m.model_dump()) for m in self.memberships],
        )


# Response schemas
class PerformanceEntry(BaseModel):
    """Rendered average and percentage."""
    average: str
    percentage: str


class ClassPerformanceResponse(BaseModel):
    """Class performance response."""
    class_id: int
    grading_system: str
    filters_applied: dict
    total_students: int
    performance: Dict[Any, Dict[Any, PerformanceEntry]]


class StudentSubjectPerformanceResponse(BaseModel):
    """One student's result in one subject."""
    student_id: int
    subject_id: int
    class_id: int
    subgroup_id: Optional[int]
    grading_system: str
    performance: PerformanceEntry


class SuccessResponse(BaseModel):
    """Generic success response."""
    success: bool
    message: str
    data: Optional[Any]
