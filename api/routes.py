"""
API routes for the School Journal system.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from config.settings import settings
from database import get_db
from performance import aggregate_performance, resolve_window
from tools import (
    get_class_performance,
    get_student_subject_performance,
    get_journal,
    export_journal_csv,
    create_grade,
    update_grade,
    delete_grade,
    update_schedule_status,
    AuthorizationError,
    InvalidUserError,
    NotFoundError,
    ValidationError,
    DuplicateGradeError,
    LessonNotFinishedError,
)
from .schemas import (
    CreateGradeRequest,
    UpdateGradeRequest,
    ScheduleStatusRequest,
    ComputePerformanceRequest,
    ClassPerformanceResponse,
    StudentSubjectPerformanceResponse,
    SuccessResponse,
)


# Router for performance endpoints
performance_router = APIRouter(prefix="/performance", tags=["Performance"])

# Router for journal endpoints
journal_router = APIRouter(prefix="/journal", tags=["Journal"])

# Router for grade writes
grades_router = APIRouter(prefix="/grades", tags=["Grades"])

# Router for lesson status
schedules_router = APIRouter(prefix="/schedules", tags=["Schedules"])


# ============== Performance Endpoints ==============

@performance_router.get("/class/{class_id}", response_model=ClassPerformanceResponse)
async def class_performance(
    class_id: int,
    requester_id: int,
    student_id: Optional[int] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    period: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Per-student, per-subject and overall performance for a class.

    Teachers may request the whole class. Students may only request
    themselves through `student_id`.
    """
    try:
        return get_class_performance(
            db=db,
            requester_id=requester_id,
            class_id=class_id,
            student_id=student_id,
            from_date=from_date,
            to_date=to_date,
            period=period,
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@performance_router.get(
    "/student/{student_id}/subject/{subject_id}",
    response_model=StudentSubjectPerformanceResponse,
)
async def student_subject_performance(
    student_id: int,
    subject_id: int,
    requester_id: int,
    subgroup_id: Optional[int] = None,
    class_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """
    One student's result in one subject, optionally for one subgroup journal.

    Students can only get their own result.
    """
    try:
        return get_student_subject_performance(
            db=db,
            requester_id=requester_id,
            student_id=student_id,
            subject_id=subject_id,
            subgroup_id=subgroup_id,
            class_id=class_id,
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@performance_router.post("/compute")
async def compute_performance(request: ComputePerformanceRequest):
    """
    Run the performance engine on a client-supplied snapshot.

    Nothing is read from or written to the database.
    """
    if request.from_date and request.to_date and request.from_date > request.to_date:
        raise HTTPException(status_code=400, detail="from_date must not be after to_date")
    window = resolve_window(request.from_date, request.to_date, None, date.today())
    return aggregate_performance(
        request.to_snapshot(),
        window=window,
        high_score_correction=settings.cumulative_high_score_correction,
        virtual_max_score=settings.virtual_max_score,
    )


# ============== Journal Endpoints ==============

@journal_router.get("/{class_id}/{subject_id}")
async def journal_view(
    class_id: int,
    subject_id: int,
    requester_id: int,
    subgroup_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """
    Journal grid for a subject (Teacher only).

    Without `subgroup_id` this is the main class journal.
    """
    try:
        return get_journal(db, requester_id, class_id, subject_id, subgroup_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@journal_router.get("/{class_id}/{subject_id}/export")
async def journal_export(
    class_id: int,
    subject_id: int,
    requester_id: int,
    subgroup_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Journal grid as a CSV download (Teacher only)."""
    try:
        content = export_journal_csv(db, requester_id, class_id, subject_id, subgroup_id)
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    filename = f"journal_{class_id}_{subject_id}" + (f"_{subgroup_id}" if subgroup_id else "") + ".csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ============== Grade Endpoints ==============

@grades_router.post("", response_model=SuccessResponse, status_code=201)
async def create_grade_endpoint(request: CreateGradeRequest, db: Session = Depends(get_db)):
    """
    Record a grade (Teacher only).

    Returns 409 with the existing grade's id when the student already has a
    grade for this assignment of a conducted lesson.
    """
    try:
        result = create_grade(db=db, **request.model_dump())
        return SuccessResponse(
            success=True,
            message=result.get("message", "Grade added"),
            data=result.get("grade"),
        )
    except DuplicateGradeError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_grade_id": e.existing_grade_id},
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@grades_router.patch("/{grade_id}", response_model=SuccessResponse)
async def update_grade_endpoint(grade_id: int, request: UpdateGradeRequest, db: Session = Depends(get_db)):
    """Update a grade's value, comment or type (creating teacher only)."""
    try:
        result = update_grade(
            db=db,
            teacher_id=request.teacher_id,
            grade_id=grade_id,
            grade=request.grade,
            comment=request.comment,
            grade_type=request.grade_type,
        )
        return SuccessResponse(
            success=True,
            message=result.get("message", "Grade updated"),
            data=result.get("grade"),
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)


@grades_router.delete("/{grade_id}", response_model=SuccessResponse)
async def delete_grade_endpoint(grade_id: int, teacher_id: int, db: Session = Depends(get_db)):
    """Delete a grade (creating teacher only)."""
    try:
        result = delete_grade(db=db, teacher_id=teacher_id, grade_id=grade_id)
        return SuccessResponse(
            success=True,
            message=result.get("message", "Grade deleted"),
            data={"grade_id": grade_id},
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# ============== Schedule Endpoints ==============

@schedules_router.patch("/{schedule_id}/status", response_model=SuccessResponse)
async def update_schedule_status_endpoint(
    schedule_id: int,
    request: ScheduleStatusRequest,
    db: Session = Depends(get_db),
):
    """
    Mark a lesson conducted or not conducted (Teacher only).

    Marking conducted is refused until the lesson has ended.
    """
    try:
        result = update_schedule_status(
            db=db,
            requester_id=request.requester_id,
            schedule_id=schedule_id,
            status=request.status,
        )
        return SuccessResponse(
            success=True,
            message=result["message"],
            data=result["schedule"],
        )
    except LessonNotFinishedError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AuthorizationError as e:
        raise HTTPException(status_code=403, detail=e.message)
    except InvalidUserError:
        raise HTTPException(status_code=404, detail="User not found")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
