# routers/enrollments.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status

from dependencies import get_current_user, get_enrollment_service
from models.enrollment import Enrollment
from models.user import User
from schemas.common import DataResponse
from schemas.enrollment import (
    EnrollmentCheck, EnrollmentCreate, EnrollmentEnvelope, EnrollmentOut, ProgressUpdate,
)
from services.enrollment import EnrollmentService
from services.notification import EmailService, get_email_service

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post("", response_model=EnrollmentEnvelope, status_code=status.HTTP_201_CREATED)
async def enroll(
    enrollment: EnrollmentCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
    email_service: EmailService = Depends(get_email_service),
):
    """Direct enrollment: free courses, instructors/admins, or with a payment confirmation."""
    created = await service.enroll(current_user, enrollment.course_id, enrollment.amount, enrollment.payment)
    if created.course:
        background_tasks.add_task(
            email_service.send_enrollment_confirmation,
            current_user.email, current_user.full_name, created.course.title,
        )
    return EnrollmentEnvelope(message="Enrollment created", enrollment=created)


@router.get("/my-enrollments", response_model=DataResponse[List[EnrollmentOut]])
async def get_my_enrollments(
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return DataResponse(data=await service.list_student_enrollments(current_user))


@router.get("/check/{course_id}", response_model=EnrollmentCheck)
async def check_enrollment(
    course_id: str,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    enrolled, enrollment = await service.check_enrollment(current_user, course_id)
    return EnrollmentCheck(enrolled=enrolled, enrollment=enrollment)


@router.put("/{enrollment_id}/progress", response_model=DataResponse[Enrollment])
async def update_progress(
    enrollment_id: str,
    progress_update: ProgressUpdate,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    updated = await service.update_progress(current_user, enrollment_id, progress_update.progress)
    return DataResponse(message="Progress updated", data=updated)


@router.get("/{enrollment_id}", response_model=DataResponse[EnrollmentOut])
async def get_enrollment(
    enrollment_id: str,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return DataResponse(data=await service.get_enrollment(current_user, enrollment_id))
