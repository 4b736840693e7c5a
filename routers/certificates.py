# routers/certificates.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from dependencies import get_certificate_service, get_current_user
from models.user import User
from schemas.certificate import CertificateEnvelope, CertificateGenerate, CertificateOut
from schemas.common import DataResponse
from services.certificate import CertificateService
from services.notification import EmailService, get_email_service

router = APIRouter(prefix="/certificates", tags=["certificates"])


@router.post("/generate", response_model=CertificateEnvelope)
async def generate_certificate(
    request: CertificateGenerate,
    response: Response,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: CertificateService = Depends(get_certificate_service),
    email_service: EmailService = Depends(get_email_service),
):
    """Issue the caller's certificate for a course, or return the one already issued."""
    certificate, created = await service.issue(current_user, request.course_id, request.quiz_id)
    if created:
        response.status_code = status.HTTP_201_CREATED
        background_tasks.add_task(
            email_service.send_certificate_issued,
            current_user.email, current_user.full_name, certificate.course_title, certificate.certificate_url,
        )
    return CertificateEnvelope(
        message="Certificate issued" if created else "Certificate already issued",
        certificate=certificate,
        certificate_url=certificate.certificate_url,
    )


@router.get("/my-certificates", response_model=DataResponse[List[CertificateOut]])
async def get_my_certificates(
    current_user: User = Depends(get_current_user),
    service: CertificateService = Depends(get_certificate_service),
):
    return DataResponse(data=await service.list_student_certificates(current_user))


@router.get("/{certificate_id}/download")
async def download_certificate(
    certificate_id: str,
    current_user: User = Depends(get_current_user),
    service: CertificateService = Depends(get_certificate_service),
):
    certificate, pdf = await service.render(current_user, certificate_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{certificate.certificate_number}.pdf"'},
    )
