# services/certificate.py
import logging
import uuid
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from config import Settings, get_settings
from crud.certificate import CertificateCRUD
from crud.enrollment import EnrollmentCRUD
from exceptions import AuthorizationError, InternalError, NotEligibleError, NotFoundError, ValidationError
from models.certificate import Certificate
from models.user import User
from schemas.certificate import CertificateOut
from services.catalog import CatalogService
from services.certificate_pdf import render_certificate_pdf
from services.grading import is_eligible
from services.policy import is_admin
from services.quiz import QuizService

logger = logging.getLogger(__name__)


class CertificateService:
    def __init__(self, db: AsyncIOMotorDatabase, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.certificate_crud = CertificateCRUD(db)
        self.enrollment_crud = EnrollmentCRUD(db)
        self.catalog = CatalogService(db)
        self.quizzes = QuizService(db, self.settings)

    def certificate_url(self, certificate: Certificate) -> str:
        return f"{self.settings.api_prefix}/certificates/{certificate.id}/download"

    def _out(self, certificate: Certificate) -> CertificateOut:
        return CertificateOut(**certificate.model_dump(by_alias=True), certificate_url=self.certificate_url(certificate))

    async def issue(self, student: User, course_id: str, quiz_id: str) -> Tuple[CertificateOut, bool]:
        """Issue (or return the existing) certificate. The flag is True when newly minted.

        Eligibility comes from the student's best recorded attempt, never a
        client-supplied score.
        """
        course = await self.catalog.get_course_or_404(course_id)
        quiz = await self.quizzes.get_quiz_or_404(quiz_id)
        if quiz.course_id != course.id:
            raise ValidationError("Quiz does not belong to this course")

        existing = await self.certificate_crud.get_student_course_certificate(student.id, course.id)
        if existing:
            return self._out(existing), False

        score = await self.quizzes.best_score(quiz, student.id)
        if score is None:
            raise NotEligibleError("No completed attempt for this quiz")
        if not is_eligible(score, quiz.passing_score):
            raise NotEligibleError(f"Score {score} is below the passing score of {quiz.passing_score}")

        certificate = await self.certificate_crud.create_certificate({
            "certificate_number": f"CERT-{uuid.uuid4().hex[:12].upper()}",
            "student_id": student.id,
            "student_name": student.full_name,
            "course_id": course.id,
            "course_title": course.title,
            "quiz_id": quiz.id,
            "score": score,
        })
        if certificate is None:
            # A concurrent request won the unique (student, course) insert
            certificate = await self.certificate_crud.get_student_course_certificate(student.id, course.id)
            if certificate is None:
                raise InternalError("Certificate could not be issued")
            return self._out(certificate), False

        await self.enrollment_crud.mark_certificate_issued(student.id, course.id, certificate.id)
        logger.info("Certificate issued: %s", certificate.certificate_number,
                    extra={"course_id": course.id, "user_id": student.id})
        return self._out(certificate), True

    async def list_student_certificates(self, student: User) -> List[CertificateOut]:
        return [self._out(c) for c in await self.certificate_crud.get_student_certificates(student.id)]

    async def get_certificate(self, user: User, certificate_id: str) -> Certificate:
        certificate = await self.certificate_crud.get_certificate_by_id(certificate_id)
        if not certificate:
            raise NotFoundError("Certificate not found")
        if certificate.student_id != user.id and not is_admin(user):
            raise AuthorizationError("Not authorized to download this certificate")
        return certificate

    async def render(self, user: User, certificate_id: str) -> Tuple[Certificate, bytes]:
        certificate = await self.get_certificate(user, certificate_id)
        return certificate, render_certificate_pdf(certificate, self.settings.platform_name)
