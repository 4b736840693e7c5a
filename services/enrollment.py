# services/enrollment.py
import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from crud.course import CourseCRUD
from crud.enrollment import EnrollmentCRUD
from crud.user import UserCRUD
from exceptions import (
    AuthorizationError, ConflictError, InternalError, NotFoundError,
    PaymentVerificationError, ValidationError,
)
from models.course import Course
from models.enrollment import Enrollment, PaymentStatusEnum
from models.order import Order
from models.user import User
from schemas.enrollment import EnrollmentOut, PaymentConfirmation
from services.payment import PaymentGateway, to_minor_units
from services.policy import can_enroll_without_payment, is_admin

logger = logging.getLogger(__name__)


def clamp_progress(progress: float) -> int:
    return max(0, min(100, int(math.floor(progress + 0.5))))


class EnrollmentService:
    def __init__(self, db: AsyncIOMotorDatabase, gateway: PaymentGateway):
        self.enrollment_crud = EnrollmentCRUD(db)
        self.course_crud = CourseCRUD(db)
        self.user_crud = UserCRUD(db)
        self.gateway = gateway

    async def _get_course(self, course_id: str) -> Course:
        course = await self.course_crud.get_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    async def _ensure_not_enrolled(self, student: User, course_id: str) -> None:
        if await self.enrollment_crud.get_student_course_enrollment(student.id, course_id):
            raise ConflictError("Already enrolled in this course")

    async def _with_courses(self, enrollments: List[Enrollment]) -> List[EnrollmentOut]:
        courses = await self.course_crud.get_courses_by_ids([e.course_id for e in enrollments])
        by_id = {course.id: course for course in courses}
        resolved = []
        for enrollment in enrollments:
            data = enrollment.model_dump(by_alias=True)
            course = by_id.get(enrollment.course_id)
            if course:
                data["course"] = course.model_dump(by_alias=True)
            resolved.append(EnrollmentOut(**data))
        return resolved

    # Checkout

    async def create_order(self, student: User, course_id: str, amount: Optional[float] = None) -> Order:
        course = await self._get_course(course_id)
        await self._ensure_not_enrolled(student, course_id)
        if course.price == 0:
            raise ValidationError("This course is free; enroll directly")
        if amount is not None and to_minor_units(amount) != to_minor_units(course.price):
            raise ValidationError("Amount does not match the course price")

        return await self.gateway.create_order(
            course.price,
            notes={"course_id": course.id, "student_id": student.id, "course_title": course.title},
        )

    async def get_order(self, user: User, order_id: str) -> Order:
        order = await self.gateway.get_order(order_id)
        if order.notes.get("student_id") != user.id and not is_admin(user):
            raise AuthorizationError("Not authorized to view this order")
        return order

    # Ledger

    async def enroll(
        self,
        student: User,
        course_id: str,
        amount: Optional[float] = None,
        payment: Optional[PaymentConfirmation] = None,
    ) -> EnrollmentOut:
        course = await self._get_course(course_id)
        await self._ensure_not_enrolled(student, course_id)

        if payment is not None:
            charged = course.price if amount is None else amount
            verification = await self.gateway.verify_payment(
                payment.order_id, payment.payment_id, payment.signature, course.id, student.id, charged
            )
            if not verification.success:
                logger.warning("Payment verification failed: %s", verification.reason,
                               extra={"order_id": payment.order_id})
                raise PaymentVerificationError(verification.reason or None)
            payment_fields = {
                "payment_status": PaymentStatusEnum.completed.value,
                "payment_id": payment.payment_id,
                "order_id": payment.order_id,
                "amount": charged,
            }
        elif can_enroll_without_payment(student.role) or course.price == 0:
            payment_fields = {
                "payment_status": PaymentStatusEnum.completed.value,
                "amount": course.price,
            }
        else:
            raise PaymentVerificationError("Payment is required to enroll in this course")

        enrollment = await self._create_with_side_effects(student, course, payment_fields)
        if payment is not None:
            await self.gateway.mark_paid(payment.order_id)
        logger.info("Student enrolled", extra={"course_id": course.id, "enrollment_id": enrollment.id})
        return (await self._with_courses([enrollment]))[0]

    async def _create_with_side_effects(self, student: User, course: Course, payment_fields: dict) -> Enrollment:
        enrolled_at = datetime.utcnow()
        enrollment = await self.enrollment_crud.create_enrollment({
            "student_id": student.id,
            "course_id": course.id,
            "enrolled_at": enrolled_at,
            **payment_fields,
        })

        counted = False
        try:
            if not await self.course_crud.increment_enrolled_students(course.id):
                raise InternalError("Course disappeared during enrollment")
            counted = True
            if not await self.user_crud.add_enrolled_course(student.id, {
                "course_id": course.id,
                "enrollment_id": enrollment.id,
                "enrolled_at": enrolled_at,
                "progress": 0,
                "completed": False,
            }):
                raise InternalError("Student profile not found")
        except (PyMongoError, InternalError) as e:
            logger.error("Enrollment side effects failed, compensating: %s", e,
                         extra={"enrollment_id": enrollment.id})
            if counted:
                await self.course_crud.increment_enrolled_students(course.id, -1)
            await self.enrollment_crud.delete_enrollment(enrollment.id)
            raise InternalError("Enrollment could not be completed") from e
        return enrollment

    async def update_progress(self, student: User, enrollment_id: str, progress: float) -> Enrollment:
        enrollment = await self.enrollment_crud.get_enrollment_by_id(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        if enrollment.student_id != student.id:
            raise AuthorizationError("Not authorized")

        value = clamp_progress(progress)
        completed = value >= 100
        update = {"progress": value, "completed": completed}
        if completed and not enrollment.completed_at:
            update["completed_at"] = datetime.utcnow()
        elif not completed:
            update["completed_at"] = None

        updated = await self.enrollment_crud.update_enrollment(enrollment_id, update)
        await self.user_crud.mirror_enrollment_progress(student.id, enrollment.course_id, value, completed)
        return updated

    async def check_enrollment(self, student: User, course_id: str) -> Tuple[bool, Optional[EnrollmentOut]]:
        enrollment = await self.enrollment_crud.get_student_course_enrollment(student.id, course_id)
        if not enrollment:
            return False, None
        return True, (await self._with_courses([enrollment]))[0]

    async def list_student_enrollments(self, student: User) -> List[EnrollmentOut]:
        enrollments = await self.enrollment_crud.get_student_enrollments(student.id)
        return await self._with_courses(enrollments)

    async def payment_history(self, student: User) -> List[EnrollmentOut]:
        enrollments = await self.enrollment_crud.get_student_enrollments(
            student.id, payment_status=PaymentStatusEnum.completed.value
        )
        return await self._with_courses(enrollments)

    async def get_enrollment(self, user: User, enrollment_id: str) -> EnrollmentOut:
        enrollment = await self.enrollment_crud.get_enrollment_by_id(enrollment_id)
        if not enrollment:
            raise NotFoundError("Enrollment not found")
        if enrollment.student_id != user.id and not is_admin(user):
            raise AuthorizationError("Not authorized")
        return (await self._with_courses([enrollment]))[0]
