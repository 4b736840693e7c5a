# crud/enrollment.py
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from exceptions import ConflictError
from models.enrollment import Enrollment, PaymentStatusEnum
from utils.mongo import serialize_doc, to_object_id


class EnrollmentCRUD:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.enrollments

    @staticmethod
    def _to_model(data: Optional[dict]) -> Optional[Enrollment]:
        if not data:
            return None
        return Enrollment(**serialize_doc(data))

    async def create_enrollment(self, enrollment_data: dict) -> Enrollment:
        now = datetime.utcnow()
        enrollment_data["student_id"] = to_object_id(enrollment_data["student_id"], "Student")
        enrollment_data["course_id"] = to_object_id(enrollment_data["course_id"], "Course")
        enrollment_data.setdefault("enrolled_at", now)
        enrollment_data.setdefault("progress", 0)
        enrollment_data.setdefault("completed", False)
        enrollment_data.setdefault("certificate_issued", False)
        enrollment_data.setdefault("payment_status", PaymentStatusEnum.pending.value)
        enrollment_data["created_at"] = now
        enrollment_data["updated_at"] = now

        try:
            result = await self.collection.insert_one(enrollment_data)
        except DuplicateKeyError:
            # The unique (student_id, course_id) index lost us a race
            raise ConflictError("Already enrolled in this course")
        return await self.get_enrollment_by_id(str(result.inserted_id))

    async def get_enrollment_by_id(self, enrollment_id: str) -> Optional[Enrollment]:
        if not ObjectId.is_valid(enrollment_id):
            return None
        return self._to_model(await self.collection.find_one({"_id": ObjectId(enrollment_id)}))

    async def get_student_course_enrollment(self, student_id: str, course_id: str) -> Optional[Enrollment]:
        if not (ObjectId.is_valid(student_id) and ObjectId.is_valid(course_id)):
            return None
        enrollment = await self.collection.find_one({
            "student_id": ObjectId(student_id),
            "course_id": ObjectId(course_id),
        })
        return self._to_model(enrollment)

    async def get_student_enrollments(
        self, student_id: str, payment_status: Optional[str] = None
    ) -> List[Enrollment]:
        query = {"student_id": to_object_id(student_id, "Student")}
        if payment_status:
            query["payment_status"] = payment_status
        cursor = self.collection.find(query).sort([("enrolled_at", DESCENDING)])
        enrollments = await cursor.to_list(length=100)
        return [self._to_model(enrollment) for enrollment in enrollments]

    async def update_enrollment(self, enrollment_id: str, update_data: dict) -> Optional[Enrollment]:
        update_data["updated_at"] = datetime.utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": to_object_id(enrollment_id, "Enrollment")},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(result)

    async def mark_certificate_issued(self, student_id: str, course_id: str, certificate_id: str) -> None:
        await self.collection.update_one(
            {
                "student_id": to_object_id(student_id, "Student"),
                "course_id": to_object_id(course_id, "Course"),
            },
            {"$set": {
                "certificate_issued": True,
                "certificate_id": certificate_id,
                "updated_at": datetime.utcnow(),
            }},
        )

    async def delete_enrollment(self, enrollment_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_object_id(enrollment_id, "Enrollment")})
        return result.deleted_count > 0
