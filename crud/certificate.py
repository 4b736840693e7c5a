# crud/certificate.py
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from models.certificate import Certificate
from utils.mongo import serialize_doc, to_object_id


class CertificateCRUD:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.certificates

    @staticmethod
    def _to_model(data: Optional[dict]) -> Optional[Certificate]:
        if not data:
            return None
        return Certificate(**serialize_doc(data))

    async def create_certificate(self, certificate_data: dict) -> Optional[Certificate]:
        """Insert a certificate; None if one already exists for the student and course."""
        now = datetime.utcnow()
        certificate_data["student_id"] = to_object_id(certificate_data["student_id"], "Student")
        certificate_data["course_id"] = to_object_id(certificate_data["course_id"], "Course")
        if certificate_data.get("quiz_id"):
            certificate_data["quiz_id"] = to_object_id(certificate_data["quiz_id"], "Quiz")
        certificate_data.setdefault("issued_at", now)
        certificate_data["created_at"] = now
        certificate_data["updated_at"] = now
        try:
            result = await self.collection.insert_one(certificate_data)
        except DuplicateKeyError:
            return None
        return await self.get_certificate_by_id(str(result.inserted_id))

    async def get_certificate_by_id(self, certificate_id: str) -> Optional[Certificate]:
        if not ObjectId.is_valid(certificate_id):
            return None
        return self._to_model(await self.collection.find_one({"_id": ObjectId(certificate_id)}))

    async def get_student_course_certificate(self, student_id: str, course_id: str) -> Optional[Certificate]:
        certificate = await self.collection.find_one({
            "student_id": to_object_id(student_id, "Student"),
            "course_id": to_object_id(course_id, "Course"),
        })
        return self._to_model(certificate)

    async def get_student_certificates(self, student_id: str) -> List[Certificate]:
        cursor = self.collection.find(
            {"student_id": to_object_id(student_id, "Student")}
        ).sort([("issued_at", DESCENDING)])
        certificates = await cursor.to_list(length=100)
        return [self._to_model(certificate) for certificate in certificates]
