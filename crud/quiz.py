# crud/quiz.py
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from models.quiz import Quiz, QuizSession, SessionStatusEnum
from utils.mongo import serialize_doc, to_object_id


class QuizCRUD:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.quizzes
        self.sessions = db.quiz_sessions

    @staticmethod
    def _to_model(data: Optional[dict]) -> Optional[Quiz]:
        if not data:
            return None
        return Quiz(**serialize_doc(data))

    async def create_quiz(self, quiz_data: dict) -> Quiz:
        now = datetime.utcnow()
        quiz_data["course_id"] = to_object_id(quiz_data["course_id"], "Course")
        quiz_data["attempts"] = []
        quiz_data["created_at"] = now
        quiz_data["updated_at"] = now
        result = await self.collection.insert_one(quiz_data)
        return await self.get_quiz_by_id(str(result.inserted_id))

    async def get_quiz_by_id(self, quiz_id: str) -> Optional[Quiz]:
        if not ObjectId.is_valid(quiz_id):
            return None
        return self._to_model(await self.collection.find_one({"_id": ObjectId(quiz_id)}))

    async def get_course_quizzes(self, course_id: str, active_only: bool = True) -> List[Quiz]:
        query = {"course_id": to_object_id(course_id, "Course")}
        if active_only:
            query["is_active"] = True
        quizzes = await self.collection.find(query, {"attempts": 0}).to_list(length=100)
        return [self._to_model(quiz) for quiz in quizzes]

    async def update_quiz(self, quiz_id: str, update_data: dict) -> Optional[Quiz]:
        update_data["updated_at"] = datetime.utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": to_object_id(quiz_id, "Quiz")},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(result)

    async def push_attempt(self, quiz_id: str, attempt: dict) -> bool:
        # Attempts are append-only; nothing ever rewrites an element of this array
        attempt["student_id"] = to_object_id(attempt["student_id"], "Student")
        result = await self.collection.update_one(
            {"_id": to_object_id(quiz_id, "Quiz")},
            {"$push": {"attempts": attempt}},
        )
        return result.modified_count > 0

    async def get_open_session(self, quiz_id: str, student_id: str) -> Optional[QuizSession]:
        session = await self.sessions.find_one(
            {
                "quiz_id": to_object_id(quiz_id, "Quiz"),
                "student_id": to_object_id(student_id, "Student"),
                "status": SessionStatusEnum.in_progress.value,
            },
            sort=[("started_at", DESCENDING)],
        )
        return QuizSession(**serialize_doc(session)) if session else None

    async def create_session(self, quiz_id: str, student_id: str) -> QuizSession:
        now = datetime.utcnow()
        session = {
            "quiz_id": to_object_id(quiz_id, "Quiz"),
            "student_id": to_object_id(student_id, "Student"),
            "started_at": now,
            "status": SessionStatusEnum.in_progress.value,
            "attempt_id": None,
            "created_at": now,
            "updated_at": now,
        }
        await self.sessions.insert_one(session)
        return QuizSession(**serialize_doc(session))

    async def close_session(self, session_id: str, attempt_id: Optional[str] = None) -> None:
        await self.sessions.update_one(
            {"_id": to_object_id(session_id, "Quiz session")},
            {"$set": {
                "status": SessionStatusEnum.submitted.value,
                "attempt_id": attempt_id,
                "updated_at": datetime.utcnow(),
            }},
        )
