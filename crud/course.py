# crud/course.py
import re
from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from models.course import Course
from utils.mongo import serialize_doc, to_object_id

SORT_OPTIONS = {
    "newest": [("created_at", DESCENDING)],
    "price": [("price", ASCENDING)],
    "rating": [("rating", DESCENDING)],
    "enrolled": [("enrolled_students", DESCENDING)],
}

NOT_DELETED = {"is_deleted": {"$ne": True}}


class CourseCRUD:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.courses

    @staticmethod
    def _to_model(data: Optional[dict]) -> Optional[Course]:
        if not data:
            return None
        return Course(**serialize_doc(data))

    async def get_course(self, course_id: str) -> Optional[Course]:
        if not ObjectId.is_valid(course_id):
            return None
        course = await self.collection.find_one({"_id": ObjectId(course_id), **NOT_DELETED})
        return self._to_model(course)

    async def get_courses_by_ids(self, course_ids: List[str]) -> List[Course]:
        """Lookup for references held by enrollments, so removed courses are included."""
        object_ids = list({ObjectId(cid) for cid in course_ids if ObjectId.is_valid(cid)})
        if not object_ids:
            return []
        courses = await self.collection.find({"_id": {"$in": object_ids}}).to_list(length=len(object_ids))
        return [self._to_model(course) for course in courses]

    async def get_courses(
        self,
        category: Optional[str] = None,
        level: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
        published_only: bool = True,
        instructor_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Course]:
        query = dict(NOT_DELETED)
        if published_only:
            query["is_published"] = True
        if category:
            query["category"] = category
        if level:
            query["level"] = level
        if instructor_id:
            query["instructor_id"] = to_object_id(instructor_id, "Instructor")
        if search:
            pattern = re.escape(search.strip())
            query["$or"] = [
                {"title": {"$regex": pattern, "$options": "i"}},
                {"description": {"$regex": pattern, "$options": "i"}},
            ]

        cursor = self.collection.find(query).sort(SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"])).limit(limit)
        courses = await cursor.to_list(length=limit)
        return [self._to_model(course) for course in courses]

    async def create_course(self, course_data: dict) -> Course:
        now = datetime.utcnow()
        course_data["instructor_id"] = to_object_id(course_data["instructor_id"], "Instructor")
        course_data.update({
            "enrolled_students": 0,
            "rating": 0.0,
            "reviews": [],
            "review_count": 0,
            "rating_total": 0,
            "is_deleted": False,
            "created_at": now,
            "updated_at": now,
        })
        result = await self.collection.insert_one(course_data)
        return await self.get_course(str(result.inserted_id))

    async def update_course(self, course_id: str, update_data: dict) -> Optional[Course]:
        update_data["updated_at"] = datetime.utcnow()
        result = await self.collection.find_one_and_update(
            {"_id": to_object_id(course_id, "Course"), **NOT_DELETED},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(result)

    async def soft_delete_course(self, course_id: str) -> bool:
        result = await self.collection.update_one(
            {"_id": to_object_id(course_id, "Course"), **NOT_DELETED},
            {"$set": {"is_deleted": True, "is_published": False, "updated_at": datetime.utcnow()}},
        )
        return result.matched_count > 0

    async def push_review(self, course_id: str, review: dict) -> Optional[dict]:
        """Append a review unless the user already left one.

        The review and the rating counters go in with one update, so the
        counters can never disagree with the review list. Returns the updated
        document, or None if the course is missing or already reviewed.
        """
        review_doc = dict(review, user_id=to_object_id(review["user_id"], "User"))
        return await self.collection.find_one_and_update(
            {
                "_id": to_object_id(course_id, "Course"),
                **NOT_DELETED,
                "reviews.user_id": {"$ne": review_doc["user_id"]},
            },
            {
                "$push": {"reviews": review_doc},
                "$inc": {"review_count": 1, "rating_total": review_doc["rating"]},
                "$set": {"updated_at": datetime.utcnow()},
            },
            return_document=ReturnDocument.AFTER,
        )

    async def set_rating_if_current(self, course_id: str, review_count: int, rating: float) -> bool:
        # Compare-and-swap on review_count: a stale mean is never written over a newer one
        result = await self.collection.update_one(
            {"_id": to_object_id(course_id, "Course"), "review_count": review_count},
            {"$set": {"rating": rating}},
        )
        return result.matched_count > 0

    async def increment_enrolled_students(self, course_id: str, delta: int = 1) -> bool:
        result = await self.collection.update_one(
            {"_id": to_object_id(course_id, "Course")},
            {"$inc": {"enrolled_students": delta}},
        )
        return result.matched_count > 0
