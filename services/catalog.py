# services/catalog.py
import logging
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from crud.course import CourseCRUD
from crud.user import UserCRUD
from exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from models.course import Course
from models.user import User
from schemas.course import CourseCreate, CourseOut, CourseUpdate, ReviewCreate
from services.policy import can_author_courses, is_owner_or_admin
from utils.mongo import serialize_doc

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.course_crud = CourseCRUD(db)
        self.user_crud = UserCRUD(db)

    async def _resolve(self, courses: List[Course], with_reviewers: bool = False) -> List[CourseOut]:
        user_ids = {course.instructor_id for course in courses}
        if with_reviewers:
            user_ids.update(review.user_id for course in courses for review in course.reviews)
        users = await self.user_crud.get_user_summaries(user_ids)

        resolved = []
        for course in courses:
            data = course.model_dump(by_alias=True)
            data["instructor"] = users.get(course.instructor_id)
            if with_reviewers:
                for review in data["reviews"]:
                    reviewer = users.get(review["user_id"])
                    review["user"] = {"_id": reviewer["_id"], "full_name": reviewer["full_name"]} if reviewer else None
            resolved.append(CourseOut(**data))
        return resolved

    async def get_course_or_404(self, course_id: str) -> Course:
        course = await self.course_crud.get_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    async def list_courses(
        self,
        category: Optional[str] = None,
        level: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "newest",
    ) -> List[CourseOut]:
        courses = await self.course_crud.get_courses(category=category, level=level, search=search, sort=sort)
        logger.debug("Found %d courses", len(courses))
        return await self._resolve(courses)

    async def list_instructor_courses(self, user: User) -> List[CourseOut]:
        courses = await self.course_crud.get_courses(published_only=False, instructor_id=user.id)
        return await self._resolve(courses)

    async def get_course(self, course_id: str) -> CourseOut:
        course = await self.get_course_or_404(course_id)
        return (await self._resolve([course], with_reviewers=True))[0]

    async def create_course(self, user: User, course: CourseCreate) -> Course:
        if not can_author_courses(user):
            raise AuthorizationError("Instructor or admin privileges required")
        course_data = course.model_dump(mode="json")
        course_data["instructor_id"] = user.id
        created = await self.course_crud.create_course(course_data)
        logger.info("Course created: %s", created.title, extra={"course_id": created.id})
        return created

    async def update_course(self, user: User, course_id: str, course_update: CourseUpdate) -> Course:
        course = await self.get_course_or_404(course_id)
        if not is_owner_or_admin(user, course):
            raise AuthorizationError("Not authorized to update this course")

        update_data = {k: v for k, v in course_update.model_dump(mode="json", exclude_unset=True).items() if v is not None}
        if not update_data:
            raise ValidationError("No fields to update")
        updated = await self.course_crud.update_course(course_id, update_data)
        if not updated:
            raise NotFoundError("Course not found")
        return updated

    async def delete_course(self, user: User, course_id: str) -> None:
        course = await self.get_course_or_404(course_id)
        if not is_owner_or_admin(user, course):
            raise AuthorizationError("Not authorized to delete this course")
        # Enrollments keep pointing at the course, so it is only hidden
        await self.course_crud.soft_delete_course(course_id)
        logger.info("Course removed", extra={"course_id": course_id})

    async def add_review(self, user: User, course_id: str, review: ReviewCreate) -> Course:
        updated = await self.course_crud.push_review(course_id, {
            "user_id": user.id,
            "rating": review.rating,
            "comment": review.comment,
            "created_at": datetime.utcnow(),
        })
        if updated is None:
            await self.get_course_or_404(course_id)
            raise ConflictError("Course already reviewed")

        review_count = updated["review_count"]
        rating = updated["rating_total"] / review_count
        await self.course_crud.set_rating_if_current(course_id, review_count, rating)
        updated["rating"] = rating
        return Course(**serialize_doc(updated))
