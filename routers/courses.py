# routers/courses.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from dependencies import get_catalog_service, get_current_user, require_instructor_or_admin
from models.course import CategoryEnum, Course, LevelEnum
from models.user import User
from schemas.common import DataResponse, MessageResponse
from schemas.course import CourseCreate, CourseOut, CourseUpdate, ReviewCreate
from services.catalog import CatalogService

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=DataResponse[List[CourseOut]])
async def get_courses(
    category: Optional[CategoryEnum] = None,
    level: Optional[LevelEnum] = None,
    search: Optional[str] = Query(None, max_length=100),
    sort: Literal["newest", "price", "rating", "enrolled"] = "newest",
    service: CatalogService = Depends(get_catalog_service),
):
    """Published courses, filtered and sorted. Public."""
    courses = await service.list_courses(
        category=category.value if category else None,
        level=level.value if level else None,
        search=search,
        sort=sort,
    )
    return DataResponse(data=courses)


@router.get("/instructor/mine", response_model=DataResponse[List[CourseOut]])
async def get_my_courses(
    current_user: User = Depends(require_instructor_or_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return DataResponse(data=await service.list_instructor_courses(current_user))


@router.get("/{course_id}", response_model=DataResponse[CourseOut])
async def get_course(course_id: str, service: CatalogService = Depends(get_catalog_service)):
    return DataResponse(data=await service.get_course(course_id))


@router.post("", response_model=DataResponse[Course], status_code=status.HTTP_201_CREATED)
async def create_course(
    course: CourseCreate,
    current_user: User = Depends(require_instructor_or_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    created = await service.create_course(current_user, course)
    return DataResponse(message="Course created", data=created)


@router.put("/{course_id}", response_model=DataResponse[Course])
async def update_course(
    course_id: str,
    course_update: CourseUpdate,
    current_user: User = Depends(require_instructor_or_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    updated = await service.update_course(current_user, course_id, course_update)
    return DataResponse(message="Course updated", data=updated)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    current_user: User = Depends(require_instructor_or_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    await service.delete_course(current_user, course_id)
    return MessageResponse(message="Course removed")


@router.post("/{course_id}/reviews", response_model=DataResponse[Course], status_code=status.HTTP_201_CREATED)
async def add_review(
    course_id: str,
    review: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    course = await service.add_review(current_user, course_id, review)
    return DataResponse(message="Review added", data=course)
