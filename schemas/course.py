# schemas/course.py
from typing import List, Optional

from pydantic import BaseModel, Field

from models.course import CategoryEnum, Course, CurriculumItem, LevelEnum, Review
from schemas.user import UserSummary


class CourseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: CategoryEnum
    level: LevelEnum = LevelEnum.beginner
    duration: float = Field(..., gt=0)
    thumbnail: str = ""
    video_url: str = ""
    curriculum: List[CurriculumItem] = []
    requirements: List[str] = []
    learning_outcomes: List[str] = []
    is_published: bool = False


class CourseCreate(CourseBase):
    pass


# Counters, rating, reviews and the owning instructor are never client-editable
class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[CategoryEnum] = None
    level: Optional[LevelEnum] = None
    duration: Optional[float] = Field(None, gt=0)
    thumbnail: Optional[str] = None
    video_url: Optional[str] = None
    curriculum: Optional[List[CurriculumItem]] = None
    requirements: Optional[List[str]] = None
    learning_outcomes: Optional[List[str]] = None
    is_published: Optional[bool] = None


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewOut(Review):
    user: Optional[UserSummary] = None


class CourseOut(Course):
    instructor: Optional[UserSummary] = None
    reviews: List[ReviewOut] = []
