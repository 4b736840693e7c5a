# models/course.py
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.base import MongoDBModel


class CategoryEnum(str, enum.Enum):
    programming = "programming"
    design = "design"
    business = "business"
    marketing = "marketing"
    data_science = "data-science"
    other = "other"


class LevelEnum(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class CurriculumItem(BaseModel):
    title: str
    description: Optional[str] = None
    duration: int = Field(default=0, ge=0)  # minutes
    video_url: Optional[str] = None


class Review(BaseModel):
    user_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Course(MongoDBModel):
    title: str
    description: str
    instructor_id: str
    price: float = Field(..., ge=0)
    category: CategoryEnum
    level: LevelEnum = LevelEnum.beginner
    duration: float = Field(..., gt=0)  # hours
    thumbnail: str = ""
    video_url: str = ""
    curriculum: List[CurriculumItem] = []
    requirements: List[str] = []
    learning_outcomes: List[str] = []
    enrolled_students: int = Field(default=0, ge=0)
    rating: float = Field(default=0.0, ge=0, le=5)
    reviews: List[Review] = []
    review_count: int = 0
    rating_total: int = 0
    is_published: bool = False
    is_deleted: bool = False
