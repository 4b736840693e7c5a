# models/user.py
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RoleEnum(str, enum.Enum):
    admin = "admin"
    instructor = "instructor"
    student = "student"


class EnrolledCourse(BaseModel):
    """Profile copy of an enrollment, kept for cheap dashboard reads."""
    course_id: str
    enrollment_id: Optional[str] = None
    enrolled_at: datetime
    progress: int = 0
    completed: bool = False


class User(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    full_name: str
    username: str
    email: EmailStr
    password_hash: str
    role: RoleEnum = RoleEnum.student
    is_active: bool = True
    enrolled_courses: List[EnrolledCourse] = []
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )
