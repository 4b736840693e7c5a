# schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from models.user import EnrolledCourse, RoleEnum


class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=120)
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserSummary(BaseModel):
    id: str = Field(alias="_id")
    full_name: str
    email: Optional[EmailStr] = None

    model_config = ConfigDict(populate_by_name=True)


class UserOut(BaseModel):
    id: str = Field(alias="_id")
    full_name: str
    username: str
    email: EmailStr
    role: RoleEnum
    is_active: bool
    enrolled_courses: List[EnrolledCourse] = []
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class AuthResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: UserOut
