# schemas/enrollment.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.enrollment import Enrollment


class PaymentConfirmation(BaseModel):
    order_id: str
    payment_id: str
    signature: str


class EnrollmentCreate(BaseModel):
    course_id: str
    amount: Optional[float] = Field(None, ge=0)
    payment: Optional[PaymentConfirmation] = None


class ProgressUpdate(BaseModel):
    progress: float = Field(..., allow_inf_nan=False)


class CourseSummary(BaseModel):
    id: str = Field(alias="_id")
    title: str
    thumbnail: str = ""
    price: float
    duration: float
    instructor_id: str

    model_config = ConfigDict(populate_by_name=True)


class EnrollmentOut(Enrollment):
    course: Optional[CourseSummary] = None


class EnrollmentCheck(BaseModel):
    success: bool = True
    enrolled: bool
    enrollment: Optional[EnrollmentOut] = None


class EnrollmentEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    enrollment: EnrollmentOut
