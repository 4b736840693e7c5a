# models/enrollment.py
import enum
from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import MongoDBModel


class PaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"


class Enrollment(MongoDBModel):
    student_id: str
    course_id: str
    enrolled_at: datetime = Field(default_factory=datetime.utcnow)
    progress: int = Field(default=0, ge=0, le=100)
    completed: bool = False
    completed_at: Optional[datetime] = None
    certificate_issued: bool = False
    certificate_id: Optional[str] = None
    payment_status: PaymentStatusEnum = PaymentStatusEnum.pending
    payment_id: Optional[str] = None
    order_id: Optional[str] = None
    amount: float = Field(default=0.0, ge=0)
