# models/certificate.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import MongoDBModel


class Certificate(MongoDBModel):
    certificate_number: str
    student_id: str
    student_name: str
    course_id: str
    course_title: str
    quiz_id: Optional[str] = None
    score: int
    issued_at: datetime = Field(default_factory=datetime.utcnow)
