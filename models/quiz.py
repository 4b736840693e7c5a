# models/quiz.py
import enum
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from models.base import MongoDBModel


class Question(BaseModel):
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)
    explanation: Optional[str] = None

    @model_validator(mode='after')
    def validate_correct_answer(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must be the index of one of the options")
        return self


class AttemptAnswer(BaseModel):
    question_index: int
    selected_answer: Optional[int] = None
    is_correct: bool = False


class Attempt(BaseModel):
    id: Optional[str] = Field(default=None, alias="_id")
    student_id: str
    score: int
    total_questions: int
    correct_answers: int
    passed: bool
    answers: List[AttemptAnswer] = []
    started_at: Optional[datetime] = None
    completed_at: datetime = Field(default_factory=datetime.utcnow)

    model_config = {"populate_by_name": True}


class Quiz(MongoDBModel):
    title: str
    description: Optional[str] = None
    course_id: str
    questions: List[Question] = []
    time_limit: int = Field(default=30, gt=0)  # minutes
    passing_score: int = Field(default=70, ge=0, le=100)
    is_active: bool = True
    attempts: List[Attempt] = []


class SessionStatusEnum(str, enum.Enum):
    in_progress = "in_progress"
    submitted = "submitted"


class QuizSession(MongoDBModel):
    quiz_id: str
    student_id: str
    started_at: datetime = Field(default_factory=datetime.utcnow)
    status: SessionStatusEnum = SessionStatusEnum.in_progress
    attempt_id: Optional[str] = None
