# schemas/quiz.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.quiz import Attempt, Question, Quiz
from schemas.user import UserSummary


class QuizCreate(BaseModel):
    course_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    questions: List[Question] = Field(..., min_length=1)
    time_limit: int = Field(30, gt=0)
    passing_score: int = Field(70, ge=0, le=100)
    is_active: bool = True


class QuizUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    questions: Optional[List[Question]] = Field(None, min_length=1)
    time_limit: Optional[int] = Field(None, gt=0)
    passing_score: Optional[int] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None


class QuestionPublic(BaseModel):
    question: str
    options: List[str]


class QuizSummary(BaseModel):
    id: str = Field(alias="_id")
    course_id: str
    title: str
    description: Optional[str] = None
    time_limit: int
    passing_score: int
    question_count: int
    is_active: bool

    model_config = ConfigDict(populate_by_name=True)


class QuizPublic(QuizSummary):
    """What a quiz taker sees: no answers, no other students' attempts."""
    questions: List[QuestionPublic] = []
    started_at: Optional[datetime] = None


class AnswerIn(BaseModel):
    selected_answer: Optional[int] = None


class QuizSubmission(BaseModel):
    answers: List[AnswerIn]


class QuizResult(BaseModel):
    success: bool = True
    score: int
    total_questions: int
    correct_answers: int
    passed: bool
    attempt_id: str
    ignored_answers: int = 0


class AttemptOut(Attempt):
    student: Optional[UserSummary] = None


class QuizResults(BaseModel):
    success: bool = True
    quiz: Quiz
    attempts: List[AttemptOut] = []
