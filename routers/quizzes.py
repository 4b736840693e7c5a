# routers/quizzes.py
from typing import List

from fastapi import APIRouter, Depends, status

from dependencies import get_current_user, get_quiz_service, require_instructor_or_admin
from models.quiz import Quiz, QuizSession
from models.user import User
from schemas.common import DataResponse
from schemas.quiz import (
    QuizCreate, QuizPublic, QuizResult, QuizResults, QuizSubmission, QuizSummary, QuizUpdate,
)
from services.quiz import QuizService

router = APIRouter(prefix="/quizzes", tags=["Quizzes"])


@router.post("", response_model=DataResponse[Quiz], status_code=status.HTTP_201_CREATED)
async def create_quiz(
    quiz: QuizCreate,
    current_user: User = Depends(require_instructor_or_admin),
    service: QuizService = Depends(get_quiz_service),
):
    """Create a quiz - course owner or admin"""
    return DataResponse(message="Quiz created", data=await service.create_quiz(current_user, quiz))


@router.get("/course/{course_id}", response_model=DataResponse[List[QuizSummary]])
async def get_course_quizzes(
    course_id: str,
    current_user: User = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    return DataResponse(data=await service.list_course_quizzes(course_id))


@router.get("/{quiz_id}", response_model=DataResponse[QuizPublic])
async def get_quiz(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    """Questions without answers. For a quiz taker this also starts the clock."""
    return DataResponse(data=await service.get_quiz_for_taking(current_user, quiz_id))


@router.post("/{quiz_id}/start", response_model=DataResponse[QuizSession])
async def start_quiz(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    return DataResponse(data=await service.start_attempt(current_user, quiz_id))


@router.post("/{quiz_id}/submit", response_model=QuizResult)
async def submit_quiz(
    quiz_id: str,
    submission: QuizSubmission,
    current_user: User = Depends(get_current_user),
    service: QuizService = Depends(get_quiz_service),
):
    selected = [answer.selected_answer for answer in submission.answers]
    return await service.submit(current_user, quiz_id, selected)


@router.put("/{quiz_id}", response_model=DataResponse[Quiz])
async def update_quiz(
    quiz_id: str,
    quiz_update: QuizUpdate,
    current_user: User = Depends(require_instructor_or_admin),
    service: QuizService = Depends(get_quiz_service),
):
    return DataResponse(message="Quiz updated", data=await service.update_quiz(current_user, quiz_id, quiz_update))


@router.get("/{quiz_id}/results", response_model=QuizResults)
async def get_quiz_results(
    quiz_id: str,
    current_user: User = Depends(require_instructor_or_admin),
    service: QuizService = Depends(get_quiz_service),
):
    """All attempts with answers - course owner or admin"""
    return await service.results(current_user, quiz_id)
