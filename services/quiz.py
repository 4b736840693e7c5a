# services/quiz.py
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from config import Settings, get_settings
from crud.course import CourseCRUD
from crud.enrollment import EnrollmentCRUD
from crud.quiz import QuizCRUD
from crud.user import UserCRUD
from exceptions import AuthorizationError, NotFoundError, ValidationError
from models.course import Course
from models.quiz import Quiz, QuizSession
from models.user import User
from schemas.quiz import (
    AttemptOut, QuestionPublic, QuizCreate, QuizPublic, QuizResult, QuizResults,
    QuizSummary, QuizUpdate,
)
from services.grading import score_answers
from services.policy import can_author_courses, is_owner_or_admin

logger = logging.getLogger(__name__)


def summarize(quiz: Quiz) -> dict:
    return {
        "_id": quiz.id,
        "course_id": quiz.course_id,
        "title": quiz.title,
        "description": quiz.description,
        "time_limit": quiz.time_limit,
        "passing_score": quiz.passing_score,
        "question_count": len(quiz.questions),
        "is_active": quiz.is_active,
    }


class QuizService:
    def __init__(self, db: AsyncIOMotorDatabase, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.quiz_crud = QuizCRUD(db)
        self.course_crud = CourseCRUD(db)
        self.enrollment_crud = EnrollmentCRUD(db)
        self.user_crud = UserCRUD(db)

    async def get_quiz_or_404(self, quiz_id: str) -> Quiz:
        quiz = await self.quiz_crud.get_quiz_by_id(quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")
        return quiz

    async def _get_course(self, course_id: str) -> Course:
        course = await self.course_crud.get_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    async def _authorize_owner(self, user: User, course_id: str, action: str) -> Course:
        course = await self._get_course(course_id)
        if not can_author_courses(user) or not is_owner_or_admin(user, course):
            raise AuthorizationError(f"Not authorized to {action}")
        return course

    async def _authorize_taker(self, user: User, quiz: Quiz) -> bool:
        """Returns True when the caller is the course owner or an admin."""
        course = await self._get_course(quiz.course_id)
        if is_owner_or_admin(user, course):
            return True
        if not await self.enrollment_crud.get_student_course_enrollment(user.id, quiz.course_id):
            raise AuthorizationError("Enroll in the course to take this quiz")
        return False

    # Authoring

    async def create_quiz(self, user: User, quiz: QuizCreate) -> Quiz:
        await self._authorize_owner(user, quiz.course_id, "create quiz for this course")
        created = await self.quiz_crud.create_quiz(quiz.model_dump(mode="json"))
        logger.info("Quiz created: %s", created.title, extra={"quiz_id": created.id})
        return created

    async def update_quiz(self, user: User, quiz_id: str, quiz_update: QuizUpdate) -> Quiz:
        quiz = await self.get_quiz_or_404(quiz_id)
        await self._authorize_owner(user, quiz.course_id, "update this quiz")
        update_data = {k: v for k, v in quiz_update.model_dump(mode="json", exclude_unset=True).items() if v is not None}
        if not update_data:
            raise ValidationError("No fields to update")
        return await self.quiz_crud.update_quiz(quiz_id, update_data)

    async def results(self, user: User, quiz_id: str) -> QuizResults:
        quiz = await self.get_quiz_or_404(quiz_id)
        await self._authorize_owner(user, quiz.course_id, "view these results")
        students = await self.user_crud.get_user_summaries(a.student_id for a in quiz.attempts)
        attempts = [
            AttemptOut(**attempt.model_dump(by_alias=True), student=students.get(attempt.student_id))
            for attempt in quiz.attempts
        ]
        return QuizResults(quiz=quiz, attempts=attempts)

    # Taking

    async def list_course_quizzes(self, course_id: str) -> List[QuizSummary]:
        quizzes = await self.quiz_crud.get_course_quizzes(course_id)
        return [QuizSummary(**summarize(quiz)) for quiz in quizzes]

    async def start_attempt(self, user: User, quiz_id: str) -> QuizSession:
        """not-started -> in-progress; an open session is reused, keeping its start time."""
        quiz = await self.get_quiz_or_404(quiz_id)
        if not quiz.is_active:
            raise NotFoundError("Quiz not found")
        await self._authorize_taker(user, quiz)
        session = await self.quiz_crud.get_open_session(quiz_id, user.id)
        if session is None:
            session = await self.quiz_crud.create_session(quiz_id, user.id)
        return session

    async def get_quiz_for_taking(self, user: User, quiz_id: str) -> QuizPublic:
        quiz = await self.get_quiz_or_404(quiz_id)
        course = await self._get_course(quiz.course_id)
        if is_owner_or_admin(user, course):
            started_at = None
        else:
            started_at = (await self.start_attempt(user, quiz_id)).started_at
        questions = [QuestionPublic(question=q.question, options=q.options) for q in quiz.questions]
        return QuizPublic(**summarize(quiz), questions=questions, started_at=started_at)

    async def submit(self, user: User, quiz_id: str, selected: Sequence[Optional[int]]) -> QuizResult:
        """in-progress -> submitted. Scores the answers and appends an attempt."""
        quiz = await self.get_quiz_or_404(quiz_id)
        if not quiz.is_active:
            raise ValidationError("Quiz is not active")
        if not quiz.questions:
            raise ValidationError("Quiz has no questions")
        privileged = await self._authorize_taker(user, quiz)

        now = datetime.utcnow()
        session = await self.quiz_crud.get_open_session(quiz_id, user.id)
        if session is None and not privileged:
            # Only owners and admins may submit outside a timed session
            raise ValidationError("Start the quiz first")
        if session is not None:
            deadline = session.started_at + timedelta(
                minutes=quiz.time_limit, seconds=self.settings.quiz_time_grace_seconds
            )
            if now > deadline:
                await self.quiz_crud.close_session(session.id)
                raise ValidationError("Quiz time limit exceeded")

        result = score_answers(quiz.questions, selected, quiz.passing_score)
        attempt_id = ObjectId()
        await self.quiz_crud.push_attempt(quiz_id, {
            "_id": attempt_id,
            "student_id": user.id,
            "score": result.score,
            "total_questions": result.total_questions,
            "correct_answers": result.correct_answers,
            "passed": result.passed,
            "answers": [answer.model_dump() for answer in result.answers],
            "started_at": session.started_at if session else None,
            "completed_at": now,
        })
        if session is not None:
            await self.quiz_crud.close_session(session.id, str(attempt_id))

        logger.info("Quiz submitted: score=%d passed=%s", result.score, result.passed,
                    extra={"quiz_id": quiz_id, "user_id": user.id})
        return QuizResult(
            score=result.score,
            total_questions=result.total_questions,
            correct_answers=result.correct_answers,
            passed=result.passed,
            attempt_id=str(attempt_id),
            ignored_answers=result.ignored_answers,
        )

    async def best_score(self, quiz: Quiz, student_id: str) -> Optional[int]:
        scores = [attempt.score for attempt in quiz.attempts if attempt.student_id == student_id]
        return max(scores) if scores else None
