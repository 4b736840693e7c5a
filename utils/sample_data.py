# utils/sample_data.py
"""Demo catalog for local development: one instructor, a few courses, a quiz each."""
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from crud.course import CourseCRUD
from crud.quiz import QuizCRUD
from crud.user import UserCRUD
from models.user import RoleEnum
from schemas.user import UserCreate

logger = logging.getLogger(__name__)

DEMO_INSTRUCTOR = UserCreate(
    full_name="Demo Instructor",
    username="demo_instructor",
    email="instructor@coursebay.dev",
    password="instructor123",
)

SAMPLE_COURSES = [
    {
        "title": "Complete JavaScript Masterclass",
        "description": "Learn JavaScript from scratch to advanced concepts including ES6+, "
                       "DOM manipulation and async programming.",
        "price": 499,
        "duration": 12,
        "level": "beginner",
        "category": "programming",
        "curriculum": [
            {"title": "Introduction to JavaScript", "duration": 45, "description": "Syntax, variables, data types"},
            {"title": "Functions and Scope", "duration": 60, "description": "Declarations, expressions, closures"},
            {"title": "DOM Manipulation", "duration": 90, "description": "Selecting elements, event handling"},
        ],
        "requirements": ["Basic computer knowledge"],
        "learning_outcomes": ["JavaScript fundamentals", "Async programming with Promises"],
        "is_published": True,
        "quiz": {
            "title": "JavaScript Basics",
            "questions": [
                {"question": "Which keyword declares a block-scoped variable?",
                 "options": ["var", "let", "function", "global"], "correct_answer": 1},
                {"question": "What does `typeof null` return?",
                 "options": ["'null'", "'undefined'", "'object'", "'number'"], "correct_answer": 2,
                 "explanation": "A long-standing quirk of the language."},
                {"question": "Which method adds an item to the end of an array?",
                 "options": ["push", "shift", "unshift", "pop"], "correct_answer": 0},
            ],
        },
    },
    {
        "title": "UI Design Fundamentals",
        "description": "Layout, typography, colour and accessibility for product designers.",
        "price": 0,
        "duration": 6,
        "level": "beginner",
        "category": "design",
        "curriculum": [
            {"title": "Visual Hierarchy", "duration": 40, "description": "Guiding the eye"},
            {"title": "Colour and Contrast", "duration": 35, "description": "Accessible palettes"},
        ],
        "requirements": [],
        "learning_outcomes": ["Design clear, accessible interfaces"],
        "is_published": True,
        "quiz": {
            "title": "Design Check",
            "passing_score": 50,
            "questions": [
                {"question": "What is the minimum WCAG AA contrast ratio for body text?",
                 "options": ["3:1", "4.5:1", "7:1"], "correct_answer": 1},
                {"question": "Whitespace mainly helps with...",
                 "options": ["Grouping and readability", "File size"], "correct_answer": 0},
            ],
        },
    },
]


async def populate_sample_data(db: AsyncIOMotorDatabase) -> dict:
    user_crud = UserCRUD(db)
    course_crud = CourseCRUD(db)
    quiz_crud = QuizCRUD(db)

    instructor = await user_crud.get_user_by_email(DEMO_INSTRUCTOR.email)
    if instructor is None:
        instructor = await user_crud.create_user(DEMO_INSTRUCTOR, role=RoleEnum.instructor)

    created = 0
    for sample in SAMPLE_COURSES:
        if await db.courses.find_one({"title": sample["title"]}):
            continue
        course_data = {k: v for k, v in sample.items() if k != "quiz"}
        course_data["instructor_id"] = instructor.id
        course = await course_crud.create_course(course_data)
        await quiz_crud.create_quiz(dict(sample["quiz"], course_id=course.id, is_active=True))
        created += 1

    logger.info("Sample data populated: %d new courses", created)
    return {"courses_created": created, "instructor_email": DEMO_INSTRUCTOR.email}
