import uuid

import httpx
import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from config import get_settings
from crud.user import UserCRUD
from database import create_indexes, get_database
from main import app
from models.user import RoleEnum
from schemas.course import CourseCreate
from schemas.quiz import QuizCreate
from schemas.user import UserCreate
from services.catalog import CatalogService
from services.payment import MockPaymentGateway, get_payment_gateway
from services.quiz import QuizService
from utils.security import create_access_token


@pytest_asyncio.fixture
async def db():
    client = AsyncMongoMockClient()
    database = client[f"coursebay_test_{uuid.uuid4().hex[:8]}"]
    await create_indexes(database)
    return database


@pytest.fixture
def gateway():
    return MockPaymentGateway(get_settings())


@pytest.fixture
def make_user(db):
    async def _make_user(username: str, role: RoleEnum = RoleEnum.student):
        return await UserCRUD(db).create_user(
            UserCreate(
                full_name=username.replace("_", " ").title(),
                username=username,
                email=f"{username}@coursebay.dev",
                password="secret123",
            ),
            role=role,
        )
    return _make_user


@pytest.fixture
def make_course(db):
    async def _make_course(instructor, **overrides):
        data = {
            "title": "Complete JavaScript Masterclass",
            "description": "From basics to async programming",
            "price": 499,
            "category": "programming",
            "level": "beginner",
            "duration": 12,
            "is_published": True,
        }
        data.update(overrides)
        return await CatalogService(db).create_course(instructor, CourseCreate(**data))
    return _make_course


@pytest.fixture
def make_quiz(db):
    async def _make_quiz(instructor, course, **overrides):
        data = {
            "course_id": course.id,
            "title": "JavaScript Basics",
            "questions": [
                {"question": "2 + 2?", "options": ["3", "4"], "correct_answer": 1},
                {"question": "Block-scoped keyword?", "options": ["var", "let"], "correct_answer": 1},
                {"question": "typeof null?", "options": ["object", "null"], "correct_answer": 0},
                {"question": "Array append?", "options": ["push", "pop"], "correct_answer": 0},
            ],
            "passing_score": 70,
        }
        data.update(overrides)
        return await QuizService(db).create_quiz(instructor, QuizCreate(**data))
    return _make_quiz


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest_asyncio.fixture
async def client(db, gateway):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
