# database.py
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from config import get_settings

logger = logging.getLogger(__name__)


class MongoDB:
    client: Optional[AsyncIOMotorClient] = None


mongodb = MongoDB()


async def get_database() -> AsyncIOMotorDatabase:
    settings = get_settings()
    if mongodb.client is None:
        logger.info("Connecting to MongoDB at %s", settings.mongodb_url)
        mongodb.client = AsyncIOMotorClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=15000,
            connectTimeoutMS=15000,
            maxPoolSize=10,
            retryWrites=True,
        )
    return mongodb.client[settings.database_name]


async def close_mongo_connection():
    if mongodb.client:
        mongodb.client.close()
        mongodb.client = None
        logger.info("MongoDB connection closed")


async def create_indexes(db: Optional[AsyncIOMotorDatabase] = None):
    """Create the indexes the workflow relies on.

    The unique indexes are what keep enrollments and certificates
    one-per-(student, course) under concurrent requests.
    """
    if db is None:
        db = await get_database()

    await db.users.create_index([("email", ASCENDING)], unique=True)
    await db.users.create_index([("username", ASCENDING)], unique=True)

    await db.courses.create_index([("instructor_id", ASCENDING)])
    await db.courses.create_index([("category", ASCENDING), ("level", ASCENDING)])
    await db.courses.create_index([("is_published", ASCENDING), ("created_at", DESCENDING)])

    await db.enrollments.create_index(
        [("student_id", ASCENDING), ("course_id", ASCENDING)], unique=True
    )
    await db.enrollments.create_index([("course_id", ASCENDING)])

    await db.quizzes.create_index([("course_id", ASCENDING)])
    await db.quiz_sessions.create_index([("quiz_id", ASCENDING), ("student_id", ASCENDING)])

    await db.certificates.create_index(
        [("student_id", ASCENDING), ("course_id", ASCENDING)], unique=True
    )
    logger.info("Database indexes ensured")
