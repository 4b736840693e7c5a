# crud/user.py
import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from exceptions import ConflictError
from models.user import RoleEnum, User
from schemas.user import UserCreate
from utils.mongo import serialize_doc, to_object_id
from utils.security import hash_password

logger = logging.getLogger(__name__)


class UserCRUD:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.users

    @staticmethod
    def _to_model(data: Optional[dict]) -> Optional[User]:
        if not data:
            return None
        return User(**serialize_doc(data))

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self._to_model(await self.collection.find_one({"email": email.lower()}))

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self._to_model(await self.collection.find_one({"username": username}))

    async def get_user_by_identifier(self, identifier: str) -> Optional[User]:
        user = await self.get_user_by_email(identifier)
        if not user:
            user = await self.get_user_by_username(identifier)
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        if not ObjectId.is_valid(user_id):
            return None
        return self._to_model(await self.collection.find_one({"_id": ObjectId(user_id)}))

    async def get_user_summaries(self, user_ids: Iterable[str]) -> Dict[str, dict]:
        """Map user id -> {_id, full_name, email} for resolving references."""
        object_ids = list({ObjectId(uid) for uid in user_ids if ObjectId.is_valid(uid)})
        if not object_ids:
            return {}
        cursor = self.collection.find(
            {"_id": {"$in": object_ids}}, {"full_name": 1, "email": 1}
        )
        users = await cursor.to_list(length=len(object_ids))
        return {str(user["_id"]): serialize_doc(user) for user in users}

    async def create_user(self, user_data: UserCreate, role: Optional[RoleEnum] = None) -> User:
        # The first account of an empty database administers the platform
        if role is None:
            user_count = await self.collection.count_documents({})
            role = RoleEnum.admin if user_count == 0 else RoleEnum.student

        user_dict = user_data.model_dump(exclude={"password"})
        user_dict["email"] = user_dict["email"].lower()
        user_dict["password_hash"] = hash_password(user_data.password)
        user_dict["role"] = RoleEnum(role).value
        user_dict["is_active"] = True
        user_dict["enrolled_courses"] = []
        user_dict["created_at"] = datetime.utcnow()

        try:
            result = await self.collection.insert_one(user_dict)
        except DuplicateKeyError:
            raise ConflictError("Email or username already registered")

        logger.info("User created: %s (%s)", user_dict["username"], user_dict["role"])
        return await self.get_user_by_id(str(result.inserted_id))

    async def update_last_login(self, user_id: str) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id, "User")},
            {"$set": {"last_login": datetime.utcnow()}},
        )

    async def add_enrolled_course(self, user_id: str, entry: dict) -> bool:
        result = await self.collection.update_one(
            {"_id": to_object_id(user_id, "User")},
            {"$push": {"enrolled_courses": entry}},
        )
        return result.matched_count > 0

    async def mirror_enrollment_progress(
        self, user_id: str, course_id: str, progress: int, completed: bool
    ) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(user_id, "User"), "enrolled_courses.course_id": course_id},
            {"$set": {
                "enrolled_courses.$.progress": progress,
                "enrolled_courses.$.completed": completed,
            }},
        )
