"""User Repository - Data access for user accounts"""
import re
from typing import Any, Dict, List, Optional, Tuple
from pymongo.collection import Collection
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection, store_call
from ..domain.models import User
from ..domain.errors import AlreadyExistsError, UserNotFoundError
from ..utils.logger import get_logger
from ..utils.time import format_iso, utc_now

logger = get_logger(__name__)


class UserRepository:
    """Repository for user accounts. Password hashes never leave this class
    except through get_credentials."""

    COLLECTION_NAME = "users"

    def __init__(self):
        self._users: Collection = get_collection(self.COLLECTION_NAME)

    @staticmethod
    def _to_model(doc: Dict[str, Any]) -> User:
        doc.pop("_id", None)
        doc.pop("password_hash", None)
        return User.model_validate(doc)

    @store_call
    def create_user(self, user: User, password_hash: str) -> User:
        """Insert a new account; email is unique (case-insensitive)"""
        if self._users.find_one({"email": user.email.lower()}):
            raise AlreadyExistsError(f"User with email {user.email} already exists")

        doc = user.model_dump(mode="json")
        doc["email"] = user.email.lower()
        doc["password_hash"] = password_hash
        doc["_id"] = user.user_id

        try:
            self._users.insert_one(doc)
        except DuplicateKeyError:
            raise AlreadyExistsError(f"User with email {user.email} already exists")

        logger.info(f"Created user: {user.email}", extra={"user_id": user.user_id, "role": user.role.value})
        return user

    @store_call
    def get_user(self, user_id: str) -> Optional[User]:
        doc = self._users.find_one({"user_id": user_id})
        return self._to_model(doc) if doc else None

    def get_user_or_raise(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    @store_call
    def get_user_by_email(self, email: str) -> Optional[User]:
        doc = self._users.find_one({"email": email.lower()})
        return self._to_model(doc) if doc else None

    @store_call
    def get_credentials(self, email: str) -> Optional[Tuple[User, str]]:
        """Return the account and its password hash for login checks"""
        doc = self._users.find_one({"email": email.lower()})
        if not doc:
            return None
        password_hash = doc.get("password_hash", "")
        return self._to_model(doc), password_hash

    @store_call
    def get_password_hash(self, user_id: str) -> Optional[str]:
        doc = self._users.find_one({"user_id": user_id}, {"password_hash": 1})
        return doc.get("password_hash") if doc else None

    @store_call
    def update_user(self, user_id: str, updates: Dict[str, Any]) -> User:
        """Apply field updates and bump updated_at"""
        updates = dict(updates)
        updates["updated_at"] = format_iso(utc_now())

        result = self._users.find_one_and_update(
            {"user_id": user_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            raise UserNotFoundError(f"User {user_id} not found")

        logger.info(f"Updated user {user_id}", extra={"user_id": user_id})
        return self._to_model(result)

    @store_call
    def set_password_hash(self, user_id: str, password_hash: str) -> None:
        result = self._users.update_one(
            {"user_id": user_id},
            {"$set": {"password_hash": password_hash, "updated_at": format_iso(utc_now())}}
        )
        if result.matched_count == 0:
            raise UserNotFoundError(f"User {user_id} not found")

    @store_call
    def record_login(self, user_id: str) -> None:
        self._users.update_one(
            {"user_id": user_id},
            {"$set": {"last_login_at": format_iso(utc_now())}}
        )

    @store_call
    def delete_user(self, user_id: str) -> None:
        result = self._users.delete_one({"user_id": user_id})
        if result.deleted_count == 0:
            raise UserNotFoundError(f"User {user_id} not found")
        logger.info(f"Deleted user {user_id}", extra={"user_id": user_id})

    @store_call
    def list_users(
        self,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[User], int]:
        """List users with filters. Returns (page, total matching)."""
        query: Dict[str, Any] = {}
        if role:
            query["role"] = role
        if status:
            query["status"] = status
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"full_name": pattern}, {"email": pattern}]

        total = self._users.count_documents(query)
        cursor = self._users.find(query).sort("created_at", DESCENDING).skip(skip).limit(limit)
        return [self._to_model(doc) for doc in cursor], total

    @store_call
    def count_by_role(self) -> Dict[str, int]:
        pipeline = [{"$group": {"_id": "$role", "count": {"$sum": 1}}}]
        return {row["_id"]: row["count"] for row in self._users.aggregate(pipeline)}
