"""User Repository - Data access for accounts"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..domain.models import User
from ..domain.enums import UserRole
from ..domain.errors import AlreadyExistsError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class UserRepository:
    """Repository for user account operations"""

    COLLECTION_NAME = "users"

    def __init__(self, db: Database):
        self._collection: Collection = db[self.COLLECTION_NAME]

    def _to_model(self, doc: Optional[Dict[str, Any]]) -> Optional[User]:
        if doc is None:
            return None
        return User.from_document(doc)

    def create_user(self, user: User) -> User:
        """
        Insert a new account

        Raises:
            AlreadyExistsError: If the (email, role) pair is taken
        """
        try:
            self._collection.insert_one(user.to_document())
        except DuplicateKeyError:
            raise AlreadyExistsError(
                "An account with this email already exists",
                details={"email": user.email, "role": user.role}
            )

        logger.info(
            f"Created {user.role} account {user.email}",
            extra={"user_id": user.id, "role": user.role}
        )
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._to_model(self._collection.find_one({"_id": user_id}))

    def get_by_email_and_role(self, email: str, role: UserRole) -> Optional[User]:
        doc = self._collection.find_one({"email": email.lower(), "role": UserRole(role).value})
        return self._to_model(doc)

    def list_by_role(self, role: UserRole) -> List[User]:
        cursor = self._collection.find({"role": UserRole(role).value}).sort("created_at", ASCENDING)
        return [User.from_document(doc) for doc in cursor]

    def count_by_role(self, role: UserRole) -> int:
        return self._collection.count_documents({"role": UserRole(role).value})

    def get_admin(self, admin_id: str) -> Optional[User]:
        """Load a user only if it is an admin"""
        doc = self._collection.find_one({"_id": admin_id, "role": UserRole.ADMIN.value})
        return self._to_model(doc)

    def find_any_admin(self) -> Optional[User]:
        doc = self._collection.find_one(
            {"role": UserRole.ADMIN.value},
            sort=[("created_at", ASCENDING)]
        )
        return self._to_model(doc)

    def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Optional[User]:
        """Apply profile field updates and return the fresh document"""
        updates = dict(updates)
        updates["updated_at"] = utc_now()
        doc = self._collection.find_one_and_update(
            {"_id": user_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        return self._to_model(doc)

    def set_reset_code(self, email: str, code_hash: str, expires_at: datetime) -> int:
        """Store a hashed reset code on every account with this email"""
        result = self._collection.update_many(
            {"email": email.lower()},
            {"$set": {
                "reset_token": code_hash,
                "reset_token_expires": expires_at,
                "updated_at": utc_now(),
            }}
        )
        return result.modified_count

    def find_by_reset_code(self, email: str, code_hash: str) -> List[User]:
        """Accounts holding this reset code that has not yet expired"""
        cursor = self._collection.find({
            "email": email.lower(),
            "reset_token": code_hash,
            "reset_token_expires": {"$gt": utc_now()},
        })
        return [User.from_document(doc) for doc in cursor]

    def reset_password(self, email: str, code_hash: str, password_hash: str) -> int:
        """Replace the password of matching accounts and clear the reset code"""
        result = self._collection.update_many(
            {
                "email": email.lower(),
                "reset_token": code_hash,
                "reset_token_expires": {"$gt": utc_now()},
            },
            {"$set": {
                "password_hash": password_hash,
                "reset_token": None,
                "reset_token_expires": None,
                "updated_at": utc_now(),
            }}
        )
        return result.modified_count
