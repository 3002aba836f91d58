"""User Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List, Optional

from vidyamrit.auth import firebase_client
from vidyamrit.config.settings import ALLOWED_ROLES, DEFAULT_USER_ROLE
from vidyamrit.exceptions.exceptions import (
    DuplicateRecordError, NotFoundError, RegistrationFailedError
)
from vidyamrit.logging_config.log_config import user_message
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

REGISTRATION_FAILED = "Registration failed. Please try again."


def format_user(user: Dict) -> Dict:
    return sanitize_mongo_document({
        "id": user["_id"],
        "name": user.get("name"),
        "email": user.get("email"),
        "phoneNo": user.get("phoneNo", ""),
        "role": user.get("role"),
        "schoolId": user.get("schoolId"),
        "createdAt": user.get("createdAt"),
        "updatedAt": user.get("updatedAt"),
    })


class UserService:
    def __init__(self, auth_client=None):
        self.repo_factory = RepositoryFactory()
        self._auth_client = auth_client

    @property
    def auth_client(self):
        if self._auth_client is None:
            self._auth_client = firebase_client.get_auth_client()
        return self._auth_client

    def register_user(self, data: Dict) -> Dict:
        """
        Register a user in Firebase and in the users collection.

        The email is checked against the database before Firebase is called.
        When the database write fails after Firebase created the account, the
        Firebase account is deleted again; a failed cleanup is only logged.
        """
        ValidationUtils.validate_required_fields(data, "name", "email", "password")
        role = data.get("role") or DEFAULT_USER_ROLE
        ValidationUtils.validate_choice(role, ALLOWED_ROLES, "role")
        school_id = validate_object_id(data["schoolId"]) if data.get("schoolId") else None
        email = data["email"].strip().lower()

        user_repo = self.repo_factory.get_user_repo()
        existing = user_repo.find_by_email(email)
        if existing:
            logger.info(user_message(email, "User already exists"))
            raise DuplicateRecordError("User already exists")

        try:
            firebase_user = self.auth_client.create_user(
                email=email,
                password=data["password"],
                display_name=data["name"]
            )
        except Exception as e:
            logger.error(user_message(email, f"Firebase user creation failed: {e}"))
            raise RegistrationFailedError(REGISTRATION_FAILED)

        try:
            user = user_repo.insert({
                "uid": firebase_user.uid,
                "name": data["name"],
                "email": email,
                "phoneNo": data.get("phoneNo") or "",
                "role": role,
                "schoolId": school_id,
            })
        except Exception as e:
            logger.error(user_message(email, f"Error in user registration: {e}"))
            self._remove_firebase_user(firebase_user.uid, email)
            raise RegistrationFailedError(REGISTRATION_FAILED)

        logger.info(user_message(email, f"Registered with role {role}"))
        return format_user(user)

    def _remove_firebase_user(self, uid: str, email: Optional[str] = None) -> bool:
        try:
            self.auth_client.delete_user(uid)
        except Exception as e:
            logger.error(user_message(email, f"Failed to delete Firebase user {uid} during cleanup: {e}"))
            return False
        logger.info(user_message(email, f"Cleaned up: Firebase user {uid} deleted"))
        return True

    def get_users(self, role: Optional[str] = None, school_id: Optional[str] = None) -> List[Dict]:
        query = {}
        if role:
            query["role"] = role
        if school_id:
            query["schoolId"] = validate_object_id(school_id)
        users = self.repo_factory.get_user_repo().find_many(query, sort=[("name", 1)])
        return [format_user(user) for user in users]

    def get_user(self, user_id: str) -> Dict:
        user = self.repo_factory.get_user_repo().find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return format_user(user)

    def update_user(self, user_id: str, data: Dict) -> Dict:
        updates = {}
        if "name" in data:
            updates["name"] = ValidationUtils.validate_non_empty_string(data["name"], "name")
        if "phoneNo" in data:
            updates["phoneNo"] = data["phoneNo"] or ""
        if "schoolId" in data:
            updates["schoolId"] = validate_object_id(data["schoolId"]) if data["schoolId"] else None

        user = self.repo_factory.get_user_repo().update_fields(user_id, updates)
        if not user:
            raise NotFoundError("User not found")
        return format_user(user)

    def delete_user(self, user_id: str) -> Dict:
        user_repo = self.repo_factory.get_user_repo()
        user = user_repo.find_by_id(user_id)
        if not user or not user_repo.delete(user_id):
            raise NotFoundError("User not found")

        # Database record is gone either way; Firebase cleanup is best effort
        self._remove_firebase_user(user["uid"], user.get("email"))
        return {"message": "User deleted successfully"}
