"""Security utilities - DRY principle"""
from typing import Any, Dict

from bson import ObjectId
from bson.errors import InvalidId

from vidyamrit.config.settings import ROLE_SUPER_ADMIN
from vidyamrit.exceptions.exceptions import PermissionDeniedError


def validate_object_id(obj_id: Any) -> ObjectId:
    """Validate and return an ObjectId"""
    if obj_id is None:
        # ObjectId(None) would mint a fresh id
        raise ValueError("Invalid ObjectId format")
    if isinstance(obj_id, dict):
        raise ValueError("ObjectId cannot be dict (NoSQL injection attempt)")
    if isinstance(obj_id, ObjectId):
        return obj_id
    try:
        return ObjectId(obj_id)
    except (InvalidId, TypeError):
        raise ValueError("Invalid ObjectId format")


def ensure_cohort_access(cohort: Dict, user: Dict, message: str) -> None:
    """Tutors may only act on cohorts assigned to them; unassigned cohorts are open"""
    if user.get("role") == ROLE_SUPER_ADMIN or not cohort.get("tutorId"):
        return
    if str(cohort["tutorId"]) != str(user.get("_id")):
        raise PermissionDeniedError(message)
