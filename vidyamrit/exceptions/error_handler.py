"""Centralized error handling and responses - DRY principle"""
import logging
from typing import Tuple

from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from vidyamrit.exceptions.exceptions import (
    ValidationError, DuplicateRecordError, NotFoundError,
    PermissionDeniedError, RegistrationFailedError
)

logger = logging.getLogger(__name__)


# ============= ERROR HANDLERS =============

def handle_service_error(e: Exception) -> Tuple[dict, int]:
    """Centralized error handling for services"""

    if isinstance(e, (ValidationError, DuplicateRecordError)):
        return {"success": False, "message": str(e)}, 400

    elif isinstance(e, NotFoundError):
        return {"success": False, "message": str(e)}, 404

    elif isinstance(e, PermissionDeniedError):
        return {"success": False, "message": str(e)}, 403

    elif isinstance(e, RegistrationFailedError):
        return {"success": False, "message": str(e)}, 500

    elif isinstance(e, DuplicateKeyError):
        return {"success": False, "message": "Duplicate value for a unique field"}, 400

    elif isinstance(e, InvalidId):
        return {"success": False, "message": "Invalid ObjectId format"}, 400

    elif isinstance(e, ValueError):
        return {"success": False, "message": str(e)}, 400

    else:
        sanitized_error = str(e).replace('\n', ' ').replace('\r', ' ')[:500]
        logger.error(f"Unexpected error: {sanitized_error}")
        return {"success": False, "message": "Server error"}, 500
