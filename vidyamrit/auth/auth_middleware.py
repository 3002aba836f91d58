import logging
from functools import wraps

from flask import g, request
from firebase_admin import auth as firebase_auth

from vidyamrit.auth import firebase_client
from vidyamrit.config.settings import ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN, ROLE_TUTOR
from vidyamrit.repositories.core.repository_factory import RepositoryFactory

logger = logging.getLogger(__name__)


def _auth_error(message, code, status):
    return {"success": False, "message": message, "error": code}, status


def _bearer_token():
    header = request.headers.get("Authorization", "")
    parts = header.split(" ")
    if len(parts) == 2 and parts[0] == "Bearer" and parts[1]:
        return parts[1]
    return None


def authenticate_request():
    """
    Resolve the caller from the Bearer Firebase ID token.

    Returns None and stores the user on ``g.current_user`` on success,
    otherwise the error response to send back.
    """
    token = _bearer_token()
    if not token:
        return _auth_error("No token provided", "NO_AUTH_HEADER", 401)

    try:
        decoded = firebase_client.get_auth_client().verify_id_token(token)
    except firebase_auth.ExpiredIdTokenError:
        return _auth_error("Token has expired", "TOKEN_EXPIRED", 403)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        return _auth_error("Invalid token", "INVALID_TOKEN", 403)

    user = RepositoryFactory.get_user_repo().find_by_uid(decoded.get("uid"))
    if not user:
        return _auth_error("User not found in database", "USER_NOT_FOUND", 403)

    g.current_user = user
    return None


def token_required(f):
    """Decorator to require a verified Firebase token for API endpoints"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        error = authenticate_request()
        if error:
            return error
        return f(*args, **kwargs)
    return decorated_function


def role_required(*allowed_roles):
    """Decorator to require specific roles for API endpoints"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            error = authenticate_request()
            if error:
                return error

            user = g.get("current_user")
            if not user:
                return _auth_error("Unauthorized - No user found", "UNAUTHORIZED", 401)
            if user.get("role") not in allowed_roles:
                return _auth_error("Forbidden - Insufficient permissions", "INSUFFICIENT_PERMISSIONS", 403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def get_current_user():
    return g.get("current_user")


# Role-specific decorators
def super_admin_required(f):
    """Decorator for super-admin-only endpoints"""
    return role_required(ROLE_SUPER_ADMIN)(f)


def admin_required(f):
    """Decorator for endpoints open to super and school admins"""
    return role_required(ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN)(f)


def staff_required(f):
    """Decorator for endpoints open to admins and tutors"""
    return role_required(ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN, ROLE_TUTOR)(f)
