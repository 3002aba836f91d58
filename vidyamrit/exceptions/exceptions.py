"""Custom exceptions - SoC principle"""

class VidyamritError(Exception):
    """Base exception for the Vidyamrit backend"""
    pass

class ValidationError(VidyamritError):
    """Input validation error"""
    pass

class InvalidTransitionError(ValidationError):
    """Task status change not allowed from the current status"""
    pass

class DuplicateRecordError(VidyamritError):
    """Record already exists"""
    pass

class NotFoundError(VidyamritError):
    """Requested record not found"""
    pass

class PermissionDeniedError(VidyamritError):
    """Authenticated user may not perform the action"""
    pass

class RegistrationFailedError(VidyamritError):
    """User registration could not be completed"""
    pass
