"""Consolidated Validation Utilities - Single Source of Truth"""
from typing import Any, Dict, Iterable, Optional
from datetime import datetime

from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.time.timeutils import to_datetime


class ValidationUtils:
    """Unified validation utilities"""

    @staticmethod
    def validate_required_fields(data: Dict, *fields: str) -> None:
        """Validate required fields exist and are not empty"""
        missing = [f for f in fields if data.get(f) in (None, "", [], {})]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    @staticmethod
    def validate_positive_integer(value: Any, field_name: str) -> int:
        """Validate positive integer"""
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValidationError(f"{field_name} must be a positive integer")
        return value

    @staticmethod
    def validate_non_empty_string(value: Any, field_name: str) -> str:
        """Validate non-empty string"""
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field_name} must be a non-empty string")
        return value.strip()

    @staticmethod
    def validate_choice(value: Any, allowed: Iterable[str], field_name: str) -> str:
        """Validate value is one of the allowed enum members"""
        if isinstance(value, (dict, list)) or value not in allowed:
            raise ValidationError(
                f"Invalid {field_name} '{value}'. Allowed: {', '.join(sorted(allowed))}"
            )
        return value

    @staticmethod
    def validate_number_range(value: Any, field_name: str, minimum: float, maximum: Optional[float] = None) -> float:
        """Validate a number lies within [minimum, maximum]"""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"{field_name} must be a number")
        if value < minimum or (maximum is not None and value > maximum):
            if maximum is None:
                raise ValidationError(f"{field_name} must be at least {minimum}")
            raise ValidationError(f"{field_name} must be between {minimum} and {maximum}")
        return value

    @staticmethod
    def parse_date(value: Any, field_name: str = "date") -> Optional[datetime]:
        """Parse request date into an aware datetime"""
        try:
            return to_datetime(value)
        except ValueError:
            raise ValidationError(f"Invalid {field_name}: {value}")
