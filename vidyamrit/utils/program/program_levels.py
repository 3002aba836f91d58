"""Program level validation and timeframe arithmetic"""
import math
from typing import Dict, List, Optional

from vidyamrit.config.settings import (
    DAYS_PER_UNIT, TIMEFRAME_UNITS, DEFAULT_TIMEFRAME_UNIT, MAX_PROGRAM_LEVELS
)
from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.validation.validation_utils import ValidationUtils


def normalize_levels(levels, total_levels) -> List[Dict]:
    """
    Validate a program's level list and fill level defaults.

    Level numbers must run 1..totalLevels without gaps, every level needs a
    title and a timeframe of at least 1, and prerequisites may only point to
    lower levels.
    """
    ValidationUtils.validate_positive_integer(total_levels, "totalLevels")
    if total_levels > MAX_PROGRAM_LEVELS:
        raise ValidationError(f"totalLevels cannot exceed {MAX_PROGRAM_LEVELS}")
    if not isinstance(levels, list) or len(levels) != total_levels:
        raise ValidationError(f"Levels array must contain exactly {total_levels} levels")

    normalized = []
    for level in levels:
        if not isinstance(level, dict):
            raise ValidationError("Invalid levels configuration")
        ValidationUtils.validate_required_fields(level, "levelNumber", "title", "timeframe")
        unit = level.get("timeframeUnit", DEFAULT_TIMEFRAME_UNIT)
        ValidationUtils.validate_choice(unit, TIMEFRAME_UNITS, "timeframeUnit")
        ValidationUtils.validate_number_range(level["timeframe"], "timeframe", 1)
        prerequisites = level.get("prerequisites") or []
        if any(prereq >= level["levelNumber"] for prereq in prerequisites):
            raise ValidationError("Prerequisite cannot be the same or a higher level")
        normalized.append({
            **level,
            "title": str(level["title"]).strip(),
            "timeframeUnit": unit,
            "prerequisites": prerequisites,
            "objectives": level.get("objectives", []),
        })

    numbers = sorted(level["levelNumber"] for level in normalized)
    if numbers != list(range(1, total_levels + 1)):
        raise ValidationError("Level numbers must be sequential starting from 1")

    return sorted(normalized, key=lambda level: level["levelNumber"])


def get_level(program: Dict, level_number: int) -> Optional[Dict]:
    for level in program.get("levels") or []:
        if level.get("levelNumber") == level_number:
            return level
    return None


def get_next_level(program: Dict, current_level: int) -> Optional[Dict]:
    if current_level >= program.get("totalLevels", 0):
        return None
    return get_level(program, current_level + 1)


def get_previous_level(program: Dict, current_level: int) -> Optional[Dict]:
    if current_level <= 1:
        return None
    return get_level(program, current_level - 1)


def convert_timeframe(value: float, from_unit: str, to_unit: str) -> float:
    """Convert through days; weeks and months round up"""
    if from_unit == to_unit:
        return value
    days = value * DAYS_PER_UNIT.get(from_unit, 1)
    if to_unit == "days":
        return days
    return math.ceil(days / DAYS_PER_UNIT[to_unit])


def total_time_to_complete(program: Dict, from_level: int = 1, to_level: Optional[int] = None,
                           unit: str = DEFAULT_TIMEFRAME_UNIT) -> float:
    total_levels = program.get("totalLevels", 0)
    end_level = to_level or total_levels
    if from_level < 1 or end_level > total_levels or from_level > end_level:
        raise ValidationError("Invalid level range")

    total = 0
    for number in range(from_level, end_level + 1):
        level = get_level(program, number)
        if level:
            total += convert_timeframe(level["timeframe"], level.get("timeframeUnit", DEFAULT_TIMEFRAME_UNIT), unit)
    return total


def time_lapse_matrix(program: Dict, unit: str = DEFAULT_TIMEFRAME_UNIT) -> List[List[float]]:
    """matrix[from-1][to-1] is the time from the start of ``from`` to the end of ``to``"""
    total_levels = program.get("totalLevels", 0)
    matrix = []
    for start in range(1, total_levels + 1):
        row = []
        for end in range(1, total_levels + 1):
            row.append(0 if end < start else total_time_to_complete(program, start, end, unit))
        matrix.append(row)
    return matrix


def is_valid_progression(program: Dict, from_level: int, to_level: int) -> bool:
    """Cohorts move up exactly one level at a time"""
    if to_level != from_level + 1:
        return False
    target = get_level(program, to_level)
    if not target:
        return False
    return all(prereq < to_level for prereq in target.get("prerequisites") or [])
