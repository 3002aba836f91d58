"""Program Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, Optional

from vidyamrit.config.settings import ROLE_SUPER_ADMIN, TIMEFRAME_UNITS, DEFAULT_TIMEFRAME_UNIT
from vidyamrit.exceptions.exceptions import (
    DuplicateRecordError, NotFoundError, PermissionDeniedError, ValidationError
)
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.pagination.pagination_utils import build_paginated_response
from vidyamrit.utils.program.program_levels import (
    normalize_levels, get_level, get_next_level, get_previous_level,
    total_time_to_complete, time_lapse_matrix, is_valid_progression
)
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)


def _level_ref(level: Optional[Dict]) -> Optional[Dict]:
    if not level:
        return None
    return {"levelNumber": level["levelNumber"], "title": level.get("title")}


def _validate_unit(unit: str) -> str:
    if unit not in TIMEFRAME_UNITS:
        raise ValidationError(f"Invalid unit. Must be one of: {', '.join(sorted(TIMEFRAME_UNITS))}")
    return unit


class ProgramService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _get_program(self, program_id: str) -> Dict:
        program = self.repo_factory.get_program_repo().find_by_id(program_id)
        if not program:
            raise NotFoundError("Program not found")
        return program

    def _check_owner(self, program: Dict, user: Dict, action: str) -> None:
        if user.get("role") != ROLE_SUPER_ADMIN and program.get("createdBy") != user.get("_id"):
            raise PermissionDeniedError(f"Not authorized to {action} this program")

    def get_programs(self, subject: Optional[str] = None, is_active: str = "true",
                     include_inactive: str = "false", page: int = 1, limit: int = 10) -> Dict:
        query = {}
        if subject:
            query["subject"] = subject
        if include_inactive != "true":
            query["isActive"] = is_active == "true"

        program_repo = self.repo_factory.get_program_repo()
        programs = program_repo.find_many(
            query, sort=[("subject", 1), ("createdAt", -1)], skip=(page - 1) * limit, limit=limit
        )
        return sanitize_mongo_document(build_paginated_response(programs, program_repo.count(query), page, limit))

    def get_program(self, program_id: str) -> Dict:
        return sanitize_mongo_document(self._get_program(program_id))

    def create_program(self, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "name", "subject", "totalLevels", "levels")
        name = ValidationUtils.validate_non_empty_string(data["name"], "name")
        levels = normalize_levels(data["levels"], data["totalLevels"])

        program_repo = self.repo_factory.get_program_repo()
        if program_repo.find_by_name(name):
            raise DuplicateRecordError("Program with this name already exists")

        program = {
            "name": name,
            "subject": data["subject"],
            "description": (data.get("description") or "").strip(),
            "totalLevels": data["totalLevels"],
            "levels": levels,
            "isActive": True,
            "createdBy": user["_id"],
        }
        program_repo.insert(program)
        logger.info(f"Program created: {name} ({len(levels)} levels)")
        return sanitize_mongo_document(program)

    def update_program(self, program_id: str, data: Dict, user: Dict) -> Dict:
        program = self._get_program(program_id)
        self._check_owner(program, user, "update")

        updates = {}
        if "name" in data:
            name = ValidationUtils.validate_non_empty_string(data["name"], "name")
            other = self.repo_factory.get_program_repo().find_by_name(name)
            if other and other["_id"] != program["_id"]:
                raise DuplicateRecordError("Program with this name already exists")
            updates["name"] = name
        for field in ("subject", "description", "isActive"):
            if field in data:
                updates[field] = data[field]
        if "levels" in data or "totalLevels" in data:
            total_levels = data.get("totalLevels", program["totalLevels"])
            updates["levels"] = normalize_levels(data.get("levels", program["levels"]), total_levels)
            updates["totalLevels"] = total_levels

        updated = self.repo_factory.get_program_repo().update_fields(program["_id"], updates)
        return sanitize_mongo_document(updated)

    def delete_program(self, program_id: str, user: Dict) -> Dict:
        program = self._get_program(program_id)
        self._check_owner(program, user, "delete")
        self.repo_factory.get_program_repo().delete(program["_id"])
        logger.info(f"Program deleted: {program['name']}")
        return {"message": "Program deleted successfully"}

    def toggle_status(self, program_id: str, user: Dict) -> Dict:
        program = self._get_program(program_id)
        self._check_owner(program, user, "update")
        is_active = not program.get("isActive", True)
        self.repo_factory.get_program_repo().update_fields(program["_id"], {"isActive": is_active})
        return {
            "message": f"Program {'activated' if is_active else 'deactivated'} successfully",
            "isActive": is_active,
        }

    def get_time_lapse_matrix(self, program_id: str, unit: str = DEFAULT_TIMEFRAME_UNIT) -> Dict:
        _validate_unit(unit)
        program = self._get_program(program_id)
        return sanitize_mongo_document({
            "programId": program["_id"],
            "programName": program["name"],
            "subject": program["subject"],
            "unit": unit,
            "totalLevels": program["totalLevels"],
            "timeLapseMatrix": time_lapse_matrix(program, unit),
            "levelTitles": [_level_ref(level) for level in program["levels"]],
        })

    def get_time_to_complete(self, program_id: str, from_level: int = 1, to_level: Optional[int] = None,
                             unit: str = DEFAULT_TIMEFRAME_UNIT) -> Dict:
        _validate_unit(unit)
        program = self._get_program(program_id)
        to_level = to_level or program["totalLevels"]
        total = total_time_to_complete(program, from_level, to_level, unit)
        return sanitize_mongo_document({
            "programId": program["_id"],
            "programName": program["name"],
            "fromLevel": from_level,
            "toLevel": to_level,
            "totalTime": total,
            "unit": unit,
            "breakdown": [
                {
                    "levelNumber": level["levelNumber"],
                    "title": level.get("title"),
                    "timeframe": level["timeframe"],
                    "timeframeUnit": level.get("timeframeUnit", DEFAULT_TIMEFRAME_UNIT),
                }
                for level in program["levels"]
                if from_level <= level["levelNumber"] <= to_level
            ],
        })

    def get_level_details(self, program_id: str, level_number: int) -> Dict:
        if level_number < 1:
            raise ValidationError("Invalid level number")
        program = self._get_program(program_id)
        level = get_level(program, level_number)
        if not level:
            raise NotFoundError("Level not found")
        return sanitize_mongo_document({
            "programId": program["_id"],
            "programName": program["name"],
            "level": level,
            "navigation": {
                "nextLevel": _level_ref(get_next_level(program, level_number)),
                "previousLevel": _level_ref(get_previous_level(program, level_number)),
            },
        })

    def validate_progression(self, program_id: str, data: Dict) -> Dict:
        if not data.get("fromLevel") or not data.get("toLevel"):
            raise ValidationError("Both fromLevel and toLevel are required")
        program = self._get_program(program_id)
        is_valid = is_valid_progression(program, data["fromLevel"], data["toLevel"])
        return sanitize_mongo_document({
            "programId": program["_id"],
            "fromLevel": data["fromLevel"],
            "toLevel": data["toLevel"],
            "isValid": is_valid,
            "message": "Level progression is valid" if is_valid else "Level progression is not allowed",
        })
