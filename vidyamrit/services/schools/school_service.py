"""School Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List

from vidyamrit.config.settings import (
    SCHOOL_TYPES, SCHOOL_LEVELS, SCHOOL_BLOCKS, ROLE_SUPER_ADMIN
)
from vidyamrit.exceptions.exceptions import DuplicateRecordError, NotFoundError, PermissionDeniedError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "name", "type", "udise_code", "address", "level", "city", "state",
    "establishedYear", "pinCode", "pointOfContact", "phone"
)
EDITABLE_FIELDS = REQUIRED_FIELDS + ("block",)


def _validate_school_fields(data: Dict) -> None:
    if "type" in data:
        ValidationUtils.validate_choice(data["type"], SCHOOL_TYPES, "type")
    if "level" in data:
        ValidationUtils.validate_choice(data["level"], SCHOOL_LEVELS, "level")
    if data.get("block"):
        ValidationUtils.validate_choice(data["block"], SCHOOL_BLOCKS, "block")
    if "establishedYear" in data:
        ValidationUtils.validate_positive_integer(data["establishedYear"], "establishedYear")


class SchoolService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def get_schools(self, user: Dict) -> List[Dict]:
        """Super admins see every school; tutors only the school they belong to"""
        school_repo = self.repo_factory.get_school_repo()
        if user.get("role") == ROLE_SUPER_ADMIN:
            schools = school_repo.find_many({}, sort=[("name", 1)])
        elif user.get("schoolId"):
            schools = school_repo.find_many({"_id": user["schoolId"]})
        else:
            raise PermissionDeniedError("No school assigned to user")
        return sanitize_mongo_document(schools)

    def get_school(self, school_id: str) -> Dict:
        school = self.repo_factory.get_school_repo().find_by_id(school_id)
        if not school:
            raise NotFoundError("School not found")
        return sanitize_mongo_document(school)

    def create_school(self, data: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, *REQUIRED_FIELDS)
        _validate_school_fields(data)

        school_repo = self.repo_factory.get_school_repo()
        if school_repo.find_by_udise(data["udise_code"]):
            raise DuplicateRecordError("School with this UDISE code already exists")

        school = {field: data.get(field) for field in EDITABLE_FIELDS if data.get(field) is not None}
        school_repo.insert(school)
        logger.info(f"School created: {school['name']} ({school['udise_code']})")
        return sanitize_mongo_document(school)

    def update_school(self, school_id: str, data: Dict) -> Dict:
        updates = {field: data[field] for field in EDITABLE_FIELDS if field in data}
        _validate_school_fields(updates)

        school_repo = self.repo_factory.get_school_repo()
        if "udise_code" in updates:
            other = school_repo.find_by_udise(updates["udise_code"])
            if other and str(other["_id"]) != str(school_id):
                raise DuplicateRecordError("School with this UDISE code already exists")

        school = school_repo.update_fields(school_id, updates)
        if not school:
            raise NotFoundError("School not found")
        return sanitize_mongo_document(school)

    def delete_school(self, school_id: str) -> Dict:
        # Cohorts, students and onboardings of the school are left in place
        if not self.repo_factory.get_school_repo().delete(school_id):
            raise NotFoundError("School not found")
        logger.info(f"School deleted: {school_id}")
        return {"message": "School deleted successfully"}
