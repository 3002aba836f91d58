"""Student Service - Business Logic Layer (SoC)"""
import logging
import random
from typing import Dict, List, Optional

from vidyamrit.config.settings import (
    ROLE_SUPER_ADMIN, ROLL_NUMBER_ATTEMPTS, SUBJECT_LEVEL_MIN, SUBJECT_LEVEL_MAX
)
from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import epoch_millis
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name", "age", "gender", "class", "caste", "mobileNumber", "aadharNumber",
    "contactInfo", "knowledgeLevel", "cohort", "hindi_level", "math_level", "english_level"
)
SUBJECT_LEVEL_FIELDS = ("hindi_level", "math_level", "english_level")


def format_student(student: Dict) -> Dict:
    """Students are stored with ``school``; clients expect ``schoolId``"""
    formatted = dict(student)
    formatted["schoolId"] = formatted.pop("school", None)
    return sanitize_mongo_document(formatted)


def generate_roll_number(school_id) -> str:
    school_part = str(school_id)[-6:]
    time_part = str(epoch_millis())[-6:]
    random_part = f"{random.randint(0, 9999):04d}"
    return f"STU-{school_part}-{time_part}-{random_part}"


def _validate_levels(data: Dict) -> None:
    for field in SUBJECT_LEVEL_FIELDS:
        if field in data:
            ValidationUtils.validate_number_range(data[field], field, SUBJECT_LEVEL_MIN, SUBJECT_LEVEL_MAX)


class StudentService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _school_scope(self, user: Dict, requested_school: Optional[str] = None):
        """School a request is limited to: the user's own unless they are a super admin"""
        if user.get("role") != ROLE_SUPER_ADMIN:
            return user.get("schoolId")
        return validate_object_id(requested_school) if requested_school else None

    def _scoped_query(self, user: Dict, student_id: str, archived: bool) -> Dict:
        query = {"_id": validate_object_id(student_id), "isArchived": True if archived else {"$ne": True}}
        if user.get("role") != ROLE_SUPER_ADMIN:
            query["school"] = user.get("schoolId")
        return query

    def create_student(self, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "name", "age", "gender", "class")
        ValidationUtils.validate_positive_integer(data["age"], "age")
        _validate_levels(data)

        school_id = self._school_scope(user, data.get("schoolId"))
        if not school_id:
            raise ValidationError("School ID is required")

        student_repo = self.repo_factory.get_student_repo()
        roll_no = None
        for _ in range(ROLL_NUMBER_ATTEMPTS):
            candidate = generate_roll_number(school_id)
            if not student_repo.roll_number_exists(school_id, candidate):
                roll_no = candidate
                break
        if roll_no is None:
            raise RuntimeError("Failed to generate unique roll number")

        student = {field: data[field] for field in EDITABLE_FIELDS if data.get(field) is not None}
        student.update({
            "roll_no": roll_no,
            "school": school_id,
            "contactInfo": data.get("contactInfo", []),
            "knowledgeLevel": data.get("knowledgeLevel", []),
            "cohort": data.get("cohort", []),
            "isArchived": False,
        })
        for field in SUBJECT_LEVEL_FIELDS:
            student.setdefault(field, SUBJECT_LEVEL_MIN)

        student_repo.insert(student)
        logger.info(f"Student {roll_no} created in school {school_id}")
        return format_student(student)

    def get_students(self, user: Dict, school_id: Optional[str] = None, archived: bool = False) -> List[Dict]:
        query = {"isArchived": True if archived else {"$ne": True}}
        scope = self._school_scope(user, school_id)
        if scope:
            query["school"] = scope
        students = self.repo_factory.get_student_repo().find_many(query, sort=[("name", 1)])
        return [format_student(student) for student in students]

    def get_student(self, student_id: str, user: Dict) -> Dict:
        student = self.repo_factory.get_student_repo().find_one(self._scoped_query(user, student_id, False))
        if not student:
            raise NotFoundError("Student not found")
        return format_student(student)

    def get_student_levels(self, student_id: str, user: Dict) -> Dict:
        student = self.get_student(student_id, user)
        return {
            "id": student["_id"],
            "name": student.get("name"),
            "roll_no": student.get("roll_no"),
            **{field: student.get(field, SUBJECT_LEVEL_MIN) for field in SUBJECT_LEVEL_FIELDS},
        }

    def update_student(self, student_id: str, data: Dict, user: Dict) -> Dict:
        # roll_no and school are not editable
        updates = {field: data[field] for field in EDITABLE_FIELDS if field in data}
        if "age" in updates:
            ValidationUtils.validate_positive_integer(updates["age"], "age")
        _validate_levels(updates)

        student_repo = self.repo_factory.get_student_repo()
        student = student_repo.find_one(self._scoped_query(user, student_id, False))
        if not student:
            raise NotFoundError("Student not found")
        return format_student(student_repo.update_fields(student["_id"], updates))

    def archive_student(self, student_id: str, user: Dict) -> Dict:
        student_repo = self.repo_factory.get_student_repo()
        student = student_repo.find_one(self._scoped_query(user, student_id, False))
        if not student:
            raise NotFoundError("Student not found")
        student_repo.update_fields(student["_id"], {"isArchived": True})
        logger.info(f"Student {student.get('roll_no')} archived")
        return {"message": "Student archived successfully"}

    def restore_student(self, student_id: str, user: Dict) -> Dict:
        student_repo = self.repo_factory.get_student_repo()
        student = student_repo.find_one(self._scoped_query(user, student_id, True))
        if not student:
            raise NotFoundError("Archived student not found")
        return format_student(student_repo.update_fields(student["_id"], {"isArchived": False}))
