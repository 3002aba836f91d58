"""Student progress flag service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, Optional

from vidyamrit.config.settings import (
    ROLE_SUPER_ADMIN, PROGRESS_SUBJECTS, PROGRESS_FLAGS, DEFAULT_TREND_DAYS, MAX_DEADLINE_WINDOW_DAYS
)
from vidyamrit.exceptions.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.progress.progress_flags import (
    current_flags, validate_flag_update, apply_flag, progress_statistics, trend_entries
)
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)


def _same_school(student: Dict, user: Dict) -> bool:
    return user.get("role") == ROLE_SUPER_ADMIN or str(student.get("school")) == str(user.get("schoolId"))


class ProgressService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _load(self, student_id, user: Dict) -> Dict:
        student = self.repo_factory.get_student_repo().find_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        if not _same_school(student, user):
            raise PermissionDeniedError("Access denied")
        return student

    def _save_flags(self, student: Dict) -> Dict:
        return self.repo_factory.get_student_repo().update_fields(student["_id"], {
            "currentProgressFlags": student["currentProgressFlags"],
            "progressHistory": student["progressHistory"],
        })

    def update_flag(self, student_id: str, data: Dict, user: Dict) -> Dict:
        subject, flag, reason = validate_flag_update(data)
        student = self._load(student_id, user)
        apply_flag(student, subject, flag, reason, user.get("_id"))
        updated = self._save_flags(student)
        logger.info(f"Progress flag for student {student['_id']} set to {flag} in {subject}")
        return sanitize_mongo_document({"message": "Progress flag updated successfully", "student": updated})

    def get_student_progress(self, student_id: str, user: Dict, include_history: bool) -> Dict:
        student = self._load(student_id, user)
        progress = {
            "studentId": student["_id"],
            "name": student.get("name"),
            "class": student.get("class"),
            "schoolId": student.get("school"),
            "currentProgressFlags": current_flags(student),
            "lastAssessmentDate": student.get("lastAssessmentDate"),
            "totalAssessments": student.get("totalAssessments") or 0,
            "averagePerformance": student.get("averagePerformance") or 0,
            "levels": {subject: student.get(f"{subject}_level") for subject in PROGRESS_SUBJECTS},
        }
        if include_history:
            progress["progressHistory"] = student.get("progressHistory") or []
        return sanitize_mongo_document(progress)

    def get_statistics(self, user: Dict, filters: Dict) -> Dict:
        """Flag counts per subject plus each student's worst-case overall flag"""
        query = {"isArchived": {"$ne": True}}
        if user.get("role") != ROLE_SUPER_ADMIN:
            query["school"] = user.get("schoolId")
        elif filters.get("schoolId"):
            query["school"] = validate_object_id(filters["schoolId"])

        subject, flag = filters.get("subject"), filters.get("flag")
        students = self.repo_factory.get_student_repo().find_many(query)
        if subject and flag:
            ValidationUtils.validate_choice(subject, PROGRESS_SUBJECTS, "subject")
            ValidationUtils.validate_choice(flag, PROGRESS_FLAGS, "flag")
            students = [student for student in students if current_flags(student)[subject] == flag]

        result = {"statistics": progress_statistics(students)}
        if subject and flag:
            result["students"] = [{
                "_id": student["_id"],
                "name": student.get("name"),
                "class": student.get("class"),
                "schoolId": student.get("school"),
                "flags": current_flags(student),
            } for student in students]
        return sanitize_mongo_document(result)

    def get_trends(self, user: Dict, student_id: Optional[str], subject: Optional[str],
                   days: Optional[int]) -> Dict:
        if not student_id:
            raise ValidationError("Student ID is required")
        window = days if days is not None else DEFAULT_TREND_DAYS
        ValidationUtils.validate_number_range(window, "days", 0, MAX_DEADLINE_WINDOW_DAYS)
        student = self._load(student_id, user)
        return sanitize_mongo_document({
            "studentId": student["_id"],
            "subject": subject or "all",
            "period": f"{window} days",
            "currentFlags": current_flags(student),
            "trends": trend_entries(student.get("progressHistory"), window, subject),
        })

    def bulk_update(self, data: Dict, user: Dict) -> Dict:
        updates = data.get("updates")
        if not isinstance(updates, list) or not updates:
            raise ValidationError("Updates array is required")

        results = {"successful": 0, "failed": 0, "errors": []}
        for update in updates:
            update = update if isinstance(update, dict) else {}
            student_id = update.get("studentId")
            try:
                if not student_id:
                    raise ValidationError(f"Missing required fields for student {student_id}")
                subject, flag, reason = validate_flag_update(update)
                student = self._load(student_id, user)
                apply_flag(student, subject, flag, reason, user.get("_id"))
                self._save_flags(student)
                results["successful"] += 1
            except (ValidationError, NotFoundError, PermissionDeniedError, ValueError) as e:
                results["failed"] += 1
                results["errors"].append(f"Student {student_id}: {e}")

        logger.info(f"Bulk progress update: {results['successful']} updated, {results['failed']} failed")
        return {"message": "Bulk update completed", "results": results}
