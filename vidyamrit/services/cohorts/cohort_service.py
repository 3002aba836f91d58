"""Cohort Service - Business Logic Layer (SoC)"""
import logging
from datetime import datetime
from typing import Dict, List

from vidyamrit.config.settings import CohortConfig
from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.assessment.level_assessment import sync_progress_records
from vidyamrit.utils.cohort.cohort_planner import generate_cohort_plan
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.progress.level_progress import calculate_level_progress
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import IST, now_ist, to_local_date
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = ("schoolId", "tutorId", "programId")
MANAGED_FIELDS = {
    "attendance": "attendance is recorded through /api/attendance/cohort",
    "progress": "progress is updated through level assessments and transitions",
}


def _cohort_fields(data: Dict) -> Dict:
    for field, message in MANAGED_FIELDS.items():
        if field in data:
            raise ValidationError(message)
    fields = {}
    if "name" in data:
        fields["name"] = ValidationUtils.validate_non_empty_string(data["name"], "name")
    for field in REFERENCE_FIELDS:
        if field in data:
            fields[field] = validate_object_id(data[field]) if data[field] else None
    if "students" in data:
        if not isinstance(data["students"], list):
            raise ValidationError("students must be a list")
        fields["students"] = [validate_object_id(student) for student in data["students"]]
    if "currentLevel" in data:
        fields["currentLevel"] = ValidationUtils.validate_positive_integer(data["currentLevel"], "currentLevel")
    if "startDate" in data:
        fields["startDate"] = ValidationUtils.parse_date(data["startDate"], "startDate")
    return fields


class CohortService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _get_cohort(self, cohort_id: str) -> Dict:
        cohort = self.repo_factory.get_cohort_repo().find_by_id(cohort_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        return cohort

    def get_cohorts(self, school_id: str = None) -> List[Dict]:
        query = {"schoolId": validate_object_id(school_id)} if school_id else {}
        cohorts = self.repo_factory.get_cohort_repo().find_many(query, sort=[("createdAt", -1)])
        return sanitize_mongo_document(cohorts)

    def get_cohort(self, cohort_id: str) -> Dict:
        return sanitize_mongo_document(self._get_cohort(cohort_id))

    def create_cohort(self, data: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "name", "schoolId")
        now = now_ist()
        cohort = {
            "students": [],
            "currentLevel": 1,
            "attendance": [],
            "holidays": [],
            "tutorId": None,
            "programId": None,
            "startDate": now,
        }
        cohort.update(_cohort_fields(data))
        cohort["timeTracking"] = {"currentLevelStartDate": cohort["startDate"]}
        sync_progress_records(cohort, now)

        self.repo_factory.get_cohort_repo().insert(cohort)
        logger.info(f"Cohort created: {cohort['name']}")
        return sanitize_mongo_document(cohort)

    def update_cohort(self, cohort_id: str, data: Dict) -> Dict:
        cohort = self._get_cohort(cohort_id)
        updates = _cohort_fields(data)
        if updates.get("currentLevel") and updates["currentLevel"] != cohort.get("currentLevel"):
            # Level progress is counted from the day the level changed
            updates["timeTracking.currentLevelStartDate"] = now_ist()
        if "students" in updates:
            merged = {**cohort, **updates}
            if sync_progress_records(merged):
                updates["progress"] = merged["progress"]
        updated = self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], updates)
        return sanitize_mongo_document(updated)

    def _track_progress(self, cohort: Dict) -> Dict:
        """Persist progress records for students added since the last sync"""
        if sync_progress_records(cohort):
            cohort = self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], {"progress": cohort["progress"]})
        return cohort

    def delete_cohort(self, cohort_id: str) -> Dict:
        if not self.repo_factory.get_cohort_repo().delete(cohort_id):
            raise NotFoundError("Cohort not found")
        return {"message": "Cohort deleted successfully"}

    def add_student(self, cohort_id: str, data: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "studentId")
        student_id = validate_object_id(data["studentId"])
        cohort = self.repo_factory.get_cohort_repo().add_student(cohort_id, student_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        cohort = self._track_progress(cohort)
        logger.info(f"Student {student_id} added to cohort {cohort['name']}")
        return sanitize_mongo_document(cohort)

    def add_student_to_default(self, data: Dict) -> Dict:
        """Add a student to the school's default cohort, creating it on first use"""
        ValidationUtils.validate_required_fields(data, "studentId", "schoolId")
        student_id = validate_object_id(data["studentId"])
        school_id = validate_object_id(data["schoolId"])

        cohort_repo = self.repo_factory.get_cohort_repo()
        cohort = cohort_repo.find_default_cohort(school_id)
        if not cohort:
            cohort = self.create_cohort({
                "name": f"{CohortConfig.DEFAULT_NAME_PREFIX} - {now_ist().year}",
                "schoolId": school_id,
                "tutorId": data.get("tutorId"),
            })
            logger.info(f"Created default cohort for school {school_id}")

        cohort = self._track_progress(cohort_repo.add_student(cohort["_id"], student_id))
        return sanitize_mongo_document(cohort)

    def generate_optimal(self, data: Dict) -> Dict:
        if "levels" not in data:
            raise ValidationError("levels is required")
        return {"plan": generate_cohort_plan(data["levels"])}

    def get_assessment_readiness(self, cohort_id: str) -> Dict:
        cohort = self._get_cohort(cohort_id)
        program = None
        if cohort.get("programId"):
            program = self.repo_factory.get_program_repo().find_by_id(cohort["programId"])
        return sanitize_mongo_document({
            "cohortId": cohort["_id"],
            "cohortName": cohort.get("name"),
            "currentLevel": cohort.get("currentLevel") or 1,
            "programId": cohort.get("programId"),
            **calculate_level_progress(cohort, program),
        })

    def toggle_holiday(self, cohort_id: str, data: Dict) -> Dict:
        """Mark a calendar day as a holiday, or clear it when already marked"""
        ValidationUtils.validate_required_fields(data, "date")
        day = to_local_date(ValidationUtils.parse_date(data["date"], "date"))
        cohort = self._get_cohort(cohort_id)

        holidays = cohort.get("holidays") or []
        remaining = [holiday for holiday in holidays if to_local_date(holiday) != day]
        is_holiday = len(remaining) == len(holidays)
        if is_holiday:
            remaining.append(datetime(day.year, day.month, day.day, tzinfo=IST))

        self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], {"holidays": remaining})
        return sanitize_mongo_document({
            "message": "Holiday added" if is_holiday else "Holiday removed",
            "date": day,
            "isHoliday": is_holiday,
            "holidays": sorted(to_local_date(holiday) for holiday in remaining),
        })
