"""Enhanced Student Profile Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List, Optional

from bson import ObjectId

from vidyamrit.config.settings import (
    ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN, PROFILE_STATUSES, STUDENT_LEVELS,
    GOAL_STATUSES, BEHAVIOR_TYPES, REPORT_TYPES
)
from vidyamrit.exceptions.exceptions import DuplicateRecordError, NotFoundError, PermissionDeniedError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.onboarding.onboarding_records import find_subdocument
from vidyamrit.utils.pagination.pagination_utils import build_pagination_meta
from vidyamrit.utils.report.student_report import generate_student_report
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.student.profile_metrics import (
    default_performance_metrics, refresh_performance_metrics, calculate_gpa,
    attendance_overview, behavioral_summary, upcoming_goals, profile_statistics
)
from vidyamrit.utils.time.timeutils import now_ist
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = "Enhanced student profile not found"

DEFAULT_LEARNING_PREFERENCES = {
    "learningStyle": "multimodal",
    "preferredLanguage": "Hindi",
    "studyTimePreference": "evening",
    "groupVsIndividual": "mixed",
    "motivationFactors": [],
    "challenges": [],
    "strengths": [],
    "interests": [],
    "careerAspirations": [],
}
DEFAULT_HEALTH_INFORMATION = {"allergies": [], "medicalConditions": [], "medications": [], "vaccinations": []}
DEFAULT_PERSONAL_GOALS = {"social": [], "emotional": [], "behavioral": [], "physical": []}
DEFAULT_PRIVACY_SETTINGS = {
    "shareAcademicInfo": True,
    "shareBehavioralInfo": True,
    "shareHealthInfo": False,
    "shareContactInfo": True,
    "allowPhotography": True,
    "allowSocialMedia": False,
    "emergencyContactConsent": True,
}

UPDATABLE_FIELDS = (
    "previousEducation", "parentsGuardians", "familyBackground", "learningPreferences",
    "healthInformation", "specialNeedsSupport", "personalDevelopmentGoals", "privacySettings",
    "transferHistory"
)
SORTABLE_FIELDS = {"createdAt", "updatedAt", "admissionDate", "admissionNumber", "status", "currentLevel"}


def _parse_goals(goals) -> List[Dict]:
    parsed = []
    for goal in goals or []:
        goal = dict(goal)
        if goal.get("status"):
            ValidationUtils.validate_choice(goal["status"], GOAL_STATUSES, "goal status")
        if goal.get("targetDate"):
            goal["targetDate"] = ValidationUtils.parse_date(goal["targetDate"], "targetDate")
        parsed.append(goal)
    return parsed


class ProfileService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _load(self, profile_id: str) -> Dict:
        profile = self.repo_factory.get_profile_repo().find_by_id(profile_id)
        if not profile:
            raise NotFoundError(PROFILE_NOT_FOUND)
        return profile

    def _save(self, profile: Dict, user: Dict, message: str) -> Dict:
        profile["lastUpdatedBy"] = user["_id"]
        profile["updatedAt"] = now_ist()
        self.repo_factory.get_profile_repo().replace(profile)
        return sanitize_mongo_document({"message": message, "profile": profile})

    def _append(self, profile_id: str, field: str, record: Dict, user: Dict, message: str) -> Dict:
        profile = self._load(profile_id)
        profile.setdefault(field, []).append({"_id": ObjectId(), **record})
        return self._save(profile, user, message)

    def _student_scope(self, user: Dict, school_id: Optional[str]) -> Optional[Dict]:
        """studentId filter limiting school admins to their school's students"""
        student_repo = self.repo_factory.get_student_repo()
        if user.get("role") == ROLE_SCHOOL_ADMIN and user.get("schoolId"):
            return {"$in": student_repo.find_ids_by_school(user["schoolId"])}
        if school_id and user.get("role") == ROLE_SUPER_ADMIN:
            return {"$in": student_repo.find_ids_by_school(validate_object_id(school_id))}
        return None

    def create_profile(self, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "studentId", "admissionNumber", "admissionDate")
        student_id = validate_object_id(data["studentId"])
        if not self.repo_factory.get_student_repo().find_by_id(student_id):
            raise NotFoundError("Student not found")

        profile_repo = self.repo_factory.get_profile_repo()
        if profile_repo.find_by_student(student_id):
            raise DuplicateRecordError("Enhanced profile already exists for this student")
        if profile_repo.find_by_admission_number(data["admissionNumber"]):
            raise DuplicateRecordError("Admission number already in use")

        status = data.get("status", "active")
        ValidationUtils.validate_choice(status, PROFILE_STATUSES, "status")
        current_level = data.get("currentLevel", "beginner")
        ValidationUtils.validate_choice(current_level, STUDENT_LEVELS, "currentLevel")

        goals = data.get("academicGoals") or {}
        now = now_ist()
        profile = {
            "studentId": student_id,
            "status": status,
            "admissionNumber": data["admissionNumber"],
            "admissionDate": ValidationUtils.parse_date(data["admissionDate"], "admissionDate"),
            "previousEducation": data.get("previousEducation"),
            "parentsGuardians": data.get("parentsGuardians") or [],
            "familyBackground": data.get("familyBackground"),
            "academicRecords": [],
            "currentLevel": current_level,
            "learningPreferences": {**DEFAULT_LEARNING_PREFERENCES, **(data.get("learningPreferences") or {})},
            "assessmentHistory": [],
            "healthInformation": {**DEFAULT_HEALTH_INFORMATION, **(data.get("healthInformation") or {})},
            "specialNeedsSupport": data.get("specialNeedsSupport"),
            "extracurricularActivities": [],
            "behavioralRecords": [],
            "communicationLogs": [],
            "transferHistory": [],
            "academicGoals": {
                "shortTerm": _parse_goals(goals.get("shortTerm")),
                "longTerm": _parse_goals(goals.get("longTerm")),
            },
            "personalDevelopmentGoals": {**DEFAULT_PERSONAL_GOALS, **(data.get("personalDevelopmentGoals") or {})},
            "performanceMetrics": default_performance_metrics(now),
            "interventions": [],
            "privacySettings": {**DEFAULT_PRIVACY_SETTINGS, **(data.get("privacySettings") or {})},
            "lastUpdatedBy": user["_id"],
        }
        profile_repo.insert(profile)
        logger.info(f"Enhanced profile created for student {student_id}")
        return sanitize_mongo_document({"message": "Enhanced student profile created successfully", "profile": profile})

    def get_profiles(self, user: Dict, filters: Dict, page: int, limit: int) -> Dict:
        query = {}
        if filters.get("status"):
            query["status"] = filters["status"]
        if filters.get("currentLevel"):
            query["currentLevel"] = filters["currentLevel"]
        if filters.get("learningStyle"):
            query["learningPreferences.learningStyle"] = filters["learningStyle"]
        if filters.get("academicTrend"):
            query["performanceMetrics.academicTrend"] = filters["academicTrend"]
        if filters.get("engagementLevel"):
            query["performanceMetrics.engagementLevel"] = filters["engagementLevel"]
        if filters.get("hasSpecialNeeds") == "true":
            query["specialNeedsSupport.identifiedNeeds"] = {"$ne": ["none"]}
        scope = self._student_scope(user, filters.get("schoolId"))
        if scope is not None:
            query["studentId"] = scope

        sort_by = filters.get("sortBy") or "createdAt"
        if sort_by not in SORTABLE_FIELDS:
            sort_by = "createdAt"
        sort_order = 1 if filters.get("sortOrder") == "asc" else -1

        profile_repo = self.repo_factory.get_profile_repo()
        profiles = profile_repo.find_many(query, sort=[(sort_by, sort_order)], skip=(page - 1) * limit, limit=limit)
        return sanitize_mongo_document({
            "profiles": profiles,
            "pagination": build_pagination_meta(profile_repo.count(query), page, limit),
        })

    def get_statistics(self, user: Dict, filters: Dict) -> Dict:
        query = {}
        date_range = {}
        if filters.get("dateFrom"):
            date_range["$gte"] = ValidationUtils.parse_date(filters["dateFrom"], "dateFrom")
        if filters.get("dateTo"):
            date_range["$lte"] = ValidationUtils.parse_date(filters["dateTo"], "dateTo")
        if date_range:
            query["createdAt"] = date_range
        scope = self._student_scope(user, filters.get("schoolId"))
        if scope is not None:
            query["studentId"] = scope
        return profile_statistics(self.repo_factory.get_profile_repo().find_many(query))

    def get_profile(self, profile_id: str, user: Dict) -> Dict:
        profile = self._load(profile_id)
        if user.get("role") == ROLE_SCHOOL_ADMIN and user.get("schoolId"):
            student = self.repo_factory.get_student_repo().find_by_id(profile["studentId"])
            if student and student.get("school") != user["schoolId"]:
                raise PermissionDeniedError("Access denied")
        return sanitize_mongo_document(profile)

    def update_profile(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        profile = self._load(profile_id)
        if "status" in data:
            profile["status"] = ValidationUtils.validate_choice(data["status"], PROFILE_STATUSES, "status")
        if "currentLevel" in data:
            profile["currentLevel"] = ValidationUtils.validate_choice(data["currentLevel"], STUDENT_LEVELS, "currentLevel")
        if "admissionDate" in data:
            profile["admissionDate"] = ValidationUtils.parse_date(data["admissionDate"], "admissionDate")
        for field in UPDATABLE_FIELDS:
            if field in data:
                profile[field] = data[field]
        return self._save(profile, user, "Enhanced student profile updated successfully")

    def delete_profile(self, profile_id: str) -> Dict:
        if not self.repo_factory.get_profile_repo().delete(profile_id):
            raise NotFoundError(PROFILE_NOT_FOUND)
        return {"message": "Enhanced student profile deleted successfully"}

    # Append-only records

    def add_academic_record(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "academicYear")
        if "overallGPA" in data:
            ValidationUtils.validate_number_range(data["overallGPA"], "overallGPA", 0)
        profile = self._load(profile_id)
        profile.setdefault("academicRecords", []).append({"_id": ObjectId(), **data})
        profile.setdefault("performanceMetrics", default_performance_metrics())["currentGPA"] = \
            calculate_gpa(profile["academicRecords"])
        return self._save(profile, user, "Academic record added successfully")

    def add_assessment(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "date")
        record = {**data, "conductedBy": user["_id"], "date": ValidationUtils.parse_date(data["date"], "date")}
        return self._append(profile_id, "assessmentHistory", record, user, "Assessment record added successfully")

    def add_behavioral_record(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "type", "description")
        ValidationUtils.validate_choice(data["type"], BEHAVIOR_TYPES, "type")
        record = {
            **data,
            "reportedBy": user["_id"],
            "date": ValidationUtils.parse_date(data.get("date"), "date") or now_ist(),
        }
        return self._append(profile_id, "behavioralRecords", record, user, "Behavioral record added successfully")

    def add_communication_log(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "type", "subject")
        record = {**data, "date": ValidationUtils.parse_date(data.get("date"), "date") or now_ist()}
        return self._append(profile_id, "communicationLogs", record, user, "Communication log added successfully")

    def add_extracurricular_activity(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "name", "startDate")
        record = {
            **data,
            "startDate": ValidationUtils.parse_date(data["startDate"], "startDate"),
            "endDate": ValidationUtils.parse_date(data.get("endDate"), "endDate"),
        }
        return self._append(
            profile_id, "extracurricularActivities", record, user, "Extracurricular activity added successfully"
        )

    def add_intervention(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "type", "description", "startDate")
        record = {
            **data,
            "provider": user["_id"],
            "startDate": ValidationUtils.parse_date(data["startDate"], "startDate"),
            "endDate": ValidationUtils.parse_date(data.get("endDate"), "endDate"),
            "progress": [],
        }
        return self._append(profile_id, "interventions", record, user, "Intervention added successfully")

    def update_intervention_progress(self, profile_id: str, intervention_id: str, data: Dict, user: Dict) -> Dict:
        profile = self._load(profile_id)
        intervention = find_subdocument(profile.get("interventions"), intervention_id, "Intervention")
        intervention.setdefault("progress", []).append({
            "date": now_ist(),
            "notes": data.get("notes"),
            "effectiveness": data.get("effectiveness"),
        })
        return self._save(profile, user, "Intervention progress updated successfully")

    def update_academic_goals(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        profile = self._load(profile_id)
        goals = profile.setdefault("academicGoals", {"shortTerm": [], "longTerm": []})
        if data.get("shortTerm"):
            goals["shortTerm"] = _parse_goals(data["shortTerm"])
        if data.get("longTerm"):
            goals["longTerm"] = _parse_goals(data["longTerm"])
        return self._save(profile, user, "Academic goals updated successfully")

    def update_performance_metrics(self, profile_id: str, data: Dict, user: Dict) -> Dict:
        profile = self._load(profile_id)
        refresh_performance_metrics(profile, data)
        return self._save(profile, user, "Performance metrics updated successfully")

    # Read-only projections

    def generate_report(self, profile_id: str, report_type: str = "comprehensive") -> Dict:
        ValidationUtils.validate_choice(report_type, REPORT_TYPES, "type")
        report = generate_student_report(self._load(profile_id), report_type)
        return sanitize_mongo_document({"message": "Student report generated successfully", "report": report})

    def get_upcoming_goals(self, profile_id: str) -> Dict:
        return sanitize_mongo_document({"upcomingGoals": upcoming_goals(self._load(profile_id))})

    def get_attendance_overview(self, profile_id: str) -> Dict:
        profile = self._load(profile_id)
        cohorts = self.repo_factory.get_cohort_repo().find_by_student(profile.get("studentId"))
        return {"attendanceOverview": attendance_overview(profile, cohorts)}

    def get_behavioral_summary(self, profile_id: str) -> Dict:
        return {"behavioralSummary": behavioral_summary(self._load(profile_id))}
