"""School Onboarding Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List, Optional

from vidyamrit.config.settings import (
    ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN, ONBOARDING_PHASES, ONBOARDING_STATUSES,
    DEFAULT_STABILIZATION_DAYS, DEFAULT_DEADLINE_WINDOW_DAYS, MAX_DEADLINE_WINDOW_DAYS
)
from vidyamrit.exceptions.exceptions import DuplicateRecordError, NotFoundError, PermissionDeniedError
from vidyamrit.logging_config.log_config import user_message
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.onboarding.onboarding_records import (
    find_subdocument, build_task, build_milestone, build_training_session, update_attendance,
    build_support_ticket, update_support_ticket, build_feedback, average_satisfaction,
    get_blocked_tasks, get_upcoming_deadlines, id_list
)
from vidyamrit.utils.onboarding.task_state_machine import update_task_progress, complete_task, complete_milestone
from vidyamrit.utils.pagination.pagination_utils import build_pagination_meta
from vidyamrit.utils.progress.onboarding_progress import refresh_onboarding
from vidyamrit.utils.report.onboarding_report import generate_onboarding_report
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import now_ist
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

# Fields a client may overwrite directly; progress fields are always derived
UPDATABLE_FIELDS = (
    "schoolContacts", "successCriteria", "qualityGates", "systemSetups", "communications",
    "risks", "kpis", "postLaunchSupport", "lessonsLearned", "stabilizationPeriod"
)
DATE_FIELDS = ("plannedEndDate", "goLiveDate")
SORTABLE_FIELDS = {"createdAt", "updatedAt", "startDate", "plannedEndDate", "overallProgress", "status", "currentPhase"}


class OnboardingService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _load(self, onboarding_id: str) -> Dict:
        onboarding = self.repo_factory.get_onboarding_repo().find_by_id(onboarding_id)
        if not onboarding:
            raise NotFoundError("School onboarding not found")
        return onboarding

    def _save(self, onboarding: Dict, message: str) -> Dict:
        """Recompute derived fields and write the whole aggregate back"""
        refresh_onboarding(onboarding, now_ist())
        self.repo_factory.get_onboarding_repo().replace(onboarding)
        return sanitize_mongo_document({"message": message, "onboarding": onboarding})

    def _school_filter(self, user: Dict, query: Dict) -> Dict:
        if user.get("role") == ROLE_SCHOOL_ADMIN and user.get("schoolId"):
            query["schoolId"] = user["schoolId"]
        return query

    def create_onboarding(self, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "schoolId", "projectManager", "plannedEndDate")
        school_id = validate_object_id(data["schoolId"])
        project_manager = validate_object_id(data["projectManager"])
        team = id_list(data.get("onboardingTeam"), "onboardingTeam")

        if not self.repo_factory.get_school_repo().find_by_id(school_id):
            raise NotFoundError("School not found")

        onboarding_repo = self.repo_factory.get_onboarding_repo()
        if onboarding_repo.find_by_school(school_id):
            raise DuplicateRecordError("Onboarding already exists for this school")

        members = set(team) | {project_manager}
        if len(self.repo_factory.get_user_repo().find_by_ids(list(members))) != len(members):
            raise NotFoundError("One or more team members not found")

        now = now_ist()
        onboarding = {
            "schoolId": school_id,
            "onboardingCode": None,
            "initiatedBy": user["_id"],
            "projectManager": project_manager,
            "onboardingTeam": team,
            "schoolContacts": data.get("schoolContacts") or [],
            "status": "not_started",
            "startDate": now,
            "plannedEndDate": ValidationUtils.parse_date(data["plannedEndDate"], "plannedEndDate"),
            "actualEndDate": None,
            "currentPhase": ONBOARDING_PHASES[0],
            "tasks": [build_task(task) for task in data.get("tasks") or []],
            "milestones": [build_milestone(milestone) for milestone in data.get("milestones") or []],
            "qualityGates": [],
            "trainingSessions": [],
            "systemSetups": [],
            "supportTickets": [],
            "overallProgress": 0,
            "phaseProgress": [],
            "communications": [],
            "risks": [],
            "successCriteria": data.get("successCriteria") or [],
            "kpis": [],
            "goLiveDate": None,
            "stabilizationPeriod": DEFAULT_STABILIZATION_DAYS,
            "postLaunchSupport": {},
            "schoolFeedback": [],
            "overallSatisfaction": None,
            "lessonsLearned": [],
            "createdAt": now,
        }
        refresh_onboarding(onboarding, now)
        onboarding_repo.insert(onboarding)
        logger.info(user_message(user.get("email"), f"Onboarding {onboarding['onboardingCode']} created"))
        return sanitize_mongo_document({"message": "School onboarding created successfully", "onboarding": onboarding})

    def get_onboardings(self, user: Dict, filters: Dict, page: int, limit: int) -> Dict:
        query = {}
        if filters.get("schoolId"):
            query["schoolId"] = validate_object_id(filters["schoolId"])
        if filters.get("status"):
            query["status"] = ValidationUtils.validate_choice(filters["status"], ONBOARDING_STATUSES, "status")
        if filters.get("currentPhase"):
            query["currentPhase"] = ValidationUtils.validate_choice(filters["currentPhase"], ONBOARDING_PHASES, "currentPhase")
        if filters.get("projectManager"):
            query["projectManager"] = validate_object_id(filters["projectManager"])
        self._school_filter(user, query)

        sort_by = filters.get("sortBy") or "createdAt"
        if sort_by not in SORTABLE_FIELDS:
            sort_by = "createdAt"
        sort_order = 1 if filters.get("sortOrder") == "asc" else -1

        onboarding_repo = self.repo_factory.get_onboarding_repo()
        onboardings = onboarding_repo.find_many(
            query, sort=[(sort_by, sort_order)], skip=(page - 1) * limit, limit=limit
        )
        return sanitize_mongo_document({
            "onboardings": onboardings,
            "pagination": build_pagination_meta(onboarding_repo.count(query), page, limit),
        })

    def get_onboarding(self, onboarding_id: str, user: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        if user.get("role") == ROLE_SCHOOL_ADMIN and user.get("schoolId") \
                and onboarding.get("schoolId") != user["schoolId"]:
            raise PermissionDeniedError("Access denied")
        return sanitize_mongo_document(onboarding)

    def update_onboarding(self, onboarding_id: str, data: Dict, user: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        is_member = user["_id"] in onboarding.get("onboardingTeam", []) or user["_id"] == onboarding.get("projectManager")
        if user.get("role") != ROLE_SUPER_ADMIN and not is_member:
            raise PermissionDeniedError("Access denied")

        if "status" in data:
            onboarding["status"] = ValidationUtils.validate_choice(data["status"], ONBOARDING_STATUSES, "status")
        if "currentPhase" in data:
            onboarding["currentPhase"] = ValidationUtils.validate_choice(data["currentPhase"], ONBOARDING_PHASES, "currentPhase")
        if data.get("projectManager"):
            onboarding["projectManager"] = validate_object_id(data["projectManager"])
        if "onboardingTeam" in data:
            onboarding["onboardingTeam"] = id_list(data["onboardingTeam"], "onboardingTeam")
        for field in DATE_FIELDS:
            if field in data:
                onboarding[field] = ValidationUtils.parse_date(data[field], field)
        for field in UPDATABLE_FIELDS:
            if field in data:
                onboarding[field] = data[field]

        return self._save(onboarding, "School onboarding updated successfully")

    def delete_onboarding(self, onboarding_id: str) -> Dict:
        onboarding = self._load(onboarding_id)
        self.repo_factory.get_onboarding_repo().delete(onboarding["_id"])
        logger.info(f"Onboarding {onboarding.get('onboardingCode')} deleted")
        return {"message": "School onboarding deleted successfully"}

    def get_statistics(self, user: Dict, filters: Dict) -> Dict:
        query = {}
        if filters.get("schoolId"):
            query["schoolId"] = validate_object_id(filters["schoolId"])
        date_range = {}
        if filters.get("dateFrom"):
            date_range["$gte"] = ValidationUtils.parse_date(filters["dateFrom"], "dateFrom")
        if filters.get("dateTo"):
            date_range["$lte"] = ValidationUtils.parse_date(filters["dateTo"], "dateTo")
        if date_range:
            query["createdAt"] = date_range
        self._school_filter(user, query)

        onboardings = self.repo_factory.get_onboarding_repo().find_many(query)
        statuses = [onboarding.get("status") for onboarding in onboardings]
        satisfaction = [o["overallSatisfaction"] for o in onboardings if o.get("overallSatisfaction") is not None]

        phase_counts: Dict[str, int] = {}
        for onboarding in onboardings:
            phase = onboarding.get("currentPhase")
            phase_counts[phase] = phase_counts.get(phase, 0) + 1

        return {
            "statistics": {
                "totalOnboardings": len(onboardings),
                "notStartedOnboardings": statuses.count("not_started"),
                "inProgressOnboardings": statuses.count("in_progress"),
                "completedOnboardings": statuses.count("completed"),
                "onHoldOnboardings": statuses.count("on_hold"),
                "averageProgress": (
                    sum(o.get("overallProgress", 0) for o in onboardings) / len(onboardings) if onboardings else 0
                ),
                "averageSatisfaction": sum(satisfaction) / len(satisfaction) if satisfaction else 0,
            },
            "phaseDistribution": [{"phase": phase, "count": count} for phase, count in phase_counts.items()],
        }

    # Tasks

    def add_task(self, onboarding_id: str, data: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        onboarding.setdefault("tasks", []).append(build_task(data))
        return self._save(onboarding, "Onboarding task added successfully")

    def update_task_progress(self, onboarding_id: str, task_id: str, data: Dict, user: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        task = find_subdocument(onboarding.get("tasks"), task_id, "Task")
        update_task_progress(
            task,
            status=data.get("status"),
            completion_percentage=data.get("completionPercentage"),
            comment=data.get("comments"),
            blockers=data.get("blockers"),
            user_id=user["_id"],
        )
        return self._save(onboarding, "Task progress updated successfully")

    def complete_task(self, onboarding_id: str, task_id: str, data: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        task = find_subdocument(onboarding.get("tasks"), task_id, "Task")
        complete_task(task, data.get("evidence"))
        return self._save(onboarding, "Onboarding task completed successfully")

    def get_blocked_tasks(self, onboarding_id: str) -> Dict:
        return sanitize_mongo_document({"blockedTasks": get_blocked_tasks(self._load(onboarding_id))})

    def get_upcoming_deadlines(self, onboarding_id: str, days: Optional[int] = None) -> Dict:
        onboarding = self._load(onboarding_id)
        window = days if days is not None else DEFAULT_DEADLINE_WINDOW_DAYS
        ValidationUtils.validate_number_range(window, "days", 0, MAX_DEADLINE_WINDOW_DAYS)
        return sanitize_mongo_document({"upcomingTasks": get_upcoming_deadlines(onboarding, window)})

    # Milestones

    def add_milestone(self, onboarding_id: str, data: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        onboarding.setdefault("milestones", []).append(build_milestone(data))
        return self._save(onboarding, "Milestone added successfully")

    def complete_milestone(self, onboarding_id: str, milestone_id: str, data: Dict, user: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        milestone = find_subdocument(onboarding.get("milestones"), milestone_id, "Milestone")
        complete_milestone(milestone, user["_id"], data.get("signOffComments"))
        return self._save(onboarding, "Milestone completed successfully")

    # Training

    def schedule_training(self, onboarding_id: str, data: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        onboarding.setdefault("trainingSessions", []).append(build_training_session(data))
        return self._save(onboarding, "Training session scheduled successfully")

    def update_training_attendance(self, onboarding_id: str, session_id: str, data: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        session = find_subdocument(onboarding.get("trainingSessions"), session_id, "Training session")
        update_attendance(session, data)
        return self._save(onboarding, "Training attendance updated successfully")

    # Support

    def create_support_ticket(self, onboarding_id: str, data: Dict, user: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        ticket = build_support_ticket(onboarding, data, user["_id"])
        onboarding.setdefault("supportTickets", []).append(ticket)
        logger.info(user_message(user.get("email"), f"Support ticket {ticket['ticketNumber']} opened"))
        return self._save(onboarding, "Support ticket created successfully")

    def update_support_ticket(self, onboarding_id: str, ticket_id: str, data: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        ticket = find_subdocument(onboarding.get("supportTickets"), ticket_id, "Support ticket")
        update_support_ticket(ticket, data)
        return self._save(onboarding, "Support ticket updated successfully")

    def add_feedback(self, onboarding_id: str, data: Dict, user: Dict) -> Dict:
        onboarding = self._load(onboarding_id)
        feedback: List[Dict] = onboarding.setdefault("schoolFeedback", [])
        feedback.append(build_feedback(data, user["_id"]))
        onboarding["overallSatisfaction"] = average_satisfaction(feedback)
        return self._save(onboarding, "School feedback added successfully")

    def generate_report(self, onboarding_id: str) -> Dict:
        onboarding = self._load(onboarding_id)
        school = self.repo_factory.get_school_repo().find_by_id(onboarding["schoolId"])
        report = generate_onboarding_report(onboarding, school.get("name") if school else None)
        return sanitize_mongo_document({"message": "Onboarding report generated successfully", "report": report})
