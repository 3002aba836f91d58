"""Builders and queries for the records nested inside an onboarding"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from bson import ObjectId

from vidyamrit.config.settings import (
    ONBOARDING_PHASES, TASK_PRIORITIES, TASK_STATUSES, TICKET_CATEGORIES, TICKET_STATUSES,
    TRAINING_TYPES, ATTENDANCE_REGISTRATION_STATUSES
)
from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import now_ist, ensure_aware
from vidyamrit.utils.validation.validation_utils import ValidationUtils


def find_subdocument(items: List[Dict], item_id, label: str) -> Dict:
    """Locate a nested record by its _id or raise NotFoundError"""
    try:
        oid = validate_object_id(item_id)
    except ValueError:
        raise NotFoundError(f"{label} not found")
    for item in items or []:
        if item.get("_id") == oid:
            return item
    raise NotFoundError(f"{label} not found")


def id_list(values, field_name: str) -> List[ObjectId]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValidationError(f"{field_name} must be a list")
    try:
        return [validate_object_id(value) for value in values]
    except ValueError:
        raise ValidationError(f"{field_name} contains an invalid id")


def list_field(data: Dict, field_name: str) -> List:
    """A list-valued request field; missing or null means empty"""
    values = data.get(field_name)
    if values is None:
        return []
    if not isinstance(values, list):
        raise ValidationError(f"{field_name} must be a list")
    return values


def string_list(data: Dict, field_name: str) -> List[str]:
    values = list_field(data, field_name)
    if not all(isinstance(value, str) and value.strip() for value in values):
        raise ValidationError(f"{field_name} must contain non-empty strings")
    return [value.strip() for value in values]


def build_task(data: Dict) -> Dict:
    ValidationUtils.validate_required_fields(data, "title", "description", "phase", "estimatedDuration")
    ValidationUtils.validate_choice(data["phase"], ONBOARDING_PHASES, "phase")
    priority = data.get("priority", "medium")
    ValidationUtils.validate_choice(priority, TASK_PRIORITIES, "priority")
    status = data.get("status", "pending")
    ValidationUtils.validate_choice(status, TASK_STATUSES, "status")
    ValidationUtils.validate_number_range(data["estimatedDuration"], "estimatedDuration", 0)
    completion = data.get("completionPercentage", 0)
    ValidationUtils.validate_number_range(completion, "completionPercentage", 0, 100)

    return {
        "_id": ObjectId(),
        "title": data["title"],
        "description": data["description"],
        "instructions": list_field(data, "instructions"),
        "phase": data["phase"],
        "priority": priority,
        "estimatedDuration": data["estimatedDuration"],
        "dependencies": string_list(data, "dependencies"),
        "assignedTo": id_list(data.get("assignedTo"), "assignedTo"),
        "status": status,
        "startDate": ValidationUtils.parse_date(data.get("startDate"), "startDate"),
        "dueDate": ValidationUtils.parse_date(data.get("dueDate"), "dueDate"),
        "completedDate": None,
        "completionPercentage": completion,
        "completionEvidence": list_field(data, "completionEvidence"),
        "blockers": list_field(data, "blockers"),
        "comments": [],
        "resources": list_field(data, "resources"),
    }


def build_milestone(data: Dict) -> Dict:
    ValidationUtils.validate_required_fields(data, "name", "description", "phase", "targetDate")
    ValidationUtils.validate_choice(data["phase"], ONBOARDING_PHASES, "phase")
    return {
        "_id": ObjectId(),
        "name": data["name"],
        "description": data["description"],
        "phase": data["phase"],
        "targetDate": ValidationUtils.parse_date(data["targetDate"], "targetDate"),
        "completedDate": None,
        "isCompleted": False,
        "completionCriteria": list_field(data, "completionCriteria"),
        "signOffRequired": bool(data.get("signOffRequired", False)),
        "signOffBy": id_list(data.get("signOffBy"), "signOffBy"),
        "signedOffBy": [],
    }


def build_training_session(data: Dict) -> Dict:
    ValidationUtils.validate_required_fields(data, "title", "description", "type", "scheduledDate", "duration")
    ValidationUtils.validate_choice(data["type"], TRAINING_TYPES, "type")
    ValidationUtils.validate_number_range(data["duration"], "duration", 0)
    attendees = []
    for attendee in list_field(data, "attendees"):
        user_id = attendee.get("userId") if isinstance(attendee, dict) else attendee
        attendees.append({
            "userId": id_list([user_id], "attendees")[0],
            "registrationStatus": "registered",
            "completionScore": None,
            "feedback": None,
        })
    return {
        "_id": ObjectId(),
        "title": data["title"],
        "description": data["description"],
        "type": data["type"],
        "scheduledDate": ValidationUtils.parse_date(data["scheduledDate"], "scheduledDate"),
        "duration": data["duration"],
        "trainer": data.get("trainer"),
        "attendees": attendees,
        "materials": list_field(data, "materials"),
        "prerequisites": list_field(data, "prerequisites"),
        "learningObjectives": list_field(data, "learningObjectives"),
        "assessmentRequired": bool(data.get("assessmentRequired", False)),
        "certificationAwarded": bool(data.get("certificationAwarded", False)),
    }


def update_attendance(session: Dict, data: Dict) -> Dict:
    """Update one attendee's registration status, score and feedback"""
    ValidationUtils.validate_required_fields(data, "attendeeId")
    attendee = None
    for entry in session.get("attendees", []):
        if str(entry.get("userId")) == str(data["attendeeId"]):
            attendee = entry
            break
    if attendee is None:
        raise NotFoundError("Attendee not found")

    if "registrationStatus" in data:
        ValidationUtils.validate_choice(data["registrationStatus"], ATTENDANCE_REGISTRATION_STATUSES, "registrationStatus")
        attendee["registrationStatus"] = data["registrationStatus"]
    if data.get("completionScore") is not None:
        ValidationUtils.validate_number_range(data["completionScore"], "completionScore", 0, 100)
        attendee["completionScore"] = data["completionScore"]
    if data.get("feedback") is not None:
        attendee["feedback"] = data["feedback"]
    return attendee


def build_support_ticket(onboarding: Dict, data: Dict, reported_by, now: Optional[datetime] = None) -> Dict:
    ValidationUtils.validate_required_fields(data, "title", "description", "category")
    ValidationUtils.validate_choice(data["category"], TICKET_CATEGORIES, "category")
    priority = data.get("priority", "medium")
    ValidationUtils.validate_choice(priority, TASK_PRIORITIES, "priority")
    number = len(onboarding.get("supportTickets", [])) + 1
    return {
        "_id": ObjectId(),
        "ticketNumber": f"ONBD-{onboarding.get('onboardingCode')}-{number}",
        "title": data["title"],
        "description": data["description"],
        "category": data["category"],
        "priority": priority,
        "status": "open",
        "reportedBy": reported_by,
        "assignedTo": id_list([data["assignedTo"]], "assignedTo")[0] if data.get("assignedTo") else None,
        "createdAt": now or now_ist(),
        "resolvedAt": None,
        "resolution": None,
        "satisfaction": None,
    }


def update_support_ticket(ticket: Dict, data: Dict, now: Optional[datetime] = None) -> Dict:
    if "status" in data:
        ValidationUtils.validate_choice(data["status"], TICKET_STATUSES, "status")
        ticket["status"] = data["status"]
    if data.get("assignedTo"):
        ticket["assignedTo"] = id_list([data["assignedTo"]], "assignedTo")[0]
    if data.get("resolution"):
        ticket["resolution"] = data["resolution"]
        ticket["resolvedAt"] = now or now_ist()
    if data.get("satisfaction") is not None:
        ValidationUtils.validate_number_range(data["satisfaction"], "satisfaction", 1, 5)
        ticket["satisfaction"] = data["satisfaction"]
    return ticket


def build_feedback(data: Dict, provided_by, now: Optional[datetime] = None) -> Dict:
    ValidationUtils.validate_required_fields(data, "category", "rating")
    ValidationUtils.validate_number_range(data["rating"], "rating", 1, 5)
    return {
        "_id": ObjectId(),
        "category": data["category"],
        "rating": data["rating"],
        "comments": data.get("comments"),
        "providedBy": provided_by,
        "providedAt": now or now_ist(),
    }


def average_satisfaction(feedback: List[Dict]) -> Optional[float]:
    ratings = [entry["rating"] for entry in feedback if entry.get("rating") is not None]
    if not ratings:
        return None
    return sum(ratings) / len(ratings)


def check_quality_gates(onboarding: Dict) -> bool:
    """True only when every quality gate has passed"""
    return all(gate.get("overallStatus") == "passed" for gate in onboarding.get("qualityGates", []))


def get_blocked_tasks(onboarding: Dict) -> List[Dict]:
    return [task for task in onboarding.get("tasks", []) if task.get("status") == "blocked"]


def get_upcoming_deadlines(onboarding: Dict, days: int, now: Optional[datetime] = None) -> List[Dict]:
    """Unfinished tasks due within ``days`` from now, overdue ones included"""
    cutoff = (now or now_ist()) + timedelta(days=days)
    upcoming = []
    for task in onboarding.get("tasks", []):
        due = task.get("dueDate")
        if task.get("status") == "completed" or not due:
            continue
        if ensure_aware(due) <= cutoff:
            upcoming.append(task)
    return sorted(upcoming, key=lambda task: ensure_aware(task["dueDate"]))
