"""Stakeholder view configuration and the dashboard sections built from it"""
from collections import Counter
from typing import Dict, Iterable, List

from vidyamrit.config.settings import VIEW_SECTIONS, STAKEHOLDER_TYPES, PROGRESS_STATUSES
from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.attendance.attendance_records import student_attendance_totals
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.validation.validation_utils import ValidationUtils

ACCESS_LISTS = ("allowedBlocks", "allowedStates")
SCHOOL_FILTER_FIELDS = ("block", "state", "type")


def _string_list(value, field_name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"{field_name} must be a list of strings")
    return value


def normalize_view_config(config) -> Dict:
    """
    Validate a view config and fill defaults.

    Sections missing from the config are disabled. ``access.allowedSchools``
    ids are stored as ObjectIds so they match school documents directly.
    """
    if not isinstance(config, dict) or not isinstance(config.get("sections"), dict) \
            or not isinstance(config.get("access"), dict):
        raise ValidationError("Invalid view configuration: missing sections or access")

    sections = {}
    for name, section in config["sections"].items():
        if name not in VIEW_SECTIONS:
            raise ValidationError(f"Unknown view section '{name}'")
        if not isinstance(section, dict):
            raise ValidationError(f"Section {name} must be an object")
        sections[name] = {**section, "enabled": section.get("enabled") is True}
    for name in VIEW_SECTIONS:
        sections.setdefault(name, {"enabled": False})

    access = config["access"]
    allowed_schools = access.get("allowedSchools") or []
    if not isinstance(allowed_schools, list):
        raise ValidationError("allowedSchools must be a list")
    normalized_access = {"allowedSchools": [validate_object_id(school) for school in allowed_schools]}
    for field in ACCESS_LISTS:
        normalized_access[field] = _string_list(access.get(field), field)
    return {"sections": sections, "access": normalized_access}


def validate_stakeholder(data: Dict) -> Dict:
    """stakeholderType plus customStakeholderType, which only custom views keep"""
    stakeholder = ValidationUtils.validate_choice(data.get("stakeholderType"), STAKEHOLDER_TYPES, "stakeholderType")
    custom = data.get("customStakeholderType") if stakeholder == "custom" else None
    if stakeholder == "custom" and not custom:
        raise ValidationError("customStakeholderType is required for custom views")
    return {"stakeholderType": stakeholder, "customStakeholderType": custom}


def school_query(access: Dict, filters: Dict = None) -> Dict:
    """Schools visible through a view; section filters narrow block, state and type"""
    query = {}
    if access.get("allowedSchools"):
        query["_id"] = {"$in": access["allowedSchools"]}
    if access.get("allowedBlocks"):
        query["block"] = {"$in": access["allowedBlocks"]}
    if access.get("allowedStates"):
        query["state"] = {"$in": access["allowedStates"]}
    for field in SCHOOL_FILTER_FIELDS:
        values = (filters or {}).get(field)
        if values:
            query[field] = {"$in": values}
    return query


def public_view(view: Dict, include_config: bool = True) -> Dict:
    summary = {
        "_id": view["_id"],
        "name": view.get("name"),
        "description": view.get("description"),
        "stakeholderType": view.get("stakeholderType"),
        "customStakeholderType": view.get("customStakeholderType"),
        "createdBy": view.get("createdBy"),
        "viewUser": {
            "email": (view.get("viewUser") or {}).get("email"),
            "isActive": (view.get("viewUser") or {}).get("isActive", False),
        },
        "createdAt": view.get("createdAt"),
        "updatedAt": view.get("updatedAt"),
    }
    if include_config:
        summary["config"] = view.get("config")
    return summary


# ============= DASHBOARD SECTIONS =============

def school_metrics(schools: List[Dict], students: List[Dict], cohorts: List[Dict]) -> Dict:
    student_counts = Counter(str(student.get("school")) for student in students)
    cohort_counts = Counter(str(cohort.get("schoolId")) for cohort in cohorts)
    tutors = {}
    for cohort in cohorts:
        if cohort.get("tutorId"):
            tutors.setdefault(str(cohort.get("schoolId")), set()).add(cohort["tutorId"])

    details = [{
        "schoolId": school["_id"],
        "name": school.get("name"),
        "type": school.get("type"),
        "block": school.get("block") or "N/A",
        "state": school.get("state"),
        "studentCount": student_counts[str(school["_id"])],
        "cohortCount": cohort_counts[str(school["_id"])],
        "tutorCount": len(tutors.get(str(school["_id"]), ())),
    } for school in schools]
    return {
        "total": len(schools),
        "active": sum(1 for detail in details if detail["cohortCount"] > 0),
        "details": details,
    }


def tutor_metrics(tutors: List[Dict], cohorts: List[Dict]) -> Dict:
    cohort_counts = Counter(str(cohort.get("tutorId")) for cohort in cohorts if cohort.get("tutorId"))
    return {
        "total": len(tutors),
        "details": [{
            "tutorId": tutor["_id"],
            "name": tutor.get("name"),
            "email": tutor.get("email"),
            "schoolId": tutor.get("schoolId"),
            "cohortCount": cohort_counts[str(tutor["_id"])],
        } for tutor in tutors],
    }


def student_metrics(students: List[Dict]) -> Dict:
    dropped = sum(1 for student in students if student.get("isArchived"))
    return {"total": len(students), "active": len(students) - dropped, "dropped": dropped}


def _cohort_attendance_rate(cohort: Dict) -> float:
    marks = [entry for entry in cohort.get("attendance") or [] if entry]
    if not marks:
        return 0
    present = sum(1 for entry in marks if entry.get("status") == "present")
    return round(present / len(marks) * 100, 1)


def cohort_metrics(cohorts: List[Dict]) -> Dict:
    levels = [cohort.get("currentLevel") or 1 for cohort in cohorts]
    return {
        "total": len(cohorts),
        "averageLevel": round(sum(levels) / len(levels), 1) if levels else 0,
        "details": [{
            "cohortId": cohort["_id"],
            "name": cohort.get("name"),
            "schoolId": cohort.get("schoolId"),
            "currentLevel": cohort.get("currentLevel") or 1,
            "studentCount": len(cohort.get("students") or []),
            "attendanceRate": _cohort_attendance_rate(cohort),
        } for cohort in cohorts],
    }


def assessment_metrics(cohorts: Iterable[Dict]) -> Dict:
    """Level assessments recorded on cohort progress records"""
    total = passed = 0
    scores = []
    for cohort in cohorts:
        for record in cohort.get("progress") or []:
            for assessment in record.get("assessmentHistory") or []:
                total += 1
                passed += 1 if assessment.get("passed") else 0
                if isinstance(assessment.get("score"), (int, float)):
                    scores.append(assessment["score"])
    return {
        "total": total,
        "passed": passed,
        "failed": total - passed,
        "averageScore": round(sum(scores) / len(scores), 1) if scores else 0,
    }


def progress_metrics(cohorts: Iterable[Dict]) -> Dict:
    by_status = dict.fromkeys(PROGRESS_STATUSES, 0)
    by_level = Counter()
    for cohort in cohorts:
        for record in cohort.get("progress") or []:
            status = record.get("status")
            if status in by_status:
                by_status[status] += 1
            by_level[str(record.get("currentLevel") or 1)] += 1
    return {"byStatus": by_status, "byLevel": dict(sorted(by_level.items()))}


def attendance_metrics(cohorts: List[Dict]) -> Dict:
    present = absent = 0
    for cohort in cohorts:
        for student_id in cohort.get("students") or []:
            totals = student_attendance_totals([cohort], student_id)
            present += totals["presentDays"]
            absent += totals["absentDays"]
    marked = present + absent
    return {
        "presentCount": present,
        "absentCount": absent,
        "attendanceRate": round(present / marked * 100, 1) if marked else 0,
    }
