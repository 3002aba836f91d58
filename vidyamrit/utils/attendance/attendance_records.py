"""Attendance marks: cohort roll calls, per-student records and their summaries"""
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from vidyamrit.config.settings import (
    ATTENDANCE_STATUSES, ATTENDANCE_SUBJECTS, SESSION_TYPES, DEFAULT_SESSION_TYPE, ATTENDANCE_NOTES_MAX_LENGTH
)
from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import IST, now_ist, to_local_date
from vidyamrit.utils.validation.validation_utils import ValidationUtils


def attendance_day(value, field_name: str = "date") -> date:
    """Calendar day of a request date; today when none is given"""
    parsed = ValidationUtils.parse_date(value, field_name)
    return to_local_date(parsed) if parsed else now_ist().date()


def day_start(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=IST)


def _percentage(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole > 0 else 0


# ============= COHORT ROLL CALLS =============

def record_cohort_attendance(cohort: Dict, records, day: date) -> Tuple[List[Dict], List[Dict]]:
    """
    Write one roll call into ``cohort["attendance"]``.

    A student's earlier mark for the same day is replaced. Records for
    students outside the cohort or with an unknown status are skipped and
    reported back as errors.
    """
    if not isinstance(records, list):
        raise ValidationError("attendanceRecords must be a list")

    members = {str(student) for student in cohort.get("students") or []}
    attendance = list(cohort.get("attendance") or [])
    marked_at = day_start(day)
    results, errors = [], []

    for record in records:
        record = record if isinstance(record, dict) else {}
        student = record.get("studentId")
        status = record.get("status")
        if student is None or str(student) not in members:
            errors.append({"studentId": student, "error": "Student not found in this cohort"})
            continue
        if status not in ATTENDANCE_STATUSES:
            errors.append({"studentId": student, "error": f"Invalid status '{status}'"})
            continue

        student_id = validate_object_id(student)
        attendance = [
            entry for entry in attendance
            if not (entry.get("studentId") == student_id and to_local_date(entry.get("date")) == day)
        ]
        attendance.append({"date": marked_at, "studentId": student_id, "status": status})
        results.append({"studentId": student_id, "status": status, "date": marked_at})

    cohort["attendance"] = attendance
    return results, errors


def filter_attendance(attendance: Iterable[Dict], day: Optional[date] = None,
                      start: Optional[date] = None, end: Optional[date] = None) -> List[Dict]:
    """Entries on one day, or within [start, end] when both are given"""
    entries = [entry for entry in attendance or [] if entry and entry.get("date")]
    if day:
        return [entry for entry in entries if to_local_date(entry["date"]) == day]
    if start and end:
        return [entry for entry in entries if start <= to_local_date(entry["date"]) <= end]
    return entries


def group_by_date(entries: Iterable[Dict], students_by_id: Dict[str, Dict]) -> Dict[str, List[Dict]]:
    grouped = defaultdict(list)
    for entry in entries:
        student_id = entry.get("studentId")
        grouped[to_local_date(entry["date"]).isoformat()].append({
            "student": students_by_id.get(str(student_id)) or {"_id": student_id},
            "status": entry.get("status"),
            "date": entry["date"],
        })
    return dict(sorted(grouped.items()))


def cohort_day_summary(cohort: Dict, day: date) -> Dict:
    marks = filter_attendance(cohort.get("attendance"), day=day)
    total = len(cohort.get("students") or [])
    present = sum(1 for entry in marks if entry.get("status") == "present")
    absent = sum(1 for entry in marks if entry.get("status") == "absent")
    return {
        "totalStudents": total,
        "presentCount": present,
        "absentCount": absent,
        "markedCount": len(marks),
        "unmarkedCount": total - len(marks),
        "attendanceRate": _percentage(present, len(marks)),
    }


def student_attendance_totals(cohorts: Iterable[Dict], student_id) -> Dict:
    """Days marked for one student across every cohort roll call they appear in"""
    days = {}
    for cohort in cohorts:
        for entry in cohort.get("attendance") or []:
            if entry and entry.get("studentId") == student_id and entry.get("date"):
                days[(str(cohort.get("_id")), to_local_date(entry["date"]))] = entry.get("status")

    present = sum(1 for status in days.values() if status == "present")
    absent = sum(1 for status in days.values() if status == "absent")
    return {
        "totalDays": len(days),
        "presentDays": present,
        "absentDays": absent,
        "percentage": _percentage(present, len(days)),
    }


# ============= STUDENT ATTENDANCE RECORDS =============

def build_attendance_entry(data: Dict, mentor_id, day: date) -> Dict:
    """Validate a single attendance mark for the attendance collection"""
    ValidationUtils.validate_choice(data.get("status"), ATTENDANCE_STATUSES, "status")
    subject = data.get("subject") or None
    if subject is not None:
        ValidationUtils.validate_choice(subject, ATTENDANCE_SUBJECTS, "subject")
    session_type = data.get("sessionType") or DEFAULT_SESSION_TYPE
    ValidationUtils.validate_choice(session_type, SESSION_TYPES, "sessionType")
    notes = data.get("notes") or ""
    if len(str(notes)) > ATTENDANCE_NOTES_MAX_LENGTH:
        raise ValidationError(f"notes cannot exceed {ATTENDANCE_NOTES_MAX_LENGTH} characters")

    return {
        "student": validate_object_id(data.get("studentId")),
        "school": validate_object_id(data.get("schoolId")),
        "mentor": mentor_id,
        "date": day_start(day),
        "status": data["status"],
        "subject": subject,
        "sessionType": session_type,
        "notes": notes,
    }


def attendance_statistics(records: Iterable[Dict]) -> Dict:
    """Counts per status overall and per student, with each student's present percentage"""
    overall = defaultdict(int)
    per_student = {}
    for record in records:
        status = record.get("status")
        overall[status] += 1
        counts = per_student.setdefault(str(record.get("student")), {
            "_id": record.get("student"), "present": 0, "absent": 0, "exam": 0,
        })
        if status in ATTENDANCE_STATUSES:
            counts[status] += 1

    student_stats = []
    for counts in per_student.values():
        total = counts["present"] + counts["absent"] + counts["exam"]
        student_stats.append({
            **counts,
            "totalDays": total,
            "attendancePercentage": _percentage(counts["present"], total),
        })
    return {
        "overallStats": [{"_id": status, "count": count} for status, count in sorted(overall.items(), key=lambda item: str(item[0]))],
        "studentStats": student_stats,
    }
