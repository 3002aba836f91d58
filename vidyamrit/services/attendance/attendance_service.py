"""Attendance Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List, Optional, Tuple

from vidyamrit.config.settings import ROLE_SUPER_ADMIN
from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.attendance.attendance_records import (
    attendance_day, record_cohort_attendance, filter_attendance, group_by_date,
    cohort_day_summary, build_attendance_entry, attendance_statistics
)
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.progress.level_progress import level_attendance_dates
from vidyamrit.utils.security.security_utils import ensure_cohort_access, validate_object_id
from vidyamrit.utils.time.timeutils import to_local_date
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)


def _date_range(filters: Dict) -> Tuple[Optional[object], Optional[object]]:
    start = filters.get("startDate")
    end = filters.get("endDate")
    return (attendance_day(start, "startDate") if start else None,
            attendance_day(end, "endDate") if end else None)


class AttendanceService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _get_cohort(self, cohort_id) -> Dict:
        cohort = self.repo_factory.get_cohort_repo().find_by_id(cohort_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        return cohort

    def _students_by_id(self, student_ids: List) -> Dict[str, Dict]:
        students = self.repo_factory.get_student_repo().find_by_ids(student_ids)
        return {str(student["_id"]): {"_id": student["_id"], "name": student.get("name"),
                                      "roll_no": student.get("roll_no")} for student in students}

    # ============= STUDENT ATTENDANCE RECORDS =============

    def get_records(self, filters: Dict) -> List[Dict]:
        query = {}
        if filters.get("studentId"):
            query["student"] = validate_object_id(filters["studentId"])
        if filters.get("schoolId"):
            query["school"] = validate_object_id(filters["schoolId"])
        for field in ("subject", "status"):
            if filters.get(field):
                query[field] = filters[field]

        start, end = _date_range(filters)
        records = self.repo_factory.get_attendance_repo().find_many(query)
        if start or end:
            records = [
                record for record in records
                if (not start or to_local_date(record["date"]) >= start)
                and (not end or to_local_date(record["date"]) <= end)
            ]
        records.sort(key=lambda record: to_local_date(record["date"]), reverse=True)
        return sanitize_mongo_document(records)

    def mark_attendance(self, data: Dict, user: Dict) -> Tuple[Dict, bool]:
        """Create or replace a student's mark for a day and subject; True when created"""
        ValidationUtils.validate_required_fields(data, "studentId", "schoolId", "status")
        day = attendance_day(data.get("date"))
        entry = build_attendance_entry(data, user.get("_id"), day)

        attendance_repo = self.repo_factory.get_attendance_repo()
        existing = attendance_repo.find_entry(entry["student"], day, entry["subject"])
        if existing:
            record = attendance_repo.update_fields(existing["_id"], entry)
            return sanitize_mongo_document(record), False

        record = attendance_repo.insert(entry)
        logger.info(f"Attendance marked for student {entry['student']} on {day.isoformat()}")
        return sanitize_mongo_document(record), True

    def bulk_mark(self, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "schoolId", "attendanceRecords")
        records = data["attendanceRecords"]
        if not isinstance(records, list):
            raise ValidationError("attendanceRecords must be a list")

        results, errors = [], []
        for record in records:
            record = record if isinstance(record, dict) else {}
            try:
                saved, _ = self.mark_attendance({
                    **record,
                    "schoolId": data["schoolId"],
                    "date": record.get("date") or data.get("date"),
                }, user)
                results.append(saved)
            except (ValidationError, ValueError) as e:
                errors.append({"studentId": record.get("studentId"), "error": str(e)})

        logger.info(f"Bulk attendance: {len(results)} saved, {len(errors)} rejected")
        return {"results": results, "errors": errors, "processed": len(results), "failed": len(errors)}

    def get_statistics(self, filters: Dict) -> Dict:
        records = self.get_records(filters)
        return attendance_statistics(records)

    def get_daily_attendance(self, school_id: str, date_value) -> Dict:
        """Every student of a school with their mark for one day, unmarked students included"""
        if not school_id:
            raise ValidationError("schoolId is required")
        school = validate_object_id(school_id)
        day = attendance_day(date_value)

        marks = {}
        for record in self.repo_factory.get_attendance_repo().find_many({"school": school}):
            if to_local_date(record["date"]) == day:
                marks[str(record["student"])] = record

        students = self.repo_factory.get_student_repo().find_many(
            {"school": school, "isArchived": {"$ne": True}}, sort=[("name", 1)]
        )
        rows = []
        for student in students:
            mark = marks.get(str(student["_id"]))
            rows.append({
                "student": {"_id": student["_id"], "name": student.get("name"), "roll_no": student.get("roll_no")},
                "status": mark.get("status") if mark else None,
                "subject": mark.get("subject") if mark else None,
                "attendanceId": mark["_id"] if mark else None,
            })
        return sanitize_mongo_document({"date": day, "students": rows})

    # ============= COHORT ROLL CALLS =============

    def record_cohort_attendance(self, data: Dict, user: Dict) -> Dict:
        """
        Record a roll call for a cohort and refresh its level time tracking.

        ``timeTracking.attendanceDays`` holds the number of distinct teaching
        days with a present mark since the current level started.
        """
        ValidationUtils.validate_required_fields(data, "cohortId", "attendanceRecords")
        cohort = self._get_cohort(data["cohortId"])
        ensure_cohort_access(cohort, user, "You are not authorized to record attendance for this cohort")
        day = attendance_day(data.get("date"))

        results, errors = record_cohort_attendance(cohort, data["attendanceRecords"], day)
        time_tracking = dict(cohort.get("timeTracking") or {})
        time_tracking["attendanceDays"] = len(set(level_attendance_dates(cohort)))

        self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], {
            "attendance": cohort["attendance"],
            "timeTracking": time_tracking,
        })
        logger.info(f"Cohort {cohort.get('name')} attendance for {day.isoformat()}: "
                    f"{len(results)} recorded, {len(errors)} rejected")
        return sanitize_mongo_document({
            "cohortId": cohort["_id"],
            "date": day,
            "results": results,
            "errors": errors,
            "timeTracking": time_tracking,
        })

    def get_cohort_attendance(self, cohort_id: str, filters: Dict) -> Dict:
        cohort = self._get_cohort(cohort_id)
        day = attendance_day(filters["date"]) if filters.get("date") else None
        start, end = _date_range(filters)
        entries = filter_attendance(cohort.get("attendance"), day=day, start=start, end=end)
        students = self._students_by_id(cohort.get("students") or [])

        return sanitize_mongo_document({
            "cohortId": cohort["_id"],
            "cohortName": cohort.get("name"),
            "totalStudents": len(cohort.get("students") or []),
            "attendance": group_by_date(entries, students),
        })

    def get_tutor_summary(self, user: Dict, date_value) -> Dict:
        """Today's (or the given day's) roll call status for each cohort the tutor runs"""
        day = attendance_day(date_value)
        cohort_repo = self.repo_factory.get_cohort_repo()
        if user.get("role") == ROLE_SUPER_ADMIN:
            cohorts = cohort_repo.find_many({}, sort=[("name", 1)])
        else:
            cohorts = cohort_repo.find_by_tutor(user.get("_id"))

        summaries = [{
            "cohortId": cohort["_id"],
            "cohortName": cohort.get("name"),
            "schoolId": cohort.get("schoolId"),
            **cohort_day_summary(cohort, day),
        } for cohort in cohorts]
        return sanitize_mongo_document({"date": day, "cohorts": summaries})
