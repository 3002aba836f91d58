"""Attendance Repository - Data Access Layer (SoC)"""
from datetime import date
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo
from vidyamrit.utils.time.timeutils import to_local_date


class AttendanceRepo(BaseRepo):
    collection_name = "attendance"

    def find_entry(self, student_id, day: date, subject: Optional[str]) -> Optional[Dict]:
        """The record for one student, calendar day and subject"""
        for record in self.collection.find({"student": student_id, "subject": subject}):
            if to_local_date(record.get("date")) == day:
                return record
        return None
