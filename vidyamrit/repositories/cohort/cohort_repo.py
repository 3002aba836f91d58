"""Cohort Repository - Data Access Layer (SoC)"""
import re
from typing import Dict, List, Optional

from pymongo import ReturnDocument

from vidyamrit.repositories.core.base_repo import BaseRepo
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import now_ist


class CohortRepo(BaseRepo):
    collection_name = "cohorts"

    def add_student(self, cohort_id, student_id) -> Optional[Dict]:
        """Add a student once; repeated adds leave the list unchanged"""
        return self.collection.find_one_and_update(
            {"_id": validate_object_id(cohort_id)},
            {"$addToSet": {"students": student_id}, "$set": {"updatedAt": now_ist()}},
            return_document=ReturnDocument.AFTER
        )

    def find_default_cohort(self, school_id) -> Optional[Dict]:
        return self.collection.find_one({"schoolId": school_id, "name": re.compile(r"^default", re.IGNORECASE)})

    def find_by_student(self, student_id) -> List[Dict]:
        return list(self.collection.find({"students": student_id}))

    def find_by_tutor(self, tutor_id) -> List[Dict]:
        return list(self.collection.find({"tutorId": tutor_id}).sort("name", 1))
