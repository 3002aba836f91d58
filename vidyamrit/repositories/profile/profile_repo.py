"""Enhanced Student Profile Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class ProfileRepo(BaseRepo):
    collection_name = "enhanced_student_profiles"

    def find_by_student(self, student_id) -> Optional[Dict]:
        return self.collection.find_one({"studentId": student_id})

    def find_by_admission_number(self, admission_number: str) -> Optional[Dict]:
        return self.collection.find_one({"admissionNumber": admission_number})
