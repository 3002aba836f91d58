"""School Onboarding Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class OnboardingRepo(BaseRepo):
    collection_name = "school_onboardings"

    def find_by_school(self, school_id) -> Optional[Dict]:
        return self.collection.find_one({"schoolId": school_id})
