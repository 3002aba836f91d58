"""Volunteer Request Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class VolunteerRepo(BaseRepo):
    collection_name = "volunteer_requests"

    def find_active_by_email(self, email: str) -> Optional[Dict]:
        """Pending or approved request for the email, if any"""
        return self.collection.find_one({"email": email, "status": {"$in": ["pending", "approved"]}})
