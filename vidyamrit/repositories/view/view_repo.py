"""Stakeholder View Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class ViewRepo(BaseRepo):
    collection_name = "views"

    def find_by_uid(self, uid: str) -> Optional[Dict]:
        return self.collection.find_one({"viewUser.uid": uid})

    def find_by_email(self, email: str) -> Optional[Dict]:
        return self.collection.find_one({"viewUser.email": email})
