"""User Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class UserRepo(BaseRepo):
    collection_name = "users"

    def find_by_uid(self, uid: str) -> Optional[Dict]:
        return self.collection.find_one({"uid": uid})

    def find_by_email(self, email: str) -> Optional[Dict]:
        return self.collection.find_one({"email": email})

    def update_by_uid(self, uid: str, fields: Dict) -> bool:
        result = self.collection.update_one({"uid": uid}, {"$set": fields})
        return result.matched_count > 0

    def delete_by_uid(self, uid: str) -> bool:
        return self.collection.delete_one({"uid": uid}).deleted_count > 0
