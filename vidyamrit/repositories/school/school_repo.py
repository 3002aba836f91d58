"""School Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class SchoolRepo(BaseRepo):
    collection_name = "schools"

    def find_by_udise(self, udise_code: str) -> Optional[Dict]:
        return self.collection.find_one({"udise_code": udise_code})
