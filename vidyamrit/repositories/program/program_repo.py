"""Program Repository - Data Access Layer (SoC)"""
from typing import Dict, Optional

from vidyamrit.repositories.core.base_repo import BaseRepo


class ProgramRepo(BaseRepo):
    collection_name = "programs"

    def find_by_name(self, name: str) -> Optional[Dict]:
        return self.collection.find_one({"name": name})
