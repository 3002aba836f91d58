"""Student Repository - Data Access Layer (SoC)"""
from typing import List

from vidyamrit.repositories.core.base_repo import BaseRepo


class StudentRepo(BaseRepo):
    collection_name = "students"

    def roll_number_exists(self, school_id, roll_no: str) -> bool:
        return self.collection.find_one({"school": school_id, "roll_no": roll_no}, {"_id": 1}) is not None

    def find_ids_by_school(self, school_id) -> List:
        return [doc["_id"] for doc in self.collection.find({"school": school_id}, {"_id": 1})]
