"""Base Repository - Data Access Layer (SoC)"""
from typing import Dict, List, Optional, Tuple

from pymongo import ReturnDocument

from vidyamrit.db.db_utils import get_collection
from vidyamrit.utils.security.security_utils import validate_object_id
from vidyamrit.utils.time.timeutils import now_ist


class BaseRepo:
    collection_name: str = ""

    @property
    def collection(self):
        # Resolved per call so a swapped database is picked up
        return get_collection(self.collection_name)

    def find_by_id(self, doc_id) -> Optional[Dict]:
        return self.collection.find_one({"_id": validate_object_id(doc_id)})

    def find_one(self, query: Dict) -> Optional[Dict]:
        return self.collection.find_one(query)

    def find_by_ids(self, doc_ids: List) -> List[Dict]:
        return list(self.collection.find({"_id": {"$in": list(doc_ids)}}))

    def find_many(self, query: Dict, sort: Optional[List[Tuple[str, int]]] = None,
                  skip: int = 0, limit: int = 0) -> List[Dict]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def count(self, query: Dict) -> int:
        return self.collection.count_documents(query)

    def insert(self, doc: Dict) -> Dict:
        now = now_ist()
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", now)
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def update_fields(self, doc_id, fields: Dict) -> Optional[Dict]:
        """$set fields and return the updated document, None when missing"""
        fields = {**fields, "updatedAt": now_ist()}
        return self.collection.find_one_and_update(
            {"_id": validate_object_id(doc_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )

    def replace(self, doc: Dict) -> bool:
        """Write back a whole document read earlier (last write wins)"""
        result = self.collection.replace_one({"_id": doc["_id"]}, doc)
        return result.matched_count > 0

    def delete(self, doc_id) -> bool:
        result = self.collection.delete_one({"_id": validate_object_id(doc_id)})
        return result.deleted_count > 0
