"""Volunteer Request Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List, Optional

from vidyamrit.config.settings import (
    VOLUNTEER_REQUIRED_FIELDS, VOLUNTEER_STATUSES, DEFAULT_REJECTION_REASON
)
from vidyamrit.exceptions.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from vidyamrit.logging_config.log_config import user_message
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.time.timeutils import now_ist
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = ["name", "email", "phoneNumber", "city", "state", "pincode", "education", "experience", "motivation"]


def format_request(request: Dict, *extra_fields: str) -> Dict:
    formatted = {"id": request["_id"]}
    formatted.update({field: request.get(field) for field in PUBLIC_FIELDS})
    formatted.update({field: request.get(field) for field in extra_fields})
    formatted["createdAt"] = request.get("createdAt")
    return sanitize_mongo_document(formatted)


class VolunteerService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def submit_request(self, data: Dict) -> Dict:
        missing = [field for field in VOLUNTEER_REQUIRED_FIELDS if not data.get(field)]
        if missing:
            # The message always lists every required field
            raise ValidationError(f"Missing required fields: {', '.join(VOLUNTEER_REQUIRED_FIELDS)}")

        email = str(data["email"]).strip().lower()
        volunteer_repo = self.repo_factory.get_volunteer_repo()
        if volunteer_repo.find_active_by_email(email):
            raise DuplicateRecordError("A volunteer request with this email already exists")

        request = {field: data.get(field) for field in VOLUNTEER_REQUIRED_FIELDS}
        request.update({
            "email": email,
            "experience": data.get("experience") or "",
            "motivation": data.get("motivation") or "",
            "status": "pending",
            "reviewedBy": None,
            "reviewedAt": None,
            "rejectionReason": None,
        })
        volunteer_repo.insert(request)
        logger.info(user_message(email, "Volunteer request submitted"))

        return sanitize_mongo_document({
            "message": "Volunteer request submitted successfully. You will be notified by email when reviewed.",
            "requestId": request["_id"],
        })

    def get_requests(self, status: Optional[str] = None) -> List[Dict]:
        query = {}
        if status:
            ValidationUtils.validate_choice(status, VOLUNTEER_STATUSES, "status")
            query["status"] = status
        requests = self.repo_factory.get_volunteer_repo().find_many(query, sort=[("createdAt", -1)])
        return [
            format_request(request, "status", "reviewedBy", "reviewedAt", "rejectionReason", "updatedAt")
            for request in requests
        ]

    def get_pending_requests(self) -> List[Dict]:
        requests = self.repo_factory.get_volunteer_repo().find_many({"status": "pending"}, sort=[("createdAt", -1)])
        return [format_request(request) for request in requests]

    def _review(self, request_id: str, reviewer: Dict, updates: Dict) -> Dict:
        volunteer_repo = self.repo_factory.get_volunteer_repo()
        request = volunteer_repo.find_by_id(request_id)
        if not request:
            raise NotFoundError("Volunteer request not found")
        if request.get("status") != "pending":
            raise ValidationError(f"Request is already {request.get('status')}")

        updates.update({"reviewedBy": reviewer["_id"], "reviewedAt": now_ist()})
        updated = volunteer_repo.update_fields(request["_id"], updates)
        logger.info(user_message(reviewer.get("email"), f"Volunteer request {request_id} {updates['status']}"))
        return updated

    def approve_request(self, request_id: str, reviewer: Dict) -> Dict:
        request = self._review(request_id, reviewer, {"status": "approved"})
        return sanitize_mongo_document({
            "message": "Volunteer request approved successfully",
            "request": {
                "id": request["_id"],
                "name": request.get("name"),
                "email": request.get("email"),
                "status": request["status"],
                "reviewedAt": request["reviewedAt"],
            },
        })

    def reject_request(self, request_id: str, reviewer: Dict, rejection_reason: Optional[str] = None) -> Dict:
        request = self._review(request_id, reviewer, {
            "status": "rejected",
            "rejectionReason": rejection_reason or DEFAULT_REJECTION_REASON,
        })
        return sanitize_mongo_document({
            "message": "Volunteer request rejected",
            "request": {
                "id": request["_id"],
                "name": request.get("name"),
                "email": request.get("email"),
                "status": request["status"],
                "rejectionReason": request["rejectionReason"],
                "reviewedAt": request["reviewedAt"],
            },
        })
