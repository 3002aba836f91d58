"""Stakeholder View Service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, List

from vidyamrit.auth import firebase_client
from vidyamrit.config.settings import ROLE_SUPER_ADMIN, ROLE_TUTOR, ROLE_VIEW_USER, VIEW_USER_PHONE
from vidyamrit.exceptions.exceptions import (
    DuplicateRecordError, NotFoundError, PermissionDeniedError, RegistrationFailedError, ValidationError
)
from vidyamrit.logging_config.log_config import view_message
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.validation.validation_utils import ValidationUtils
from vidyamrit.utils.view.view_config import (
    normalize_view_config, validate_stakeholder, school_query, public_view,
    school_metrics, tutor_metrics, student_metrics, cohort_metrics,
    assessment_metrics, progress_metrics, attendance_metrics
)

logger = logging.getLogger(__name__)

VIEW_NOT_FOUND = "View not found"


class ViewService:
    def __init__(self, auth_client=None):
        self.repo_factory = RepositoryFactory()
        self._auth_client = auth_client

    @property
    def auth_client(self):
        if self._auth_client is None:
            self._auth_client = firebase_client.get_auth_client()
        return self._auth_client

    def _load(self, view_id) -> Dict:
        view = self.repo_factory.get_view_repo().find_by_id(view_id)
        if not view:
            raise NotFoundError(VIEW_NOT_FOUND)
        return view

    def _check_owner(self, view: Dict, user: Dict) -> None:
        if user.get("role") == ROLE_SUPER_ADMIN:
            return
        if user.get("role") != ROLE_VIEW_USER or (view.get("viewUser") or {}).get("uid") != user.get("uid"):
            raise PermissionDeniedError("Access denied")

    def _own_view(self, user: Dict) -> Dict:
        if user.get("role") != ROLE_VIEW_USER:
            raise PermissionDeniedError("Only view users can access this endpoint")
        view = self.repo_factory.get_view_repo().find_by_uid(user.get("uid"))
        if not view:
            raise NotFoundError("View not found for this user")
        return view

    def create_view(self, data: Dict, user: Dict) -> Dict:
        """
        Create a view together with the Firebase account that reads it.

        The account gets a ``view_user`` row in the users collection. When a
        database write fails after Firebase created the account, the account
        is deleted again.
        """
        view_user = data.get("viewUser") if isinstance(data.get("viewUser"), dict) else {}
        if not data.get("name") or not data.get("stakeholderType") or not data.get("config") \
                or not view_user.get("email") or not view_user.get("password"):
            raise ValidationError(
                "Missing required fields: name, stakeholderType, config, viewUser.email, viewUser.password"
            )
        name = ValidationUtils.validate_non_empty_string(data["name"], "name")
        stakeholder = validate_stakeholder(data)
        config = normalize_view_config(data["config"])
        email = str(view_user["email"]).strip().lower()

        if self.repo_factory.get_view_repo().find_by_email(email):
            raise DuplicateRecordError("View with this email already exists")
        if self.repo_factory.get_user_repo().find_by_email(email):
            raise DuplicateRecordError("User with this email already exists")

        try:
            firebase_user = self.auth_client.create_user(
                email=email, password=view_user["password"], display_name=name
            )
        except Exception as e:
            logger.error(view_message({"name": name}, f"Firebase user creation failed: {e}"))
            raise RegistrationFailedError("Failed to create view. Please try again.")

        try:
            self.repo_factory.get_user_repo().insert({
                "uid": firebase_user.uid,
                "name": name,
                "email": email,
                "phoneNo": VIEW_USER_PHONE,
                "role": ROLE_VIEW_USER,
                "schoolId": None,
                "isActive": True,
            })
            view = self.repo_factory.get_view_repo().insert({
                "name": name,
                "description": data.get("description"),
                **stakeholder,
                "createdBy": user.get("_id"),
                "config": config,
                "viewUser": {"email": email, "uid": firebase_user.uid, "isActive": True},
            })
        except Exception as e:
            logger.error(view_message({"name": name}, f"Error saving view: {e}"))
            self.repo_factory.get_user_repo().delete_by_uid(firebase_user.uid)
            self._remove_firebase_user(firebase_user.uid, {"name": name})
            raise RegistrationFailedError("Failed to create view. Please try again.")

        logger.info(view_message(view, "View created successfully"))
        return sanitize_mongo_document(public_view(view, include_config=False))

    def _remove_firebase_user(self, uid: str, view: Dict) -> bool:
        try:
            self.auth_client.delete_user(uid)
        except Exception as e:
            logger.error(view_message(view, f"Failed to delete Firebase user {uid}: {e}"))
            return False
        logger.info(view_message(view, f"Firebase user {uid} deleted"))
        return True

    def get_views(self) -> List[Dict]:
        views = self.repo_factory.get_view_repo().find_many({}, sort=[("createdAt", -1)])
        return sanitize_mongo_document([public_view(view) for view in views])

    def get_view(self, view_id: str, user: Dict) -> Dict:
        view = self._load(view_id)
        self._check_owner(view, user)
        return sanitize_mongo_document(public_view(view))

    def get_my_view(self, user: Dict) -> Dict:
        return sanitize_mongo_document(public_view(self._own_view(user)))

    def update_view(self, view_id: str, data: Dict) -> Dict:
        view = self._load(view_id)
        updates = {}
        if "name" in data:
            updates["name"] = ValidationUtils.validate_non_empty_string(data["name"], "name")
        if "description" in data:
            updates["description"] = data["description"]
        if "stakeholderType" in data or "customStakeholderType" in data:
            updates.update(validate_stakeholder({
                "stakeholderType": data.get("stakeholderType", view.get("stakeholderType")),
                "customStakeholderType": data.get("customStakeholderType", view.get("customStakeholderType")),
            }))
        if "config" in data:
            updates["config"] = normalize_view_config(data["config"])

        updated = self.repo_factory.get_view_repo().update_fields(view["_id"], updates)
        logger.info(view_message(updated, "View updated successfully"))
        return sanitize_mongo_document(public_view(updated))

    def delete_view(self, view_id: str) -> Dict:
        """Remove the view, its user row and (best effort) its Firebase account"""
        view = self._load(view_id)
        uid = (view.get("viewUser") or {}).get("uid")
        if uid:
            self._remove_firebase_user(uid, view)
            self.repo_factory.get_user_repo().delete_by_uid(uid)
        self.repo_factory.get_view_repo().delete(view["_id"])
        logger.info(view_message(view, "View deleted successfully"))
        return {"message": "View deleted successfully"}

    def set_active(self, view_id: str, data: Dict) -> Dict:
        is_active = data.get("isActive")
        if not isinstance(is_active, bool):
            raise ValidationError("isActive must be a boolean")
        view = self._load(view_id)
        uid = (view.get("viewUser") or {}).get("uid")

        if uid:
            try:
                self.auth_client.update_user(uid, disabled=not is_active)
            except Exception as e:
                logger.error(view_message(view, f"Failed to update Firebase user {uid}: {e}"))
            self.repo_factory.get_user_repo().update_by_uid(uid, {"isActive": is_active})

        updated = self.repo_factory.get_view_repo().update_fields(view["_id"], {"viewUser.isActive": is_active})
        logger.info(view_message(view, f"View {'activated' if is_active else 'deactivated'}"))
        return sanitize_mongo_document({
            "message": f"View {'activated' if is_active else 'deactivated'} successfully",
            "view": public_view(updated),
        })

    # ============= VIEW DATA =============

    def get_view_data(self, view_id: str, user: Dict) -> Dict:
        view = self._load(view_id)
        self._check_owner(view, user)
        return self._view_data(view)

    def get_my_view_data(self, user: Dict) -> Dict:
        view = self._own_view(user)
        if not (view.get("viewUser") or {}).get("isActive"):
            raise PermissionDeniedError("View access is deactivated")
        return self._view_data(view)

    def _view_data(self, view: Dict) -> Dict:
        return sanitize_mongo_document({
            "viewId": view["_id"],
            "viewName": view.get("name"),
            "data": self.aggregate(view.get("config") or {}),
        })

    def aggregate(self, config: Dict) -> Dict:
        """
        Build the enabled dashboard sections for the schools a view may see.

        Every section is computed over the same school set, so a view limited
        to some schools never counts students, tutors or cohorts elsewhere.
        """
        if not isinstance(config.get("sections"), dict) or not isinstance(config.get("access"), dict):
            raise ValidationError("Invalid view configuration: missing sections or access")
        sections = config["sections"]
        enabled = [name for name, section in sections.items() if (section or {}).get("enabled")]
        if not enabled:
            return {}

        schools_section = sections.get("schools") or {}
        schools = self.repo_factory.get_school_repo().find_many(
            school_query(config["access"], schools_section.get("filters")), sort=[("name", 1)]
        )
        school_ids = [school["_id"] for school in schools]
        students = self.repo_factory.get_student_repo().find_many({"school": {"$in": school_ids}})
        cohorts = self.repo_factory.get_cohort_repo().find_many({"schoolId": {"$in": school_ids}})
        active_students = [student for student in students if not student.get("isArchived")]

        data = {}
        if "schools" in enabled:
            data["schools"] = school_metrics(schools, active_students, cohorts)
        if "tutors" in enabled:
            tutors = self.repo_factory.get_user_repo().find_many(
                {"role": ROLE_TUTOR, "schoolId": {"$in": school_ids}}, sort=[("name", 1)]
            )
            data["tutors"] = tutor_metrics(tutors, cohorts)
        if "students" in enabled:
            data["students"] = student_metrics(students)
        if "cohorts" in enabled:
            data["cohorts"] = cohort_metrics(cohorts)
        if "assessments" in enabled:
            data["assessments"] = assessment_metrics(cohorts)
        if "progress" in enabled:
            data["progress"] = progress_metrics(cohorts)
        if "attendance" in enabled:
            data["attendance"] = attendance_metrics(cohorts)
        return data
