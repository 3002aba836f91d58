"""Volunteer Request API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import super_admin_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.volunteers.volunteer_service import VolunteerService
from vidyamrit.utils.validation.input_validator import get_json_data, get_single_query_param


class VolunteerSubmitResource(Resource):
    """Public endpoint, no token"""

    def __init__(self):
        self.volunteer_service = VolunteerService()

    def post(self):
        try:
            data = get_json_data()
            result = self.volunteer_service.submit_request(data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class VolunteerRequestListResource(Resource):
    def __init__(self):
        self.volunteer_service = VolunteerService()

    @super_admin_required
    def get(self):
        try:
            status = get_single_query_param("status", required=False)
            result = self.volunteer_service.get_requests(status)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class VolunteerPendingResource(Resource):
    def __init__(self):
        self.volunteer_service = VolunteerService()

    @super_admin_required
    def get(self):
        try:
            result = self.volunteer_service.get_pending_requests()
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class VolunteerApproveResource(Resource):
    def __init__(self):
        self.volunteer_service = VolunteerService()

    @super_admin_required
    def patch(self, request_id):
        try:
            result = self.volunteer_service.approve_request(request_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class VolunteerRejectResource(Resource):
    def __init__(self):
        self.volunteer_service = VolunteerService()

    @super_admin_required
    def patch(self, request_id):
        try:
            data = get_json_data()
            result = self.volunteer_service.reject_request(request_id, get_current_user(), data.get("rejectionReason"))
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
