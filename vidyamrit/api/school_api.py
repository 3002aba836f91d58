"""School API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import role_required, super_admin_required, get_current_user
from vidyamrit.config.settings import ROLE_SUPER_ADMIN, ROLE_TUTOR
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.schools.school_service import SchoolService
from vidyamrit.utils.validation.input_validator import get_json_data


class SchoolListResource(Resource):
    def __init__(self):
        self.school_service = SchoolService()

    @role_required(ROLE_SUPER_ADMIN, ROLE_TUTOR)
    def get(self):
        try:
            result = self.school_service.get_schools(get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.school_service.create_school(data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class SchoolDetailResource(Resource):
    def __init__(self):
        self.school_service = SchoolService()

    @role_required(ROLE_SUPER_ADMIN, ROLE_TUTOR)
    def get(self, school_id):
        try:
            result = self.school_service.get_school(school_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def put(self, school_id):
        try:
            data = get_json_data()
            result = self.school_service.update_school(school_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def delete(self, school_id):
        try:
            result = self.school_service.delete_school(school_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
