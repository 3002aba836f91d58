"""Program API - Presentation Layer (SoC)"""
from flask import request
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import token_required, admin_required, get_current_user
from vidyamrit.config.settings import DEFAULT_TIMEFRAME_UNIT
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.programs.program_service import ProgramService
from vidyamrit.utils.pagination.pagination_utils import get_pagination_params
from vidyamrit.utils.validation.input_validator import get_json_data, get_optional_query_params


class ProgramListResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @token_required
    def get(self):
        try:
            params = get_optional_query_params(subject=None, isActive="true", includeInactive="false")
            page, limit = get_pagination_params(request.args.get("page"), request.args.get("limit"))
            result = self.program_service.get_programs(
                params["subject"], params["isActive"], params["includeInactive"], page, limit
            )
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.program_service.create_program(data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class ProgramDetailResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @token_required
    def get(self, program_id):
        try:
            result = self.program_service.get_program(program_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @admin_required
    def put(self, program_id):
        try:
            data = get_json_data()
            result = self.program_service.update_program(program_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @admin_required
    def delete(self, program_id):
        try:
            result = self.program_service.delete_program(program_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgramToggleStatusResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @admin_required
    def patch(self, program_id):
        try:
            result = self.program_service.toggle_status(program_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgramTimeToCompleteResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @token_required
    def get(self, program_id):
        try:
            from_level = request.args.get("fromLevel", 1, type=int)
            to_level = request.args.get("toLevel", None, type=int)
            unit = request.args.get("unit", DEFAULT_TIMEFRAME_UNIT)
            result = self.program_service.get_time_to_complete(program_id, from_level, to_level, unit)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgramTimeLapseMatrixResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @token_required
    def get(self, program_id):
        try:
            unit = request.args.get("unit", DEFAULT_TIMEFRAME_UNIT)
            result = self.program_service.get_time_lapse_matrix(program_id, unit)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgramLevelResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @token_required
    def get(self, program_id, level_number):
        try:
            result = self.program_service.get_level_details(program_id, level_number)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgramValidateProgressionResource(Resource):
    def __init__(self):
        self.program_service = ProgramService()

    @token_required
    def post(self, program_id):
        try:
            data = get_json_data()
            result = self.program_service.validate_progression(program_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
