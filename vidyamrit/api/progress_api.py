"""Student progress flag API - Presentation Layer (SoC)"""
from flask import request
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import admin_required, staff_required, token_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.progress.progress_service import ProgressService
from vidyamrit.utils.validation.input_validator import get_json_data, get_optional_query_params


class ProgressStudentResource(Resource):
    def __init__(self):
        self.progress_service = ProgressService()

    @token_required
    def get(self, student_id):
        try:
            include_history = request.args.get("includeHistory", "false").lower() == "true"
            result = self.progress_service.get_student_progress(student_id, get_current_user(), include_history)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @staff_required
    def put(self, student_id):
        try:
            data = get_json_data()
            result = self.progress_service.update_flag(student_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgressStatisticsResource(Resource):
    def __init__(self):
        self.progress_service = ProgressService()

    @token_required
    def get(self):
        try:
            filters = get_optional_query_params(schoolId=None, subject=None, flag=None)
            result = self.progress_service.get_statistics(get_current_user(), filters)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgressTrendsResource(Resource):
    def __init__(self):
        self.progress_service = ProgressService()

    @token_required
    def get(self):
        try:
            result = self.progress_service.get_trends(
                get_current_user(),
                request.args.get("studentId"),
                request.args.get("subject"),
                request.args.get("days", None, type=int),
            )
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProgressBulkUpdateResource(Resource):
    def __init__(self):
        self.progress_service = ProgressService()

    @admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.progress_service.bulk_update(data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
