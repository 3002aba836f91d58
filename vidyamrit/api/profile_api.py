"""Enhanced Student Profile API - Presentation Layer (SoC)"""
from flask import request
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import admin_required, staff_required, super_admin_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.profiles.profile_service import ProfileService
from vidyamrit.utils.pagination.pagination_utils import get_pagination_params
from vidyamrit.utils.validation.input_validator import get_json_data, get_optional_query_params


class ProfileListResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @staff_required
    def get(self):
        try:
            filters = get_optional_query_params(
                schoolId=None, status=None, currentLevel=None, learningStyle=None, academicTrend=None,
                engagementLevel=None, hasSpecialNeeds=None, sortBy="createdAt", sortOrder="desc"
            )
            page, limit = get_pagination_params(request.args.get("page"), request.args.get("limit"))
            result = self.profile_service.get_profiles(get_current_user(), filters, page, limit)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.profile_service.create_profile(data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class ProfileStatisticsResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @admin_required
    def get(self):
        try:
            filters = get_optional_query_params(schoolId=None, dateFrom=None, dateTo=None)
            result = self.profile_service.get_statistics(get_current_user(), filters)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileDetailResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @staff_required
    def get(self, profile_id):
        try:
            result = self.profile_service.get_profile(profile_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @admin_required
    def put(self, profile_id):
        try:
            data = get_json_data()
            result = self.profile_service.update_profile(profile_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def delete(self, profile_id):
        try:
            result = self.profile_service.delete_profile(profile_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileRecordResource(Resource):
    """Append-only record collections, routed by the ``record_type`` URL segment"""

    ADDERS = {
        "academic-records": "add_academic_record",
        "assessments": "add_assessment",
        "behavioral-records": "add_behavioral_record",
        "communication-logs": "add_communication_log",
        "extracurricular-activities": "add_extracurricular_activity",
        "interventions": "add_intervention",
    }

    def __init__(self):
        self.profile_service = ProfileService()

    @staff_required
    def post(self, profile_id, record_type):
        try:
            adder = self.ADDERS.get(record_type)
            if adder is None:
                return {"success": False, "message": "Record type not found"}, 404
            data = get_json_data()
            result = getattr(self.profile_service, adder)(profile_id, data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class ProfileInterventionProgressResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @staff_required
    def put(self, profile_id, intervention_id):
        try:
            data = get_json_data()
            result = self.profile_service.update_intervention_progress(
                profile_id, intervention_id, data, get_current_user()
            )
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileAcademicGoalsResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @staff_required
    def put(self, profile_id):
        try:
            data = get_json_data()
            result = self.profile_service.update_academic_goals(profile_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfilePerformanceMetricsResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @admin_required
    def put(self, profile_id):
        try:
            data = get_json_data()
            result = self.profile_service.update_performance_metrics(profile_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileReportResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @admin_required
    def get(self, profile_id):
        try:
            report_type = request.args.get("type", "comprehensive")
            result = self.profile_service.generate_report(profile_id, report_type)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileUpcomingGoalsResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @admin_required
    def get(self, profile_id):
        try:
            result = self.profile_service.get_upcoming_goals(profile_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileAttendanceOverviewResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @admin_required
    def get(self, profile_id):
        try:
            result = self.profile_service.get_attendance_overview(profile_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ProfileBehavioralSummaryResource(Resource):
    def __init__(self):
        self.profile_service = ProfileService()

    @admin_required
    def get(self, profile_id):
        try:
            result = self.profile_service.get_behavioral_summary(profile_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
