"""Attendance API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import role_required, get_current_user
from vidyamrit.config.settings import ROLE_SUPER_ADMIN, ROLE_TUTOR
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.attendance.attendance_service import AttendanceService
from vidyamrit.utils.validation.input_validator import (
    get_json_data, get_optional_query_params, get_single_query_param
)

attendance_staff_required = role_required(ROLE_SUPER_ADMIN, ROLE_TUTOR)

RECORD_FILTERS = dict(studentId=None, schoolId=None, startDate=None, endDate=None, subject=None, status=None)


class AttendanceListResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def get(self):
        try:
            filters = get_optional_query_params(**RECORD_FILTERS)
            result = self.attendance_service.get_records(filters)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @attendance_staff_required
    def post(self):
        try:
            data = get_json_data()
            result, created = self.attendance_service.mark_attendance(data, get_current_user())
            return {"success": True, "data": result}, 201 if created else 200

        except Exception as e:
            return handle_service_error(e)


class AttendanceBulkResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.attendance_service.bulk_mark(data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class AttendanceStatsResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def get(self):
        try:
            filters = get_optional_query_params(**RECORD_FILTERS)
            result = self.attendance_service.get_statistics(filters)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class AttendanceDailyResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def get(self):
        try:
            school_id = get_single_query_param("schoolId")
            date_value = get_single_query_param("date", required=False)
            result = self.attendance_service.get_daily_attendance(school_id, date_value)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortAttendanceRecordResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.attendance_service.record_cohort_attendance(data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortAttendanceResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def get(self, cohort_id):
        try:
            filters = get_optional_query_params(date=None, startDate=None, endDate=None)
            result = self.attendance_service.get_cohort_attendance(cohort_id, filters)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class TutorAttendanceSummaryResource(Resource):
    def __init__(self):
        self.attendance_service = AttendanceService()

    @attendance_staff_required
    def get(self):
        try:
            date_value = get_single_query_param("date", required=False)
            result = self.attendance_service.get_tutor_summary(get_current_user(), date_value)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
