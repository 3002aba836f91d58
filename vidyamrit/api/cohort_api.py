"""Cohort API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import role_required, super_admin_required
from vidyamrit.config.settings import ROLE_SUPER_ADMIN, ROLE_TUTOR
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.cohorts.cohort_service import CohortService
from vidyamrit.utils.validation.input_validator import get_json_data, get_single_query_param

cohort_staff_required = role_required(ROLE_SUPER_ADMIN, ROLE_TUTOR)


class CohortListResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def get(self):
        try:
            school_id = get_single_query_param("schoolId", required=False)
            result = self.cohort_service.get_cohorts(school_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.cohort_service.create_cohort(data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class CohortDetailResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def get(self, cohort_id):
        try:
            result = self.cohort_service.get_cohort(cohort_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def put(self, cohort_id):
        try:
            data = get_json_data()
            result = self.cohort_service.update_cohort(cohort_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def delete(self, cohort_id):
        try:
            result = self.cohort_service.delete_cohort(cohort_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortAddStudentResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def post(self, cohort_id):
        try:
            data = get_json_data()
            result = self.cohort_service.add_student(cohort_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortAddToDefaultResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.cohort_service.add_student_to_default(data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortGenerateOptimalResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.cohort_service.generate_optimal(data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortAssessmentReadinessResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def get(self, cohort_id):
        try:
            result = self.cohort_service.get_assessment_readiness(cohort_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class CohortToggleHolidayResource(Resource):
    def __init__(self):
        self.cohort_service = CohortService()

    @cohort_staff_required
    def post(self, cohort_id):
        try:
            data = get_json_data()
            result = self.cohort_service.toggle_holiday(cohort_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
