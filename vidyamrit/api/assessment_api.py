"""Level assessment, baseline assessment and level transition API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import role_required, get_current_user
from vidyamrit.config.settings import ROLE_SUPER_ADMIN, ROLE_TUTOR
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.assessments.assessment_service import AssessmentService
from vidyamrit.services.assessments.transition_service import TransitionService
from vidyamrit.utils.validation.input_validator import get_json_data, get_single_query_param

assessment_staff_required = role_required(ROLE_SUPER_ADMIN, ROLE_TUTOR)


class LevelAssessmentQuestionsResource(Resource):
    def __init__(self):
        self.assessment_service = AssessmentService()

    @assessment_staff_required
    def get(self, cohort_id):
        try:
            result = self.assessment_service.get_level_questions(cohort_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class LevelAssessmentConductResource(Resource):
    def __init__(self):
        self.assessment_service = AssessmentService()

    @assessment_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.assessment_service.conduct_level_assessment(data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class BaselineReadyStudentsResource(Resource):
    def __init__(self):
        self.assessment_service = AssessmentService()

    @assessment_staff_required
    def get(self, cohort_id):
        try:
            result = self.assessment_service.get_ready_students(cohort_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class BaselineConductResource(Resource):
    def __init__(self):
        self.assessment_service = AssessmentService()

    @assessment_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.assessment_service.conduct_baseline_assessment(data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class BaselineQuestionsResource(Resource):
    def __init__(self):
        self.assessment_service = AssessmentService()

    @assessment_staff_required
    def get(self, program_id, level_number):
        try:
            result = self.assessment_service.get_program_level_questions(program_id, level_number)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class BaselineHistoryResource(Resource):
    def __init__(self):
        self.assessment_service = AssessmentService()

    @assessment_staff_required
    def get(self, cohort_id, student_id):
        try:
            result = self.assessment_service.get_assessment_history(cohort_id, student_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class TransitionProcessResource(Resource):
    def __init__(self):
        self.transition_service = TransitionService()

    @assessment_staff_required
    def post(self, cohort_id):
        try:
            dry_run = (get_single_query_param("dryRun", required=False) or "").lower() == "true"
            result = self.transition_service.process_cohort(cohort_id, get_current_user(), dry_run)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class TransitionRecommendationResource(Resource):
    def __init__(self):
        self.transition_service = TransitionService()

    @assessment_staff_required
    def get(self, cohort_id, student_id):
        try:
            result = self.transition_service.get_recommendation(cohort_id, student_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class TransitionManualResource(Resource):
    def __init__(self):
        self.transition_service = TransitionService()

    @assessment_staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.transition_service.manual_transition(data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
