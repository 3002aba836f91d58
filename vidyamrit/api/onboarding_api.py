"""School Onboarding API - Presentation Layer (SoC)"""
from flask import request
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import token_required, super_admin_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.onboarding.onboarding_service import OnboardingService
from vidyamrit.utils.pagination.pagination_utils import get_pagination_params
from vidyamrit.utils.validation.input_validator import get_json_data, get_optional_query_params


class OnboardingListResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def get(self):
        try:
            filters = get_optional_query_params(
                schoolId=None, status=None, currentPhase=None, projectManager=None,
                sortBy="createdAt", sortOrder="desc"
            )
            page, limit = get_pagination_params(request.args.get("page"), request.args.get("limit"))
            result = self.onboarding_service.get_onboardings(get_current_user(), filters, page, limit)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.onboarding_service.create_onboarding(data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class OnboardingStatisticsResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def get(self):
        try:
            filters = get_optional_query_params(schoolId=None, dateFrom=None, dateTo=None)
            result = self.onboarding_service.get_statistics(get_current_user(), filters)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingDetailResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def get(self, onboarding_id):
        try:
            result = self.onboarding_service.get_onboarding(onboarding_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @token_required
    def put(self, onboarding_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.update_onboarding(onboarding_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def delete(self, onboarding_id):
        try:
            result = self.onboarding_service.delete_onboarding(onboarding_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingTaskResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def post(self, onboarding_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.add_task(onboarding_id, data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class OnboardingTaskProgressResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def put(self, onboarding_id, task_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.update_task_progress(onboarding_id, task_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingTaskCompleteResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def put(self, onboarding_id, task_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.complete_task(onboarding_id, task_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingMilestoneResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def post(self, onboarding_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.add_milestone(onboarding_id, data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class OnboardingMilestoneCompleteResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def put(self, onboarding_id, milestone_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.complete_milestone(
                onboarding_id, milestone_id, data, get_current_user()
            )
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingTrainingResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def post(self, onboarding_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.schedule_training(onboarding_id, data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class OnboardingTrainingAttendanceResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def put(self, onboarding_id, session_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.update_training_attendance(onboarding_id, session_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingSupportTicketResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def post(self, onboarding_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.create_support_ticket(onboarding_id, data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class OnboardingSupportTicketDetailResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def put(self, onboarding_id, ticket_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.update_support_ticket(onboarding_id, ticket_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingFeedbackResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def post(self, onboarding_id):
        try:
            data = get_json_data()
            result = self.onboarding_service.add_feedback(onboarding_id, data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class OnboardingReportResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def get(self, onboarding_id):
        try:
            result = self.onboarding_service.generate_report(onboarding_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingBlockedTasksResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def get(self, onboarding_id):
        try:
            result = self.onboarding_service.get_blocked_tasks(onboarding_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class OnboardingUpcomingDeadlinesResource(Resource):
    def __init__(self):
        self.onboarding_service = OnboardingService()

    @token_required
    def get(self, onboarding_id):
        try:
            days = request.args.get("days", None, type=int)
            result = self.onboarding_service.get_upcoming_deadlines(onboarding_id, days)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
