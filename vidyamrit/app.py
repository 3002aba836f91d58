from dotenv import load_dotenv
load_dotenv()

import logging

from flask import Flask
from flask_cors import CORS
from flask_restful import Api, Resource

from vidyamrit.config.settings import CORS_ORIGINS, PORT
from vidyamrit.db.db_utils import ensure_indexes
from vidyamrit.logging_config.log_config import setup_logging

# users
from vidyamrit.api.user_api import UserRegisterResource, CurrentUserResource, UserListResource, UserDetailResource

# schools and students
from vidyamrit.api.school_api import SchoolListResource, SchoolDetailResource
from vidyamrit.api.student_api import (
    StudentListResource, ArchivedStudentListResource, StudentDetailResource,
    StudentRestoreResource, StudentLevelsResource
)

# programs and cohorts
from vidyamrit.api.program_api import (
    ProgramListResource, ProgramDetailResource, ProgramToggleStatusResource, ProgramTimeToCompleteResource,
    ProgramTimeLapseMatrixResource, ProgramLevelResource, ProgramValidateProgressionResource
)
from vidyamrit.api.cohort_api import (
    CohortListResource, CohortDetailResource, CohortAddStudentResource, CohortAddToDefaultResource,
    CohortGenerateOptimalResource, CohortAssessmentReadinessResource, CohortToggleHolidayResource
)

# school onboarding
from vidyamrit.api.onboarding_api import (
    OnboardingListResource, OnboardingStatisticsResource, OnboardingDetailResource, OnboardingTaskResource,
    OnboardingTaskProgressResource, OnboardingTaskCompleteResource, OnboardingMilestoneResource,
    OnboardingMilestoneCompleteResource, OnboardingTrainingResource, OnboardingTrainingAttendanceResource,
    OnboardingSupportTicketResource, OnboardingSupportTicketDetailResource, OnboardingFeedbackResource,
    OnboardingReportResource, OnboardingBlockedTasksResource, OnboardingUpcomingDeadlinesResource
)

# enhanced student profiles
from vidyamrit.api.profile_api import (
    ProfileListResource, ProfileStatisticsResource, ProfileDetailResource, ProfileRecordResource,
    ProfileInterventionProgressResource, ProfileAcademicGoalsResource, ProfilePerformanceMetricsResource,
    ProfileReportResource, ProfileUpcomingGoalsResource, ProfileAttendanceOverviewResource,
    ProfileBehavioralSummaryResource
)

# volunteers
from vidyamrit.api.volunteer_api import (
    VolunteerSubmitResource, VolunteerRequestListResource, VolunteerPendingResource,
    VolunteerApproveResource, VolunteerRejectResource
)

# attendance
from vidyamrit.api.attendance_api import (
    AttendanceListResource, AttendanceBulkResource, AttendanceStatsResource, AttendanceDailyResource,
    CohortAttendanceRecordResource, CohortAttendanceResource, TutorAttendanceSummaryResource
)

# level assessments and transitions
from vidyamrit.api.assessment_api import (
    LevelAssessmentQuestionsResource, LevelAssessmentConductResource, BaselineReadyStudentsResource,
    BaselineConductResource, BaselineQuestionsResource, BaselineHistoryResource,
    TransitionProcessResource, TransitionRecommendationResource, TransitionManualResource
)

# student progress flags
from vidyamrit.api.progress_api import (
    ProgressStudentResource, ProgressStatisticsResource, ProgressTrendsResource, ProgressBulkUpdateResource
)

# stakeholder views
from vidyamrit.api.view_api import (
    ViewListResource, MyViewResource, MyViewDataResource, ViewDetailResource, ViewDataResource,
    ViewActivateResource
)

logger = logging.getLogger(__name__)


class HealthCheck(Resource):
    def get(self):
        return {"message": "Vidyamrit API is running"}, 200


class VidyamritFlask(Flask):
    def add_api(self):
        api = Api(self, catch_all_404s=True)
        api.add_resource(HealthCheck, "/", "/api")

        # Users
        api.add_resource(UserRegisterResource, "/api/users/register")
        api.add_resource(CurrentUserResource, "/api/users/me")
        api.add_resource(UserListResource, "/api/users")
        api.add_resource(UserDetailResource, "/api/users/<string:user_id>")

        # Schools
        api.add_resource(SchoolListResource, "/api/schools")
        api.add_resource(SchoolDetailResource, "/api/schools/<string:school_id>")

        # Students
        api.add_resource(StudentListResource, "/api/students")
        api.add_resource(ArchivedStudentListResource, "/api/students/archived")
        api.add_resource(StudentDetailResource, "/api/students/<string:student_id>")
        api.add_resource(StudentRestoreResource, "/api/students/<string:student_id>/restore")
        api.add_resource(StudentLevelsResource, "/api/students/<string:student_id>/levels")

        # Programs
        api.add_resource(ProgramListResource, "/api/programs")
        api.add_resource(ProgramDetailResource, "/api/programs/<string:program_id>")
        api.add_resource(ProgramToggleStatusResource, "/api/programs/<string:program_id>/toggle-status")
        api.add_resource(ProgramTimeToCompleteResource, "/api/programs/<string:program_id>/time-to-complete")
        api.add_resource(ProgramTimeLapseMatrixResource, "/api/programs/<string:program_id>/time-lapse-matrix")
        api.add_resource(ProgramLevelResource, "/api/programs/<string:program_id>/levels/<int:level_number>")
        api.add_resource(ProgramValidateProgressionResource, "/api/programs/<string:program_id>/validate-progression")

        # Cohorts
        api.add_resource(CohortListResource, "/api/cohorts")
        api.add_resource(CohortAddToDefaultResource, "/api/cohorts/add-to-default")
        api.add_resource(CohortGenerateOptimalResource, "/api/cohorts/generate-optimal")
        api.add_resource(CohortDetailResource, "/api/cohorts/<string:cohort_id>")
        api.add_resource(CohortAddStudentResource, "/api/cohorts/<string:cohort_id>/add-student")
        api.add_resource(CohortAssessmentReadinessResource, "/api/cohorts/<string:cohort_id>/assessment-readiness")
        api.add_resource(CohortToggleHolidayResource, "/api/cohorts/<string:cohort_id>/toggle-holiday")

        # School onboarding
        onboarding = "/api/school-onboarding/<string:onboarding_id>"
        api.add_resource(OnboardingListResource, "/api/school-onboarding")
        api.add_resource(OnboardingStatisticsResource, "/api/school-onboarding/statistics")
        api.add_resource(OnboardingDetailResource, onboarding)
        api.add_resource(OnboardingTaskResource, f"{onboarding}/tasks")
        api.add_resource(OnboardingTaskProgressResource, f"{onboarding}/tasks/<string:task_id>/progress")
        api.add_resource(OnboardingTaskCompleteResource, f"{onboarding}/tasks/<string:task_id>/complete")
        api.add_resource(OnboardingMilestoneResource, f"{onboarding}/milestones")
        api.add_resource(OnboardingMilestoneCompleteResource, f"{onboarding}/milestones/<string:milestone_id>/complete")
        api.add_resource(OnboardingTrainingResource, f"{onboarding}/training-sessions")
        api.add_resource(OnboardingTrainingAttendanceResource,
                         f"{onboarding}/training-sessions/<string:session_id>/attendance")
        api.add_resource(OnboardingSupportTicketResource, f"{onboarding}/support-tickets")
        api.add_resource(OnboardingSupportTicketDetailResource, f"{onboarding}/support-tickets/<string:ticket_id>")
        api.add_resource(OnboardingFeedbackResource, f"{onboarding}/feedback")
        api.add_resource(OnboardingReportResource, f"{onboarding}/report")
        api.add_resource(OnboardingBlockedTasksResource, f"{onboarding}/blocked-tasks")
        api.add_resource(OnboardingUpcomingDeadlinesResource, f"{onboarding}/upcoming-deadlines")

        # Enhanced student profiles
        profile = "/api/enhanced-students/<string:profile_id>"
        api.add_resource(ProfileListResource, "/api/enhanced-students")
        api.add_resource(ProfileStatisticsResource, "/api/enhanced-students/statistics")
        api.add_resource(ProfileDetailResource, profile)
        api.add_resource(ProfileInterventionProgressResource,
                         f"{profile}/interventions/<string:intervention_id>/progress")
        api.add_resource(ProfileAcademicGoalsResource, f"{profile}/academic-goals")
        api.add_resource(ProfilePerformanceMetricsResource, f"{profile}/performance-metrics")
        api.add_resource(ProfileReportResource, f"{profile}/report")
        api.add_resource(ProfileUpcomingGoalsResource, f"{profile}/upcoming-goals")
        api.add_resource(ProfileAttendanceOverviewResource, f"{profile}/attendance-overview")
        api.add_resource(ProfileBehavioralSummaryResource, f"{profile}/behavioral-summary")
        api.add_resource(ProfileRecordResource, f"{profile}/<string:record_type>")

        # Volunteer requests
        api.add_resource(VolunteerSubmitResource, "/api/volunteer-requests/submit")
        api.add_resource(VolunteerRequestListResource, "/api/volunteer-requests")
        api.add_resource(VolunteerPendingResource, "/api/volunteer-requests/pending")
        api.add_resource(VolunteerApproveResource, "/api/volunteer-requests/<string:request_id>/approve")
        api.add_resource(VolunteerRejectResource, "/api/volunteer-requests/<string:request_id>/reject")

        # Attendance
        api.add_resource(AttendanceListResource, "/api/attendance")
        api.add_resource(AttendanceBulkResource, "/api/attendance/bulk")
        api.add_resource(AttendanceStatsResource, "/api/attendance/stats")
        api.add_resource(AttendanceDailyResource, "/api/attendance/daily")
        api.add_resource(CohortAttendanceRecordResource, "/api/attendance/cohort")
        api.add_resource(CohortAttendanceResource, "/api/attendance/cohort/<string:cohort_id>")
        api.add_resource(TutorAttendanceSummaryResource, "/api/attendance/tutor/summary")

        # Level assessments
        api.add_resource(LevelAssessmentQuestionsResource,
                         "/api/level-assessments/cohort/<string:cohort_id>/questions")
        api.add_resource(LevelAssessmentConductResource, "/api/level-assessments/conduct")

        # Baseline assessments
        api.add_resource(BaselineReadyStudentsResource, "/api/baseline-assessments/cohort/<string:cohort_id>/ready")
        api.add_resource(BaselineConductResource, "/api/baseline-assessments/conduct")
        api.add_resource(BaselineQuestionsResource,
                         "/api/baseline-assessments/program/<string:program_id>/level/<int:level_number>/questions")
        api.add_resource(BaselineHistoryResource,
                         "/api/baseline-assessments/cohort/<string:cohort_id>/student/<string:student_id>/history")

        # Level transitions
        api.add_resource(TransitionProcessResource, "/api/level-transitions/cohort/<string:cohort_id>/process")
        api.add_resource(TransitionRecommendationResource,
                         "/api/level-transitions/cohort/<string:cohort_id>/student/<string:student_id>/recommendation")
        api.add_resource(TransitionManualResource, "/api/level-transitions/manual")

        # Student progress flags
        api.add_resource(ProgressStatisticsResource, "/api/progress/statistics")
        api.add_resource(ProgressTrendsResource, "/api/progress/trends")
        api.add_resource(ProgressBulkUpdateResource, "/api/progress/bulk-update")
        api.add_resource(ProgressStudentResource, "/api/progress/student/<string:student_id>")

        # Stakeholder views
        api.add_resource(ViewListResource, "/api/views")
        api.add_resource(MyViewResource, "/api/views/me/view")
        api.add_resource(MyViewDataResource, "/api/views/me/data")
        api.add_resource(ViewDetailResource, "/api/views/<string:view_id>")
        api.add_resource(ViewDataResource, "/api/views/<string:view_id>/data")
        api.add_resource(ViewActivateResource, "/api/views/<string:view_id>/activate")


def create_app():
    setup_logging()
    app = VidyamritFlask(__name__)
    app.add_api()
    CORS(app, supports_credentials=True, origins=CORS_ORIGINS)
    return app


def main():
    app = create_app()
    ensure_indexes()
    logger.info(f"Server running on port {PORT}")
    app.run(host="0.0.0.0", port=PORT)


if __name__ == '__main__':
    main()
