"""Repository Factory - DRY Implementation"""
from vidyamrit.repositories.users.user_repo import UserRepo
from vidyamrit.repositories.school.school_repo import SchoolRepo
from vidyamrit.repositories.student.student_repo import StudentRepo
from vidyamrit.repositories.cohort.cohort_repo import CohortRepo
from vidyamrit.repositories.program.program_repo import ProgramRepo
from vidyamrit.repositories.onboarding.onboarding_repo import OnboardingRepo
from vidyamrit.repositories.profile.profile_repo import ProfileRepo
from vidyamrit.repositories.volunteer.volunteer_repo import VolunteerRepo
from vidyamrit.repositories.attendance.attendance_repo import AttendanceRepo
from vidyamrit.repositories.view.view_repo import ViewRepo


class RepositoryFactory:
    """Centralized repository creation (DRY principle)"""

    @classmethod
    def get_user_repo(cls) -> UserRepo:
        """Get user repository instance with caching"""
        if not hasattr(cls, '_user_repo'):
            cls._user_repo = UserRepo()
        return cls._user_repo

    @classmethod
    def get_school_repo(cls) -> SchoolRepo:
        """Get school repository instance with caching"""
        if not hasattr(cls, '_school_repo'):
            cls._school_repo = SchoolRepo()
        return cls._school_repo

    @classmethod
    def get_student_repo(cls) -> StudentRepo:
        """Get student repository instance with caching"""
        if not hasattr(cls, '_student_repo'):
            cls._student_repo = StudentRepo()
        return cls._student_repo

    @classmethod
    def get_cohort_repo(cls) -> CohortRepo:
        """Get cohort repository instance with caching"""
        if not hasattr(cls, '_cohort_repo'):
            cls._cohort_repo = CohortRepo()
        return cls._cohort_repo

    @classmethod
    def get_program_repo(cls) -> ProgramRepo:
        """Get program repository instance with caching"""
        if not hasattr(cls, '_program_repo'):
            cls._program_repo = ProgramRepo()
        return cls._program_repo

    # onboarding repo
    @classmethod
    def get_onboarding_repo(cls) -> OnboardingRepo:
        """Get school onboarding repository instance with caching"""
        if not hasattr(cls, '_onboarding_repo'):
            cls._onboarding_repo = OnboardingRepo()
        return cls._onboarding_repo

    # enhanced profile repo
    @classmethod
    def get_profile_repo(cls) -> ProfileRepo:
        """Get enhanced student profile repository instance with caching"""
        if not hasattr(cls, '_profile_repo'):
            cls._profile_repo = ProfileRepo()
        return cls._profile_repo

    @classmethod
    def get_volunteer_repo(cls) -> VolunteerRepo:
        """Get volunteer request repository instance with caching"""
        if not hasattr(cls, '_volunteer_repo'):
            cls._volunteer_repo = VolunteerRepo()
        return cls._volunteer_repo

    @classmethod
    def get_attendance_repo(cls) -> AttendanceRepo:
        """Get student attendance repository instance with caching"""
        if not hasattr(cls, '_attendance_repo'):
            cls._attendance_repo = AttendanceRepo()
        return cls._attendance_repo

    @classmethod
    def get_view_repo(cls) -> ViewRepo:
        """Get stakeholder view repository instance with caching"""
        if not hasattr(cls, '_view_repo'):
            cls._view_repo = ViewRepo()
        return cls._view_repo
