"""Configuration settings - Configuration Layer (Environment Separated)"""
import os
from typing import Dict, List, Set

from dotenv import load_dotenv

load_dotenv()


def safe_int_env(key: str, default: str) -> int:
    """Safely convert environment variable to int"""
    try:
        return int(os.getenv(key, default))
    except ValueError:
        return int(default)


# Database
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "vidyamritdb")

# Server
PORT = safe_int_env("PORT", "5000")
CORS_ORIGINS: List[str] = [
    origin.strip() for origin in os.getenv("CORS_ORIGIN", "*").split(",") if origin.strip()
]

# Roles (Business Configuration)
ROLE_SUPER_ADMIN = "super_admin"
ROLE_SCHOOL_ADMIN = "school_admin"
ROLE_TUTOR = "tutor"
ROLE_VIEW_USER = "view_user"
ALLOWED_ROLES: Set[str] = {ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN, ROLE_TUTOR, ROLE_VIEW_USER}
DEFAULT_USER_ROLE = ROLE_TUTOR

# Onboarding phases, in the order an onboarding moves through them
ONBOARDING_PHASES: List[str] = [
    "initial_setup",
    "documentation",
    "infrastructure_setup",
    "staff_training",
    "system_integration",
    "pilot_testing",
    "go_live",
    "post_launch_support",
]
ONBOARDING_STATUSES: Set[str] = {"not_started", "in_progress", "completed", "on_hold", "cancelled"}
TASK_STATUSES: Set[str] = {"pending", "in_progress", "completed", "skipped", "blocked"}
TASK_PRIORITIES: Set[str] = {"low", "medium", "high", "critical"}
TICKET_STATUSES: Set[str] = {"open", "in_progress", "resolved", "closed"}
TICKET_CATEGORIES: Set[str] = {"technical", "training", "process", "other"}
TRAINING_TYPES: Set[str] = {"online", "in_person", "hybrid"}
ATTENDANCE_REGISTRATION_STATUSES: Set[str] = {"registered", "attended", "missed", "excused"}
DEFAULT_STABILIZATION_DAYS = 30
DEFAULT_DEADLINE_WINDOW_DAYS = 7
MAX_DEADLINE_WINDOW_DAYS = 3650

# Schools
SCHOOL_TYPES: Set[str] = {"government", "private"}
SCHOOL_LEVELS: Set[str] = {"primary", "middle"}
SCHOOL_BLOCKS: Set[str] = {"Indore Urban 1", "Indore Urban 2", "Indore Rural", "Sanwer", "Mhow", "Depalpur"}

# Students
SUBJECT_LEVEL_MIN = 1
SUBJECT_LEVEL_MAX = 5
ROLL_NUMBER_ATTEMPTS = 10

# Programs
MAX_PROGRAM_LEVELS = 50
TIMEFRAME_UNITS: Set[str] = {"days", "weeks", "months"}
DEFAULT_TIMEFRAME_UNIT = "weeks"
DAYS_PER_UNIT: Dict[str, int] = {"days": 1, "weeks": 7, "months": 30}
WEEKS_PER_MONTH = 4.33
TEACHING_DAYS_PER_WEEK = 6

# Cohort sizing
class CohortConfig:
    IDEAL_SIZE = safe_int_env("COHORT_IDEAL_SIZE", "20")
    MIN_SIZE = safe_int_env("COHORT_MIN_SIZE", "5")
    MAX_SIZE = safe_int_env("COHORT_MAX_SIZE", "30")
    DEFAULT_NAME_PREFIX = "Default Cohort"

# Enhanced student profiles
PROFILE_STATUSES: Set[str] = {"active", "inactive", "graduated", "transferred", "dropped_out", "suspended"}
STUDENT_LEVELS: Set[str] = {"beginner", "elementary", "intermediate", "advanced", "proficient"}
GOAL_STATUSES: Set[str] = {"not_started", "in_progress", "achieved", "modified"}
BEHAVIOR_TYPES: Set[str] = {"positive", "negative", "neutral"}
REPORT_TYPES: Set[str] = {"comprehensive", "academic", "behavioral"}
UPCOMING_GOAL_WINDOW_DAYS = 30

# Attendance
ATTENDANCE_STATUSES: Set[str] = {"present", "absent", "exam"}
ATTENDANCE_SUBJECTS: Set[str] = {"hindi", "math", "english"}
SESSION_TYPES: Set[str] = {"regular", "assessment", "review"}
DEFAULT_SESSION_TYPE = "regular"
ATTENDANCE_NOTES_MAX_LENGTH = 500

# Level assessments and transitions
ASSESSMENT_PASSING_SCORE = 75
PROGRESS_STATUS_GREEN = "green"
PROGRESS_STATUSES: List[str] = ["green", "yellow", "orange", "red"]
TRANSITION_ACTIONS: Set[str] = {"PROMOTE", "DEMOTE", "HOLD", "REASSESS"}

# Student progress flags
PROGRESS_SUBJECTS: List[str] = ["hindi", "math", "english"]
PROGRESS_FLAGS: List[str] = ["improving", "struggling", "excelling", "average", "needs_attention"]
DEFAULT_TREND_DAYS = 30

# Stakeholder views
STAKEHOLDER_TYPES: Set[str] = {
    "principal", "director", "education_minister", "block_coordinator",
    "district_coordinator", "state_coordinator", "custom",
}
VIEW_SECTIONS: List[str] = ["schools", "tutors", "students", "cohorts", "assessments", "progress", "attendance"]
VIEW_USER_PHONE = "0000000000"

# Volunteer requests
VOLUNTEER_REQUIRED_FIELDS: List[str] = ["name", "email", "phoneNumber", "city", "state", "pincode", "education"]
VOLUNTEER_STATUSES: Set[str] = {"pending", "approved", "rejected"}
DEFAULT_REJECTION_REASON = "No reason provided"

# Pagination
class PaginationConfig:
    DEFAULT_LIMIT = safe_int_env("DEFAULT_PAGE_LIMIT", "10")
    MAX_LIMIT = 1000

# Logging
class LogConfig:
    LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DIR = os.getenv("LOG_DIR", os.path.join(os.getcwd(), "logs"))
    FILE_NAME = "vidyamrit.log"
    MAX_BYTES = safe_int_env("LOG_MAX_BYTES", str(30 * 1024 * 1024))
    BACKUP_COUNT = safe_int_env("LOG_BACKUP_COUNT", "5")

# Firebase
class FirebaseConfig:
    SERVICE_ACCOUNT_KEY = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY")
    SERVICE_ACCOUNT_KEY_PATH = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY_PATH")
    DEFAULT_KEY_FILE = "firebaseServiceAccountKey.json"
