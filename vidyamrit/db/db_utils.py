from pymongo import MongoClient

from vidyamrit.config.settings import MONGO_URI, DB_NAME

_client = None
_db = None

# Centralized collection names
collections = {
    'users': 'users',
    'schools': 'schools',
    'students': 'students',
    'cohorts': 'cohorts',
    'programs': 'programs',
    'school_onboardings': 'schoolonboardings',
    'enhanced_student_profiles': 'enhancedstudentprofiles',
    'volunteer_requests': 'volunteerrequests',
    'attendance': 'attendances',
    'views': 'views',
}


def get_client():
    """Get MongoDB client instance"""
    global _client
    if _client is None:
        _client = MongoClient(MONGO_URI, maxPoolSize=50, serverSelectionTimeoutMS=30000, socketTimeoutMS=10000)
    return _client


def get_db():
    """Get database instance"""
    global _db
    if _db is None:
        _db = get_client()[DB_NAME]
    return _db


def set_db(db):
    """Point every repository at another database (used by tests and scripts)"""
    global _db
    _db = db


def get_collection(name):
    """Get collection by name"""
    return get_db()[collections.get(name, name)]


def ensure_indexes():
    """Create the unique indexes the collections rely on"""
    db = get_db()
    db[collections['users']].create_index("uid", unique=True)
    db[collections['users']].create_index("email", unique=True)
    db[collections['schools']].create_index("udise_code", unique=True)
    db[collections['students']].create_index([("school", 1), ("roll_no", 1)], unique=True)
    db[collections['programs']].create_index("name", unique=True)
    db[collections['school_onboardings']].create_index("schoolId", unique=True)
    db[collections['school_onboardings']].create_index("onboardingCode", unique=True)
    db[collections['enhanced_student_profiles']].create_index("studentId", unique=True)
    db[collections['enhanced_student_profiles']].create_index("admissionNumber", unique=True)
    db[collections['attendance']].create_index([("student", 1), ("date", 1), ("subject", 1)], unique=True)
    db[collections['attendance']].create_index([("school", 1), ("date", 1)])
    db[collections['views']].create_index("viewUser.email", unique=True)
    db[collections['views']].create_index("viewUser.uid", unique=True)
