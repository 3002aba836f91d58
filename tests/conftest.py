"""
Pytest configuration and fixtures for the Vidyamrit backend tests

Unit fixtures work on plain dicts; API fixtures run the Flask app against
an in-memory mongomock database with the Firebase auth client mocked.
"""

import pytest
from unittest.mock import Mock, patch

import mongomock
from bson import ObjectId

from vidyamrit.app import create_app
from vidyamrit.config.settings import LogConfig
from vidyamrit.db import db_utils


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, pure functions)"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that call the HTTP API with an in-memory database"
    )


# =============================================================================
# DATABASE AND FIREBASE
# =============================================================================

@pytest.fixture
def db():
    """Fresh in-memory database shared by every repository"""
    database = mongomock.MongoClient()["vidyamrit_test"]
    db_utils.set_db(database)
    yield database
    db_utils.set_db(None)


@pytest.fixture
def firebase_auth():
    """
    Mocked firebase_admin.auth client.

    verify_id_token treats the bearer token as the Firebase uid, so a user
    stored with uid "abc" authenticates with "Authorization: Bearer abc".
    """
    auth_client = Mock()
    auth_client.verify_id_token.side_effect = lambda token: {"uid": token}
    auth_client.create_user.return_value = Mock(uid="firebase-new-uid")
    with patch("vidyamrit.auth.firebase_client.get_auth_client", return_value=auth_client):
        yield auth_client


# =============================================================================
# APP FIXTURES
# =============================================================================

@pytest.fixture
def app(db, firebase_auth, tmp_path, monkeypatch):
    monkeypatch.setattr(LogConfig, "DIR", str(tmp_path))
    application = create_app()
    application.config.update({"TESTING": True})
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(db):
    """Insert a user and return it with the headers that authenticate as that user"""
    def _make_user(role, school_id=None, email=None):
        uid = f"uid-{ObjectId()}"
        user = {
            "uid": uid,
            "name": f"{role} user",
            "email": email or f"{uid}@example.org",
            "phoneNo": "",
            "role": role,
            "schoolId": school_id,
        }
        user["_id"] = db["users"].insert_one(user).inserted_id
        return user, {"Authorization": f"Bearer {uid}"}
    return _make_user


@pytest.fixture
def super_admin(make_user):
    return make_user("super_admin")


@pytest.fixture
def school(db):
    """A stored school document"""
    doc = {
        "name": "Government Primary School Rau",
        "type": "government",
        "udise_code": "23260100101",
        "address": "Main Road",
        "level": "primary",
        "city": "Indore",
        "state": "Madhya Pradesh",
        "establishedYear": 1998,
        "pinCode": "453331",
        "pointOfContact": "Head Teacher",
        "phone": "9000000000",
    }
    doc["_id"] = db["schools"].insert_one(doc).inserted_id
    return doc


@pytest.fixture
def tutor(make_user, school):
    return make_user("tutor", school_id=school["_id"])
