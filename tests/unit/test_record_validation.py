"""Unit tests for id validation and the onboarding record builders"""

import pytest
from bson import ObjectId

from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.onboarding.onboarding_records import build_task, build_training_session
from vidyamrit.utils.security.security_utils import validate_object_id

TASK = {"title": "Visit school", "description": "Meet the head teacher", "phase": "initial_setup",
        "estimatedDuration": 2}
SESSION = {"title": "Orientation", "description": "Tutor orientation", "type": "online",
           "scheduledDate": "2024-07-01", "duration": 90}


@pytest.mark.unit
class TestValidateObjectId:

    def test_none_is_rejected(self):
        with pytest.raises(ValueError):
            validate_object_id(None)

    def test_dict_is_rejected(self):
        with pytest.raises(ValueError):
            validate_object_id({"$ne": None})

    def test_string_is_converted(self):
        assert validate_object_id("65a1b2c3d4e5f6a7b8c9d0e1") == ObjectId("65a1b2c3d4e5f6a7b8c9d0e1")


@pytest.mark.unit
class TestBuildTask:

    def test_dependencies_are_task_names(self):
        task = build_task({**TASK, "dependencies": ["Collect school documents", " Sign MoU "]})
        assert task["dependencies"] == ["Collect school documents", "Sign MoU"]

    def test_blank_dependency_rejected(self):
        with pytest.raises(ValidationError):
            build_task({**TASK, "dependencies": [""]})

    def test_null_lists_become_empty(self):
        task = build_task({**TASK, "dependencies": None, "blockers": None, "resources": None})
        assert task["dependencies"] == []
        assert task["blockers"] == []
        assert task["resources"] == []


@pytest.mark.unit
class TestBuildTrainingSession:

    def test_null_attendees(self):
        assert build_training_session({**SESSION, "attendees": None})["attendees"] == []

    @pytest.mark.parametrize("attendee", [{}, {"userId": None}, None, "not-an-id"])
    def test_attendee_without_valid_id(self, attendee):
        with pytest.raises(ValidationError):
            build_training_session({**SESSION, "attendees": [attendee]})

    def test_attendee_ids_accept_objects_and_strings(self):
        user_id = ObjectId()
        session = build_training_session({**SESSION, "attendees": [{"userId": str(user_id)}, str(user_id)]})
        assert [attendee["userId"] for attendee in session["attendees"]] == [user_id, user_id]
        assert session["attendees"][0]["registrationStatus"] == "registered"
