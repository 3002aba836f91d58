"""API tests for schools and students"""

import pytest
from bson import ObjectId


def school_payload(**overrides):
    data = {
        "name": "Government Middle School Mhow",
        "type": "government",
        "udise_code": "23260200202",
        "address": "Station Road",
        "level": "middle",
        "city": "Mhow",
        "state": "Madhya Pradesh",
        "establishedYear": 1985,
        "pinCode": "453441",
        "pointOfContact": "Principal",
        "phone": "9111111111",
        "block": "Mhow",
    }
    data.update(overrides)
    return data


@pytest.mark.api
class TestSchools:

    def test_create(self, client, super_admin):
        _, headers = super_admin
        response = client.post("/api/schools", json=school_payload(), headers=headers)
        assert response.status_code == 201
        assert response.get_json()["data"]["udise_code"] == "23260200202"

    def test_duplicate_udise(self, client, school, super_admin):
        _, headers = super_admin
        response = client.post("/api/schools", json=school_payload(udise_code=school["udise_code"]), headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "School with this UDISE code already exists"

    def test_invalid_type(self, client, super_admin):
        _, headers = super_admin
        response = client.post("/api/schools", json=school_payload(type="charter"), headers=headers)
        assert response.status_code == 400

    def test_tutor_sees_only_own_school(self, client, school, tutor, super_admin):
        _, admin_headers = super_admin
        client.post("/api/schools", json=school_payload(), headers=admin_headers)
        _, headers = tutor

        response = client.get("/api/schools", headers=headers)

        assert response.status_code == 200
        assert [item["_id"] for item in response.get_json()["data"]] == [str(school["_id"])]
        assert len(client.get("/api/schools", headers=admin_headers).get_json()["data"]) == 2

    def test_tutor_cannot_create(self, client, tutor):
        _, headers = tutor
        assert client.post("/api/schools", json=school_payload(), headers=headers).status_code == 403

    def test_school_admin_has_no_access(self, client, make_user, school):
        _, headers = make_user("school_admin", school_id=school["_id"])
        assert client.get("/api/schools", headers=headers).status_code == 403

    def test_update_and_delete(self, client, school, super_admin):
        _, headers = super_admin
        response = client.put(f"/api/schools/{school['_id']}", json={"city": "Rau"}, headers=headers)
        assert response.get_json()["data"]["city"] == "Rau"

        assert client.delete(f"/api/schools/{school['_id']}", headers=headers).status_code == 200
        assert client.get(f"/api/schools/{school['_id']}", headers=headers).status_code == 404


@pytest.fixture
def student(client, tutor):
    _, headers = tutor
    response = client.post("/api/students", json={"name": "Meena", "age": 9, "gender": "female", "class": "4"},
                           headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.mark.api
class TestStudents:

    def test_created_in_tutor_school_with_roll_number(self, student, school):
        assert student["schoolId"] == str(school["_id"])
        assert student["roll_no"].startswith(f"STU-{str(school['_id'])[-6:]}-")
        assert student["hindi_level"] == 1
        assert student["isArchived"] is False

    def test_super_admin_must_name_school(self, client, super_admin):
        _, headers = super_admin
        response = client.post("/api/students", json={"name": "Raju", "age": 8, "gender": "male", "class": "3"},
                               headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "School ID is required"

    def test_subject_level_range(self, client, tutor):
        _, headers = tutor
        response = client.post("/api/students", json={
            "name": "Raju", "age": 8, "gender": "male", "class": "3", "math_level": 6
        }, headers=headers)
        assert response.status_code == 400

    def test_other_school_cannot_see_student(self, client, make_user, student):
        _, headers = make_user("tutor", school_id=ObjectId())
        assert client.get(f"/api/students/{student['_id']}", headers=headers).status_code == 404
        assert client.get("/api/students", headers=headers).get_json()["data"] == []

    def test_levels(self, client, tutor, student):
        _, headers = tutor
        response = client.get(f"/api/students/{student['_id']}/levels", headers=headers)
        assert response.status_code == 200
        assert response.get_json()["data"] == {
            "id": student["_id"], "name": "Meena", "roll_no": student["roll_no"],
            "hindi_level": 1, "math_level": 1, "english_level": 1,
        }

    def test_roll_number_not_editable(self, client, tutor, student):
        _, headers = tutor
        response = client.put(f"/api/students/{student['_id']}", json={"roll_no": "X", "age": 10}, headers=headers)
        data = response.get_json()["data"]
        assert data["roll_no"] == student["roll_no"]
        assert data["age"] == 10

    def test_archive_and_restore(self, client, tutor, student):
        _, headers = tutor

        assert client.delete(f"/api/students/{student['_id']}", headers=headers).status_code == 200
        assert client.get("/api/students", headers=headers).get_json()["data"] == []
        archived = client.get("/api/students/archived", headers=headers).get_json()["data"]
        assert [item["_id"] for item in archived] == [student["_id"]]
        assert client.get(f"/api/students/{student['_id']}", headers=headers).status_code == 404

        response = client.post(f"/api/students/{student['_id']}/restore", headers=headers)
        assert response.status_code == 200
        assert response.get_json()["data"]["isArchived"] is False
        assert client.post(f"/api/students/{student['_id']}/restore", headers=headers).status_code == 404
