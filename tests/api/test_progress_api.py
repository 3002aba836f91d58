"""API tests for per-subject student progress flags"""

from datetime import datetime

import pytest
from bson import ObjectId


@pytest.fixture
def students(db, school):
    docs = [
        {"name": "Asha", "class": "3", "school": school["_id"], "isArchived": False},
        {"name": "Bina", "class": "3", "school": school["_id"], "isArchived": False,
         "currentProgressFlags": {"hindi": "excelling", "math": "average", "english": "average"}},
    ]
    for doc in docs:
        doc["_id"] = db["students"].insert_one(doc).inserted_id
    return docs


def flag_url(student):
    return f"/api/progress/student/{student['_id']}"


@pytest.mark.api
class TestStudentFlags:

    def test_update_flag_keeps_history(self, client, db, students, tutor):
        _, headers = tutor
        response = client.put(flag_url(students[0]), json={
            "subject": "math", "flag": "struggling", "reason": "Cannot carry over in addition",
        }, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["data"]["message"] == "Progress flag updated successfully"

        stored = db["students"].find_one({"_id": students[0]["_id"]})
        assert stored["currentProgressFlags"] == {"hindi": "average", "math": "struggling", "english": "average"}
        assert stored["progressHistory"][0]["reason"] == "Cannot carry over in addition"

    @pytest.mark.parametrize("body, message", [
        ({"subject": "math", "flag": "struggling"}, "Subject, flag, and reason are required"),
        ({"subject": "science", "flag": "struggling", "reason": "x"}, "Invalid subject"),
        ({"subject": "math", "flag": "lost", "reason": "x"}, "Invalid progress flag"),
    ])
    def test_invalid_updates(self, client, students, tutor, body, message):
        _, headers = tutor
        response = client.put(flag_url(students[0]), json=body, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == message

    def test_other_school_denied(self, client, db, students, make_user):
        other_school = db["schools"].insert_one({"name": "Other"}).inserted_id
        _, headers = make_user("tutor", school_id=other_school)
        response = client.put(flag_url(students[0]), json={
            "subject": "math", "flag": "struggling", "reason": "x",
        }, headers=headers)
        assert response.status_code == 403

    def test_unknown_student(self, client, tutor):
        _, headers = tutor
        assert client.get(f"/api/progress/student/{ObjectId()}", headers=headers).status_code == 404

    def test_progress_with_history(self, client, students, tutor):
        _, headers = tutor
        client.put(flag_url(students[0]), json={"subject": "hindi", "flag": "improving", "reason": "x"},
                   headers=headers)
        plain = client.get(flag_url(students[0]), headers=headers).get_json()["data"]
        assert plain["currentProgressFlags"]["hindi"] == "improving"
        assert "progressHistory" not in plain

        detailed = client.get(f"{flag_url(students[0])}?includeHistory=true", headers=headers).get_json()["data"]
        assert len(detailed["progressHistory"]) == 1


@pytest.mark.api
class TestProgressReports:

    def test_statistics_use_worst_case_overall(self, client, db, students, tutor):
        db["students"].update_one({"_id": students[0]["_id"]},
                                  {"$set": {"currentProgressFlags": {"math": "struggling"}}})
        _, headers = tutor
        stats = client.get("/api/progress/statistics", headers=headers).get_json()["data"]["statistics"]
        assert stats["totalStudents"] == 2
        assert stats["bySubject"]["math"]["struggling"] == 1
        assert stats["bySubject"]["hindi"]["excelling"] == 1
        assert stats["overall"]["needs_attention"] == 1
        assert stats["overall"]["excelling"] == 1

    def test_statistics_filtered_by_flag_list_students(self, client, students, tutor):
        _, headers = tutor
        data = client.get("/api/progress/statistics?subject=hindi&flag=excelling", headers=headers) \
            .get_json()["data"]
        assert [student["name"] for student in data["students"]] == ["Bina"]

    def test_trends_window(self, client, db, students, tutor):
        db["students"].update_one({"_id": students[0]["_id"]}, {"$set": {"progressHistory": [
            {"flag": "struggling", "subject": "math", "reason": "old", "date": datetime(2020, 1, 1)},
        ]}})
        _, headers = tutor
        client.put(flag_url(students[0]), json={"subject": "math", "flag": "improving", "reason": "new"},
                   headers=headers)
        data = client.get(f"/api/progress/trends?studentId={students[0]['_id']}&subject=math", headers=headers) \
            .get_json()["data"]
        assert data["period"] == "30 days"
        assert [entry["reason"] for entry in data["trends"]] == ["new"]

    def test_trends_require_student(self, client, tutor):
        _, headers = tutor
        response = client.get("/api/progress/trends", headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Student ID is required"

    def test_trends_window_is_bounded(self, client, students, tutor):
        _, headers = tutor
        response = client.get(f"/api/progress/trends?studentId={students[0]['_id']}&days=9999999999",
                              headers=headers)
        assert response.status_code == 400

    def test_bulk_update_reports_failures(self, client, db, students, make_user, school):
        _, headers = make_user("school_admin", school_id=school["_id"])
        data = client.post("/api/progress/bulk-update", json={"updates": [
            {"studentId": str(students[0]["_id"]), "subject": "english", "flag": "improving", "reason": "x"},
            {"studentId": str(ObjectId()), "subject": "english", "flag": "improving", "reason": "x"},
            {"studentId": str(students[1]["_id"]), "subject": "english", "flag": "bad", "reason": "x"},
        ]}, headers=headers).get_json()["data"]
        assert data["results"]["successful"] == 1
        assert data["results"]["failed"] == 2
        assert db["students"].find_one({"_id": students[0]["_id"]})["currentProgressFlags"]["english"] == "improving"

    def test_bulk_update_needs_admin(self, client, tutor):
        _, headers = tutor
        assert client.post("/api/progress/bulk-update", json={"updates": []}, headers=headers).status_code == 403
