"""API tests for enhanced student profiles"""

from datetime import datetime

import pytest
from bson import ObjectId

from vidyamrit.utils.time.timeutils import IST


@pytest.fixture
def student(db, school):
    doc = {"name": "Meena", "age": 9, "gender": "female", "class": "4", "roll_no": "STU-1",
           "school": school["_id"], "isArchived": False}
    doc["_id"] = db["students"].insert_one(doc).inserted_id
    return doc


@pytest.fixture
def school_admin(make_user, school):
    return make_user("school_admin", school_id=school["_id"])


@pytest.fixture
def profile(client, student, school_admin):
    _, headers = school_admin
    response = client.post("/api/enhanced-students", json={
        "studentId": str(student["_id"]),
        "admissionNumber": "ADM-2024-001",
        "admissionDate": "2024-04-01",
        "learningPreferences": {"learningStyle": "visual"},
        "academicGoals": {"shortTerm": [{"goal": "Read a paragraph", "targetDate": "2020-05-01",
                                         "status": "in_progress"}]},
    }, headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]["profile"]


def url(profile, suffix=""):
    return f"/api/enhanced-students/{profile['_id']}{suffix}"


@pytest.mark.api
class TestCreateProfile:

    def test_defaults_merged(self, profile):
        preferences = profile["learningPreferences"]
        assert preferences["learningStyle"] == "visual"
        assert preferences["preferredLanguage"] == "Hindi"
        assert profile["status"] == "active"
        assert profile["currentLevel"] == "beginner"
        assert profile["privacySettings"]["shareHealthInfo"] is False
        assert profile["performanceMetrics"]["engagementLevel"] == "medium"

    def test_one_profile_per_student(self, client, profile, student, school_admin):
        _, headers = school_admin
        response = client.post("/api/enhanced-students", json={
            "studentId": str(student["_id"]), "admissionNumber": "ADM-2024-002", "admissionDate": "2024-04-01",
        }, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Enhanced profile already exists for this student"

    def test_admission_number_unique(self, client, db, profile, school, school_admin):
        other = db["students"].insert_one({"name": "Raju", "school": school["_id"]}).inserted_id
        _, headers = school_admin
        response = client.post("/api/enhanced-students", json={
            "studentId": str(other), "admissionNumber": "ADM-2024-001", "admissionDate": "2024-04-01",
        }, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Admission number already in use"

    def test_unknown_student(self, client, school_admin):
        _, headers = school_admin
        response = client.post("/api/enhanced-students", json={
            "studentId": str(ObjectId()), "admissionNumber": "ADM-9", "admissionDate": "2024-04-01",
        }, headers=headers)
        assert response.status_code == 404


@pytest.mark.api
class TestProfileAccess:

    def test_list_scoped_to_school(self, client, profile, make_user):
        _, headers = make_user("school_admin", school_id=ObjectId())
        data = client.get("/api/enhanced-students", headers=headers).get_json()["data"]
        assert data["profiles"] == []
        assert data["pagination"]["total"] == 0

    def test_other_school_admin_denied(self, client, profile, make_user):
        _, headers = make_user("school_admin", school_id=ObjectId())
        assert client.get(url(profile), headers=headers).status_code == 403

    def test_filter_by_learning_style(self, client, profile, super_admin):
        _, headers = super_admin
        found = client.get("/api/enhanced-students?learningStyle=visual", headers=headers).get_json()["data"]
        missing = client.get("/api/enhanced-students?learningStyle=auditory", headers=headers).get_json()["data"]
        assert [item["_id"] for item in found["profiles"]] == [profile["_id"]]
        assert missing["profiles"] == []

    def test_statistics(self, client, profile, school_admin):
        _, headers = school_admin
        data = client.get("/api/enhanced-students/statistics", headers=headers).get_json()["data"]
        assert data["statistics"]["totalStudents"] == 1
        assert data["learningStyleDistribution"] == [{"_id": "visual", "count": 1}]

    def test_delete_requires_super_admin(self, client, profile, school_admin, super_admin):
        _, headers = school_admin
        assert client.delete(url(profile), headers=headers).status_code == 403
        _, headers = super_admin
        assert client.delete(url(profile), headers=headers).status_code == 200
        assert client.get(url(profile), headers=headers).status_code == 404


@pytest.mark.api
class TestProfileRecords:

    def test_academic_records_update_gpa(self, client, profile, school_admin):
        _, headers = school_admin
        client.post(url(profile, "/academic-records"), json={"academicYear": "2023-24", "overallGPA": 3.0},
                    headers=headers)
        response = client.post(url(profile, "/academic-records"), json={"academicYear": "2024-25", "overallGPA": 4.0},
                               headers=headers)
        assert response.status_code == 201
        updated = response.get_json()["data"]["profile"]
        assert len(updated["academicRecords"]) == 2
        assert updated["performanceMetrics"]["currentGPA"] == 3.5

    def test_behavioral_records_and_summary(self, client, profile, school_admin):
        _, headers = school_admin
        for kind in ("positive", "positive", "negative"):
            client.post(url(profile, "/behavioral-records"), json={"type": kind, "description": "Observed"},
                        headers=headers)
        response = client.post(url(profile, "/behavioral-records"), json={"type": "mixed", "description": "x"},
                               headers=headers)
        assert response.status_code == 400

        summary = client.get(url(profile, "/behavioral-summary"), headers=headers).get_json()["data"]
        assert summary["behavioralSummary"]["totalRecords"] == 3
        assert summary["behavioralSummary"]["positiveRecords"] == 2

    def test_unknown_record_type(self, client, profile, school_admin):
        _, headers = school_admin
        response = client.post(url(profile, "/hobbies"), json={}, headers=headers)
        assert response.status_code == 404
        assert response.get_json()["message"] == "Record type not found"

    def test_intervention_progress(self, client, profile, school_admin):
        _, headers = school_admin
        response = client.post(url(profile, "/interventions"), json={
            "type": "remedial", "description": "Extra reading time", "startDate": "2024-07-01",
        }, headers=headers)
        intervention = response.get_json()["data"]["profile"]["interventions"][0]
        assert intervention["progress"] == []

        response = client.put(url(profile, f"/interventions/{intervention['_id']}/progress"),
                              json={"notes": "Reads slowly but steadily", "effectiveness": "moderate"}, headers=headers)
        progress = response.get_json()["data"]["profile"]["interventions"][0]["progress"]
        assert progress[0]["notes"] == "Reads slowly but steadily"

        response = client.put(url(profile, f"/interventions/{ObjectId()}/progress"), json={}, headers=headers)
        assert response.status_code == 404

    def test_upcoming_goals_include_overdue(self, client, profile, school_admin):
        _, headers = school_admin
        data = client.get(url(profile, "/upcoming-goals"), headers=headers).get_json()["data"]
        assert [goal["goal"] for goal in data["upcomingGoals"]] == ["Read a paragraph"]

    def test_performance_metrics(self, client, profile, school_admin):
        _, headers = school_admin
        response = client.put(url(profile, "/performance-metrics"), json={"academicTrend": "improving"},
                              headers=headers)
        metrics = response.get_json()["data"]["profile"]["performanceMetrics"]
        assert metrics["academicTrend"] == "improving"
        assert metrics["engagementLevel"] == "medium"

    def test_report_types(self, client, profile, school_admin):
        _, headers = school_admin
        report = client.get(url(profile, "/report?type=academic"), headers=headers).get_json()["data"]["report"]
        assert report["admissionNumber"] == "ADM-2024-001"
        assert "academicRecords" in report
        assert client.get(url(profile, "/report?type=summary"), headers=headers).status_code == 400

    def test_attendance_overview(self, client, profile, school_admin):
        _, headers = school_admin
        data = client.get(url(profile, "/attendance-overview"), headers=headers).get_json()["data"]
        assert data["attendanceOverview"]["trend"] == "stable"

    def test_attendance_overview_counts_cohort_roll_calls(self, client, db, profile, student, school, school_admin):
        other = ObjectId()
        db["cohorts"].insert_one({
            "name": "Hindi Morning",
            "schoolId": school["_id"],
            "students": [student["_id"], other],
            "attendance": [
                {"date": datetime(2024, 7, 1, tzinfo=IST), "studentId": student["_id"], "status": "present"},
                {"date": datetime(2024, 7, 2, tzinfo=IST), "studentId": student["_id"], "status": "present"},
                {"date": datetime(2024, 7, 3, tzinfo=IST), "studentId": student["_id"], "status": "absent"},
                {"date": datetime(2024, 7, 3, tzinfo=IST), "studentId": other, "status": "present"},
            ],
        })
        db["cohorts"].insert_one({"name": "Elsewhere", "schoolId": school["_id"], "students": [other],
                                  "attendance": [{"date": datetime(2024, 7, 4, tzinfo=IST), "studentId": other,
                                                  "status": "present"}]})
        _, headers = school_admin
        data = client.get(url(profile, "/attendance-overview"), headers=headers).get_json()["data"]
        overview = data["attendanceOverview"]
        assert overview["totalDays"] == 3
        assert overview["presentDays"] == 2
        assert overview["absentDays"] == 1
        assert overview["percentage"] == 66.7
