"""API tests for cohort roll calls and student attendance records"""

from datetime import date, timedelta

import pytest
from bson import ObjectId

PROGRAM = {
    "name": "Foundational Math",
    "subject": "math",
    "description": "Number sense",
    "totalLevels": 2,
    "levels": [
        {"levelNumber": 1, "title": "Counting", "timeframe": 2, "timeframeUnit": "weeks"},
        {"levelNumber": 2, "title": "Addition", "timeframe": 2, "timeframeUnit": "weeks"},
    ],
}

STUDENT_A = "65a1b2c3d4e5f6a7b8c9d0e1"
STUDENT_B = "65a1b2c3d4e5f6a7b8c9d0e2"


def teaching_days(start, count):
    """``count`` Monday-Saturday days from ``start``"""
    days, day = [], start
    while len(days) < count:
        if day.weekday() != 6:
            days.append(day.isoformat())
        day += timedelta(days=1)
    return days


@pytest.fixture
def program(client, super_admin):
    _, headers = super_admin
    response = client.post("/api/programs", json=PROGRAM, headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.fixture
def cohort(client, school, super_admin, tutor, program):
    _, headers = super_admin
    tutor_user, _ = tutor
    response = client.post("/api/cohorts", json={
        "name": "Math Morning",
        "schoolId": str(school["_id"]),
        "tutorId": str(tutor_user["_id"]),
        "programId": program["_id"],
        "startDate": "2024-07-01",
        "students": [STUDENT_A, STUDENT_B],
    }, headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]


def roll_call(client, headers, cohort, day, statuses):
    return client.post("/api/attendance/cohort", json={
        "cohortId": cohort["_id"],
        "date": day,
        "attendanceRecords": [{"studentId": student, "status": status} for student, status in statuses.items()],
    }, headers=headers)


@pytest.mark.api
class TestCohortRollCall:

    def test_roll_calls_make_cohort_ready_for_assessment(self, client, cohort, tutor):
        _, headers = tutor
        readiness_url = f"/api/cohorts/{cohort['_id']}/assessment-readiness"

        before = client.get(readiness_url, headers=headers).get_json()["data"]
        assert before["weeksCompleted"] == 0
        assert before["isReadyForAssessment"] is False

        days = teaching_days(date(2024, 7, 1), 12)
        assert "2024-07-07" not in days
        for day in days:
            response = roll_call(client, headers, cohort, day, {STUDENT_A: "present", STUDENT_B: "absent"})
            assert response.status_code == 200

        after = client.get(readiness_url, headers=headers).get_json()["data"]
        assert after["weeksCompleted"] == 2
        assert after["isReadyForAssessment"] is True
        assert "daysRemaining" not in after

    def test_time_tracking_counts_attendance_days(self, client, cohort, tutor):
        _, headers = tutor
        roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "present"})
        data = roll_call(client, headers, cohort, "2024-07-02", {STUDENT_A: "present"}).get_json()["data"]
        assert data["timeTracking"]["attendanceDays"] == 2
        assert data["date"] == "2024-07-02"

    def test_same_day_mark_is_replaced(self, client, db, cohort, tutor):
        _, headers = tutor
        roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "present"})
        roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "absent"})
        stored = db["cohorts"].find_one({"_id": ObjectId(cohort["_id"])})
        assert [entry["status"] for entry in stored["attendance"]] == ["absent"]

    def test_rejected_records_are_reported(self, client, cohort, tutor):
        _, headers = tutor
        outsider = str(ObjectId())
        data = roll_call(client, headers, cohort, "2024-07-01", {
            STUDENT_A: "present", STUDENT_B: "late", outsider: "present",
        }).get_json()["data"]
        assert [result["studentId"] for result in data["results"]] == [STUDENT_A]
        errors = {error["studentId"]: error["error"] for error in data["errors"]}
        assert errors[STUDENT_B] == "Invalid status 'late'"
        assert errors[outsider] == "Student not found in this cohort"

    def test_other_tutor_cannot_record(self, client, cohort, make_user, school):
        _, headers = make_user("tutor", school_id=school["_id"])
        response = roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "present"})
        assert response.status_code == 403
        assert response.get_json()["message"] == "You are not authorized to record attendance for this cohort"

    def test_school_admin_cannot_record(self, client, cohort, make_user, school):
        _, headers = make_user("school_admin", school_id=school["_id"])
        assert roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "present"}).status_code == 403

    def test_unknown_cohort(self, client, tutor):
        _, headers = tutor
        response = client.post("/api/attendance/cohort", json={
            "cohortId": str(ObjectId()), "attendanceRecords": [{"studentId": STUDENT_A, "status": "present"}],
        }, headers=headers)
        assert response.status_code == 404

    def test_attendance_grouped_by_date(self, client, db, cohort, school, tutor):
        db["students"].insert_one({"_id": ObjectId(STUDENT_A), "name": "Asha", "roll_no": "R1",
                                   "school": school["_id"]})
        _, headers = tutor
        roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "present", STUDENT_B: "absent"})
        roll_call(client, headers, cohort, "2024-07-02", {STUDENT_A: "absent"})

        data = client.get(f"/api/attendance/cohort/{cohort['_id']}", headers=headers).get_json()["data"]
        assert data["totalStudents"] == 2
        assert list(data["attendance"]) == ["2024-07-01", "2024-07-02"]
        first_day = {row["student"]["_id"]: row for row in data["attendance"]["2024-07-01"]}
        assert first_day[STUDENT_A]["student"]["name"] == "Asha"
        assert first_day[STUDENT_B]["status"] == "absent"

        one_day = client.get(f"/api/attendance/cohort/{cohort['_id']}?date=2024-07-02", headers=headers) \
            .get_json()["data"]
        assert list(one_day["attendance"]) == ["2024-07-02"]

    def test_tutor_summary(self, client, cohort, tutor):
        _, headers = tutor
        roll_call(client, headers, cohort, "2024-07-01", {STUDENT_A: "present"})
        data = client.get("/api/attendance/tutor/summary?date=2024-07-01", headers=headers).get_json()["data"]
        summary = data["cohorts"][0]
        assert summary["cohortName"] == "Math Morning"
        assert summary["presentCount"] == 1
        assert summary["unmarkedCount"] == 1
        assert summary["attendanceRate"] == 100


@pytest.mark.api
class TestStudentAttendance:

    def test_mark_then_replace(self, client, db, school, tutor):
        _, headers = tutor
        mark = {"studentId": STUDENT_A, "schoolId": str(school["_id"]), "status": "present",
                "subject": "math", "date": "2024-07-01"}
        assert client.post("/api/attendance", json=mark, headers=headers).status_code == 201
        response = client.post("/api/attendance", json={**mark, "status": "absent"}, headers=headers)
        assert response.status_code == 200
        assert response.get_json()["data"]["status"] == "absent"
        assert db["attendances"].count_documents({}) == 1

    def test_invalid_status(self, client, school, tutor):
        _, headers = tutor
        response = client.post("/api/attendance", json={
            "studentId": STUDENT_A, "schoolId": str(school["_id"]), "status": "late",
        }, headers=headers)
        assert response.status_code == 400

    def test_bulk_reports_failures(self, client, school, tutor):
        _, headers = tutor
        data = client.post("/api/attendance/bulk", json={
            "schoolId": str(school["_id"]),
            "date": "2024-07-01",
            "attendanceRecords": [
                {"studentId": STUDENT_A, "status": "present"},
                {"studentId": STUDENT_B, "status": "late"},
            ],
        }, headers=headers).get_json()["data"]
        assert data["processed"] == 1
        assert data["failed"] == 1
        assert data["errors"][0]["studentId"] == STUDENT_B

    def test_statistics_and_date_filter(self, client, school, tutor):
        _, headers = tutor
        for day, status in (("2024-07-01", "present"), ("2024-07-02", "present"), ("2024-07-03", "absent")):
            client.post("/api/attendance", json={
                "studentId": STUDENT_A, "schoolId": str(school["_id"]), "status": status, "date": day,
            }, headers=headers)

        stats = client.get(f"/api/attendance/stats?studentId={STUDENT_A}", headers=headers).get_json()["data"]
        assert stats["studentStats"][0]["totalDays"] == 3
        assert stats["studentStats"][0]["attendancePercentage"] == 66.7

        records = client.get("/api/attendance?startDate=2024-07-02&endDate=2024-07-03", headers=headers) \
            .get_json()["data"]
        assert [record["status"] for record in records] == ["absent", "present"]

    def test_daily_includes_unmarked_students(self, client, db, school, tutor):
        marked = db["students"].insert_one({"name": "Asha", "school": school["_id"]}).inserted_id
        db["students"].insert_one({"name": "Bina", "school": school["_id"]})
        _, headers = tutor
        client.post("/api/attendance", json={
            "studentId": str(marked), "schoolId": str(school["_id"]), "status": "present", "date": "2024-07-01",
        }, headers=headers)

        data = client.get(f"/api/attendance/daily?schoolId={school['_id']}&date=2024-07-01", headers=headers) \
            .get_json()["data"]
        statuses = {row["student"]["name"]: row["status"] for row in data["students"]}
        assert statuses == {"Asha": "present", "Bina": None}

    def test_daily_requires_school(self, client, tutor):
        _, headers = tutor
        assert client.get("/api/attendance/daily", headers=headers).status_code == 400
