"""API tests for programs and cohorts"""

import pytest

PROGRAM = {
    "name": "Foundational Hindi",
    "subject": "hindi",
    "description": "Reading readiness",
    "totalLevels": 3,
    "levels": [
        {"levelNumber": 1, "title": "Sounds", "timeframe": 2, "timeframeUnit": "weeks"},
        {"levelNumber": 2, "title": "Letters", "timeframe": 14, "timeframeUnit": "days"},
        {"levelNumber": 3, "title": "Words", "timeframe": 1, "timeframeUnit": "months"},
    ],
}


@pytest.fixture
def program(client, super_admin):
    _, headers = super_admin
    response = client.post("/api/programs", json=PROGRAM, headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.mark.api
class TestPrograms:

    def test_duplicate_name(self, client, program, super_admin):
        _, headers = super_admin
        response = client.post("/api/programs", json=PROGRAM, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Program with this name already exists"

    def test_level_count_must_match(self, client, super_admin):
        _, headers = super_admin
        response = client.post("/api/programs", json={**PROGRAM, "totalLevels": 4}, headers=headers)
        assert response.status_code == 400

    def test_tutor_cannot_create(self, client, tutor):
        _, headers = tutor
        assert client.post("/api/programs", json=PROGRAM, headers=headers).status_code == 403

    def test_list_is_paginated_and_hides_inactive(self, client, program, super_admin):
        _, headers = super_admin
        data = client.get("/api/programs", headers=headers).get_json()["data"]
        assert [item["_id"] for item in data["items"]] == [program["_id"]]
        assert data["pagination"]["total"] == 1

        client.patch(f"/api/programs/{program['_id']}/toggle-status", headers=headers)
        assert client.get("/api/programs", headers=headers).get_json()["data"]["items"] == []
        everything = client.get("/api/programs?includeInactive=true", headers=headers).get_json()["data"]
        assert len(everything["items"]) == 1

    def test_only_creator_or_super_admin_edits(self, client, program, make_user):
        _, headers = make_user("school_admin")
        response = client.put(f"/api/programs/{program['_id']}", json={"description": "x"}, headers=headers)
        assert response.status_code == 403
        assert response.get_json()["message"] == "Not authorized to update this program"

    def test_time_to_complete(self, client, program, tutor):
        _, headers = tutor
        data = client.get(f"/api/programs/{program['_id']}/time-to-complete?unit=days", headers=headers) \
            .get_json()["data"]
        assert data["totalTime"] == 58
        assert data["toLevel"] == 3
        assert [level["levelNumber"] for level in data["breakdown"]] == [1, 2, 3]

        response = client.get(f"/api/programs/{program['_id']}/time-to-complete?unit=years", headers=headers)
        assert response.status_code == 400

    def test_time_lapse_matrix(self, client, program, tutor):
        _, headers = tutor
        data = client.get(f"/api/programs/{program['_id']}/time-lapse-matrix", headers=headers).get_json()["data"]
        assert data["timeLapseMatrix"] == [[2, 4, 9], [0, 2, 7], [0, 0, 5]]

    def test_level_details(self, client, program, tutor):
        _, headers = tutor
        data = client.get(f"/api/programs/{program['_id']}/levels/2", headers=headers).get_json()["data"]
        assert data["level"]["title"] == "Letters"
        assert data["navigation"] == {
            "nextLevel": {"levelNumber": 3, "title": "Words"},
            "previousLevel": {"levelNumber": 1, "title": "Sounds"},
        }
        response = client.get(f"/api/programs/{program['_id']}/levels/9", headers=headers)
        assert response.status_code == 404

    def test_validate_progression(self, client, program, tutor):
        _, headers = tutor
        path = f"/api/programs/{program['_id']}/validate-progression"
        assert client.post(path, json={"fromLevel": 1, "toLevel": 2}, headers=headers) \
            .get_json()["data"]["isValid"] is True
        assert client.post(path, json={"fromLevel": 1, "toLevel": 3}, headers=headers) \
            .get_json()["data"]["isValid"] is False
        assert client.post(path, json={"fromLevel": 1}, headers=headers).status_code == 400


@pytest.fixture
def cohort(client, school, super_admin):
    _, headers = super_admin
    response = client.post("/api/cohorts", json={"name": "Level 1 Morning", "schoolId": str(school["_id"])},
                           headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]


@pytest.mark.api
class TestCohorts:

    def test_created_with_defaults(self, cohort):
        assert cohort["currentLevel"] == 1
        assert cohort["students"] == []
        assert cohort["holidays"] == []
        assert cohort["timeTracking"]["currentLevelStartDate"] == cohort["startDate"]

    def test_tutor_cannot_create(self, client, school, tutor):
        _, headers = tutor
        response = client.post("/api/cohorts", json={"name": "X", "schoolId": str(school["_id"])}, headers=headers)
        assert response.status_code == 403

    def test_add_student_once(self, client, cohort, tutor):
        _, headers = tutor
        student_id = "65a1b2c3d4e5f6a7b8c9d0e1"
        client.post(f"/api/cohorts/{cohort['_id']}/add-student", json={"studentId": student_id}, headers=headers)
        response = client.post(f"/api/cohorts/{cohort['_id']}/add-student", json={"studentId": student_id},
                               headers=headers)
        assert response.get_json()["data"]["students"] == [student_id]

    def test_add_to_default_creates_cohort_once(self, client, db, school, tutor):
        _, headers = tutor
        for student_id in ("65a1b2c3d4e5f6a7b8c9d0e1", "65a1b2c3d4e5f6a7b8c9d0e2"):
            response = client.post("/api/cohorts/add-to-default", json={
                "studentId": student_id, "schoolId": str(school["_id"]),
            }, headers=headers)
            assert response.status_code == 200

        cohorts = list(db["cohorts"].find({"schoolId": school["_id"]}))
        assert len(cohorts) == 1
        assert cohorts[0]["name"].startswith("Default Cohort - ")
        assert len(cohorts[0]["students"]) == 2

    def test_generate_optimal(self, client, tutor):
        _, headers = tutor
        response = client.post("/api/cohorts/generate-optimal",
                               json={"levels": [{"level": 2, "students": 25}]}, headers=headers)
        assert response.get_json()["data"] == {"plan": [{"level": 2, "cohorts": [20, 5]}]}

    def test_toggle_holiday(self, client, cohort, tutor):
        _, headers = tutor
        path = f"/api/cohorts/{cohort['_id']}/toggle-holiday"

        added = client.post(path, json={"date": "2024-08-15"}, headers=headers).get_json()["data"]
        assert added["isHoliday"] is True
        assert added["holidays"] == ["2024-08-15"]

        removed = client.post(path, json={"date": "2024-08-15"}, headers=headers).get_json()["data"]
        assert removed["isHoliday"] is False
        assert removed["holidays"] == []

    def test_assessment_readiness_without_program(self, client, cohort, tutor):
        _, headers = tutor
        data = client.get(f"/api/cohorts/{cohort['_id']}/assessment-readiness", headers=headers).get_json()["data"]
        assert data["cohortName"] == "Level 1 Morning"
        assert data["isReadyForAssessment"] is False

    def test_level_change_resets_level_clock(self, client, db, cohort, program, super_admin):
        _, headers = super_admin
        response = client.put(f"/api/cohorts/{cohort['_id']}",
                              json={"currentLevel": 2, "programId": program["_id"]}, headers=headers)
        data = response.get_json()["data"]
        assert data["currentLevel"] == 2
        assert data["timeTracking"]["currentLevelStartDate"] != cohort["timeTracking"]["currentLevelStartDate"]

    def test_delete(self, client, cohort, super_admin):
        _, headers = super_admin
        assert client.delete(f"/api/cohorts/{cohort['_id']}", headers=headers).status_code == 200
        assert client.get(f"/api/cohorts/{cohort['_id']}", headers=headers).status_code == 404

    def test_null_student_id_rejected(self, client, db, cohort, super_admin):
        _, headers = super_admin
        response = client.put(f"/api/cohorts/{cohort['_id']}", json={"students": [None]}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid ObjectId format"
        assert db["cohorts"].find_one({"name": "Level 1 Morning"})["students"] == []

    def test_add_student_starts_progress_record(self, client, db, cohort, tutor):
        _, headers = tutor
        student_id = "65a1b2c3d4e5f6a7b8c9d0e1"
        client.post(f"/api/cohorts/{cohort['_id']}/add-student", json={"studentId": student_id}, headers=headers)
        progress = db["cohorts"].find_one({"name": "Level 1 Morning"})["progress"]
        assert [(str(record["studentId"]), record["currentLevel"], record["status"]) for record in progress] == [
            (student_id, 1, "green"),
        ]

    def test_attendance_not_writable_through_update(self, client, cohort, super_admin):
        _, headers = super_admin
        response = client.put(f"/api/cohorts/{cohort['_id']}", json={"attendance": []}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "attendance is recorded through /api/attendance/cohort"
