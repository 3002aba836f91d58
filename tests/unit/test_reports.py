"""Unit tests for report projections and profile metrics"""

from datetime import datetime, timedelta

import pytest
from bson import ObjectId

from vidyamrit.utils.report.onboarding_report import generate_onboarding_report
from vidyamrit.utils.report.student_report import generate_student_report
from vidyamrit.utils.student.profile_metrics import (
    calculate_gpa, behavioral_summary, upcoming_goals, profile_statistics, refresh_performance_metrics
)
from vidyamrit.utils.time.timeutils import IST

NOW = datetime(2024, 6, 1, 9, 0, tzinfo=IST)


@pytest.mark.unit
class TestOnboardingReport:

    def test_counts_and_header(self):
        onboarding = {
            "onboardingCode": "ONB-ABCDEF-123456",
            "status": "in_progress",
            "overallProgress": 50,
            "currentPhase": "documentation",
            "tasks": [{"status": "completed"}, {"status": "pending"}],
            "milestones": [{"isCompleted": True}, {"isCompleted": False}, {"isCompleted": False}],
            "supportTickets": [{"status": "open"}, {"status": "resolved"}, {"status": "open"}],
            "overallSatisfaction": 4.5,
        }
        report = generate_onboarding_report(onboarding, "Rau Primary", NOW)

        assert report["schoolName"] == "Rau Primary"
        assert report["tasksCompleted"] == 1
        assert report["totalTasks"] == 2
        assert report["milestonesCompleted"] == 1
        assert report["totalMilestones"] == 3
        assert report["openSupportTickets"] == 2
        assert report["overallSatisfaction"] == 4.5
        assert report["generatedAt"] == NOW
        assert report["qualityGatesPassed"] is True

    def test_quality_gates_must_all_pass(self):
        onboarding = {"qualityGates": [{"name": "Data check", "overallStatus": "passed"},
                                       {"name": "Go-live check", "overallStatus": "pending"}]}
        assert generate_onboarding_report(onboarding, None, NOW)["qualityGatesPassed"] is False

    def test_missing_school_name(self):
        report = generate_onboarding_report({"tasks": []}, None, NOW)
        assert report["schoolName"] == "Unknown School"
        assert report["totalTasks"] == 0
        assert report["phaseProgress"] == []


def make_profile():
    return {
        "studentId": ObjectId(),
        "admissionNumber": "ADM-001",
        "status": "active",
        "currentLevel": 3,
        "academicRecords": [
            {"academicYear": "2023-24", "overallGPA": 3.0},
            {"academicYear": "2023-24", "overallGPA": 4.0},
            {"academicYear": "2022-23", "overallGPA": 2.0},
        ],
        "behavioralRecords": [
            {"type": "positive", "description": "Helped a classmate"},
            {"type": "positive", "description": "Led the assembly"},
            {"type": "negative", "description": "Late three times"},
            {"type": "neutral", "description": "Changed seats"},
        ],
        "performanceMetrics": {"behaviorTrend": "improving", "engagementLevel": "high"},
        "interventions": [],
    }


@pytest.mark.unit
class TestStudentReport:

    def test_academic_report(self):
        report = generate_student_report(make_profile(), "academic", NOW)
        assert report["admissionNumber"] == "ADM-001"
        assert len(report["academicRecords"]) == 3
        assert report["academicGoals"] == {"shortTerm": [], "longTerm": []}
        assert "behavioralRecords" not in report

    def test_behavioral_report(self):
        report = generate_student_report(make_profile(), "behavioral", NOW)
        assert report["behavioralSummary"]["positiveRecords"] == 2
        assert report["behavioralSummary"]["negativeRecords"] == 1
        assert "academicRecords" not in report

    def test_comprehensive_report_carries_whole_profile(self):
        profile = make_profile()
        report = generate_student_report(profile, "comprehensive", NOW)
        assert report["academicRecords"] == profile["academicRecords"]
        assert report["generatedAt"] == NOW


@pytest.mark.unit
class TestProfileMetrics:

    def test_gpa_mean_per_year(self):
        records = make_profile()["academicRecords"]
        assert calculate_gpa(records, "2023-24") == 3.5
        assert calculate_gpa(records) == 3.0
        assert calculate_gpa([], "2023-24") == 0

    def test_behavioral_summary(self):
        summary = behavioral_summary(make_profile())
        assert summary["totalRecords"] == 4
        assert summary["ratio"] == 0.5
        assert summary["trend"] == "improving"
        assert behavioral_summary({})["ratio"] == 0

    def test_upcoming_goals_window(self):
        profile = {"academicGoals": {"shortTerm": [
            {"goal": "Read a story", "targetDate": NOW + timedelta(days=10), "status": "in_progress"},
            {"goal": "Write a letter", "targetDate": NOW + timedelta(days=45), "status": "in_progress"},
            {"goal": "Count to 100", "targetDate": NOW + timedelta(days=5), "status": "achieved"},
            {"goal": "No date", "status": "not_started"},
        ]}}
        goals = upcoming_goals(profile, NOW)
        assert [goal["goal"] for goal in goals] == ["Read a story"]
        assert goals[0]["type"] == "academic"

    def test_refresh_merges_and_stamps(self):
        profile = make_profile()
        metrics = refresh_performance_metrics(profile, {"academicTrend": "declining"}, NOW)
        assert metrics["academicTrend"] == "declining"
        assert metrics["engagementLevel"] == "high"
        assert profile["performanceMetrics"]["lastAnalyzed"] == NOW

    def test_statistics(self):
        first = make_profile()
        second = {**make_profile(), "status": "inactive",
                  "performanceMetrics": {"engagementLevel": "low", "academicTrend": "declining"},
                  "specialNeedsSupport": {"identifiedNeeds": ["dyslexia"]}}
        result = profile_statistics([first, second])

        stats = result["statistics"]
        assert stats["totalStudents"] == 2
        assert stats["activeStudents"] == 1
        assert stats["inactiveStudents"] == 1
        assert stats["studentsWithSpecialNeeds"] == 1
        assert stats["highEngagementStudents"] == 1
        assert stats["lowEngagementStudents"] == 1
        assert stats["decliningTrend"] == 1
        assert result["academicLevelDistribution"] == [{"_id": 3, "count": 2}]
