"""
Unit tests for onboarding progress aggregation.

Covers overall and per-phase progress, current phase resolution and the
status roll-up applied before an onboarding is saved.
"""

from datetime import datetime

import pytest
from bson import ObjectId

from vidyamrit.utils.onboarding.task_state_machine import complete_task
from vidyamrit.utils.progress.onboarding_progress import (
    calculate_overall_progress, calculate_phase_progress, resolve_current_phase,
    generate_onboarding_code, refresh_onboarding, round_half_up
)
from vidyamrit.utils.time.timeutils import IST

NOW = datetime(2024, 3, 4, 10, 0, tzinfo=IST)


def make_task(phase, status="pending", completion=0):
    return {"_id": ObjectId(), "phase": phase, "status": status, "completionPercentage": completion}


@pytest.mark.unit
class TestOverallProgress:
    """calculate_overall_progress over task contributions"""

    def test_no_tasks_is_zero(self):
        assert calculate_overall_progress([]) == 0

    def test_completed_counts_full_and_in_progress_counts_its_percentage(self):
        tasks = [
            make_task("initial_setup", "completed"),
            make_task("initial_setup", "in_progress", 50),
            make_task("documentation", "pending", 80),
            make_task("documentation", "skipped", 90),
        ]
        # (100 + 50 + 0 + 0) / 4
        assert calculate_overall_progress(tasks) == 38

    def test_rounds_half_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(0.5) == 1
        assert round_half_up(2.4999) == 2
        tasks = [make_task("initial_setup", "completed")] + [make_task("initial_setup") for _ in range(7)]
        assert calculate_overall_progress(tasks) == 13

    def test_completing_tasks_never_lowers_progress(self):
        tasks = [make_task("initial_setup", "in_progress", 70) for _ in range(3)] + [make_task("documentation")]
        previous = calculate_overall_progress(tasks)
        for task in tasks:
            complete_task(task, now=NOW)
            current = calculate_overall_progress(tasks)
            assert current >= previous
            previous = current
        assert previous == 100


@pytest.mark.unit
class TestPhaseProgress:
    """Per-phase roll-up"""

    def test_phase_without_tasks_gets_no_entry(self):
        tasks = [make_task("documentation", "completed")]
        phases = calculate_phase_progress(tasks)
        assert [entry["phase"] for entry in phases] == ["documentation"]

    def test_phase_with_unstarted_tasks_is_pending(self):
        phases = calculate_phase_progress([make_task("go_live"), make_task("go_live")])
        assert phases == [{"phase": "go_live", "progress": 0, "status": "pending"}]

    def test_only_completed_tasks_count_towards_phase_progress(self):
        tasks = [make_task("staff_training", "in_progress", 90), make_task("staff_training", "completed")]
        assert calculate_phase_progress(tasks)[0]["progress"] == 50

    def test_existing_entries_are_updated_in_place_and_kept(self):
        existing = [
            {"phase": "pilot_testing", "progress": 0, "status": "pending"},
            {"phase": "post_launch_support", "progress": 40, "status": "in_progress"},
        ]
        tasks = [make_task("pilot_testing", "completed"), make_task("initial_setup")]

        phases = calculate_phase_progress(tasks, existing)

        assert phases[0] == {"phase": "pilot_testing", "progress": 100, "status": "completed"}
        # No tasks for this phase any more; its stored entry is left untouched
        assert phases[1] == {"phase": "post_launch_support", "progress": 40, "status": "in_progress"}
        assert phases[2] == {"phase": "initial_setup", "progress": 0, "status": "pending"}
        assert existing[0]["progress"] == 0

    def test_current_phase_is_first_in_progress_in_phase_order(self):
        phases = [
            {"phase": "go_live", "progress": 50, "status": "in_progress"},
            {"phase": "documentation", "progress": 20, "status": "in_progress"},
        ]
        assert resolve_current_phase(phases, "initial_setup") == "documentation"

    def test_current_phase_kept_when_nothing_in_progress(self):
        phases = [{"phase": "documentation", "progress": 100, "status": "completed"}]
        assert resolve_current_phase(phases, "staff_training") == "staff_training"


@pytest.mark.unit
class TestRefreshOnboarding:
    """The save path recomputing derived fields"""

    def test_four_tasks_two_phases_one_completed(self):
        tasks = [make_task("initial_setup"), make_task("initial_setup"),
                 make_task("documentation"), make_task("documentation")]
        onboarding = {"schoolId": ObjectId(), "tasks": tasks, "status": "not_started"}

        complete_task(tasks[0], now=NOW)
        refresh_onboarding(onboarding, NOW)

        assert onboarding["overallProgress"] == 25
        by_phase = {entry["phase"]: entry for entry in onboarding["phaseProgress"]}
        assert by_phase["initial_setup"] == {"phase": "initial_setup", "progress": 50, "status": "in_progress"}
        assert by_phase["documentation"] == {"phase": "documentation", "progress": 0, "status": "pending"}
        assert onboarding["currentPhase"] == "initial_setup"
        assert onboarding["status"] == "in_progress"
        assert onboarding["updatedAt"] == NOW

    def test_completion_sets_actual_end_date_once(self):
        tasks = [make_task("go_live", "completed")]
        onboarding = {"schoolId": ObjectId(), "tasks": tasks}

        refresh_onboarding(onboarding, NOW)
        assert onboarding["status"] == "completed"
        assert onboarding["actualEndDate"] == NOW

        later = datetime(2024, 5, 1, tzinfo=IST)
        refresh_onboarding(onboarding, later)
        assert onboarding["actualEndDate"] == NOW

    def test_no_tasks_keeps_status_and_defaults_phase(self):
        onboarding = {"schoolId": ObjectId(), "tasks": [], "status": "on_hold"}
        refresh_onboarding(onboarding, NOW)
        assert onboarding["overallProgress"] == 0
        assert onboarding["phaseProgress"] == []
        assert onboarding["currentPhase"] == "initial_setup"
        assert onboarding["status"] == "on_hold"

    def test_onboarding_code_generated_once(self):
        school_id = ObjectId("65a1b2c3d4e5f6a7b8c9d0e1")
        onboarding = {"schoolId": school_id, "tasks": []}

        refresh_onboarding(onboarding, NOW)
        code = onboarding["onboardingCode"]
        assert code == generate_onboarding_code(school_id, NOW)
        assert code.startswith("ONB-C9D0E1-")
        assert len(code.split("-")[2]) == 6

        refresh_onboarding(onboarding, datetime(2025, 1, 1, tzinfo=IST))
        assert onboarding["onboardingCode"] == code
