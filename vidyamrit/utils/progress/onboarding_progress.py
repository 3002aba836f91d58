"""Onboarding progress aggregation - pure functions over onboarding documents"""
import math
from datetime import datetime
from typing import Dict, List, Optional

from vidyamrit.config.settings import ONBOARDING_PHASES
from vidyamrit.utils.time.timeutils import now_ist, epoch_millis


def round_half_up(value: float) -> int:
    """Round .5 upwards, matching how progress figures are shown to schools"""
    return int(math.floor(value + 0.5))


def task_contribution(task: Dict) -> float:
    if task.get("status") == "completed":
        return 100
    if task.get("status") == "in_progress":
        return task.get("completionPercentage") or 0
    return 0


def calculate_overall_progress(tasks: List[Dict]) -> int:
    """Average task contribution as a 0-100 integer; an empty task list is 0"""
    if not tasks:
        return 0
    total = sum(task_contribution(task) for task in tasks)
    return round_half_up(total / len(tasks))


def phase_status(progress: int) -> str:
    if progress == 100:
        return "completed"
    if progress > 0:
        return "in_progress"
    return "pending"


def calculate_phase_progress(tasks: List[Dict], existing: Optional[List[Dict]] = None) -> List[Dict]:
    """
    Roll tasks up into per-phase progress entries.

    Phases without tasks get no entry. Entries already present are updated
    in place and new phases are appended, so the result keeps the order of
    ``existing``.
    """
    phase_progress = [dict(entry) for entry in (existing or [])]
    by_phase = {entry.get("phase"): entry for entry in phase_progress}

    for phase in ONBOARDING_PHASES:
        phase_tasks = [task for task in tasks if task.get("phase") == phase]
        if not phase_tasks:
            continue

        completed = sum(1 for task in phase_tasks if task.get("status") == "completed")
        progress = round_half_up(completed / len(phase_tasks) * 100)
        status = phase_status(progress)

        entry = by_phase.get(phase)
        if entry is None:
            entry = {"phase": phase}
            phase_progress.append(entry)
            by_phase[phase] = entry
        entry["progress"] = progress
        entry["status"] = status

    return phase_progress


def resolve_current_phase(phase_progress: List[Dict], current_phase: Optional[str]) -> Optional[str]:
    """First phase (in onboarding order) that is in progress; otherwise keep the current one"""
    in_progress = {entry.get("phase") for entry in phase_progress if entry.get("status") == "in_progress"}
    for phase in ONBOARDING_PHASES:
        if phase in in_progress:
            return phase
    return current_phase


def generate_onboarding_code(school_id, now: Optional[datetime] = None) -> str:
    school_part = str(school_id)[-6:].upper()
    time_part = str(epoch_millis(now))[-6:]
    return f"ONB-{school_part}-{time_part}"


def refresh_onboarding(onboarding: Dict, now: Optional[datetime] = None) -> Dict:
    """
    Recompute the derived fields of an onboarding before it is persisted.

    Generates the onboarding code when missing, recomputes overall and phase
    progress, moves ``currentPhase`` and rolls the status up. Mutates and
    returns ``onboarding``.
    """
    now = now or now_ist()

    if not onboarding.get("onboardingCode"):
        onboarding["onboardingCode"] = generate_onboarding_code(onboarding.get("schoolId"), now)

    tasks = onboarding.get("tasks") or []
    onboarding["overallProgress"] = calculate_overall_progress(tasks)
    onboarding["phaseProgress"] = calculate_phase_progress(tasks, onboarding.get("phaseProgress"))
    onboarding["currentPhase"] = resolve_current_phase(
        onboarding["phaseProgress"], onboarding.get("currentPhase") or ONBOARDING_PHASES[0]
    )

    if onboarding["overallProgress"] == 100:
        onboarding["status"] = "completed"
        if not onboarding.get("actualEndDate"):
            onboarding["actualEndDate"] = now
    elif onboarding["overallProgress"] > 0:
        onboarding["status"] = "in_progress"

    onboarding["updatedAt"] = now
    return onboarding
