"""Onboarding task and milestone status transitions"""
from datetime import datetime
from typing import Dict, List, Optional

from vidyamrit.config.settings import TASK_STATUSES
from vidyamrit.exceptions.exceptions import InvalidTransitionError, ValidationError
from vidyamrit.utils.time.timeutils import now_ist

TERMINAL_STATUSES = {"completed", "skipped", "blocked"}

ALLOWED_TRANSITIONS: Dict[str, set] = {
    "pending": {"in_progress", "completed", "skipped", "blocked"},
    "in_progress": {"pending", "completed", "skipped", "blocked"},
    "completed": set(),
    "skipped": set(),
    "blocked": set(),
}


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, set())


def transition_task(task: Dict, target: str, now: Optional[datetime] = None) -> Dict:
    """Move a task to ``target``; re-entering the current status is a no-op"""
    if target not in TASK_STATUSES:
        raise ValidationError(f"Invalid task status '{target}'")

    current = task.get("status", "pending")
    if current == target:
        return task
    if not can_transition(current, target):
        raise InvalidTransitionError(f"Cannot move task from {current} to {target}")

    task["status"] = target
    if target == "in_progress" and not task.get("startDate"):
        task["startDate"] = now or now_ist()
    if target == "completed":
        task["completionPercentage"] = 100
        task["completedDate"] = now or now_ist()
    return task


def update_task_progress(task: Dict, status: Optional[str] = None, completion_percentage=None,
                         comment: Optional[str] = None, blockers: Optional[List[str]] = None,
                         user_id=None, now: Optional[datetime] = None) -> Dict:
    """Apply a client progress update: status, percentage, an appended comment and blockers"""
    now = now or now_ist()

    if status is not None:
        transition_task(task, status, now)

    if completion_percentage is not None and task.get("status") != "completed":
        if isinstance(completion_percentage, bool) or not isinstance(completion_percentage, (int, float)) \
                or not 0 <= completion_percentage <= 100:
            raise ValidationError("completionPercentage must be between 0 and 100")
        task["completionPercentage"] = completion_percentage

    if comment:
        task.setdefault("comments", []).append({
            "userId": user_id,
            "comment": comment,
            "timestamp": now
        })

    if blockers is not None:
        if not isinstance(blockers, list):
            raise ValidationError("blockers must be a list")
        task["blockers"] = blockers

    return task


def complete_task(task: Dict, evidence: Optional[List] = None, now: Optional[datetime] = None) -> Dict:
    """
    Force a task to completed, whatever its current status.

    Completing an already completed task keeps its original completion date;
    evidence passed on a repeat call is still recorded.
    """
    if task.get("status") != "completed" or not task.get("completedDate"):
        task["completedDate"] = now or now_ist()
    task["status"] = "completed"
    task["completionPercentage"] = 100
    if evidence:
        existing = task.setdefault("completionEvidence", [])
        existing.extend(item for item in evidence if item not in existing)
    return task


def complete_milestone(milestone: Dict, user_id=None, comments: Optional[str] = None,
                       now: Optional[datetime] = None) -> Dict:
    """Mark a milestone complete and record the sign-off when one is required"""
    now = now or now_ist()
    if not milestone.get("isCompleted"):
        milestone["isCompleted"] = True
        milestone["completedDate"] = now

    if milestone.get("signOffRequired") and user_id is not None:
        signed = milestone.setdefault("signedOffBy", [])
        if not any(str(entry.get("userId")) == str(user_id) for entry in signed):
            signed.append({"userId": user_id, "signedAt": now, "comments": comments})
    return milestone
