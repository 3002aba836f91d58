"""Level transition recommendations and manual overrides for cohort students"""
from datetime import date, datetime
from typing import Dict, Optional

from vidyamrit.config.settings import DEFAULT_TIMEFRAME_UNIT, PROGRESS_STATUS_GREEN, TRANSITION_ACTIONS
from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.assessment.level_assessment import advance_cohort_level
from vidyamrit.utils.program.program_levels import convert_timeframe, get_level, get_next_level
from vidyamrit.utils.progress.level_progress import level_start_date
from vidyamrit.utils.time.timeutils import now_ist, to_local_date
from vidyamrit.utils.validation.validation_utils import ValidationUtils


def timeframe_days(level: Optional[Dict]) -> float:
    if not level:
        return 0
    return convert_timeframe(level.get("timeframe", 0), level.get("timeframeUnit", DEFAULT_TIMEFRAME_UNIT), "days")


def days_in_level(record: Dict, cohort: Dict, today: Optional[date] = None) -> int:
    """Days since the student's progress last changed, or since the cohort level began"""
    today = today or now_ist().date()
    since = to_local_date(record.get("lastUpdated")) if record.get("lastUpdated") else level_start_date(cohort)
    return max(0, (today - since).days)


def is_ready_for_assessment(record: Dict, cohort: Dict, program: Dict, today: Optional[date] = None) -> bool:
    """Green students who have spent the level's full timeframe and still have a level ahead"""
    level_number = record.get("currentLevel") or 1
    level = get_level(program, level_number)
    if record.get("status") != PROGRESS_STATUS_GREEN or not level:
        return False
    if get_next_level(program, level_number) is None:
        return False
    return days_in_level(record, cohort, today) >= timeframe_days(level)


def recommend_transition(record: Dict, cohort: Dict, program: Dict, today: Optional[date] = None) -> Dict:
    """
    What should happen next for one student.

    Red students always need a manual review. Students past twice the level
    timeframe get an extended-time review unless they are green and can
    simply be assessed.
    """
    level_number = record.get("currentLevel") or 1
    level = get_level(program, level_number)
    required = timeframe_days(level)
    elapsed = days_in_level(record, cohort, today)
    status = record.get("status") or PROGRESS_STATUS_GREEN
    time_done = required > 0 and elapsed >= required
    has_next = get_next_level(program, level_number) is not None

    if status == "red":
        action, reason = "MANUAL_REVIEW_REQUIRED", "Student has failed the level assessment three or more times"
    elif status == PROGRESS_STATUS_GREEN and time_done and has_next:
        action, reason = "ASSESSMENT_REQUIRED", "Level timeframe completed"
    elif status in ("yellow", "orange") and time_done:
        action, reason = "REASSESSMENT_REQUIRED", f"Student is {status} after completing the level timeframe"
    elif required > 0 and elapsed >= 2 * required:
        action, reason = "EXTENDED_TIME_REVIEW", "Student has spent twice the level timeframe"
    else:
        action, reason = "NO_ACTION", "Student is progressing within the level timeframe"

    return {
        "studentId": record.get("studentId"),
        "currentLevel": level_number,
        "status": status,
        "failureCount": record.get("failureCount") or 0,
        "daysInLevel": elapsed,
        "requiredDays": required,
        "action": action,
        "reason": reason,
    }


def apply_manual_transition(record: Dict, cohort: Dict, program: Dict, action: str,
                            new_level=None, now: Optional[datetime] = None) -> Dict:
    """
    Apply a tutor or admin override to one progress record.

    PROMOTE moves to ``new_level`` (or the next level) and may advance the
    whole cohort; DEMOTE drops one level and marks the student yellow; HOLD
    clears failures; REASSESS marks the student yellow for another attempt.
    """
    ValidationUtils.validate_choice(action, TRANSITION_ACTIONS, "action")
    now = now or now_ist()
    total_levels = program.get("totalLevels") or 1
    level = record.get("currentLevel") or 1
    cohort_advanced = False

    if action == "PROMOTE":
        target = level + 1 if new_level is None else new_level
        ValidationUtils.validate_number_range(target, "newLevel", 1, total_levels)
        if target <= level:
            raise ValidationError("newLevel must be above the current level")
        record["currentLevel"] = target
        record["status"] = PROGRESS_STATUS_GREEN
        record["failureCount"] = 0
    elif action == "DEMOTE":
        record["currentLevel"] = max(1, level - 1)
        record["status"] = "yellow"
    elif action == "HOLD":
        record["status"] = PROGRESS_STATUS_GREEN
        record["failureCount"] = 0
    else:
        record["status"] = "yellow"

    record["lastUpdated"] = now
    if action == "PROMOTE":
        cohort_advanced = advance_cohort_level(cohort, total_levels, now)

    return {
        "studentId": record.get("studentId"),
        "action": action,
        "previousLevel": level,
        "newLevel": record["currentLevel"],
        "status": record["status"],
        "cohortAdvanced": cohort_advanced,
        "cohortLevel": cohort.get("currentLevel"),
    }
