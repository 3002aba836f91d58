"""Cohort level progress from attendance"""
import math
from datetime import date
from typing import Dict, List, Optional

from vidyamrit.config.settings import WEEKS_PER_MONTH, TEACHING_DAYS_PER_WEEK
from vidyamrit.utils.program.program_levels import get_level
from vidyamrit.utils.time.timeutils import to_local_date, is_sunday, now_ist

EMPTY_PROGRESS = {
    "weeksCompleted": 0,
    "weeksRequired": 0,
    "completionPercentage": 0,
    "isReadyForAssessment": False,
}


def convert_to_weeks(timeframe: float, unit: str) -> float:
    if unit == "days":
        return timeframe / 7
    if unit == "months":
        return timeframe * WEEKS_PER_MONTH
    return timeframe


def weeks_from_attendance(attendance_dates: List[date]) -> float:
    """Teaching days (Mon-Sat) divided by six, capped by the calendar weeks spanned"""
    unique_days = sorted(set(attendance_dates))
    if not unique_days:
        return 0

    teaching_days = [day for day in unique_days if not is_sunday(day)]
    span_days = (unique_days[-1] - unique_days[0]).days
    weeks_by_span = span_days / 7
    return min(len(teaching_days) / TEACHING_DAYS_PER_WEEK, weeks_by_span + 1)


def level_start_date(cohort: Dict) -> date:
    time_tracking = cohort.get("timeTracking") or {}
    start = time_tracking.get("currentLevelStartDate") or cohort.get("startDate") or cohort.get("createdAt")
    return to_local_date(start) if start else now_ist().date()


def level_attendance_dates(cohort: Dict) -> List[date]:
    """Days with a present mark since the current level began, skipping Sundays and holidays"""
    start = level_start_date(cohort)
    holidays = {to_local_date(holiday) for holiday in cohort.get("holidays") or []}

    dates = []
    for record in cohort.get("attendance") or []:
        if not record or not record.get("date"):
            continue
        day = to_local_date(record["date"])
        if is_sunday(day) or day in holidays:
            continue
        if day >= start and str(record.get("status", "")).lower() == "present":
            dates.append(day)
    return dates


def calculate_level_progress(cohort: Dict, program: Optional[Dict]) -> Dict:
    """How far a cohort is through its current program level"""
    if not program:
        return dict(EMPTY_PROGRESS)

    level = get_level(program, cohort.get("currentLevel") or 1)
    if not level:
        return dict(EMPTY_PROGRESS)

    weeks_required = convert_to_weeks(level.get("timeframe", 0), level.get("timeframeUnit", "weeks"))
    weeks_completed = weeks_from_attendance(level_attendance_dates(cohort))
    completion = min(100, weeks_completed / weeks_required * 100) if weeks_required > 0 else 0
    ready = weeks_completed >= weeks_required

    progress = {
        "weeksCompleted": round(weeks_completed, 1),
        "weeksRequired": weeks_required,
        "completionPercentage": round(completion, 1),
        "isReadyForAssessment": ready,
    }
    if not ready:
        progress["daysRemaining"] = math.ceil((weeks_required - weeks_completed) * TEACHING_DAYS_PER_WEEK)
    return progress
