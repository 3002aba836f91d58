"""Per-student level progress inside a cohort and the assessments that move it"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from vidyamrit.config.settings import ASSESSMENT_PASSING_SCORE, PROGRESS_STATUS_GREEN
from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.utils.time.timeutils import now_ist

HIDDEN_QUESTION_FIELDS = ("correctOptionIndex", "acceptedAnswers")


def new_progress_record(student_id, level: int, now: Optional[datetime] = None) -> Dict:
    return {
        "studentId": student_id,
        "currentLevel": level,
        "status": PROGRESS_STATUS_GREEN,
        "failureCount": 0,
        "lastUpdated": now or now_ist(),
        "lastAssessmentDate": None,
        "assessmentHistory": [],
    }


def sync_progress_records(cohort: Dict, now: Optional[datetime] = None) -> bool:
    """Give every cohort student a progress record at the cohort's level; True when any was added"""
    records = cohort.setdefault("progress", [])
    tracked = {record.get("studentId") for record in records}
    added = False
    for student_id in cohort.get("students") or []:
        if student_id not in tracked:
            records.append(new_progress_record(student_id, cohort.get("currentLevel") or 1, now))
            tracked.add(student_id)
            added = True
    return added


def find_progress_record(cohort: Dict, student_id) -> Dict:
    for record in cohort.get("progress") or []:
        if str(record.get("studentId")) == str(student_id):
            return record
    raise NotFoundError("Student progress record not found")


def public_questions(level: Dict) -> List[Dict]:
    """Level questions without the answer key"""
    questions = []
    for question in level.get("assessmentQuestions") or []:
        public = {key: value for key, value in question.items() if key not in HIDDEN_QUESTION_FIELDS}
        public["points"] = question.get("points") or 1
        public["isRequired"] = question.get("isRequired") is not False
        questions.append(public)
    return questions


def score_assessment(total_questions: Any, correct_answers: Any) -> float:
    """Percentage of correct answers"""
    if isinstance(total_questions, bool) or not isinstance(total_questions, int) or total_questions <= 0:
        raise ValidationError("totalQuestions must be a positive integer")
    if isinstance(correct_answers, bool) or not isinstance(correct_answers, int) \
            or not 0 <= correct_answers <= total_questions:
        raise ValidationError("correctAnswers must be between 0 and totalQuestions")
    return correct_answers / total_questions * 100


def status_for_failures(failure_count: int) -> str:
    if failure_count >= 3:
        return "red"
    if failure_count == 2:
        return "orange"
    return "yellow"


def apply_assessment(record: Dict, score: float, responses, max_level: Optional[int],
                     now: Optional[datetime] = None) -> Dict:
    """
    Record one assessment of the student's current level.

    Passing (score >= 75) moves the student up one level, capped at
    ``max_level`` when given, and clears failures. Failing raises the
    failure count; one failure is yellow, two orange, three or more red.
    """
    now = now or now_ist()
    level = record.get("currentLevel") or 1
    passed = score >= ASSESSMENT_PASSING_SCORE

    if passed:
        record["currentLevel"] = level + 1 if max_level is None or level < max_level else level
        record["status"] = PROGRESS_STATUS_GREEN
        record["failureCount"] = 0
    else:
        record["failureCount"] = (record.get("failureCount") or 0) + 1
        record["status"] = status_for_failures(record["failureCount"])

    record["lastUpdated"] = now
    record["lastAssessmentDate"] = now
    record.setdefault("assessmentHistory", []).append({
        "date": now,
        "level": level,
        "passed": passed,
        "status": record["status"],
        "score": score,
        "responses": responses,
    })
    return {
        "passed": passed,
        "score": round(score, 1),
        "previousLevel": level,
        "newLevel": record["currentLevel"],
        "status": record["status"],
        "failureCount": record["failureCount"],
    }


def advance_cohort_level(cohort: Dict, total_levels: int, now: Optional[datetime] = None) -> bool:
    """
    Move the cohort up one level once every student has reached the next one.

    The level clock (``timeTracking.currentLevelStartDate``) restarts so
    attendance-based progress is counted for the new level only.
    """
    current = cohort.get("currentLevel") or 1
    records = cohort.get("progress") or []
    if current >= total_levels or not records:
        return False
    if not all((record.get("currentLevel") or 1) > current for record in records):
        return False

    cohort["currentLevel"] = current + 1
    cohort.setdefault("timeTracking", {})["currentLevelStartDate"] = now or now_ist()
    return True
