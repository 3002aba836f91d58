"""Per-subject progress flags on students and their history"""
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from vidyamrit.config.settings import PROGRESS_SUBJECTS, PROGRESS_FLAGS
from vidyamrit.exceptions.exceptions import ValidationError
from vidyamrit.utils.time.timeutils import now_ist, to_datetime

DEFAULT_FLAG = "average"


def current_flags(student: Dict) -> Dict[str, str]:
    """Stored flags with unset subjects reading as average"""
    stored = student.get("currentProgressFlags") or {}
    return {subject: stored.get(subject) or DEFAULT_FLAG for subject in PROGRESS_SUBJECTS}


def validate_flag_update(data: Dict) -> Tuple[str, str, str]:
    subject, flag, reason = data.get("subject"), data.get("flag"), data.get("reason")
    if not subject or not flag or not reason:
        raise ValidationError("Subject, flag, and reason are required")
    if subject not in PROGRESS_SUBJECTS:
        raise ValidationError("Invalid subject")
    if flag not in PROGRESS_FLAGS:
        raise ValidationError("Invalid progress flag")
    return subject, flag, str(reason).strip()


def apply_flag(student: Dict, subject: str, flag: str, reason: str, mentor_id,
               now: Optional[datetime] = None) -> Dict:
    """Set a subject's flag and append the change to ``progressHistory``"""
    flags = current_flags(student)
    flags[subject] = flag
    student["currentProgressFlags"] = flags
    entry = {"flag": flag, "subject": subject, "reason": reason, "date": now or now_ist(), "mentorId": mentor_id}
    student.setdefault("progressHistory", []).append(entry)
    return entry


def overall_flag(flags: Dict[str, str]) -> str:
    """Worst case across subjects: any struggling subject needs attention"""
    values = set(flags.values())
    if values & {"struggling", "needs_attention"}:
        return "needs_attention"
    if "excelling" in values:
        return "excelling"
    if "improving" in values:
        return "improving"
    return DEFAULT_FLAG


def progress_statistics(students: Iterable[Dict]) -> Dict:
    by_subject = {subject: dict.fromkeys(PROGRESS_FLAGS, 0) for subject in PROGRESS_SUBJECTS}
    overall = dict.fromkeys(PROGRESS_FLAGS, 0)
    total = 0
    for student in students:
        total += 1
        flags = current_flags(student)
        for subject, flag in flags.items():
            by_subject[subject][flag] += 1
        overall[overall_flag(flags)] += 1
    return {"totalStudents": total, "bySubject": by_subject, "overall": overall}


def trend_entries(history: Iterable[Dict], days: int, subject: Optional[str] = None,
                  now: Optional[datetime] = None) -> List[Dict]:
    """History entries from the last ``days`` days, oldest first"""
    since = (now or now_ist()) - timedelta(days=days)
    entries = [
        entry for entry in history or []
        if entry.get("date") and to_datetime(entry["date"]) >= since
        and (not subject or entry.get("subject") == subject)
    ]
    return sorted(entries, key=lambda entry: to_datetime(entry["date"]))
