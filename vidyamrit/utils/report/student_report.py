"""Student profile report projections"""
from datetime import datetime
from typing import Dict, Optional

from vidyamrit.utils.student.profile_metrics import behavioral_summary
from vidyamrit.utils.time.timeutils import now_ist


def generate_student_report(profile: Dict, report_type: str = "comprehensive",
                            now: Optional[datetime] = None) -> Dict:
    """
    Project a profile into a report.

    ``academic`` and ``behavioral`` select their sections; any other type
    returns the whole profile with the report header.
    """
    base = {
        "studentId": profile.get("studentId"),
        "admissionNumber": profile.get("admissionNumber"),
        "status": profile.get("status"),
        "generatedAt": now or now_ist(),
    }

    if report_type == "academic":
        return {
            **base,
            "academicRecords": profile.get("academicRecords", []),
            "assessmentHistory": profile.get("assessmentHistory", []),
            "currentLevel": profile.get("currentLevel"),
            "academicGoals": profile.get("academicGoals", {"shortTerm": [], "longTerm": []}),
        }
    if report_type == "behavioral":
        return {
            **base,
            "behavioralRecords": profile.get("behavioralRecords", []),
            "behavioralSummary": behavioral_summary(profile),
            "interventions": profile.get("interventions", []),
        }
    return {**base, **profile}
