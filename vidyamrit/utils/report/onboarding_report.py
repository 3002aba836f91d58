"""Onboarding report projection"""
from datetime import datetime
from typing import Dict, Optional

from vidyamrit.utils.onboarding.onboarding_records import check_quality_gates
from vidyamrit.utils.time.timeutils import now_ist


def generate_onboarding_report(onboarding: Dict, school_name: Optional[str] = None,
                               now: Optional[datetime] = None) -> Dict:
    tasks = onboarding.get("tasks", [])
    milestones = onboarding.get("milestones", [])
    tickets = onboarding.get("supportTickets", [])

    return {
        "onboardingCode": onboarding.get("onboardingCode"),
        "schoolName": school_name or "Unknown School",
        "status": onboarding.get("status"),
        "overallProgress": onboarding.get("overallProgress", 0),
        "currentPhase": onboarding.get("currentPhase"),
        "startDate": onboarding.get("startDate"),
        "plannedEndDate": onboarding.get("plannedEndDate"),
        "actualEndDate": onboarding.get("actualEndDate"),
        "phaseProgress": onboarding.get("phaseProgress", []),
        "tasksCompleted": sum(1 for task in tasks if task.get("status") == "completed"),
        "totalTasks": len(tasks),
        "milestonesCompleted": sum(1 for milestone in milestones if milestone.get("isCompleted")),
        "totalMilestones": len(milestones),
        "openSupportTickets": sum(1 for ticket in tickets if ticket.get("status") == "open"),
        "qualityGatesPassed": check_quality_gates(onboarding),
        "overallSatisfaction": onboarding.get("overallSatisfaction"),
        "generatedAt": now or now_ist(),
    }
