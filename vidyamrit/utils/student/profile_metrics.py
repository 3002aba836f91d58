"""Derived figures for enhanced student profiles"""
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from vidyamrit.config.settings import UPCOMING_GOAL_WINDOW_DAYS
from vidyamrit.utils.attendance.attendance_records import student_attendance_totals
from vidyamrit.utils.time.timeutils import now_ist, ensure_aware


def default_performance_metrics(now: Optional[datetime] = None) -> Dict:
    return {
        "academicTrend": "stable",
        "attendanceTrend": "stable",
        "behaviorTrend": "stable",
        "engagementLevel": "medium",
        "riskFactors": [],
        "strengths": [],
        "recommendations": [],
        "lastAnalyzed": now or now_ist(),
    }


def calculate_gpa(academic_records: List[Dict], academic_year: Optional[str] = None) -> float:
    """Mean overallGPA, optionally restricted to one academic year"""
    records = academic_records or []
    if academic_year:
        records = [record for record in records if record.get("academicYear") == academic_year]
    if not records:
        return 0
    return sum(record.get("overallGPA", 0) for record in records) / len(records)


def attendance_overview(profile: Dict, cohorts: List[Dict]) -> Dict:
    """Roll-call days across the student's cohorts plus the trend kept on the profile"""
    metrics = profile.get("performanceMetrics") or {}
    return {
        **student_attendance_totals(cohorts, profile.get("studentId")),
        "trend": metrics.get("attendanceTrend", "stable"),
    }


def behavioral_summary(profile: Dict) -> Dict:
    records = profile.get("behavioralRecords") or []
    positive = sum(1 for record in records if record.get("type") == "positive")
    negative = sum(1 for record in records if record.get("type") == "negative")
    total = len(records)
    metrics = profile.get("performanceMetrics") or {}
    return {
        "totalRecords": total,
        "positiveRecords": positive,
        "negativeRecords": negative,
        "ratio": positive / total if total > 0 else 0,
        "trend": metrics.get("behaviorTrend", "stable"),
    }


def refresh_performance_metrics(profile: Dict, updates: Optional[Dict] = None,
                                now: Optional[datetime] = None) -> Dict:
    """Merge supplied metric fields and stamp the analysis time"""
    metrics = dict(profile.get("performanceMetrics") or default_performance_metrics(now))
    metrics.update(updates or {})
    metrics["lastAnalyzed"] = now or now_ist()
    profile["performanceMetrics"] = metrics
    return metrics


def upcoming_goals(profile: Dict, now: Optional[datetime] = None) -> List[Dict]:
    """Short-term goals due within the next 30 days that are not yet achieved"""
    horizon = (now or now_ist()) + timedelta(days=UPCOMING_GOAL_WINDOW_DAYS)
    goals = (profile.get("academicGoals") or {}).get("shortTerm") or []
    upcoming = []
    for goal in goals:
        target = goal.get("targetDate")
        if target is None or goal.get("status") == "achieved":
            continue
        if ensure_aware(target) <= horizon:
            upcoming.append({**goal, "type": "academic", "term": "short"})
    return upcoming


def profile_statistics(profiles: List[Dict]) -> Dict:
    """Counts by status, engagement and trend plus style and level distributions"""
    stats = {
        "totalStudents": len(profiles),
        "activeStudents": 0,
        "inactiveStudents": 0,
        "studentsWithSpecialNeeds": 0,
        "highEngagementStudents": 0,
        "mediumEngagementStudents": 0,
        "lowEngagementStudents": 0,
        "improvingTrend": 0,
        "decliningTrend": 0,
    }
    styles = Counter()
    levels = Counter()

    for profile in profiles:
        metrics = profile.get("performanceMetrics") or {}
        if profile.get("status") == "active":
            stats["activeStudents"] += 1
        elif profile.get("status") == "inactive":
            stats["inactiveStudents"] += 1

        needs = (profile.get("specialNeedsSupport") or {}).get("identifiedNeeds") or []
        if any(need != "none" for need in needs):
            stats["studentsWithSpecialNeeds"] += 1

        engagement = metrics.get("engagementLevel")
        if engagement in ("high", "medium", "low"):
            stats[f"{engagement}EngagementStudents"] += 1

        if metrics.get("academicTrend") == "improving":
            stats["improvingTrend"] += 1
        elif metrics.get("academicTrend") == "declining":
            stats["decliningTrend"] += 1

        styles[(profile.get("learningPreferences") or {}).get("learningStyle")] += 1
        levels[profile.get("currentLevel")] += 1

    return {
        "statistics": stats,
        "learningStyleDistribution": [{"_id": key, "count": count} for key, count in styles.items()],
        "academicLevelDistribution": [{"_id": key, "count": count} for key, count in levels.items()],
    }
