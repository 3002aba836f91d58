"""
Cohort planner.

Splits the students of each level into teaching cohorts close to an ideal
size. Cohorts never mix levels, stay between the minimum and maximum size
where the head-count allows, and the number of cohorts is kept low.

Example::

    generate_cohort_plan([{"level": 4, "students": 18}, {"level": 6, "students": 37}])
    # [{"level": 4, "cohorts": [18]}, {"level": 6, "cohorts": [20, 17]}]
"""
from typing import Dict, List

from vidyamrit.config.settings import CohortConfig
from vidyamrit.exceptions.exceptions import ValidationError


def create_cohorts(student_count: int, ideal: int = CohortConfig.IDEAL_SIZE,
                   min_size: int = CohortConfig.MIN_SIZE, max_size: int = CohortConfig.MAX_SIZE) -> List[int]:
    """Cohort sizes for a single level"""
    full, remainder = divmod(student_count, ideal)
    cohorts = [ideal] * full

    if remainder == 0:
        return cohorts

    if remainder < min_size:
        # Spread the leftovers over existing cohorts that still have room
        while remainder > 0 and any(size < max_size for size in cohorts):
            for i in range(len(cohorts)):
                if remainder == 0:
                    break
                if cohorts[i] < max_size:
                    cohorts[i] += 1
                    remainder -= 1
        if remainder > 0:
            cohorts.append(remainder)
    else:
        cohorts.append(remainder)

    if any(size < min_size for size in cohorts):
        total = sum(cohorts)
        base, extra = divmod(total, len(cohorts))
        cohorts = [base + (1 if i < extra else 0) for i in range(len(cohorts))]

    return cohorts


def generate_cohort_plan(levels: List[Dict]) -> List[Dict]:
    """Cohort sizes for every level: [{"level": ..., "cohorts": [...]}]"""
    if not isinstance(levels, list):
        raise ValidationError("levels must be a list")

    plan = []
    for entry in levels:
        if not isinstance(entry, dict) or "level" not in entry:
            raise ValidationError("Each level needs 'level' and 'students'")
        students = entry.get("students")
        if isinstance(students, bool) or not isinstance(students, int) or students < 0:
            raise ValidationError("students must be a non-negative integer")
        plan.append({"level": entry["level"], "cohorts": create_cohorts(students)})
    return plan
