"""Level and baseline assessment service - Business Logic Layer (SoC)"""
import logging
from typing import Dict, Optional

from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.assessment.level_assessment import (
    sync_progress_records, find_progress_record, public_questions, score_assessment,
    apply_assessment, advance_cohort_level
)
from vidyamrit.utils.assessment.level_transition import days_in_level, is_ready_for_assessment
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.program.program_levels import get_level, get_next_level
from vidyamrit.utils.security.security_utils import ensure_cohort_access, validate_object_id
from vidyamrit.utils.time.timeutils import now_ist
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)

NO_PROGRAM = "Cohort does not have an associated program"


def _question_set(level: Dict) -> Dict:
    questions = public_questions(level)
    return {
        "levelNumber": level.get("levelNumber"),
        "levelTitle": level.get("title"),
        "questions": questions,
        "totalQuestions": len(questions),
        "totalPoints": sum(question["points"] for question in questions),
    }


def _assessment_input(data: Dict):
    ValidationUtils.validate_required_fields(data, "cohortId", "studentId")
    for field in ("responses", "totalQuestions", "correctAnswers"):
        if data.get(field) is None:
            raise ValidationError(
                "Cohort ID, student ID, responses, total questions, and correct answers are required"
            )
    return score_assessment(data["totalQuestions"], data["correctAnswers"])


class AssessmentService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _get_cohort(self, cohort_id, user: Dict, action: str) -> Dict:
        cohort = self.repo_factory.get_cohort_repo().find_by_id(cohort_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        ensure_cohort_access(cohort, user, f"You are not authorized to {action} for this cohort")
        return cohort

    def _get_program(self, program_id) -> Dict:
        program = self.repo_factory.get_program_repo().find_by_id(program_id)
        if not program:
            raise NotFoundError("Program not found")
        return program

    def _cohort_program(self, cohort: Dict) -> Dict:
        if not cohort.get("programId"):
            raise ValidationError(NO_PROGRAM)
        return self._get_program(cohort["programId"])

    def _member_record(self, cohort: Dict, student_id) -> Dict:
        student_id = validate_object_id(student_id)
        if student_id not in (cohort.get("students") or []):
            raise ValidationError("Student not found in this cohort")
        # Cohorts filled before progress tracking get their records on first use
        sync_progress_records(cohort)
        return find_progress_record(cohort, student_id)

    def _save_progress(self, cohort: Dict) -> None:
        self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], {
            "progress": cohort.get("progress") or [],
            "currentLevel": cohort.get("currentLevel") or 1,
            "timeTracking": cohort.get("timeTracking") or {},
        })

    # ============= LEVEL ASSESSMENTS =============

    def get_level_questions(self, cohort_id: str, user: Dict) -> Dict:
        """Questions for the cohort's current level, without the answer key"""
        cohort = self._get_cohort(cohort_id, user, "view this cohort")
        program = self._cohort_program(cohort)
        current_level = cohort.get("currentLevel") or 1
        level = get_level(program, current_level)
        if not level:
            raise NotFoundError(f"Level {current_level} not found in program")
        if not level.get("assessmentQuestions"):
            raise ValidationError(f"No assessment questions found for Level {current_level}")

        return sanitize_mongo_document({
            "cohortId": cohort["_id"],
            "cohortName": cohort.get("name"),
            "programName": program.get("name"),
            "currentLevel": current_level,
            **_question_set(level),
        })

    def conduct_level_assessment(self, data: Dict, user: Dict) -> Dict:
        """
        Score one student's level assessment.

        Once every student has passed the cohort's current level the cohort
        itself moves up and its level clock restarts.
        """
        score = _assessment_input(data)
        cohort = self._get_cohort(data["cohortId"], user, "conduct assessments")
        program = self._cohort_program(cohort)
        record = self._member_record(cohort, data["studentId"])
        total_levels = program.get("totalLevels") or 1

        now = now_ist()
        result = apply_assessment(record, score, data["responses"], total_levels, now)
        cohort_advanced = result["passed"] and advance_cohort_level(cohort, total_levels, now)
        self._save_progress(cohort)

        level = result["previousLevel"]
        outcome = "passed" if result["passed"] else "failed"
        logger.info(f"Student {record['studentId']} {outcome} Level {level} assessment with {score:.1f}%")

        next_level = get_next_level(program, level) if result["passed"] else None
        return sanitize_mongo_document({
            "message": f"Student {outcome} Level {level} assessment with {score:.1f}%",
            **result,
            "currentLevel": record["currentLevel"],
            "cohortAdvanced": cohort_advanced,
            "cohortLevel": cohort.get("currentLevel"),
            "nextLevel": {"levelNumber": next_level["levelNumber"], "title": next_level.get("title")}
            if next_level else None,
        })

    # ============= BASELINE ASSESSMENTS =============

    def get_ready_students(self, cohort_id: str, user: Dict) -> Dict:
        """Students whose level timeframe has run out and who can be assessed for the next level"""
        cohort = self._get_cohort(cohort_id, user, "schedule assessments")
        if not cohort.get("programId"):
            raise NotFoundError("Program not found for this cohort")
        program = self._get_program(cohort["programId"])

        students = {
            str(student["_id"]): student
            for student in self.repo_factory.get_student_repo().find_by_ids(cohort.get("students") or [])
        }
        sync_progress_records(cohort)
        ready = []
        for record in cohort.get("progress") or []:
            student = students.get(str(record.get("studentId")))
            if not student or not is_ready_for_assessment(record, cohort, program):
                continue
            next_level = get_next_level(program, record.get("currentLevel") or 1)
            ready.append({
                "studentId": student["_id"],
                "studentName": student.get("name"),
                "currentLevel": record.get("currentLevel") or 1,
                "nextLevel": next_level["levelNumber"],
                "daysInCurrentLevel": days_in_level(record, cohort),
                "assessmentQuestions": public_questions(next_level),
            })

        logger.info(f"Found {len(ready)} students ready for assessment in cohort {cohort['_id']}")
        return sanitize_mongo_document({
            "cohortId": cohort["_id"],
            "cohortName": cohort.get("name"),
            "programName": program.get("name"),
            "studentsReady": ready,
            "totalReady": len(ready),
        })

    def conduct_baseline_assessment(self, data: Dict, user: Dict) -> Dict:
        score = _assessment_input(data)
        cohort = self._get_cohort(data["cohortId"], user, "conduct assessments")
        record = self._member_record(cohort, data["studentId"])
        program: Optional[Dict] = None
        if cohort.get("programId"):
            program = self.repo_factory.get_program_repo().find_by_id(cohort["programId"])

        result = apply_assessment(record, score, data["responses"], program.get("totalLevels") if program else None)
        self._save_progress(cohort)
        logger.info(f"Baseline assessment conducted for student {record['studentId']}: "
                    f"{'PASSED' if result['passed'] else 'FAILED'} ({score:.1f}%)")
        return sanitize_mongo_document({"message": "Baseline assessment completed successfully", "result": result})

    def get_program_level_questions(self, program_id: str, level_number: int) -> Dict:
        level = get_level(self._get_program(program_id), level_number)
        if not level:
            raise NotFoundError("Level not found")
        return sanitize_mongo_document(_question_set(level))

    def get_assessment_history(self, cohort_id: str, student_id: str, user: Dict) -> Dict:
        cohort = self._get_cohort(cohort_id, user, "view assessments")
        student_oid = validate_object_id(student_id)
        if student_oid not in (cohort.get("students") or []):
            raise NotFoundError("Student not found in this cohort")
        student = self.repo_factory.get_student_repo().find_by_id(student_oid) or {"_id": student_oid}
        record = find_progress_record(cohort, student_oid)

        return sanitize_mongo_document({
            "student": {key: student.get(key) for key in ("_id", "name", "roll_no", "class")},
            "currentLevel": record.get("currentLevel") or 1,
            "currentStatus": record.get("status"),
            "failureCount": record.get("failureCount") or 0,
            "assessmentHistory": record.get("assessmentHistory") or [],
        })
