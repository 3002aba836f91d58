"""Level transition service - Business Logic Layer (SoC)"""
import logging
from collections import Counter
from typing import Dict

from vidyamrit.exceptions.exceptions import NotFoundError, ValidationError
from vidyamrit.repositories.core.repository_factory import RepositoryFactory
from vidyamrit.utils.assessment.level_assessment import sync_progress_records, find_progress_record
from vidyamrit.utils.assessment.level_transition import recommend_transition, apply_manual_transition
from vidyamrit.utils.formatting.json_utils import sanitize_mongo_document
from vidyamrit.utils.security.security_utils import ensure_cohort_access, validate_object_id
from vidyamrit.utils.time.timeutils import now_ist
from vidyamrit.utils.validation.validation_utils import ValidationUtils

logger = logging.getLogger(__name__)


class TransitionService:
    def __init__(self):
        self.repo_factory = RepositoryFactory()

    def _load(self, cohort_id, user: Dict):
        cohort = self.repo_factory.get_cohort_repo().find_by_id(cohort_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        ensure_cohort_access(cohort, user, "You are not authorized to manage transitions for this cohort")
        if not cohort.get("programId"):
            raise ValidationError("Cohort does not have an associated program")
        program = self.repo_factory.get_program_repo().find_by_id(cohort["programId"])
        if not program:
            raise NotFoundError("Program not found")
        sync_progress_records(cohort)
        return cohort, program

    def process_cohort(self, cohort_id: str, user: Dict, dry_run: bool) -> Dict:
        """
        Review every student in a cohort and recommend the next step.

        Outside a dry run each progress record keeps its latest
        ``recommendedAction`` and ``lastReviewed`` time; levels are never
        changed here.
        """
        cohort, program = self._load(cohort_id, user)
        reviewed_at = now_ist()
        recommendations = []
        for record in cohort.get("progress") or []:
            recommendation = recommend_transition(record, cohort, program)
            recommendations.append(recommendation)
            if not dry_run:
                record["recommendedAction"] = recommendation["action"]
                record["lastReviewed"] = reviewed_at

        if not dry_run:
            self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], {"progress": cohort["progress"]})
            logger.info(f"Processed transitions for cohort {cohort.get('name')}: {len(recommendations)} students")

        return sanitize_mongo_document({
            "cohortId": cohort["_id"],
            "cohortName": cohort.get("name"),
            "dryRun": dry_run,
            "recommendations": recommendations,
            "summary": dict(Counter(item["action"] for item in recommendations)),
        })

    def get_recommendation(self, cohort_id: str, student_id: str, user: Dict) -> Dict:
        cohort, program = self._load(cohort_id, user)
        record = find_progress_record(cohort, validate_object_id(student_id))
        return sanitize_mongo_document(recommend_transition(record, cohort, program))

    def manual_transition(self, data: Dict, user: Dict) -> Dict:
        ValidationUtils.validate_required_fields(data, "cohortId", "studentId", "action", "reason")
        reason = ValidationUtils.validate_non_empty_string(data["reason"], "reason")
        cohort, program = self._load(data["cohortId"], user)
        student_id = validate_object_id(data["studentId"])
        if student_id not in (cohort.get("students") or []):
            raise ValidationError("Student not found in this cohort")
        record = find_progress_record(cohort, student_id)

        now = now_ist()
        result = apply_manual_transition(record, cohort, program, data["action"], data.get("newLevel"), now)
        record.setdefault("transitionHistory", []).append({
            "date": now,
            "action": result["action"],
            "fromLevel": result["previousLevel"],
            "toLevel": result["newLevel"],
            "reason": reason,
            "performedBy": user.get("_id"),
        })

        self.repo_factory.get_cohort_repo().update_fields(cohort["_id"], {
            "progress": cohort["progress"],
            "currentLevel": cohort.get("currentLevel") or 1,
            "timeTracking": cohort.get("timeTracking") or {},
        })
        logger.info(f"Manual {result['action']} for student {student_id} in cohort {cohort.get('name')}: {reason}")
        return sanitize_mongo_document(result)
