# autograder/services/scoring_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from autograder.core.clock import Clock, utc_now
from autograder.core.exceptions import AssignmentNotFound, SubmissionNotFound
from autograder.models.assignment import AUTO_SCORE_TYPES, Assignment
from autograder.models.grade import Grade
from autograder.models.submission import Submission
from autograder.services import grade_service
from autograder.services.ielts_scoring import score_ielts_submission

logger = logging.getLogger(__name__)


def _get_submission_and_assignment(
    db: Session,
    submission_id: int,
) -> tuple[Submission, Assignment]:
    submission: Optional[Submission] = db.get(Submission, submission_id)
    if submission is None:
        raise SubmissionNotFound(submission_id)

    assignment: Optional[Assignment] = db.get(Assignment, submission.assignment_id)
    if assignment is None:
        raise AssignmentNotFound(submission.assignment_id)

    return submission, assignment


def auto_score_submission(
    db: Session,
    submission_id: int,
    *,
    now: Clock = utc_now,
) -> Optional[Grade]:
    """
    Grade a reading/listening submission at most once.

    - an existing grade is returned as-is, nothing is rescored
    - writing/speaking and draft submissions are left alone (returns None)
    - otherwise score, upsert the grade, status -> 'graded'

    Missing rows and unsupported config versions raise PreconditionError
    subclasses; callers should not retry those.
    """
    existing = grade_service.get_grade_for_submission(db, submission_id)
    if existing is not None:
        logger.info(f"Submission {submission_id} already graded (grade {existing.id})")
        return existing

    submission, assignment = _get_submission_and_assignment(db, submission_id)

    if assignment.type not in AUTO_SCORE_TYPES:
        logger.info(
            f"Skipping auto-score for submission {submission_id}: "
            f"{assignment.type} needs manual grading"
        )
        return None

    if submission.status == "draft":
        logger.info(f"Skipping auto-score for submission {submission_id}: still a draft")
        return None

    score = score_ielts_submission(
        assignment_type=assignment.type,
        assignment_config=assignment.assignment_config,
        submission_payload=submission.payload,
    )

    graded_at: datetime = now()
    grade = grade_service.upsert_grade(
        db,
        submission_id=submission_id,
        score=score,
        graded_at=graded_at,
    )
    logger.info(
        f"Graded submission {submission_id}: "
        f"{score.correct_count}/{score.total_count} correct, band={score.band}"
    )
    return grade
