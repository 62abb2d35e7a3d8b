"""
Scoring Tasks for Worker
These tasks are executed by RQ workers to grade submissions asynchronously
"""

import logging
from autograder.db.session import SessionLocal
from autograder.core.exceptions import AutograderError
from autograder.schemas.score import GradePublic
from autograder.services.scoring_service import auto_score_submission

logger = logging.getLogger(__name__)


def scoring_task(submission_id: int) -> dict:
    """
    Worker task to auto-score a reading/listening submission.

    Delivery is at-least-once; running this twice for the same submission
    returns the grade written the first time.

    Args:
        submission_id: ID of submission to score

    Returns:
        Dictionary with the grade, or the reason nothing was graded

    Note:
        Grading errors (missing rows, unsupported config version, a stored
        payload that no longer validates, bad settings) are reported in the
        result instead of raised so RQ does not retry them.
    """
    db = SessionLocal()
    try:
        logger.info(f"Starting scoring task for submission {submission_id}")

        grade = auto_score_submission(db, submission_id)
        if grade is None:
            return {
                "status": "skipped",
                "submission_id": submission_id,
                "message": f"Submission {submission_id} is not auto-scorable yet",
            }

        return {
            "status": "success",
            "submission_id": submission_id,
            "grade": GradePublic.model_validate(grade).model_dump(mode="json"),
            "message": f"Successfully scored submission {submission_id}",
        }

    except AutograderError as e:
        logger.error(f"Scoring failed for submission {submission_id}: {e}")
        return {
            "status": "error",
            "submission_id": submission_id,
            "error": str(e),
            "message": f"Scoring failed for submission {submission_id}",
        }

    except Exception as e:
        logger.error(
            f"Unexpected error during scoring task for submission {submission_id}: {e}",
            exc_info=True,
        )
        return {
            "status": "error",
            "submission_id": submission_id,
            "error": str(e),
            "message": "Unexpected error during scoring",
        }

    finally:
        db.close()
