# autograder/services/grade_service.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from autograder.models.grade import Grade
from autograder.models.submission import Submission
from autograder.schemas.score import ScoreResult

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def get_grade_for_submission(db: Session, submission_id: int) -> Optional[Grade]:
    return db.query(Grade).filter(Grade.submission_id == submission_id).first()


def upsert_grade(
    db: Session,
    *,
    submission_id: int,
    score: ScoreResult,
    graded_at: datetime,
) -> Grade:
    """
    Write the grade keyed by submission_id and mark the submission graded.

    Uses INSERT .. ON CONFLICT (submission_id) DO UPDATE so two workers that
    both missed the existing-grade check end with one row, not an error.
    Both statements commit together.
    """
    values = {
        "submission_id": submission_id,
        "raw_score": score.raw_score,
        "correct_count": score.correct_count,
        "total_count": score.total_count,
        "band": Decimal(str(score.band)),
        "final_score": Decimal(str(score.final_score)),
        "graded_at": graded_at,
    }
    insert = _UPSERT_DIALECTS.get(db.get_bind().dialect.name)
    if insert is None:
        raise NotImplementedError(
            f"grade upsert is not supported on {db.get_bind().dialect.name}"
        )

    stmt = insert(Grade).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Grade.submission_id],
        set_={key: stmt.excluded[key] for key in values if key != "submission_id"},
    )
    try:
        db.execute(stmt)
        db.execute(
            update(Submission)
            .where(Submission.id == submission_id)
            .values(status="graded")
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return get_grade_for_submission(db, submission_id)
