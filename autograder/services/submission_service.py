# autograder/services/submission_service.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from autograder.core.clock import Clock, utc_now
from autograder.core.config import settings
from autograder.core.exceptions import (
    AssignmentNotFound,
    AttemptConflict,
    AttemptLimitExceeded,
    SubmissionWindowClosed,
)
from autograder.models.assignment import AUTO_SCORE_TYPES, Assignment
from autograder.models.submission import COUNTED_STATUSES, Submission
from autograder.models.user import User
from autograder.schemas.assignment_config import Timing, parse_assignment_config
from autograder.schemas.submission import (
    SubmissionCreate,
    SubmissionPayloadBase,
    parse_submission_payload,
)
from autograder.workers.queue import enqueue_scoring_task

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # naive timestamps from clients are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def count_counted_attempts(
    db: Session,
    *,
    assignment_id: int,
    student_id: int,
) -> int:
    return (
        db.query(Submission)
        .filter(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
            Submission.status.in_(COUNTED_STATUSES),
        )
        .count()
    )


def _get_open_draft(
    db: Session,
    *,
    assignment_id: int,
    student_id: int,
) -> Optional[Submission]:
    return (
        db.query(Submission)
        .filter(
            Submission.assignment_id == assignment_id,
            Submission.student_id == student_id,
            Submission.status == "draft",
        )
        .order_by(Submission.attempt_number.desc())
        .first()
    )


def _check_start_window(timing: Timing, started_at: Optional[datetime]) -> None:
    if not timing.reject_late_start or started_at is None:
        return
    if timing.start_at is not None and started_at < _as_utc(timing.start_at):
        raise SubmissionWindowClosed("This test has not opened yet.")
    if timing.end_at is not None and started_at > _as_utc(timing.end_at):
        raise SubmissionWindowClosed("This test can no longer be started.")


def _resolve_status(
    timing: Optional[Timing],
    payload: SubmissionPayloadBase,
    obj_in: SubmissionCreate,
    current: datetime,
) -> tuple[str, Optional[datetime]]:
    """
    Decide the stored status and submitted_at.

    An enforced timer that has run out overrides whatever the caller asked for:
    auto-submit forces 'submitted' stamped now, otherwise the answers are kept
    but marked 'late'.
    """
    submitted_at = _as_utc(obj_in.submitted_at) if obj_in.submitted_at else None
    status = obj_in.status or ("submitted" if submitted_at else "draft")

    if (
        timing is not None
        and timing.enabled
        and timing.enforce
        and payload.started_at is not None
    ):
        deadline = _as_utc(payload.started_at) + timedelta(minutes=timing.duration_minutes)
        if current > deadline:
            if timing.auto_submit:
                return "submitted", current
            return "late", submitted_at or current

    if status != "draft" and submitted_at is None:
        submitted_at = current
    return status, submitted_at


def create_submission(
    db: Session,
    *,
    assignment_id: int,
    student: User,
    obj_in: SubmissionCreate,
    now: Clock = utc_now,
) -> Submission:
    """
    Student saves or submits answers.

    - attempts already used ('submitted'/'late'/'graded') >= maxAttempts -> AttemptLimitExceeded
    - enforced timing may force 'submitted' (autoSubmit) or 'late'
    - an open draft is updated in place, otherwise a new attempt row is inserted
    - submitted reading/listening answers are queued for auto-scoring
    """
    assignment: Optional[Assignment] = db.get(Assignment, assignment_id)
    if assignment is None:
        raise AssignmentNotFound(assignment_id)

    payload = parse_submission_payload(assignment.type, obj_in.payload)
    config = (
        parse_assignment_config(assignment.assignment_config)
        if assignment.assignment_config is not None
        else None
    )
    current = _as_utc(now())

    used_attempts = count_counted_attempts(
        db, assignment_id=assignment_id, student_id=student.id
    )
    max_attempts = config.max_attempts if config else None
    if max_attempts is not None and used_attempts >= max_attempts:
        logger.info(
            f"Rejecting submission from student {student.id} for assignment "
            f"{assignment_id}: {used_attempts}/{max_attempts} attempts used"
        )
        raise AttemptLimitExceeded(max_attempts)

    timing = config.timing if config else None
    started_at = _as_utc(payload.started_at) if payload.started_at else None
    if timing is not None and timing.enabled:
        _check_start_window(timing, started_at)

    status, submitted_at = _resolve_status(timing, payload, obj_in, current)
    payload_json = payload.model_dump(mode="json", by_alias=True, exclude_none=True)

    db_obj = _get_open_draft(db, assignment_id=assignment_id, student_id=student.id)
    if db_obj is not None:
        db_obj.status = status
        db_obj.payload = payload_json
        db_obj.submitted_at = submitted_at
    else:
        db_obj = Submission(
            assignment_id=assignment_id,
            student_id=student.id,
            attempt_number=used_attempts + 1,
            status=status,
            payload=payload_json,
            submitted_at=submitted_at,
        )

    db.add(db_obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AttemptConflict(
            "Another submission for this attempt was saved at the same time."
        ) from exc
    db.refresh(db_obj)

    logger.info(
        f"Saved submission {db_obj.id} (attempt {db_obj.attempt_number}) "
        f"for assignment {assignment_id}: status={status}"
    )

    if (
        status in ("submitted", "late")
        and assignment.type in AUTO_SCORE_TYPES
        and settings.AUTO_SCORE_ON_SUBMIT
    ):
        enqueue_scoring_task(db_obj.id)

    return db_obj


def get_submission(db: Session, submission_id: int) -> Optional[Submission]:
    return db.get(Submission, submission_id)


def list_submissions_for_student(
    db: Session,
    *,
    student: User,
    assignment_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Submission]:
    """
    student's own submissions, newest first
    """
    query = db.query(Submission).filter(Submission.student_id == student.id)
    if assignment_id is not None:
        query = query.filter(Submission.assignment_id == assignment_id)
    return (
        query.order_by(Submission.created_at.desc(), Submission.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
