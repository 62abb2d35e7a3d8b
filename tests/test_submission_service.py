"""
Tests for the submission lifecycle: attempts, timing, auto-submit.
"""
from datetime import datetime, timezone

import pytest

from autograder.core.exceptions import (
    AssignmentNotFound,
    AttemptConflict,
    AttemptLimitExceeded,
    PayloadValidationError,
    SubmissionWindowClosed,
)
from autograder.models.submission import Submission
from autograder.schemas.submission import SubmissionCreate
from autograder.services import submission_service
from autograder.services.submission_service import create_submission
from tests.data import FIXED_NOW, reading_config, reading_payload


def submit(db, assignment, student, *, status=None, payload=None, submitted_at=None):
    obj_in = SubmissionCreate(
        payload=payload if payload is not None else reading_payload(),
        status=status,
        submitted_at=submitted_at,
    )
    return create_submission(
        db,
        assignment_id=assignment.id,
        student=student,
        obj_in=obj_in,
        now=lambda: FIXED_NOW,
    )


def timed_config(**timing) -> dict:
    base = {"enabled": True, "durationMinutes": 30, "enforce": True}
    base.update(timing)
    return reading_config(timing=base, attempts={"maxAttempts": None})


class TestCreateSubmission:

    def test_persists_draft_by_default(self, db_session, reading_assignment, test_student, enqueued):
        submission = submit(db_session, reading_assignment, test_student)

        assert submission.id is not None
        assert submission.status == "draft"
        assert submission.submitted_at is None
        assert submission.attempt_number == 1
        assert submission.payload["version"] == 1
        assert submission.payload["answers"][0] == {"questionId": "q1", "value": "B"}
        assert enqueued == []

    def test_submitted_at_implies_submitted(self, db_session, reading_assignment, test_student):
        submission = submit(
            db_session,
            reading_assignment,
            test_student,
            submitted_at=datetime(2026, 1, 2, 0, 30, tzinfo=timezone.utc),
        )

        assert submission.status == "submitted"
        assert submission.submitted_at is not None

    def test_submitted_reading_is_queued_for_scoring(
        self, db_session, reading_assignment, test_student, enqueued
    ):
        submission = submit(db_session, reading_assignment, test_student, status="submitted")

        assert enqueued == [submission.id]

    def test_writing_is_never_queued(self, db_session, make_assignment, test_student, enqueued):
        assignment = make_assignment("writing", {"version": 1}, title="Writing Task")

        submission = submit(
            db_session,
            assignment,
            test_student,
            status="submitted",
            payload={"task1": {"text": "The chart shows"}, "task2": {"text": "I agree"}},
        )

        assert submission.status == "submitted"
        assert enqueued == []

    def test_auto_score_can_be_disabled(
        self, db_session, reading_assignment, test_student, enqueued, monkeypatch
    ):
        monkeypatch.setattr(submission_service.settings, "AUTO_SCORE_ON_SUBMIT", False)

        submit(db_session, reading_assignment, test_student, status="submitted")

        assert enqueued == []

    def test_open_draft_is_updated_in_place(self, db_session, reading_assignment, test_student):
        first = submit(db_session, reading_assignment, test_student)
        payload = reading_payload(answers=[{"questionId": "q1", "value": "C"}])
        second = submit(db_session, reading_assignment, test_student, status="submitted", payload=payload)

        assert second.id == first.id
        assert second.status == "submitted"
        assert second.payload["answers"] == [{"questionId": "q1", "value": "C"}]
        assert second.payload["version"] == 1
        assert db_session.query(Submission).count() == 1

    def test_invalid_payload_is_rejected_before_persisting(
        self, db_session, reading_assignment, test_student
    ):
        with pytest.raises(PayloadValidationError):
            submit(db_session, reading_assignment, test_student, payload={"answers": "A"})

        assert db_session.query(Submission).count() == 0

    def test_unknown_assignment(self, db_session, test_student):
        with pytest.raises(AssignmentNotFound):
            create_submission(
                db_session,
                assignment_id=404,
                student=test_student,
                obj_in=SubmissionCreate(payload=reading_payload()),
            )


class TestAttempts:

    def test_rejects_submissions_beyond_max_attempts(
        self, db_session, make_assignment, test_student
    ):
        assignment = make_assignment("reading", reading_config(attempts={"maxAttempts": 1}))
        submit(db_session, assignment, test_student, status="submitted")

        with pytest.raises(AttemptLimitExceeded) as exc_info:
            submit(db_session, assignment, test_student, status="submitted")

        assert exc_info.value.status_code == 409
        assert db_session.query(Submission).count() == 1

    def test_graded_and_late_submissions_use_attempts(
        self, db_session, make_assignment, test_student
    ):
        assignment = make_assignment("reading", reading_config(attempts={"maxAttempts": 2}))
        first = submit(db_session, assignment, test_student, status="late")
        first.status = "graded"
        db_session.commit()
        submit(db_session, assignment, test_student, status="late")

        with pytest.raises(AttemptLimitExceeded):
            submit(db_session, assignment, test_student)

    def test_drafts_do_not_use_attempts(self, db_session, make_assignment, test_student):
        assignment = make_assignment("reading", reading_config(attempts={"maxAttempts": 1}))

        submit(db_session, assignment, test_student)
        submission = submit(db_session, assignment, test_student, status="submitted")

        assert submission.status == "submitted"

    def test_unlimited_attempts_create_new_rows(
        self, db_session, reading_assignment, test_student
    ):
        first = submit(db_session, reading_assignment, test_student, status="submitted")
        second = submit(db_session, reading_assignment, test_student, status="submitted")

        assert (first.attempt_number, second.attempt_number) == (1, 2)
        assert db_session.query(Submission).count() == 2

    def test_concurrent_create_for_same_attempt_conflicts(
        self, db_session, reading_assignment, test_student, monkeypatch
    ):
        submit(db_session, reading_assignment, test_student, status="submitted")
        # the other request counted before this one committed
        monkeypatch.setattr(submission_service, "count_counted_attempts", lambda db, **kw: 0)

        with pytest.raises(AttemptConflict):
            submit(db_session, reading_assignment, test_student, status="submitted")

        assert db_session.query(Submission).count() == 1


class TestTiming:

    def test_auto_submits_when_time_limit_exceeded(
        self, db_session, make_assignment, test_student, enqueued
    ):
        assignment = make_assignment("reading", timed_config(autoSubmit=True))
        payload = reading_payload(startedAt="2026-01-02T00:00:00.000Z")

        submission = submit(db_session, assignment, test_student, status="draft", payload=payload)

        assert submission.status == "submitted"
        assert submission.submitted_at is not None
        assert enqueued == [submission.id]

    def test_marks_late_without_auto_submit(self, db_session, make_assignment, test_student):
        assignment = make_assignment("reading", timed_config())
        payload = reading_payload(startedAt="2026-01-02T00:00:00Z")

        submission = submit(db_session, assignment, test_student, status="submitted", payload=payload)

        assert submission.status == "late"
        assert submission.submitted_at is not None

    def test_within_time_limit_keeps_requested_status(
        self, db_session, make_assignment, test_student
    ):
        assignment = make_assignment("reading", timed_config(autoSubmit=True))
        payload = reading_payload(startedAt="2026-01-02T00:45:00Z")

        submission = submit(db_session, assignment, test_student, status="draft", payload=payload)

        assert submission.status == "draft"
        assert submission.submitted_at is None

    def test_finishing_exactly_at_deadline_is_on_time(
        self, db_session, make_assignment, test_student, enqueued
    ):
        assignment = make_assignment("reading", timed_config())
        payload = reading_payload(startedAt="2026-01-02T00:30:00Z")

        submission = submit(db_session, assignment, test_student, status="submitted", payload=payload)

        assert submission.status == "submitted"
        assert enqueued == [submission.id]

    def test_unenforced_timing_is_ignored(self, db_session, make_assignment, test_student):
        assignment = make_assignment("reading", timed_config(enforce=False, autoSubmit=True))
        payload = reading_payload(startedAt="2026-01-01T00:00:00Z")

        submission = submit(db_session, assignment, test_student, status="draft", payload=payload)

        assert submission.status == "draft"

    def test_rejects_start_after_window_closes(self, db_session, make_assignment, test_student):
        assignment = make_assignment(
            "reading",
            timed_config(
                startAt="2026-01-01T00:00:00Z",
                endAt="2026-01-01T23:59:00Z",
                rejectLateStart=True,
            ),
        )
        payload = reading_payload(startedAt="2026-01-02T00:45:00Z")

        with pytest.raises(SubmissionWindowClosed):
            submit(db_session, assignment, test_student, payload=payload)

        assert db_session.query(Submission).count() == 0


class TestQueries:

    def test_lists_only_the_students_submissions(
        self, db_session, make_assignment, reading_assignment, test_student
    ):
        other = make_assignment("listening", reading_config(), title="Listening Practice")
        first = submit(db_session, reading_assignment, test_student, status="submitted")
        second = submit(db_session, other, test_student)

        all_ids = [s.id for s in submission_service.list_submissions_for_student(
            db_session, student=test_student
        )]
        reading_ids = [s.id for s in submission_service.list_submissions_for_student(
            db_session, student=test_student, assignment_id=reading_assignment.id
        )]

        assert sorted(all_ids) == sorted([first.id, second.id])
        assert reading_ids == [first.id]
        assert submission_service.get_submission(db_session, second.id).status == "draft"
        assert submission_service.get_submission(db_session, 999) is None
