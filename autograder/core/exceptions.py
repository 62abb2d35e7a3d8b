# autograder/core/exceptions.py
"""
Error taxonomy for grading and submission workflows.

Every error carries an HTTP-ish ``status_code`` so a transport layer can map it
without knowing the concrete class.
"""


class AutograderError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AutograderError):
    """Service settings hold a value the code does not understand."""

    status_code = 500


class PayloadValidationError(AutograderError):
    """Submission payload does not match the schema for its assignment type."""

    status_code = 422


class PreconditionError(AutograderError):
    """Fatal: the caller must not retry without fixing data first."""

    status_code = 422


class AssignmentNotFound(PreconditionError):
    status_code = 404

    def __init__(self, assignment_id: int):
        super().__init__(f"assignment {assignment_id} not found")
        self.assignment_id = assignment_id


class SubmissionNotFound(PreconditionError):
    status_code = 404

    def __init__(self, submission_id: int):
        super().__init__(f"submission {submission_id} not found")
        self.submission_id = submission_id


class UnsupportedConfigVersion(PreconditionError):
    def __init__(self, version, supported: int):
        super().__init__(
            f"assignment config version {version!r} is not supported (expected {supported})"
        )
        self.version = version


class InvalidAssignmentConfig(PreconditionError):
    pass


class NotAutoScorable(PreconditionError):
    def __init__(self, assignment_type: str):
        super().__init__(f"assignment type {assignment_type!r} cannot be auto-scored")
        self.assignment_type = assignment_type


class ConflictError(AutograderError):
    status_code = 409


class AttemptLimitExceeded(ConflictError):
    def __init__(self, max_attempts: int):
        super().__init__(f"You have used all {max_attempts} attempt(s) for this assignment.")
        self.max_attempts = max_attempts


class AttemptConflict(ConflictError):
    """Another submission for the same attempt was committed concurrently."""


class SubmissionWindowClosed(ConflictError):
    pass
