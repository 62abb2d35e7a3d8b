# autograder/schemas/submission.py
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from autograder.core.config import settings
from autograder.core.exceptions import PayloadValidationError
from autograder.schemas.assignment_config import CamelModel


class AnswerEntry(CamelModel):
    # top-level question id, sub-item id ("q3-1") or paragraph letter for headings
    question_id: str = Field(min_length=1)
    value: Any = None


class SubmissionPayloadBase(CamelModel):
    version: int = 1
    attempt: int | None = Field(default=None, ge=1)
    started_at: datetime | None = None
    submitted_at: datetime | None = None
    duration_seconds: int | None = Field(default=None, ge=0)


class ObjectiveSubmissionPayload(SubmissionPayloadBase):
    """Reading / listening answers."""
    answers: list[AnswerEntry]


class WritingTaskAnswer(CamelModel):
    text: str


class WritingSubmissionPayload(SubmissionPayloadBase):
    task1: WritingTaskAnswer
    task2: WritingTaskAnswer


class SpeakingRecording(CamelModel):
    part: Literal["part1", "part2", "part3"]
    file_id: str = Field(min_length=1)
    duration_seconds: int = Field(ge=1)


class SpeakingSubmissionPayload(SubmissionPayloadBase):
    recordings: list[SpeakingRecording]
    notes: dict[str, str] | None = None


PAYLOAD_SCHEMAS_BY_TYPE: dict[str, type[SubmissionPayloadBase]] = {
    "reading": ObjectiveSubmissionPayload,
    "listening": ObjectiveSubmissionPayload,
    "writing": WritingSubmissionPayload,
    "speaking": SpeakingSubmissionPayload,
}


def parse_submission_payload(assignment_type: str, payload: Any) -> SubmissionPayloadBase:
    schema = PAYLOAD_SCHEMAS_BY_TYPE.get(assignment_type)
    if schema is None:
        raise PayloadValidationError(f"unknown assignment type {assignment_type!r}")
    if isinstance(payload, schema):
        parsed = payload
    else:
        try:
            parsed = schema.model_validate(payload)
        except ValidationError as exc:
            raise PayloadValidationError(f"invalid {assignment_type} submission payload: {exc}") from exc

    if parsed.version != settings.IELTS_CONFIG_VERSION:
        raise PayloadValidationError(
            f"submission payload version {parsed.version} is not supported"
        )
    return parsed


class SubmissionCreate(BaseModel):
    payload: dict[str, Any]
    # None -> "submitted" when submitted_at is given, otherwise "draft"
    status: Literal["draft", "submitted", "late"] | None = None
    submitted_at: datetime | None = None
