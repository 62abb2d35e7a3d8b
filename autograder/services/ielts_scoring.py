# autograder/services/ielts_scoring.py
"""
Score IELTS reading/listening submissions against the assignment answer key.

Pure: no database access, no clock. The grade guard relies on calling this
twice with the same inputs producing the same ScoreResult.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Union

from autograder.core.exceptions import InvalidAssignmentConfig, NotAutoScorable
from autograder.models.assignment import AUTO_SCORE_TYPES
from autograder.schemas.assignment_config import AssignmentConfig, parse_assignment_config
from autograder.schemas.score import ScoreResult
from autograder.schemas.submission import (
    AnswerEntry,
    ObjectiveSubmissionPayload,
    parse_submission_payload,
)
from autograder.services.banding import get_band_for_raw_score
from autograder.services.question_scoring import score_question

logger = logging.getLogger(__name__)


def build_answer_map(answers: Iterable[AnswerEntry]) -> dict[str, Any]:
    # later entries overwrite earlier ones for the same questionId
    answer_map: dict[str, Any] = {}
    for answer in answers:
        answer_map[answer.question_id] = answer.value
    return answer_map


def score_ielts_submission(
    *,
    assignment_type: str,
    assignment_config: Union[AssignmentConfig, dict],
    submission_payload: Union[ObjectiveSubmissionPayload, dict],
) -> ScoreResult:
    if assignment_type not in AUTO_SCORE_TYPES:
        raise NotAutoScorable(assignment_type)

    config = parse_assignment_config(assignment_config)
    if config.sections is None:
        raise InvalidAssignmentConfig(
            f"{assignment_type} assignment config has no sections"
        )
    payload = parse_submission_payload(assignment_type, submission_payload)
    answer_map = build_answer_map(payload.answers)

    correct_count = 0
    total_count = 0
    for section in config.sections:
        for question in section.questions:
            units = score_question(question, answer_map)
            total_count += len(units)
            correct_count += sum(1 for unit in units if unit.correct)
            logger.debug(
                "section=%s question=%s type=%s units=%s",
                section.id,
                question.id,
                question.type,
                [(unit.answer_key, unit.correct) for unit in units],
            )

    raw_score = correct_count
    band = get_band_for_raw_score(assignment_type, raw_score)
    return ScoreResult(
        raw_score=raw_score,
        correct_count=correct_count,
        total_count=total_count,
        band=band,
        final_score=band,
    )
