# autograder/services/question_scoring.py
"""
Per-question-type answer comparison.

``score_question`` returns one :class:`UnitResult` per scoring unit: a single
unit for atomic questions, one per sentence/statement/item for composite ones.
A missing answer is an incorrect unit, never a dropped one.
"""
from __future__ import annotations

import math
import re
from functools import singledispatch
from typing import Any, Mapping, NamedTuple, Optional

from autograder.schemas.assignment_config import (
    MatchingFeaturesQuestion,
    MatchingHeadingsQuestion,
    MatchingInformationQuestion,
    MultipleChoiceQuestion,
    QuestionBase,
    SentenceCompletionQuestion,
    ShortAnswerQuestion,
    TrueFalseNotGivenQuestion,
    YesNoNotGivenQuestion,
)

TRUE_FALSE_NOT_GIVEN = frozenset({"true", "false", "not given"})
YES_NO_NOT_GIVEN = frozenset({"yes", "no", "not given"})

_SEPARATORS = re.compile(r"[_-]+")
_WHITESPACE = re.compile(r"\s+")


class UnitResult(NamedTuple):
    answer_key: str
    correct: bool


def normalize_string(value: str) -> str:
    value = _SEPARATORS.sub(" ", value.strip().lower())
    return _WHITESPACE.sub(" ", value).strip()


def normalize_comparable(value: Any) -> Optional[str]:
    # bool before int: True is an int in Python
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return normalize_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else repr(value)
    return None


def _normalize_list(values: list) -> list[str]:
    normalized = (normalize_comparable(value) for value in values)
    return [value for value in normalized if value is not None]


def is_correct_answer(expected: Any, actual: Any) -> bool:
    """
    Compare a submitted value against an answer key.

    A list key accepts any of its values for a scalar answer; a list answer
    must have the same length and contain every key value.
    """
    if isinstance(expected, (list, tuple)):
        expected_list = _normalize_list(list(expected))
        if not expected_list:
            return False
        if isinstance(actual, (list, tuple)):
            actual_list = _normalize_list(list(actual))
            if len(actual_list) != len(expected_list):
                return False
            return all(value in actual_list for value in expected_list)
        normalized_actual = normalize_comparable(actual)
        if not normalized_actual:
            return False
        return normalized_actual in expected_list

    normalized_expected = normalize_comparable(expected)
    normalized_actual = normalize_comparable(actual)
    if not normalized_expected or not normalized_actual:
        return False
    return normalized_expected == normalized_actual


def _lookup(answers: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in answers:
            return answers[key]
    return None


@singledispatch
def score_question(question: QuestionBase, answers: Mapping[str, Any]) -> list[UnitResult]:
    # No comparator for this type: one unit, always incorrect
    return [UnitResult(question.id, False)]


@score_question.register
def _(question: MultipleChoiceQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    actual = answers.get(question.id)
    return [UnitResult(question.id, is_correct_answer(question.answer, actual))]


@score_question.register
def _(question: ShortAnswerQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    actual = answers.get(question.id)
    return [UnitResult(question.id, is_correct_answer(question.answer, actual))]


def _score_fixed_domain(question, answers: Mapping[str, Any], domain: frozenset) -> list[UnitResult]:
    actual = normalize_comparable(answers.get(question.id))
    expected = normalize_comparable(question.answer)
    correct = actual is not None and actual in domain and actual == expected
    return [UnitResult(question.id, correct)]


@score_question.register
def _(question: TrueFalseNotGivenQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    return _score_fixed_domain(question, answers, TRUE_FALSE_NOT_GIVEN)


@score_question.register
def _(question: YesNoNotGivenQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    return _score_fixed_domain(question, answers, YES_NO_NOT_GIVEN)


@score_question.register
def _(question: SentenceCompletionQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    return [
        UnitResult(sentence.id, is_correct_answer(sentence.answer, answers.get(sentence.id)))
        for sentence in question.sentences
    ]


@score_question.register
def _(question: MatchingInformationQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    return [
        UnitResult(
            statement.id,
            is_correct_answer(statement.answer_paragraph, answers.get(statement.id)),
        )
        for statement in question.statements
    ]


@score_question.register
def _(question: MatchingFeaturesQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    return [
        UnitResult(
            statement.id,
            is_correct_answer(statement.answer_feature_id, answers.get(statement.id)),
        )
        for statement in question.statements
    ]


@score_question.register
def _(question: MatchingHeadingsQuestion, answers: Mapping[str, Any]) -> list[UnitResult]:
    # Keyed by the paragraph letter itself, not by a generated sub-id.
    # "<questionId>:<paragraph>" is accepted when several heading questions share letters.
    results = []
    for item in question.items:
        actual = _lookup(answers, item.paragraph, f"{question.id}:{item.paragraph}")
        results.append(
            UnitResult(item.paragraph, is_correct_answer(item.answer_heading_id, actual))
        )
    return results


def count_units(question: QuestionBase) -> int:
    """Denominator contribution of a question, independent of any answers."""
    return len(score_question(question, {}))
