# autograder/schemas/assignment_config.py
"""
Versioned IELTS assignment configuration.

Clients send camelCase keys (``durationMinutes``, ``answerHeadingId``); models
expose snake_case attributes and accept either spelling on input.

Questions form a tagged union on ``type``. Types the scorer does not know
validate as :class:`UnsupportedQuestion` instead of failing, so a config that
introduces a new type still loads and the question is scored as incorrect.
"""
from datetime import datetime
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError
from pydantic.alias_generators import to_camel

from autograder.core.config import settings
from autograder.core.exceptions import InvalidAssignmentConfig, UnsupportedConfigVersion


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Timing(CamelModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool
    duration_minutes: int = Field(ge=1)
    enforce: bool
    auto_submit: bool = False
    start_at: datetime | None = None
    end_at: datetime | None = None
    reject_late_start: bool = False


class Attempts(CamelModel):
    model_config = ConfigDict(extra="forbid")

    # None = unlimited
    max_attempts: int | None = Field(default=None, ge=1)


class QuestionBase(CamelModel):
    id: str = Field(min_length=1)
    type: str
    prompt: str | None = None


class MultipleChoiceQuestion(QuestionBase):
    type: Literal["multiple_choice"]
    options: list[Any] = Field(default_factory=list)
    answer: Any


class TrueFalseNotGivenQuestion(QuestionBase):
    type: Literal["true_false_not_given"]
    answer: str


class YesNoNotGivenQuestion(QuestionBase):
    type: Literal["yes_no_not_given"]
    answer: str


class ShortAnswerQuestion(QuestionBase):
    type: Literal["short_answer"]
    # a single accepted answer or a list of accepted variants
    answer: Any


class SentenceBlank(CamelModel):
    id: str = Field(min_length=1)
    answer: Any


class SentenceCompletionQuestion(QuestionBase):
    type: Literal["sentence_completion"]
    sentences: list[SentenceBlank] = Field(default_factory=list)


class InformationStatement(CamelModel):
    id: str = Field(min_length=1)
    answer_paragraph: Any


class MatchingInformationQuestion(QuestionBase):
    type: Literal["matching_information"]
    statements: list[InformationStatement] = Field(default_factory=list)


class HeadingItem(CamelModel):
    paragraph: str = Field(min_length=1)
    answer_heading_id: Any


class MatchingHeadingsQuestion(QuestionBase):
    type: Literal["matching_headings"]
    headings: list[Any] = Field(default_factory=list)
    items: list[HeadingItem] = Field(default_factory=list)


class FeatureStatement(CamelModel):
    id: str = Field(min_length=1)
    answer_feature_id: Any


class MatchingFeaturesQuestion(QuestionBase):
    type: Literal["matching_features"]
    features: list[Any] = Field(default_factory=list)
    statements: list[FeatureStatement] = Field(default_factory=list)


class UnsupportedQuestion(QuestionBase):
    """Any question type without a comparator."""


QUESTION_TYPES = frozenset({
    "multiple_choice",
    "true_false_not_given",
    "yes_no_not_given",
    "short_answer",
    "sentence_completion",
    "matching_information",
    "matching_headings",
    "matching_features",
})


def _question_tag(value: Any) -> str:
    if isinstance(value, dict):
        question_type = value.get("type")
    else:
        question_type = getattr(value, "type", None)
    return question_type if question_type in QUESTION_TYPES else "unsupported"


Question = Annotated[
    Union[
        Annotated[MultipleChoiceQuestion, Tag("multiple_choice")],
        Annotated[TrueFalseNotGivenQuestion, Tag("true_false_not_given")],
        Annotated[YesNoNotGivenQuestion, Tag("yes_no_not_given")],
        Annotated[ShortAnswerQuestion, Tag("short_answer")],
        Annotated[SentenceCompletionQuestion, Tag("sentence_completion")],
        Annotated[MatchingInformationQuestion, Tag("matching_information")],
        Annotated[MatchingHeadingsQuestion, Tag("matching_headings")],
        Annotated[MatchingFeaturesQuestion, Tag("matching_features")],
        Annotated[UnsupportedQuestion, Tag("unsupported")],
    ],
    Discriminator(_question_tag),
]


class Section(CamelModel):
    id: str = Field(min_length=1)
    title: str | None = None
    questions: list[Question] = Field(default_factory=list)


class AssignmentConfig(CamelModel):
    version: int
    timing: Timing | None = None
    attempts: Attempts | None = None
    instructions: str | None = None
    # reading/listening only; writing and speaking configs carry task/part keys instead
    sections: list[Section] | None = None

    @property
    def max_attempts(self) -> int | None:
        return self.attempts.max_attempts if self.attempts else None


class ReadingSection(Section):
    passage: str = Field(min_length=1)


class Playback(CamelModel):
    model_config = ConfigDict(extra="forbid")

    limit_plays: int = Field(ge=0)


class ListeningSection(Section):
    # required key; null until the audio is uploaded
    audio_file_id: UUID | None
    playback: Playback | None = None


class WritingTask(CamelModel):
    prompt: str = Field(min_length=1)
    image_file_id: UUID | None = None


class SpeakingPart(CamelModel):
    questions: list[Annotated[str, Field(min_length=1)]]


class CueCard(CamelModel):
    topic: str = Field(min_length=1)
    bullet_points: list[Annotated[str, Field(min_length=1)]]


class SpeakingLongTurn(CamelModel):
    cue_card: CueCard
    prep_seconds: int = Field(ge=0)
    talk_seconds: int = Field(ge=0)


class ReadingAssignmentConfig(AssignmentConfig):
    sections: list[ReadingSection]


class ListeningAssignmentConfig(AssignmentConfig):
    sections: list[ListeningSection]


class WritingAssignmentConfig(AssignmentConfig):
    task1: WritingTask
    task2: WritingTask


class SpeakingAssignmentConfig(AssignmentConfig):
    part1: SpeakingPart
    part2: SpeakingLongTurn
    part3: SpeakingPart


CONFIG_SCHEMAS_BY_TYPE: dict[str, type[AssignmentConfig]] = {
    "reading": ReadingAssignmentConfig,
    "listening": ListeningAssignmentConfig,
    "writing": WritingAssignmentConfig,
    "speaking": SpeakingAssignmentConfig,
}


def parse_assignment_config(
    raw: Any, schema: type[AssignmentConfig] = AssignmentConfig
) -> AssignmentConfig:
    """
    Validate a stored/submitted config.

    The version is checked before anything else so an unknown format is
    reported as such rather than as a pile of field errors.
    """
    if isinstance(raw, AssignmentConfig):
        config_version = raw.version
    elif isinstance(raw, dict):
        config_version = raw.get("version")
    else:
        raise InvalidAssignmentConfig("assignment config must be an object")

    if config_version != settings.IELTS_CONFIG_VERSION:
        raise UnsupportedConfigVersion(config_version, settings.IELTS_CONFIG_VERSION)

    if isinstance(raw, schema):
        return raw
    if isinstance(raw, AssignmentConfig):
        raw = raw.model_dump(mode="json", by_alias=True, exclude_unset=True)
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        raise InvalidAssignmentConfig(f"invalid assignment config: {exc}") from exc


def parse_assignment_config_for_type(assignment_type: str, raw: Any) -> AssignmentConfig:
    """
    Validate a config being authored: on top of the common checks, each type
    must carry its content (reading passages, listening audio slots, writing
    tasks, speaking parts).
    """
    schema = CONFIG_SCHEMAS_BY_TYPE.get(assignment_type, AssignmentConfig)
    return parse_assignment_config(raw, schema)
