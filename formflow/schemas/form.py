"""Pydantic schemas for form definitions.

This module defines the structure and validation rules for form YAML files.
All models are frozen: authoring changes go through the ``with_*`` helpers,
which return new values so that a form already handed to a respondent's
session never changes underneath it.
"""

from typing import Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# skip_to_question value meaning "hide every question after this one"
TERMINATE = 0


class QuestionType(str, Enum):
    """Valid question types in form definitions."""
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime-local"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SELECT = "select"

    @property
    def is_choice(self) -> bool:
        """Whether answers are picked from the question's options."""
        return self in (QuestionType.RADIO, QuestionType.CHECKBOX, QuestionType.SELECT)

    @property
    def is_multi_valued(self) -> bool:
        """Whether the answer is a set of options rather than a single string."""
        return self == QuestionType.CHECKBOX


class SkipCondition(BaseModel):
    """A single skip-logic branch.

    Attributes:
        option: Trigger option; matches when the answer equals it (or, for
            multi-choice answers, contains it)
        skip_to_question: 1-based position of the jump target, or
            TERMINATE (0) to end the form after this question
    """
    model_config = ConfigDict(frozen=True)

    option: str = Field(default="", description="Trigger option value")
    skip_to_question: int = Field(
        default=TERMINATE,
        description="1-based jump target position, 0 to terminate"
    )

    @property
    def terminates(self) -> bool:
        """Whether this condition ends the form."""
        return self.skip_to_question == TERMINATE


class SkipLogic(BaseModel):
    """Skip-logic rule set attached to a question.

    Conditions are evaluated in listed order and only the first match is
    honored.
    """
    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Whether the rules are active")
    conditions: tuple[SkipCondition, ...] = Field(default=(), description="Ordered conditions")

    @model_validator(mode='after')
    def validate_enabled_conditions(self):
        """Enabled rules cannot carry a condition without a trigger option."""
        if self.enabled:
            for index, condition in enumerate(self.conditions):
                if not condition.option.strip():
                    raise ValueError(
                        f"Skip condition {index + 1} must reference an option"
                    )
        return self

    def with_condition(self, condition: SkipCondition) -> "SkipLogic":
        """Return a copy with ``condition`` appended."""
        return SkipLogic(enabled=self.enabled, conditions=self.conditions + (condition,))

    def without_condition(self, index: int) -> "SkipLogic":
        """Return a copy with the condition at ``index`` removed."""
        conditions = list(self.conditions)
        del conditions[index]
        return SkipLogic(enabled=self.enabled, conditions=tuple(conditions))

    def replace_condition(self, index: int, condition: SkipCondition) -> "SkipLogic":
        """Return a copy with the condition at ``index`` replaced."""
        conditions = list(self.conditions)
        conditions[index] = condition
        return SkipLogic(enabled=self.enabled, conditions=tuple(conditions))

    def toggled(self) -> "SkipLogic":
        """Return a copy with ``enabled`` flipped."""
        return SkipLogic(enabled=not self.enabled, conditions=self.conditions)


class Question(BaseModel):
    """A single question in a form.

    The position of a question inside Form.questions is significant: skip
    targets refer to it.

    Attributes:
        id: Unique identifier for this question within the form
        question_text: Text shown to the respondent
        question_type: Control type
        options: Ordered options (choice/select types only)
        required: Whether a visible question must be answered to submit
        skip_logic: Optional branching rules
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Unique question identifier")
    question_text: str = Field(..., min_length=1, description="Question text")
    question_type: QuestionType = Field(default=QuestionType.TEXT, description="Question type")
    options: tuple[str, ...] = Field(default=(), description="Options for choice questions")
    required: bool = Field(default=False, description="Whether an answer is required")
    skip_logic: Optional[SkipLogic] = Field(default=None, description="Skip-logic rules")

    @field_validator('question_text')
    @classmethod
    def question_text_not_blank(cls, v):
        """Ensure the question text is not just whitespace."""
        if not v.strip():
            raise ValueError('question_text must not be blank')
        return v

    @model_validator(mode='after')
    def validate_question_requirements(self):
        """Validate type-specific requirements."""
        if self.question_type.is_choice:
            if not any(option.strip() for option in self.options):
                raise ValueError(
                    f"Question {self.id} ({self.question_type.value}) must have at least one option"
                )
        return self

    @property
    def skip_logic_active(self) -> bool:
        """Whether this question carries enabled skip logic."""
        return self.skip_logic is not None and self.skip_logic.enabled

    def with_skip_logic(self, skip_logic: Optional[SkipLogic]) -> "Question":
        """Return a copy of this question with new skip logic."""
        data = self.model_dump()
        data["skip_logic"] = skip_logic
        return Question.model_validate(data)


class FormMetadata(BaseModel):
    """Form metadata and identification.

    Attributes:
        id: Unique form identifier (matches YAML filename)
        title: Human-readable form title
        description: Form description
        version: Form version (semantic versioning)
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Form identifier")
    title: str = Field(..., min_length=1, description="Form title")
    description: str = Field(default="", description="Form description")
    version: str = Field(default="1.0.0", pattern=r'^\d+\.\d+\.\d+$', description="Semantic version")

    @field_validator('id')
    @classmethod
    def id_alphanumeric(cls, v):
        """Ensure ID is alphanumeric with underscores/hyphens only."""
        if not v.replace('_', '').replace('-', '').isalnum():
            raise ValueError('Form ID must be alphanumeric with underscores/hyphens')
        return v


class Form(BaseModel):
    """Complete form definition.

    Root schema for form YAML files.
    """
    model_config = ConfigDict(frozen=True)

    metadata: FormMetadata
    questions: tuple[Question, ...] = Field(..., min_length=1)

    @model_validator(mode='after')
    def validate_form_structure(self):
        """Reject duplicate question IDs."""
        question_ids = [question.id for question in self.questions]
        if len(question_ids) != len(set(question_ids)):
            duplicates = sorted({qid for qid in question_ids if question_ids.count(qid) > 1})
            raise ValueError(f"Duplicate question IDs found: {duplicates}")
        return self

    @property
    def question_ids(self) -> list[int]:
        """Question IDs in defining order."""
        return [question.id for question in self.questions]

    def get_question(self, question_id: int) -> Optional[Question]:
        """Get question by ID.

        Args:
            question_id: Question identifier

        Returns:
            Question if found, None otherwise
        """
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def replace_question(self, index: int, question: Question) -> "Form":
        """Return a copy of the form with the question at ``index`` replaced."""
        questions = list(self.questions)
        questions[index] = question
        return Form(metadata=self.metadata, questions=tuple(questions))
