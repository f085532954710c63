"""Pydantic schemas for answer payloads exchanged over HTTP.

Answer maps arrive as JSON objects keyed by question ID. Multi-choice
answers are JSON arrays; every other answer is a string.
"""

from typing import Any, Union

from pydantic import BaseModel, Field, field_validator

AnswerPayload = Union[str, list[str]]


class AnswerItem(BaseModel):
    """A single entry of a submitted response.

    Attributes:
        question_id: ID of the answered question
        answer_text: Answer serialized as text
    """
    question_id: int = Field(..., description="Question identifier")
    answer_text: str = Field(..., description="Serialized answer")


class VisibilityRequest(BaseModel):
    """Current answers of an in-progress fill-in.

    Answer values are checked against their question types by the form
    session, not here.
    """
    answers: dict[int, Any] = Field(default_factory=dict, description="Answers by question ID")


class SkipIssueOut(BaseModel):
    """A skip-logic condition that was ignored during evaluation."""
    question_id: int
    kind: str
    target: int


class VisibilityResponse(BaseModel):
    """Result of evaluating skip logic against a set of answers.

    Attributes:
        visible: Visible question IDs in form order
        hidden: Hidden question IDs in form order
        display_numbers: 1-based number each visible question is shown with
        answers: Answers left after dropping those of hidden questions
        issues: Skip conditions ignored as malformed or backward
    """
    visible: list[int]
    hidden: list[int]
    display_numbers: dict[int, int]
    answers: dict[int, AnswerPayload]
    issues: list[SkipIssueOut] = Field(default_factory=list)


class SubmissionRequest(BaseModel):
    """A respondent's submission of a form."""
    respondent_name: str = Field(default="", description="Name of the respondent")
    answers: dict[int, Any] = Field(default_factory=dict, description="Answers by question ID")

    @field_validator('respondent_name')
    @classmethod
    def strip_respondent_name(cls, v):
        """Trim surrounding whitespace from the respondent name."""
        return v.strip()


class SubmissionResponse(BaseModel):
    """Acknowledgement of a stored submission."""
    response_id: int
    answers: list[AnswerItem]
