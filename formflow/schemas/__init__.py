"""Pydantic schemas for data validation.

This package contains all Pydantic models for form definitions and answer
payloads.
"""

from formflow.schemas.form import (
    TERMINATE,
    QuestionType,
    SkipCondition,
    SkipLogic,
    Question,
    FormMetadata,
    Form,
)
from formflow.schemas.submission import (
    AnswerPayload,
    AnswerItem,
    VisibilityRequest,
    SkipIssueOut,
    VisibilityResponse,
    SubmissionRequest,
    SubmissionResponse,
)

__all__ = [
    "TERMINATE",
    "QuestionType",
    "SkipCondition",
    "SkipLogic",
    "Question",
    "FormMetadata",
    "Form",
    "AnswerPayload",
    "AnswerItem",
    "VisibilityRequest",
    "SkipIssueOut",
    "VisibilityResponse",
    "SubmissionRequest",
    "SubmissionResponse",
]
