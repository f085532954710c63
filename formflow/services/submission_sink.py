"""Submission sinks for gated form responses.

A sink receives the answer list produced by the submission gate, together
with the respondent's name, and stores it. The visibility engine knows
nothing about how or where responses are kept.
"""

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formflow.models.response import FormResponse, ResponseAnswer
from formflow.schemas.form import Form
from formflow.schemas.submission import AnswerItem
from formflow.logging_config import get_logger

logger = get_logger(__name__)


class SubmissionSinkError(Exception):
    """Raised when a submission cannot be stored."""
    pass


class SubmissionSink(Protocol):
    """Receiver of gated submissions."""

    def submit(self, form: Form, respondent_name: str, answers: list[AnswerItem]) -> int:
        """Store a submission and return its response ID."""
        ...


class DatabaseSubmissionSink:
    """Sink storing submissions through SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize database sink.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def submit(self, form: Form, respondent_name: str, answers: list[AnswerItem]) -> int:
        """Store a submission as a FormResponse with its answers.

        Args:
            form: Form that was filled in
            respondent_name: Name of the respondent
            answers: Gated answer list

        Returns:
            ID of the stored FormResponse

        Raises:
            SubmissionSinkError: If the database write fails
        """
        response = FormResponse(
            form_id=form.metadata.id,
            form_version=form.metadata.version,
            respondent_name=respondent_name,
            answers=[
                ResponseAnswer(question_id=item.question_id, answer_text=item.answer_text)
                for item in answers
            ],
        )

        try:
            self.db.add(response)
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to store response for form {form.metadata.id}: {e}")
            self.db.rollback()
            raise SubmissionSinkError(f"Could not store response: {e}")

        logger.info(f"Stored response {response.id} for form {form.metadata.id} ({len(answers)} answers)")
        return response.id
