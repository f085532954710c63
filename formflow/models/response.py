"""Models for storing submitted form responses.

A FormResponse is one respondent's submission of a form. Its ResponseAnswer
rows hold the gated answer list: only questions that were visible at submit
time are stored.
"""

from datetime import datetime

from sqlalchemy import (
    Index,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formflow.models.database import Base


class FormResponse(Base):
    """Model for a submitted form response.

    Attributes:
        id: Primary key
        form_id: Identifier of the form that was filled in
        form_version: Form version at submission time
        respondent_name: Name given by the respondent
        submitted_at: When the response was stored
        answers: Relationship to the stored answers
    """

    __tablename__ = "form_responses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    form_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Form identifier from YAML filename"
    )
    form_version: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Form version when the response was submitted"
    )
    respondent_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Name of the respondent"
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the response was submitted"
    )

    answers: Mapped[list["ResponseAnswer"]] = relationship(
        "ResponseAnswer",
        back_populates="response",
        cascade="all, delete-orphan",
        order_by="ResponseAnswer.id",
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<FormResponse(id={self.id}, "
            f"form_id={self.form_id}, "
            f"respondent_name={self.respondent_name})>"
        )


class ResponseAnswer(Base):
    """Model for one answer of a submitted response.

    Attributes:
        id: Primary key
        response_id: Foreign key to form_responses table
        question_id: ID of the answered question
        answer_text: Serialized answer
        response: Relationship to parent FormResponse
    """

    __tablename__ = "response_answers"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    response_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("form_responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Foreign key to form_responses table"
    )
    question_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="ID of the answered question"
    )
    answer_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Answer serialized as text"
    )

    response: Mapped["FormResponse"] = relationship(
        "FormResponse",
        back_populates="answers",
    )

    __table_args__ = (
        Index("idx_response_question", "response_id", "question_id"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<ResponseAnswer(id={self.id}, "
            f"response_id={self.response_id}, "
            f"question_id={self.question_id})>"
        )
