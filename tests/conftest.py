"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import os
from typing import Generator

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set environment variables for tests BEFORE importing formflow modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from formflow.models.database import Base
from formflow.schemas.form import (
    Form,
    FormMetadata,
    Question,
    QuestionType,
    SkipCondition,
    SkipLogic,
    TERMINATE,
)


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine with SQLite in-memory database.

    Yields:
        Engine: SQLAlchemy engine for testing

    Note:
        StaticPool keeps a single connection so the in-memory database is
        shared with the thread FastAPI's TestClient runs requests on.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key support for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session.

    Yields:
        Session: SQLAlchemy session for testing
    """
    TestSessionLocal = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )

    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()


def build_question(question_id, question_type=QuestionType.TEXT, options=(), required=False, conditions=None):
    """Build a question, with enabled skip logic when conditions are given.

    Args:
        question_id: Question ID
        question_type: Question type
        options: Options for choice questions
        required: Required flag
        conditions: List of (option, skip_to_question) pairs
    """
    skip_logic = None
    if conditions is not None:
        skip_logic = SkipLogic(
            enabled=True,
            conditions=[SkipCondition(option=o, skip_to_question=t) for o, t in conditions],
        )
    return Question(
        id=question_id,
        question_text=f"Question {question_id}?",
        question_type=question_type,
        options=options,
        required=required,
        skip_logic=skip_logic,
    )


def build_form(*questions, form_id="test_form"):
    """Wrap questions in a Form."""
    return Form(
        metadata=FormMetadata(id=form_id, title="Test Form"),
        questions=questions,
    )


@pytest.fixture
def yes_no_terminate_form() -> Form:
    """Three questions; answering "No" on Q1 ends the form."""
    return build_form(
        build_question(1, QuestionType.RADIO, ("Yes", "No"), conditions=[("No", TERMINATE)]),
        build_question(2, required=True),
        build_question(3),
    )


@pytest.fixture
def jump_ahead_form() -> Form:
    """Five questions; Q2 jumps to Q5 on "Skip ahead"."""
    return build_form(
        build_question(1),
        build_question(
            2, QuestionType.RADIO, ("Continue", "Skip ahead"),
            conditions=[("Skip ahead", 5)],
        ),
        build_question(3, required=True),
        build_question(4, required=True),
        build_question(5),
    )


@pytest.fixture
def hidden_required_form() -> Form:
    """Q1 "No" jumps to Q4, hiding Q2 and the required Q3."""
    return build_form(
        build_question(1, QuestionType.RADIO, ("Yes", "No"), required=True, conditions=[("No", 4)]),
        build_question(2, QuestionType.CHECKBOX, ("Red", "Green", "Blue")),
        build_question(3, required=True),
        build_question(4),
    )


@pytest.fixture
def sample_form_yaml() -> str:
    """Return valid form YAML content."""
    return """
metadata:
  id: test_form
  title: Test Form
  description: A test form
  version: 1.0.0

questions:
  - id: 1
    question_text: Do you have a car?
    question_type: radio
    options: ["Yes", "No"]
    required: true
    skip_logic:
      enabled: true
      conditions:
        - option: "No"
          skip_to_question: 3

  - id: 2
    question_text: Which brand?
    question_type: text
    required: true

  - id: 3
    question_text: Which colors do you like?
    question_type: checkbox
    options: ["Red", "Green", "Blue"]
"""


@pytest.fixture
def question_factory():
    """Factory building questions; see build_question."""
    return build_question


@pytest.fixture
def form_factory():
    """Factory wrapping questions in a Form; see build_form."""
    return build_form
