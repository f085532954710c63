"""Submission gating for form responses.

This module checks required questions against the visible set and builds the
answer list that is handed to the submission sink. Hidden questions are
neither validated nor submitted.
"""

from dataclasses import dataclass, field
from typing import Any, Collection, Mapping, Optional, Sequence

from formflow.schemas.form import Question
from formflow.schemas.submission import AnswerItem
from formflow.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SEPARATOR = ", "


@dataclass(frozen=True)
class MissingRequiredAnswer:
    """A visible required question without an answer.

    Attributes:
        question_id: ID of the unanswered question
        question_text: Text of the unanswered question
    """
    question_id: int
    question_text: str

    @property
    def message(self) -> str:
        """Field-level message for the respondent."""
        return f'The question "{self.question_text}" is required'


@dataclass
class SubmissionResult:
    """Result of gating a submission.

    Attributes:
        is_valid: Whether every visible required question is answered
        answers: Answer list to submit (empty when invalid)
        missing: Unanswered required questions in form order
    """
    is_valid: bool
    answers: list[AnswerItem] = field(default_factory=list)
    missing: list[MissingRequiredAnswer] = field(default_factory=list)

    @property
    def error(self) -> Optional[MissingRequiredAnswer]:
        """First unanswered required question, if any."""
        return self.missing[0] if self.missing else None


class SubmissionGate:
    """Service for validating and filtering answers at submit time."""

    def __init__(self, separator: str = DEFAULT_SEPARATOR):
        """Initialize submission gate.

        Args:
            separator: Text placed between selected options of
                multi-choice answers
        """
        self.separator = separator

    @staticmethod
    def is_answered(value: Any) -> bool:
        """Check whether a stored answer counts as given.

        Blank strings and empty selections count as unanswered.
        """
        if value is None:
            return False
        if isinstance(value, str):
            return bool(value.strip())
        return len(value) > 0

    def serialize_answer(self, question: Question, value: Any) -> str:
        """Serialize an answer as text.

        Multi-valued answers are joined in the question's option order;
        selections not among the options follow in sorted order.

        Args:
            question: Question the answer belongs to
            value: Stored answer

        Returns:
            Answer text
        """
        if isinstance(value, str):
            return value

        selected = set(value)
        ordered = [option for option in question.options if option in selected]
        extras = sorted(selected - set(question.options))
        return self.separator.join(ordered + extras)

    def prepare_submission(
        self,
        questions: Sequence[Question],
        answers: Mapping[int, Any],
        visible: Collection[int]
    ) -> SubmissionResult:
        """Validate required answers and build the outgoing answer list.

        Only questions in ``visible`` are considered, both for the required
        check and for the output. Neither ``answers`` nor ``visible`` is
        modified.

        Args:
            questions: Questions in defining order
            answers: Current answers keyed by question ID
            visible: Visible question IDs, computed for these answers

        Returns:
            SubmissionResult with the answer list or the missing questions

        Example:
            >>> gate = SubmissionGate()
            >>> result = gate.prepare_submission(form.questions, {1: "Yes"}, [1, 2])
            >>> result.is_valid
            True
        """
        visible_ids = set(visible)
        missing: list[MissingRequiredAnswer] = []
        items: list[AnswerItem] = []

        for question in questions:
            if question.id not in visible_ids:
                continue

            value = answers.get(question.id)
            answered = self.is_answered(value)

            if question.required and not answered:
                missing.append(MissingRequiredAnswer(
                    question_id=question.id,
                    question_text=question.question_text,
                ))
                continue

            if value is not None:
                items.append(AnswerItem(
                    question_id=question.id,
                    answer_text=self.serialize_answer(question, value),
                ))

        if missing:
            logger.info(f"Submission blocked by required questions: {[m.question_id for m in missing]}")
            return SubmissionResult(is_valid=False, missing=missing)

        logger.debug(f"Prepared {len(items)} answers for submission")
        return SubmissionResult(is_valid=True, answers=items)
