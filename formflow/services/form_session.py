"""Form session for orchestrating one respondent's fill-in.

This module coordinates the visibility engine, the answer reconciler and the
submission gate. Every answer mutation runs exactly one recompute-then-
reconcile cycle before returning, so the visible set and the answer map seen
by callers are always consistent with each other.
"""

import uuid
from types import MappingProxyType
from collections.abc import Iterable
from typing import Any, Mapping, Optional

from formflow.schemas.form import Form, Question
from formflow.services.visibility import VisibilityEngine, VisibilityResult
from formflow.services.reconciler import AnswerReconciler
from formflow.services.submission_gate import SubmissionGate, SubmissionResult
from formflow.schemas.submission import AnswerItem
from formflow.services.submission_sink import SubmissionSink
from formflow.logging_config import get_logger

logger = get_logger(__name__)


class FormSessionError(Exception):
    """Raised when a form session cannot apply an operation."""
    pass


class SubmissionRejectedError(FormSessionError):
    """Raised when required questions are unanswered at submit time."""

    def __init__(self, result: SubmissionResult):
        self.result = result
        super().__init__(result.error.message if result.error else "Submission rejected")


class FormSession:
    """A single respondent's in-progress answers to a form.

    The form is immutable and may be shared; the answer map belongs to this
    session alone.
    """

    def __init__(self, form: Form, gate: Optional[SubmissionGate] = None):
        """Initialize form session.

        Args:
            form: Form definition being filled in
            gate: Submission gate (defaults to comma-joined multi-choice)
        """
        self.id = uuid.uuid4().hex
        self.form = form
        self.gate = gate or SubmissionGate()
        self.submitted = False
        self.submitted_answers: list[AnswerItem] = []
        self._answers: dict[int, Any] = {}
        self._visibility = VisibilityEngine.evaluate(form.questions, self._answers)
        self._log_extra = {"form_id": form.metadata.id, "session_id": self.id}

    @property
    def questions(self) -> tuple[Question, ...]:
        """Questions in defining order."""
        return self.form.questions

    @property
    def answers(self) -> Mapping[int, Any]:
        """Read-only view of the current answers."""
        return MappingProxyType(self._answers)

    @property
    def visibility(self) -> VisibilityResult:
        """Result of the latest visibility computation."""
        return self._visibility

    @property
    def visible(self) -> tuple[int, ...]:
        """Visible question IDs in form order."""
        return self._visibility.visible

    def set_answer(self, question_id: int, value: Any) -> VisibilityResult:
        """Record an answer and recompute visibility.

        Answers to questions that are hidden after the recompute are dropped
        in the same step.

        Args:
            question_id: ID of the answered question
            value: A string, or an iterable of selected options for
                multi-choice questions

        Returns:
            VisibilityResult after the change

        Raises:
            FormSessionError: If the question is unknown or the value has the
                wrong shape for the question type
        """
        question = self._require_question(question_id)
        self._answers[question_id] = self._coerce_value(question, value)
        logger.debug(f"Answer set for question {question_id}", extra=self._log_extra)
        return self._recompute()

    def toggle_option(self, question_id: int, option: str, checked: bool) -> VisibilityResult:
        """Select or deselect one option of a multi-choice question.

        Args:
            question_id: ID of a multi-choice question
            option: Option to toggle
            checked: True to select, False to deselect

        Returns:
            VisibilityResult after the change
        """
        question = self._require_question(question_id)
        if not question.question_type.is_multi_valued:
            raise FormSessionError(f"Question {question_id} does not accept multiple selections")

        current = set(self._answers.get(question_id, frozenset()))
        if checked:
            current.add(option)
        else:
            current.discard(option)
        return self.set_answer(question_id, current)

    def clear_answer(self, question_id: int) -> VisibilityResult:
        """Remove an answer and recompute visibility."""
        self._require_question(question_id)
        self._answers.pop(question_id, None)
        return self._recompute()

    def replace_answers(self, answers: Mapping[int, Any]) -> VisibilityResult:
        """Replace the whole answer map and recompute visibility once.

        Args:
            answers: Answers keyed by question ID

        Returns:
            VisibilityResult for the new answers
        """
        coerced: dict[int, Any] = {}
        for question_id, value in answers.items():
            question = self._require_question(question_id)
            coerced[question_id] = self._coerce_value(question, value)
        self._answers = coerced
        return self._recompute()

    def prepare_submission(self) -> SubmissionResult:
        """Gate the current answers against a freshly computed visible set."""
        self._recompute()
        return self.gate.prepare_submission(self.questions, self._answers, self.visible)

    def submit(self, respondent_name: str, sink: SubmissionSink) -> int:
        """Validate the answers and hand them to a submission sink.

        The gated answer list handed to the sink is kept on
        ``submitted_answers``.

        Args:
            respondent_name: Name of the respondent
            sink: Destination for the gated answers

        Returns:
            Response ID assigned by the sink

        Raises:
            FormSessionError: If already submitted or the name is blank
            SubmissionRejectedError: If required questions are unanswered
        """
        if self.submitted:
            raise FormSessionError("This form has already been submitted")

        name = respondent_name.strip() if respondent_name else ""
        if not name:
            raise FormSessionError("Please enter your name")

        result = self.prepare_submission()
        if not result.is_valid:
            logger.info(
                f"Submission rejected: question {result.error.question_id} is required",
                extra=self._log_extra,
            )
            raise SubmissionRejectedError(result)

        response_id = sink.submit(self.form, name, result.answers)
        self.submitted = True
        self.submitted_answers = result.answers

        logger.info(f"Submitted {len(result.answers)} answers as response {response_id}", extra=self._log_extra)
        return response_id

    def _recompute(self) -> VisibilityResult:
        """Recompute visibility and drop answers of hidden questions."""
        self._visibility = VisibilityEngine.evaluate(self.questions, self._answers)
        self._answers = AnswerReconciler.reconcile(self._answers, self._visibility.visible)
        return self._visibility

    def _require_question(self, question_id: int) -> Question:
        question = self.form.get_question(question_id)
        if question is None:
            raise FormSessionError(f"Unknown question: {question_id}")
        return question

    @staticmethod
    def _coerce_value(question: Question, value: Any) -> Any:
        """Normalize an answer to a string or a frozenset of strings."""
        if question.question_type.is_multi_valued:
            if isinstance(value, str) or not isinstance(value, Iterable):
                raise FormSessionError(f"Question {question.id} expects a list of selected options")
            selected = list(value)
            if not all(isinstance(option, str) for option in selected):
                raise FormSessionError(f"Question {question.id} options must be strings")
            return frozenset(selected)

        if not isinstance(value, str):
            raise FormSessionError(f"Question {question.id} expects a single text answer")
        return value
