"""Visibility engine for conditional question display.

This module evaluates skip-logic rules against a respondent's current answers
to determine which questions of a form are visible. The computation is a
single forward pass over the questions in defining order and is recomputed
from scratch on every answer change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence

from formflow.schemas.form import Question, SkipCondition, SkipLogic, TERMINATE
from formflow.logging_config import get_logger

logger = get_logger(__name__)


class TargetKind(str, Enum):
    """How a skip target relates to the question that triggers it."""
    TERMINATE = "terminate"
    FORWARD = "forward"
    BACKWARD = "backward"
    MALFORMED = "malformed"


class SkipIssueKind(str, Enum):
    """Skip conditions that matched but were ignored."""
    MALFORMED_SKIP_TARGET = "malformed_skip_target"
    BACKWARD_OR_SELF_JUMP = "backward_or_self_jump"


@dataclass(frozen=True)
class SkipLogicIssue:
    """A matched skip condition that had no effect.

    Attributes:
        question_id: Question whose answer triggered the condition
        kind: Why the condition was ignored
        target: The condition's skip_to_question value
    """
    question_id: int
    kind: SkipIssueKind
    target: int


@dataclass(frozen=True)
class VisibilityResult:
    """Outcome of one visibility computation.

    Attributes:
        visible: Visible question IDs in form order
        hidden: Hidden question IDs in form order
        issues: Matched conditions that were ignored
    """
    visible: tuple[int, ...]
    hidden: tuple[int, ...] = ()
    issues: tuple[SkipLogicIssue, ...] = ()

    def is_visible(self, question_id: int) -> bool:
        """Check whether a question is currently visible."""
        return question_id in self.visible

    def display_number(self, question_id: int) -> Optional[int]:
        """Return the 1-based number a visible question is shown with.

        Returns:
            Position among visible questions, or None if hidden or unknown
        """
        try:
            return self.visible.index(question_id) + 1
        except ValueError:
            return None

    @property
    def display_numbers(self) -> dict[int, int]:
        """Mapping of visible question ID to display number."""
        return {question_id: number for number, question_id in enumerate(self.visible, start=1)}


class VisibilityEngine:
    """Service for deriving the visible question set from skip logic."""

    @staticmethod
    def classify_target(position: int, target: int, count: int) -> TargetKind:
        """Classify a skip target relative to the triggering question.

        Args:
            position: 0-based position of the triggering question
            target: Condition's skip_to_question value
            count: Number of questions in the form

        Returns:
            TargetKind for the target
        """
        if target == TERMINATE:
            return TargetKind.TERMINATE
        index = target - 1
        if index < 0 or index >= count:
            return TargetKind.MALFORMED
        if index <= position:
            return TargetKind.BACKWARD
        return TargetKind.FORWARD

    @staticmethod
    def answer_matches(answer: Any, option: str) -> bool:
        """Check whether an answer selects ``option``.

        Single-valued answers must equal the option exactly; multi-valued
        answers (sets, lists, tuples) must contain it.
        """
        if isinstance(answer, str):
            return answer == option
        if isinstance(answer, (set, frozenset, list, tuple)):
            return option in answer
        return False

    @staticmethod
    def match_condition(skip_logic: SkipLogic, answer: Any) -> Optional[SkipCondition]:
        """Return the first condition matched by ``answer``.

        Conditions are scanned in listed order; later matches are never
        considered.

        Example:
            >>> logic = SkipLogic(enabled=True, conditions=[
            ...     SkipCondition(option="No", skip_to_question=0),
            ...     SkipCondition(option="No", skip_to_question=4),
            ... ])
            >>> VisibilityEngine.match_condition(logic, "No").skip_to_question
            0
        """
        for condition in skip_logic.conditions:
            if VisibilityEngine.answer_matches(answer, condition.option):
                return condition
        return None

    @staticmethod
    def evaluate(
        questions: Sequence[Question],
        answers: Mapping[int, Any]
    ) -> VisibilityResult:
        """Compute which questions are visible for the given answers.

        Walks the questions once in order. A visible question with enabled
        skip logic and an answer applies its first matching condition:
        terminate hides every later question, a forward jump hides the
        questions strictly between the trigger and the target. Backward,
        self-referencing and out-of-range targets change nothing and are
        reported as issues instead. Questions hidden earlier in the pass
        never trigger their own rules.

        Answers for unknown or hidden questions are ignored.

        Args:
            questions: Questions in defining order
            answers: Current answers keyed by question ID

        Returns:
            VisibilityResult with visible/hidden IDs and ignored conditions

        Example:
            >>> result = VisibilityEngine.evaluate(form.questions, {1: "No"})
            >>> result.visible
            (1,)
        """
        count = len(questions)
        shown = [True] * count
        issues: list[SkipLogicIssue] = []

        for position, question in enumerate(questions):
            if not shown[position]:
                continue
            if not question.skip_logic_active:
                continue
            if question.id not in answers:
                continue

            condition = VisibilityEngine.match_condition(question.skip_logic, answers[question.id])
            if condition is None:
                continue

            kind = VisibilityEngine.classify_target(position, condition.skip_to_question, count)

            if kind == TargetKind.TERMINATE:
                for later in range(position + 1, count):
                    shown[later] = False
                logger.debug(f"Question {question.id} terminates the form on '{condition.option}'")
            elif kind == TargetKind.FORWARD:
                target_index = condition.skip_to_question - 1
                for between in range(position + 1, target_index):
                    shown[between] = False
                logger.debug(
                    f"Question {question.id} jumps to position {condition.skip_to_question} "
                    f"on '{condition.option}'"
                )
            else:
                issue_kind = (
                    SkipIssueKind.BACKWARD_OR_SELF_JUMP
                    if kind == TargetKind.BACKWARD
                    else SkipIssueKind.MALFORMED_SKIP_TARGET
                )
                issues.append(SkipLogicIssue(
                    question_id=question.id,
                    kind=issue_kind,
                    target=condition.skip_to_question,
                ))
                logger.warning(
                    f"Ignoring skip condition on question {question.id}: "
                    f"{issue_kind.value} (target {condition.skip_to_question})"
                )

        visible = tuple(q.id for q, keep in zip(questions, shown) if keep)
        hidden = tuple(q.id for q, keep in zip(questions, shown) if not keep)

        logger.debug(f"Visible questions: {list(visible)}")
        return VisibilityResult(visible=visible, hidden=hidden, issues=tuple(issues))

    @staticmethod
    def compute_visible(
        questions: Sequence[Question],
        answers: Mapping[int, Any]
    ) -> list[int]:
        """Return the visible question IDs in form order.

        Args:
            questions: Questions in defining order
            answers: Current answers keyed by question ID

        Returns:
            List of visible question IDs
        """
        return list(VisibilityEngine.evaluate(questions, answers).visible)
