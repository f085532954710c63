"""Skip-logic lint for form definitions.

This module inspects a form's skip logic for rules that the visibility
engine will silently ignore or that can never take effect:
- Jump targets outside the form
- Backward or self-referencing jumps
- Trigger options the question does not offer
- Conditions shadowed by an earlier condition on the same option
- Skip logic on free-input questions
"""

from dataclasses import dataclass

from formflow.schemas.form import Form
from formflow.services.visibility import SkipIssueKind, TargetKind, VisibilityEngine
from formflow.logging_config import get_logger

logger = get_logger(__name__)

UNKNOWN_TRIGGER_OPTION = "unknown_trigger_option"
SHADOWED_CONDITION = "shadowed_condition"
SKIP_LOGIC_ON_FREE_INPUT = "skip_logic_on_free_input"


class FormStructureError(Exception):
    """Raised when form structure is invalid."""
    pass


@dataclass(frozen=True)
class FormLintIssue:
    """A problem found in a form's skip logic.

    Attributes:
        question_id: Question carrying the rule
        code: Machine-readable issue code
        message: Human-readable description
    """
    question_id: int
    code: str
    message: str


class FormValidator:
    """Service for linting skip logic in form definitions."""

    @staticmethod
    def validate(form: Form, strict: bool = False) -> list[FormLintIssue]:
        """Lint every enabled skip-logic rule in a form.

        Args:
            form: Form to inspect
            strict: Raise instead of returning when issues are found

        Returns:
            List of issues, empty for a clean form

        Raises:
            FormStructureError: If strict and any issue was found

        Example:
            >>> issues = FormValidator.validate(form)
            >>> [issue.code for issue in issues]
            ['backward_or_self_jump']
        """
        issues: list[FormLintIssue] = []
        count = len(form.questions)

        for position, question in enumerate(form.questions):
            if not question.skip_logic_active:
                continue

            if not question.question_type.is_choice:
                issues.append(FormLintIssue(
                    question_id=question.id,
                    code=SKIP_LOGIC_ON_FREE_INPUT,
                    message=(
                        f"Question {question.id} is {question.question_type.value}; "
                        "skip logic only triggers on an exact text match"
                    ),
                ))

            seen_options: set[str] = set()
            for number, condition in enumerate(question.skip_logic.conditions, start=1):
                if question.question_type.is_choice and condition.option not in question.options:
                    issues.append(FormLintIssue(
                        question_id=question.id,
                        code=UNKNOWN_TRIGGER_OPTION,
                        message=f"Condition {number} triggers on '{condition.option}', which is not an option",
                    ))

                if condition.option in seen_options:
                    issues.append(FormLintIssue(
                        question_id=question.id,
                        code=SHADOWED_CONDITION,
                        message=f"Condition {number} repeats '{condition.option}' and can never apply",
                    ))
                seen_options.add(condition.option)

                kind = VisibilityEngine.classify_target(position, condition.skip_to_question, count)
                if kind == TargetKind.MALFORMED:
                    issues.append(FormLintIssue(
                        question_id=question.id,
                        code=SkipIssueKind.MALFORMED_SKIP_TARGET.value,
                        message=(
                            f"Condition {number} targets question {condition.skip_to_question}, "
                            f"outside 1..{count}"
                        ),
                    ))
                elif kind == TargetKind.BACKWARD:
                    issues.append(FormLintIssue(
                        question_id=question.id,
                        code=SkipIssueKind.BACKWARD_OR_SELF_JUMP.value,
                        message=(
                            f"Condition {number} jumps back to question {condition.skip_to_question} "
                            "and is ignored"
                        ),
                    ))

        for issue in issues:
            logger.warning(f"Form {form.metadata.id}: {issue.message} [{issue.code}]")

        if strict and issues:
            raise FormStructureError(
                f"Form '{form.metadata.id}' has {len(issues)} skip-logic issue(s): "
                + "; ".join(issue.message for issue in issues)
            )

        if not issues:
            logger.info(f"Form {form.metadata.id} validated successfully")
        return issues
