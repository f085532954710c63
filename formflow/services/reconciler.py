"""Answer reconciliation against the visible question set."""

from typing import Any, Collection, Mapping

from formflow.logging_config import get_logger

logger = get_logger(__name__)


class AnswerReconciler:
    """Service for pruning answers of questions that are no longer visible."""

    @staticmethod
    def reconcile(answers: Mapping[int, Any], visible: Collection[int]) -> dict[int, Any]:
        """Drop every answer whose question is not visible.

        Must run after each visibility computation so that a later
        computation never sees an answer left behind by a hidden question.

        Args:
            answers: Current answers keyed by question ID (not modified)
            visible: Visible question IDs

        Returns:
            New answer map restricted to visible questions
        """
        visible_ids = set(visible)
        kept = {question_id: value for question_id, value in answers.items() if question_id in visible_ids}

        dropped = [question_id for question_id in answers if question_id not in visible_ids]
        if dropped:
            logger.debug(f"Dropped answers for hidden questions: {dropped}")

        return kept
