"""Unit tests for the answer reconciler."""

from formflow.services.reconciler import AnswerReconciler


class TestAnswerReconciler:
    """Tests for AnswerReconciler class."""

    def test_drops_hidden_answers(self):
        """Test that answers outside the visible set are removed."""
        answers = {1: "No", 2: frozenset({"Red"}), 3: "text", 4: "kept"}

        result = AnswerReconciler.reconcile(answers, [1, 4])

        assert result == {1: "No", 4: "kept"}

    def test_every_key_is_visible(self):
        """Test the closure property: every remaining key is visible."""
        answers = {1: "a", 2: "b", 7: "unknown"}
        visible = (2, 3)

        result = AnswerReconciler.reconcile(answers, visible)

        assert all(question_id in visible for question_id in result)

    def test_input_not_mutated(self):
        """Test that the input map is left as it was."""
        answers = {1: "a", 2: "b"}

        result = AnswerReconciler.reconcile(answers, [1])

        assert answers == {1: "a", 2: "b"}
        assert result is not answers

    def test_nothing_visible(self):
        """Test reconciling against an empty visible set."""
        assert AnswerReconciler.reconcile({1: "a"}, []) == {}

    def test_nothing_answered(self):
        """Test reconciling an empty answer map."""
        assert AnswerReconciler.reconcile({}, [1, 2]) == {}
