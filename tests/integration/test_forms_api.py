"""Integration tests for the form HTTP endpoints.

Runs the FastAPI app against a temporary forms directory and an in-memory
SQLite database.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from formflow.main import app
from formflow.models.database import get_db
from formflow.models.response import FormResponse
from formflow.services.form_loader import FormLoader, get_form_loader


@pytest.fixture
def client(tmp_path, db_session, sample_form_yaml):
    """Test client with the sample form and test database wired in."""
    (Path(tmp_path) / "test_form.yaml").write_text(sample_form_yaml)
    (Path(tmp_path) / "broken.yaml").write_text("metadata: [unclosed\n")
    loader = FormLoader(str(tmp_path))

    app.dependency_overrides[get_form_loader] = lambda: loader
    app.dependency_overrides[get_db] = lambda: db_session

    yield TestClient(app)

    app.dependency_overrides.clear()


class TestMetaEndpoints:
    """Tests for root and health endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}


class TestFormEndpoints:
    """Tests for form retrieval."""

    def test_list_forms(self, client):
        response = client.get("/forms")

        assert response.json() == {"forms": ["broken", "test_form"]}

    def test_get_form(self, client):
        response = client.get("/forms/test_form")

        assert response.status_code == 200
        data = response.json()
        assert data["metadata"]["id"] == "test_form"
        assert [q["id"] for q in data["questions"]] == [1, 2, 3]
        assert data["visibility"]["visible"] == [1, 2, 3]

    def test_get_missing_form(self, client):
        assert client.get("/forms/nope").status_code == 404

    def test_get_invalid_form(self, client):
        assert client.get("/forms/broken").status_code == 500


class TestVisibilityEndpoint:
    """Tests for POST /forms/{form_id}/visibility."""

    def test_skip_hides_and_drops_answers(self, client):
        response = client.post(
            "/forms/test_form/visibility",
            json={"answers": {"1": "No", "2": "Toyota"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["visible"] == [1, 3]
        assert data["hidden"] == [2]
        assert data["answers"] == {"1": "No"}
        assert data["display_numbers"] == {"1": 1, "3": 2}
        assert data["issues"] == []

    def test_multi_choice_answers_round_out_in_option_order(self, client):
        response = client.post(
            "/forms/test_form/visibility",
            json={"answers": {"3": ["Blue", "Red"]}},
        )

        assert response.json()["answers"] == {"3": ["Red", "Blue"]}

    def test_bad_answer_shape(self, client):
        response = client.post(
            "/forms/test_form/visibility",
            json={"answers": {"3": "Red"}},
        )

        assert response.status_code == 400

    def test_non_string_answer_is_bad_request(self, client):
        """Test that a JSON number is rejected by the session, not by FastAPI."""
        response = client.post(
            "/forms/test_form/visibility",
            json={"answers": {"1": 5}},
        )

        assert response.status_code == 400
        assert "single text answer" in response.json()["detail"]

    def test_unknown_question(self, client):
        response = client.post(
            "/forms/test_form/visibility",
            json={"answers": {"9": "x"}},
        )

        assert response.status_code == 400


class TestResponsesEndpoint:
    """Tests for POST /forms/{form_id}/responses."""

    def test_submit_with_hidden_required_question(self, client, db_session):
        """Test that a required question hidden by skip logic doesn't block."""
        response = client.post(
            "/forms/test_form/responses",
            json={"respondent_name": "Alice", "answers": {"1": "No", "2": "stale", "3": ["Green"]}},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["answers"] == [
            {"question_id": 1, "answer_text": "No"},
            {"question_id": 3, "answer_text": "Green"},
        ]

        stored = db_session.execute(select(FormResponse)).scalar_one()
        assert stored.id == data["response_id"]
        assert stored.respondent_name == "Alice"

    def test_missing_required_answer(self, client, db_session):
        response = client.post(
            "/forms/test_form/responses",
            json={"respondent_name": "Alice", "answers": {"1": "Yes"}},
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "missing_required_answer"
        assert detail["question_id"] == 2
        assert detail["missing"] == [2]
        assert db_session.execute(select(FormResponse)).scalars().all() == []

    def test_non_string_answer_is_bad_request(self, client, db_session):
        response = client.post(
            "/forms/test_form/responses",
            json={"respondent_name": "Alice", "answers": {"1": True, "3": [["Red"]]}},
        )

        assert response.status_code == 400
        assert db_session.execute(select(FormResponse)).scalars().all() == []

    def test_blank_respondent_name(self, client):
        response = client.post(
            "/forms/test_form/responses",
            json={"respondent_name": "  ", "answers": {"1": "No"}},
        )

        assert response.status_code == 400

    def test_submit_to_missing_form(self, client):
        response = client.post(
            "/forms/nope/responses",
            json={"respondent_name": "Alice", "answers": {}},
        )

        assert response.status_code == 404
