"""Form endpoints for retrieving forms, evaluating visibility and submitting.

The browser sends the full answer map on every call; each request runs one
recompute-then-reconcile cycle in a fresh FormSession so the response never
reflects a stale visible set.
"""

from typing import Any, Mapping

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from formflow.config import get_settings
from formflow.models.database import get_db
from formflow.schemas.form import Form
from formflow.schemas.submission import (
    AnswerPayload,
    SkipIssueOut,
    SubmissionRequest,
    SubmissionResponse,
    VisibilityRequest,
    VisibilityResponse,
)
from formflow.services.form_loader import (
    FormLoader,
    FormNotFoundError,
    FormValidationError,
    get_form_loader,
)
from formflow.services.form_session import FormSession, FormSessionError, SubmissionRejectedError
from formflow.services.submission_gate import SubmissionGate
from formflow.services.submission_sink import DatabaseSubmissionSink, SubmissionSinkError
from formflow.services.visibility import VisibilityResult
from formflow.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/forms")


def load_form_or_404(form_id: str, loader: FormLoader) -> Form:
    """Load a form, translating loader errors into HTTP errors.

    Raises:
        HTTPException: 404 if the form doesn't exist, 500 if it is invalid
    """
    try:
        return loader.load_form(form_id)
    except FormNotFoundError:
        raise HTTPException(status_code=404, detail=f"Form '{form_id}' not found")
    except FormValidationError as e:
        logger.error(f"Form {form_id} could not be loaded: {e}")
        raise HTTPException(status_code=500, detail=f"Form '{form_id}' is invalid")


def new_session(form: Form) -> FormSession:
    """Create a session using the configured multi-choice separator."""
    return FormSession(form, gate=SubmissionGate(get_settings().answer_separator))


def answers_out(form: Form, answers: Mapping[int, Any]) -> dict[int, AnswerPayload]:
    """Convert session answers to JSON-friendly values.

    Multi-choice selections become lists in option order.
    """
    result: dict[int, AnswerPayload] = {}
    for question_id, value in answers.items():
        if isinstance(value, str):
            result[question_id] = value
            continue
        question = form.get_question(question_id)
        ordered = [option for option in question.options if option in value]
        result[question_id] = ordered + sorted(set(value) - set(ordered))
    return result


def visibility_out(form: Form, visibility: VisibilityResult, answers: Mapping[int, Any]) -> VisibilityResponse:
    """Build the visibility response body."""
    return VisibilityResponse(
        visible=list(visibility.visible),
        hidden=list(visibility.hidden),
        display_numbers=visibility.display_numbers,
        answers=answers_out(form, answers),
        issues=[
            SkipIssueOut(question_id=issue.question_id, kind=issue.kind.value, target=issue.target)
            for issue in visibility.issues
        ],
    )


@router.get("")
async def list_forms(loader: FormLoader = Depends(get_form_loader)) -> dict:
    """List available form IDs."""
    return {"forms": loader.list_forms()}


@router.get("/{form_id}")
async def get_form(form_id: str, loader: FormLoader = Depends(get_form_loader)) -> dict:
    """Return a form definition with its visibility before any answer."""
    form = load_form_or_404(form_id, loader)
    session = new_session(form)

    payload = form.model_dump(mode="json")
    payload["visibility"] = visibility_out(form, session.visibility, session.answers).model_dump(mode="json")
    return payload


@router.post("/{form_id}/visibility", response_model=VisibilityResponse)
async def evaluate_visibility(
    form_id: str,
    request: VisibilityRequest,
    loader: FormLoader = Depends(get_form_loader),
) -> VisibilityResponse:
    """Evaluate skip logic for the current answers.

    Returns the visible questions and the answers that remain after
    dropping those of hidden questions.
    """
    form = load_form_or_404(form_id, loader)
    session = new_session(form)

    try:
        visibility = session.replace_answers(request.answers)
    except FormSessionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return visibility_out(form, visibility, session.answers)


@router.post("/{form_id}/responses", status_code=201, response_model=SubmissionResponse)
async def submit_response(
    form_id: str,
    request: SubmissionRequest,
    loader: FormLoader = Depends(get_form_loader),
    db: Session = Depends(get_db),
) -> SubmissionResponse:
    """Validate and store a respondent's answers.

    Raises:
        HTTPException: 400 for malformed answers or a missing name, 422 when
            visible required questions are unanswered, 503 if storing fails
    """
    form = load_form_or_404(form_id, loader)
    session = new_session(form)

    try:
        session.replace_answers(request.answers)
        response_id = session.submit(request.respondent_name, DatabaseSubmissionSink(db))
    except SubmissionRejectedError as e:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "missing_required_answer",
                "question_id": e.result.error.question_id,
                "message": e.result.error.message,
                "missing": [m.question_id for m in e.result.missing],
            },
        )
    except FormSessionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SubmissionSinkError:
        raise HTTPException(status_code=503, detail="Could not store the response, please try again")

    return SubmissionResponse(response_id=response_id, answers=session.submitted_answers)
