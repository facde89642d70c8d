from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tutorcenter.core.database import get_db
from tutorcenter.core.errors import (
    AttemptStateError,
    DuplicateSubmissionError,
    InvalidAnswerError,
    QuizExpiredError,
    QuizLoadError,
    QuizNotAssignedError,
    QuizNotFoundError,
    SubmissionWriteError,
)
from tutorcenter.core.security import require_student
from tutorcenter.models.quiz_db.quiz_crud import get_submission, load_quiz
from tutorcenter.models.user_db.user_db import User
from tutorcenter.schemas.quiz.attempt_base import AnswerIn, AttemptOut, ResultOut, attempt_out, result_out, start_out
from tutorcenter.services.quiz_attempt import AttemptRegistry, QuizAttempt, build_result

attempt_router = APIRouter(prefix="/attempts", tags=["Quiz attempts"])

_STATUS = {
    QuizNotFoundError: 404,
    QuizNotAssignedError: 403,
    QuizExpiredError: 409,
    AttemptStateError: 409,
    DuplicateSubmissionError: 409,
    InvalidAnswerError: 422,
    QuizLoadError: 503,
    SubmissionWriteError: 503,
}


def _http_error(exc: Exception) -> HTTPException:
    return HTTPException(status_code=_STATUS[type(exc)], detail=str(exc))


def get_registry(request: Request) -> AttemptRegistry:
    return request.app.state.attempts


def _active_attempt(registry: AttemptRegistry, user: User, quiz_id: UUID) -> QuizAttempt:
    attempt = registry.get(user.id, quiz_id)
    if attempt is None:
        raise HTTPException(status_code=404, detail="No quiz in progress; start the quiz first")
    return attempt


@attempt_router.post("/{quiz_id}", response_model=AttemptOut)
def start_attempt(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    try:
        started = registry.start(db, current_user, quiz_id)
    except (QuizNotFoundError, QuizLoadError, QuizNotAssignedError, QuizExpiredError) as exc:
        raise _http_error(exc)
    return start_out(started)


@attempt_router.get("/{quiz_id}", response_model=AttemptOut)
def get_attempt(
    quiz_id: UUID,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    return attempt_out(_active_attempt(registry, current_user, quiz_id))


@attempt_router.put("/{quiz_id}/answers", response_model=AttemptOut)
def select_answer(
    quiz_id: UUID,
    payload: AnswerIn,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    attempt = _active_attempt(registry, current_user, quiz_id)
    try:
        attempt.select(payload.question_id, payload.choice.value)
    except (AttemptStateError, InvalidAnswerError) as exc:
        raise _http_error(exc)
    return attempt_out(attempt)


@attempt_router.post("/{quiz_id}/next", response_model=AttemptOut)
def next_question(
    quiz_id: UUID,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    attempt = _active_attempt(registry, current_user, quiz_id)
    try:
        attempt.next()
    except AttemptStateError as exc:
        raise _http_error(exc)
    return attempt_out(attempt)


@attempt_router.post("/{quiz_id}/previous", response_model=AttemptOut)
def previous_question(
    quiz_id: UUID,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    attempt = _active_attempt(registry, current_user, quiz_id)
    try:
        attempt.previous()
    except AttemptStateError as exc:
        raise _http_error(exc)
    return attempt_out(attempt)


@attempt_router.post("/{quiz_id}/review", response_model=AttemptOut)
def open_review(
    quiz_id: UUID,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    attempt = _active_attempt(registry, current_user, quiz_id)
    try:
        attempt.open_review()
    except AttemptStateError as exc:
        raise _http_error(exc)
    return attempt_out(attempt)


@attempt_router.post("/{quiz_id}/continue", response_model=AttemptOut)
def continue_editing(
    quiz_id: UUID,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    attempt = _active_attempt(registry, current_user, quiz_id)
    try:
        attempt.continue_editing()
    except AttemptStateError as exc:
        raise _http_error(exc)
    return attempt_out(attempt)


@attempt_router.post("/{quiz_id}/submit", response_model=AttemptOut)
def final_submit(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    attempt = _active_attempt(registry, current_user, quiz_id)
    try:
        registry.submit(db, attempt)
    except (AttemptStateError, DuplicateSubmissionError, SubmissionWriteError) as exc:
        raise _http_error(exc)
    return attempt_out(attempt)


@attempt_router.delete("/{quiz_id}")
def abandon_attempt(
    quiz_id: UUID,
    current_user: User = Depends(require_student),
    registry: AttemptRegistry = Depends(get_registry),
):
    if registry.discard(current_user.id, quiz_id) is None:
        raise HTTPException(status_code=404, detail="No quiz in progress")
    return {"message": "Attempt discarded"}


@attempt_router.get("/{quiz_id}/results", response_model=ResultOut)
def get_results(
    quiz_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    submission = get_submission(db, current_user.id, quiz_id)
    if not submission:
        raise HTTPException(status_code=404, detail="No submission found for this quiz")
    try:
        quiz = load_quiz(db, quiz_id)
    except (QuizNotFoundError, QuizLoadError) as exc:
        raise _http_error(exc)
    return result_out(build_result(quiz, submission))
