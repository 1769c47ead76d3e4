"""
Quiz-taking endpoints (student)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from quiz_manager.api.deps import require_student
from quiz_manager.database import get_db
from quiz_manager.schemas.attempt import (
    AnswerRequest,
    AttemptResponse,
    AttemptStartRequest,
    NavigateRequest,
    QuizSummaryResponse,
)
from quiz_manager.services.attempt_service import attempt_service
from quiz_manager.session import UserSession

router = APIRouter(prefix="/api/attempts", tags=["attempts"])
logger = logging.getLogger(__name__)


@router.post("", response_model=AttemptResponse, status_code=201)
async def start_attempt(
    request: AttemptStartRequest,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_student)
):
    """
    Join a quiz

    - Quiz must be assigned to the student and not completed yet
    - Countdown starts immediately (quiz time limit)
    - Re-joining a running attempt resumes it
    """
    attempt = attempt_service.start(db, user, request.quiz_id)
    return AttemptResponse.from_attempt(attempt)


@router.get("/{attempt_id}", response_model=AttemptResponse)
async def get_attempt(attempt_id: str, user: UserSession = Depends(require_student)):
    return AttemptResponse.from_attempt(attempt_service.get(attempt_id, user))


@router.put("/{attempt_id}/answer", response_model=AttemptResponse)
async def answer_question(
    attempt_id: str,
    request: AnswerRequest,
    user: UserSession = Depends(require_student)
):
    """Select (or change) the answer of the current question"""
    attempt = attempt_service.answer(attempt_id, user, request.answer)
    return AttemptResponse.from_attempt(attempt)


@router.post("/{attempt_id}/next", response_model=AttemptResponse)
async def next_question(attempt_id: str, user: UserSession = Depends(require_student)):
    return AttemptResponse.from_attempt(attempt_service.next_question(attempt_id, user))


@router.post("/{attempt_id}/previous", response_model=AttemptResponse)
async def previous_question(attempt_id: str, user: UserSession = Depends(require_student)):
    return AttemptResponse.from_attempt(attempt_service.previous_question(attempt_id, user))


@router.post("/{attempt_id}/navigate", response_model=AttemptResponse)
async def navigate(
    attempt_id: str,
    request: NavigateRequest,
    user: UserSession = Depends(require_student)
):
    return AttemptResponse.from_attempt(attempt_service.go_to(attempt_id, user, request.index))


@router.post("/{attempt_id}/submit", response_model=QuizSummaryResponse)
async def submit_attempt(
    attempt_id: str,
    db: Session = Depends(get_db),
    user: UserSession = Depends(require_student)
):
    """
    Submit from the last question

    The result is saved once. If saving fails (e.g. the quiz was already
    completed) the summary is still returned with `saved=false` and an
    error message.
    """
    summary = attempt_service.submit(db, attempt_id, user)
    return QuizSummaryResponse.model_validate(summary)


@router.delete("/{attempt_id}", status_code=204)
async def close_attempt(attempt_id: str, user: UserSession = Depends(require_student)):
    """Leave the quiz; the countdown stops and nothing is saved"""
    attempt_service.abandon(attempt_id, user)
