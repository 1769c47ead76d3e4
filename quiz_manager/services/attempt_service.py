"""
Quiz attempt registry
Starts quiz-taking sessions, routes student actions to them, drives their
countdowns and persists the scored result exactly once
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from quiz_manager.config import settings
from quiz_manager.exceptions import AlreadyCompleted, NotFound, PermissionDenied
from quiz_manager.models import StudentQuizResult
from quiz_manager.services.quiz_service import quiz_service
from quiz_manager.services.quiz_session import (
    AttemptState,
    QuizOutcome,
    TakeQuizSession,
    format_time_taken,
)
from quiz_manager.services.result_service import result_service
from quiz_manager.session import UserSession
from quiz_manager.utils.cache import cache_service

logger = logging.getLogger(__name__)


@dataclass
class QuizSummary:
    """What the student sees after submitting"""
    quiz_name: str
    score: int
    total_points: int
    correct_answers: int
    total_questions: int
    completion_time_seconds: int
    time_taken: str
    auto_submitted: bool
    saved: bool
    error: Optional[str] = None


@dataclass
class Attempt:
    id: str
    session: TakeQuizSession
    summary: Optional[QuizSummary] = None


class AttemptService:
    """
    Registry of quiz-taking sessions keyed by attempt id

    All calls happen on the event loop thread, so the session's one-shot
    submission flag needs no lock.
    """

    def __init__(self):
        self._attempts: Dict[str, Attempt] = {}

    def start(
        self,
        db: Session,
        user: UserSession,
        quiz_id: int,
        clock: Optional[Callable[[], float]] = None
    ) -> Attempt:
        """
        Open (or resume) an attempt for a student

        Raises:
            PermissionDenied: caller is not a student or the quiz is not assigned
            NotFound: quiz does not exist
            AlreadyCompleted: a result already exists
            InvalidArgument: the quiz has no questions
        """
        if not user.is_student:
            raise PermissionDenied("Only students can take quizzes")

        quiz_service.get_quiz_by_id(db, quiz_id)

        if not quiz_service.is_assigned(db, user.user_id, quiz_id):
            raise PermissionDenied("This quiz is not assigned to you")

        if result_service.has_student_completed_quiz(db, user.user_id, quiz_id):
            raise AlreadyCompleted("You have already completed this quiz")

        for attempt in self._attempts.values():
            session = attempt.session
            if (
                session.student_id == user.user_id
                and session.quiz_id == quiz_id
                and session.state == AttemptState.IN_PROGRESS
            ):
                logger.info(f"Resuming attempt {attempt.id} for {user.username}")
                return attempt

        payload = self._load_quiz_payload(db, quiz_id)

        kwargs = {"clock": clock} if clock else {}
        session = TakeQuizSession(student_id=user.user_id, quiz_id=quiz_id, **kwargs)
        session.load(payload["quiz"], payload["questions"])

        attempt = Attempt(id=uuid.uuid4().hex, session=session)
        self._attempts[attempt.id] = attempt

        return attempt

    def get(self, attempt_id: str, user: UserSession) -> Attempt:
        attempt = self._attempts.get(attempt_id)
        if attempt is None or attempt.session.student_id != user.user_id:
            raise NotFound(f"Attempt not found: {attempt_id}")
        return attempt

    def answer(self, attempt_id: str, user: UserSession, answer: str) -> Attempt:
        attempt = self.get(attempt_id, user)
        attempt.session.select_answer(answer)
        return attempt

    def next_question(self, attempt_id: str, user: UserSession) -> Attempt:
        attempt = self.get(attempt_id, user)
        attempt.session.next_question()
        return attempt

    def previous_question(self, attempt_id: str, user: UserSession) -> Attempt:
        attempt = self.get(attempt_id, user)
        attempt.session.previous_question()
        return attempt

    def go_to(self, attempt_id: str, user: UserSession, index: int) -> Attempt:
        attempt = self.get(attempt_id, user)
        attempt.session.go_to(index)
        return attempt

    def submit(self, db: Session, attempt_id: str, user: UserSession) -> QuizSummary:
        """Manual submit; a second call returns the existing summary"""
        attempt = self.get(attempt_id, user)

        outcome = attempt.session.request_submit()
        if outcome is not None:
            attempt.summary = self._complete(db, attempt, outcome)

        return attempt.summary

    def abandon(self, attempt_id: str, user: UserSession) -> None:
        """Closing the quiz window: the countdown stops, nothing is saved"""
        attempt = self.get(attempt_id, user)
        del self._attempts[attempt.id]

        logger.info(
            f"Attempt {attempt.id} closed in state {attempt.session.state.value} "
            f"by {user.username}"
        )

    def tick_all(self, db: Session) -> List[str]:
        """
        Check every running countdown and submit the ones that ran out

        Attempts submitted before this call are dropped from the registry
        first; their summary stays readable until then.

        Returns:
            Ids of the attempts auto-submitted by this tick
        """
        self.prune_submitted()

        expired = []

        for attempt in list(self._attempts.values()):
            if not attempt.session.tick():
                continue

            outcome = attempt.session.expire()
            if outcome is None:
                continue

            logger.info(f"Attempt {attempt.id} ran out of time, submitting")
            attempt.summary = self._complete(db, attempt, outcome)
            expired.append(attempt.id)

        return expired

    async def run_countdown(self, session_factory: Callable[[], Session], interval: float = None):
        """Background loop calling tick_all once per interval"""
        interval = interval or settings.COUNTDOWN_INTERVAL_SECONDS

        logger.info(f"Countdown driver started (interval={interval}s)")

        while True:
            await asyncio.sleep(interval)

            # No database session while nothing is running
            self.prune_submitted()
            if not self._attempts:
                continue

            db = session_factory()
            try:
                self.tick_all(db)
            except Exception as e:
                logger.error(f"Countdown tick failed: {str(e)}", exc_info=True)
            finally:
                db.close()

    def prune_submitted(self) -> int:
        """Drop finished attempts, returning how many were removed"""
        finished = [
            attempt_id
            for attempt_id, attempt in self._attempts.items()
            if attempt.session.state == AttemptState.SUBMITTED
        ]
        for attempt_id in finished:
            del self._attempts[attempt_id]

        if finished:
            logger.info(f"Pruned {len(finished)} submitted attempts")

        return len(finished)

    def __len__(self):
        return len(self._attempts)

    def clear(self) -> None:
        self._attempts.clear()

    def _complete(self, db: Session, attempt: Attempt, outcome: QuizOutcome) -> QuizSummary:
        """
        Save the result, then build the summary

        A failed save is reported on the summary; it never blocks the
        student from seeing their score.
        """
        session = attempt.session
        saved = False
        error = None

        result = StudentQuizResult(
            student_id=session.student_id,
            quiz_id=session.quiz_id,
            score=outcome.score,
            total_points=outcome.total_points,
            correct_answers=outcome.correct_answers,
            total_questions=outcome.total_questions,
            completion_time_seconds=outcome.completion_time_seconds
        )

        try:
            result_service.save_result(db, result)
            saved = True
        except AlreadyCompleted:
            error = "You have already completed this quiz. Duplicate submissions are not allowed."
        except Exception as e:
            logger.error(f"Failed to save result for attempt {attempt.id}: {str(e)}", exc_info=True)
            db.rollback()
            error = "Failed to save result to database. Please contact your teacher."

        return QuizSummary(
            quiz_name=session.quiz.get("name") or "Quiz",
            score=outcome.score,
            total_points=outcome.total_points,
            correct_answers=outcome.correct_answers,
            total_questions=outcome.total_questions,
            completion_time_seconds=outcome.completion_time_seconds,
            time_taken=format_time_taken(outcome.completion_time_seconds),
            auto_submitted=outcome.auto_submitted,
            saved=saved,
            error=error
        )

    def _load_quiz_payload(self, db: Session, quiz_id: int) -> Dict[str, Any]:
        """Quiz metadata and questions, from cache when available"""
        cache_key = cache_service.quiz_key(quiz_id)

        cached = cache_service.get(cache_key)
        if cached:
            return cached

        quiz = quiz_service.get_quiz_by_id(db, quiz_id)
        questions = quiz_service.get_questions_for_quiz(db, quiz_id)

        payload = {
            "quiz": {
                "id": quiz.id,
                "name": quiz.name,
                "time_limit": quiz.time_limit,
            },
            "questions": [
                {
                    "id": q.id,
                    "problem": q.problem,
                    "options": q.options(),
                    "correct_answer": q.correct_answer,
                }
                for q in questions
            ],
        }

        if questions:
            cache_service.set(cache_key, payload)

        return payload


# Global instance
attempt_service = AttemptService()
