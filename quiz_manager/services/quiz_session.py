"""
Quiz-taking session state
One student working through one quiz: current question, answers, countdown
"""
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from quiz_manager.config import settings
from quiz_manager.exceptions import InvalidArgument

logger = logging.getLogger(__name__)

VALID_ANSWERS = ("A", "B", "C", "D")


class AttemptState(str, Enum):
    LOADING = "LOADING"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"


@dataclass
class QuizOutcome:
    """Scored attempt, produced exactly once per session"""
    score: int
    total_points: int
    correct_answers: int
    total_questions: int
    completion_time_seconds: int
    auto_submitted: bool


def format_time_taken(seconds: int) -> str:
    """Human readable duration, e.g. "1 minute 5 seconds" """
    minutes, secs = divmod(max(seconds, 0), 60)
    text = f"{minutes} minute{'s' if minutes != 1 else ''}"
    if secs > 0:
        text += f" {secs} second{'s' if secs != 1 else ''}"
    return text


class TakeQuizSession:
    """
    State machine: LOADING -> IN_PROGRESS -> SUBMITTED

    Answers live in one slot per question and survive navigation in both
    directions. Remaining time is measured on the clock from the moment the
    quiz loaded; tick() only checks whether it has run out. Reaching zero
    submits automatically. Manual submission is only allowed on the last
    question with that question answered.

    finish() is guarded by a one-shot flag, so a timeout racing a manual
    submit scores the attempt only once.
    """

    def __init__(
        self,
        student_id: int,
        quiz_id: int,
        points_per_question: int = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.student_id = student_id
        self.quiz_id = quiz_id
        self.points_per_question = (
            settings.POINTS_PER_QUESTION if points_per_question is None else points_per_question
        )
        self._clock = clock

        self.state = AttemptState.LOADING
        self.quiz: Dict[str, Any] = {}
        self.questions: List[Dict[str, Any]] = []
        self.answers: List[Optional[str]] = []
        self.current_index = 0
        self.time_limit_seconds = 0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None
        self.outcome: Optional[QuizOutcome] = None

        self._submitting = False

    # Loading

    def load(self, quiz: Dict[str, Any], questions: List[Dict[str, Any]]) -> None:
        """
        Enter IN_PROGRESS with the quiz payload

        Args:
            quiz: Dict with at least name and time_limit (minutes)
            questions: Question dicts with problem, options and correct_answer
        """
        if self.state != AttemptState.LOADING:
            raise InvalidArgument("Quiz session is already loaded")

        if not questions:
            raise InvalidArgument("This quiz has no questions")

        time_limit = quiz.get("time_limit")
        if not time_limit or time_limit <= 0:
            time_limit = settings.DEFAULT_TIME_LIMIT_MINUTES

        self.quiz = quiz
        self.questions = list(questions)
        self.answers = [None] * len(self.questions)
        self.current_index = 0
        self.time_limit_seconds = time_limit * 60
        self.started_at = self._clock()
        self.state = AttemptState.IN_PROGRESS

        logger.info(
            f"Quiz session started: student={self.student_id} quiz={self.quiz_id} "
            f"questions={len(self.questions)} time={self.time_limit_seconds}s"
        )

    # Navigation and answers

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total_questions - 1

    @property
    def current_question(self) -> Dict[str, Any]:
        return self.questions[self.current_index]

    def select_answer(self, answer: str) -> None:
        """Store (or replace) the answer for the current question"""
        self._require_in_progress()

        letter = (answer or "").strip().upper()
        if letter not in VALID_ANSWERS:
            raise InvalidArgument(f"Answer must be one of {', '.join(VALID_ANSWERS)}")

        self.answers[self.current_index] = letter

    def go_to(self, index: int) -> None:
        self._require_in_progress()

        if index < 0 or index >= self.total_questions:
            raise InvalidArgument(f"Question index out of range: {index}")

        self.current_index = index

    def next_question(self) -> None:
        if self.is_last_question:
            raise InvalidArgument("Already at the last question")
        self.go_to(self.current_index + 1)

    def previous_question(self) -> None:
        if self.current_index == 0:
            raise InvalidArgument("Already at the first question")
        self.go_to(self.current_index - 1)

    # Countdown

    @property
    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        end = self.finished_at if self.finished_at is not None else self._clock()
        return max(int(end - self.started_at), 0)

    @property
    def time_remaining(self) -> int:
        return max(self.time_limit_seconds - self.elapsed_seconds, 0)

    def tick(self) -> bool:
        """
        Check the countdown against the clock

        A late call (the event loop was busy) still sees the true remaining
        time, so missed ticks never extend the quiz.

        Returns:
            True if the time has run out (the session must be finished)
        """
        if self.state != AttemptState.IN_PROGRESS:
            return False

        return self.time_remaining == 0

    # Submission

    def request_submit(self) -> Optional[QuizOutcome]:
        """
        User-initiated submit from the last question

        Raises:
            InvalidArgument: not on the last question, or it is unanswered
        """
        if self.state == AttemptState.SUBMITTED:
            return None

        self._require_in_progress()

        if not self.is_last_question:
            raise InvalidArgument("Submit is only available on the last question")

        if self.answers[self.current_index] is None:
            raise InvalidArgument("Please select an answer before submitting")

        return self.finish(auto=False)

    def expire(self) -> Optional[QuizOutcome]:
        """Timeout path - unanswered questions count as incorrect"""
        return self.finish(auto=True)

    def finish(self, auto: bool) -> Optional[QuizOutcome]:
        """
        Score the attempt and move to SUBMITTED

        Returns:
            The outcome the first time, None on any later call
        """
        if self._submitting or self.state == AttemptState.LOADING:
            return None
        self._submitting = True
        self.finished_at = self._clock()

        elapsed = self.elapsed_seconds
        if auto:
            # A late timeout is recorded as the full time limit
            elapsed = min(elapsed, self.time_limit_seconds)
        correct = self.count_correct()

        self.outcome = QuizOutcome(
            score=correct * self.points_per_question,
            total_points=self.total_questions * self.points_per_question,
            correct_answers=correct,
            total_questions=self.total_questions,
            completion_time_seconds=elapsed,
            auto_submitted=auto
        )
        self.state = AttemptState.SUBMITTED

        logger.info(
            f"Quiz session submitted ({'timeout' if auto else 'manual'}): "
            f"student={self.student_id} quiz={self.quiz_id} "
            f"correct={correct}/{self.total_questions}"
        )

        return self.outcome

    def count_correct(self) -> int:
        correct = 0
        for question, answer in zip(self.questions, self.answers):
            expected = (question.get("correct_answer") or "").strip()
            if answer is not None and answer.upper() == expected.upper():
                correct += 1
        return correct

    def _require_in_progress(self) -> None:
        if self.state != AttemptState.IN_PROGRESS:
            raise InvalidArgument(f"Quiz session is {self.state.value.lower()}")
