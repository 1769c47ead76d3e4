"""
Quiz result service
Completion checks, result persistence with duplicate guard, result queries
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quiz_manager.exceptions import AlreadyCompleted, InvalidArgument
from quiz_manager.models import StudentQuizResult

logger = logging.getLogger(__name__)


@dataclass
class QuizStatistics:
    total_students: int
    average_score: Optional[float]
    highest_score: Optional[int]
    lowest_score: Optional[int]


class ResultService:
    """
    Service for quiz results

    A (student, quiz) pair is either NotTaken or Completed. Completed is
    terminal: a second submission is rejected, never merged. The unique
    constraint on student_quiz_result backs the existence check.
    """

    def has_student_completed_quiz(
        self,
        db: Session,
        student_id: Optional[int],
        quiz_id: Optional[int]
    ) -> bool:
        if student_id is None or quiz_id is None:
            return False
        return self._find(db, student_id, quiz_id) is not None

    def save_result(self, db: Session, result: StudentQuizResult) -> StudentQuizResult:
        """
        Persist a finished quiz

        Raises:
            InvalidArgument: result, student_id or quiz_id missing
            AlreadyCompleted: a result already exists for the pair
        """
        if result is None:
            raise InvalidArgument("Result cannot be null")

        if result.student_id is None or result.quiz_id is None:
            raise InvalidArgument("Student ID and Quiz ID are required")

        if self._find(db, result.student_id, result.quiz_id) is not None:
            logger.warning(
                f"Duplicate submission rejected: student {result.student_id}, quiz {result.quiz_id}"
            )
            raise AlreadyCompleted("Student has already completed this quiz")

        if result.submitted_at is None:
            result.submitted_at = datetime.now()

        try:
            db.add(result)
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(
                f"Duplicate submission hit unique constraint: student {result.student_id}, "
                f"quiz {result.quiz_id}"
            )
            raise AlreadyCompleted("Student has already completed this quiz")

        db.refresh(result)

        logger.info(
            f"Result saved: {result.id} student={result.student_id} quiz={result.quiz_id} "
            f"score={result.score}/{result.total_points}"
        )

        return result

    def get_result(
        self,
        db: Session,
        student_id: Optional[int],
        quiz_id: Optional[int]
    ) -> Optional[StudentQuizResult]:
        if student_id is None or quiz_id is None:
            return None
        return self._find(db, student_id, quiz_id)

    def get_results_by_quiz_id(self, db: Session, quiz_id: Optional[int]) -> List[StudentQuizResult]:
        """All results of a quiz, newest submission first"""
        if quiz_id is None:
            raise InvalidArgument("Quiz ID cannot be null")

        return (
            db.query(StudentQuizResult)
            .filter(StudentQuizResult.quiz_id == quiz_id)
            .order_by(StudentQuizResult.submitted_at.desc(), StudentQuizResult.id.desc())
            .all()
        )

    def get_results_by_student_id(self, db: Session, student_id: Optional[int]) -> List[StudentQuizResult]:
        """A student's quiz history, newest submission first"""
        if student_id is None:
            raise InvalidArgument("Student ID cannot be null")

        return (
            db.query(StudentQuizResult)
            .filter(StudentQuizResult.student_id == student_id)
            .order_by(StudentQuizResult.submitted_at.desc(), StudentQuizResult.id.desc())
            .all()
        )

    def get_quiz_statistics(self, db: Session, quiz_id: Optional[int]) -> QuizStatistics:
        if quiz_id is None:
            raise InvalidArgument("Quiz ID cannot be null")

        count, average, highest, lowest = (
            db.query(
                func.count(StudentQuizResult.id),
                func.avg(StudentQuizResult.score),
                func.max(StudentQuizResult.score),
                func.min(StudentQuizResult.score),
            )
            .filter(StudentQuizResult.quiz_id == quiz_id)
            .one()
        )

        return QuizStatistics(
            total_students=count or 0,
            average_score=float(average) if average is not None else None,
            highest_score=highest,
            lowest_score=lowest
        )

    def delete_result(self, db: Session, result_id: Optional[int]) -> bool:
        if result_id is None:
            return False

        result = db.query(StudentQuizResult).filter(StudentQuizResult.id == result_id).first()
        if not result:
            return False

        db.delete(result)
        db.commit()

        logger.info(f"Result deleted: {result_id}")

        return True

    def update_score(
        self,
        db: Session,
        result_id: Optional[int],
        new_score: Optional[int]
    ) -> Optional[StudentQuizResult]:
        """Regrade path - the only way a saved result changes"""
        if result_id is None or new_score is None:
            return None

        result = db.query(StudentQuizResult).filter(StudentQuizResult.id == result_id).first()
        if not result:
            return None

        old_score = result.score
        result.score = new_score
        db.commit()
        db.refresh(result)

        logger.info(f"Result {result_id} regraded: {old_score} -> {new_score}")

        return result

    def _find(self, db: Session, student_id: int, quiz_id: int) -> Optional[StudentQuizResult]:
        return db.query(StudentQuizResult).filter(
            StudentQuizResult.student_id == student_id,
            StudentQuizResult.quiz_id == quiz_id
        ).first()


# Global instance
result_service = ResultService()
