"""
Quiz management service
Quiz and question creation, assignment of quizzes to students, relational reads
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from quiz_manager.exceptions import AlreadyAssigned, InvalidArgument, NotFound
from quiz_manager.models import (
    Question,
    Quiz,
    QuizQuestion,
    Student,
    StudentQuiz,
    StudentQuizResult,
)
from quiz_manager.utils.cache import cache_service

logger = logging.getLogger(__name__)


class QuizService:
    """Service for quizzes, their questions and their student assignments"""

    def create_quiz_with_questions(
        self,
        db: Session,
        name: str,
        time_limit: Optional[int],
        questions: List[Dict[str, Any]]
    ) -> Quiz:
        """
        Create a quiz and all of its questions in a single transaction

        Args:
            db: Database session
            name: Quiz name
            time_limit: Time limit in minutes
            questions: Question dicts with keys problem, option_a..option_d,
                correct_answer

        Returns:
            The persisted Quiz

        Raises:
            InvalidArgument: questions is empty
        """
        if not questions:
            raise InvalidArgument("Quiz must have at least one question")

        try:
            quiz = Quiz(name=name, time_limit=time_limit, number_of_questions=len(questions))
            db.add(quiz)
            db.flush()

            for item in questions:
                correct = item.get("correct_answer")
                question = Question(
                    problem=item.get("problem"),
                    option_a=item.get("option_a"),
                    option_b=item.get("option_b"),
                    option_c=item.get("option_c"),
                    option_d=item.get("option_d"),
                    correct_answer=correct.strip().upper() if correct else correct
                )
                db.add(question)
                db.flush()

                db.add(QuizQuestion(quiz_id=quiz.id, question_id=question.id))

            db.commit()
            db.refresh(quiz)

        except Exception as e:
            logger.error(f"Failed to create quiz '{name}': {str(e)}")
            db.rollback()
            raise

        logger.info(f"Quiz created: {quiz.id} '{name}' with {len(questions)} questions")

        return quiz

    def get_all_quizzes(self, db: Session) -> List[Quiz]:
        return db.query(Quiz).order_by(Quiz.id.desc()).all()

    def get_quiz_by_id(self, db: Session, quiz_id: int) -> Quiz:
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFound(f"Quiz not found with ID: {quiz_id}")
        return quiz

    def search_quizzes_by_name(self, db: Session, name: str) -> List[Quiz]:
        """Case-insensitive substring match on quiz name"""
        pattern = f"%{name.lower()}%"
        return (
            db.query(Quiz)
            .filter(Quiz.name.ilike(pattern))
            .order_by(Quiz.id.desc())
            .all()
        )

    def get_questions_for_quiz(self, db: Session, quiz_id: int) -> List[Question]:
        self._require_quiz(db, quiz_id)

        return (
            db.query(Question)
            .join(QuizQuestion, QuizQuestion.question_id == Question.id)
            .filter(QuizQuestion.quiz_id == quiz_id)
            .order_by(Question.id)
            .all()
        )

    def delete_quiz(self, db: Session, quiz_id: int) -> None:
        """
        Delete a quiz with its assignments and results

        Questions that no longer belong to any quiz are deleted too.
        """
        quiz = self.get_quiz_by_id(db, quiz_id)

        question_ids = [
            row.question_id
            for row in db.query(QuizQuestion.question_id).filter(QuizQuestion.quiz_id == quiz_id)
        ]

        try:
            db.query(QuizQuestion).filter(QuizQuestion.quiz_id == quiz_id).delete(synchronize_session=False)
            db.query(StudentQuiz).filter(StudentQuiz.quiz_id == quiz_id).delete(synchronize_session=False)
            db.query(StudentQuizResult).filter(StudentQuizResult.quiz_id == quiz_id).delete(synchronize_session=False)

            still_used = {
                row.question_id
                for row in db.query(QuizQuestion.question_id).filter(QuizQuestion.question_id.in_(question_ids))
            } if question_ids else set()
            orphaned = [qid for qid in question_ids if qid not in still_used]
            if orphaned:
                db.query(Question).filter(Question.id.in_(orphaned)).delete(synchronize_session=False)

            db.delete(quiz)
            db.commit()

        except Exception as e:
            logger.error(f"Failed to delete quiz {quiz_id}: {str(e)}")
            db.rollback()
            raise

        cache_service.delete(cache_service.quiz_key(quiz_id))

        logger.info(f"Quiz deleted: {quiz_id} ({len(orphaned)} questions removed)")

    def assign_quiz_to_student(self, db: Session, quiz_id: int, username: str) -> bool:
        """
        Make a quiz visible to a student

        Raises:
            NotFound: quiz or student does not exist
            AlreadyAssigned: the student already has this quiz
        """
        quiz = self.get_quiz_by_id(db, quiz_id)
        student = self._require_student(db, username)

        exists = db.query(StudentQuiz).filter(
            StudentQuiz.student_id == student.id,
            StudentQuiz.quiz_id == quiz.id
        ).first()
        if exists:
            raise AlreadyAssigned(f"Student '{username}' is already assigned to this quiz")

        db.add(StudentQuiz(student_id=student.id, quiz_id=quiz.id))
        db.commit()

        logger.info(f"Quiz {quiz.id} assigned to {username}")

        return True

    def remove_student_from_quiz(self, db: Session, quiz_id: int, username: str) -> bool:
        self._require_quiz(db, quiz_id)
        student = self._require_student(db, username)

        db.query(StudentQuiz).filter(
            StudentQuiz.student_id == student.id,
            StudentQuiz.quiz_id == quiz_id
        ).delete(synchronize_session=False)
        db.commit()

        logger.info(f"Quiz {quiz_id} unassigned from {username}")

        return True

    def get_quizzes_for_student(self, db: Session, student_id: int) -> List[Quiz]:
        """Only quizzes assigned to the student are visible"""
        return (
            db.query(Quiz)
            .join(StudentQuiz, StudentQuiz.quiz_id == Quiz.id)
            .filter(StudentQuiz.student_id == student_id)
            .order_by(Quiz.id.desc())
            .all()
        )

    def is_assigned(self, db: Session, student_id: int, quiz_id: int) -> bool:
        return db.query(StudentQuiz).filter(
            StudentQuiz.student_id == student_id,
            StudentQuiz.quiz_id == quiz_id
        ).first() is not None

    def get_students_for_quiz(self, db: Session, quiz_id: int) -> List[Student]:
        self._require_quiz(db, quiz_id)

        return (
            db.query(Student)
            .join(StudentQuiz, StudentQuiz.student_id == Student.id)
            .filter(StudentQuiz.quiz_id == quiz_id)
            .order_by(Student.username)
            .all()
        )

    def _require_quiz(self, db: Session, quiz_id: int) -> None:
        if db.query(Quiz.id).filter(Quiz.id == quiz_id).first() is None:
            raise NotFound(f"Quiz not found with ID: {quiz_id}")

    def _require_student(self, db: Session, username: str) -> Student:
        student = db.query(Student).filter(Student.username == username).first()
        if not student:
            raise NotFound(f"Student not found with username: {username}")
        return student


# Global instance
quiz_service = QuizService()
