"""
Database models package
"""
from quiz_manager.models.teacher import Teacher
from quiz_manager.models.student import Student
from quiz_manager.models.question import Question
from quiz_manager.models.quiz import Quiz, QuizQuestion
from quiz_manager.models.student_quiz import StudentQuiz
from quiz_manager.models.student_quiz_result import StudentQuizResult
from quiz_manager.models.classroom import ClassRoom, ClassStudent

__all__ = [
    "Teacher",
    "Student",
    "Question",
    "Quiz",
    "QuizQuestion",
    "StudentQuiz",
    "StudentQuizResult",
    "ClassRoom",
    "ClassStudent",
]
