"""
StudentQuiz model - quiz assignment (visibility grant)
"""
from sqlalchemy import Column, Integer, ForeignKey
from quiz_manager.database import Base


class StudentQuiz(Base):
    """
    Student-quiz join - one row per assigned (student, quiz) pair
    """
    __tablename__ = "student_quiz"
    
    student_id = Column(Integer, ForeignKey("student.id"), primary_key=True)
    quiz_id = Column(Integer, ForeignKey("quiz.id"), primary_key=True)
    
    def __repr__(self):
        return f"<StudentQuiz(student_id={self.student_id}, quiz_id={self.quiz_id})>"
