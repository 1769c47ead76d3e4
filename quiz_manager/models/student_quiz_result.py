"""
StudentQuizResult model - stores quiz completion results
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from quiz_manager.database import Base


class StudentQuizResult(Base):
    """
    Quiz results table - at most one row per (student, quiz) pair
    """
    __tablename__ = "student_quiz_result"
    __table_args__ = (
        UniqueConstraint("student_id", "quiz_id", name="uq_result_student_quiz"),
    )
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("student.id"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quiz.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_points = Column(Integer, nullable=False)
    correct_answers = Column(Integer)
    total_questions = Column(Integer)
    completion_time_seconds = Column(Integer)
    submitted_at = Column(DateTime, nullable=False)
    
    student = relationship("Student", lazy="joined")
    quiz = relationship("Quiz", lazy="joined")
    
    @property
    def score_percentage(self) -> float:
        if not self.total_points:
            return 0.0
        return self.score * 100.0 / self.total_points
    
    @property
    def formatted_completion_time(self) -> str:
        """Completion time as e.g. "5m 30s" """
        if self.completion_time_seconds is None:
            return "N/A"
        minutes, seconds = divmod(self.completion_time_seconds, 60)
        return f"{minutes}m {seconds}s"
    
    def __repr__(self):
        return (
            f"<StudentQuizResult(student_id={self.student_id}, quiz_id={self.quiz_id}, "
            f"score={self.score}/{self.total_points})>"
        )
