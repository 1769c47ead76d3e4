"""
Quiz model and quiz-question join table
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from quiz_manager.database import Base


class Quiz(Base):
    """
    Quiz table - number_of_questions caches the size of the question set
    """
    __tablename__ = "quiz"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    time_limit = Column(Integer)  # minutes
    number_of_questions = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    
    def __repr__(self):
        return f"<Quiz(id={self.id}, name={self.name}, questions={self.number_of_questions})>"


class QuizQuestion(Base):
    """
    Quiz-question join - a question may belong to several quizzes
    """
    __tablename__ = "quiz_question"
    
    quiz_id = Column(Integer, ForeignKey("quiz.id"), primary_key=True)
    question_id = Column(Integer, ForeignKey("question.id"), primary_key=True)
    
    def __repr__(self):
        return f"<QuizQuestion(quiz_id={self.quiz_id}, question_id={self.question_id})>"
