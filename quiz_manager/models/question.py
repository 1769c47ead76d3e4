"""
Question model - multiple choice question with four options
"""
from sqlalchemy import Column, Integer, String, Text
from quiz_manager.database import Base


class Question(Base):
    """
    Question table - correct_answer stores the option letter (A-D)
    """
    __tablename__ = "question"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    problem = Column(Text, nullable=False)
    option_a = Column(String(255))
    option_b = Column(String(255))
    option_c = Column(String(255))
    option_d = Column(String(255))
    correct_answer = Column(String(1), nullable=False)
    
    def options(self) -> dict:
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }
    
    def __repr__(self):
        return f"<Question(id={self.id}, correct_answer={self.correct_answer})>"
