"""
Student model - student accounts
"""
from sqlalchemy import Column, Integer, String
from quiz_manager.database import Base


class Student(Base):
    """
    Student table - student_code is optional (set by CSV import or registration)
    """
    __tablename__ = "student"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(60), nullable=False)
    full_name = Column(String(100))
    student_code = Column(String(20))
    
    def __repr__(self):
        return f"<Student(id={self.id}, username={self.username})>"
