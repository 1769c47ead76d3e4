"""
Teacher model - lecturer accounts
"""
from sqlalchemy import Column, Integer, String
from quiz_manager.database import Base


class Teacher(Base):
    """
    Teacher table - usernames are unique across teachers and students
    """
    __tablename__ = "teacher"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(60), nullable=False)
    full_name = Column(String(100))
    
    def __repr__(self):
        return f"<Teacher(id={self.id}, username={self.username})>"
