"""
Class models - teacher-owned student rosters
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from quiz_manager.database import Base


class ClassRoom(Base):
    __tablename__ = "classes"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    lecturer_id = Column(Integer, ForeignKey("teacher.id"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    
    def __repr__(self):
        return f"<ClassRoom(id={self.id}, name={self.name})>"


class ClassStudent(Base):
    __tablename__ = "class_students"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_class_student"),
    )
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("student.id"), nullable=False)
    
    def __repr__(self):
        return f"<ClassStudent(class_id={self.class_id}, student_id={self.student_id})>"
