"""
Pydantic schemas for classes
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ClassCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class ClassResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    lecturer_id: int
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class AddClassStudentRequest(BaseModel):
    student_id: int
